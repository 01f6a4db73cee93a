"""Run-log and field writers.

Writers raise on failure (unwritable path, full disk); a benchmark run must
not continue with partial output.
"""

import logging
from pathlib import Path

import matplotlib.image as mpimg
import numpy as np
import pandas as pd

from .datastructures import RunLogRecord, TimeSeries

log = logging.getLogger(__name__)


def write_runlog_csv(records, filepath):
    """Write checkpoint records with the run-log header."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    TimeSeries(list(records)).to_dataframe().to_csv(filepath, index=False, float_format="%f")
    log.info(f"Wrote run log to {filepath}")
    return filepath


def read_runlog_csv(filepath) -> pd.DataFrame:
    df = pd.read_csv(filepath)
    missing = set(RunLogRecord.CSV_HEADER) - set(df.columns)
    if missing:
        raise ValueError(f"{filepath} is not a run log (missing columns {sorted(missing)})")
    return df


def write_csv(conc: np.ndarray, dx: float, dy: float, filepath):
    """Write the field as ``x,y,c`` rows (one per cell)."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    ny, nx = conc.shape
    x, y = np.meshgrid(dx * np.arange(nx), dy * np.arange(ny), indexing="xy")
    pd.DataFrame({"x": x.ravel(), "y": y.ravel(), "c": conc.ravel()}).to_csv(
        filepath, index=False
    )
    return filepath


def write_png(conc: np.ndarray, filepath, vmin: float = None, vmax: float = None):
    """Save the field as an image, row 0 at the bottom."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    vmin = float(np.min(conc)) if vmin is None else vmin
    vmax = float(np.max(conc)) if vmax is None else vmax
    mpimg.imsave(filepath, conc, cmap="viridis", vmin=vmin, vmax=vmax, origin="lower")
    return filepath
