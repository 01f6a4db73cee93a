"""Pytest configuration and fixtures for the diffusion benchmark tests."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from diffusion import (  # noqa: E402
    BoundaryValues,
    Mesh,
    OffloadStrategy,
    SerialStrategy,
    ThreadedStrategy,
)


STRATEGY_NAMES = ["serial", "threaded", "offload"]


def make_strategy(name):
    """Strategy with small tiles so threaded runs split into many blocks."""
    if name == "threaded":
        return ThreadedStrategy(workers=4, bx=4, by=3)
    if name == "offload":
        return OffloadStrategy()
    return SerialStrategy()


@pytest.fixture(params=STRATEGY_NAMES)
def strategy(request):
    """Each execution strategy in turn."""
    s = make_strategy(request.param)
    yield s
    s.close()


@pytest.fixture
def bc():
    """Background 0, both sources 1."""
    return BoundaryValues(bottom=0.0, top=0.0, left=1.0, right=1.0)


@pytest.fixture
def small_params():
    """Parameters for the 10x10 reference scenario."""
    return {
        "nx": 10,
        "ny": 10,
        "nm": 3,
        "dx": 0.5,
        "dy": 0.5,
        "D": 0.00625,
        "linStab": 0.1,
    }


@pytest.fixture
def small_mesh(small_params, bc):
    """10x10 mesh, five-point stencil."""
    p = small_params
    return Mesh(nx=p["nx"], ny=p["ny"], nm=p["nm"], dx=p["dx"], dy=p["dy"], bc=bc)


@pytest.fixture
def medium_mesh(bc):
    """48x40 mesh with a wider (nm=5) halo."""
    return Mesh(nx=48, ny=40, nm=5, dx=0.5, dy=0.5, bc=bc)
