"""Rich console output helpers."""

import math

from rich.console import Console
from rich.table import Table

console = Console()


def ok(msg: str):
    """Print success message."""
    console.print(f"  [green]✓[/green] {msg}")


def fail(msg: str):
    """Print failure message."""
    console.print(f"  [red]✗[/red] {msg}")


def dim(msg: str):
    """Print dimmed message."""
    console.print(f"  [dim]{msg}[/dim]")


def header(msg: str):
    """Print bold header."""
    console.print(f"\n[bold]{msg}[/bold]")


def timing_table(df, title: str = "Strategy timings") -> Table:
    """Build a table with one row per strategy from a comparison DataFrame."""
    table = Table(title=title)
    columns = [
        ("strategy", "Strategy", "{}"),
        ("wall_time_seconds", "Wall [s]", "{:.3f}"),
        ("conv_seconds", "Conv [s]", "{:.3f}"),
        ("step_seconds", "Step [s]", "{:.3f}"),
        ("soln_seconds", "Check [s]", "{:.3f}"),
        ("final_rss", "RSS", "{:.3e}"),
        ("linf_vs_reference", "max |Δc|", "{:.1e}"),
    ]
    present = [c for c in columns if c[0] in df.columns]
    for _, label, _ in present:
        table.add_column(label, justify="right")
    for _, row in df.iterrows():
        table.add_row(*[fmt.format(row[key]) for key, _, fmt in present])
    return table


def print_metrics(metrics):
    """Print a one-run summary."""
    header(f"Run summary ({metrics.strategy})")
    ok(f"{metrics.steps} steps, t = {metrics.sim_time:.3f}")
    if math.isfinite(metrics.final_rss):
        ok(f"final RSS = {metrics.final_rss:.6e}")
    else:
        fail(f"final RSS = {metrics.final_rss} (diverged, check linStab)")
    dim(
        f"wall {metrics.wall_time_seconds:.2f}s | conv {metrics.conv_seconds:.2f}s | "
        f"step {metrics.step_seconds:.2f}s | io {metrics.io_seconds:.2f}s | "
        f"check {metrics.soln_seconds:.2f}s"
    )
