"""Matplotlib static PNG renderer for the partition timeline."""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from footprintmap.constants import FOOTPRINT_SCALE, PM25_SCALE  # noqa: E402
from footprintmap.renderers.plotly_timeline import partition_series  # noqa: E402

_ROOT = Path(__file__).parent.parent.parent.parent


def render_static_timeline(width: float = 12, height: float = 4) -> Figure:
    """Render footprint and convolved parts as step plots.

    Args:
        width: Figure width in inches.
        height: Figure height in inches.

    Returns:
        matplotlib Figure object.
    """
    dates, footprint, convolved = partition_series()
    fig, ax = plt.subplots(figsize=(width, height))

    steps = range(len(dates))
    ax.step(steps, footprint, where="post", color=FOOTPRINT_SCALE[-1], label="footprint")
    ax.step(steps, convolved, where="post", color=PM25_SCALE[2], linestyle=":", label="PM2.5")

    season_starts = [i for i, d in enumerate(dates) if d[4:8] == "0801"]
    ax.set_xticks(season_starts)
    ax.set_xticklabels([dates[i][:4] for i in season_starts])
    ax.set_yticks(range(1, 9))
    ax.set_ylabel("part")
    ax.legend(loc="upper left")
    ax.grid(axis="y", alpha=0.3)
    fig.tight_layout()
    return fig


def save_static_timeline(output_path: Path | None = None) -> Path:
    """Save the partition timeline as a PNG file.

    Args:
        output_path: Destination path. Defaults to results/partition_timeline.png.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        output_path = _ROOT / "results" / "partition_timeline.png"

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_timeline()
    fig.savefig(output_path)
    plt.close(fig)
    return output_path
