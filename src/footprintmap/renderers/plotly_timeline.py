"""Plotly partition timeline.

Plots the footprint and convolved part numbers for every date the animation
visits, so the breakpoint tables can be audited at a glance. The x axis is the
animation step index rather than calendar time: the October–July gaps would
otherwise dominate the chart.
"""

import numpy as np
import plotly.graph_objects as go

from footprintmap.constants import FOOTPRINT_SCALE, PM25_SCALE
from footprintmap.dates import iter_animation_dates, to_compact_date
from footprintmap.partitions import convolved_partition, footprint_partition

_BG = "#ffffff"


def partition_series() -> tuple[list[str], np.ndarray, np.ndarray]:
    """(dates as YYYYMMDD, footprint parts, convolved parts) over the animation domain."""
    dates = [to_compact_date(d) for d in iter_animation_dates()]
    footprint = np.array([footprint_partition(d) for d in dates])
    convolved = np.array([convolved_partition(d) for d in dates])
    return dates, footprint, convolved


def render_partition_timeline(current_date: str | None = None) -> go.Figure:
    """Render both partition schemes as step lines.

    Args:
        current_date: YYYYMMDD to highlight, if it is an animation date.

    Returns:
        Plotly Figure object.
    """
    dates, footprint, convolved = partition_series()
    labels = [f"{d[0:4]}-{d[4:6]}-{d[6:8]}" for d in dates]
    steps = np.arange(len(dates))

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=steps,
            y=footprint,
            mode="lines",
            line=dict(shape="hv", color=FOOTPRINT_SCALE[-1], width=2),
            customdata=labels,
            hovertemplate="%{customdata}<br>footprint p%{y}<extra></extra>",
            name="footprint",
        )
    )
    fig.add_trace(
        go.Scatter(
            x=steps,
            y=convolved,
            mode="lines",
            line=dict(shape="hv", color=PM25_SCALE[2], width=2, dash="dot"),
            customdata=labels,
            hovertemplate="%{customdata}<br>PM2.5 p%{y}<extra></extra>",
            name="PM2.5",
        )
    )

    if current_date in dates:
        idx = dates.index(current_date)
        fig.add_trace(
            go.Scatter(
                x=[idx, idx],
                y=[footprint[idx], convolved[idx]],
                mode="markers",
                marker=dict(size=10, color="#751d0c"),
                hoverinfo="skip",
                showlegend=False,
            )
        )

    # One tick per season start (August 1 of each year)
    season_starts = [i for i, d in enumerate(dates) if d[4:8] == "0801"]
    fig.update_layout(
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        margin=dict(l=40, r=10, t=10, b=40),
        height=260,
        legend=dict(orientation="h", y=1.1),
        xaxis=dict(
            tickmode="array",
            tickvals=season_starts,
            ticktext=[labels[i][:4] for i in season_starts],
            showgrid=False,
        ),
        yaxis=dict(title="part", dtick=1, range=[0.5, 8.5]),
    )
    return fig
