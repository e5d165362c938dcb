"""CLI entry point for the partition timeline chart.

Prints each partition boundary the animation crosses and saves the chart:
    uv run python src/footprintmap/partition_chart.py
"""

import logging

from footprintmap.dates import iter_animation_dates, to_compact_date, to_display_date
from footprintmap.partitions import assign_partitions
from footprintmap.renderers.static import save_static_timeline

logging.basicConfig(level=logging.WARNING)

previous = None
for day in iter_animation_dates():
    compact = to_compact_date(day)
    parts = assign_partitions(compact)
    if parts != previous:
        print(f"{to_display_date(compact)}  footprint p{parts.footprint}  PM2.5 p{parts.convolved}")
        previous = parts

path = save_static_timeline()
print(f"Saved: {path}")
