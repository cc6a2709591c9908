"""
Viewer Session Demo
===================

Demonstrates spacetime_engine usage end to end on a synthetic dataset.

Example: Two rectangular regions, a year of daily readings, one hover
rendered into the overlay canvas and saved as PNG.

Architecture:
- geometry: DataPoint, Region (immutable shapes)
- analytics: RegionAggregator, DomainTracker, TrendEngine
- timefilter: TimeFilterEngine (window, presets, animation)
- rendering: OverlayManager + CanvasRenderTarget
- session: Orchestration
"""

from datetime import datetime, timezone
from pathlib import Path

import cv2
import numpy as np

from spacetime_engine import DataPoint, Region
from spacetime_cli.runs import get_target_run_folder
from spacetime_session import AggregationConfig, PickEvent, ViewerConfig, ViewerSession

MS_PER_DAY = 86_400_000
START_MS = datetime(2021, 1, 1, tzinfo=timezone.utc).timestamp() * 1000


def make_points(rng: np.random.Generator, days: int = 365) -> list:
    points = []
    for day in range(days):
        for _ in range(3):
            lng, lat = rng.uniform(0.0, 2.0), rng.uniform(0.0, 2.0)
            seasonal = 10 + 8 * np.sin(2 * np.pi * day / 365)
            points.append(DataPoint(
                lng=float(lng),
                lat=float(lat),
                timestamp=START_MS + day * MS_PER_DAY,
                value=float(seasonal + rng.normal(0, 1.5)),
            ))
    return points


def main():
    """Aggregate per region and render one overlay chart."""
    rng = np.random.default_rng(7)

    # 1. Regions (lng, lat rings)
    regions = [
        Region.from_rings("south", [[[0, 0], [2, 0], [2, 1], [0, 1]]], {"name": "South"}),
        Region.from_rings("north", [[[0, 1], [2, 1], [2, 2], [0, 2]]], {"name": "North"}),
    ]

    # 2. Session
    config = ViewerConfig(aggregation=AggregationConfig(layer="region", color_aggregation="MEAN"))
    session = ViewerSession(config)
    session.add_domain_listener(lambda update: print(f"  {update.channel} domain: {update.domain}"))
    session.load(make_points(rng), regions)

    # 3. Aggregate the full year, then one month
    print("🗺  Full year")
    session.aggregate()
    print("🗓  One month")
    session.select_preset("month")

    for key, summary in session.summaries().items():
        print(f"  {key}: {summary}")

    # 4. Hover the north region and render the overlay
    content = session.hover(PickEvent(object=regions[1], screen_xy=(640, 360)))
    session.frame()
    print(f"  tooltip delegated: {content.delegated}")

    canvas = getattr(session.render_target, "canvas", None)
    if canvas is not None:
        output_path = Path(get_target_run_folder("viewer_demo")) / "north.png"
        cv2.imwrite(str(output_path), canvas)
        print(f"✓ Overlay saved: {output_path}")

    session.shutdown()


if __name__ == "__main__":
    main()
