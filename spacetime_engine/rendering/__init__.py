"""
Rendering Layer
===============

Bounded Context: The shared chart overlay and tooltip content.

Responsibilities:
- Overlay lifecycle: at most one chart shown, cached handles per key
- Deferred rendering coalesced per frame
- Overlay positioning inside the viewport
- Inline tooltip labels
- Default numpy canvas backend

Non-responsibilities:
- Aggregation (handled by analytics)
- Map and layer drawing (host responsibility)

Design:
- Injectable RenderTarget protocol
- Stateless drawing with supervision
"""

from spacetime_engine.rendering.overlay import ChartSeries, OverlayManager, OverlayState, RenderTarget
from spacetime_engine.rendering.scheduler import FrameScheduler, ImmediateScheduler
from spacetime_engine.rendering.tooltip import TooltipBuilder, TooltipContent
from spacetime_engine.rendering.visualizer import CanvasRenderTarget, ChartVisualizer

__all__ = [
    "ChartSeries",
    "OverlayManager",
    "OverlayState",
    "RenderTarget",
    "FrameScheduler",
    "ImmediateScheduler",
    "TooltipBuilder",
    "TooltipContent",
    "CanvasRenderTarget",
    "ChartVisualizer",
]
