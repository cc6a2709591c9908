"""
spacetime_session - Viewer session for the spacetime engine

This package wires the engine layers into one interactive session: load
points and regions, aggregate the current window, answer pointer picks
with tooltip content and drive the shared chart overlay.

Architecture:
- ViewerSession: Main orchestrator
- ViewerConfig: Configuration management (YAML)
- PickEvent / DomainUpdate: Host-facing messages

Threading Model:
- Single UI thread; overlay rendering deferred to the host's frame()
"""

from spacetime_session.config import AggregationConfig, AnimationConfig, OverlayConfig, ViewerConfig
from spacetime_session.service import DomainUpdate, PickEvent, ViewerSession

__all__ = [
    "AggregationConfig",
    "AnimationConfig",
    "OverlayConfig",
    "ViewerConfig",
    "DomainUpdate",
    "PickEvent",
    "ViewerSession",
]
