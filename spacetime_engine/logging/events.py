"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

Typed event names for structured logging.

Event Naming Convention:
    <component>.<category>.<action>

    component: aggregation, domain, filter, overlay, session, error
    category: window, preset, chart
    action: applied, rejected, created, disposed

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, message, metadata.key
    | filter event = "overlay.chart.created"
    | stats count() by bin(5m)
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - aggregation.*: Bucketing and aggregate computation
    - domain.*: Color/elevation domain maintenance
    - filter.*: Time window changes
    - overlay.*: Shared overlay lifecycle
    - session.*: Viewer session lifecycle
    - error.*: Error conditions
    """

    # ========== Aggregation Events ==========
    AGGREGATION_COMPLETED = "aggregation.completed"
    """Aggregation pass finished for regions or cells."""

    REGION_MALFORMED = "aggregation.region.malformed"
    """Region has no usable rings and contributes zero members."""

    # ========== Domain Events ==========
    DOMAIN_UPDATED = "domain.updated"
    """Color or elevation domain changed."""

    DOMAIN_CYCLE_RESET = "domain.cycle.reset"
    """Domain preservation cycle restarted after a context change."""

    # ========== Filter Events ==========
    FILTER_WINDOW_APPLIED = "filter.window.applied"
    """Time window changed."""

    FILTER_WINDOW_REJECTED = "filter.window.rejected"
    """Requested window narrower than the minimum observable gap."""

    FILTER_PRESET_SELECTED = "filter.preset.selected"
    """Duration preset applied."""

    FILTER_VIEW_MODE_CHANGED = "filter.view_mode.changed"
    """Switched between historical and seasonal view."""

    FILTER_ANIMATION_STEP = "filter.animation.step"
    """Animation tick advanced the window."""

    FILTER_CATEGORIES_CHANGED = "filter.categories.changed"
    """Category selection changed."""

    # ========== Overlay Events ==========
    OVERLAY_CHART_CREATED = "overlay.chart.created"
    """Chart built for an overlay key."""

    OVERLAY_CHART_REUSED = "overlay.chart.reused"
    """Existing chart revealed without rebuilding."""

    OVERLAY_CHART_DISPOSED = "overlay.chart.disposed"
    """Chart handle released."""

    OVERLAY_HIDDEN = "overlay.hidden"
    """Overlay concealed."""

    # ========== Session Events ==========
    SESSION_DATA_LOADED = "session.data.loaded"
    """Points and regions loaded into a session."""

    SESSION_AGGREGATION_CHANGED = "session.aggregation.changed"
    """Aggregation kinds, grouping column or domain preservation changed."""

    SESSION_SHUTDOWN = "session.shutdown"
    """Session released its overlay resources."""

    # ========== Error Events ==========
    OVERLAY_BUILD_ERROR = "error.overlay_build"
    """Chart builder or render target failed."""

    CONFIG_ERROR = "error.config"
    """Configuration could not be loaded."""


# Event categories for filtering
AGGREGATION_EVENTS = {
    LogEvent.AGGREGATION_COMPLETED,
    LogEvent.REGION_MALFORMED,
    LogEvent.DOMAIN_UPDATED,
    LogEvent.DOMAIN_CYCLE_RESET,
}

FILTER_EVENTS = {
    LogEvent.FILTER_WINDOW_APPLIED,
    LogEvent.FILTER_WINDOW_REJECTED,
    LogEvent.FILTER_PRESET_SELECTED,
    LogEvent.FILTER_VIEW_MODE_CHANGED,
    LogEvent.FILTER_ANIMATION_STEP,
    LogEvent.FILTER_CATEGORIES_CHANGED,
}

OVERLAY_EVENTS = {
    LogEvent.OVERLAY_CHART_CREATED,
    LogEvent.OVERLAY_CHART_REUSED,
    LogEvent.OVERLAY_CHART_DISPOSED,
    LogEvent.OVERLAY_HIDDEN,
}

ERROR_EVENTS = {
    LogEvent.OVERLAY_BUILD_ERROR,
    LogEvent.CONFIG_ERROR,
}
