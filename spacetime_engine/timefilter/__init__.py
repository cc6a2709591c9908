"""
Time Filter Layer
=================

Bounded Context: The active time window.

Responsibilities:
- Window state and view mode (historical / seasonal)
- Seasonal projection onto a reference year
- Duration presets constrained by the data's minimum gap
- Animation stepping
"""

from spacetime_engine.timefilter.animation import AnimationStepper
from spacetime_engine.timefilter.filter import FilterChange, TimeFilter, TimeFilterEngine, ViewMode
from spacetime_engine.timefilter.presets import DurationPreset, minimum_gap
from spacetime_engine.timefilter.seasonal import project_to_reference_year

__all__ = [
    "AnimationStepper",
    "FilterChange",
    "TimeFilter",
    "TimeFilterEngine",
    "ViewMode",
    "DurationPreset",
    "minimum_gap",
    "project_to_reference_year",
]
