"""
Configuration schema for the viewer session.

This module defines the configuration structure for a ViewerSession,
including aggregation layer settings, the time filter, the chart overlay
and animation.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import calendar

import yaml

from spacetime_engine.analytics.aggregation import OUTER_KINDS, AggregationKind
from spacetime_engine.timefilter.filter import ViewMode


@dataclass(frozen=True)
class AggregationConfig:
    """
    Aggregation layer configuration.

    Layers:
    - region: points bucketed per region polygon (GeoJSON features)
    - hexagon: pointy-top hexagon cells, cell_size_m is the radius
    - grid: square cells, cell_size_m is the side
    """

    layer: str = "hexagon"
    color_aggregation: str = "SUM"
    elevation_aggregation: str = "SUM"
    repeated_points_aggregation: Optional[str] = None
    cell_size_m: float = 1000.0
    preserve_domains: bool = False
    include_empty_cells: bool = False
    column_name: str = "value"

    def __post_init__(self):
        """Validate aggregation configuration."""
        valid_layers = {"region", "hexagon", "grid"}
        if self.layer not in valid_layers:
            raise ValueError(
                f"Invalid layer: {self.layer}. "
                f"Must be one of {valid_layers}"
            )

        for name in ("color_aggregation", "elevation_aggregation"):
            kind = AggregationKind.parse(getattr(self, name))
            if kind not in OUTER_KINDS:
                raise ValueError(
                    f"Invalid {name}: {kind.value}. "
                    f"Must be one of {sorted(k.value for k in OUTER_KINDS)}"
                )

        if self.repeated_points_aggregation is not None:
            AggregationKind.parse(self.repeated_points_aggregation)

        if self.cell_size_m <= 0:
            raise ValueError(
                f"cell_size_m must be positive, got {self.cell_size_m}"
            )

    @property
    def color_kind(self) -> AggregationKind:
        return AggregationKind.parse(self.color_aggregation)

    @property
    def elevation_kind(self) -> AggregationKind:
        return AggregationKind.parse(self.elevation_aggregation)

    @property
    def repeated_points_kind(self) -> Optional[AggregationKind]:
        if self.repeated_points_aggregation is None:
            return None
        return AggregationKind.parse(self.repeated_points_aggregation)


@dataclass(frozen=True)
class OverlayConfig:
    """Chart overlay configuration."""

    charts: bool = True  # False: inline labels only
    padding: int = 15
    viewport_wh: Tuple[int, int] = (1280, 720)  # (width, height)
    chart_wh: Tuple[int, int] = (500, 300)
    chart_margin: int = 40

    def __post_init__(self):
        """Validate overlay configuration."""
        if self.padding < 0:
            raise ValueError(f"padding must be >= 0, got {self.padding}")

        for name in ("viewport_wh", "chart_wh"):
            width, height = getattr(self, name)
            if width <= 0 or height <= 0:
                raise ValueError(
                    f"{name} must have positive dimensions, got {getattr(self, name)}"
                )

        chart_w, chart_h = self.chart_wh
        if chart_w <= 2 * self.chart_margin or chart_h <= 2 * self.chart_margin:
            raise ValueError(
                f"chart_wh {self.chart_wh} too small for chart_margin {self.chart_margin}"
            )


@dataclass(frozen=True)
class AnimationConfig:
    """Animation configuration."""

    speed: float = 1.0  # days per tick

    def __post_init__(self):
        """Validate animation configuration."""
        if self.speed <= 0:
            raise ValueError(f"animation speed must be positive, got {self.speed}")


@dataclass(frozen=True)
class ViewerConfig:
    """
    Main configuration for a ViewerSession.

    Loaded from YAML and validated at startup.
    Immutable after construction (frozen dataclass).
    """

    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    animation: AnimationConfig = field(default_factory=AnimationConfig)

    view_mode: str = "historical"
    reference_year: int = 2000
    trend_bandwidth: float = 0.3

    # column name -> level labels (index = coded value)
    factor_levels: Dict[str, List[str]] = field(default_factory=dict)

    def __post_init__(self):
        """Validate viewer configuration."""
        ViewMode.parse(self.view_mode)

        if not calendar.isleap(self.reference_year):
            raise ValueError(
                f"reference_year must be a leap year, got {self.reference_year}"
            )

        if not 0.0 < self.trend_bandwidth <= 1.0:
            raise ValueError(
                f"trend_bandwidth must be in (0.0, 1.0], got {self.trend_bandwidth}"
            )

        for column, levels in self.factor_levels.items():
            if not isinstance(levels, (list, tuple)) or len(levels) == 0:
                raise ValueError(
                    f"factor_levels['{column}'] must be a non-empty list of labels"
                )

    @property
    def categorical_levels(self) -> Optional[int]:
        """Level count of the aggregated column, when it is categorical."""
        levels = self.factor_levels.get(self.aggregation.column_name)
        return len(levels) if levels else None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ViewerConfig":
        """Build from a parsed YAML mapping (missing sections use defaults)."""
        data = data or {}

        overlay_data = dict(data.get("overlay", {}))
        for key in ("viewport_wh", "chart_wh"):
            if key in overlay_data:
                overlay_data[key] = tuple(overlay_data[key])

        return cls(
            aggregation=AggregationConfig(**data.get("aggregation", {})),
            overlay=OverlayConfig(**overlay_data),
            animation=AnimationConfig(**data.get("animation", {})),
            view_mode=data.get("view_mode", "historical"),
            reference_year=data.get("reference_year", 2000),
            trend_bandwidth=data.get("trend_bandwidth", 0.3),
            factor_levels={k: list(v) for k, v in (data.get("factor_levels") or {}).items()},
        )

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "ViewerConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            view_mode: "seasonal"
            reference_year: 2000
            trend_bandwidth: 0.3

            aggregation:
              layer: "region"
              color_aggregation: "MEAN"
              elevation_aggregation: "SUM"
              repeated_points_aggregation: "MEAN"
              preserve_domains: true

            overlay:
              charts: true
              padding: 15
              viewport_wh: [1280, 720]
              chart_wh: [500, 300]

            animation:
              speed: 1

            factor_levels:
              species: ["oak", "ash", "elm"]
        """
        with open(yaml_path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data)
