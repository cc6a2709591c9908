from __future__ import annotations

from pathlib import Path

import pytest

from spacetime_engine.analytics import AggregationKind
from spacetime_session import AggregationConfig, AnimationConfig, OverlayConfig, ViewerConfig


def test_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "viewer.yaml"
    path.write_text(
        "view_mode: seasonal\n"
        "aggregation:\n"
        "  layer: region\n"
        "  color_aggregation: mean\n"
        "  repeated_points_aggregation: FIRST\n"
        "overlay:\n"
        "  viewport_wh: [800, 600]\n"
        "factor_levels:\n"
        "  value: [low, high]\n"
    )

    config = ViewerConfig.from_yaml(path)

    assert config.view_mode == "seasonal"
    assert config.aggregation.layer == "region"
    assert config.aggregation.color_kind is AggregationKind.MEAN
    assert config.aggregation.repeated_points_kind is AggregationKind.FIRST
    assert config.overlay.viewport_wh == (800, 600)
    assert config.categorical_levels == 2


def test_empty_yaml_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("")

    config = ViewerConfig.from_yaml(path)

    assert config == ViewerConfig()
    assert config.aggregation.layer == "hexagon"
    assert config.categorical_levels is None


def test_bundled_config_loads() -> None:
    config = ViewerConfig.from_yaml(Path(__file__).parent.parent / "config" / "viewer.yaml")
    assert config.aggregation.layer == "region"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"layer": "scatter"},
        {"color_aggregation": "FIRST"},
        {"elevation_aggregation": "median"},
        {"repeated_points_aggregation": "LAST"},
        {"cell_size_m": 0},
    ],
)
def test_invalid_aggregation_config(kwargs) -> None:
    with pytest.raises(ValueError):
        AggregationConfig(**kwargs)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"padding": -1},
        {"viewport_wh": (0, 600)},
        {"chart_wh": (60, 300), "chart_margin": 40},
    ],
)
def test_invalid_overlay_config(kwargs) -> None:
    with pytest.raises(ValueError):
        OverlayConfig(**kwargs)


def test_invalid_viewer_config() -> None:
    with pytest.raises(ValueError):
        ViewerConfig(reference_year=2001)
    with pytest.raises(ValueError):
        ViewerConfig(trend_bandwidth=0)
    with pytest.raises(ValueError):
        ViewerConfig(view_mode="weekly")
    with pytest.raises(ValueError):
        ViewerConfig(factor_levels={"value": []})
    with pytest.raises(ValueError):
        AnimationConfig(speed=0)
