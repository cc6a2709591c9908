from __future__ import annotations

import argparse
import json
from pathlib import Path

import pytest

from spacetime_cli.cli import load_commands, load_points, load_regions, replay, summarize

SQUARE = {
    "type": "Feature",
    "properties": {"name": "Square"},
    "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1]]]},
}


@pytest.fixture
def inputs(tmp_path: Path) -> dict[str, str]:
    points = tmp_path / "points.json"
    points.write_text(json.dumps({"points": [
        {"lng": 0.5, "lat": 0.5, "timestamp": day * 86_400_000, "value": day} for day in range(3)
    ]}))
    regions = tmp_path / "regions.geojson"
    regions.write_text(json.dumps({"type": "FeatureCollection", "features": [SQUARE]}))
    config = tmp_path / "viewer.yaml"
    config.write_text("aggregation:\n  layer: region\n")
    commands = tmp_path / "commands.yaml"
    commands.write_text(
        "commands:\n"
        "  - command: hover\n"
        "    region: square\n"
        "    screen_xy: [10, 10]\n"
        "  - command: leave\n"
    )
    return {"points": str(points), "regions": str(regions), "config": str(config), "commands": str(commands)}


def test_loaders(inputs: dict[str, str], tmp_path: Path) -> None:
    assert len(load_points(inputs["points"])) == 3
    assert load_regions(inputs["regions"]) == [SQUARE]
    assert load_regions(None) == []
    assert [c["command"] for c in load_commands(inputs["commands"])] == ["hover", "leave"]

    single = tmp_path / "single.geojson"
    single.write_text(json.dumps(SQUARE))
    assert load_regions(str(single)) == [SQUARE]


def test_load_points_rejects_scalars(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("42")

    with pytest.raises(ValueError):
        load_points(str(path))


def test_summarize_prints_buckets(inputs: dict[str, str], capsys: pytest.CaptureFixture[str]) -> None:
    args = argparse.Namespace(config=inputs["config"], points=inputs["points"], regions=inputs["regions"], verbose=False)

    summarize(args)

    out = capsys.readouterr().out
    assert "Layer: region (1 buckets)" in out
    assert "square" in out
    assert "color domain: (3.0, 3.0)" in out


def test_replay_dispatches_commands(inputs: dict[str, str], capsys: pytest.CaptureFixture[str]) -> None:
    args = argparse.Namespace(
        config=inputs["config"],
        points=inputs["points"],
        regions=inputs["regions"],
        commands=inputs["commands"],
        snapshot=False,
        verbose=False,
    )

    replay(args)

    assert "hover: TooltipContent(html=None, delegated=True)" in capsys.readouterr().out
