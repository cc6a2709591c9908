"""
Spacetime CLI - Main entry point.

Provides a command-line interface to summarize a dataset and to replay
interaction commands against a ViewerSession.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import cv2
import yaml

from spacetime_control import InteractionPlane
from spacetime_engine.logging import create_logger
from spacetime_session import ViewerConfig, ViewerSession

from .runs import get_target_run_folder


def load_yaml_config(config_path: str) -> Any:
    """
    Load YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If YAML is invalid
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(path) as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}")


def load_json(path: str) -> Any:
    if not Path(path).exists():
        raise FileNotFoundError(f"File not found: {path}")
    with open(path) as f:
        return json.load(f)


def load_points(path: str) -> List[Dict[str, Any]]:
    """Point records: a JSON list, or an object with a 'points' list."""
    data = load_json(path)
    if isinstance(data, dict):
        data = data.get("points", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of points in {path}")
    return data


def load_regions(path: Optional[str]) -> List[Dict[str, Any]]:
    """GeoJSON features from a FeatureCollection (or a bare feature list)."""
    if path is None:
        return []
    data = load_json(path)
    if isinstance(data, dict):
        if data.get("type") == "Feature":
            return [data]
        data = data.get("features", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected GeoJSON features in {path}")
    return data


def load_commands(path: str) -> List[Dict[str, Any]]:
    data = load_yaml_config(path)
    if isinstance(data, dict):
        data = data.get("commands", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of commands in {path}")
    return data


def build_session(args: argparse.Namespace) -> ViewerSession:
    config = ViewerConfig.from_yaml(Path(args.config)) if args.config else ViewerConfig()
    structured_logger = create_logger("session") if args.verbose else None

    session = ViewerSession(config, structured_logger=structured_logger)
    session.load(load_points(args.points), load_regions(args.regions))
    return session


def summarize(args: argparse.Namespace) -> None:
    session = build_session(args)
    domains = {}
    session.add_domain_listener(lambda update: domains.__setitem__(update.channel, update.domain))

    result = session.aggregate()
    time_filter = session.time_engine.time_filter

    print(f"Layer: {session.config.aggregation.layer} ({len(result.buckets)} buckets)")
    if time_filter is not None:
        print(f"Window: [{time_filter.start:.0f}, {time_filter.end:.0f}] ({time_filter.view_mode.value})")
    for key, bucket in result.buckets.items():
        print(f"  {key}: {bucket.summary}")
    for channel, domain in domains.items():
        print(f"{channel} domain: {domain.as_tuple() if domain else None}")


def replay(args: argparse.Namespace) -> None:
    session = build_session(args)
    plane = InteractionPlane(session)
    session.aggregate()

    for message in load_commands(args.commands):
        outcome = plane.dispatch(message)
        if outcome is not None:
            print(f"{message.get('command')}: {outcome}")

    # Drain any render still pending after the last command
    session.frame()

    if args.snapshot:
        target = session.render_target
        canvas = getattr(target, "canvas", None)
        if canvas is None:
            print("No overlay chart to snapshot")
        else:
            output_path = Path(get_target_run_folder("replay")) / "overlay.png"
            cv2.imwrite(str(output_path), canvas)
            print(f"✓ Overlay snapshot: {output_path}")

    session.shutdown()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Spacetime CLI - Summarize datasets and replay interaction commands",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Region summaries and domains
  spacetime-cli summarize --config config/viewer.yaml --points data/points.json --regions data/regions.geojson

  # Replay hover/filter commands and save the overlay chart
  spacetime-cli replay --config config/viewer.yaml --points data/points.json \\
      --regions data/regions.geojson --commands config/commands/hover_north.yaml --snapshot
"""
    )

    parser.add_argument("--verbose", action="store_true", help="Emit structured JSON logs")

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    def add_dataset_arguments(subparser):
        subparser.add_argument('--config', help='Path to viewer config YAML')
        subparser.add_argument('--points', required=True, help='Path to points JSON')
        subparser.add_argument('--regions', help='Path to regions GeoJSON')

    summarize_parser = subparsers.add_parser('summarize', help='Print bucket summaries and domains')
    add_dataset_arguments(summarize_parser)

    replay_parser = subparsers.add_parser('replay', help='Replay interaction commands from YAML')
    add_dataset_arguments(replay_parser)
    replay_parser.add_argument('--commands', required=True, help='Path to commands YAML')
    replay_parser.add_argument('--snapshot', action='store_true', help='Write the overlay chart as PNG')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == 'summarize':
            summarize(args)
        elif args.command == 'replay':
            replay(args)
    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
