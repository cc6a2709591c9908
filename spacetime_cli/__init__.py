"""
Spacetime CLI - Command-line interface for viewer sessions.

This package provides a CLI to summarize a dataset and to replay
interaction commands against a ViewerSession without writing Python.

Usage:
    spacetime-cli summarize --config config/viewer.yaml --points points.json --regions regions.geojson
    spacetime-cli replay --points points.json --regions regions.geojson \\
        --commands config/commands/hover_north.yaml --snapshot
"""

__version__ = "0.3.0"
