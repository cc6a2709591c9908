"""
spacetime_control - Interaction control for a ViewerSession

Bounded Context: Host interaction commands
Responsibilities:
  - Command registration and validation
  - Command execution delegation to the session

Architecture:
  - CommandRegistry: Explicit registration pattern
  - InteractionPlane: Command routing + payload resolution

Design Philosophy:
  - Explicit registration (fail-fast, no runtime surprises)
  - Clear error messages (lists available commands on error)
"""

from .registry import CommandRegistry, CommandNotAvailableError
from .plane import InteractionPlane

__all__ = [
    "CommandRegistry",
    "CommandNotAvailableError",
    "InteractionPlane",
]
