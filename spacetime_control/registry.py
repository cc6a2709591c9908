"""
CommandRegistry - Explicit command registration for interaction commands

Bounded Context: Command registration and validation
Responsibilities:
  - Register interaction commands with handlers
  - Validate command existence before execution
  - Provide introspection (available_commands, get_help)

Threading: Single-threaded (driven from the UI thread, no locks)
Pattern: Registry with explicit registration
"""

from typing import Any, Callable, Dict, Optional, Set


class CommandNotAvailableError(Exception):
    """Raised when attempting to execute an unregistered command"""
    pass


class CommandRegistry:
    """
    Registry for interaction commands with explicit registration.

    Key Features:
      - Fail-fast: Unknown commands rejected immediately
      - Introspection: Can query available commands at runtime
      - Self-Documenting: Each command has a description

    Example:
        registry = CommandRegistry()
        registry.register('pause', session.pause, "Pause the animation")

        try:
            registry.execute('hover', {'object': bucket, 'screen_xy': [120, 80]})
        except CommandNotAvailableError as e:
            print(f"Command not available: {e}")
    """

    def __init__(self):
        self._commands: Dict[str, Callable] = {}
        self._descriptions: Dict[str, str] = {}

    def register(self, command: str, handler: Callable, description: str) -> None:
        """
        Register a command with its handler function.

        Args:
            command: Command name (lowercase, no spaces)
            handler: Callable that executes the command
            description: Human-readable description for help text

        Raises:
            ValueError: If command already registered or malformed
        """
        if not command or command != command.strip().lower() or " " in command:
            raise ValueError(f"Invalid command name: '{command}'")
        if command in self._commands:
            raise ValueError(f"Command '{command}' already registered")

        self._commands[command] = handler
        self._descriptions[command] = description

    def execute(self, command: str, command_data: Optional[dict] = None) -> Any:
        """
        Execute a registered command.

        Args:
            command: Command name to execute
            command_data: Optional command payload

        Returns:
            Whatever the handler returns

        Raises:
            CommandNotAvailableError: If command not registered
        """
        if command not in self._commands:
            raise CommandNotAvailableError(
                f"Command '{command}' not available. "
                f"Available commands: {', '.join(sorted(self.available_commands))}"
            )

        handler = self._commands[command]

        if command_data is not None:
            return handler(command_data)
        return handler()

    def is_available(self, command: str) -> bool:
        return command in self._commands

    @property
    def available_commands(self) -> Set[str]:
        """Snapshot of registered command names."""
        return set(self._commands.keys())

    def get_help(self) -> Dict[str, str]:
        """Snapshot of command descriptions."""
        return dict(self._descriptions)

    def count(self) -> int:
        return len(self._commands)
