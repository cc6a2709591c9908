from __future__ import annotations

import pytest

from spacetime_control import CommandNotAvailableError, CommandRegistry


def test_execute_returns_handler_result() -> None:
    registry = CommandRegistry()
    registry.register("echo", lambda data: data["text"], "Echo the payload")
    registry.register("ping", lambda: "pong", "Reply pong")

    assert registry.execute("echo", {"text": "hi"}) == "hi"
    assert registry.execute("ping") == "pong"


def test_unknown_command_lists_available() -> None:
    registry = CommandRegistry()
    registry.register("pause", lambda: None, "Pause")

    with pytest.raises(CommandNotAvailableError, match="pause"):
        registry.execute("resume")


@pytest.mark.parametrize("name", ["", "Pause", "set window", " pause"])
def test_malformed_names_are_rejected(name: str) -> None:
    with pytest.raises(ValueError):
        CommandRegistry().register(name, lambda: None, "x")


def test_duplicate_registration_is_rejected() -> None:
    registry = CommandRegistry()
    registry.register("tick", lambda: None, "Tick")

    with pytest.raises(ValueError):
        registry.register("tick", lambda: None, "Tick again")


def test_introspection() -> None:
    registry = CommandRegistry()
    registry.register("play", lambda: None, "Start the animation")

    assert registry.is_available("play")
    assert not registry.is_available("stop")
    assert registry.available_commands == {"play"}
    assert registry.get_help() == {"play": "Start the animation"}
    assert registry.count() == 1
