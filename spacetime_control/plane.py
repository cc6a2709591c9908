"""
InteractionPlane - Interaction command routing for a ViewerSession

Bounded Context: Host interaction commands
Responsibilities:
  - Register interaction commands on a CommandRegistry
  - Resolve command payloads to session objects (regions, cells, points)
  - Delegate to the ViewerSession

Message format (dict, e.g. one entry of a replay file):
  {"command": "hover", "region": "north", "screen_xy": [200, 120]}
  {"command": "hover", "cell": "hex:3:-1"}
  {"command": "hover", "point": {"lng": 2.1, "lat": 41.4, "timestamp": ...}}
  {"command": "set_window", "start": "2021-01-01", "end": "2021-03-01"}
  {"command": "select_preset", "preset": "week"}
  {"command": "set_view_mode", "view_mode": "seasonal"}
  {"command": "tick"}
  {"command": "set_aggregation", "color": "MEAN", "repeated": null}
  {"command": "set_preserve_domains", "preserve": true}
  {"command": "filter_categories", "categories": ["oak", "ash"]}

Threading: Single-threaded (commands run on the caller's thread)
"""

import logging
from typing import Any, Dict, Optional

from spacetime_engine.geometry.shapes import to_epoch_ms
from spacetime_session.service import PickEvent, ViewerSession

from .registry import CommandRegistry

logger = logging.getLogger(__name__)


class InteractionPlane:
    """
    Routes interaction commands to a ViewerSession.

    Example:
        plane = InteractionPlane(session)
        plane.dispatch({"command": "hover", "region": "north", "screen_xy": [200, 120]})
        plane.dispatch({"command": "frame"})

        plane.command_registry.available_commands
        # {'hover', 'click', 'leave', 'set_window', ...}
    """

    def __init__(self, session: ViewerSession):
        self.session = session
        self.command_registry = CommandRegistry()
        self._register_commands()

    def _register_commands(self) -> None:
        registry = self.command_registry
        session = self.session

        registry.register('hover', self._hover, "Pointer over a region, cell or point")
        registry.register('click', self._click, "Pointer click on a region, cell or point")
        registry.register('leave', lambda data=None: session.leave(), "Pointer left the scene")
        registry.register('set_window', self._set_window, "Apply a custom time window")
        registry.register('select_preset', self._select_preset, "Apply a duration preset")
        registry.register('set_view_mode', self._set_view_mode, "Switch historical/seasonal view")
        registry.register('play', lambda data=None: session.play(), "Start the animation")
        registry.register('pause', lambda data=None: session.pause(), "Pause the animation")
        registry.register('tick', lambda data=None: session.tick(), "Advance the animation one step")
        registry.register('frame', lambda data=None: session.frame(), "Run deferred overlay rendering")
        registry.register('set_aggregation', self._set_aggregation, "Change color/elevation/repeated-points aggregation")
        registry.register('set_preserve_domains', self._set_preserve_domains, "Toggle domain preservation")
        registry.register('set_column', self._set_column, "Change the grouping column")
        registry.register('filter_categories', self._filter_categories, "Keep only the selected categories")

    def dispatch(self, message: Dict[str, Any]) -> Any:
        """
        Execute one command message.

        Args:
            message: Dict with a 'command' key plus command arguments

        Returns:
            Handler result (tooltip content, filter change, ...)

        Raises:
            CommandNotAvailableError: If the command is not registered
            ValueError: If the message is malformed
        """
        command = str(message.get('command', '')).strip().lower()
        if not command:
            raise ValueError(f"Message has no command: {message}")

        logger.debug(f"Executing command: {command}")
        return self.command_registry.execute(command, message)

    # ===== Handlers =====

    def _pick_event(self, data: Dict[str, Any]) -> PickEvent:
        screen_xy = data.get('screen_xy')
        return PickEvent(
            object=self._resolve_target(data),
            layer_id=data.get('layer_id'),
            screen_xy=tuple(screen_xy) if screen_xy is not None else None,
        )

    def _resolve_target(self, data: Dict[str, Any]) -> Optional[Any]:
        if 'region' in data:
            region_id = str(data['region'])
            for region in self.session.regions:
                if region.region_id == region_id:
                    return region
            raise ValueError(f"Unknown region: '{region_id}'")

        if 'cell' in data:
            result = self.session.result if self.session.result is not None else self.session.aggregate()
            bucket = result.get(str(data['cell']))
            if bucket is None:
                raise ValueError(f"Unknown cell: '{data['cell']}'")
            return bucket

        if 'point' in data:
            return dict(data['point'])

        return None

    def _hover(self, data: Dict[str, Any]):
        return self.session.hover(self._pick_event(data))

    def _click(self, data: Dict[str, Any]):
        return self.session.click(self._pick_event(data))

    def _set_window(self, data: Dict[str, Any]):
        start = to_epoch_ms(data.get('start'))
        end = to_epoch_ms(data.get('end'))
        if start is None or end is None:
            raise ValueError(f"set_window requires start and end, got {data}")
        return self.session.set_window(start, end)

    def _select_preset(self, data: Dict[str, Any]):
        if 'preset' not in data:
            raise ValueError("select_preset requires 'preset'")
        return self.session.select_preset(data['preset'])

    def _set_view_mode(self, data: Dict[str, Any]):
        if 'view_mode' not in data:
            raise ValueError("set_view_mode requires 'view_mode'")
        return self.session.set_view_mode(data['view_mode'])

    def _set_aggregation(self, data: Dict[str, Any]):
        kwargs = {}
        if 'color' in data:
            kwargs['color'] = data['color']
        if 'elevation' in data:
            kwargs['elevation'] = data['elevation']
        if 'repeated' in data:
            kwargs['repeated'] = data['repeated']
        if not kwargs:
            raise ValueError("set_aggregation requires 'color', 'elevation' or 'repeated'")
        return self.session.set_aggregation(**kwargs)

    def _set_preserve_domains(self, data: Dict[str, Any]):
        preserve = data.get('preserve')
        if not isinstance(preserve, bool):
            raise ValueError(f"set_preserve_domains requires boolean 'preserve', got {preserve!r}")
        return self.session.set_preserve_domains(preserve)

    def _set_column(self, data: Dict[str, Any]):
        if not data.get('column'):
            raise ValueError("set_column requires 'column'")
        return self.session.set_column(data['column'])

    def _filter_categories(self, data: Dict[str, Any]):
        categories = data.get('categories')
        if categories is not None and not isinstance(categories, (list, tuple)):
            raise ValueError(f"filter_categories requires a list, got {categories!r}")
        return self.session.filter_categories(categories)
