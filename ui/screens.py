"""
NodeLogger - ui/screens.py
Reference host: a terminal view that walks an observer through a grid and
drives the SessionController from the keyboard.

Top-down view of the observer's current layer (x right, z up the screen).
Each console cell is one grid cell.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Sequence

import tcod

from nodelogger.config import NodeLoggerConfig
from nodelogger.events import EVT_NOTICE, EventBus, NodeEvent
from nodelogger.grid import Vec3, to_grid, to_world
from nodelogger.markers import KIND_CORNER, MarkerRegistry
from nodelogger.session import Command, SessionController
from ui.renderer import Renderer
from ui.states import BaseState, Engine

logger = logging.getLogger(__name__)

OBSERVER_STEP: float = 0.5
MESSAGE_LOG_SIZE: int = 6

_MOVE_KEYS = {
    tcod.event.KeySym.LEFT: (-1, 0, 0),
    tcod.event.KeySym.RIGHT: (1, 0, 0),
    tcod.event.KeySym.UP: (0, 0, 1),
    tcod.event.KeySym.DOWN: (0, 0, -1),
    tcod.event.KeySym.PAGEUP: (0, 1, 0),
    tcod.event.KeySym.PAGEDOWN: (0, -1, 0),
}


def keysym_for(name: str) -> tcod.event.KeySym:
    """Resolve a configured key name ("T", "f1", "SPACE") to a KeySym."""
    for candidate in (name, name.upper(), name.lower()):
        try:
            return tcod.event.KeySym[candidate]
        except KeyError:
            continue
    raise ValueError(f"Unknown key name in config: {name!r}")


def build_key_map(config: NodeLoggerConfig) -> Dict[tcod.event.KeySym, Command]:
    bindings = config.keys.model_dump()
    return {keysym_for(bindings[command.value]): command for command in Command}


class NodeLoggingScreen(BaseState):
    """
    Host for one session. Implements HostServices for the controller and
    renders markers from the MarkerRegistry.
    """

    def __init__(
        self,
        engine: Engine,
        config: NodeLoggerConfig,
        map_id: Any = 1,
        mode_id: Optional[int] = None,
        start: Vec3 = (0.5, 0.5, 0.5),
    ):
        super().__init__(engine)
        self.config = config
        self._map_id = map_id
        self._mode_id = config.enabled_mode_id if mode_id is None else mode_id
        self.position: List[float] = list(start)
        self.messages: Deque[str] = deque(maxlen=MESSAGE_LOG_SIZE)

        self.bus = EventBus()
        self.bus.subscribe(EVT_NOTICE, self._on_notice)
        self.markers = MarkerRegistry(config.cell_size)
        self.markers.attach(self.bus)
        self.key_map = build_key_map(config)
        self.session = SessionController(self, self.bus, config)

    # ----------------------------------------------------------
    # HostServices
    # ----------------------------------------------------------

    def observer_position(self) -> Optional[Vec3]:
        return (self.position[0], self.position[1], self.position[2])

    def map_id(self) -> Any:
        return self._map_id

    def mode_id(self) -> int:
        return self._mode_id

    def selected_positions(self) -> Sequence[Vec3]:
        """The node marker the observer stands in, if any."""
        cell = to_grid(self.observer_position(), self.config.cell_size)
        if self.markers.has_node(cell):
            return [to_world(cell, self.config.cell_size)]
        return []

    # ----------------------------------------------------------
    # Events
    # ----------------------------------------------------------

    def _on_notice(self, event: NodeEvent) -> None:
        if event.message:
            self.messages.append(event.message)
            logger.info(event.message)

    def ev_keydown(self, event: tcod.event.KeyDown) -> None:
        if event.sym == tcod.event.KeySym.ESCAPE:
            self.engine.running = False
            return

        step = _MOVE_KEYS.get(event.sym)
        if step is not None:
            for axis, delta in enumerate(step):
                self.position[axis] += delta * OBSERVER_STEP * self.config.cell_size
            return

        command = self.key_map.get(event.sym)
        if command is not None:
            self.session.handle(command)

    def on_tick(self) -> None:
        self.session.tick()

    # ----------------------------------------------------------
    # Rendering
    # ----------------------------------------------------------

    def on_render(self, renderer: Renderer) -> None:
        here = to_grid(self.observer_position(), self.config.cell_size)
        map_h = renderer.height - MESSAGE_LOG_SIZE - 3
        cx, cy = renderer.width // 2, map_h // 2

        for marker in self.markers.markers():
            if marker.cell.y != here.y:
                continue
            sx = cx + (marker.cell.x - here.x)
            sy = cy - (marker.cell.z - here.z)
            if sy < map_h:
                glyph = "X" if marker.kind == KIND_CORNER else "#"
                renderer.put(sx, sy, glyph, marker.color)

        renderer.put(cx, cy, "@", (255, 255, 0))

        ctx = self.session.context
        status = (
            f"{self.session.state.value.upper():16s} cell {here}  "
            f"nodes {len(ctx.cells)}  history {len(ctx.history)}"
        )
        renderer.print_lines(1, map_h, [status], fg=(255, 255, 255))
        renderer.print_lines(1, map_h + 1, ["[P]ause [T]oggle log [C]orner [R]undo [L]oad [F]remove  arrows/PgUp/PgDn move  ESC quit"], fg=(150, 150, 150))
        renderer.print_lines(1, map_h + 3, list(self.messages))
