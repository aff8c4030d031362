"""
NodeLogger - ui/states.py
Screen state machine and the frame loop that feeds ticks to the active screen.

Ticks run on a fixed FRAME_TIME cadence. Input arriving between ticks wakes
the loop early for dispatch and redraw but does not add extra ticks, so a
held key never speeds up logging or loading.
"""

from __future__ import annotations
import time
from typing import Any
import tcod

from ui.renderer import Renderer

FRAME_TIME: float = 1 / 30


class BaseState(tcod.event.EventDispatch[Any]):
    """
    A screen: receives tcod events, a tick per frame, and draws to the console.
    """
    def __init__(self, engine: "Engine"):
        super().__init__()
        self.engine = engine

    def on_render(self, renderer: Renderer) -> None:
        """Called every frame to draw to the console."""
        pass

    def on_tick(self) -> None:
        """Called once per FRAME_TIME, after input has been dispatched."""
        pass


class Engine:
    """
    Owns the tcod context, the Renderer and the active screen.
    """
    def __init__(self, renderer: Renderer, initial_state_cls: type[BaseState]):
        self.renderer = renderer
        self.active_state: BaseState = initial_state_cls(self)
        self.running = True

    def run(self) -> None:
        with tcod.context.new_terminal(
            self.renderer.width,
            self.renderer.height,
            title=self.renderer.title,
            vsync=True,
        ) as context:
            self.renderer.context = context
            next_tick = time.perf_counter()

            while self.running:
                self.renderer.clear()
                self.active_state.on_render(self.renderer)
                self.renderer.present(context)

                timeout = max(0.0, next_tick - time.perf_counter())
                for event in tcod.event.wait(timeout=timeout):
                    context.convert_event(event)
                    if isinstance(event, tcod.event.Quit):
                        self.running = False
                        break
                    self.active_state.dispatch(event)

                now = time.perf_counter()
                if self.running and now >= next_tick:
                    self.active_state.on_tick()
                    next_tick = now + FRAME_TIME
