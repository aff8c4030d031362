"""
NodeLogger - ui/renderer.py
TCOD Renderer: root console and the helpers the screens draw with.
"""

from __future__ import annotations
from typing import Optional, Sequence, Tuple
import tcod

Color = Tuple[int, int, int]


class Renderer:
    """
    Manages the tcod root console and rendering loop.
    """
    def __init__(self, width: int, height: int, title: str = "NodeLogger"):
        self.width = width
        self.height = height
        self.title = title
        self.root_console = tcod.console.Console(width, height)
        self.context: Optional[tcod.context.Context] = None

    def clear(self) -> None:
        """Clear the console with black."""
        self.root_console.clear()

    def present(self, context: tcod.context.Context) -> None:
        """Present the current console to the screen."""
        context.present(self.root_console)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def put(self, x: int, y: int, ch: str, fg: Color) -> None:
        """Draw one glyph, silently clipping anything off-screen."""
        if self.in_bounds(x, y):
            self.root_console.print(x, y, ch, fg=fg)

    def print_lines(self, x: int, y: int, lines: Sequence[str], fg: Color = (200, 200, 200)) -> None:
        for i, line in enumerate(lines):
            if self.in_bounds(x, y + i):
                self.root_console.print(x, y + i, line[: self.width - x], fg=fg)
