"""
NodeLogger - nodelogger/session.py
Session controller: command/tick state machine over the logging core.
=====================================================================
Version:     0.1
Stack:       Python 3.14 | bespoke EventBus
Status:      Integration entry point for hosts.

Architecture notes
------------------
- All session state lives in SessionContext. There are no module globals.
- The host supplies a HostServices object and calls handle(command) for each
  discrete input plus tick() once per frame.
- State is derived from the context flags:
      loading                       -> LOADING
      paused with a pending corner  -> SETTING_CORNERS
      paused                        -> PAUSED
      logging                       -> LOGGING
      otherwise                     -> IDLE
- A load runs as a cooperative task. Each tick() advances it to its next
  progress checkpoint. While it runs every command is rejected.
- This class is the error boundary: NodeLoggerError subclasses are turned into
  notices and log records here and never reach the host.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Protocol, Sequence

from nodelogger import node_map
from nodelogger.cells import (
    CellSet,
    CornerPair,
    HistoryStack,
    fill_region,
    log_point,
    remove_nodes,
    undo_last,
)
from nodelogger.config import NodeLoggerConfig, get_config
from nodelogger.errors import NodeMapIOError, NodeMapNotFound, NoHistory
from nodelogger.events import (
    EVT_CORNER_SET,
    EVT_CORNERS_CLEARED,
    EVT_LOAD_FINISHED,
    EVT_NODES_ADDED,
    EVT_NODES_REMOVED,
    EVT_SAVED,
    EventBus,
)
from nodelogger.grid import GridCoordinate, Vec3, to_grid, to_grid_many

logger = logging.getLogger(__name__)

# ============================================================
# USER-FACING MESSAGES
# ============================================================

PAUSED_LOGGING_MESSAGE = "Logging positions paused..."
UNPAUSED_LOGGING_MESSAGE = "Logging positions unpaused..."
STARTED_LOGGING_MESSAGE = "Started logging valid positions..."
STOPPED_LOGGING_MESSAGE = "Stopped logging valid positions. Saving to file..."
SAVE_FAILED_MESSAGE = "Could not save nodes to {0}"
SET_CORNER_A_MESSAGE = "Corner A set. Please set Corner B."
SET_CORNER_B_MESSAGE = "Corner B set. Logging surface nodes..."
SURFACE_LOGGED_MESSAGE = "Surface nodes logged successfully."
NO_NODES_TO_REMOVE_MESSAGE = "No nodes to remove."
NODES_REMOVED_MESSAGE = "Last logged nodes removed."
REMOVING_NODE_MESSAGE = "Removing node in {0}"
PRACTICE_MODE_DETECTED_MESSAGE = "Practice mode detected, NodeLogging enabled!"
LOADING_NODES_MESSAGE = "Starting node map loading..."
LOADED_NODES_PROGRESS_MESSAGE = "Loaded {0} nodes..."
FINISHED_LOADING_NODES_MESSAGE = "Finished loading nodes. Total loaded: {0}"
NO_FILE_FOUND_MESSAGE = "File not found: {0}"
LOAD_FAILED_MESSAGE = "Could not read node map {0}"


class Command(Enum):
    """Discrete host inputs. Values match the KeyBindingsDef field names."""
    TOGGLE_PAUSE = "toggle_pause"
    TOGGLE_LOGGING = "toggle_logging"
    SET_CORNER = "set_corner"
    UNDO = "undo"
    LOAD = "load"
    REMOVE_SELECTED = "remove_selected"


class SessionState(Enum):
    IDLE = "idle"
    LOGGING = "logging"
    PAUSED = "paused"
    SETTING_CORNERS = "setting_corners"
    LOADING = "loading"


class HostServices(Protocol):
    """What the session needs from its host."""

    def observer_position(self) -> Optional[Vec3]:
        """Current observer position, or None while there is no observer."""
        ...

    def map_id(self) -> Any:
        ...

    def mode_id(self) -> int:
        ...

    def selected_positions(self) -> Sequence[Vec3]:
        """World positions of the markers the user currently has targeted."""
        ...


@dataclass
class SessionContext:
    cells: CellSet = field(default_factory=CellSet)
    history: HistoryStack = field(default_factory=HistoryStack)
    corners: CornerPair = field(default_factory=CornerPair)
    logging: bool = False
    paused: bool = False
    loading: bool = False
    node_map_file: Optional[Path] = None


class SessionController:
    """
    Drives one logging session.

    Usage:
        bus = EventBus()
        MarkerRegistry(config.cell_size).attach(bus)
        session = SessionController(host, bus, config)
        # per input:  session.handle(Command.SET_CORNER)
        # per frame:  session.tick()
    """

    def __init__(
        self,
        host: HostServices,
        bus: EventBus,
        config: Optional[NodeLoggerConfig] = None,
        context: Optional[SessionContext] = None,
    ) -> None:
        self.host = host
        self.bus = bus
        self.config = config if config is not None else get_config()
        self.context = context if context is not None else SessionContext()

        self._load_task: Optional[node_map.LoadTask] = None
        self._load_buffer: List[GridCoordinate] = []

        # Gate is evaluated once. A session started in the wrong mode stays inert.
        self.enabled = host.mode_id() == self.config.enabled_mode_id
        if self.enabled:
            self.bus.notify(PRACTICE_MODE_DETECTED_MESSAGE)
        else:
            logger.info("Mode %s is not %s, node logging disabled", host.mode_id(), self.config.enabled_mode_id)

    @property
    def state(self) -> SessionState:
        ctx = self.context
        if ctx.loading:
            return SessionState.LOADING
        if ctx.paused:
            return SessionState.SETTING_CORNERS if ctx.corners.pending else SessionState.PAUSED
        if ctx.logging:
            return SessionState.LOGGING
        return SessionState.IDLE

    # ----------------------------------------------------------
    # Public API
    # ----------------------------------------------------------

    def handle(self, command: Command) -> bool:
        """Apply one command. Returns False when the command was ignored."""
        if not self.enabled or self.context.loading:
            return False

        if command is Command.TOGGLE_PAUSE:
            self._toggle_pause()
        elif command is Command.TOGGLE_LOGGING:
            self._toggle_logging()
        elif command is Command.SET_CORNER:
            if not self.context.paused:
                return False
            self._set_corner()
        elif command is Command.UNDO:
            if not self.context.paused:
                return False
            self._undo()
        elif command is Command.LOAD:
            self._start_load()
        elif command is Command.REMOVE_SELECTED:
            self._remove_selected()
        else:
            return False
        return True

    def tick(self) -> None:
        """Per-frame update: advance a running load, or log the observer's cell."""
        if not self.enabled:
            return
        ctx = self.context
        if ctx.loading:
            self._advance_load()
            return
        if not ctx.logging or ctx.paused:
            return

        position = self.host.observer_position()
        if position is None:
            return
        batch = log_point(position, ctx.cells, ctx.history, self.config.cell_size)
        if batch:
            self.bus.publish(EVT_NODES_ADDED, cells=batch)

    def save(self) -> bool:
        """Write the cell set to the current node-map file. Never raises."""
        ctx = self.context
        if ctx.node_map_file is None:
            ctx.node_map_file = self._resolve_node_map_file()
        try:
            count = node_map.save(ctx.node_map_file, ctx.cells)
        except NodeMapIOError as exc:
            logger.error("Error [SaveLoggedPositions]: %s", exc)
            self.bus.notify(SAVE_FAILED_MESSAGE.format(ctx.node_map_file))
            return False
        self.bus.publish(EVT_SAVED, count=count)
        return True

    # ----------------------------------------------------------
    # Command handlers
    # ----------------------------------------------------------

    def _toggle_pause(self) -> None:
        ctx = self.context
        ctx.paused = not ctx.paused
        self.bus.notify(PAUSED_LOGGING_MESSAGE if ctx.paused else UNPAUSED_LOGGING_MESSAGE)

    def _toggle_logging(self) -> None:
        ctx = self.context
        if ctx.logging:
            ctx.logging = False
            ctx.paused = False
            self.bus.notify(STOPPED_LOGGING_MESSAGE)
            self.save()
            return

        if ctx.node_map_file is None:
            ctx.node_map_file = self._resolve_node_map_file()
        ctx.logging = True
        ctx.paused = False
        self.bus.notify(STARTED_LOGGING_MESSAGE)

    def _set_corner(self) -> None:
        position = self.host.observer_position()
        if position is None:
            return
        ctx = self.context
        cell = to_grid(position, self.config.cell_size)
        pair = ctx.corners.advance(cell)
        self.bus.publish(EVT_CORNER_SET, cells=[cell])

        if pair is None:
            self.bus.notify(SET_CORNER_A_MESSAGE)
            return

        self.bus.notify(SET_CORNER_B_MESSAGE)
        batch = fill_region(pair[0], pair[1], ctx.cells, ctx.history)
        if batch:
            self.bus.publish(EVT_NODES_ADDED, cells=batch)
        self.bus.publish(EVT_CORNERS_CLEARED)
        self.bus.notify(SURFACE_LOGGED_MESSAGE)

    def _undo(self) -> None:
        ctx = self.context
        try:
            batch = undo_last(ctx.history, ctx.cells)
        except NoHistory:
            self.bus.notify(NO_NODES_TO_REMOVE_MESSAGE)
        else:
            if batch:
                self.bus.publish(EVT_NODES_REMOVED, cells=batch)
            self.bus.notify(NODES_REMOVED_MESSAGE)

        ctx.corners.reset()
        self.bus.publish(EVT_CORNERS_CLEARED)

    def _remove_selected(self) -> None:
        targets = to_grid_many(self.host.selected_positions(), self.config.cell_size)
        for cell in targets:
            self.bus.notify(REMOVING_NODE_MESSAGE.format(cell))
        removed = remove_nodes(targets, self.context.cells)
        if removed:
            self.bus.publish(EVT_NODES_REMOVED, cells=removed)

    # ----------------------------------------------------------
    # Loading
    # ----------------------------------------------------------

    def _start_load(self) -> None:
        ctx = self.context
        ctx.paused = True
        ctx.logging = True
        ctx.node_map_file = self._resolve_node_map_file()

        try:
            task = node_map.load_incremental(
                ctx.node_map_file,
                ctx.cells,
                progress_every=self.config.progress_every,
                progress_callback=self._on_load_progress,
                on_insert=self._load_buffer.append,
                on_complete=self._on_load_complete,
            )
        except NodeMapNotFound as exc:
            self.bus.notify(NO_FILE_FOUND_MESSAGE.format(exc.path))
            return
        except NodeMapIOError as exc:
            logger.error("Error [LoadNodeMap]: %s", exc)
            self.bus.notify(LOAD_FAILED_MESSAGE.format(exc.path))
            return

        self._load_task = task
        ctx.loading = True
        self.bus.notify(LOADING_NODES_MESSAGE)

    def _advance_load(self) -> None:
        if self._load_task is None:
            self.context.loading = False
            return
        try:
            next(self._load_task)
        except StopIteration:
            self._load_task = None
            self.context.loading = False

    def _flush_load_buffer(self) -> None:
        if self._load_buffer:
            self.bus.publish(EVT_NODES_ADDED, cells=list(self._load_buffer))
            self._load_buffer.clear()

    def _on_load_progress(self, count: int) -> None:
        self._flush_load_buffer()
        self.bus.notify(LOADED_NODES_PROGRESS_MESSAGE.format(count))

    def _on_load_complete(self, total: int) -> None:
        self._flush_load_buffer()
        self.bus.notify(FINISHED_LOADING_NODES_MESSAGE.format(total))
        self.bus.publish(EVT_LOAD_FINISHED, count=total)

    def _resolve_node_map_file(self) -> Path:
        return self.config.node_map_path(self.host.map_id())
