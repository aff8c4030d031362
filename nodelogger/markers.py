"""
NodeLogger - nodelogger/markers.py
Marker bookkeeping: one visual marker per logged cell, plus pending-corner markers.
==================================================================================
Version:     0.1
Stack:       Python 3.14 | python-tcod-ecs

Markers are tcod.ecs entities carrying a Marker component. The registry keeps
a direct GridCoordinate -> entity map for node markers, so removing the marker
for a cell is a dict lookup instead of a scan over every marker's position.
Corner markers live in their own map: they share a cell with a node marker
when a corner lands on an already logged cell, and must not shadow it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import tcod.ecs

from nodelogger.events import (
    EVT_CORNER_SET,
    EVT_CORNERS_CLEARED,
    EVT_NODES_ADDED,
    EVT_NODES_REMOVED,
    EventBus,
    NodeEvent,
    Subscription,
)
from nodelogger.grid import GridCoordinate, Vec3, to_world

Color = Tuple[int, int, int]

NODE_COLOR: Color = (0, 255, 0)
CORNER_COLOR: Color = (255, 0, 0)

KIND_NODE = "node"
KIND_CORNER = "corner"


@dataclass
class Marker:
    cell: GridCoordinate
    world_position: Vec3
    color: Color
    kind: str  # KIND_NODE | KIND_CORNER


class MarkerRegistry:
    """
    Owns the marker entities. Subscribe it to a session's EventBus with
    attach() and it follows the CellSet automatically.
    """

    def __init__(self, cell_size: float, registry: Optional[tcod.ecs.Registry] = None):
        self.cell_size = cell_size
        self.registry = registry if registry is not None else tcod.ecs.Registry()
        self._nodes: Dict[GridCoordinate, tcod.ecs.Entity] = {}
        self._corners: Dict[GridCoordinate, tcod.ecs.Entity] = {}

    def attach(self, bus: EventBus) -> List[Subscription]:
        return bus.subscribe_many({
            EVT_NODES_ADDED: self._on_nodes_added,
            EVT_NODES_REMOVED: self._on_nodes_removed,
            EVT_CORNER_SET: self._on_corner_set,
            EVT_CORNERS_CLEARED: self._on_corners_cleared,
        })

    # ----------------------------------------------------------
    # Public API
    # ----------------------------------------------------------

    def create_node(self, cell: GridCoordinate) -> tcod.ecs.Entity:
        existing = self._nodes.get(cell)
        if existing is not None:
            return existing
        entity = self._spawn(cell, NODE_COLOR, KIND_NODE)
        self._nodes[cell] = entity
        return entity

    def destroy_node(self, cell: GridCoordinate) -> bool:
        entity = self._nodes.pop(cell, None)
        if entity is None:
            return False
        entity.clear()
        return True

    def create_corner(self, cell: GridCoordinate) -> tcod.ecs.Entity:
        existing = self._corners.get(cell)
        if existing is not None:
            return existing
        entity = self._spawn(cell, CORNER_COLOR, KIND_CORNER)
        self._corners[cell] = entity
        return entity

    def clear_corners(self) -> None:
        for entity in self._corners.values():
            entity.clear()
        self._corners.clear()

    def has_node(self, cell: GridCoordinate) -> bool:
        return cell in self._nodes

    def node_cells(self) -> List[GridCoordinate]:
        return list(self._nodes)

    def corner_cells(self) -> List[GridCoordinate]:
        return list(self._corners)

    def markers(self) -> List[Marker]:
        """Every live marker, corners included."""
        return [e.components[Marker] for e in self.registry.Q.all_of(components=[Marker])]

    def __len__(self) -> int:
        return len(self._nodes)

    # ----------------------------------------------------------
    # Internal
    # ----------------------------------------------------------

    def _spawn(self, cell: GridCoordinate, color: Color, kind: str) -> tcod.ecs.Entity:
        entity = self.registry.new_entity()
        entity.components[Marker] = Marker(
            cell=cell,
            world_position=to_world(cell, self.cell_size),
            color=color,
            kind=kind,
        )
        return entity

    def _on_nodes_added(self, event: NodeEvent) -> None:
        for cell in event.cells:
            self.create_node(cell)

    def _on_nodes_removed(self, event: NodeEvent) -> None:
        for cell in event.cells:
            self.destroy_node(cell)

    def _on_corner_set(self, event: NodeEvent) -> None:
        for cell in event.cells:
            self.create_corner(cell)

    def _on_corners_cleared(self, event: NodeEvent) -> None:
        self.clear_corners()
