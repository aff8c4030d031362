"""
NodeLogger - nodelogger/cells.py
Logged-cell state: CellSet, batch history, and the operations that mutate them.
===============================================================================
Version:     0.1
Stack:       Python 3.14
Status:      Core logic. No host, marker or file code belongs here.

Architecture notes
------------------
- Every logging action (one manual point or one whole region fill) produces
  exactly one Batch on the HistoryStack. Undo pops and reverts one Batch.
- A Batch only ever contains cells that the action itself inserted, so undo
  never removes a cell that was logged by an earlier action.
- remove_nodes() is a separate, non-undoable deletion path. It never touches
  history.
- These functions return the affected cells; creating or destroying markers
  for them is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from nodelogger.errors import NoHistory
from nodelogger.grid import GridCoordinate, iter_box, to_grid

Batch = List[GridCoordinate]


class CellSet:
    """
    Set of logged cells. Backed by a dict so iteration follows insertion order,
    which keeps saved node maps stable for a given session.
    """

    def __init__(self, cells: Iterable[GridCoordinate] = ()):
        self._cells: Dict[GridCoordinate, bool] = {}
        for cell in cells:
            self.add(cell)

    def add(self, cell: GridCoordinate) -> bool:
        """Insert if absent. Returns True only when the cell was new."""
        if cell in self._cells:
            return False
        self._cells[cell] = True
        return True

    def discard(self, cell: GridCoordinate) -> bool:
        """Remove if present. Returns True only when something was removed."""
        return self._cells.pop(cell, None) is not None

    def __contains__(self, cell: object) -> bool:
        return cell in self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[GridCoordinate]:
        return iter(self._cells)

    def __repr__(self) -> str:
        return f"CellSet({len(self._cells)} cells)"


class HistoryStack:
    """LIFO of batches. The top is the most recent action not yet undone."""

    def __init__(self) -> None:
        self._batches: List[Batch] = []

    def push(self, batch: Batch) -> None:
        self._batches.append(list(batch))

    def pop(self) -> Batch:
        if not self._batches:
            raise NoHistory("Nothing to undo")
        return self._batches.pop()

    def sizes(self) -> List[int]:
        """Batch sizes, oldest first."""
        return [len(b) for b in self._batches]

    def __len__(self) -> int:
        return len(self._batches)

    def __bool__(self) -> bool:
        return bool(self._batches)


@dataclass
class CornerPair:
    """
    Two-slot corner buffer for region fills.
    The second advance() hands back both corners and empties the buffer,
    so the pair is never observed with both slots set.
    """
    corner_a: Optional[GridCoordinate] = None

    @property
    def pending(self) -> bool:
        return self.corner_a is not None

    def advance(self, cell: GridCoordinate) -> Optional[Tuple[GridCoordinate, GridCoordinate]]:
        if self.corner_a is None:
            self.corner_a = cell
            return None
        pair = (self.corner_a, cell)
        self.corner_a = None
        return pair

    def reset(self) -> None:
        self.corner_a = None


# ============================================================
# LOGGING OPERATIONS
# ============================================================

def log_point(
    position: Sequence[float],
    cells: CellSet,
    history: HistoryStack,
    cell_size: float,
) -> Optional[Batch]:
    """
    Log the cell under `position`.
    Returns the one-element batch, or None if the cell was already logged
    (in which case history is left alone).
    """
    cell = to_grid(position, cell_size)
    if not cells.add(cell):
        return None
    batch = [cell]
    history.push(batch)
    return batch


def fill_region(
    corner_a: GridCoordinate,
    corner_b: GridCoordinate,
    cells: CellSet,
    history: HistoryStack,
) -> Batch:
    """
    Insert every unlogged cell of the inclusive box between two corners.

    The returned batch holds exactly the newly inserted cells, in x/y/z
    ascending order. It is pushed onto history even when empty so that each
    completed corner pair maps to one history entry.
    """
    batch: Batch = [cell for cell in iter_box(corner_a, corner_b) if cells.add(cell)]
    history.push(batch)
    return batch


def undo_last(history: HistoryStack, cells: CellSet) -> Batch:
    """
    Revert the most recent logging action.
    Raises NoHistory when the stack is empty. Cells of the batch that are no
    longer in the set (removed through remove_nodes) are skipped.
    """
    batch = history.pop()
    for cell in batch:
        cells.discard(cell)
    return batch


def remove_nodes(targets: Iterable[GridCoordinate], cells: CellSet) -> List[GridCoordinate]:
    """Remove the given cells. Absent targets are skipped. Not undoable."""
    return [cell for cell in targets if cells.discard(cell)]
