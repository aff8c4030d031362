"""
NodeLogger - nodelogger/node_map.py
Node-map persistence: plain-text save and incremental, merging load.
====================================================================
Version:     0.1
Stack:       Python 3.14 | stdlib pathlib/re
Status:      Core persistence layer.

File format
-----------
  One cell per line, written as "(x, y, z)". No header, no footer, no count.
  On load, surrounding whitespace and the brackets are stripped, the rest is
  split on "," and each part must be a signed ASCII decimal integer
  (whitespace around it is tolerated). Anything else, undecodable bytes
  included, is a malformed line and is skipped.

Load model
----------
  load_incremental() checks the path and reads the file up front, then hands
  back a generator. Driving that generator performs the merge. After every
  `progress_every`-th NEW cell the generator yields the running count, which
  is the point where the host gets its frame back. The generator's return
  value (StopIteration.value) is the total number of cells added.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Generator, Iterable, List, Optional

from nodelogger.cells import CellSet
from nodelogger.errors import MalformedLine, NodeMapIOError, NodeMapNotFound
from nodelogger.grid import GridCoordinate

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_EVERY: int = 10

_INT_PART = re.compile(r"\s*[+-]?[0-9]+\s*")

LoadTask = Generator[int, None, int]


def format_line(cell: GridCoordinate) -> str:
    return str(cell)


def parse_line(line: str) -> GridCoordinate:
    """Parse one node-map line. Raises MalformedLine."""
    parts = line.strip().strip("()").split(",")
    if len(parts) != 3 or not all(_INT_PART.fullmatch(p) for p in parts):
        raise MalformedLine(line)
    x, y, z = (int(p) for p in parts)
    return GridCoordinate(x, y, z)


def save(path: Path, cells: Iterable[GridCoordinate]) -> int:
    """
    Overwrite `path` with one line per cell. Returns the number of lines written.
    Raises NodeMapIOError if the file cannot be opened or written.
    """
    path = Path(path)
    count = 0
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as fh:
            for cell in cells:
                fh.write(format_line(cell) + "\n")
                count += 1
    except OSError as exc:
        raise NodeMapIOError(path, exc.strerror or str(exc)) from exc
    logger.info("Saved %d nodes to %s", count, path)
    return count


def read_lines(path: Path) -> List[str]:
    path = Path(path)
    if not path.is_file():
        raise NodeMapNotFound(path)
    try:
        # Undecodable bytes become U+FFFD so only that line fails to parse
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as exc:
        raise NodeMapIOError(path, str(exc)) from exc


def load_incremental(
    path: Path,
    cells: CellSet,
    progress_every: int = DEFAULT_PROGRESS_EVERY,
    progress_callback: Optional[Callable[[int], None]] = None,
    on_insert: Optional[Callable[[GridCoordinate], None]] = None,
    on_complete: Optional[Callable[[int], None]] = None,
) -> LoadTask:
    """
    Start merging a node-map file into `cells`.

    Raises NodeMapNotFound / NodeMapIOError immediately. Otherwise returns
    the cooperative load task described in the module docstring. Cells
    already in `cells` are never re-inserted and never counted.
    """
    if progress_every < 1:
        raise ValueError(f"progress_every must be >= 1, got {progress_every}")
    lines = read_lines(path)
    logger.info("Loading %d lines from %s", len(lines), path)
    return _merge_lines(lines, cells, progress_every, progress_callback, on_insert, on_complete)


def _merge_lines(
    lines: List[str],
    cells: CellSet,
    progress_every: int,
    progress_callback: Optional[Callable[[int], None]],
    on_insert: Optional[Callable[[GridCoordinate], None]],
    on_complete: Optional[Callable[[int], None]],
) -> LoadTask:
    count = 0
    skipped = 0
    for line in lines:
        try:
            cell = parse_line(line)
        except MalformedLine:
            skipped += 1
            continue
        if not cells.add(cell):
            continue
        count += 1
        if on_insert is not None:
            on_insert(cell)
        if count % progress_every == 0:
            if progress_callback is not None:
                progress_callback(count)
            yield count

    if skipped:
        logger.debug("Skipped %d malformed lines", skipped)
    if on_complete is not None:
        on_complete(count)
    return count


def load(path: Path, cells: CellSet, progress_every: int = DEFAULT_PROGRESS_EVERY) -> int:
    """Blocking load: run the whole task and return the number of cells added."""
    task = load_incremental(path, cells, progress_every=progress_every)
    while True:
        try:
            next(task)
        except StopIteration as stop:
            return stop.value
