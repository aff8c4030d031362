"""
NodeLogger - nodelogger/events.py
Event bus and canonical event keys for session -> host communication.
====================================================================
Version:     0.1
Stack:       Python 3.14 | Pydantic v2 | bespoke pub-sub

Architecture notes
------------------
- The session controller never draws markers or prints messages itself. It
  publishes NodeEvents; the marker registry and the host's message log
  subscribe.
- Only keys listed in EVENT_KEYS (plus the wildcard "*") can be subscribed
  to or published. A typo in a key fails at registration, not silently.
- subscribe() hands back a Subscription; calling it detaches the handler.
- A failing handler is logged and skipped so the remaining handlers still run.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field

from nodelogger.grid import GridCoordinate

logger = logging.getLogger(__name__)


# ============================================================
# CANONICAL EVENT KEYS
# Never use raw strings. Add new keys here and to EVENT_KEYS.
# ============================================================

EVT_NODES_ADDED      = "nodes.added"       # cells entered the CellSet
EVT_NODES_REMOVED    = "nodes.removed"     # cells left the CellSet
EVT_CORNER_SET       = "corners.set"       # a fill corner is pending
EVT_CORNERS_CLEARED  = "corners.cleared"   # corner pair reset
EVT_NOTICE           = "session.notice"    # user-facing message
EVT_LOAD_FINISHED    = "session.load_finished"
EVT_SAVED            = "session.saved"

EVT_ANY = "*"

EVENT_KEYS = frozenset({
    EVT_NODES_ADDED,
    EVT_NODES_REMOVED,
    EVT_CORNER_SET,
    EVT_CORNERS_CLEARED,
    EVT_NOTICE,
    EVT_LOAD_FINISHED,
    EVT_SAVED,
})


class NodeEvent(BaseModel):
    """Envelope for everything the session publishes."""
    event_key: str
    cells: List[GridCoordinate] = Field(default_factory=list)
    message: Optional[str] = None
    count: Optional[int] = None


HandlerFn = Callable[[NodeEvent], None]


def _check_key(event_key: str, allow_wildcard: bool) -> None:
    if event_key in EVENT_KEYS or (allow_wildcard and event_key == EVT_ANY):
        return
    raise ValueError(f"Unknown event key: {event_key!r}")


class Subscription:
    """Handle returned by EventBus.subscribe(). Call it to detach."""

    def __init__(self, bus: "EventBus", event_key: str, handler: HandlerFn):
        self.bus = bus
        self.event_key = event_key
        self.handler = handler

    def __call__(self) -> None:
        self.bus.unsubscribe(self.event_key, self.handler)


class EventBus:
    """
    Keyed pub-sub. Pass the instance at construction, no global singleton.
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, List[HandlerFn]] = defaultdict(list)

    def subscribe(self, event_key: str, handler: HandlerFn) -> Subscription:
        _check_key(event_key, allow_wildcard=True)
        self._handlers[event_key].append(handler)
        return Subscription(self, event_key, handler)

    def subscribe_many(self, handlers: Mapping[str, HandlerFn]) -> List[Subscription]:
        return [self.subscribe(key, handler) for key, handler in handlers.items()]

    def unsubscribe(self, event_key: str, handler: HandlerFn) -> None:
        # Bound methods are rebuilt on every attribute access, so compare with ==
        remaining = [h for h in self._handlers.get(event_key, []) if h != handler]
        if remaining:
            self._handlers[event_key] = remaining
        else:
            self._handlers.pop(event_key, None)

    def handlers_for(self, event_key: str) -> Iterable[HandlerFn]:
        return tuple(self._handlers.get(event_key, ())) + tuple(self._handlers.get(EVT_ANY, ()))

    def emit(self, event: NodeEvent) -> None:
        _check_key(event.event_key, allow_wildcard=False)
        for handler in self.handlers_for(event.event_key):
            try:
                handler(event)
            except Exception:  # noqa: BLE001
                logger.exception("Handler error on '%s'", event.event_key)

    def publish(self, event_key: str, **fields: Any) -> NodeEvent:
        """Build the envelope from keyword fields and emit it."""
        event = NodeEvent(event_key=event_key, **fields)
        self.emit(event)
        return event

    def notify(self, message: str) -> None:
        """Shorthand for a user-facing notice."""
        self.publish(EVT_NOTICE, message=message)
