from __future__ import annotations

import time
from collections import deque
from typing import Any

# Oldest events are dropped once the log is full.
MAX_EVENTS = 10_000

_events: deque[dict[str, Any]] = deque(maxlen=MAX_EVENTS)


def record_event(event_type: str, data: dict[str, Any]) -> None:
    _events.append({"type": event_type, "timestamp": time.time(), **data})


def get_events() -> list[dict[str, Any]]:
    """Return a snapshot of the recorded events, oldest first."""
    return list(_events)


def clear_events() -> None:
    _events.clear()
