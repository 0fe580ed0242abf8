"""Run events for cooling simulations.

The engine publishes lifecycle, telemetry and alarm events on a
process-global bus. Observers subscribe per event type; the bus keeps a
bounded history so a finished run can be inspected afterwards.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Kinds of event published by a run."""

    SIMULATION_START = "simulation.start"
    SIMULATION_STOP = "simulation.stop"
    SIMULATION_ERROR = "simulation.error"

    STATE_UPDATE = "state.update"

    # Physical-bound breach reported by validate_state
    ALARM_VALIDATION = "alarm.validation"
    # CFL or Fourier limit exceeded
    ALARM_STABILITY = "alarm.stability"


@dataclass
class Event:
    """One published event.

    Attributes:
        event_type: Kind of event.
        source: Publisher name.
        data: Payload, e.g. the state summary or stability metrics.
        message: Human-readable description.
        timestamp: Wall-clock time of publication.
    """

    event_type: EventType
    source: str = "engine"
    data: dict[str, Any] = field(default_factory=dict)
    message: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


EventHandler = Callable[[Event], None]


class EventBus:
    """Per-type publish/subscribe with a bounded event history.

    Not thread-safe.
    """

    def __init__(self, *, max_history: int = 1000) -> None:
        self._handlers: dict[EventType, list[EventHandler]] = defaultdict(list)
        self._history: deque[Event] = deque(maxlen=max_history)

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Call ``handler`` for every event of ``event_type``.

        Subscribing the same handler twice has no effect.
        """
        handlers = self._handlers[event_type]
        if handler not in handlers:
            handlers.append(handler)

    def emit(self, event: Event) -> None:
        """Record an event and deliver it to its subscribers.

        A failing handler is logged and does not stop delivery to the rest.
        """
        self._history.append(event)
        for handler in list(self._handlers[event.event_type]):
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %r failed on %s from %s",
                    handler,
                    event.event_type.value,
                    event.source,
                )

    def history(self, event_type: EventType | None = None) -> list[Event]:
        """Recorded events, oldest first, optionally of one type only."""
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if e.event_type == event_type]


_global_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Return the process-global bus, creating it on first use."""
    global _global_bus
    if _global_bus is None:
        _global_bus = EventBus()
    return _global_bus


def reset_event_bus() -> None:
    """Drop the global bus with its handlers and history."""
    global _global_bus
    _global_bus = None


def emit_alarm(
    alarm_type: EventType,
    source: str,
    message: str,
    **data: Any,
) -> Event:
    """Publish an alarm on the global bus.

    Args:
        alarm_type: ``ALARM_VALIDATION`` or ``ALARM_STABILITY``.
        source: Publisher name.
        message: Description of the breach.
        **data: Details such as the simulated time and stability metrics.

    Returns:
        The published event.
    """
    event = Event(event_type=alarm_type, source=source, data=data, message=message)
    get_event_bus().emit(event)
    return event
