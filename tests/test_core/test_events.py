"""Tests for event system."""

from __future__ import annotations

from datetime import datetime

from precool_sim.core.events import (
    Event,
    EventBus,
    EventType,
    emit_alarm,
    get_event_bus,
    reset_event_bus,
)


class TestEventType:
    """Tests for EventType enum."""

    def test_simulation_events(self) -> None:
        """Simulation events exist."""
        assert EventType.SIMULATION_START.value == "simulation.start"
        assert EventType.SIMULATION_STOP.value == "simulation.stop"
        assert EventType.SIMULATION_ERROR.value == "simulation.error"

    def test_state_and_alarm_events(self) -> None:
        """State and alarm events exist."""
        assert EventType.STATE_UPDATE.value == "state.update"
        assert EventType.ALARM_VALIDATION.value == "alarm.validation"
        assert EventType.ALARM_STABILITY.value == "alarm.stability"


class TestEvent:
    """Tests for Event dataclass."""

    def test_creation(self) -> None:
        """Create event with all fields."""
        event = Event(
            event_type=EventType.STATE_UPDATE,
            source="engine",
            data={"tcpi": 0.9},
            message="State update",
        )

        assert event.event_type == EventType.STATE_UPDATE
        assert event.source == "engine"
        assert event.data == {"tcpi": 0.9}
        assert event.message == "State update"

    def test_default_timestamp(self) -> None:
        """Event gets automatic timestamp."""
        event = Event(event_type=EventType.SIMULATION_START)
        assert isinstance(event.timestamp, datetime)

    def test_default_source(self) -> None:
        """Events are attributed to the engine unless told otherwise."""
        event = Event(event_type=EventType.STATE_UPDATE)
        assert event.source == "engine"
        assert event.data == {}


class TestEventBus:
    """Tests for EventBus class."""

    def test_subscribe_and_emit(self) -> None:
        """Subscribe to events and receive them."""
        bus = EventBus()
        received: list[Event] = []

        bus.subscribe(EventType.SIMULATION_START, received.append)
        bus.emit(Event(event_type=EventType.SIMULATION_START))

        assert len(received) == 1
        assert received[0].event_type == EventType.SIMULATION_START

    def test_other_types_not_delivered(self) -> None:
        """Handlers only see the type they subscribed to."""
        bus = EventBus()
        received: list[Event] = []

        bus.subscribe(EventType.ALARM_STABILITY, received.append)
        bus.emit(Event(event_type=EventType.STATE_UPDATE))
        bus.emit(Event(event_type=EventType.ALARM_VALIDATION))

        assert received == []

    def test_subscribe_twice_delivers_once(self) -> None:
        """The same handler is registered once."""
        bus = EventBus()
        received: list[Event] = []

        bus.subscribe(EventType.STATE_UPDATE, received.append)
        bus.subscribe(EventType.STATE_UPDATE, received.append)
        bus.emit(Event(event_type=EventType.STATE_UPDATE))

        assert len(received) == 1

    def test_failing_handler_does_not_block_others(self) -> None:
        """Handler exceptions are logged, not propagated."""
        bus = EventBus()
        received: list[Event] = []

        def broken(event: Event) -> None:
            raise RuntimeError("boom")

        bus.subscribe(EventType.STATE_UPDATE, broken)
        bus.subscribe(EventType.STATE_UPDATE, received.append)
        bus.emit(Event(event_type=EventType.STATE_UPDATE))

        assert len(received) == 1

    def test_history_by_type(self) -> None:
        """History keeps every event in order and filters by type."""
        bus = EventBus()
        bus.emit(Event(event_type=EventType.SIMULATION_START))
        bus.emit(Event(event_type=EventType.STATE_UPDATE))
        bus.emit(Event(event_type=EventType.STATE_UPDATE))

        assert [e.event_type for e in bus.history()] == [
            EventType.SIMULATION_START,
            EventType.STATE_UPDATE,
            EventType.STATE_UPDATE,
        ]
        assert len(bus.history(EventType.STATE_UPDATE)) == 2
        assert bus.history(EventType.ALARM_STABILITY) == []

    def test_history_limit(self) -> None:
        """History respects max_history and drops the oldest events."""
        bus = EventBus(max_history=5)
        for i in range(10):
            bus.emit(Event(event_type=EventType.STATE_UPDATE, data={"i": i}))

        assert [e.data["i"] for e in bus.history()] == [5, 6, 7, 8, 9]


class TestGlobalEventBus:
    """Tests for global event bus functions."""

    def test_singleton(self) -> None:
        """get_event_bus returns the same instance."""
        assert get_event_bus() is get_event_bus()

    def test_reset(self) -> None:
        """reset_event_bus creates a fresh bus."""
        bus = get_event_bus()
        reset_event_bus()
        assert get_event_bus() is not bus

    def test_emit_alarm(self) -> None:
        """Alarms go to the global bus with their details."""
        received: list[Event] = []
        get_event_bus().subscribe(EventType.ALARM_VALIDATION, received.append)

        event = emit_alarm(EventType.ALARM_VALIDATION, "engine", "TCPI 1.2 outside [0, 1]", t=30.0)

        assert received == [event]
        assert event.data["t"] == 30.0
        assert event.message == "TCPI 1.2 outside [0, 1]"
