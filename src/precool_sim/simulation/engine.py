"""Cooling run engine.

The engine drives a CoolingContainer through the run loop:
1. Advance the container one step
2. Validate the new state
3. Raise alarms for violations and stability warnings
4. Emit telemetry events
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any

import numpy as np

from precool_sim.core.events import (
    Event,
    EventType,
    emit_alarm,
    get_event_bus,
)
from precool_sim.simulation.container import CoolingContainer, ValidationReport

logger = logging.getLogger(__name__)


class SimulationStatus(str, Enum):
    """Simulation status states."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass
class EngineConfig:
    """Configuration for the run engine.

    Attributes:
        duration: Simulated period in seconds (None for indefinite).
        validate_every: Validate the state every N steps (0 disables).
        emit_events: Whether to emit events to event bus.
        emit_interval: Minimum interval between event emissions in steps.
    """

    duration: float | None = None
    validate_every: int = 1
    emit_events: bool = True
    emit_interval: int = 1  # Emit every N steps


@dataclass
class SimulationStats:
    """Statistics from simulation run.

    Attributes:
        steps_completed: Number of time steps completed.
        simulation_time: Total simulated time.
        wall_time: Actual elapsed time.
        alarms: Number of alarm events raised.
        avg_step_time: Average wall time per step.
    """

    steps_completed: int = 0
    simulation_time: timedelta = field(default_factory=timedelta)
    wall_time: timedelta = field(default_factory=timedelta)
    alarms: int = 0

    @property
    def avg_step_time(self) -> float:
        """Average wall time per step in milliseconds."""
        if self.steps_completed == 0:
            return 0.0
        return self.wall_time.total_seconds() * 1000 / self.steps_completed

    def to_dict(self) -> dict[str, Any]:
        """Convert to plain data for event payloads."""
        return {
            "steps_completed": self.steps_completed,
            "simulation_seconds": self.simulation_time.total_seconds(),
            "wall_seconds": self.wall_time.total_seconds(),
            "alarms": self.alarms,
        }


class SimulationEngine:
    """Run loop around a cooling container.

    Tracks status and statistics, validates each step and publishes
    telemetry on the global event bus.
    """

    def __init__(
        self,
        container: CoolingContainer,
        config: EngineConfig | None = None,
    ) -> None:
        """Initialize simulation engine.

        Args:
            container: Container to advance.
            config: Engine configuration.
        """
        self._container = container
        self._config = config or EngineConfig()
        if self._config.emit_interval < 1:
            msg = f"emit_interval must be at least 1, got {self._config.emit_interval}"
            raise ValueError(msg)

        self._status = SimulationStatus.IDLE
        self._stats = SimulationStats()
        self._step_count = 0
        self._start_time = container.current_state.t
        self._last_report: ValidationReport | None = None

        self._event_bus = get_event_bus()

    @property
    def container(self) -> CoolingContainer:
        """Container being simulated."""
        return self._container

    @property
    def status(self) -> SimulationStatus:
        """Current simulation status."""
        return self._status

    @property
    def stats(self) -> SimulationStats:
        """Simulation statistics."""
        return self._stats

    @property
    def last_report(self) -> ValidationReport | None:
        """Validation report of the most recent check."""
        return self._last_report

    @property
    def elapsed(self) -> float:
        """Simulated seconds since the engine started."""
        return self._container.current_state.t - self._start_time

    def _finished(self) -> bool:
        duration = self._config.duration
        if duration is None:
            return False
        # Stop once another step would not fit more than rounding error
        return self.elapsed >= duration - 1e-9 * max(1.0, duration)

    def _check_state(self) -> None:
        """Validate the state and raise alarms for any problems."""
        report = self._container.validate_state()
        self._last_report = report
        t = self._container.current_state.t

        for violation in report.violations:
            logger.warning("Validation failed at t=%.1fs: %s", t, violation)
            self._stats.alarms += 1
            if self._config.emit_events:
                emit_alarm(EventType.ALARM_VALIDATION, "engine", violation, t=t)

        for warning in report.warnings:
            logger.warning("Stability warning at t=%.1fs: %s", t, warning)
            self._stats.alarms += 1
            if self._config.emit_events:
                emit_alarm(EventType.ALARM_STABILITY, "engine", warning, t=t, **report.metrics)

    def _emit_telemetry(self) -> None:
        """Emit simulation telemetry events."""
        if not self._config.emit_events:
            return

        if self._step_count % self._config.emit_interval != 0:
            return

        state = self._container.current_state
        self._event_bus.emit(
            Event(
                event_type=EventType.STATE_UPDATE,
                source="engine",
                data={
                    "t": state.t,
                    "average_product_temp": float(np.mean(state.product_temp)),
                    "air_temp": list(state.air_temp),
                    "air_humidity": list(state.air_humidity),
                    "tcpi": state.tcpi,
                    "cooling_power": state.cooling_power,
                },
                message="State update",
            )
        )

    def step(self) -> bool:
        """Execute a single simulation step.

        Returns:
            True if simulation should continue, False if finished.
        """
        if self._status == SimulationStatus.STOPPED:
            return False

        if self._finished():
            self._status = SimulationStatus.STOPPED
            return False

        self._container.next_step()
        self._step_count += 1
        self._stats.steps_completed += 1
        self._stats.simulation_time += timedelta(seconds=self._container.time_step)

        every = self._config.validate_every
        if every > 0 and self._step_count % every == 0:
            self._check_state()

        self._emit_telemetry()
        return True

    def run(self, steps: int | None = None) -> SimulationStats:
        """Run simulation for a number of steps or until the duration elapses.

        Args:
            steps: Number of steps to run (None = until duration).

        Returns:
            Simulation statistics.

        Raises:
            ValueError: If neither steps nor a duration bounds the run.
        """
        if steps is None and self._config.duration is None:
            msg = "Either steps or a configured duration is required"
            raise ValueError(msg)

        self._status = SimulationStatus.RUNNING
        self._emit_start_event()

        start_wall = time.perf_counter()
        step_counter = 0

        try:
            while True:
                if steps is not None and step_counter >= steps:
                    break

                if not self.step():
                    break

                step_counter += 1

        except Exception as e:
            self._status = SimulationStatus.ERROR
            logger.exception("Simulation failed after %d steps", self._step_count)
            self._emit_error_event(str(e))
            raise

        finally:
            end_wall = time.perf_counter()
            self._stats.wall_time += timedelta(seconds=end_wall - start_wall)
            self._emit_stop_event()

        self._status = SimulationStatus.STOPPED
        logger.info(
            "Run finished: %d steps, %.1fs simulated in %.3fs",
            self._stats.steps_completed,
            self._stats.simulation_time.total_seconds(),
            self._stats.wall_time.total_seconds(),
        )
        return self._stats

    def _emit_start_event(self) -> None:
        """Emit simulation start event."""
        if not self._config.emit_events:
            return
        self._event_bus.emit(
            Event(
                event_type=EventType.SIMULATION_START,
                source="engine",
                data={"t": self._container.current_state.t, "dt": self._container.time_step},
                message=f"Simulation started at t={self._container.current_state.t:.1f}s",
            )
        )

    def _emit_stop_event(self) -> None:
        """Emit simulation stop event."""
        if not self._config.emit_events:
            return
        self._event_bus.emit(
            Event(
                event_type=EventType.SIMULATION_STOP,
                source="engine",
                data={"stats": self._stats.to_dict()},
                message=f"Simulation stopped after {self._stats.steps_completed} steps",
            )
        )

    def _emit_error_event(self, error: str) -> None:
        """Emit simulation error event."""
        if not self._config.emit_events:
            return
        self._event_bus.emit(
            Event(
                event_type=EventType.SIMULATION_ERROR,
                source="engine",
                data={"error": error},
                message=f"Simulation error: {error}",
            )
        )

    def reset(self) -> None:
        """Reset the container and the engine to the initial state."""
        self._container.reset()
        self._start_time = self._container.current_state.t
        self._step_count = 0
        self._stats = SimulationStats()
        self._status = SimulationStatus.IDLE
        self._last_report = None
