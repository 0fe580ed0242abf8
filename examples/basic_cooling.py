#!/usr/bin/env python3
"""Basic container cooling example.

This script demonstrates how to run forced-air cooling simulations
using the pre-built scenarios and the diagnostics of the container facade.

Run with: uv run python examples/basic_cooling.py
"""

import numpy as np

from precool_sim.core.events import EventType, get_event_bus
from precool_sim.simulation.container import CoolingContainer
from precool_sim.simulation.engine import EngineConfig, SimulationEngine
from precool_sim.simulation.scenarios import (
    create_reefer_scenario,
    reference_parameters,
    reference_state,
)


def run_reference_scenario() -> None:
    """Cool the reference container section for 30 minutes."""
    print("=" * 60)
    print("REFERENCE SCENARIO: 2 zones x 2 layers")
    print("=" * 60)

    container = CoolingContainer(reference_state(), reference_parameters(), seed=42)
    print(f"Time step: {container.time_step:.3f}s")
    scales = container.time_scales()
    print(f"Limiting process: {scales.limiting} (CFL={scales.cfl:.3f})")
    print()

    history = container.simulate_for(1800.0)
    print(f"Completed {history.steps} steps")
    print()

    print("Product Temperature (every 5 minutes):")
    print("-" * 40)
    print(f"{'Minute':>8} {'Product':>10} {'Power':>10} {'TCPI':>8}")
    print("-" * 40)
    per_five = max(1, int(300 / container.time_step))
    for point in history.points[::per_five]:
        print(
            f"{point.t / 60:>8.1f} {point.average_product_temp:>10.2f} "
            f"{point.cooling_power:>10.0f} {point.tcpi:>8.3f}"
        )
    print("-" * 40)

    energy = container.energy_balance()
    moisture = container.moisture_balance()
    print(f"Energy removed: {-energy.energy_change / 1e6:.2f} MJ")
    print(f"Water condensed on coil: {moisture.cumulative_dehumidification:.3f} kg")
    report = container.validate_state()
    print(f"State valid: {report.is_valid}")
    print()


def run_reefer_scenario() -> None:
    """Pull down a loaded reefer with the engine and event telemetry."""
    print("=" * 60)
    print("REEFER SCENARIO: 40 ft container, 6 zones x 4 layers")
    print("=" * 60)

    state, params = create_reefer_scenario()
    container = CoolingContainer(state, params, seed=7, model="edge_aware")

    samples: list[tuple[float, float]] = []

    def on_state_update(event: object) -> None:
        data = getattr(event, "data", {})
        samples.append((data.get("t", 0.0), data.get("average_product_temp", 0.0)))

    bus = get_event_bus()
    bus.subscribe(EventType.STATE_UPDATE, on_state_update)

    interval = max(1, int(600 / container.time_step))
    engine = SimulationEngine(
        container, EngineConfig(duration=3600.0, emit_interval=interval)
    )
    print("Running simulation...")
    stats = engine.run()

    print()
    print(f"Completed {stats.steps_completed} steps in {stats.wall_time.total_seconds():.2f}s")
    print(f"Avg step time: {stats.avg_step_time:.3f}ms")
    print()
    for t, temp in samples:
        print(f"  t={t / 60:>6.1f} min  product={temp:.2f}C")

    final = container.current_state
    print(f"Final spread: {np.std(final.product_temp):.2f}K")
    print()


if __name__ == "__main__":
    run_reference_scenario()
    run_reefer_scenario()
