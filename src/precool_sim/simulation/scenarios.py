"""Pre-built cooling scenarios for testing and demonstration.

Scenarios provide complete parameter sets and initial states that can be
quickly loaded and run:

- Reference: a small 2-zone, 2-layer container used throughout the tests.
- Reefer: a 40 ft refrigerated container loaded with a uniform pallet stack.
"""

from __future__ import annotations

from collections.abc import Sequence

from precool_sim.core.state import SystemParameters, SystemState


def uniform_grid(value: float, zones: int, layers: int) -> list[list[float]]:
    """Build a zones x layers grid filled with one value."""
    return [[float(value)] * layers for _ in range(zones)]


def edge_exposure_grid(
    zones: int,
    layers: int,
    *,
    inlet: float = 1.0,
    decay: float = 0.8,
) -> list[list[float]]:
    """Build a position-factor grid that decays downstream and upward.

    The inlet cell of the bottom layer sees the full airstream; each zone
    downstream and each layer up multiplies exposure by ``decay``.

    Examples:
        >>> edge_exposure_grid(2, 2)
        [[1.0, 0.8], [0.8, 0.6400000000000001]]
    """
    return [[inlet * decay ** (i + j) for j in range(layers)] for i in range(zones)]


def reference_parameters(**overrides: object) -> SystemParameters:
    """Create the reference 2 x 2 container parameters.

    A 12 m container section with 100 kg of product per cell, a 10 kW
    cooling unit and a 5 °C coil.

    Args:
        **overrides: Field values replacing the reference ones.

    Returns:
        Configured SystemParameters.
    """
    values: dict[str, object] = {
        "zones": 2,
        "layers": 2,
        "container_length": 12.0,
        "container_width": 2.4,
        "container_height": 2.6,
        "product_mass": uniform_grid(100.0, 2, 2),
        "product_area": uniform_grid(5.0, 2, 2),
        "specific_heat": 3800.0,
        "water_activity": 0.95,
        "respiration_rate": 2e-8,
        "respiration_temp_coeff": 0.1,
        "respiration_ref_temp": 10.0,
        "respiration_enthalpy": 10.7e6,
        "air_mass": [50.0, 50.0],
        "air_flow": 2.0,
        "air_specific_heat": 1006.0,
        "base_heat_transfer": 25.0,
        "position_factor": [[1.0, 0.8], [0.8, 0.6]],
        "evaporative_mass_transfer": 0.01,
        "surface_wetness": 0.8,
        "max_cooling_power": 10000.0,
        "rated_power": 5000.0,
        "coil_temp": 5.0,
        "tcpi_target": 0.9,
        "alpha": 0.2,
        "pressure": 101325.0,
        "wall_heat_gain": [100.0, 100.0],
    }
    values.update(overrides)
    return SystemParameters(**values)  # type: ignore[arg-type]


def reference_state(**overrides: object) -> SystemState:
    """Create the reference initial state.

    Product at 20 °C over 15 °C air, with the cooling unit at half output.
    """
    values: dict[str, object] = {
        "product_temp": uniform_grid(20.0, 2, 2),
        "product_moisture": uniform_grid(0.8, 2, 2),
        "air_temp": [15.0, 15.0],
        "air_humidity": [0.008, 0.008],
        "tcpi": 0.9,
        "cooling_power": 5000.0,
        "t": 0.0,
    }
    values.update(overrides)
    return SystemState(**values)  # type: ignore[arg-type]


def create_reefer_scenario(
    zones: int = 6,
    layers: int = 4,
    *,
    product_temp: float = 25.0,
    pallet_mass: float = 900.0,
    wall_heat_gain: Sequence[float] | None = None,
) -> tuple[SystemState, SystemParameters]:
    """Create a 40 ft reefer loaded with field-warm produce.

    The load is spread evenly over zones x layers cells. Air mass per zone
    comes from the free volume of a 12 m x 2.29 m x 2.5 m interior at
    roughly 60 % porosity.

    Args:
        zones: Zones along the airflow.
        layers: Vertical layers per zone.
        product_temp: Initial product temperature in °C.
        pallet_mass: Product mass per zone in kg.
        wall_heat_gain: Per-zone wall gain in W (defaults to 150 W).

    Returns:
        Tuple of (initial state, parameters).
    """
    length, width, height = 12.0, 2.29, 2.5
    zone_air_mass = 0.6 * length * width * height * 1.2 / zones
    cell_mass = pallet_mass / layers
    walls = list(wall_heat_gain) if wall_heat_gain is not None else [150.0] * zones

    params = SystemParameters(
        zones=zones,
        layers=layers,
        container_length=length,
        container_width=width,
        container_height=height,
        product_mass=uniform_grid(cell_mass, zones, layers),
        product_area=uniform_grid(cell_mass * 0.05, zones, layers),
        specific_heat=3900.0,
        water_activity=0.97,
        respiration_rate=2e-8,
        respiration_temp_coeff=0.09,
        respiration_ref_temp=10.0,
        respiration_enthalpy=10.7e6,
        air_mass=[zone_air_mass] * zones,
        air_flow=3.0,
        base_heat_transfer=20.0,
        position_factor=edge_exposure_grid(zones, layers, decay=0.92),
        evaporative_mass_transfer=0.005,
        surface_wetness=0.5,
        max_cooling_power=12000.0,
        rated_power=6000.0,
        coil_temp=1.0,
        tcpi_target=0.9,
        alpha=0.2,
        wall_heat_gain=walls,
    )
    state = SystemState(
        product_temp=uniform_grid(product_temp, zones, layers),
        product_moisture=uniform_grid(0.85, zones, layers),
        air_temp=[product_temp - 5.0] * zones,
        air_humidity=[0.009] * zones,
        tcpi=0.9,
        cooling_power=0.0,
    )
    return state, params
