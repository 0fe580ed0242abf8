"""Physics module for forced-air produce cooling.

This module provides the correlations used by the zone/layer model:
- Psychrometrics (ASHRAE Handbook—Fundamentals Chapter 1)
- Turbulent duct flow (Reynolds number, turbulence intensity)
- Heat transfer (respiration, convection, evaporation)
- Mass transfer (product and air moisture)
- Cooling unit (sensible, dehumidification, controlled power)
- Performance metrics (COP, uniformity, cooling rate index)

All functions use SI units unless otherwise noted.
"""

from precool_sim.physics.constants import (
    C_P_DRY_AIR,
    GAS_CONSTANT_DRY_AIR,
    GAS_CONSTANT_WATER_VAPOR,
    LATENT_HEAT_VAPORIZATION,
    STANDARD_PRESSURE,
)
from precool_sim.physics.cooling_unit import (
    TCPI_FLOOR,
    actual_cooling_power,
    dehumidification_rate,
    sensible_cooling,
    smooth_gate,
)
from precool_sim.physics.heat_transfer import (
    air_temperature_rate,
    convective_heat,
    evaporation_rate,
    evaporative_cooling,
    product_temperature_rate,
    respiration_heat,
)
from precool_sim.physics.mass_transfer import air_moisture_rate, product_moisture_rate
from precool_sim.physics.metrics import (
    coefficient_of_performance,
    cooling_rate_index,
    temperature_spread,
    uniformity_index,
)
from precool_sim.physics.psychrometrics import (
    air_density,
    is_humidity_valid,
    relative_humidity,
    saturation_humidity_ratio,
    saturation_pressure,
    vapor_pressure_deficit,
)
from precool_sim.physics.turbulence import (
    effective_heat_transfer,
    hydraulic_diameter,
    reynolds_enhancement,
    reynolds_number,
    turbulence_intensity,
)

__all__ = [
    # Constants
    "C_P_DRY_AIR",
    "GAS_CONSTANT_DRY_AIR",
    "GAS_CONSTANT_WATER_VAPOR",
    "LATENT_HEAT_VAPORIZATION",
    "STANDARD_PRESSURE",
    "TCPI_FLOOR",
    # Psychrometrics
    "saturation_pressure",
    "saturation_humidity_ratio",
    "vapor_pressure_deficit",
    "is_humidity_valid",
    "relative_humidity",
    "air_density",
    # Turbulence
    "reynolds_number",
    "turbulence_intensity",
    "effective_heat_transfer",
    "hydraulic_diameter",
    "reynolds_enhancement",
    # Heat transfer
    "respiration_heat",
    "convective_heat",
    "evaporation_rate",
    "evaporative_cooling",
    "product_temperature_rate",
    "air_temperature_rate",
    # Mass transfer
    "product_moisture_rate",
    "air_moisture_rate",
    # Cooling unit
    "sensible_cooling",
    "smooth_gate",
    "dehumidification_rate",
    "actual_cooling_power",
    # Metrics
    "coefficient_of_performance",
    "uniformity_index",
    "cooling_rate_index",
    "temperature_spread",
]
