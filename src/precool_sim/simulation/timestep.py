"""Stable time-step selection and time-scale analysis.

The explicit integrator is stable when the step stays well below the
fastest physical time scale of the run. The step is derived once from
worst-case conditions (warmest, least dense air; smallest product and air
masses; largest exchange area) with a safety factor of 10, which keeps the
CFL number below 1 and the Fourier number below 0.5.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Final

from precool_sim.core.exceptions import DomainError
from precool_sim.core.state import SystemParameters
from precool_sim.physics.constants import WORST_CASE_AIR_TEMPERATURE
from precool_sim.physics.psychrometrics import air_density
from precool_sim.physics.turbulence import duct_velocity

logger = logging.getLogger(__name__)

#: Divisor applied to each characteristic time to obtain the step
SAFETY_FACTOR: Final[float] = 10.0

#: CFL number above which advection becomes unstable
CFL_LIMIT: Final[float] = 1.0

#: Fourier number above which explicit heat exchange becomes unstable
FOURIER_LIMIT: Final[float] = 0.5


def worst_case_velocity(params: SystemParameters) -> float:
    """Duct velocity at the lowest expected air density in m/s."""
    density = air_density(WORST_CASE_AIR_TEMPERATURE, params.pressure)
    return duct_velocity(
        params.air_flow, density, params.container_width, params.container_height
    )


def _ratio(numerator: float, denominator: float) -> float:
    # No exchange means the process never limits the step
    if denominator <= 0:
        return math.inf
    return numerator / denominator


def select_time_step(params: SystemParameters) -> float:
    """Compute one stable time step for a whole run.

    dt = min(L / (10 v), m_min cp / (10 h0 A_max), m_air_min / (10 m_dot))

    Args:
        params: Run parameters.

    Returns:
        Time step in seconds.

    Raises:
        DomainError: If no process limits the step (no airflow and no
            product-air heat exchange).
    """
    velocity = worst_case_velocity(params)
    dt_convective = _ratio(params.container_length, SAFETY_FACTOR * velocity)
    dt_thermal = _ratio(
        params.min_product_mass * params.specific_heat,
        SAFETY_FACTOR * params.base_heat_transfer * params.max_product_area,
    )
    dt_mass_flow = _ratio(params.min_air_mass, SAFETY_FACTOR * params.air_flow)

    dt = min(dt_convective, dt_thermal, dt_mass_flow)
    if not math.isfinite(dt):
        msg = "No finite time scale: airflow and heat transfer are both zero"
        raise DomainError(msg, quantity="time_step")

    logger.debug(
        "Time step %.4gs (convective=%.4g, thermal=%.4g, mass_flow=%.4g)",
        dt,
        dt_convective,
        dt_thermal,
        dt_mass_flow,
    )
    return dt


@dataclass(frozen=True)
class TimeScales:
    """Characteristic times and stability ratios of a run.

    Attributes:
        convective: Zone transit time dx / v in s.
        thermal: Product thermal relaxation time m cp / (h0 A) in s.
        mass_flow: Zone air replacement time m_air / m_dot in s.
        mass_transfer: Moisture transfer time dx / hm in s.
        limiting: Name of the shortest characteristic time.
        time_step: Step the ratios were evaluated at in s.
        cfl: Courant number v dt / dx.
        fourier: Fourier-like ratio dt h0 A / (m cp).
    """

    convective: float
    thermal: float
    mass_flow: float
    mass_transfer: float
    limiting: str
    time_step: float
    cfl: float
    fourier: float

    @property
    def is_stable(self) -> bool:
        """True if both stability ratios are within their limits."""
        return self.cfl <= CFL_LIMIT and self.fourier <= FOURIER_LIMIT


def time_scales(params: SystemParameters, dt: float) -> TimeScales:
    """Evaluate characteristic times and stability ratios for a step size.

    Args:
        params: Run parameters.
        dt: Time step in seconds.

    Returns:
        TimeScales for the run.
    """
    dx = params.zone_length
    velocity = worst_case_velocity(params)
    exchange = params.base_heat_transfer * params.max_product_area
    capacity = params.min_product_mass * params.specific_heat

    scales = {
        "convective": _ratio(dx, velocity),
        "thermal": _ratio(capacity, exchange),
        "mass_flow": _ratio(params.min_air_mass, params.air_flow),
        "mass_transfer": _ratio(dx, params.evaporative_mass_transfer),
    }
    limiting = min(scales, key=lambda name: scales[name])

    return TimeScales(
        **scales,
        limiting=limiting,
        time_step=dt,
        cfl=velocity * dt / dx,
        fourier=dt * exchange / capacity,
    )
