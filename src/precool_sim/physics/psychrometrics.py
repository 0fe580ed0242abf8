"""Psychrometric calculations for container air.

Reference: ASHRAE Handbook-Fundamentals (2021), Chapter 1

This module implements the moist-air relations used by the cooling model.
All functions use SI units:
- Temperature: C (internally converted to K where needed)
- Pressure: Pa
- Humidity ratio: kg_water / kg_dry_air

Key equations implemented:
- Saturation pressure (Magnus form over water)
- Saturation humidity ratio
- Vapor pressure deficit at a product surface
- Relative humidity and vapor partial pressure
- Dry air density (ideal gas)
"""

from __future__ import annotations

import math
from typing import Final

from precool_sim.core.exceptions import DomainError
from precool_sim.physics.constants import (
    EPSILON,
    GAS_CONSTANT_DRY_AIR,
    MAGNUS_A,
    MAGNUS_B,
    MAGNUS_P0,
    STANDARD_PRESSURE,
    celsius_to_kelvin,
)

#: Default relative tolerance for humidity validity checks
#: Absorbs round-off after clamping humidity to saturation.
HUMIDITY_TOLERANCE: Final[float] = 1e-9


def _require_finite(t: float, name: str = "temperature") -> None:
    if not math.isfinite(t):
        msg = f"{name.capitalize()} must be finite, got {t}"
        raise DomainError(msg, quantity=name, value=t)


def saturation_pressure(t: float) -> float:
    """Calculate saturation vapor pressure over water.

    psat = 611.2 * exp(17.67 * T / (T + 243.5))

    Args:
        t: Dry-bulb temperature in C.

    Returns:
        Saturation vapor pressure in Pa.

    Raises:
        DomainError: If temperature is not finite.

    Examples:
        >>> saturation_pressure(0.0)
        611.2
        >>> round(saturation_pressure(20.0))  # At 20C
        2337
    """
    _require_finite(t)
    if t + MAGNUS_B <= 0:
        msg = f"Temperature {t}C outside valid range for saturation pressure"
        raise DomainError(msg, quantity="temperature", value=t)
    return MAGNUS_P0 * math.exp(MAGNUS_A * t / (t + MAGNUS_B))


def saturation_humidity_ratio(t: float, p: float = STANDARD_PRESSURE) -> float:
    """Calculate the humidity ratio of saturated air.

    wsat = 0.622 * psat / (p - psat)

    Args:
        t: Dry-bulb temperature in C.
        p: Total pressure in Pa.

    Returns:
        Saturation humidity ratio in kg_water/kg_dry_air.

    Raises:
        DomainError: If temperature is not finite or p <= psat(t).

    Examples:
        >>> round(saturation_humidity_ratio(20.0), 4)
        0.0147
    """
    p_ws = saturation_pressure(t)
    if p <= p_ws:
        msg = f"Pressure {p} Pa must exceed saturation pressure {p_ws:.1f} Pa at {t}C"
        raise DomainError(msg, quantity="pressure", value=p)
    return EPSILON * p_ws / (p - p_ws)


def vapor_partial_pressure(w: float, p: float = STANDARD_PRESSURE) -> float:
    """Calculate water vapor partial pressure from humidity ratio.

    Args:
        w: Humidity ratio in kg_water/kg_dry_air.
        p: Total pressure in Pa.

    Returns:
        Vapor partial pressure in Pa.
    """
    return w * p / (EPSILON + w)


def vapor_pressure_deficit(
    t_p: float,
    a_w: float,
    w_a: float,
    p: float = STANDARD_PRESSURE,
) -> float:
    """Calculate the vapor pressure deficit between a product surface and air.

    VPD = psat(Tp) * aw - wa * p / (0.622 + wa)

    The deficit drives evaporative moisture loss from the product. It grows
    with surface temperature and shrinks as the air approaches saturation.

    Args:
        t_p: Product surface temperature in C.
        a_w: Product water activity (0-1).
        w_a: Air humidity ratio in kg_water/kg_dry_air.
        p: Total pressure in Pa.

    Returns:
        Vapor pressure deficit in Pa (negative when air is wetter than surface).
    """
    return saturation_pressure(t_p) * a_w - vapor_partial_pressure(w_a, p)


def is_humidity_valid(
    w: float,
    t: float,
    p: float = STANDARD_PRESSURE,
    *,
    tol: float = HUMIDITY_TOLERANCE,
) -> bool:
    """Check that a humidity ratio is physically possible.

    Valid when 0 <= w <= wsat(t), with a small relative tolerance on the
    upper bound.

    Args:
        w: Humidity ratio in kg_water/kg_dry_air.
        t: Dry-bulb temperature in C.
        p: Total pressure in Pa.
        tol: Relative tolerance on the saturation bound.

    Returns:
        True if the humidity ratio is within bounds.

    Raises:
        DomainError: If temperature is not finite or p <= psat(t).
    """
    if not math.isfinite(w) or w < 0:
        return False
    return w <= saturation_humidity_ratio(t, p) * (1.0 + tol)


def relative_humidity(w: float, t: float, p: float = STANDARD_PRESSURE) -> float:
    """Calculate relative humidity from humidity ratio.

    Args:
        w: Humidity ratio in kg_water/kg_dry_air.
        t: Dry-bulb temperature in C.
        p: Total pressure in Pa.

    Returns:
        Relative humidity as a fraction (0-1).

    Raises:
        DomainError: If humidity ratio is negative.
    """
    if w < 0:
        msg = f"Humidity ratio {w} cannot be negative"
        raise DomainError(msg, quantity="humidity_ratio", value=w)
    rh = vapor_partial_pressure(w, p) / saturation_pressure(t)
    return min(1.0, rh)


def air_density(t: float, p: float = STANDARD_PRESSURE) -> float:
    """Calculate dry air density from the ideal gas law.

    rho = p / (R_air * T)

    Args:
        t: Dry-bulb temperature in C.
        p: Total pressure in Pa.

    Returns:
        Air density in kg/m^3.

    Raises:
        DomainError: If temperature is not finite or at/below absolute zero.

    Examples:
        >>> air_density(15.0)
        1.2249...
    """
    _require_finite(t)
    t_k = celsius_to_kelvin(t)
    if t_k <= 0:
        msg = f"Temperature {t}C is at or below absolute zero"
        raise DomainError(msg, quantity="temperature", value=t)
    return p / (GAS_CONSTANT_DRY_AIR * t_k)
