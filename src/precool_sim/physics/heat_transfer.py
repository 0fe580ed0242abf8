"""Heat transfer between produce, container air and the cooling unit.

Reference: ASHRAE Handbook—Refrigeration (2022), Chapters 19 and 28

This module implements the instantaneous heat rates of the zone/layer model:
- Respiration heat generated by the produce
- Forced convection from product surface to zone air
- Evaporative (latent) cooling of the product surface
- Product and zone-air energy balances

Sign convention: a positive rate is heat leaving the product toward the air,
or heat removed from the air by the cooling sink. Respiration and wall gains
are positive heat sources.

All functions use SI units.
"""

from __future__ import annotations

import math

from precool_sim.core.exceptions import DomainError
from precool_sim.physics.constants import (
    GAS_CONSTANT_WATER_VAPOR,
    LATENT_HEAT_VAPORIZATION,
    celsius_to_kelvin,
)
from precool_sim.physics.turbulence import reynolds_enhancement


def _require_positive(value: float, name: str) -> None:
    if not value > 0:
        msg = f"{name.replace('_', ' ').capitalize()} must be positive, got {value}"
        raise DomainError(msg, quantity=name, value=value)


def _require_finite(value: float, name: str) -> None:
    if not math.isfinite(value):
        msg = f"{name.replace('_', ' ').capitalize()} must be finite, got {value}"
        raise DomainError(msg, quantity=name, value=value)


# =============================================================================
# Respiration
# =============================================================================


def respiration_heat(
    t: float,
    r_ref: float,
    k: float,
    t_ref: float,
    mass: float,
    h_resp: float,
) -> float:
    """Calculate respiration heat generation.

    Q_resp = r_ref * exp(k * (T - T_ref)) * m * h_resp

    Args:
        t: Product temperature in °C.
        r_ref: Respiration rate at the reference temperature (kg CO2/(kg·s)).
        k: Temperature sensitivity (1/K).
        t_ref: Reference temperature in °C.
        mass: Product mass in kg.
        h_resp: Heat released per unit respiration (J/kg).

    Returns:
        Heat generation in W.

    Raises:
        DomainError: If temperature is not finite or mass is negative.

    Examples:
        >>> round(respiration_heat(10.0, 1e-7, 0.1, 10.0, 100.0, 1e7), 6)
        100.0
    """
    _require_finite(t, "temperature")
    if mass < 0:
        msg = f"Product mass cannot be negative, got {mass}"
        raise DomainError(msg, quantity="mass", value=mass)
    return r_ref * math.exp(k * (t - t_ref)) * mass * h_resp


# =============================================================================
# Convection
# =============================================================================


def convective_heat(
    h_eff: float,
    position_factor: float,
    tcpi: float,
    re: float,
    area: float,
    t_p: float,
    t_a: float,
) -> float:
    """Calculate forced-convection heat flow from product to air.

    Q_conv = h_eff * epsilon * TCPI * f(Re) * A * (Tp - Ta)

    where f(Re) = (Re/5000)^0.8.

    Args:
        h_eff: Effective heat transfer coefficient in W/(m²·K).
        position_factor: Exposure of the cell to the airstream (0-1).
        tcpi: Turbulent cooling performance index (0-1).
        re: Reynolds number of the zone flow.
        area: Product surface area in m².
        t_p: Product temperature in °C.
        t_a: Air temperature in °C.

    Returns:
        Heat flow in W (positive = product losing heat to air).

    Raises:
        DomainError: If area is not positive or a temperature is not finite.
    """
    _require_positive(area, "area")
    _require_finite(t_p, "product_temperature")
    _require_finite(t_a, "air_temperature")
    enhancement = reynolds_enhancement(re)
    return h_eff * position_factor * tcpi * enhancement * area * (t_p - t_a)


# =============================================================================
# Evaporation
# =============================================================================


def evaporation_rate(
    hm: float,
    area: float,
    fw: float,
    vpd: float,
    t: float,
) -> float:
    """Calculate moisture evaporation rate from a product surface.

    m_evap = hm * A * fw * VPD / (R_v * T)

    Args:
        hm: Mass transfer coefficient in m/s.
        area: Product surface area in m².
        fw: Surface wetness fraction (0-1).
        vpd: Vapor pressure deficit in Pa.
        t: Surface temperature in °C.

    Returns:
        Evaporation rate in kg/s (negative means condensation).

    Raises:
        DomainError: If area is not positive or temperature is not finite.
    """
    _require_positive(area, "area")
    _require_finite(t, "temperature")
    return hm * area * fw * vpd / (GAS_CONSTANT_WATER_VAPOR * celsius_to_kelvin(t))


def evaporative_cooling(
    hm: float,
    area: float,
    fw: float,
    vpd: float,
    t: float,
    latent_heat: float = LATENT_HEAT_VAPORIZATION,
) -> float:
    """Calculate evaporative cooling of a product surface.

    Q_evap = m_evap * lambda

    Args:
        hm: Mass transfer coefficient in m/s.
        area: Product surface area in m².
        fw: Surface wetness fraction (0-1).
        vpd: Vapor pressure deficit in Pa.
        t: Surface temperature in °C.
        latent_heat: Latent heat of vaporization in J/kg.

    Returns:
        Heat removed from the product in W.
    """
    return evaporation_rate(hm, area, fw, vpd, t) * latent_heat


# =============================================================================
# Energy balances
# =============================================================================


def product_temperature_rate(
    q_resp: float,
    q_conv: float,
    q_evap: float,
    mass: float,
    cp: float,
) -> float:
    """Calculate the rate of change of product temperature.

    dTp/dt = (Q_resp - Q_conv - Q_evap) / (m * cp)

    Args:
        q_resp: Respiration heat in W.
        q_conv: Convective heat to air in W.
        q_evap: Evaporative cooling in W.
        mass: Product mass in kg.
        cp: Product specific heat in J/(kg·K).

    Returns:
        Temperature rate in K/s.

    Raises:
        DomainError: If mass or specific heat is not positive.
    """
    _require_positive(mass, "mass")
    _require_positive(cp, "specific_heat")
    return (q_resp - q_conv - q_evap) / (mass * cp)


def air_temperature_rate(
    air_mass: float,
    cp_air: float,
    mass_flow: float,
    t_in: float,
    t_out: float,
    q_product_air: float,
    q_walls: float,
    q_cool: float,
) -> float:
    """Calculate the rate of change of zone air temperature.

    dTa/dt = (m_dot * cp * (T_in - T_a) + Q_conv + Q_walls - Q_cool) / (m_a * cp)

    Args:
        air_mass: Zone air mass in kg.
        cp_air: Air specific heat in J/(kg·K).
        mass_flow: Air mass flow rate through the zone in kg/s.
        t_in: Inlet (upstream) air temperature in °C.
        t_out: Zone air temperature in °C.
        q_product_air: Total convective heat from product in W.
        q_walls: Heat gain through the container walls in W.
        q_cool: Sensible heat removed by the cooling unit in W.

    Returns:
        Temperature rate in K/s.

    Raises:
        DomainError: If air mass or specific heat is not positive.
    """
    _require_positive(air_mass, "air_mass")
    _require_positive(cp_air, "air_specific_heat")
    advected = mass_flow * cp_air * (t_in - t_out)
    return (advected + q_product_air + q_walls - q_cool) / (air_mass * cp_air)
