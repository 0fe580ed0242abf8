"""Cooling unit (evaporator coil) model.

The coil removes sensible heat from the air passing over it and condenses
moisture once the air is above its dew point. Delivered power follows a
power law shaped by the TCPI controller variable.

Reference: ASHRAE Handbook—Refrigeration (2022), Chapter 28
"""

from __future__ import annotations

import math
from typing import Final

#: Smallest TCPI used as an exponent denominator
TCPI_FLOOR: Final[float] = 1e-3

#: Sharpness of the smooth gate function
GATE_SHARPNESS: Final[float] = 8.0

#: Temperature width of the dew-point gate (K)
DEW_POINT_GATE_WIDTH: Final[float] = 0.2

#: Humidity width of the saturation gate (kg/kg)
SATURATION_GATE_WIDTH: Final[float] = 5e-5


def sensible_cooling(mass_flow: float, cp_air: float, t_a: float, t_coil: float) -> float:
    """Calculate sensible cooling capacity across the coil.

    Q_s = m_dot * cp * (Ta - T_coil)

    Args:
        mass_flow: Air mass flow over the coil in kg/s.
        cp_air: Air specific heat in J/(kg·K).
        t_a: Entering air temperature in °C.
        t_coil: Coil surface temperature in °C.

    Returns:
        Sensible heat removal in W (negative if air is colder than coil).

    Examples:
        >>> sensible_cooling(2.0, 1006.0, 15.0, 5.0)
        20120.0
    """
    return mass_flow * cp_air * (t_a - t_coil)


def smooth_gate(x: float) -> float:
    """Smooth step from 0 to 1 centred on zero.

    sigma(x) = 0.5 * (1 + tanh(8x))
    """
    return 0.5 * (1.0 + math.tanh(GATE_SHARPNESS * x))


def dehumidification_rate(
    mass_flow: float,
    w_a: float,
    w_sat_dp: float,
    t_a: float,
    t_dp: float,
) -> float:
    """Calculate moisture condensed on the coil.

    m_dehum = m_dot * (wa - wsat(Tdp)) * sigma((Ta - Tdp)/0.2) * sigma((wa - wsat)/5e-5)

    Both gates fade the rate continuously to zero as the air approaches the
    dew point, so the explicit integrator never sees a discontinuous switch.

    Args:
        mass_flow: Air mass flow over the coil in kg/s.
        w_a: Entering air humidity ratio in kg/kg.
        w_sat_dp: Saturation humidity ratio at the dew point in kg/kg.
        t_a: Entering air temperature in °C.
        t_dp: Dew point (coil) temperature in °C.

    Returns:
        Condensation rate in kg/s.
    """
    excess = w_a - w_sat_dp
    thermal_gate = smooth_gate((t_a - t_dp) / DEW_POINT_GATE_WIDTH)
    moisture_gate = smooth_gate(excess / SATURATION_GATE_WIDTH)
    return mass_flow * excess * thermal_gate * moisture_gate


def actual_cooling_power(
    p_rated: float,
    q_cool: float,
    q_max: float,
    tcpi: float,
    max_power: float | None = None,
) -> float:
    """Calculate power delivered by the cooling unit.

    P = P_rated * (Q_cool / Q_max)^(1 / TCPI), clamped to [0, max_power]

    TCPI is floored at ``TCPI_FLOOR`` and the power law is evaluated in log
    space so a large exponent saturates at ``max_power`` instead of
    overflowing.

    Args:
        p_rated: Rated unit power in W.
        q_cool: Cooling load requested in W.
        q_max: Maximum cooling capacity in W.
        tcpi: Turbulent cooling performance index.
        max_power: Upper clamp in W (defaults to q_max).

    Returns:
        Delivered cooling power in W.

    Examples:
        >>> actual_cooling_power(5000.0, 10000.0, 10000.0, 1.0)
        5000.0
        >>> actual_cooling_power(5000.0, 0.0, 10000.0, 0.9)
        0.0
    """
    upper = q_max if max_power is None else max_power
    if q_cool <= 0 or p_rated <= 0 or upper <= 0 or q_max <= 0:
        return 0.0

    tcpi = max(tcpi, TCPI_FLOOR)
    exponent = math.log(q_cool / q_max) / tcpi
    if exponent >= math.log(upper / p_rated):
        return upper
    return p_rated * math.exp(exponent)
