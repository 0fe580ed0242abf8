"""Moisture balances for produce and zone air.

Product moisture is tracked on a dry basis (kg water / kg dry matter) and
air moisture as a humidity ratio (kg water / kg dry air).
"""

from __future__ import annotations

from precool_sim.core.exceptions import DomainError


def product_moisture_rate(m_evap: float, mass: float) -> float:
    """Calculate the rate of change of product moisture content.

    dX/dt = -m_evap / m

    Args:
        m_evap: Evaporation rate in kg/s.
        mass: Product mass in kg.

    Returns:
        Moisture rate in (kg/kg)/s.

    Raises:
        DomainError: If mass is not positive.
    """
    if not mass > 0:
        msg = f"Product mass must be positive, got {mass}"
        raise DomainError(msg, quantity="mass", value=mass)
    return -m_evap / mass


def air_moisture_rate(
    m_evap: float,
    m_dehum: float,
    m_vent: float,
    air_mass: float,
) -> float:
    """Calculate the rate of change of zone air humidity ratio.

    dw/dt = (m_evap - m_dehum + m_vent) / m_a

    Args:
        m_evap: Moisture evaporated from product in kg/s.
        m_dehum: Moisture condensed on the cooling coil in kg/s.
        m_vent: Net moisture carried in by ventilation in kg/s.
        air_mass: Zone air mass in kg.

    Returns:
        Humidity ratio rate in (kg/kg)/s.

    Raises:
        DomainError: If air mass is not positive.
    """
    if not air_mass > 0:
        msg = f"Air mass must be positive, got {air_mass}"
        raise DomainError(msg, quantity="air_mass", value=air_mass)
    return (m_evap - m_dehum + m_vent) / air_mass
