"""Cooling performance metrics.

- Coefficient of performance of the cooling unit
- Uniformity index of a temperature (or moisture) field
- Cooling rate index of a single cell
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from precool_sim.core.exceptions import DomainError


def coefficient_of_performance(q_sensible: float, q_latent: float, power: float) -> float:
    """Calculate the cooling unit coefficient of performance.

    COP = (Q_sensible + Q_latent) / P

    Args:
        q_sensible: Sensible cooling in W.
        q_latent: Latent cooling in W.
        power: Unit power in W.

    Returns:
        COP (dimensionless). Zero when the unit is off (power <= 0).

    Examples:
        >>> coefficient_of_performance(6000.0, 3000.0, 3000.0)
        3.0
    """
    if power <= 0:
        return 0.0
    return (q_sensible + q_latent) / power


def temperature_spread(values: Sequence[float]) -> float:
    """Population standard deviation of a set of cell values."""
    if len(values) == 0:
        msg = "Cannot compute spread of an empty sequence"
        raise DomainError(msg, quantity="values")
    return float(np.std(np.asarray(values, dtype=float)))


def uniformity_index(values: Sequence[float]) -> float:
    """Calculate the uniformity index of a field.

    UI = std(values) / mean(values), using the population standard deviation.

    Args:
        values: Cell values (e.g. product temperatures).

    Returns:
        Uniformity index. Zero for a single or constant value.

    Raises:
        DomainError: If values is empty, or the mean is zero with non-zero spread.

    Examples:
        >>> uniformity_index([120.0, 120.0, 120.0])
        0.0
        >>> round(uniformity_index([120.0, 130.0, 125.0, 115.0, 135.0]), 4)
        0.0566
    """
    spread = temperature_spread(values)
    if spread == 0:
        return 0.0
    mean = float(np.mean(np.asarray(values, dtype=float)))
    if mean == 0:
        msg = "Uniformity index is undefined for a zero mean"
        raise DomainError(msg, quantity="mean", value=mean)
    return spread / mean


def cooling_rate_index(
    t_p: float,
    t_a: float,
    t_p_initial: float,
    t_a_supply: float,
) -> float:
    """Calculate the cooling rate index of a cell.

    CRI = (Tp - Ta) / (Tp_initial - Ta_supply)

    A value of 1 means no progress; 0 means the product has reached air
    temperature.

    Args:
        t_p: Current product temperature in °C.
        t_a: Current air temperature in °C.
        t_p_initial: Initial product temperature in °C.
        t_a_supply: Supply air temperature in °C.

    Returns:
        Cooling rate index (dimensionless).

    Raises:
        DomainError: If the initial product and supply temperatures are equal.
    """
    denominator = t_p_initial - t_a_supply
    if denominator == 0:
        msg = "Initial product temperature equals supply temperature"
        raise DomainError(msg, quantity="temperature_difference", value=denominator)
    return (t_p - t_a) / denominator
