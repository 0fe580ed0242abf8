"""Turbulent duct flow through the pallet stack.

The container is treated as a rectangular duct carrying the unit's air mass
flow. Reynolds number and turbulence intensity set how strongly convective
transfer is enhanced and how much it fluctuates from step to step.

Randomness is always injected as a ``numpy.random.Generator`` so runs are
reproducible; an alpha of zero never draws from the generator.
"""

from __future__ import annotations

import math

import numpy as np

from precool_sim.core.exceptions import DomainError
from precool_sim.physics.constants import (
    REFERENCE_REYNOLDS,
    REYNOLDS_EXPONENT,
    TURBULENCE_INTENSITY_COEFFICIENT,
    TURBULENCE_INTENSITY_EXPONENT,
)


def hydraulic_diameter(width: float, height: float) -> float:
    """Calculate the hydraulic diameter of a rectangular flow section.

    D_h = 4A / P = 4WH / (2(W + H))

    Args:
        width: Section width in m.
        height: Section height in m.

    Returns:
        Hydraulic diameter in m.

    Raises:
        DomainError: If either dimension is not positive.

    Examples:
        >>> hydraulic_diameter(2.0, 2.0)
        2.0
    """
    if width <= 0 or height <= 0:
        msg = f"Duct dimensions must be positive, got {width} x {height}"
        raise DomainError(msg, quantity="duct_dimensions")
    return 4.0 * width * height / (2.0 * (width + height))


def duct_velocity(mass_flow: float, density: float, width: float, height: float) -> float:
    """Calculate bulk air velocity through the container cross-section.

    Args:
        mass_flow: Air mass flow rate in kg/s.
        density: Air density in kg/m^3.
        width: Section width in m.
        height: Section height in m.

    Returns:
        Mean velocity in m/s.
    """
    if density <= 0:
        msg = f"Air density must be positive, got {density}"
        raise DomainError(msg, quantity="density", value=density)
    return mass_flow / (density * width * height)


def reynolds_number(
    density: float,
    velocity: float,
    hydraulic_diameter: float,
    viscosity: float,
) -> float:
    """Calculate the Reynolds number.

    Re = rho * v * D_h / mu

    Args:
        density: Fluid density in kg/m^3.
        velocity: Mean velocity in m/s.
        hydraulic_diameter: Hydraulic diameter in m.
        viscosity: Dynamic viscosity in Pa*s.

    Returns:
        Reynolds number (dimensionless).

    Raises:
        DomainError: If viscosity is not positive.
    """
    if viscosity <= 0:
        msg = f"Viscosity must be positive, got {viscosity}"
        raise DomainError(msg, quantity="viscosity", value=viscosity)
    return density * velocity * hydraulic_diameter / viscosity


def turbulence_intensity(re: float) -> float:
    """Calculate turbulence intensity for fully developed duct flow.

    I = 0.16 * Re^(-1/8)

    Args:
        re: Reynolds number.

    Returns:
        Turbulence intensity (dimensionless fraction).

    Raises:
        DomainError: If Re is not positive and finite.

    Examples:
        >>> round(turbulence_intensity(10000.0), 4)
        0.0506
    """
    if not math.isfinite(re) or re <= 0:
        msg = f"Reynolds number must be positive, got {re}"
        raise DomainError(msg, quantity="reynolds", value=re)
    return TURBULENCE_INTENSITY_COEFFICIENT * re**TURBULENCE_INTENSITY_EXPONENT


def reynolds_enhancement(re: float) -> float:
    """Forced-convection enhancement relative to the reference Reynolds number.

    f(Re) = (Re / 5000)^0.8, so f(5000) = 1. No flow gives no enhancement.
    """
    if re <= 0:
        return 0.0
    return (re / REFERENCE_REYNOLDS) ** REYNOLDS_EXPONENT


def perturbed_heat_transfer(
    h_mean: float, alpha: float, intensity: float, epsilon: float
) -> float:
    """Apply a given standard-normal sample to a mean coefficient.

    h_eff = h_mean * (1 + alpha * I * epsilon), floored at zero.
    """
    return max(0.0, h_mean * (1.0 + alpha * intensity * epsilon))


def effective_heat_transfer(
    h_mean: float,
    alpha: float,
    intensity: float,
    rng: np.random.Generator | None = None,
) -> float:
    """Calculate a turbulence-perturbed heat transfer coefficient.

    h_eff = h_mean * (1 + alpha * I * N(0, 1))

    Args:
        h_mean: Mean heat transfer coefficient in W/(m^2*K).
        alpha: Turbulence sensitivity factor.
        intensity: Turbulence intensity.
        rng: Random generator for the normal sample. Required unless
            alpha or intensity is zero.

    Returns:
        Effective heat transfer coefficient in W/(m^2*K).

    Raises:
        ValueError: If a sample is needed and no generator was given.
    """
    if alpha == 0 or intensity == 0:
        return h_mean
    if rng is None:
        msg = "A random generator is required when alpha and intensity are non-zero"
        raise ValueError(msg)
    return perturbed_heat_transfer(h_mean, alpha, intensity, float(rng.standard_normal()))
