"""Tests for turbulent duct flow."""

from __future__ import annotations

import math

import numpy as np
import pytest

from precool_sim.core.exceptions import DomainError
from precool_sim.physics.turbulence import (
    duct_velocity,
    effective_heat_transfer,
    hydraulic_diameter,
    perturbed_heat_transfer,
    reynolds_enhancement,
    reynolds_number,
    turbulence_intensity,
)


class TestGeometry:
    """Tests for duct geometry helpers."""

    def test_square_section(self) -> None:
        """Square duct hydraulic diameter equals its side."""
        assert hydraulic_diameter(2.0, 2.0) == pytest.approx(2.0)

    def test_container_section(self) -> None:
        """Reference container cross-section."""
        assert hydraulic_diameter(2.4, 2.6) == pytest.approx(2.496)

    def test_non_positive_dimension_raises(self) -> None:
        """Zero width is rejected."""
        with pytest.raises(DomainError):
            hydraulic_diameter(0.0, 2.6)

    def test_velocity(self) -> None:
        """Velocity from mass flow, density and section."""
        assert duct_velocity(2.4, 1.0, 2.0, 1.2) == pytest.approx(1.0)

    def test_zero_flow_zero_velocity(self) -> None:
        """No flow means still air."""
        assert duct_velocity(0.0, 1.2, 2.4, 2.6) == 0.0


class TestReynoldsNumber:
    """Tests for Reynolds number."""

    def test_definition(self) -> None:
        """Re = rho v D / mu."""
        assert reynolds_number(1.2, 0.5, 2.5, 1.8e-5) == pytest.approx(1.2 * 0.5 * 2.5 / 1.8e-5)

    def test_zero_viscosity_raises(self) -> None:
        """Viscosity must be positive."""
        with pytest.raises(DomainError) as exc_info:
            reynolds_number(1.2, 0.5, 2.5, 0.0)
        assert exc_info.value.quantity == "viscosity"


class TestTurbulenceIntensity:
    """Tests for turbulence intensity."""

    def test_known_value(self) -> None:
        """I = 0.16 Re^-1/8 at Re = 1e4."""
        assert turbulence_intensity(1e4) == pytest.approx(0.16 * 1e4**-0.125)

    def test_decreases_with_reynolds(self) -> None:
        """Faster flow is relatively less turbulent."""
        assert turbulence_intensity(1e5) < turbulence_intensity(1e3)

    @pytest.mark.parametrize("re", [0.0, -10.0, math.nan, math.inf])
    def test_invalid_reynolds_raises(self, re: float) -> None:
        """Non-positive or non-finite Re is rejected."""
        with pytest.raises(DomainError):
            turbulence_intensity(re)


class TestReynoldsEnhancement:
    """Tests for the forced-convection enhancement factor."""

    def test_unity_at_reference(self) -> None:
        """f(5000) = 1."""
        assert reynolds_enhancement(5000.0) == pytest.approx(1.0)

    def test_no_flow(self) -> None:
        """No flow gives no enhancement."""
        assert reynolds_enhancement(0.0) == 0.0

    def test_power_law(self) -> None:
        """Doubling Re multiplies the factor by 2^0.8."""
        ratio = reynolds_enhancement(20000.0) / reynolds_enhancement(10000.0)
        assert ratio == pytest.approx(2**0.8)


class TestEffectiveHeatTransfer:
    """Tests for turbulence-perturbed heat transfer."""

    def test_zero_alpha_exact_and_no_draw(self, rng: np.random.Generator) -> None:
        """alpha = 0 returns the mean and leaves the generator untouched."""
        before = rng.bit_generator.state
        assert effective_heat_transfer(25.0, 0.0, 0.05, rng) == 25.0
        assert rng.bit_generator.state == before

    def test_zero_intensity_exact(self) -> None:
        """No turbulence needs no generator."""
        assert effective_heat_transfer(25.0, 0.2, 0.0) == 25.0

    def test_requires_generator(self) -> None:
        """A draw without a generator is an error."""
        with pytest.raises(ValueError, match="random generator"):
            effective_heat_transfer(25.0, 0.2, 0.05)

    def test_same_seed_same_value(self) -> None:
        """Equal seeds reproduce the perturbation."""
        a = effective_heat_transfer(25.0, 0.2, 0.05, np.random.default_rng(7))
        b = effective_heat_transfer(25.0, 0.2, 0.05, np.random.default_rng(7))
        assert a == b

    def test_perturbation_is_small(self, rng: np.random.Generator) -> None:
        """With alpha*I = 0.01 values stay within a few percent of the mean."""
        values = [effective_heat_transfer(25.0, 0.2, 0.05, rng) for _ in range(200)]
        assert np.mean(values) == pytest.approx(25.0, rel=0.01)
        assert min(values) > 25.0 * 0.95
        assert max(values) < 25.0 * 1.05

    def test_floored_at_zero(self) -> None:
        """A large negative sample cannot make the coefficient negative."""
        assert perturbed_heat_transfer(25.0, 10.0, 0.5, -5.0) == 0.0
