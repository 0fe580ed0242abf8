"""Tests for heat transfer rates."""

from __future__ import annotations

import math

import pytest

from precool_sim.core.exceptions import DomainError
from precool_sim.physics.constants import GAS_CONSTANT_WATER_VAPOR, LATENT_HEAT_VAPORIZATION
from precool_sim.physics.heat_transfer import (
    air_temperature_rate,
    convective_heat,
    evaporation_rate,
    evaporative_cooling,
    product_temperature_rate,
    respiration_heat,
)


class TestRespirationHeat:
    """Tests for respiration heat."""

    def test_reference_temperature(self) -> None:
        """At T_ref the exponential term is 1."""
        assert respiration_heat(10.0, 1e-7, 0.1, 10.0, 100.0, 1e7) == pytest.approx(100.0)

    def test_increases_with_temperature(self) -> None:
        """Warmer produce respires faster."""
        cold = respiration_heat(5.0, 2e-8, 0.1, 10.0, 100.0, 10.7e6)
        warm = respiration_heat(20.0, 2e-8, 0.1, 10.0, 100.0, 10.7e6)
        assert warm > cold
        assert warm / cold == pytest.approx(math.exp(1.5))

    def test_zero_mass(self) -> None:
        """No product, no heat."""
        assert respiration_heat(20.0, 2e-8, 0.1, 10.0, 0.0, 10.7e6) == 0.0

    def test_negative_mass_raises(self) -> None:
        """Negative mass is rejected."""
        with pytest.raises(DomainError):
            respiration_heat(20.0, 2e-8, 0.1, 10.0, -1.0, 10.7e6)

    def test_nan_temperature_raises(self) -> None:
        """NaN temperature is rejected."""
        with pytest.raises(DomainError):
            respiration_heat(math.nan, 2e-8, 0.1, 10.0, 100.0, 10.7e6)


class TestConvectiveHeat:
    """Tests for forced convection."""

    def test_reference_value(self) -> None:
        """At Re = 5000 the enhancement is 1."""
        q = convective_heat(25.0, 1.0, 1.0, 5000.0, 5.0, 20.0, 15.0)
        assert q == pytest.approx(625.0)

    def test_zero_at_equal_temperatures(self) -> None:
        """No difference, no flow."""
        assert convective_heat(25.0, 0.8, 0.9, 44000.0, 5.0, 12.0, 12.0) == 0.0

    def test_sign_follows_difference(self) -> None:
        """Product colder than air gains heat (negative Q)."""
        assert convective_heat(25.0, 0.8, 0.9, 44000.0, 5.0, 10.0, 15.0) < 0
        assert convective_heat(25.0, 0.8, 0.9, 44000.0, 5.0, 20.0, 15.0) > 0

    def test_scales_with_tcpi_and_position(self) -> None:
        """TCPI and position factor scale linearly."""
        base = convective_heat(25.0, 1.0, 1.0, 10000.0, 5.0, 20.0, 15.0)
        scaled = convective_heat(25.0, 0.5, 0.8, 10000.0, 5.0, 20.0, 15.0)
        assert scaled == pytest.approx(base * 0.4)

    def test_no_flow(self) -> None:
        """Re = 0 means no forced convection."""
        assert convective_heat(25.0, 1.0, 1.0, 0.0, 5.0, 20.0, 15.0) == 0.0

    def test_zero_area_raises(self) -> None:
        """Area must be positive."""
        with pytest.raises(DomainError) as exc_info:
            convective_heat(25.0, 1.0, 1.0, 5000.0, 0.0, 20.0, 15.0)
        assert exc_info.value.quantity == "area"


class TestEvaporation:
    """Tests for evaporation rate and evaporative cooling."""

    def test_rate(self) -> None:
        """m = hm A fw VPD / (Rv T)."""
        rate = evaporation_rate(0.01, 5.0, 0.8, 1000.0, 20.0)
        expected = 0.01 * 5.0 * 0.8 * 1000.0 / (GAS_CONSTANT_WATER_VAPOR * 293.15)
        assert rate == pytest.approx(expected)

    def test_cooling_uses_latent_heat(self) -> None:
        """Q = m * lambda."""
        q = evaporative_cooling(0.01, 5.0, 0.8, 1000.0, 20.0)
        assert q == pytest.approx(
            evaporation_rate(0.01, 5.0, 0.8, 1000.0, 20.0) * LATENT_HEAT_VAPORIZATION
        )

    def test_dry_surface(self) -> None:
        """A dry surface does not evaporate."""
        assert evaporative_cooling(0.01, 5.0, 0.0, 1000.0, 20.0) == 0.0

    def test_zero_deficit(self) -> None:
        """No deficit, no evaporation."""
        assert evaporative_cooling(0.01, 5.0, 0.8, 0.0, 20.0) == 0.0

    def test_zero_area_raises(self) -> None:
        """Area must be positive."""
        with pytest.raises(DomainError):
            evaporation_rate(0.01, 0.0, 0.8, 1000.0, 20.0)


class TestEnergyBalances:
    """Tests for product and air temperature rates."""

    def test_product_rate(self) -> None:
        """Net heat over heat capacity."""
        rate = product_temperature_rate(100.0, 60.0, 20.0, 100.0, 3800.0)
        assert rate == pytest.approx(20.0 / 380000.0)

    def test_product_cools_when_losing_heat(self) -> None:
        """Convection and evaporation cool the product."""
        assert product_temperature_rate(10.0, 500.0, 100.0, 100.0, 3800.0) < 0

    def test_product_zero_mass_raises(self) -> None:
        """Mass must be positive."""
        with pytest.raises(DomainError):
            product_temperature_rate(0.0, 0.0, 0.0, 0.0, 3800.0)

    def test_air_advection(self) -> None:
        """Warmer inflow heats the zone."""
        rate = air_temperature_rate(50.0, 1006.0, 2.0, 16.0, 15.0, 0.0, 0.0, 0.0)
        assert rate == pytest.approx(0.04)

    def test_air_sources_and_sink(self) -> None:
        """Convection and walls heat; coil cools."""
        rate = air_temperature_rate(50.0, 1006.0, 0.0, 15.0, 15.0, 3000.0, 200.0, 8230.0)
        assert rate == pytest.approx(-5030.0 / (50.0 * 1006.0))

    def test_air_zero_mass_raises(self) -> None:
        """Air mass must be positive."""
        with pytest.raises(DomainError):
            air_temperature_rate(0.0, 1006.0, 2.0, 15.0, 15.0, 0.0, 0.0, 0.0)
