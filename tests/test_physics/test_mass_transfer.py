"""Tests for moisture balances."""

from __future__ import annotations

import pytest

from precool_sim.core.exceptions import DomainError
from precool_sim.physics.mass_transfer import air_moisture_rate, product_moisture_rate


class TestProductMoisture:
    """Tests for product moisture rate."""

    def test_evaporation_dries_product(self) -> None:
        """Evaporation lowers moisture content."""
        assert product_moisture_rate(2e-4, 100.0) == pytest.approx(-2e-6)

    def test_zero_mass_raises(self) -> None:
        """Mass must be positive."""
        with pytest.raises(DomainError) as exc_info:
            product_moisture_rate(1e-4, 0.0)
        assert exc_info.value.quantity == "mass"


class TestAirMoisture:
    """Tests for zone air humidity rate."""

    def test_balance(self) -> None:
        """Evaporation adds, the coil removes, ventilation adds."""
        rate = air_moisture_rate(1e-3, 4e-4, 1e-4, 50.0)
        assert rate == pytest.approx(7e-4 / 50.0)

    def test_dehumidification_dries_air(self) -> None:
        """Coil condensation alone lowers humidity."""
        assert air_moisture_rate(0.0, 1e-3, 0.0, 50.0) < 0

    def test_zero_air_mass_raises(self) -> None:
        """Air mass must be positive."""
        with pytest.raises(DomainError):
            air_moisture_rate(1e-3, 0.0, 0.0, 0.0)
