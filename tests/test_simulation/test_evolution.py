"""Tests for the one-step evolution of the container state."""

from __future__ import annotations

import math

import numpy as np
import pytest

from precool_sim.core.exceptions import DomainError, NumericalInstabilityError
from precool_sim.core.state import SystemParameters, SystemState
from precool_sim.physics.cooling_unit import TCPI_FLOOR
from precool_sim.physics.psychrometrics import saturation_humidity_ratio
from precool_sim.simulation.container import total_energy
from precool_sim.simulation.evolution import (
    EdgeAwareZoneModel,
    LumpedZoneModel,
    evolve_state,
    get_model,
    next_tcpi,
)
from precool_sim.simulation.scenarios import (
    reference_parameters,
    reference_state,
    uniform_grid,
)

DT = 2.5


class TestNextTcpi:
    """Tests for the TCPI controller update."""

    def test_on_target_unchanged(self) -> None:
        """COP/TCPI equal to the target leaves TCPI unchanged."""
        assert next_tcpi(0.5, 0.9, 0.9) == pytest.approx(0.5)

    def test_clamped_to_one(self) -> None:
        """High COP cannot push TCPI above one."""
        assert next_tcpi(0.95, 10.0, 0.9) == 1.0

    def test_floored(self) -> None:
        """Zero COP decays TCPI but never below the floor."""
        assert next_tcpi(TCPI_FLOOR, 0.0, 0.9) == TCPI_FLOOR

    def test_decays_without_cooling(self) -> None:
        """Zero COP shrinks TCPI by the controller gain."""
        assert next_tcpi(0.9, 0.0, 0.9) == pytest.approx(0.81)


class TestStepInvariants:
    """Physical bounds hold after a step."""

    def test_humidity_within_saturation(
        self, state: SystemState, params: SystemParameters, rng: np.random.Generator
    ) -> None:
        """Air humidity stays between zero and saturation."""
        new = evolve_state(state, params, DT, rng=rng)
        for t_a, w_a in zip(new.air_temp, new.air_humidity, strict=True):
            assert 0.0 <= w_a <= saturation_humidity_ratio(t_a, params.pressure)

    def test_moisture_never_increases(
        self, state: SystemState, params: SystemParameters, rng: np.random.Generator
    ) -> None:
        """Product only loses water."""
        new = evolve_state(state, params, DT, rng=rng)
        for i, j in state.cells():
            assert 0.0 <= new.product_moisture[i][j] <= state.product_moisture[i][j]

    def test_tcpi_and_power_bounds(
        self, state: SystemState, params: SystemParameters, rng: np.random.Generator
    ) -> None:
        """TCPI stays in (0, 1] and power in [0, max]."""
        new = evolve_state(state, params, DT, rng=rng)
        assert 0.0 < new.tcpi <= 1.0
        assert 0.0 <= new.cooling_power <= params.max_cooling_power

    def test_time_advances(
        self, state: SystemState, params: SystemParameters, rng: np.random.Generator
    ) -> None:
        """Elapsed time grows by dt."""
        new = evolve_state(state, params, DT, rng=rng)
        assert new.t == pytest.approx(state.t + DT)

    def test_input_not_modified(
        self, state: SystemState, params: SystemParameters, rng: np.random.Generator
    ) -> None:
        """The previous state is left untouched."""
        before = state.copy()
        evolve_state(state, params, DT, rng=rng)
        assert state == before

    def test_product_and_air_converge(
        self, state: SystemState, params: SystemParameters, rng: np.random.Generator
    ) -> None:
        """Every cell's product-air temperature difference shrinks."""
        new = evolve_state(state, params, DT, rng=rng)
        for i, j in state.cells():
            before = abs(state.product_temp[i][j] - state.air_temp[i])
            after = abs(new.product_temp[i][j] - new.air_temp[i])
            assert after < before


class TestStepResult:
    """Tests for the per-zone exchange breakdown."""

    def test_reference_loads(self, state: SystemState, params: SystemParameters) -> None:
        """Sensible load is m_dot cp (Ta - Tcoil) per zone."""
        result = LumpedZoneModel().step(state, params, DT, rng=1)

        for zone in result.zones:
            assert zone.sensible_load == pytest.approx(2.0 * 1006.0 * 10.0)
            assert zone.latent_load > 0
            assert zone.wall_heat == 100.0
        # Upstream zone has no inflow difference at uniform air temperature
        assert result.zones[1].advected_heat == pytest.approx(0.0)

    def test_power_saturates(self, state: SystemState, params: SystemParameters) -> None:
        """Load well above capacity drives the unit to maximum power."""
        result = LumpedZoneModel().step(state, params, DT, rng=1)

        assert result.cooling_power == pytest.approx(params.max_cooling_power)
        assert result.load_fraction == pytest.approx(
            params.max_cooling_power / result.total_load
        )
        assert result.delivered_cooling == pytest.approx(params.max_cooling_power)
        assert result.cop == pytest.approx(result.total_load / params.max_cooling_power)

    def test_tcpi_clamped_after_high_cop(
        self, state: SystemState, params: SystemParameters
    ) -> None:
        """COP well above target raises TCPI to its upper bound."""
        result = LumpedZoneModel().step(state, params, DT, rng=1)
        assert result.state.tcpi == 1.0

    def test_no_clamp_in_reference_step(
        self, state: SystemState, params: SystemParameters
    ) -> None:
        """The reference step keeps humidity below saturation."""
        result = LumpedZoneModel().step(state, params, DT, rng=1)
        assert result.clamped_zones == []


class TestEnergyBalance:
    """Energy removed matches the cooling delivered."""

    def test_energy_removed_close_to_power(
        self, state: SystemState, params: SystemParameters, rng: np.random.Generator
    ) -> None:
        """Energy drop over one step is within 10 % of P dt."""
        new = evolve_state(state, params, DT, rng=rng)
        removed = total_energy(state, params) - total_energy(new, params)
        expected = new.cooling_power * DT

        assert removed > 0
        assert abs(removed - expected) <= 0.1 * expected

    def test_energy_closes_exactly(self, state: SystemState, params: SystemParameters) -> None:
        """Energy change equals heat input minus delivered cooling."""
        result = LumpedZoneModel().step(state, params, DT, rng=3)
        change = total_energy(result.state, params) - total_energy(state, params)
        expected = (result.heat_input - result.delivered_cooling) * DT
        assert change == pytest.approx(expected, abs=1.0)


class TestAirflow:
    """Tests of airflow effects on cooling."""

    def test_doubled_airflow_cools_faster(self, state: SystemState) -> None:
        """Twice the airflow removes more heat from the inlet cell."""
        slow = evolve_state(state, reference_parameters(alpha=0.0), DT)
        fast = evolve_state(state, reference_parameters(alpha=0.0, air_flow=4.0), DT)

        drop_slow = state.product_temp[0][0] - slow.product_temp[0][0]
        drop_fast = state.product_temp[0][0] - fast.product_temp[0][0]
        assert drop_fast > drop_slow > 0

    def test_no_airflow(self, state: SystemState) -> None:
        """Still air stops the unit, decays TCPI and saturates the air."""
        params = reference_parameters(air_flow=0.0)
        result = LumpedZoneModel().step(state, params, 304.0)

        assert result.cooling_power == 0.0
        assert result.state.tcpi == pytest.approx(0.81)
        assert result.clamped_zones == [0, 1]
        for t_a, w_a in zip(result.state.air_temp, result.state.air_humidity, strict=True):
            assert w_a == pytest.approx(saturation_humidity_ratio(t_a, params.pressure))

    def test_zero_and_full_initial_power(self, params: SystemParameters) -> None:
        """Extreme initial power values step without error."""
        for power in (0.0, params.max_cooling_power):
            new = evolve_state(reference_state(cooling_power=power), params, DT, rng=0)
            assert 0.0 <= new.cooling_power <= params.max_cooling_power


class TestRandomness:
    """Tests for turbulence perturbation sampling."""

    def test_still_air_independent_of_seed(
        self, state: SystemState, still_params: SystemParameters
    ) -> None:
        """With alpha zero the result does not depend on the generator."""
        a = evolve_state(state, still_params, DT, rng=1)
        b = evolve_state(state, still_params, DT, rng=2)
        c = evolve_state(state, still_params, DT)
        assert a == b == c

    def test_same_seed_same_result(
        self, state: SystemState, params: SystemParameters
    ) -> None:
        """Equal seeds reproduce the step exactly."""
        a = evolve_state(state, params, DT, rng=np.random.default_rng(5))
        b = evolve_state(state, params, DT, rng=np.random.default_rng(5))
        assert a == b

    def test_different_seeds_differ(
        self, state: SystemState, params: SystemParameters
    ) -> None:
        """Different seeds perturb the product temperatures differently."""
        a = evolve_state(state, params, DT, rng=1)
        b = evolve_state(state, params, DT, rng=2)
        assert a.product_temp != b.product_temp

    def test_generator_untouched_without_perturbation(
        self, state: SystemState, still_params: SystemParameters
    ) -> None:
        """No draws are taken when alpha is zero."""
        rng = np.random.default_rng(11)
        evolve_state(state, still_params, DT, rng=rng)
        assert rng.random() == np.random.default_rng(11).random()

    def test_generator_required(self, state: SystemState, params: SystemParameters) -> None:
        """Perturbation without a generator is an error."""
        with pytest.raises(ValueError, match="random generator"):
            evolve_state(state, params, DT)


class TestStepErrors:
    """Tests for invalid input and numerical failure."""

    @pytest.mark.parametrize("dt", [0.0, -1.0, math.nan, math.inf])
    def test_invalid_dt(self, state: SystemState, params: SystemParameters, dt: float) -> None:
        """Non-positive or non-finite dt raises DomainError."""
        with pytest.raises(DomainError):
            evolve_state(state, params, dt, rng=0)

    def test_shape_mismatch(self, params: SystemParameters) -> None:
        """A state of the wrong shape raises DomainError."""
        state = SystemState(
            product_temp=uniform_grid(20.0, 3, 2),
            product_moisture=uniform_grid(0.8, 3, 2),
            air_temp=[15.0] * 3,
            air_humidity=[0.008] * 3,
        )
        with pytest.raises(DomainError):
            evolve_state(state, params, DT, rng=0)

    def test_non_finite_input(self, params: SystemParameters) -> None:
        """A NaN in the input state raises DomainError."""
        state = reference_state(air_humidity=[0.008, math.nan])
        with pytest.raises(DomainError) as exc_info:
            evolve_state(state, params, DT, rng=0)
        assert exc_info.value.quantity == "air_humidity"

    def test_overflow_is_instability(self, params: SystemParameters) -> None:
        """Exploding respiration heat raises NumericalInstabilityError."""
        state = reference_state(product_temp=[[1e4, 20.0], [20.0, 20.0]])
        with pytest.raises(NumericalInstabilityError):
            evolve_state(state, params, DT, rng=0)

    def test_non_finite_result(self, state: SystemState) -> None:
        """A non-finite new state is reported with its location."""
        params = reference_parameters(specific_heat=1e-310)
        with pytest.raises(NumericalInstabilityError) as exc_info:
            evolve_state(state, params, DT, rng=0)
        assert exc_info.value.quantity == "product_temp"
        assert exc_info.value.index == (0, 0)


class TestModels:
    """Tests for the registered evolution models."""

    def test_get_model_by_name(self) -> None:
        """Models are created from registry names."""
        assert isinstance(get_model("lumped"), LumpedZoneModel)
        assert isinstance(get_model("edge_aware"), EdgeAwareZoneModel)

    def test_get_model_instance_passthrough(self) -> None:
        """Model instances are returned as given."""
        model = EdgeAwareZoneModel(edge_exposure=1.3)
        assert get_model(model) is model

    def test_unknown_model(self) -> None:
        """Unknown names raise KeyError."""
        with pytest.raises(KeyError):
            get_model("nonexistent")

    def test_lumped_uses_configured_factor(self, params: SystemParameters) -> None:
        """Lumped factors come straight from the parameters."""
        model = LumpedZoneModel()
        assert model.position_factor(params, 1, 1) == 0.6

    def test_edge_cells_boosted(self) -> None:
        """Edge cells gain exposure and interior cells keep the base factor."""
        params = reference_parameters(
            zones=3,
            layers=3,
            product_mass=uniform_grid(100.0, 3, 3),
            product_area=uniform_grid(5.0, 3, 3),
            position_factor=uniform_grid(0.5, 3, 3),
            air_mass=[50.0] * 3,
            wall_heat_gain=[100.0] * 3,
        )
        model = EdgeAwareZoneModel(edge_exposure=1.2)

        assert model.is_edge(params, 0, 1)
        assert not model.is_edge(params, 1, 1)
        assert model.position_factor(params, 0, 1) == pytest.approx(0.6)
        assert model.position_factor(params, 1, 1) == 0.5

    def test_edge_factor_capped(self, params: SystemParameters) -> None:
        """Boosted factors never exceed one."""
        assert EdgeAwareZoneModel().position_factor(params, 0, 0) == 1.0

    def test_invalid_exposure(self) -> None:
        """Negative exposure is rejected."""
        with pytest.raises(DomainError):
            EdgeAwareZoneModel(edge_exposure=-0.5)

    def test_edge_aware_cools_more(
        self, state: SystemState, still_params: SystemParameters
    ) -> None:
        """Boosted exposure removes more heat than the lumped model."""
        lumped = evolve_state(state, still_params, DT, model="lumped")
        edge = evolve_state(state, still_params, DT, model="edge_aware")
        assert edge.product_temp[0][1] < lumped.product_temp[0][1]
