"""State evolution for the zone/layer cooling model.

One step advances the whole container by ``dt`` with explicit Euler:

1. Cooling loads for every zone are evaluated from the previous state and
   summed; the unit's delivered power is shared in proportion to load.
2. Each zone's air density, velocity and Reynolds number are derived from
   its previous air temperature.
3. Each product cell exchanges heat by respiration, convection and
   evaporation, and loses moisture.
4. Zone air integrates advection from the upstream zone (previous value),
   product convection, wall gains and coil removal. Humidity above
   saturation is clamped.
5. The TCPI controller is updated from the step's COP.

Every read comes from the previous state, so zones and layers can be
evaluated in any order. Models differ only in how they weight a cell's
exposure to the airstream; see ``LumpedZoneModel`` and
``EdgeAwareZoneModel``.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from precool_sim.core.exceptions import DomainError, NumericalInstabilityError
from precool_sim.core.registry import create_model, register_model
from precool_sim.core.state import SystemParameters, SystemState
from precool_sim.physics.cooling_unit import (
    TCPI_FLOOR,
    actual_cooling_power,
    dehumidification_rate,
    sensible_cooling,
)
from precool_sim.physics.heat_transfer import (
    air_temperature_rate,
    convective_heat,
    evaporation_rate,
    product_temperature_rate,
    respiration_heat,
)
from precool_sim.physics.mass_transfer import air_moisture_rate, product_moisture_rate
from precool_sim.physics.metrics import coefficient_of_performance
from precool_sim.physics.psychrometrics import (
    air_density,
    saturation_humidity_ratio,
    vapor_pressure_deficit,
)
from precool_sim.physics.turbulence import (
    duct_velocity,
    hydraulic_diameter,
    perturbed_heat_transfer,
    reynolds_number,
    turbulence_intensity,
)

logger = logging.getLogger(__name__)

#: Controller gain on the relative COP error
TCPI_GAIN = 0.1


def next_tcpi(tcpi: float, cop: float, target: float) -> float:
    """Update the TCPI controller variable.

    TCPI' = TCPI * (1 + 0.1 * (COP / target - 1)), clamped to [TCPI_FLOOR, 1].

    Args:
        tcpi: Current TCPI.
        cop: Coefficient of performance over the step.
        target: Target COP.

    Returns:
        Updated TCPI.

    Examples:
        >>> next_tcpi(0.5, 0.9, 0.9)
        0.5
    """
    updated = tcpi * (1.0 + TCPI_GAIN * (cop / target - 1.0))
    return min(1.0, max(TCPI_FLOOR, updated))


@dataclass(frozen=True)
class ZoneExchange:
    """Heat and moisture exchanged in one zone during a step.

    Heat rates are in W and mass rates in kg/s, evaluated at the start of
    the step.

    Attributes:
        respiration_heat: Total respiration heat of the zone's product.
        convective_heat: Total convective heat from product to air.
        evaporated_mass: Total moisture evaporated from product.
        sensible_load: Sensible load presented to the coil.
        latent_load: Latent load presented to the coil.
        delivered_sensible: Sensible heat actually removed by the coil.
        dehumidified_mass: Moisture actually condensed on the coil.
        delivered_latent: Latent heat actually removed by the coil.
        advected_heat: Heat carried in from the upstream zone.
        wall_heat: Heat gained through the walls.
        product_moisture_rates: Per-layer product moisture rate in (kg/kg)/s.
        air_moisture_rate: Zone humidity ratio rate in (kg/kg)/s.
        humidity_clamped: True if humidity was clamped to saturation.
    """

    respiration_heat: float
    convective_heat: float
    evaporated_mass: float
    sensible_load: float
    latent_load: float
    delivered_sensible: float
    dehumidified_mass: float
    delivered_latent: float
    advected_heat: float
    wall_heat: float
    product_moisture_rates: tuple[float, ...]
    air_moisture_rate: float
    humidity_clamped: bool


@dataclass(frozen=True)
class StepResult:
    """Outcome of one evolution step.

    Attributes:
        state: New system state.
        zones: Per-zone exchange records.
        dt: Step length in s.
        cooling_power: Power output of the unit in W.
        load_fraction: Share of the total load the unit covered (0-1).
        cop: Coefficient of performance used by the controller.
    """

    state: SystemState
    zones: tuple[ZoneExchange, ...]
    dt: float
    cooling_power: float
    load_fraction: float
    cop: float

    @property
    def total_load(self) -> float:
        """Sensible plus latent load over all zones in W."""
        return sum(z.sensible_load + z.latent_load for z in self.zones)

    @property
    def delivered_cooling(self) -> float:
        """Heat actually removed by the coil over all zones in W."""
        return sum(z.delivered_sensible + z.delivered_latent for z in self.zones)

    @property
    def heat_input(self) -> float:
        """Respiration, wall and advected heat over all zones in W."""
        return sum(z.respiration_heat + z.wall_heat + z.advected_heat for z in self.zones)

    @property
    def clamped_zones(self) -> list[int]:
        """Zones whose humidity was clamped to saturation."""
        return [i for i, z in enumerate(self.zones) if z.humidity_clamped]


def _resolve_rng(
    rng: np.random.Generator | int | None,
) -> np.random.Generator | None:
    if rng is None or isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


class EvolutionModel(ABC):
    """Explicit-Euler evolution of the zone/layer state.

    Subclasses choose how strongly each cell is exposed to the airstream.
    """

    name: ClassVar[str] = "base"

    @abstractmethod
    def position_factor(self, params: SystemParameters, zone: int, layer: int) -> float:
        """Airflow exposure of a cell used to scale convection."""

    def step(
        self,
        state: SystemState,
        params: SystemParameters,
        dt: float,
        rng: np.random.Generator | int | None = None,
    ) -> StepResult:
        """Advance the state by one time step.

        Args:
            state: Previous state (not modified).
            params: Run parameters.
            dt: Step length in seconds.
            rng: Generator (or seed) for turbulence perturbation. Required
                unless ``params.alpha`` is zero or there is no airflow.

        Returns:
            StepResult with the new state and per-zone exchanges.

        Raises:
            DomainError: If dt is invalid, the state does not match the
                parameters, or a correlation receives impossible input.
            NumericalInstabilityError: If the new state is not finite.
        """
        if not (math.isfinite(dt) and dt > 0):
            msg = f"Time step must be positive and finite, got {dt}"
            raise DomainError(msg, quantity="dt", value=dt)
        if (state.zones, state.layers) != (params.zones, params.layers):
            msg = (
                f"State is {state.zones} x {state.layers} but parameters "
                f"describe {params.zones} x {params.layers}"
            )
            raise DomainError(msg, quantity="state_shape")
        located = state.first_non_finite()
        if located is not None:
            quantity, index = located
            msg = f"Input state has non-finite {quantity} at {index}"
            raise DomainError(msg, quantity=quantity)

        try:
            result = self._advance(state, params, dt, _resolve_rng(rng))
        except OverflowError as e:
            msg = f"Overflow while stepping from t={state.t}s with dt={dt}s"
            raise NumericalInstabilityError(msg) from e

        located = result.state.first_non_finite()
        if located is not None:
            quantity, index = located
            msg = f"Non-finite {quantity} at {index} after step to t={state.t + dt}s"
            raise NumericalInstabilityError(msg, quantity=quantity, index=index)
        return result

    def _draw_perturbations(
        self,
        params: SystemParameters,
        rng: np.random.Generator | None,
    ) -> np.ndarray | None:
        if params.alpha == 0 or params.air_flow == 0:
            return None
        if rng is None:
            msg = "A random generator or seed is required when alpha is non-zero"
            raise ValueError(msg)
        return rng.standard_normal((params.zones, params.layers))

    def _advance(
        self,
        state: SystemState,
        params: SystemParameters,
        dt: float,
        rng: np.random.Generator | None,
    ) -> StepResult:
        p = params
        w_sat_coil = saturation_humidity_ratio(p.coil_temp, p.pressure)

        # Cooling loads from the previous state, reduced over all zones
        sensible_loads = [
            max(0.0, sensible_cooling(p.air_flow, p.air_specific_heat, t_a, p.coil_temp))
            for t_a in state.air_temp
        ]
        dehum_loads = [
            max(0.0, dehumidification_rate(p.air_flow, w_a, w_sat_coil, t_a, p.coil_temp))
            for t_a, w_a in zip(state.air_temp, state.air_humidity, strict=True)
        ]
        total_sensible = sum(sensible_loads)
        total_latent = sum(dehum_loads) * p.latent_heat
        total_load = total_sensible + total_latent

        power = actual_cooling_power(
            p.rated_power, total_load, p.max_cooling_power, state.tcpi
        )
        fraction = min(1.0, power / total_load) if total_load > 0 else 0.0

        eps = self._draw_perturbations(p, rng)
        d_h = hydraulic_diameter(p.container_width, p.container_height)

        product_temp: list[list[float]] = []
        product_moisture: list[list[float]] = []
        air_temp: list[float] = []
        air_humidity: list[float] = []
        exchanges: list[ZoneExchange] = []

        for i in range(p.zones):
            t_a = state.air_temp[i]
            w_a = state.air_humidity[i]

            density = air_density(t_a, p.pressure)
            velocity = duct_velocity(
                p.air_flow, density, p.container_width, p.container_height
            )
            re = reynolds_number(density, velocity, d_h, p.air_viscosity)
            intensity = turbulence_intensity(re) if re > 0 else 0.0

            zone_temp: list[float] = []
            zone_moisture: list[float] = []
            moisture_rates: list[float] = []
            zone_resp = zone_conv = zone_evap = 0.0

            for j in range(p.layers):
                t_p = state.product_temp[i][j]
                x_p = state.product_moisture[i][j]
                mass = p.product_mass[i][j]
                area = p.product_area[i][j]

                h_eff = p.base_heat_transfer
                if eps is not None:
                    h_eff = perturbed_heat_transfer(
                        p.base_heat_transfer, p.alpha, intensity, float(eps[i, j])
                    )

                q_resp = respiration_heat(
                    t_p,
                    p.respiration_rate,
                    p.respiration_temp_coeff,
                    p.respiration_ref_temp,
                    mass,
                    p.respiration_enthalpy,
                )
                q_conv = convective_heat(
                    h_eff, self.position_factor(p, i, j), state.tcpi, re, area, t_p, t_a
                )

                vpd = vapor_pressure_deficit(t_p, p.water_activity, w_a, p.pressure)
                m_evap = evaporation_rate(
                    p.evaporative_mass_transfer, area, p.surface_wetness, vpd, t_p
                )
                # No condensation on product; cannot lose more water than it holds
                m_evap = min(max(0.0, m_evap), mass * max(0.0, x_p) / dt)
                q_evap = m_evap * p.latent_heat

                rate = product_temperature_rate(q_resp, q_conv, q_evap, mass, p.specific_heat)
                moisture_rate = product_moisture_rate(m_evap, mass)

                zone_temp.append(t_p + dt * rate)
                zone_moisture.append(max(0.0, x_p + dt * moisture_rate))
                moisture_rates.append(moisture_rate)
                zone_resp += q_resp
                zone_conv += q_conv
                zone_evap += m_evap

            t_in = state.air_temp[i - 1] if i > 0 else t_a
            q_sensible = fraction * sensible_loads[i]
            m_dehum = fraction * dehum_loads[i]
            wall = p.wall_heat_gain[i]

            new_t_a = t_a + dt * air_temperature_rate(
                p.air_mass[i],
                p.air_specific_heat,
                p.air_flow,
                t_in,
                t_a,
                zone_conv,
                wall,
                q_sensible,
            )
            air_rate = air_moisture_rate(zone_evap, m_dehum, 0.0, p.air_mass[i])
            new_w_a = max(0.0, w_a + dt * air_rate)

            w_sat = saturation_humidity_ratio(new_t_a, p.pressure)
            clamped = new_w_a > w_sat
            if clamped:
                logger.debug(
                    "Zone %d humidity %.6f clamped to saturation %.6f at %.2fC",
                    i,
                    new_w_a,
                    w_sat,
                    new_t_a,
                )
                new_w_a = w_sat

            product_temp.append(zone_temp)
            product_moisture.append(zone_moisture)
            air_temp.append(new_t_a)
            air_humidity.append(new_w_a)
            exchanges.append(
                ZoneExchange(
                    respiration_heat=zone_resp,
                    convective_heat=zone_conv,
                    evaporated_mass=zone_evap,
                    sensible_load=sensible_loads[i],
                    latent_load=dehum_loads[i] * p.latent_heat,
                    delivered_sensible=q_sensible,
                    dehumidified_mass=m_dehum,
                    delivered_latent=m_dehum * p.latent_heat,
                    advected_heat=p.air_flow * p.air_specific_heat * (t_in - t_a),
                    wall_heat=wall,
                    product_moisture_rates=tuple(moisture_rates),
                    air_moisture_rate=air_rate,
                    humidity_clamped=clamped,
                )
            )

        cop = coefficient_of_performance(total_sensible, total_latent, power)
        new_state = SystemState(
            product_temp=product_temp,
            product_moisture=product_moisture,
            air_temp=air_temp,
            air_humidity=air_humidity,
            tcpi=next_tcpi(state.tcpi, cop, p.tcpi_target),
            cooling_power=power,
            t=state.t + dt,
        )
        logger.debug(
            "Step to t=%.1fs: load=%.0fW power=%.0fW COP=%.3f TCPI=%.3f",
            new_state.t,
            total_load,
            power,
            cop,
            new_state.tcpi,
        )
        return StepResult(
            state=new_state,
            zones=tuple(exchanges),
            dt=dt,
            cooling_power=power,
            load_fraction=fraction,
            cop=cop,
        )


@register_model("lumped")
class LumpedZoneModel(EvolutionModel):
    """Zone/layer model using the configured position factors as given."""

    name: ClassVar[str] = "lumped"

    def position_factor(self, params: SystemParameters, zone: int, layer: int) -> float:
        return params.position_factor[zone][layer]


@register_model("edge_aware")
class EdgeAwareZoneModel(EvolutionModel):
    """Zone/layer model with extra exposure for cells on a flow edge.

    Cells in the first or last zone, or in the bottom or top layer, sit
    against the supply/return plenum or the floor/ceiling channels and see
    faster air. Their position factor is multiplied by ``edge_exposure``
    and capped at 1.
    """

    name: ClassVar[str] = "edge_aware"

    def __init__(self, edge_exposure: float = 1.15) -> None:
        if edge_exposure < 0:
            msg = f"Edge exposure cannot be negative, got {edge_exposure}"
            raise DomainError(msg, quantity="edge_exposure", value=edge_exposure)
        self.edge_exposure = edge_exposure

    def is_edge(self, params: SystemParameters, zone: int, layer: int) -> bool:
        """True if the cell lies on the container's flow or vertical edge."""
        return zone in (0, params.zones - 1) or layer in (0, params.layers - 1)

    def position_factor(self, params: SystemParameters, zone: int, layer: int) -> float:
        base = params.position_factor[zone][layer]
        if self.is_edge(params, zone, layer):
            return min(1.0, base * self.edge_exposure)
        return base


def get_model(model: str | EvolutionModel = "lumped") -> EvolutionModel:
    """Resolve a model instance from a registered name or an instance."""
    if isinstance(model, EvolutionModel):
        return model
    return create_model(model)


def evolve_state(
    state: SystemState,
    params: SystemParameters,
    dt: float,
    *,
    rng: np.random.Generator | int | None = None,
    model: str | EvolutionModel = "lumped",
) -> SystemState:
    """Advance a state by one step and return the new state.

    Args:
        state: Previous state (not modified).
        params: Run parameters.
        dt: Step length in seconds.
        rng: Generator or seed for turbulence perturbation.
        model: Registered model name or model instance.

    Returns:
        The new SystemState.
    """
    return get_model(model).step(state, params, dt, rng).state
