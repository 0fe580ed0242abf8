"""Cooling container facade with energy, moisture and stability diagnostics.

CoolingContainer owns the current state, the fixed parameters, the time
step and the random generator for one run. It advances the state through
an evolution model and reports conservation, performance and validity of
whatever state it currently holds.

Example:
    >>> from precool_sim.simulation.scenarios import reference_parameters, reference_state
    >>> container = CoolingContainer(reference_state(), reference_parameters(), seed=1)
    >>> state = container.next_step()
    >>> container.validate_state().is_valid
    True
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Final

import numpy as np

from precool_sim.core.exceptions import DomainError
from precool_sim.core.state import SystemParameters, SystemState
from precool_sim.physics.metrics import (
    cooling_rate_index,
    temperature_spread,
    uniformity_index,
)
from precool_sim.physics.psychrometrics import is_humidity_valid
from precool_sim.simulation.evolution import EvolutionModel, StepResult, get_model
from precool_sim.simulation.timestep import (
    CFL_LIMIT,
    FOURIER_LIMIT,
    TimeScales,
    select_time_step,
    time_scales,
)

logger = logging.getLogger(__name__)

#: Product temperature above which a state is physically implausible (°C)
MAX_PHYSICAL_TEMPERATURE: Final[float] = 50.0


def product_energy(state: SystemState, params: SystemParameters) -> float:
    """Sensible energy stored in the product relative to 0 °C in J."""
    return sum(
        params.product_mass[i][j] * params.specific_heat * state.product_temp[i][j]
        for i, j in state.cells()
    )


def air_sensible_energy(state: SystemState, params: SystemParameters) -> float:
    """Sensible energy stored in the zone air relative to 0 °C in J."""
    return sum(
        m * params.air_specific_heat * t
        for m, t in zip(params.air_mass, state.air_temp, strict=True)
    )


def air_latent_energy(state: SystemState, params: SystemParameters) -> float:
    """Latent energy of the vapour held in the zone air in J."""
    return sum(
        m * params.latent_heat * w
        for m, w in zip(params.air_mass, state.air_humidity, strict=True)
    )


def total_energy(state: SystemState, params: SystemParameters) -> float:
    """Total product and air energy in J."""
    return (
        product_energy(state, params)
        + air_sensible_energy(state, params)
        + air_latent_energy(state, params)
    )


def total_moisture(state: SystemState, params: SystemParameters) -> float:
    """Total water held by product and air in kg."""
    product = sum(
        params.product_mass[i][j] * state.product_moisture[i][j]
        for i, j in state.cells()
    )
    air = sum(
        m * w for m, w in zip(params.air_mass, state.air_humidity, strict=True)
    )
    return product + air


def _gradient(values: list[float]) -> float:
    if len(values) < 2:
        return 0.0
    return max(abs(b - a) for a, b in zip(values, values[1:]))


def _max_grid_gradient(grid: list[list[float]]) -> float:
    """Largest difference between neighbouring cells along either axis."""
    along_layers = max(_gradient(row) for row in grid)
    columns = [list(col) for col in zip(*grid)]
    along_zones = max(_gradient(col) for col in columns)
    return max(along_layers, along_zones)


@dataclass(frozen=True)
class EnergyBalance:
    """Energy accounting for the current state.

    Attributes:
        total_energy: Current total energy in J.
        initial_energy: Total energy at construction in J.
        energy_change: Change since construction in J.
        cooling_power: Unit output of the last step in W.
        time_step: Step length in s.
        zone_energy: Product plus air energy per zone in J.
        cooling_efficiency: Output as a fraction of maximum capacity.
        cumulative_cooling: Heat removed by the coil since construction in J.
        cumulative_heat_input: Respiration, wall and advected heat since
            construction in J.
        residual: Energy change not explained by recorded flows in J.
    """

    total_energy: float
    initial_energy: float
    energy_change: float
    cooling_power: float
    time_step: float
    zone_energy: tuple[float, ...]
    cooling_efficiency: float
    cumulative_cooling: float
    cumulative_heat_input: float
    residual: float


@dataclass(frozen=True)
class MoistureBalance:
    """Moisture accounting for the current state.

    Attributes:
        total_moisture: Current water in product and air in kg.
        initial_moisture: Water at construction in kg.
        moisture_change: Change since construction in kg.
        cumulative_dehumidification: Water condensed on the coil in kg.
        product_rates: Per-cell product moisture rates of the last step.
        air_rates: Per-zone humidity ratio rates of the last step.
        average_product_moisture: Mean product moisture content.
        min_moisture: Lowest product moisture content.
        max_moisture: Highest product moisture content.
        moisture_std: Population standard deviation of product moisture.
    """

    total_moisture: float
    initial_moisture: float
    moisture_change: float
    cumulative_dehumidification: float
    product_rates: tuple[tuple[float, ...], ...]
    air_rates: tuple[float, ...]
    average_product_moisture: float
    min_moisture: float
    max_moisture: float
    moisture_std: float


@dataclass(frozen=True)
class ZoneMetrics:
    """Performance figures of one zone."""

    average_temperature: float
    average_moisture: float
    cooling_rate_index: float
    cooling_effectiveness: float


@dataclass(frozen=True)
class PerformanceMetrics:
    """Cooling performance of the current state.

    Attributes:
        tcpi: Current turbulent cooling performance index.
        temperature_uniformity: Std of product temperature in K.
        moisture_uniformity: Std of product moisture.
        temperature_uniformity_index: Coefficient of variation of product
            temperature (0 if the mean is 0).
        cooling_rate: Mean product cooling rate since the start in °C/h.
        cop: Coefficient of performance of the last step.
        zones: Per-zone metrics.
    """

    tcpi: float
    temperature_uniformity: float
    moisture_uniformity: float
    temperature_uniformity_index: float
    cooling_rate: float
    cop: float
    zones: tuple[ZoneMetrics, ...]


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of a state validity check.

    Violations are physically impossible values; warnings flag numerical
    stability limits that are exceeded.
    """

    violations: tuple[str, ...]
    warnings: tuple[str, ...]
    metrics: dict[str, float] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        """True if there are no violations."""
        return not self.violations


@dataclass(frozen=True)
class HistoryPoint:
    """One recorded point of a run."""

    t: float
    average_product_temp: float
    cooling_power: float
    tcpi: float
    dt: float


@dataclass(frozen=True)
class SimulationHistory:
    """Result of simulating over a period.

    Attributes:
        final_state: State at the end of the period.
        steps: Number of steps taken.
        average_time_step: Mean step length in s.
        points: Recorded history, one point per step.
    """

    final_state: SystemState
    steps: int
    average_time_step: float
    points: tuple[HistoryPoint, ...]

    def to_dict(self) -> dict[str, Any]:
        """Summarize as plain data."""
        return {
            "steps": self.steps,
            "average_time_step": self.average_time_step,
            "final_time": self.final_state.t,
            "t": [p.t for p in self.points],
            "average_product_temp": [p.average_product_temp for p in self.points],
            "cooling_power": [p.cooling_power for p in self.points],
            "tcpi": [p.tcpi for p in self.points],
        }


class CoolingContainer:
    """Forced-air cooled container of produce.

    Attributes:
        model: Evolution model advancing the state.
    """

    def __init__(
        self,
        initial_state: SystemState,
        params: SystemParameters,
        *,
        dt: float | None = None,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
        model: str | EvolutionModel = "lumped",
    ) -> None:
        """Initialize the container.

        Args:
            initial_state: State at t0 (copied).
            params: Run parameters.
            dt: Fixed step length in s. Selected from the parameters if None.
            seed: Seed for the owned generator. Ignored if rng is given.
            rng: Generator to use for turbulence perturbation.
            model: Registered model name or model instance.

        Raises:
            DomainError: If the state does not match the parameters or dt is
                not positive and finite.
        """
        if (initial_state.zones, initial_state.layers) != (params.zones, params.layers):
            msg = (
                f"State is {initial_state.zones} x {initial_state.layers} but "
                f"parameters describe {params.zones} x {params.layers}"
            )
            raise DomainError(msg, quantity="state_shape")

        self._state = initial_state.copy()
        self._initial_state = initial_state.copy()
        self._params = params
        self._dt = select_time_step(params) if dt is None else float(dt)
        if not (math.isfinite(self._dt) and self._dt > 0):
            msg = f"Time step must be positive and finite, got {self._dt}"
            raise DomainError(msg, quantity="dt", value=self._dt)

        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self.model = get_model(model)

        self._initial_energy = total_energy(initial_state, params)
        self._initial_moisture = total_moisture(initial_state, params)
        self._last: StepResult | None = None
        self._cumulative_cooling = 0.0
        self._cumulative_heat_input = 0.0
        self._cumulative_dehumidification = 0.0
        self._steps = 0

        scales = self.time_scales()
        if not scales.is_stable:
            logger.warning(
                "Time step %.4gs exceeds stability limits (CFL=%.3f, Fourier=%.3f)",
                self._dt,
                scales.cfl,
                scales.fourier,
            )
        logger.info(
            "Container %d x %d ready: dt=%.4gs, model=%s",
            params.zones,
            params.layers,
            self._dt,
            self.model.name,
        )

    @property
    def current_state(self) -> SystemState:
        """Copy of the current state."""
        return self._state.copy()

    @property
    def initial_state(self) -> SystemState:
        """Copy of the state the container was built with."""
        return self._initial_state.copy()

    @property
    def parameters(self) -> SystemParameters:
        """Run parameters."""
        return self._params

    @property
    def time_step(self) -> float:
        """Step length in s."""
        return self._dt

    @property
    def steps(self) -> int:
        """Steps taken since construction."""
        return self._steps

    @property
    def last_step(self) -> StepResult | None:
        """Result of the most recent step, if any."""
        return self._last

    def next_step(self) -> SystemState:
        """Advance one time step.

        Returns:
            Copy of the new state.

        Raises:
            NumericalInstabilityError: If the step produces non-finite values.
        """
        result = self.model.step(self._state, self._params, self._dt, self._rng)
        self._last = result
        self._state = result.state.copy()
        self._steps += 1
        self._cumulative_cooling += result.delivered_cooling * self._dt
        self._cumulative_heat_input += result.heat_input * self._dt
        self._cumulative_dehumidification += (
            sum(z.dehumidified_mass for z in result.zones) * self._dt
        )
        return self._state.copy()

    def simulate_for(self, duration: float) -> SimulationHistory:
        """Advance until at least ``duration`` seconds have elapsed.

        Args:
            duration: Simulated period in s.

        Returns:
            SimulationHistory of the period.
        """
        if not (math.isfinite(duration) and duration >= 0):
            msg = f"Duration must be non-negative and finite, got {duration}"
            raise DomainError(msg, quantity="duration", value=duration)

        end = self._state.t + duration
        points: list[HistoryPoint] = []
        # Tolerance keeps float accumulation from adding a spurious step
        while self._state.t < end - 1e-9 * max(1.0, end):
            state = self.next_step()
            points.append(
                HistoryPoint(
                    t=state.t,
                    average_product_temp=float(np.mean(state.product_temp)),
                    cooling_power=state.cooling_power,
                    tcpi=state.tcpi,
                    dt=self._dt,
                )
            )

        return SimulationHistory(
            final_state=self._state.copy(),
            steps=len(points),
            average_time_step=self._dt if points else 0.0,
            points=tuple(points),
        )

    def energy_balance(self) -> EnergyBalance:
        """Report energy accounting for the current state."""
        state, params = self._state, self._params
        current = total_energy(state, params)
        change = current - self._initial_energy
        zone_energy = tuple(
            sum(
                params.product_mass[i][j] * params.specific_heat * state.product_temp[i][j]
                for j in range(params.layers)
            )
            + params.air_mass[i]
            * (
                params.air_specific_heat * state.air_temp[i]
                + params.latent_heat * state.air_humidity[i]
            )
            for i in range(params.zones)
        )
        efficiency = (
            state.cooling_power / params.max_cooling_power
            if params.max_cooling_power > 0
            else 0.0
        )
        expected = self._cumulative_heat_input - self._cumulative_cooling
        return EnergyBalance(
            total_energy=current,
            initial_energy=self._initial_energy,
            energy_change=change,
            cooling_power=state.cooling_power,
            time_step=self._dt,
            zone_energy=zone_energy,
            cooling_efficiency=efficiency,
            cumulative_cooling=self._cumulative_cooling,
            cumulative_heat_input=self._cumulative_heat_input,
            residual=change - expected,
        )

    def energy_flows(self) -> dict[str, dict[str, float]]:
        """Break down energy stores and the flows of the last step.

        Returns:
            Mapping with ``stores`` (J), ``flows`` (J over one step) and
            ``temperatures`` (°C ranges).
        """
        state, params = self._state, self._params
        last = self._last
        dt = self._dt
        flows = {
            "respiration": 0.0,
            "sensible_cooling": 0.0,
            "latent_cooling": 0.0,
            "actual_cooling": state.cooling_power * dt,
            "wall_gain": sum(params.wall_heat_gain) * dt,
        }
        if last is not None:
            flows["respiration"] = sum(z.respiration_heat for z in last.zones) * dt
            flows["sensible_cooling"] = sum(z.delivered_sensible for z in last.zones) * dt
            flows["latent_cooling"] = sum(z.delivered_latent for z in last.zones) * dt

        product = [t for row in state.product_temp for t in row]
        return {
            "stores": {
                "product": product_energy(state, params),
                "air_sensible": air_sensible_energy(state, params),
                "air_latent": air_latent_energy(state, params),
            },
            "flows": flows,
            "temperatures": {
                "product_min": min(product),
                "product_max": max(product),
                "air_min": min(state.air_temp),
                "air_max": max(state.air_temp),
            },
        }

    def moisture_balance(self) -> MoistureBalance:
        """Report moisture accounting for the current state."""
        state, params = self._state, self._params
        current = total_moisture(state, params)
        moisture = np.asarray(state.product_moisture, dtype=float)

        if self._last is not None:
            product_rates = tuple(z.product_moisture_rates for z in self._last.zones)
            air_rates = tuple(z.air_moisture_rate for z in self._last.zones)
        else:
            product_rates = tuple((0.0,) * params.layers for _ in range(params.zones))
            air_rates = (0.0,) * params.zones

        return MoistureBalance(
            total_moisture=current,
            initial_moisture=self._initial_moisture,
            moisture_change=current - self._initial_moisture,
            cumulative_dehumidification=self._cumulative_dehumidification,
            product_rates=product_rates,
            air_rates=air_rates,
            average_product_moisture=float(moisture.mean()),
            min_moisture=float(moisture.min()),
            max_moisture=float(moisture.max()),
            moisture_std=float(moisture.std()),
        )

    def performance_metrics(self) -> PerformanceMetrics:
        """Report cooling performance for the current state."""
        state, params = self._state, self._params
        initial = self._initial_state
        temps = [t for row in state.product_temp for t in row]
        moistures = [m for row in state.product_moisture for m in row]

        mean_temp = float(np.mean(temps))
        spread = temperature_spread(temps)
        index = 0.0 if mean_temp == 0 else uniformity_index(temps)

        elapsed = state.t - initial.t
        initial_mean = float(np.mean(initial.product_temp))
        cooling_rate = (initial_mean - mean_temp) / elapsed * 3600.0 if elapsed > 0 else 0.0

        cop = self._last.cop if self._last is not None else 0.0

        zones = []
        for i in range(params.zones):
            zone_temp = float(np.mean(state.product_temp[i]))
            zone_initial = float(np.mean(initial.product_temp[i]))
            span = zone_initial - params.coil_temp
            # Supply air at the coil temperature is the coldest reachable point
            cri = (
                cooling_rate_index(zone_temp, state.air_temp[i], zone_initial, params.coil_temp)
                if span != 0
                else 0.0
            )
            effectiveness = (zone_initial - zone_temp) / span if span != 0 else 0.0
            zones.append(
                ZoneMetrics(
                    average_temperature=zone_temp,
                    average_moisture=float(np.mean(state.product_moisture[i])),
                    cooling_rate_index=cri,
                    cooling_effectiveness=effectiveness,
                )
            )

        return PerformanceMetrics(
            tcpi=state.tcpi,
            temperature_uniformity=spread,
            moisture_uniformity=temperature_spread(moistures),
            temperature_uniformity_index=index,
            cooling_rate=cooling_rate,
            cop=cop,
            zones=tuple(zones),
        )

    def time_scales(self) -> TimeScales:
        """Characteristic times and stability ratios at the current step."""
        return time_scales(self._params, self._dt)

    def validate_state(self) -> ValidationReport:
        """Check the current state against physical and numerical limits.

        Never raises; problems are returned in the report.
        """
        state, params = self._state, self._params
        violations: list[str] = []
        warnings: list[str] = []

        for i, j in state.cells():
            t = state.product_temp[i][j]
            if not math.isfinite(t):
                violations.append(f"Product temperature at ({i}, {j}) is not finite")
            elif t < params.coil_temp:
                violations.append(
                    f"Product temperature {t:.2f}C at ({i}, {j}) below coil "
                    f"temperature {params.coil_temp:.2f}C"
                )
            elif t > MAX_PHYSICAL_TEMPERATURE:
                violations.append(
                    f"Product temperature {t:.2f}C at ({i}, {j}) above "
                    f"{MAX_PHYSICAL_TEMPERATURE:.0f}C"
                )

        for i, (t_a, w_a) in enumerate(zip(state.air_temp, state.air_humidity, strict=True)):
            # Non-finite air is reported by the humidity check below
            if math.isfinite(t_a) and t_a < params.coil_temp:
                violations.append(
                    f"Air temperature {t_a:.2f}C in zone {i} below coil "
                    f"temperature {params.coil_temp:.2f}C"
                )
            elif math.isfinite(t_a) and t_a > MAX_PHYSICAL_TEMPERATURE:
                violations.append(
                    f"Air temperature {t_a:.2f}C in zone {i} above "
                    f"{MAX_PHYSICAL_TEMPERATURE:.0f}C"
                )
            try:
                valid = is_humidity_valid(w_a, t_a, params.pressure)
            except DomainError:
                valid = False
            if not valid:
                violations.append(
                    f"Air humidity {w_a:.5f} in zone {i} invalid at {t_a:.2f}C"
                )

        if not 0 <= state.tcpi <= 1:
            violations.append(f"TCPI {state.tcpi:.4f} outside [0, 1]")
        if not 0 <= state.cooling_power <= params.max_cooling_power:
            violations.append(
                f"Cooling power {state.cooling_power:.1f}W outside "
                f"[0, {params.max_cooling_power:.1f}]"
            )

        scales = self.time_scales()
        if scales.cfl > CFL_LIMIT:
            warnings.append(f"CFL number {scales.cfl:.3f} exceeds {CFL_LIMIT}")
        if scales.fourier > FOURIER_LIMIT:
            warnings.append(f"Fourier number {scales.fourier:.3f} exceeds {FOURIER_LIMIT}")

        metrics = {
            "max_temperature_gradient": _max_grid_gradient(state.product_temp),
            "max_moisture_gradient": _max_grid_gradient(state.product_moisture),
            "cfl": scales.cfl,
            "fourier": scales.fourier,
        }
        return ValidationReport(
            violations=tuple(violations),
            warnings=tuple(warnings),
            metrics=metrics,
        )

    def reset(self) -> None:
        """Return to the initial state and clear accumulated totals.

        The generator is not reseeded.
        """
        self._state = self._initial_state.copy()
        self._last = None
        self._cumulative_cooling = 0.0
        self._cumulative_heat_input = 0.0
        self._cumulative_dehumidification = 0.0
        self._steps = 0
