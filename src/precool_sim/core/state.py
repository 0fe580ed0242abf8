"""State management for produce cooling simulation.

This module defines the data structures that describe a cooling run:

- SystemState: Product and zone-air conditions plus controller state at one
  instant. Each step produces a new value.
- SystemParameters: Fixed physical and control parameters for a run.

Grids are indexed ``[zone][layer]``; zones run along the airflow direction
and layers stack vertically.
"""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from precool_sim.core.exceptions import DomainError
from precool_sim.physics.constants import (
    C_P_DRY_AIR,
    DYNAMIC_VISCOSITY_AIR,
    LATENT_HEAT_VAPORIZATION,
    STANDARD_PRESSURE,
)

Grid = tuple[tuple[float, ...], ...]


def _grid_shape(values: Sequence[Sequence[float]], name: str) -> tuple[int, int]:
    """Return (zones, layers) of a rectangular, non-empty grid."""
    if len(values) == 0:
        msg = f"{name} must have at least one zone"
        raise DomainError(msg, quantity=name)
    layers = len(values[0])
    if layers == 0:
        msg = f"{name} must have at least one layer"
        raise DomainError(msg, quantity=name)
    for i, row in enumerate(values):
        if len(row) != layers:
            msg = f"{name} zone {i} has {len(row)} layers, expected {layers}"
            raise DomainError(msg, quantity=name)
    return len(values), layers


def _as_grid(
    values: Sequence[Sequence[float]], name: str, zones: int, layers: int
) -> Grid:
    if _grid_shape(values, name) != (zones, layers):
        msg = f"{name} must be {zones} x {layers}"
        raise DomainError(msg, quantity=name)
    return tuple(tuple(float(v) for v in row) for row in values)


def _as_row(values: Sequence[float], name: str, zones: int) -> tuple[float, ...]:
    if len(values) != zones:
        msg = f"{name} must have {zones} entries, got {len(values)}"
        raise DomainError(msg, quantity=name)
    return tuple(float(v) for v in values)


@dataclass
class SystemState:
    """Complete state of the container at one instant.

    Attributes:
        product_temp: Product temperature per cell in °C.
        product_moisture: Product moisture per cell (kg water/kg dry matter).
        air_temp: Zone air temperature in °C.
        air_humidity: Zone air humidity ratio (kg water/kg dry air).
        tcpi: Turbulent cooling performance index (0-1).
        cooling_power: Cooling unit output in W.
        t: Elapsed simulation time in seconds.
    """

    product_temp: list[list[float]]
    product_moisture: list[list[float]]
    air_temp: list[float]
    air_humidity: list[float]
    tcpi: float = 1.0
    cooling_power: float = 0.0
    t: float = 0.0

    def __post_init__(self) -> None:
        """Validate grid structure and take owned copies of the arrays.

        Physical ranges are not checked here; out-of-range states are
        reported by the container validator.
        """
        zones, layers = _grid_shape(self.product_temp, "product_temp")
        temp = _as_grid(self.product_temp, "product_temp", zones, layers)
        moisture = _as_grid(self.product_moisture, "product_moisture", zones, layers)
        self.product_temp = [list(row) for row in temp]
        self.product_moisture = [list(row) for row in moisture]
        self.air_temp = list(_as_row(self.air_temp, "air_temp", zones))
        self.air_humidity = list(_as_row(self.air_humidity, "air_humidity", zones))
        self.tcpi = float(self.tcpi)
        self.cooling_power = float(self.cooling_power)
        self.t = float(self.t)

    @property
    def zones(self) -> int:
        """Number of zones along the airflow."""
        return len(self.product_temp)

    @property
    def layers(self) -> int:
        """Number of vertical layers per zone."""
        return len(self.product_temp[0])

    def cells(self) -> Iterator[tuple[int, int]]:
        """Iterate over (zone, layer) indices."""
        for i in range(self.zones):
            for j in range(self.layers):
                yield i, j

    def first_non_finite(self) -> tuple[str, int | tuple[int, int] | None] | None:
        """Locate the first non-finite value.

        Returns:
            (field name, index) of the first NaN/inf value, or None if all
            values are finite.
        """
        for name in ("product_temp", "product_moisture"):
            grid = getattr(self, name)
            for i, j in self.cells():
                if not math.isfinite(grid[i][j]):
                    return name, (i, j)
        for name in ("air_temp", "air_humidity"):
            for i, value in enumerate(getattr(self, name)):
                if not math.isfinite(value):
                    return name, i
        for name in ("tcpi", "cooling_power", "t"):
            if not math.isfinite(getattr(self, name)):
                return name, None
        return None

    def copy(self) -> SystemState:
        """Create a deep copy of this state."""
        return SystemState(
            product_temp=[list(row) for row in self.product_temp],
            product_moisture=[list(row) for row in self.product_moisture],
            air_temp=list(self.air_temp),
            air_humidity=list(self.air_humidity),
            tcpi=self.tcpi,
            cooling_power=self.cooling_power,
            t=self.t,
        )

    def replace(self, **changes: object) -> SystemState:
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]


@dataclass(frozen=True)
class SystemParameters:
    """Fixed parameters of a cooling run.

    Attributes:
        zones: Number of zones along the airflow.
        layers: Number of vertical layers per zone.
        container_length: Inside length along the airflow in m.
        container_width: Inside width in m.
        container_height: Inside height in m.
        product_mass: Product mass per cell in kg.
        product_area: Product surface area per cell in m².
        specific_heat: Product specific heat in J/(kg·K).
        water_activity: Product surface water activity (0-1).
        respiration_rate: Respiration rate at the reference temperature.
        respiration_temp_coeff: Respiration temperature sensitivity (1/K).
        respiration_ref_temp: Respiration reference temperature in °C.
        respiration_enthalpy: Heat released per unit respiration (J/kg).
        air_mass: Air mass per zone in kg.
        air_flow: Air mass flow rate through the container in kg/s.
        base_heat_transfer: Mean product-air heat transfer coefficient in W/(m²·K).
        position_factor: Airflow exposure per cell (0-1).
        evaporative_mass_transfer: Mass transfer coefficient in m/s.
        surface_wetness: Wetted fraction of product surface (0-1).
        max_cooling_power: Maximum unit cooling capacity in W.
        rated_power: Rated unit power in W.
        coil_temp: Evaporator coil temperature in °C.
        tcpi_target: Controller target for COP/TCPI ratio.
        alpha: Turbulence sensitivity of the heat transfer coefficient.
        wall_heat_gain: Heat gain through the walls per zone in W.
        air_specific_heat: Air specific heat in J/(kg·K).
        pressure: Ambient pressure in Pa.
        latent_heat: Latent heat of vaporization in J/kg.
        air_viscosity: Dynamic viscosity of air in Pa·s.
    """

    zones: int
    layers: int
    container_length: float
    container_width: float
    container_height: float
    product_mass: Grid
    product_area: Grid
    specific_heat: float
    water_activity: float
    respiration_rate: float
    respiration_temp_coeff: float
    respiration_ref_temp: float
    respiration_enthalpy: float
    air_mass: tuple[float, ...]
    air_flow: float
    base_heat_transfer: float
    position_factor: Grid
    evaporative_mass_transfer: float
    surface_wetness: float
    max_cooling_power: float
    rated_power: float
    coil_temp: float
    tcpi_target: float
    alpha: float
    wall_heat_gain: tuple[float, ...] = field(default=())
    air_specific_heat: float = C_P_DRY_AIR
    pressure: float = STANDARD_PRESSURE
    latent_heat: float = LATENT_HEAT_VAPORIZATION
    air_viscosity: float = DYNAMIC_VISCOSITY_AIR

    def __post_init__(self) -> None:
        """Normalize arrays to tuples and validate parameter values."""
        if self.zones < 1 or self.layers < 1:
            msg = f"Need at least one zone and layer, got {self.zones} x {self.layers}"
            raise DomainError(msg, quantity="zones")

        grids = ("product_mass", "product_area", "position_factor")
        for name in grids:
            value = _as_grid(getattr(self, name), name, self.zones, self.layers)
            object.__setattr__(self, name, value)

        object.__setattr__(
            self, "air_mass", _as_row(self.air_mass, "air_mass", self.zones)
        )
        walls = self.wall_heat_gain or (0.0,) * self.zones
        object.__setattr__(
            self, "wall_heat_gain", _as_row(walls, "wall_heat_gain", self.zones)
        )

        for name, value in self._scalars():
            if not math.isfinite(value):
                msg = f"{name} must be finite, got {value}"
                raise DomainError(msg, quantity=name, value=value)

        positive = (
            "container_length",
            "container_width",
            "container_height",
            "specific_heat",
            "air_specific_heat",
            "pressure",
            "air_viscosity",
            "tcpi_target",
        )
        for name in positive:
            if getattr(self, name) <= 0:
                msg = f"{name} must be positive, got {getattr(self, name)}"
                raise DomainError(msg, quantity=name, value=getattr(self, name))

        non_negative = (
            "air_flow",
            "respiration_rate",
            "base_heat_transfer",
            "evaporative_mass_transfer",
            "max_cooling_power",
            "rated_power",
            "alpha",
            "latent_heat",
        )
        for name in non_negative:
            if getattr(self, name) < 0:
                msg = f"{name} cannot be negative, got {getattr(self, name)}"
                raise DomainError(msg, quantity=name, value=getattr(self, name))

        for name in ("water_activity", "surface_wetness"):
            if not 0 <= getattr(self, name) <= 1:
                msg = f"{name} must be in [0, 1], got {getattr(self, name)}"
                raise DomainError(msg, quantity=name, value=getattr(self, name))

        for name in ("product_mass", "product_area"):
            for row in getattr(self, name):
                for value in row:
                    if not (math.isfinite(value) and value > 0):
                        msg = f"{name} must be positive in every cell, got {value}"
                        raise DomainError(msg, quantity=name, value=value)
        for value in self.air_mass:
            if not (math.isfinite(value) and value > 0):
                msg = f"air_mass must be positive in every zone, got {value}"
                raise DomainError(msg, quantity="air_mass", value=value)
        for row in self.position_factor:
            for value in row:
                if not (math.isfinite(value) and value >= 0):
                    msg = f"position_factor must be non-negative, got {value}"
                    raise DomainError(msg, quantity="position_factor", value=value)

    def _scalars(self) -> Iterator[tuple[str, float]]:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (int, float)):
                yield f.name, float(value)

    @property
    def zone_length(self) -> float:
        """Length of one zone along the airflow in m."""
        return self.container_length / self.zones

    @property
    def min_product_mass(self) -> float:
        """Smallest cell product mass in kg."""
        return min(min(row) for row in self.product_mass)

    @property
    def max_product_area(self) -> float:
        """Largest cell product surface area in m²."""
        return max(max(row) for row in self.product_area)

    @property
    def min_air_mass(self) -> float:
        """Smallest zone air mass in kg."""
        return min(self.air_mass)

    def replace(self, **changes: object) -> SystemParameters:
        """Return a validated copy with the given fields replaced.

        Examples:
            >>> doubled = params.replace(air_flow=params.air_flow * 2)  # doctest: +SKIP
        """
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]
