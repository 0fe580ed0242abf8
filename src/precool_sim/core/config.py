"""Pydantic configuration models for cooling runs.

This module defines the configuration schema for cooling runs using
Pydantic v2 models. Configuration can be loaded from YAML or JSON files.

The configuration hierarchy:
- SimulationConfig (top-level)
  - ContainerConfig
  - ProductConfig
  - AirConfig
  - HeatTransferConfig
  - CoolingUnitConfig
  - ControlConfig
  - InitialConfig

Per-cell values accept either one number, applied to every cell, or an
explicit ``[zone][layer]`` grid. Per-zone values accept a number or a list.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from precool_sim.core.state import SystemParameters, SystemState
from precool_sim.physics.constants import (
    C_P_DRY_AIR,
    LATENT_HEAT_VAPORIZATION,
    STANDARD_PRESSURE,
)

CellValue = float | list[list[float]]
ZoneValue = float | list[float]


def expand_cells(value: CellValue, zones: int, layers: int) -> list[list[float]]:
    """Expand a per-cell value to a zones x layers grid.

    Raises:
        ValueError: If an explicit grid has the wrong shape.
    """
    if isinstance(value, int | float):
        return [[float(value)] * layers for _ in range(zones)]
    if len(value) != zones or any(len(row) != layers for row in value):
        msg = f"Grid must be {zones} x {layers}"
        raise ValueError(msg)
    return [[float(v) for v in row] for row in value]


def expand_zones(value: ZoneValue, zones: int) -> list[float]:
    """Expand a per-zone value to a list of length zones.

    Raises:
        ValueError: If an explicit list has the wrong length.
    """
    if isinstance(value, int | float):
        return [float(value)] * zones
    if len(value) != zones:
        msg = f"Expected {zones} zone values, got {len(value)}"
        raise ValueError(msg)
    return [float(v) for v in value]


class ContainerConfig(BaseModel):
    """Container geometry and envelope configuration."""

    model_config = ConfigDict(frozen=True)

    length: Annotated[float, Field(gt=0, description="Inside length along airflow in m")]
    width: Annotated[float, Field(gt=0, description="Inside width in m")]
    height: Annotated[float, Field(gt=0, description="Inside height in m")]
    wall_heat_gain: ZoneValue = Field(default=0.0, description="Wall gain per zone in W")
    pressure: Annotated[float, Field(default=STANDARD_PRESSURE, gt=0)] = STANDARD_PRESSURE


class ProductConfig(BaseModel):
    """Commodity properties and load distribution."""

    model_config = ConfigDict(frozen=True)

    mass: CellValue = Field(description="Product mass per cell in kg")
    area: CellValue = Field(description="Product surface area per cell in m^2")
    specific_heat: Annotated[float, Field(default=3800.0, gt=0)] = 3800.0
    water_activity: Annotated[float, Field(default=0.95, ge=0, le=1)] = 0.95
    surface_wetness: Annotated[float, Field(default=0.8, ge=0, le=1)] = 0.8
    respiration_rate: Annotated[float, Field(default=2e-8, ge=0)] = 2e-8
    respiration_temp_coeff: float = 0.1
    respiration_ref_temp: float = 10.0
    respiration_enthalpy: Annotated[float, Field(default=10.7e6, ge=0)] = 10.7e6


class AirConfig(BaseModel):
    """Zone air and fan configuration."""

    model_config = ConfigDict(frozen=True)

    mass: ZoneValue = Field(description="Air mass per zone in kg")
    flow: Annotated[float, Field(ge=0, description="Air mass flow in kg/s")]
    specific_heat: Annotated[float, Field(default=C_P_DRY_AIR, gt=0)] = C_P_DRY_AIR


class HeatTransferConfig(BaseModel):
    """Product-air exchange coefficients."""

    model_config = ConfigDict(frozen=True)

    base_coefficient: Annotated[
        float, Field(default=25.0, ge=0, description="Mean h in W/(m^2 K)")
    ] = 25.0
    position_factor: CellValue = Field(default=1.0, description="Airflow exposure (0-1)")
    mass_transfer_coefficient: Annotated[float, Field(default=0.01, ge=0)] = 0.01
    alpha: Annotated[
        float, Field(default=0.2, ge=0, description="Turbulence sensitivity")
    ] = 0.2
    latent_heat: Annotated[
        float, Field(default=LATENT_HEAT_VAPORIZATION, ge=0)
    ] = LATENT_HEAT_VAPORIZATION


class CoolingUnitConfig(BaseModel):
    """Refrigeration unit configuration."""

    model_config = ConfigDict(frozen=True)

    max_power: Annotated[float, Field(ge=0, description="Maximum capacity in W")]
    rated_power: Annotated[float, Field(ge=0, description="Rated power in W")]
    coil_temp: float = Field(default=5.0, description="Coil temperature in C")


class ControlConfig(BaseModel):
    """TCPI controller configuration."""

    model_config = ConfigDict(frozen=True)

    tcpi_target: Annotated[float, Field(default=0.9, gt=0)] = 0.9


class InitialConfig(BaseModel):
    """Initial conditions."""

    model_config = ConfigDict(frozen=True)

    product_temp: CellValue = Field(description="Product temperature in C")
    product_moisture: CellValue = Field(default=0.8, description="kg water/kg dry matter")
    air_temp: ZoneValue = Field(description="Zone air temperature in C")
    air_humidity: ZoneValue = Field(default=0.008, description="Humidity ratio kg/kg")
    tcpi: Annotated[float, Field(default=1.0, ge=0, le=1)] = 1.0
    cooling_power: Annotated[float, Field(default=0.0, ge=0)] = 0.0


class SimulationConfig(BaseModel):
    """Top-level cooling run configuration."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(default="Cooling Run")
    zones: Annotated[int, Field(ge=1, description="Zones along the airflow")]
    layers: Annotated[int, Field(ge=1, description="Layers per zone")]
    duration: Annotated[float, Field(default=3600.0, gt=0)] = 3600.0  # seconds
    time_step: Annotated[float, Field(gt=0)] | None = None  # seconds
    seed: int | None = None
    model: str = Field(default="lumped", description="Evolution model name")

    container: ContainerConfig
    product: ProductConfig
    air: AirConfig
    heat_transfer: HeatTransferConfig = Field(default_factory=HeatTransferConfig)
    cooling_unit: CoolingUnitConfig
    control: ControlConfig = Field(default_factory=ControlConfig)
    initial: InitialConfig

    @model_validator(mode="after")
    def validate_shapes(self) -> SimulationConfig:
        """Ensure explicit grids and lists match zones x layers."""
        cells = {
            "product.mass": self.product.mass,
            "product.area": self.product.area,
            "heat_transfer.position_factor": self.heat_transfer.position_factor,
            "initial.product_temp": self.initial.product_temp,
            "initial.product_moisture": self.initial.product_moisture,
        }
        for name, value in cells.items():
            try:
                expand_cells(value, self.zones, self.layers)
            except ValueError as e:
                msg = f"{name}: {e}"
                raise ValueError(msg) from e

        per_zone = {
            "container.wall_heat_gain": self.container.wall_heat_gain,
            "air.mass": self.air.mass,
            "initial.air_temp": self.initial.air_temp,
            "initial.air_humidity": self.initial.air_humidity,
        }
        for name, value in per_zone.items():
            try:
                expand_zones(value, self.zones)
            except ValueError as e:
                msg = f"{name}: {e}"
                raise ValueError(msg) from e
        return self

    @model_validator(mode="after")
    def validate_model(self) -> SimulationConfig:
        """Ensure the evolution model is registered."""
        from precool_sim.core.registry import list_models
        from precool_sim.simulation import evolution  # noqa: F401  registers models

        if self.model not in list_models():
            msg = f"Unknown model '{self.model}'. Available: {list_models()}"
            raise ValueError(msg)
        return self

    def to_parameters(self) -> SystemParameters:
        """Convert to SystemParameters.

        Raises:
            DomainError: If the combined values are physically invalid.
        """
        zones, layers = self.zones, self.layers
        return SystemParameters(
            zones=zones,
            layers=layers,
            container_length=self.container.length,
            container_width=self.container.width,
            container_height=self.container.height,
            product_mass=expand_cells(self.product.mass, zones, layers),
            product_area=expand_cells(self.product.area, zones, layers),
            specific_heat=self.product.specific_heat,
            water_activity=self.product.water_activity,
            respiration_rate=self.product.respiration_rate,
            respiration_temp_coeff=self.product.respiration_temp_coeff,
            respiration_ref_temp=self.product.respiration_ref_temp,
            respiration_enthalpy=self.product.respiration_enthalpy,
            air_mass=expand_zones(self.air.mass, zones),
            air_flow=self.air.flow,
            base_heat_transfer=self.heat_transfer.base_coefficient,
            position_factor=expand_cells(self.heat_transfer.position_factor, zones, layers),
            evaporative_mass_transfer=self.heat_transfer.mass_transfer_coefficient,
            surface_wetness=self.product.surface_wetness,
            max_cooling_power=self.cooling_unit.max_power,
            rated_power=self.cooling_unit.rated_power,
            coil_temp=self.cooling_unit.coil_temp,
            tcpi_target=self.control.tcpi_target,
            alpha=self.heat_transfer.alpha,
            wall_heat_gain=expand_zones(self.container.wall_heat_gain, zones),
            air_specific_heat=self.air.specific_heat,
            pressure=self.container.pressure,
            latent_heat=self.heat_transfer.latent_heat,
        )

    def to_state(self) -> SystemState:
        """Convert the initial conditions to a SystemState at t=0."""
        zones, layers = self.zones, self.layers
        return SystemState(
            product_temp=expand_cells(self.initial.product_temp, zones, layers),
            product_moisture=expand_cells(self.initial.product_moisture, zones, layers),
            air_temp=expand_zones(self.initial.air_temp, zones),
            air_humidity=expand_zones(self.initial.air_humidity, zones),
            tcpi=self.initial.tcpi,
            cooling_power=self.initial.cooling_power,
        )


def load_config(path: str | Path) -> SimulationConfig:
    """Load run configuration from YAML or JSON file.

    Args:
        path: Path to configuration file.

    Returns:
        Validated SimulationConfig object.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ValueError: If configuration is invalid.
    """
    path = Path(path)

    if not path.exists():
        msg = f"Configuration file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open() as f:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    return SimulationConfig.model_validate(data)


def save_config(config: SimulationConfig, path: str | Path) -> None:
    """Save run configuration to YAML or JSON file.

    Args:
        config: Configuration to save.
        path: Output file path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_none=True)

    with path.open("w") as f:
        if path.suffix in (".yaml", ".yml"):
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(data, f, indent=2)


def validate_config(data: dict[str, Any]) -> SimulationConfig:
    """Validate configuration data without loading from file.

    Args:
        data: Configuration dictionary.

    Returns:
        Validated SimulationConfig object.

    Raises:
        ValueError: If configuration is invalid.
    """
    return SimulationConfig.model_validate(data)


def reference_config_data(name: str = "Reference Cooling Run") -> dict[str, Any]:
    """Configuration data for the reference 2 x 2 container."""
    return {
        "name": name,
        "zones": 2,
        "layers": 2,
        "duration": 3600.0,
        "seed": 42,
        "model": "lumped",
        "container": {
            "length": 12.0,
            "width": 2.4,
            "height": 2.6,
            "wall_heat_gain": 100.0,
        },
        "product": {
            "mass": 100.0,
            "area": 5.0,
            "specific_heat": 3800.0,
            "water_activity": 0.95,
            "surface_wetness": 0.8,
            "respiration_rate": 2e-8,
            "respiration_temp_coeff": 0.1,
            "respiration_ref_temp": 10.0,
            "respiration_enthalpy": 10.7e6,
        },
        "air": {"mass": 50.0, "flow": 2.0},
        "heat_transfer": {
            "base_coefficient": 25.0,
            "position_factor": [[1.0, 0.8], [0.8, 0.6]],
            "mass_transfer_coefficient": 0.01,
            "alpha": 0.2,
        },
        "cooling_unit": {"max_power": 10000.0, "rated_power": 5000.0, "coil_temp": 5.0},
        "control": {"tcpi_target": 0.9},
        "initial": {
            "product_temp": 20.0,
            "product_moisture": 0.8,
            "air_temp": 15.0,
            "air_humidity": 0.008,
            "tcpi": 0.9,
            "cooling_power": 5000.0,
        },
    }
