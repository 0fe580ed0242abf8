"""Evolution, diagnostics and run engine modules."""

from precool_sim.simulation.container import (
    CoolingContainer,
    EnergyBalance,
    MoistureBalance,
    PerformanceMetrics,
    SimulationHistory,
    ValidationReport,
)
from precool_sim.simulation.engine import (
    EngineConfig,
    SimulationEngine,
    SimulationStats,
    SimulationStatus,
)
from precool_sim.simulation.evolution import (
    EdgeAwareZoneModel,
    EvolutionModel,
    LumpedZoneModel,
    StepResult,
    ZoneExchange,
    evolve_state,
)
from precool_sim.simulation.scenarios import (
    create_reefer_scenario,
    reference_parameters,
    reference_state,
)
from precool_sim.simulation.timestep import TimeScales, select_time_step, time_scales

__all__ = [
    # Evolution
    "EvolutionModel",
    "LumpedZoneModel",
    "EdgeAwareZoneModel",
    "StepResult",
    "ZoneExchange",
    "evolve_state",
    # Time step
    "TimeScales",
    "select_time_step",
    "time_scales",
    # Container
    "CoolingContainer",
    "EnergyBalance",
    "MoistureBalance",
    "PerformanceMetrics",
    "SimulationHistory",
    "ValidationReport",
    # Engine
    "EngineConfig",
    "SimulationEngine",
    "SimulationStats",
    "SimulationStatus",
    # Scenarios
    "create_reefer_scenario",
    "reference_parameters",
    "reference_state",
]
