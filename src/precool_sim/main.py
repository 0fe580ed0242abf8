"""CLI interface for precool-sim.

This module provides a command-line interface for running container
cooling simulations from YAML configuration files without writing code.

Usage:
    pcsim run my-container.yaml
    pcsim run --scenario reference
    pcsim list
    pcsim init "My Container" -o my-config.yaml
    pcsim validate my-config.yaml
    pcsim timescales my-config.yaml
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import numpy as np
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from precool_sim.core.config import (
    SimulationConfig,
    load_config,
    reference_config_data,
    save_config,
)
from precool_sim.core.exceptions import DomainError, NumericalInstabilityError
from precool_sim.simulation.container import CoolingContainer
from precool_sim.simulation.engine import EngineConfig, SimulationEngine
from precool_sim.simulation.timestep import select_time_step, time_scales

app = typer.Typer(
    name="pcsim",
    help="Forced-air produce cooling simulation for multi-zone containers.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

# Built-in scenario names
BUILTIN_SCENARIOS = ["reference", "reefer"]


def get_scenarios_dir() -> Path:
    """Get the examples/scenarios directory.

    Looks for scenarios in:
    1. Relative to package root (development)
    2. Relative to current working directory
    """
    pkg_dir = Path(__file__).parent.parent.parent / "examples" / "scenarios"
    if pkg_dir.exists():
        return pkg_dir

    cwd_dir = Path.cwd() / "examples" / "scenarios"
    if cwd_dir.exists():
        return cwd_dir

    return Path("examples/scenarios")


def _load(config_path: Path) -> SimulationConfig:
    """Load a config or exit with code 1."""
    try:
        return load_config(config_path)
    except FileNotFoundError:
        console.print(f"[red]Error:[/] Config file not found: {config_path}")
        raise typer.Exit(1) from None
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Error:[/] Invalid configuration: {e}")
        raise typer.Exit(1) from None


def _build_container(config: SimulationConfig) -> CoolingContainer:
    """Build the container described by a config or exit with code 1."""
    try:
        return CoolingContainer(
            config.to_state(),
            config.to_parameters(),
            dt=config.time_step,
            seed=config.seed,
            model=config.model,
        )
    except (DomainError, KeyError) as e:
        console.print(f"[red]Error:[/] Failed to create simulation: {e}")
        raise typer.Exit(1) from None


def _summary(container: CoolingContainer, engine: SimulationEngine) -> dict[str, Any]:
    """Collect run results as plain data."""
    state = container.current_state
    energy = container.energy_balance()
    moisture = container.moisture_balance()
    performance = container.performance_metrics()
    report = container.validate_state()
    return {
        "steps_completed": engine.stats.steps_completed,
        "simulation_time_seconds": engine.stats.simulation_time.total_seconds(),
        "wall_time_seconds": engine.stats.wall_time.total_seconds(),
        "time_step": container.time_step,
        "final_state": {
            "t": state.t,
            "product_temp": state.product_temp,
            "product_moisture": state.product_moisture,
            "air_temp": state.air_temp,
            "air_humidity": state.air_humidity,
            "tcpi": state.tcpi,
            "cooling_power": state.cooling_power,
        },
        "energy": {
            "total": energy.total_energy,
            "change": energy.energy_change,
            "cumulative_cooling": energy.cumulative_cooling,
            "residual": energy.residual,
        },
        "moisture": {
            "total": moisture.total_moisture,
            "change": moisture.moisture_change,
            "dehumidified": moisture.cumulative_dehumidification,
        },
        "performance": {
            "tcpi": performance.tcpi,
            "cop": performance.cop,
            "temperature_uniformity": performance.temperature_uniformity,
            "cooling_rate": performance.cooling_rate,
        },
        "validation": {
            "is_valid": report.is_valid,
            "violations": list(report.violations),
            "warnings": list(report.warnings),
        },
    }


@app.command()
def run(
    config_path: Annotated[
        Path | None,
        typer.Argument(help="Path to YAML configuration file"),
    ] = None,
    scenario: Annotated[
        str | None,
        typer.Option("--scenario", "-s", help="Built-in scenario name"),
    ] = None,
    steps: Annotated[
        int | None,
        typer.Option("--steps", "-n", min=1, help="Run a fixed number of steps"),
    ] = None,
    duration: Annotated[
        float | None,
        typer.Option("--duration", "-d", help="Override duration in hours"),
    ] = None,
    time_step: Annotated[
        float | None,
        typer.Option("--time-step", "-t", help="Override time step in seconds"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print results as JSON"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress progress output"),
    ] = False,
) -> None:
    """Run a cooling simulation from configuration."""
    if config_path and scenario:
        console.print("[red]Error:[/] Cannot specify both config file and --scenario")
        raise typer.Exit(1)

    if scenario:
        if scenario not in BUILTIN_SCENARIOS:
            console.print(f"[red]Error:[/] Unknown scenario '{scenario}'")
            console.print(f"Available: {', '.join(BUILTIN_SCENARIOS)}")
            raise typer.Exit(1)

        config_path = get_scenarios_dir() / f"{scenario}.yaml"
        if not config_path.exists():
            console.print(f"[red]Error:[/] Scenario file not found: {config_path}")
            raise typer.Exit(1)

    if not config_path:
        console.print("[red]Error:[/] Provide a config file or --scenario")
        raise typer.Exit(1)

    config = _load(config_path)

    # Apply overrides
    updates: dict[str, float] = {}
    if duration is not None:
        updates["duration"] = duration * 3600  # Convert hours to seconds
    if time_step is not None:
        updates["time_step"] = time_step
    if updates:
        config = config.model_copy(update=updates)

    container = _build_container(config)
    engine = SimulationEngine(
        container,
        EngineConfig(duration=None if steps is not None else config.duration),
    )
    show_progress = not quiet and not json_output

    try:
        if show_progress:
            console.print(f"\n[bold]Running:[/] {config.name}")
            if steps is not None:
                console.print(f"  Steps: {steps}")
            else:
                console.print(f"  Duration: {config.duration / 3600:.2f} hours")
            console.print(f"  Time step: {container.time_step:.4g} seconds\n")

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("Simulating...", total=None)
                engine.run(steps)
                progress.update(task, description="[green]Complete!")
        else:
            engine.run(steps)
    except (DomainError, NumericalInstabilityError) as e:
        console.print(f"[red]Error:[/] Simulation failed: {e}")
        raise typer.Exit(1) from None

    _output_results(container, engine, json_output, quiet)


@app.command("list")
def list_scenarios() -> None:
    """List available built-in scenarios."""
    scenarios_dir = get_scenarios_dir()

    table = Table(title="Available Scenarios")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Grid")
    table.add_column("Duration")

    for name in BUILTIN_SCENARIOS:
        path = scenarios_dir / f"{name}.yaml"
        if path.exists():
            try:
                config = load_config(path)
            except (ValidationError, ValueError):
                table.add_row(name, "[dim]Error loading[/]", "-", "-")
                continue
            table.add_row(
                name,
                config.name,
                f"{config.zones} x {config.layers}",
                f"{config.duration / 3600:.1f}h",
            )
        else:
            table.add_row(name, "[dim]Not found[/]", "-", "-")

    console.print(table)
    console.print(f"\nScenarios directory: {scenarios_dir}")


@app.command()
def init(
    name: Annotated[str, typer.Argument(help="Name for the new scenario")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file path"),
    ] = None,
) -> None:
    """Generate a starter YAML configuration file."""
    config = SimulationConfig.model_validate(reference_config_data(name))

    # Generate filename from name if not specified
    if output is None:
        # Convert name to filename: "My Container" -> "my-container.yaml"
        filename = name.lower().replace(" ", "-") + ".yaml"
        output = Path(filename)

    save_config(config, output)
    console.print(f"[green]Created:[/] {output}")
    console.print("\nEdit this file to customize your simulation, then run:")
    console.print(f"  pcsim run {output}")


@app.command()
def validate(
    config_path: Annotated[Path, typer.Argument(help="Path to YAML configuration")],
) -> None:
    """Validate a configuration file without running."""
    config = _load(config_path)
    try:
        params = config.to_parameters()
        config.to_state()
        dt = config.time_step or select_time_step(params)
    except DomainError as e:
        console.print(f"[red]Invalid:[/] {e}")
        raise typer.Exit(1) from None

    console.print(f"[green]Valid:[/] {config.name}")
    console.print(f"  Grid: {config.zones} zones x {config.layers} layers")
    console.print(f"  Duration: {config.duration / 3600:.2f} hours")
    console.print(f"  Time step: {dt:.4g} seconds")
    console.print(f"  Model: {config.model}")
    console.print(
        f"  Cooling unit: {config.cooling_unit.max_power:.0f}W max, "
        f"coil {config.cooling_unit.coil_temp}C"
    )


@app.command()
def timescales(
    config_path: Annotated[Path, typer.Argument(help="Path to YAML configuration")],
) -> None:
    """Show characteristic time scales and stability numbers."""
    config = _load(config_path)
    try:
        params = config.to_parameters()
        dt = config.time_step or select_time_step(params)
        scales = time_scales(params, dt)
    except DomainError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1) from None

    table = Table(title=f"Time Scales: {config.name}")
    table.add_column("Process", style="cyan")
    table.add_column("Time (s)", justify="right")

    for label, value in (
        ("convective", scales.convective),
        ("thermal", scales.thermal),
        ("mass_flow", scales.mass_flow),
        ("mass_transfer", scales.mass_transfer),
    ):
        style = "bold" if label == scales.limiting else ""
        table.add_row(label, f"{value:.4g}", style=style)

    console.print(table)
    console.print(f"  Time step: {scales.time_step:.4g} seconds")
    console.print(f"  Limiting process: {scales.limiting}")
    console.print(f"  CFL: {scales.cfl:.4f}")
    console.print(f"  Fourier: {scales.fourier:.4f}")
    if scales.is_stable:
        console.print("[green]Stable[/]")
    else:
        console.print("[yellow]Warning:[/] time step exceeds stability limits")


def _output_results(
    container: CoolingContainer,
    engine: SimulationEngine,
    json_output: bool,
    quiet: bool,
) -> None:
    """Output simulation results in the requested format.

    Args:
        container: The container after running.
        engine: The engine that ran it.
        json_output: Print JSON instead of a console summary.
        quiet: If True, suppress console output.
    """
    result = _summary(container, engine)

    if json_output:
        typer.echo(json.dumps(result, indent=2))
        return

    if quiet:
        return

    state = container.current_state
    console.print("\n[bold]Simulation Complete[/]")
    console.print(f"  Steps completed: {result['steps_completed']}")
    console.print(f"  Simulated time: {engine.stats.simulation_time}")
    console.print(f"  Wall time: {result['wall_time_seconds']:.2f}s")
    console.print(f"  Mean product temp: {np.mean(state.product_temp):.2f}C")
    console.print(f"  TCPI: {state.tcpi:.3f}")
    console.print(f"  Cooling power: {state.cooling_power:.0f}W")

    table = Table(title="Zones")
    table.add_column("Zone", justify="right")
    table.add_column("Product (C)", justify="right")
    table.add_column("Air (C)", justify="right")
    table.add_column("Humidity (g/kg)", justify="right")
    for i, zone in enumerate(container.performance_metrics().zones):
        table.add_row(
            str(i),
            f"{zone.average_temperature:.2f}",
            f"{state.air_temp[i]:.2f}",
            f"{state.air_humidity[i] * 1000:.2f}",
        )
    console.print(table)

    for violation in result["validation"]["violations"]:
        console.print(f"[red]Violation:[/] {violation}")
    for warning in result["validation"]["warnings"]:
        console.print(f"[yellow]Warning:[/] {warning}")


def main() -> int:
    """Application entry point.

    Returns:
        Exit code (0 for success).
    """
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    try:
        app()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1


if __name__ == "__main__":
    sys.exit(main())
