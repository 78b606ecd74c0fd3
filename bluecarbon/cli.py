"""
Blue Carbon CLI - calculator, anomaly checks and the API server
"""
import json

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from bluecarbon.carbon.anomaly import detect_anomalies
from bluecarbon.carbon.calculator import calculate_required_area, calculate_sequestration
from bluecarbon.carbon.constants import DEMO_HOTSPOTS, SEQUESTRATION_FACTORS
from bluecarbon.carbon.models import AreaSnapshot, CalculationResult, ProjectSnapshot
from bluecarbon.config import get_config
from bluecarbon.utils import InvalidInput, get_logger, setup_logging

console = Console()
logger = get_logger(__name__)

ECOSYSTEMS = click.Choice(sorted(SEQUESTRATION_FACTORS))


def _buffer_options(func):
    func = click.option('--verification', default=5.0, show_default=True, help='Verification buffer (%)')(func)
    func = click.option('--mortality', default=15.0, show_default=True, help='Mortality buffer (%)')(func)
    func = click.option('--uncertainty', default=10.0, show_default=True, help='Uncertainty buffer (%)')(func)
    return func


def _print_result(title: str, result: CalculationResult) -> None:
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")

    if result.policy_area_needed is not None:
        table.add_row("Required area", f"{result.policy_area_needed:,} m² ({result.policy_area_needed / 10_000:,.2f} ha)")
    table.add_row("Annual absorption", f"{result.annual_absorption:,.2f} tCO₂/yr")
    table.add_row("Cumulative absorption", f"{result.cumulative_absorption:,.2f} tCO₂")
    table.add_row("Cars removed", f"{result.equivalences.cars_removed:,}")
    table.add_row("Homes powered", f"{result.equivalences.homes_powered:,}")
    table.add_row("Trees planted", f"{result.equivalences.trees_planted:,}")
    console.print(table)


@click.group()
@click.version_option(version='1.0.0')
def main():
    """
    Blue Carbon - coastal ecosystem carbon registry

    Sequestration calculator, credibility scoring and verification service.
    """
    setup_logging(get_config().log_level)


@main.command()
@click.argument('area_m2', type=float)
@click.option('--ecosystem', '-e', type=ECOSYSTEMS, required=True, help='Ecosystem type')
@click.option('--years', '-y', default=20, show_default=True, help='Projection horizon (years)')
@_buffer_options
def calculate(area_m2, ecosystem, years, uncertainty, mortality, verification):
    """Estimate CO₂ absorption for a project area (m²)"""
    buffers = {'uncertainty': uncertainty, 'mortality': mortality, 'verification': verification}
    try:
        result = calculate_sequestration(area_m2, ecosystem, years, buffers)
    except InvalidInput as e:
        raise click.BadParameter(str(e))
    _print_result(f"{ecosystem} · {area_m2:,.0f} m² · {years} yr", result)


@main.command('required-area')
@click.argument('target_tons', type=float)
@click.option('--ecosystem', '-e', type=ECOSYSTEMS, required=True, help='Ecosystem type')
@click.option('--years', '-y', default=20, show_default=True, help='Projection horizon (years)')
@_buffer_options
def required_area(target_tons, ecosystem, years, uncertainty, mortality, verification):
    """Area needed to reach a cumulative CO₂ reduction target (tons)"""
    buffers = {'uncertainty': uncertainty, 'mortality': mortality, 'verification': verification}
    try:
        result = calculate_required_area(target_tons, ecosystem, years, buffers)
    except InvalidInput as e:
        raise click.BadParameter(str(e))
    _print_result(f"Policy target {target_tons:,.0f} tCO₂ · {ecosystem} · {years} yr", result)


@main.command()
@click.argument('project_file', type=click.Path(exists=True))
def check(project_file):
    """Run anomaly detection on a project JSON file

    The file holds a project snapshot (area_m2, ecosystem_type,
    carbon_calculations) and an optional area_history list.
    """
    try:
        with open(project_file, encoding='utf-8') as f:
            data = json.load(f)
        snapshot = ProjectSnapshot.model_validate(data)
        history = [AreaSnapshot.model_validate(h) for h in data.get('area_history', [])]
        report = detect_anomalies(snapshot, history)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint='PROJECT_FILE')
    except (ValidationError, InvalidInput) as e:
        raise click.BadParameter(str(e), param_hint='PROJECT_FILE')

    if not report.is_suspicious:
        console.print("[bold green]✓ No anomalies detected[/bold green]")
        return

    console.print(f"[bold red]⚠ {len(report.flags)} anomal{'y' if len(report.flags) == 1 else 'ies'} detected[/bold red]")
    for flag in report.flags:
        console.print(f"  • {flag}")
    console.print(f"Credibility impact: [bold]-{report.credibility_impact}[/bold]")
    raise SystemExit(1)


@main.command()
def hotspots():
    """List demo blue carbon hotspots"""
    table = Table(title="Blue Carbon Hotspots")
    table.add_column("Name", style="cyan")
    table.add_column("Ecosystem", style="green")
    table.add_column("Area (ha)", justify="right")
    table.add_column("Annual tCO₂", justify="right", style="magenta")

    for spot in DEMO_HOTSPOTS:
        result = calculate_sequestration(spot['area_m2'], spot['ecosystem'])
        table.add_row(
            spot['name'],
            spot['ecosystem'].replace('_', ' '),
            f"{spot['area_m2'] / 10_000:,.0f}",
            f"{result.annual_absorption:,.2f}",
        )
    console.print(table)


@main.command()
@click.option('--host', default=None, help='Bind address (default from config)')
@click.option('--port', default=None, type=int, help='Port (default from config)')
def serve(host, port):
    """Run the API server with uvicorn"""
    import uvicorn

    cfg = get_config()
    logger.info("Starting Blue Carbon API on %s:%d", host or cfg.api_host, port or cfg.api_port)
    uvicorn.run(
        "bluecarbon.api.main:app",
        host=host or cfg.api_host,
        port=port or cfg.api_port,
        log_level=cfg.log_level.lower(),
    )


if __name__ == '__main__':
    main()
