#!/usr/bin/env python3
"""
CLI for the Construction Schedule Engine.

Usage:
    python cli.py schedule generate 1 2025-06-02 --stage permis
    python cli.py schedule estimate --stage structure --target 2025-06-02
    python cli.py schedule conflicts 1
    python cli.py schedule export 1 -o schedule.csv
    python cli.py serve --port 8000

Commands:
    schedule  Generate, inspect and export project schedules
    initdb    Create the database tables
    catalog   Display the phase catalog
    serve     Start the API server
"""
import click
import logging

from app.cli import register_commands

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version='1.0.0')
def cli():
    """Construction Schedule Engine CLI.

    Build business-day schedules for self-build projects, detect trade
    conflicts and follow supplier / fabrication reminders.
    """
    pass


register_commands(cli)


@cli.command()
def initdb():
    """Create the database tables."""
    from app.models import init_db

    init_db()
    click.echo(click.style("✓ Database initialized", fg='green'))


@cli.command()
@click.option('--config', 'config_path', default=None, help='Path to schedule_config.yaml')
def catalog(config_path):
    """Display the phase catalog in execution order."""
    from app.config import get_config

    config = get_config(config_path)
    phases = config.phase_catalog()

    click.echo(click.style(f'Phase catalog v{config.version}', fg='cyan', bold=True))
    click.echo(f"{'=' * 60}")
    for phase in phases:
        leads = ""
        if phase.supplier_lead_days or phase.fabrication_lead_days:
            leads = f"  supplier -{phase.supplier_lead_days}d, fabrication -{phase.fabrication_lead_days}d"
        click.echo(
            f"  {phase.position + 1:>2}. {phase.id:<22} {phase.default_duration_days:>3}d  "
            f"{phases.trades.name(phase.default_trade)} {config.get_trade_color(phase.default_trade)}{leads}"
        )


@cli.command()
@click.option('--port', type=int, default=8000, help='Server port')
@click.option('--host', default='0.0.0.0', help='Server host')
@click.option('--reload', is_flag=True, help='Enable auto-reload')
def serve(port: int, host: str, reload: bool):
    """Start the API server.

    Runs the FastAPI application with uvicorn.

    Example:
        python cli.py serve --port 8000 --reload
    """
    import uvicorn

    click.echo(click.style('Construction Schedule Engine - API Server', fg='cyan', bold=True))
    click.echo(f"Starting server at http://{host}:{port}")
    click.echo("Press CTRL+C to stop\n")

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=reload
    )


if __name__ == '__main__':
    cli()
