"""
Schedule CLI Commands - Management commands for project schedules.

Provides command-line interface for:
- Schedule generation
- Duration estimates
- Conflict and alert listings
- CSV export
"""
import click
import logging
from typing import Optional

import pandas as pd

from app.models import get_db
from app.domain.services.project_schedule_service import ProjectScheduleService

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    'id', 'step_id', 'step_name', 'trade_type', 'start_date', 'end_date',
    'estimated_days', 'status', 'is_manual_date', 'is_overlay',
]


@click.group()
def schedule():
    """Project schedule commands."""
    pass


@schedule.command()
@click.argument('project_id', type=int)
@click.argument('target_start_date')
@click.option('--stage', 'current_stage', default=None, help='Current project stage')
def generate(project_id: int, target_start_date: str, current_stage: Optional[str]):
    """Generate the schedule of a project from a construction start date (yyyy-MM-dd)."""
    click.echo(f"Generating schedule for project {project_id} from {target_start_date}...")

    db = next(get_db())
    service = ProjectScheduleService(db)
    result = service.generate_project_schedule(project_id, target_start_date, current_stage)

    if result.success:
        click.echo(click.style(f"✓ {result.schedule_count} phases scheduled", fg='green'))
        click.echo(f"  Alerts: {result.alert_count}")
        for warning in result.warnings:
            click.echo(click.style(f"  ! {warning}", fg='yellow'))
        for item in service.list_schedule(project_id):
            click.echo(f"  {item.start_date} → {item.end_date}  {item.step_name} ({item.trade_type})")
    else:
        click.echo(click.style(f"✗ Generation failed: {result.error}", fg='red'))
        raise SystemExit(1)


@schedule.command()
@click.option('--stage', 'current_stage', default=None, help='Current project stage')
@click.option('--target', 'target_start_date', default=None, help='Construction start (yyyy-MM-dd)')
def estimate(current_stage: Optional[str], target_start_date: Optional[str]):
    """Show preparation and construction durations in business days."""
    db = next(get_db())
    result = ProjectScheduleService(db).estimate(current_stage, target_start_date)

    click.echo(f"Preparation:  {result['preparation_days']} business days")
    click.echo(f"Construction: {result['construction_days']} business days")
    click.echo(f"Total:        {result['total_days']} business days")
    if 'preparation_start_date' in result:
        click.echo(f"Start preparation on {result['preparation_start_date']}")


@schedule.command()
@click.argument('project_id', type=int)
def conflicts(project_id: int):
    """List days on which several trades are scheduled."""
    db = next(get_db())
    found = ProjectScheduleService(db).get_conflicts(project_id)

    if not found:
        click.echo(click.style("No trade conflicts", fg='green'))
        return

    click.echo(click.style(f"{len(found)} conflict day(s):", fg='yellow'))
    for conflict in found:
        click.echo(f"  {conflict.date.isoformat()}: {', '.join(conflict.trades)}")


@schedule.command()
@click.argument('project_id', type=int)
@click.option('--all', 'include_dismissed', is_flag=True, help='Include dismissed alerts')
def alerts(project_id: int, include_dismissed: bool):
    """List supplier-call and fabrication-start reminders."""
    db = next(get_db())
    found = ProjectScheduleService(db).list_alerts(project_id, include_dismissed=include_dismissed)

    if not found:
        click.echo("No alerts")
        return

    for alert in found:
        marker = " (dismissed)" if alert.is_dismissed else ""
        click.echo(f"  {alert.alert_date.isoformat()} [{alert.alert_type.value}] {alert.message}{marker}")


@schedule.command()
@click.argument('project_id', type=int)
@click.option('--output', '-o', default=None, help='CSV path (default: schedule_<project>.csv)')
def export(project_id: int, output: Optional[str]):
    """Export a project schedule to CSV."""
    db = next(get_db())
    items = ProjectScheduleService(db).list_in_execution_order(project_id)

    df = pd.DataFrame([item.to_dict() for item in items], columns=EXPORT_COLUMNS)
    path = output or f"schedule_{project_id}.csv"
    df.to_csv(path, index=False)

    logger.info(f"Exported {len(df)} rows for project {project_id} to {path}")
    click.echo(click.style(f"✓ Exported {len(df)} rows to {path}", fg='green'))


def register_commands(cli):
    """Register schedule commands with main CLI."""
    cli.add_command(schedule)
