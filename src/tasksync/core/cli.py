"""Command line interface for the task sync."""

import sys
import json
import asyncio
import logging
from typing import Optional

import click

from .config import setup_logging, load_environment, load_settings
from ..exceptions import ConfigurationError, TaskSyncError


@click.group()
@click.option('--log-level', default='INFO', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set the logging level')
@click.option('--env-file', type=click.Path(exists=True), help='Path to .env file')
def cli(log_level: str, env_file: Optional[str]) -> None:
    """ClickUp <-> Motion Task Sync Tool."""
    setup_logging(log_level)
    load_environment(env_file)


@cli.command()
@click.option('--output', type=click.Choice(['table', 'json']), default='table',
              help='Output format')
def run(output: str) -> None:
    """Run one sync over every active pairing."""
    from ..runner import run_scheduled_sync

    try:
        summary = asyncio.run(run_scheduled_sync(triggered_by="cli"))
    except ConfigurationError as e:
        click.echo(f"Configuration Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logging.exception("Unexpected error occurred")
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)

    if output == 'json':
        click.echo(summary.model_dump_json(indent=2))
    else:
        _display_summary_table(summary)

    if summary.failed_pairings:
        sys.exit(2)


def _display_summary_table(summary) -> None:
    """Display a run summary in a table format."""
    click.echo(f"{'Pairing':<40} {'Status':<10} {'Created':<8} {'Updated':<8} {'Skipped':<8} {'Failed':<8}")
    click.echo("-" * 86)

    for result in summary.pairings:
        click.echo(f"{result.label[:39]:<40} {result.status.value:<10} {result.created_count:<8} "
                   f"{result.updated_count:<8} {result.skipped_count:<8} {result.failed_count:<8}")
        if result.error_message:
            click.echo(f"    error: {result.error_message}")

    click.echo(f"\nRun {summary.id}: {summary.status.value} "
               f"({summary.created_count} created, {summary.updated_count} updated, "
               f"{summary.failed_count} failed)")


@cli.command()
def test_connection() -> None:
    """Test connections to the ClickUp and Motion APIs."""
    from ..runner import build_connectors

    try:
        settings = load_settings()
        clickup, motion = build_connectors(settings)

        async def check():
            return await asyncio.gather(clickup.test_connection(), motion.test_connection())

        results = asyncio.run(check())
    except ConfigurationError as e:
        click.echo(f"Configuration Error: {e}", err=True)
        sys.exit(1)

    failed = False
    for name, ok in zip(("ClickUp", "Motion"), results):
        if ok:
            click.echo(f"Connected to {name} API")
        else:
            click.echo(f"Could not connect to {name} API", err=True)
            failed = True
    if failed:
        sys.exit(1)


@cli.command()
def pairings() -> None:
    """List active sync pairings and their cursors."""
    from ..services.firestore import FirestoreService

    try:
        settings = load_settings()
        store = FirestoreService(project_id=settings.google_cloud_project)
        active = asyncio.run(store.list_active_pairings())
    except TaskSyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not active:
        click.echo("No active pairings.")
        return

    click.echo(f"{'ID':<22} {'ClickUp list':<16} {'Motion workspace':<26} {'Last sync':<32}")
    click.echo("-" * 98)
    for pairing in active:
        last_sync = pairing.last_sync_at.isoformat() if pairing.last_sync_at else "never"
        click.echo(f"{pairing.id:<22} {pairing.clickup_list_id:<16} {pairing.motion_workspace_id:<26} {last_sync:<32}")


@cli.command()
@click.option('--clickup-id', help='ClickUp task id of the link to remove')
@click.option('--motion-id', help='Motion task id of the link to remove')
def unlink(clickup_id: Optional[str], motion_id: Optional[str]) -> None:
    """Remove a task link (the ClickUp task will be created in Motion again)."""
    from ..services.firestore import FirestoreService

    if bool(clickup_id) == bool(motion_id):
        click.echo("Pass exactly one of --clickup-id or --motion-id", err=True)
        sys.exit(1)

    try:
        settings = load_settings()
        store = FirestoreService(project_id=settings.google_cloud_project)
        if clickup_id:
            deleted = asyncio.run(store.delete_link_by_clickup_id(clickup_id))
        else:
            deleted = asyncio.run(store.delete_link_by_motion_id(motion_id))
    except TaskSyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if deleted:
        click.echo("Link removed.")
    else:
        click.echo("No link found.", err=True)
        sys.exit(1)


@cli.command()
@click.option('--cron', help='Cron expression (defaults to SYNC_SCHEDULE)')
@click.option('--service-url', help='Base URL of the deployed API (defaults to API_BASE_URL)')
@click.option('--show', is_flag=True, help='Only show the current job')
@click.option('--delete', 'delete_job', is_flag=True, help='Delete the job')
def schedule(cron: Optional[str], service_url: Optional[str], show: bool, delete_job: bool) -> None:
    """Manage the Cloud Scheduler job that triggers the sync."""
    from ..services.scheduler import SchedulerService

    try:
        settings = load_settings()
        scheduler = SchedulerService(project_id=settings.google_cloud_project, region=settings.google_cloud_region)

        if show:
            job = scheduler.get_sync_schedule()
            click.echo(json.dumps(job, indent=2) if job else "No scheduler job.")
        elif delete_job:
            deleted = scheduler.delete_sync_schedule()
            click.echo("Scheduler job deleted." if deleted else "No scheduler job.")
        else:
            job = scheduler.ensure_sync_schedule(
                cron or settings.sync_schedule,
                service_url or settings.api_base_url
            )
            click.echo(json.dumps(job, indent=2))
    except ConfigurationError as e:
        click.echo(f"Configuration Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logging.exception("Unexpected error occurred")
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
