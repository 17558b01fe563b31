"""
Main CLI entry point for Customs Process Tracker

Provides command-line interface for running the API server, preparing the
database and inspecting executions and alerts.
"""

import asyncio
import json
import sys

import click

from ..core.controller import ProcessExecutionController
from ..core.exceptions import TrackerError
from ..services.access_control import AccessControl
from ..services.alert_service import AlertService
from ..utils.config import load_settings
from ..utils.database import DatabaseManager
from ..utils.logger import setup_logger


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True), help='YAML configuration file path')
@click.option('--database-url', '-d', help='Database connection URL')
@click.option('--log-level', '-l', default=None, help='Log level')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, config, database_url, log_level, verbose):
    """Customs Process Tracker CLI"""

    ctx.ensure_object(dict)

    try:
        settings = load_settings(config, database_url=database_url, log_level=log_level)
    except TrackerError as e:
        click.echo(f"Error loading configuration: {e.message}", err=True)
        sys.exit(1)

    # Verbose switches to human-readable logs
    setup_logger(
        "customs_tracker",
        level=settings.log_level,
        structured=settings.structured_logging and not verbose,
        log_file=settings.log_file
    )

    ctx.obj['settings'] = settings
    ctx.obj['verbose'] = verbose


@cli.group()
@click.pass_context
def db(ctx):
    """Database management commands"""
    pass


@cli.group()
@click.pass_context
def execution(ctx):
    """Process execution commands"""
    pass


@cli.group()
@click.pass_context
def alerts(ctx):
    """Alert commands"""
    pass


def _database_manager(ctx) -> DatabaseManager:
    settings = ctx.obj['settings']
    return DatabaseManager(
        settings.database_url,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        command_timeout=settings.command_timeout
    )


def _run(ctx, action, error_prefix: str):
    """Run an async action against an initialized database manager."""

    async def _main():
        db_manager = _database_manager(ctx)
        try:
            await db_manager.initialize()
            await action(db_manager)
        finally:
            await db_manager.close()

    try:
        asyncio.run(_main())
    except TrackerError as e:
        click.echo(f"{error_prefix}: {e.message}", err=True)
        sys.exit(1)


@cli.command('serve')
@click.option('--host', default=None, help='Bind address')
@click.option('--port', type=int, default=None, help='Bind port')
@click.pass_context
def serve(ctx, host, port):
    """Run the HTTP API server"""
    import uvicorn
    from ..api.app import create_app

    settings = ctx.obj['settings']
    try:
        app = create_app(settings)
    except TrackerError as e:
        click.echo(f"Error starting server: {e.message}", err=True)
        sys.exit(1)

    click.echo(f"Serving on http://{host or settings.host}:{port or settings.port}")
    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower()
    )


@db.command('init')
@click.pass_context
def db_init(ctx):
    """Create the tracker tables"""

    async def _init(db_manager):
        await db_manager.apply_schema()
        click.echo("Schema applied successfully")

    _run(ctx, _init, "Error applying schema")


@db.command('check')
@click.pass_context
def db_check(ctx):
    """Check database connectivity"""

    async def _check(db_manager):
        if not await db_manager.is_healthy():
            click.echo("Database is not reachable", err=True)
            sys.exit(1)
        stats = await db_manager.get_execution_statistics()
        click.echo("Database is healthy")
        click.echo(f"Executions: {json.dumps(stats)}")

    _run(ctx, _check, "Error checking database")


@execution.command('show')
@click.argument('execution_id')
@click.pass_context
def execution_show(ctx, execution_id):
    """Show an execution and its step ledger"""

    async def _show(db_manager):
        controller = ProcessExecutionController(db_manager)
        record = await controller.get_execution(execution_id)
        ledger = await controller.get_step_executions(execution_id)
        _display_execution(record.to_dict(), [row.to_dict() for row in ledger], ctx.obj['verbose'])

    _run(ctx, _show, "Error getting execution")


@alerts.command('list')
@click.option('--active', is_flag=True, help='Show only unresolved alerts')
@click.option('--limit', type=int, default=20, help='Limit number of alerts to show')
@click.pass_context
def alerts_list(ctx, active, limit):
    """List alerts, newest first"""

    async def _list(db_manager):
        items = await AlertService(db_manager).list_alerts(active_only=active)
        _display_alerts_table([alert.to_dict() for alert in items[:limit]])

    _run(ctx, _list, "Error listing alerts")


@alerts.command('resolve')
@click.argument('alert_id')
@click.option('--user', 'user_id', required=True, help='Administrator resolving the alert')
@click.pass_context
def alerts_resolve(ctx, alert_id, user_id):
    """Resolve an alert"""

    async def _resolve(db_manager):
        await AccessControl(db_manager).require_admin(user_id)
        alert = await AlertService(db_manager).resolve_alert(alert_id, user_id)
        click.echo(f"Alert {alert.id} resolved by {user_id}")

    _run(ctx, _resolve, "Error resolving alert")


def _display_execution(record, ledger, verbose: bool):
    click.echo(f"Execution:    {record['id']}")
    click.echo(f"Process:      {record['process_id']}")
    click.echo(f"Shipment:     {record['shipment_id']}")
    click.echo(f"Status:       {record['status']}")
    click.echo(f"Current step: {record['current_step']}")
    click.echo(f"Started:      {record['started_at']}")
    click.echo(f"Completed:    {record['completed_at'] or '-'}")
    click.echo("")
    click.echo(f"{'#':<4} {'Step':<38} {'Status':<10} Detail")
    for index, row in enumerate(ledger, start=1):
        detail = row['error_description'] or row['completed_at'] or ''
        click.echo(f"{index:<4} {row['step_id']:<38} {row['status']:<10} {detail}")

    if verbose:
        click.echo("")
        click.echo(json.dumps({"execution": record, "steps": ledger}, indent=2))


def _display_alerts_table(items):
    if not items:
        click.echo("No alerts found")
        return

    click.echo(f"{'Alert':<38} {'Type':<8} {'Resolved':<9} Message")
    for alert in items:
        resolved = "yes" if alert['resolved'] else "no"
        click.echo(f"{alert['id']:<38} {alert['type']:<8} {resolved:<9} {alert['message']}")


def main():
    """Main entry point for CLI"""
    cli(obj={})


if __name__ == '__main__':
    main()
