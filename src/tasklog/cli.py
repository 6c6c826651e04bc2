"""CLI for the task tracker: serve the API or work on the event log directly."""

import json
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import Settings
from .engine import TaskEngine, task_metrics
from .errors import StorageError, TaskValidationError
from .models import Task
from .schedule import dashboard_view, scheduled_view, task_due
from .state import parse_event

console = Console()


def _engine(ctx: click.Context) -> TaskEngine:
    return TaskEngine(ctx.obj["event_file"])


def _tasks_table(title: str, tasks: list[Task]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Due", style="green")
    table.add_column("Description")

    for task in tasks:
        due = task_due(task)
        if task.priority:
            when = "[bold red]PRIORITY[/bold red]"
        elif due is not None:
            when = due.strftime("%Y-%m-%d %H:%M")
        else:
            when = "-"
        table.add_row(task.id, escape(task.name), when, escape(task.description))
    return table


@click.group()
@click.option(
    "--event-file",
    envvar="EVENT_FILE",
    type=click.Path(path_type=Path),
    help="Path to the event log (default: ./eventlist.txt)",
)
@click.pass_context
def cli(ctx, event_file):
    """Task Tracker - event-sourced task list."""
    ctx.ensure_object(dict)
    ctx.obj["event_file"] = event_file or Settings().event_file


@cli.command()
@click.option("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Port (default: PORT or 3000)")
@click.pass_context
def serve(ctx, host, port):
    """Run the HTTP API and frontend."""
    from .server import run

    overrides = {"event_file": ctx.obj["event_file"]}
    if host:
        overrides["host"] = host
    if port:
        overrides["port"] = port
    run(Settings(**overrides))


@cli.command()
@click.argument("name")
@click.option("--date", default="", help="Due date (YYYY-MM-DD)")
@click.option("--time", "time_", default="", help="Due time (HH:MM)")
@click.option("-d", "--description", default="", help="Free-form description")
@click.option("-p", "--priority", is_flag=True, help="Pin to the dashboard (drops date/time)")
@click.pass_context
def add(ctx, name, date, time_, description, priority):
    """Create a task."""
    try:
        event = _engine(ctx).create_task(name, date, time_, description, priority)
    except (TaskValidationError, StorageError) as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)
    console.print(f"[green]✓[/green] Created {event.id}")


@cli.command()
@click.argument("task_id")
@click.pass_context
def rm(ctx, task_id):
    """Delete a task. Unknown ids are accepted."""
    try:
        _engine(ctx).delete_task(task_id)
    except (TaskValidationError, StorageError) as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)
    console.print(f"[green]✓[/green] Deleted {task_id}")


@cli.command(name="ls")
@click.option(
    "--view",
    type=click.Choice(["all", "scheduled", "dashboard"]),
    default="all",
    show_default=True,
    help="Which tasks to show",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def ls(ctx, view, as_json):
    """List current tasks."""
    try:
        tasks = _engine(ctx).list_tasks()
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    if view == "scheduled":
        tasks = scheduled_view(tasks)
    elif view == "dashboard":
        tasks = dashboard_view(tasks)

    if as_json:
        click.echo(json.dumps([t.to_api() for t in tasks], indent=2))
        return

    if not tasks:
        console.print("[dim]No tasks[/dim]")
        return
    console.print(_tasks_table(view.capitalize(), tasks))


@cli.command()
@click.option("-n", "--limit", type=int, default=None, help="Show only the last N entries")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def log(ctx, limit, as_json):
    """Show the raw event history, oldest first."""
    try:
        lines = _engine(ctx).event_store.read_all()
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    entries = list(enumerate(lines, start=1))
    if limit:
        entries = entries[-limit:]

    if as_json:
        out = []
        for index, line in entries:
            try:
                event = parse_event(line)
            except ValidationError:
                out.append({"index": index, "malformed": True, "raw": line})
                continue
            out.append({"index": index, **event.model_dump(by_alias=True)})
        click.echo(json.dumps(out, indent=2))
        return

    if not entries:
        console.print("No events found.")
        return

    for index, line in entries:
        try:
            event = parse_event(line)
        except ValidationError:
            console.print(f"{index:>5}  [red]malformed[/red]  [dim]{escape(line[:60])}[/dim]")
            continue
        if event.type == "create":
            flag = " [bold red](priority)[/bold red]" if event.priority else ""
            console.print(f"{index:>5}  [green]create[/green]  {event.id}  {escape(event.name)}{flag}")
        else:
            console.print(f"{index:>5}  [yellow]delete[/yellow]  {event.id}")


@cli.command()
@click.pass_context
def stats(ctx):
    """Show task counters."""
    try:
        state = _engine(ctx).project()
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    counts = task_metrics(state.list_tasks())
    console.print(
        f"Tasks: [bold]{counts['total_tasks']}[/bold] "
        f"({counts['priority_tasks']} priority, {counts['regular_tasks']} regular)"
    )
    console.print(f"With dates: {counts['tasks_with_dates']}")
    console.print(f"With descriptions: {counts['tasks_with_descriptions']}")
    console.print(f"Events: {state.applied} applied, {state.skipped} malformed")


def main():
    cli()


if __name__ == "__main__":
    main()
