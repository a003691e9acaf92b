import logging
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from typing import Optional
from datetime import datetime, date
from pathlib import Path
from pydantic import ValidationError

from admitplan.clock import SystemClock
from admitplan.config import settings
from admitplan.database import SessionLocal, init_db
from admitplan.crud import create_user, get_or_create_school, add_target_school
from admitplan.errors import DomainError
from admitplan.schemas import CountdownItem, CountdownType, CustomDDayCreate, EventLogResponse, TransitionResult, WeeklyTaskResponse
from admitplan import task_machine, event_log, progress, dday, plan_converter
from admitplan.schedule_importer import ScheduleParser, import_schedules

app = typer.Typer(help="Admission Planner CLI - weekly action plans and D-Day countdowns")
console = Console()

STATUS_STYLES = {"TODO": "white", "IN_PROGRESS": "yellow", "DONE": "green", "SKIPPED": "dim"}
PRIORITY_STYLES = {"urgent": "bold red", "important": "yellow", "normal": "white"}


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs")):
    """Configure logging for every command"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)]
    )


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got {value}")


def _fail(error: DomainError):
    console.print(f"[red]✗[/red] {error.message}")
    raise typer.Exit(code=1)


def _print_tasks(tasks):
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Week", justify="right")
    table.add_column("Theme", style="blue")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Due", style="yellow")

    for task in tasks:
        table.add_row(
            str(task.id),
            str(task.week_number),
            task.theme,
            task.title,
            f"[{STATUS_STYLES.get(task.status.value, 'white')}]{task.status.value}[/]",
            str(task.due_date or "-")
        )
    console.print(table)


def _print_countdowns(items, title: str):
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("D-Day", justify="right")
    table.add_column("Date", style="cyan")
    table.add_column("Type", style="blue")
    table.add_column("Title")
    table.add_column("School", style="green")

    for item in items:
        style = PRIORITY_STYLES[item.priority.value]
        label = f"D-{item.days_left}" if item.days_left > 0 else ("D-Day" if item.days_left == 0 else f"D+{-item.days_left}")
        table.add_row(
            f"[{style}]{label}[/]",
            str(item.date),
            item.type.value,
            item.title,
            item.school_name or ""
        )
    console.print(table)


def _print_events(events):
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("When", style="cyan")
    table.add_column("Type", style="blue")
    table.add_column("Title")
    table.add_column("Note", style="dim")
    for event in events:
        table.add_row(
            event.created_at.strftime("%Y-%m-%d %H:%M"),
            event.type,
            event.title,
            event.description or ""
        )
    console.print(table)


def _print_conversion(result):
    console.print(f"[green]✓[/green] Plan {result.plan_id} created with {result.tasks_created} tasks")
    for task in result.tasks:
        console.print(f"  #{task.id} {task.title} (due {task.due_date})")


@app.command()
def init():
    """Initialize database tables"""
    init_db()
    console.print("[green]✓[/green] Database initialized successfully!")


@app.command()
def reset_db():
    """Delete all data and reinitialize database (WARNING: irreversible!)"""
    confirm = typer.confirm("⚠️  This will DELETE ALL DATA. Are you sure?")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    from admitplan.database import engine, Base
    import admitplan.models  # noqa: F401
    console.print("[yellow]Dropping all tables...[/yellow]")
    Base.metadata.drop_all(bind=engine)
    console.print("[yellow]Recreating tables...[/yellow]")
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓[/green] Database reset complete! All data deleted.")


@app.command()
def add_user(
    name: str = typer.Option(..., prompt="Name"),
    role: str = typer.Option("STUDENT", help="STUDENT or PARENT"),
    family: Optional[str] = typer.Option(None, help="Family id shared by parent and child")
):
    """Create a student or parent account"""
    db = SessionLocal()
    try:
        user = create_user(db, name, role.upper(), family)
        console.print(f"[green]✓[/green] {user.role} created! User ID: {user.id}")
    finally:
        db.close()


@app.command()
def add_target(student_id: int, school: str):
    """Add a target school for a student"""
    db = SessionLocal()
    try:
        db_school = get_or_create_school(db, school)
        add_target_school(db, student_id, db_school.id)
        console.print(f"[green]✓[/green] {school} added to targets of student {student_id}")
    finally:
        db.close()


@app.command("import-schedules")
def import_schedule_file(file_path: Path = typer.Argument(..., exists=True)):
    """Import admission schedules from a CSV or Excel table"""
    db = SessionLocal()
    try:
        rows = ScheduleParser.auto_parse(str(file_path))
        count = import_schedules(db, rows)
        console.print(f"[green]✓[/green] Imported {count} schedules from {file_path.name}")
    except ValueError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def week(student_id: int):
    """Show this week's tasks of the active plan"""
    db = SessionLocal()
    try:
        current = task_machine.get_current_week_tasks(db, student_id)
        if current.plan_id is None:
            console.print(f"[yellow]{current.message}[/yellow]")
            return
        console.print(f"\n[bold]Plan {current.plan_id} - Week {current.week_number}[/bold] {current.theme or ''}")
        _print_tasks(current.tasks)
    finally:
        db.close()


@app.command()
def plan_tasks(student_id: int, plan_id: int):
    """Show all tasks of a plan grouped by week"""
    db = SessionLocal()
    try:
        plan = task_machine.get_plan_tasks(db, student_id, plan_id)
        console.print(f"\n[bold]{plan.title}[/bold] ({plan.start_date} ~ {plan.end_date}, {plan.status.value})")
        _print_tasks([task for group in plan.weeks for task in group.tasks])
    except DomainError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def set_status(
    student_id: int,
    task_id: int,
    status: str = typer.Argument(..., help="TODO, IN_PROGRESS, DONE or SKIPPED"),
    reason: Optional[str] = typer.Option(None, help="Why the task was skipped")
):
    """Change a task's status and record the event"""
    db = SessionLocal()
    try:
        task, event = task_machine.transition(db, task_id, student_id, status, reason)
        result = TransitionResult(
            task=WeeklyTaskResponse.model_validate(task),
            event=EventLogResponse.model_validate(event)
        )
        console.print(f"[green]✓[/green] {result.event.title} → {result.task.status.value}")
    except DomainError as e:
        _fail(e)
    finally:
        db.close()


@app.command("progress")
def show_progress(student_id: int, plan_id: int):
    """Show completion statistics of a plan"""
    db = SessionLocal()
    try:
        summary = progress.get_plan_progress(db, plan_id, student_id)
        console.print(f"\n[bold]Plan {plan_id} progress[/bold]")
        console.print(f"  Total: {summary.total}")
        console.print(f"  Done: {summary.completed}  In progress: {summary.in_progress}  "
                      f"Skipped: {summary.skipped}  To do: {summary.todo}")
        console.print(f"  Progress rate: [green]{summary.progress_rate}%[/green]")
        console.print(f"  Completion rate: [cyan]{summary.completion_rate}%[/cyan]")
    except DomainError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def events(
    student_id: int,
    type: Optional[str] = typer.Option(None, help="Event type filter"),
    start: Optional[str] = typer.Option(None, help="From date (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, help="To date (YYYY-MM-DD)"),
    page: int = typer.Option(1),
    limit: Optional[int] = typer.Option(None),
    parent_id: Optional[int] = typer.Option(None, help="Read as this parent")
):
    """List a student's events, newest first"""
    db = SessionLocal()
    try:
        query = event_log.build_query(type=type, start_date=start, end_date=end, page=page, limit=limit)
        if parent_id is not None:
            result = event_log.get_child_events(db, parent_id, student_id, query)
        else:
            result = event_log.get_events(db, student_id, query)
        _print_events(result.events)
        p = result.pagination
        console.print(f"[dim]Page {p.page}/{p.total_pages} ({p.total} events)[/dim]")
    except DomainError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def timeline(
    student_id: int,
    type: Optional[str] = typer.Option(None, help="Event type filter"),
    parent_id: Optional[int] = typer.Option(None, help="Read as this parent")
):
    """Show a student's events grouped by month"""
    db = SessionLocal()
    try:
        query = event_log.build_query(type=type)
        if parent_id is not None:
            result = event_log.get_child_timeline(db, parent_id, student_id, query)
        else:
            result = event_log.get_timeline(db, student_id, query)
        for group in result.timeline:
            console.print(f"\n[bold]{group.month}[/bold]")
            _print_events(group.events)
    except DomainError as e:
        _fail(e)
    finally:
        db.close()


@app.command("dday")
def show_dday(student_id: int, parent_id: Optional[int] = typer.Option(None, help="Read as this parent")):
    """Show the D-Day dashboard"""
    db = SessionLocal()
    try:
        if parent_id is not None:
            dashboard = dday.get_child_dashboard(db, parent_id, student_id)
        else:
            dashboard = dday.get_dashboard(db, student_id)

        main_item = dashboard.main_dday
        if main_item:
            console.print(f"\n[bold red]D-{main_item.days_left}[/bold red] [bold]{main_item.title}[/bold] {main_item.school_name or ''}")
        else:
            console.print("\n[yellow]No upcoming D-Day[/yellow]")

        _print_countdowns(dashboard.upcoming, "Upcoming")
        if dashboard.passed:
            _print_countdowns(dashboard.passed, "Passed")

        console.print("\n[bold]Milestones[/bold]")
        for milestone in dashboard.milestones:
            mark = "[green]✓[/green]" if milestone.completed else "[dim]○[/dim]"
            console.print(f"  {mark} {milestone.date} {milestone.title}")
    except DomainError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def add_dday(
    student_id: int,
    title: str,
    when: str = typer.Argument(..., help="Date (YYYY-MM-DD)"),
    description: Optional[str] = typer.Option(None),
    exam: bool = typer.Option(False, help="Mark as an exam")
):
    """Add a personal countdown"""
    db = SessionLocal()
    try:
        data = CustomDDayCreate(
            title=title,
            date=_parse_date(when),
            description=description,
            type=CountdownType.EXAM if exam else CountdownType.CUSTOM
        )
        item: CountdownItem = dday.add_custom_dday(db, student_id, data)
        console.print(f"[green]✓[/green] D-{item.days_left} {item.title} ({item.priority.value})")
    except ValidationError as e:
        console.print(f"[red]✗[/red] {e.errors()[0]['msg']}")
        raise typer.Exit(code=1)
    except DomainError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def alerts(student_id: int):
    """Show D-Day alerts due today"""
    db = SessionLocal()
    try:
        found = dday.check_alerts(db, student_id)
        if not found:
            console.print("[dim]No alerts[/dim]")
        for alert in found:
            console.print(alert.message)
    finally:
        db.close()


@app.command()
def convert_template(student_id: int, start: Optional[str] = typer.Option(None, help="Start date (YYYY-MM-DD)")):
    """Create a plan from the default 12-week template"""
    db = SessionLocal()
    try:
        result = plan_converter.convert_to_tasks(
            db, student_id, plan_converter.get_default_plan_template(), _parse_date(start)
        )
        _print_conversion(result)
    except DomainError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def convert_text(
    student_id: int,
    file_path: Path = typer.Argument(..., exists=True, help="Plan text file"),
    start: Optional[str] = typer.Option(None, help="Start date (YYYY-MM-DD)")
):
    """Parse a free-text plan and create its tasks"""
    db = SessionLocal()
    try:
        text = file_path.read_text(encoding="utf-8")
        result = plan_converter.parse_and_convert(db, student_id, text, _parse_date(start))
        _print_conversion(result)
    except DomainError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def convert_history(student_id: int, output_id: int):
    """Create tasks from a stored AI action plan"""
    db = SessionLocal()
    try:
        result = plan_converter.convert_from_ai_history(db, student_id, output_id)
        _print_conversion(result)
    except DomainError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def generate_plan(
    student_id: int,
    focus: Optional[str] = typer.Option(None, help="What the plan should emphasize"),
    convert: bool = typer.Option(True, help="Create tasks from the answer right away")
):
    """Ask the AI model for an action plan"""
    from admitplan.plan_generator import generate_and_store

    db = SessionLocal()
    try:
        with console.status(f"[bold green]Generating plan with {settings.ai_provider}..."):
            output = generate_and_store(db, student_id, SystemClock().today(), focus_request=focus)
        console.print(f"[green]✓[/green] Stored AI output {output.id}")
        if convert:
            _print_conversion(plan_converter.convert_from_ai_history(db, student_id, output.id))
    except DomainError as e:
        _fail(e)
    finally:
        db.close()


if __name__ == "__main__":
    app()
