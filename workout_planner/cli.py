"""Command-line interface for the workout planner."""

import logging
import sys
from dataclasses import replace
from datetime import date

import click
import numpy as np
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .analysis import ProgressAnalyzer
from .config import config
from .db import ExerciseNotFoundError, SessionNotFoundError, get_db, seed_exercises
from .planning import PlanningError, Session, SessionStatus, WorkoutFocus
from .planning.models import WEEKDAYS
from .service import InvalidFeedbackError, WorkoutService

console = Console()

DATE_FORMATS = ["%Y-%m-%d"]
KNOWN_ERRORS = (
    PlanningError,
    SessionNotFoundError,
    ExerciseNotFoundError,
    InvalidFeedbackError,
    ValueError,
)


def fail(error: Exception):
    """Print an error and exit with status 1."""
    message = str(error).replace("[", r"\[")
    console.print(f"[red]❌ {message}[/red]")
    sys.exit(1)


def to_day(value) -> date:
    return value.date() if value is not None else date.today()


def format_sets(exercise_set) -> str:
    """Compact set summary, e.g. '3 × 8-12 @ 60.0 kg'."""
    sets = exercise_set.sets
    first = sets[0]
    reps = f"{first.min_reps}" if first.min_reps == first.max_reps else f"{first.min_reps}-{first.max_reps}"
    load = "bodyweight" if first.weight_kg is None else f"{first.weight_kg:.1f} kg"
    return f"{len(sets)} × {reps} @ {load}"


def print_session(session: Session, title: str):
    category = session.category.value.replace("_", " ").title() if session.category else "Workout"
    console.print(Panel.fit(
        f"{title} - {session.date.strftime('%A %Y-%m-%d')} ({category}, {session.status.value})",
        style="bold blue",
    ))

    table = Table(box=box.ROUNDED)
    table.add_column("#", style="dim")
    table.add_column("ID", style="dim")
    table.add_column("Exercise", style="bold")
    table.add_column("Phase", style="magenta")
    table.add_column("Prescription", style="green")
    table.add_column("Done", style="yellow")

    for number, exercise_set in enumerate(session.exercise_sets, start=1):
        first = exercise_set.sets[0]
        phase = WorkoutFocus.from_rep_range(first.min_reps, first.max_reps).value
        done = [str(s.completed_reps) for s in exercise_set.sets if s.completed_reps is not None]
        table.add_row(
            str(number),
            str(exercise_set.exercise.id),
            exercise_set.exercise.name,
            phase,
            format_sets(exercise_set),
            ", ".join(done) or "-",
        )

    console.print(table)
    if session.difficulty_rating is not None:
        console.print(f"Difficulty rating: [bold]{session.difficulty_rating}[/bold]/5")


@click.group()
@click.option("--user", "user_id", default=None, help="User to plan for (default WORKOUT_USER_ID)")
@click.pass_context
def cli(ctx, user_id):
    """Resistance training planner."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["user_id"] = user_id


def get_service(ctx) -> WorkoutService:
    return WorkoutService(user_id=ctx.obj.get("user_id"))


@cli.command("init-db")
@click.option("--reset", is_flag=True, help="Drop all tables first")
def init_db(reset):
    """Create tables and load the exercise catalogue."""
    db = get_db()
    if reset:
        if not click.confirm("This will delete all workouts. Are you sure?"):
            console.print("Operation cancelled.")
            return
        db.reset()

    count = seed_exercises(db)
    console.print(f"[green]✅ Database ready with {count} exercises[/green]")


@cli.command()
@click.option("--monday", type=int, help="Minutes on Monday (0, 45, 60 or 90)")
@click.option("--tuesday", type=int)
@click.option("--wednesday", type=int)
@click.option("--thursday", type=int)
@click.option("--friday", type=int)
@click.option("--saturday", type=int)
@click.option("--sunday", type=int)
@click.pass_context
def preferences(ctx, **minutes):
    """Show or update weekly training availability."""
    service = get_service(ctx)
    changes = {day: value for day, value in minutes.items() if value is not None}

    try:
        prefs = service.get_preferences()
        if changes:
            prefs = replace(prefs, **changes)
            service.save_preferences(prefs)
            console.print("[green]✅ Preferences saved[/green]")
    except KNOWN_ERRORS as e:
        fail(e)

    table = Table(title="Weekly Availability", box=box.ROUNDED)
    table.add_column("Day", style="bold")
    table.add_column("Minutes", style="green")
    for day in WEEKDAYS:
        value = getattr(prefs, day)
        table.add_row(day.title(), str(value) if value else "[dim]rest[/dim]")
    console.print(table)


@cli.command()
@click.option("--date", "day", type=click.DateTime(formats=DATE_FORMATS), help="Workout date (default today)")
@click.pass_context
def plan(ctx, day):
    """Show the workout for a day, planning it if none is stored."""
    try:
        session = get_service(ctx).get_session(to_day(day))
    except KNOWN_ERRORS as e:
        fail(e)
    print_session(session, "🏋️  Workout")


@cli.command()
@click.option("--date", "day", type=click.DateTime(formats=DATE_FORMATS), help="Workout date (default today)")
@click.pass_context
def start(ctx, day):
    """Start a workout, saving its plan."""
    try:
        session = get_service(ctx).start_session(to_day(day))
    except KNOWN_ERRORS as e:
        fail(e)
    print_session(session, "▶️  Started")


@cli.command("log-set")
@click.argument("exercise_id", type=int)
@click.argument("set_number", type=click.IntRange(min=1))
@click.argument("reps", type=click.IntRange(min=0))
@click.option("--weight", type=float, help="Weight actually lifted in kg")
@click.option("--date", "day", type=click.DateTime(formats=DATE_FORMATS), help="Workout date (default today)")
@click.pass_context
def log_set(ctx, exercise_id, set_number, reps, weight, day):
    """Record the reps completed in a set."""
    try:
        get_service(ctx).record_set(to_day(day), exercise_id, set_number - 1, reps, weight_kg=weight)
    except KNOWN_ERRORS as e:
        fail(e)
    console.print(f"[green]✅ Set {set_number} logged: {reps} reps[/green]")


@cli.command()
@click.argument("exercise_id", type=int)
@click.option("--date", "day", type=click.DateTime(formats=DATE_FORMATS), help="Workout date (default today)")
@click.pass_context
def warmup(ctx, exercise_id, day):
    """Mark the warm-up of an exercise as done."""
    try:
        get_service(ctx).mark_warmup_complete(to_day(day), exercise_id)
    except KNOWN_ERRORS as e:
        fail(e)
    console.print("[green]✅ Warm-up complete[/green]")


@cli.command("add-exercise")
@click.argument("exercise_id", type=int)
@click.option("--date", "day", type=click.DateTime(formats=DATE_FORMATS), help="Workout date (default today)")
@click.pass_context
def add_exercise(ctx, exercise_id, day):
    """Add an exercise to a stored workout."""
    try:
        session = get_service(ctx).add_exercise(to_day(day), exercise_id)
    except KNOWN_ERRORS as e:
        fail(e)
    print_session(session, "➕ Exercise added")


@cli.command()
@click.argument("exercise_id", type=int)
@click.argument("new_exercise_id", type=int, required=False)
@click.option("--date", "day", type=click.DateTime(formats=DATE_FORMATS), help="Workout date (default today)")
@click.pass_context
def swap(ctx, exercise_id, new_exercise_id, day):
    """Replace an exercise; without NEW_EXERCISE_ID list the alternatives."""
    service = get_service(ctx)

    if new_exercise_id is None:
        try:
            alternatives = service.find_compatible_exercises(exercise_id)
        except KNOWN_ERRORS as e:
            fail(e)

        table = Table(title=f"Alternatives for exercise {exercise_id}", box=box.ROUNDED)
        table.add_column("ID", style="dim")
        table.add_column("Exercise", style="bold")
        table.add_column("Primary muscles", style="green")
        for exercise in alternatives:
            table.add_row(str(exercise.id), exercise.name, ", ".join(exercise.primary_muscle_groups))
        console.print(table)
        return

    try:
        session = service.swap_exercise(to_day(day), exercise_id, new_exercise_id)
    except KNOWN_ERRORS as e:
        fail(e)
    print_session(session, "🔄 Exercise swapped")


@cli.command()
@click.option("--date", "day", type=click.DateTime(formats=DATE_FORMATS), help="Workout date (default today)")
@click.pass_context
def complete(ctx, day):
    """Mark a workout as completed."""
    try:
        get_service(ctx).complete_session(to_day(day))
    except KNOWN_ERRORS as e:
        fail(e)
    console.print("[green]✅ Workout completed. Rate it with 'workout-planner feedback'.[/green]")


@cli.command()
@click.argument("rating", type=int)
@click.option("--date", "day", type=click.DateTime(formats=DATE_FORMATS), help="Workout date (default today)")
@click.pass_context
def feedback(ctx, rating, day):
    """Rate a workout: 1 too easy, 2-4 about right, 5 too difficult."""
    try:
        get_service(ctx).save_feedback(to_day(day), rating)
    except KNOWN_ERRORS as e:
        fail(e)
    console.print(f"[green]✅ Difficulty {rating}/5 saved[/green]")


@cli.command()
@click.option("--date", "day", type=click.DateTime(formats=DATE_FORMATS), help="Any date in the week (default today)")
@click.pass_context
def week(ctx, day):
    """Show the Monday to Sunday schedule."""
    service = get_service(ctx)
    try:
        prefs = service.get_preferences()
        sessions = service.weekly_schedule(to_day(day))
    except KNOWN_ERRORS as e:
        fail(e)

    table = Table(title="📅 Weekly Schedule", box=box.ROUNDED)
    table.add_column("Day", style="bold")
    table.add_column("Date")
    table.add_column("Type", style="magenta")
    table.add_column("Status", style="yellow")
    table.add_column("Exercises", style="green")

    for session in sessions:
        kind = session.category.value.replace("_", " ") if session.category else "-"
        if not prefs.is_workout_day(session.date) and session.status is SessionStatus.PLANNED:
            kind = f"[dim]{kind} (optional)[/dim]"
        table.add_row(
            session.date.strftime("%A"),
            session.date.isoformat(),
            kind,
            session.status.value,
            ", ".join(es.exercise.name for es in session.exercise_sets),
        )

    console.print(table)


@cli.command()
@click.option("--days", default=90, help="Number of days to analyze")
@click.pass_context
def progress(ctx, days):
    """Show strength progress and weekly training volume."""
    console.print(Panel.fit(f"📈 Progress ({days} days)", style="bold blue"))

    analyzer = ProgressAnalyzer(get_service(ctx).history(days))
    summary = analyzer.exercise_progress()
    if summary.empty:
        console.print("[yellow]No completed workouts in the specified period.[/yellow]")
        return

    table = Table(title="Estimated 1RM", box=box.ROUNDED)
    table.add_column("Exercise", style="bold")
    table.add_column("Sessions")
    table.add_column("Last Weight", style="green")
    table.add_column("Best e1RM", style="yellow")
    table.add_column("Trend", style="magenta")

    for row in summary.itertuples(index=False):
        trend = "-" if np.isnan(row.trend_kg_per_week) else f"{row.trend_kg_per_week:+.1f} kg/wk"
        table.add_row(
            row.exercise,
            str(row.sessions),
            "-" if np.isnan(row.last_weight_kg) else f"{row.last_weight_kg:.1f} kg",
            "-" if np.isnan(row.best_e1rm_kg) else f"{row.best_e1rm_kg:.1f} kg",
            trend,
        )
    console.print(table)

    volume = analyzer.weekly_volume()
    table = Table(title="Weekly Volume", box=box.ROUNDED)
    table.add_column("Week ending", style="bold")
    table.add_column("Sets")
    table.add_column("Reps")
    table.add_column("Volume", style="green")
    for week_end, row in volume.iterrows():
        table.add_row(week_end.date().isoformat(), str(int(row["sets"])), str(int(row["reps"])), f"{row['volume_kg']:.0f} kg")
    console.print(table)


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[orange]Operation cancelled by user.[/orange]")


if __name__ == "__main__":
    main()
