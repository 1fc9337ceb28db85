"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from wellness.config import ConfigValidationError, get_settings, reload_settings
from wellness.cycle.phase import Phase
from wellness.store import StateFile, StateSnapshot, StateStore

app = typer.Typer(
    help="Personal wellness tracker with cycle-aware metabolic estimates",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

# Subcommand groups
profile_app = typer.Typer(help="Show and update the profile")
period_app = typer.Typer(help="Log period start/end and view cycle history")
phase_app = typer.Typer(help="Menstrual phase for a date or a date range")
weight_app = typer.Typer(help="Log and list weight readings")
food_app = typer.Typer(help="Log food and manage the food library")
workout_app = typer.Typer(help="Log workouts")
water_app = typer.Typer(help="Log water intake")
steps_app = typer.Typer(help="Record step counts")
symptom_app = typer.Typer(help="Log symptoms")
tdee_app = typer.Typer(help="BMR/TDEE estimation and calorie targets")
theme_app = typer.Typer(help="Display theme")

app.add_typer(profile_app, name="profile")
app.add_typer(period_app, name="period")
app.add_typer(phase_app, name="phase")
app.add_typer(weight_app, name="weight")
app.add_typer(food_app, name="food")
app.add_typer(workout_app, name="workout")
app.add_typer(water_app, name="water")
app.add_typer(steps_app, name="steps")
app.add_typer(symptom_app, name="symptom")
app.add_typer(tdee_app, name="tdee")
app.add_typer(theme_app, name="theme")

PHASE_STYLES = {
    Phase.MENSTRUAL: "red",
    Phase.FOLLICULAR: "green",
    Phase.OVULATION: "magenta",
    Phase.LUTEAL: "yellow",
}


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def get_store(ctx: typer.Context) -> StateStore:
    """Return the store opened by the top-level callback."""
    return ctx.obj


def prefers_json(store: StateStore) -> bool:
    """True when config.yaml sets ``defaults.output_format: json``."""
    return store.settings.defaults.output_format == "json"


def parse_date(value: Optional[str], store: StateStore) -> date:
    """Parse a YYYY-MM-DD option, defaulting to today.

    Raises typer.Exit(1) with a friendly message on a malformed date.
    """
    if not value:
        return store.today
    try:
        return date.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Invalid date '{value}' (expected YYYY-MM-DD)[/red]")
        raise typer.Exit(1)


def report_warnings(reason: str, snapshot: StateSnapshot) -> None:
    """State-change subscriber that surfaces store warnings on stderr."""
    for warning in snapshot.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {warning}")


def styled_phase(phase: Phase) -> str:
    style = PHASE_STYLES[phase]
    return f"[{style}]{phase.value}[/{style}]"


@app.callback()
def main(
    ctx: typer.Context,
    state: Optional[Path] = typer.Option(
        None, "--state", help="State file (default: from config, ~/.wellness/state.json)"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Config file (default: ~/.wellness/config.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Open the state store shared by every command."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )

    try:
        settings = reload_settings(config) if config else get_settings()
    except ConfigValidationError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(1)

    store = StateStore.open(StateFile(state or settings.storage.path), settings)
    store.subscribe(report_warnings)
    ctx.obj = store


# ============================================================================
# Profile Commands
# ============================================================================


@profile_app.command("show")
def profile_show(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the profile with today's phase and TDEE."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    profile = store.state.profile
    today = store.today
    estimate = store.get_metabolic_estimate(today)

    if json_output:
        output_json({
            "success": True,
            "command": "profile show",
            "data": {
                "name": profile.name,
                "dob": profile.dob.isoformat() if profile.dob else None,
                "age": profile.age_on(today),
                "height_cm": profile.height_cm,
                "weight_kg": profile.weight_kg,
                "body_fat_pct": profile.body_fat_pct,
                "activity_level": profile.activity_level.value,
                "daily_calorie_goal": profile.goals.daily_calories,
                "phase": estimate.phase.value,
                "tdee": estimate.tdee,
            },
            "human_summary": f"{profile.name}: {profile.weight_kg:.1f} kg, {estimate.phase.value}, TDEE {estimate.tdee}",
        })
        return

    console.print(f"[bold]Profile: {profile.name}[/bold]")
    console.print(f"  Age: {profile.age_on(today)}")
    console.print(f"  Height: {profile.height_cm:.0f} cm")
    console.print(f"  Weight: {profile.weight_kg:.1f} kg")
    if profile.body_fat_pct is not None:
        console.print(f"  Body fat: {profile.body_fat_pct:.1f}%")
    else:
        console.print("  Body fat: [dim]not set (Mifflin-St Jeor)[/dim]")
    console.print(f"  Activity: {profile.activity_level.value}")
    console.print(f"  Calorie goal: {profile.goals.daily_calories} kcal")
    console.print(f"  Phase today: {styled_phase(estimate.phase)}")
    console.print(f"  TDEE today: {estimate.tdee} kcal")


@profile_app.command("update")
def profile_update(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Display name"),
    dob: Optional[str] = typer.Option(None, "--dob", help="Date of birth (YYYY-MM-DD)"),
    height: Optional[float] = typer.Option(None, "--height", help="Height in cm"),
    body_fat: Optional[float] = typer.Option(None, "--body-fat", help="Body fat percentage"),
    clear_body_fat: bool = typer.Option(
        False, "--no-body-fat", help="Forget body fat (use Mifflin-St Jeor)"
    ),
    activity: Optional[str] = typer.Option(
        None, "--activity", help="Activity level (sedentary/light/moderate/active/athlete)"
    ),
    calorie_goal: Optional[int] = typer.Option(None, "--calorie-goal", help="Daily calorie goal"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Update profile attributes."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    birth = parse_date(dob, store) if dob else None

    changed = False
    if any(v is not None for v in (name, birth, height, body_fat, activity)) or clear_body_fat:
        if not store.update_profile(
            name=name,
            dob=birth,
            height_cm=height,
            body_fat_pct=body_fat,
            activity_level=activity,
            clear_body_fat=clear_body_fat,
        ):
            if json_output:
                output_json({
                    "success": False,
                    "command": "profile update",
                    "errors": ["Invalid profile values"],
                })
            else:
                console.print("[red]Invalid profile values[/red]")
            raise typer.Exit(1)
        changed = True

    if calorie_goal is not None:
        if not store.set_calorie_goal(calorie_goal):
            console.print("[red]Calorie goal must be positive[/red]")
            raise typer.Exit(1)
        changed = True

    if not changed:
        console.print("[yellow]Nothing to update[/yellow]")
        raise typer.Exit(1)

    if json_output:
        output_json({
            "success": True,
            "command": "profile update",
            "data": {"name": store.state.profile.name},
            "human_summary": "Profile updated",
        })
    else:
        console.print("[green]Profile updated[/green]")


# ============================================================================
# Period / Phase Commands
# ============================================================================


@period_app.command("start")
def period_start(
    ctx: typer.Context,
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
) -> None:
    """Log the first day of a period."""
    store = get_store(ctx)
    day = parse_date(date_str, store)

    if not store.log_period_start(day):
        console.print(f"[yellow]Period start already logged for {day}[/yellow]")
        return

    console.print(f"[green]Logged period start:[/green] {day}")
    console.print(f"[blue]Average cycle:[/blue] {store.state.avg_cycle_length} days")


@period_app.command("end")
def period_end(
    ctx: typer.Context,
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
) -> None:
    """Log the last day of the current period."""
    store = get_store(ctx)
    day = parse_date(date_str, store)

    if not store.log_period_end(day):
        console.print(f"[red]Period end on {day} not recorded (no open period before it)[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Logged period end:[/green] {day}")


@period_app.command("list")
def period_list(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List logged periods and learned averages."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    periods = store.event_log.periods()

    if json_output:
        output_json({
            "success": True,
            "command": "period list",
            "data": {
                "periods": [
                    {
                        "start": p.start.isoformat(),
                        "end": p.end.isoformat() if p.end else None,
                        "days": p.duration_days,
                    }
                    for p in periods
                ],
                "avg_cycle_length": store.state.avg_cycle_length,
                "avg_period_duration": store.state.avg_period_duration,
            },
            "human_summary": f"{len(periods)} periods, average cycle {store.state.avg_cycle_length} days",
        })
        return

    if not periods:
        console.print("No periods logged")
        return

    table = Table(title="Period History")
    table.add_column("Start", style="cyan")
    table.add_column("End")
    table.add_column("Days", justify="right")
    table.add_column("Cycle", justify="right", style="blue")

    for i, period in enumerate(periods):
        cycle = ""
        if i + 1 < len(periods):
            cycle = str((periods[i + 1].start - period.start).days)
        table.add_row(
            period.start.isoformat(),
            period.end.isoformat() if period.end else "[dim]open[/dim]",
            str(period.duration_days) if period.duration_days is not None else "",
            cycle,
        )

    console.print(table)
    console.print(
        f"Average cycle: {store.state.avg_cycle_length} days, "
        f"average period: {store.state.avg_period_duration} days"
    )


@period_app.command("predict")
def period_predict(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Predict the next period start."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    predicted = store.predict_next_period()

    if predicted is None:
        if json_output:
            output_json({
                "success": False,
                "command": "period predict",
                "errors": ["No period start logged"],
                "suggestions": ["Log one with: wellness period start --date YYYY-MM-DD"],
            })
        else:
            console.print("[red]No period start logged[/red]")
            console.print("Log one with: wellness period start --date YYYY-MM-DD")
        raise typer.Exit(1)

    days_until = (predicted - store.today).days
    if json_output:
        output_json({
            "success": True,
            "command": "period predict",
            "data": {
                "next_period": predicted.isoformat(),
                "days_until": days_until,
                "avg_cycle_length": store.state.avg_cycle_length,
            },
            "human_summary": f"Next period expected {predicted.isoformat()}",
        })
    else:
        console.print(f"[bold]Next period:[/bold] {predicted.isoformat()} ({days_until:+d} days)")


@phase_app.command("show")
def phase_show(
    ctx: typer.Context,
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the menstrual phase for a date."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    day = parse_date(date_str, store)
    phase = store.get_phase_for_date(day)
    cycle_day = store.get_cycle_day(day)

    if json_output:
        output_json({
            "success": True,
            "command": "phase show",
            "data": {
                "date": day.isoformat(),
                "phase": phase.value,
                "cycle_day": cycle_day,
                "avg_cycle_length": store.state.avg_cycle_length,
            },
            "human_summary": f"{day.isoformat()}: {phase.value}",
        })
        return

    console.print(f"[bold]{day.isoformat()}:[/bold] {styled_phase(phase)}")
    if cycle_day is not None:
        console.print(f"  Cycle day {cycle_day} of {store.state.avg_cycle_length}")
    else:
        console.print("  [dim]No period history before this date[/dim]")


@phase_app.command("calendar")
def phase_calendar_cmd(
    ctx: typer.Context,
    start_str: Optional[str] = typer.Option(
        None, "--start", "-s", help="First date (YYYY-MM-DD, default: today)"
    ),
    days: int = typer.Option(28, "--days", "-n", help="Number of days"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show phases for a range of dates."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    start = parse_date(start_str, store)
    calendar = store.get_phase_calendar(start, max(days, 0))

    if json_output:
        output_json({
            "success": True,
            "command": "phase calendar",
            "data": {
                "days": [{"date": d.isoformat(), "phase": p.value} for d, p in calendar],
            },
            "human_summary": f"{len(calendar)} days from {start.isoformat()}",
        })
        return

    table = Table(title=f"Phase Calendar ({len(calendar)} days)")
    table.add_column("Date", style="cyan")
    table.add_column("Day", justify="right")
    table.add_column("Phase")

    for day, phase in calendar:
        cycle_day = store.get_cycle_day(day)
        table.add_row(day.isoformat(), str(cycle_day or ""), styled_phase(phase))

    console.print(table)


# ============================================================================
# Weight Commands
# ============================================================================


@weight_app.command("add")
def weight_add(
    ctx: typer.Context,
    weight: str = typer.Argument(..., help="Weight in kg"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log a weight reading."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    day = parse_date(date_str, store)
    limits = store.settings.validation

    if not store.set_weight(day, weight):
        message = (
            f"Weight must be a number between {limits.min_weight_kg:g} "
            f"and {limits.max_weight_kg:g} kg"
        )
        if json_output:
            output_json({"success": False, "command": "weight add", "errors": [message]})
        else:
            console.print(f"[red]{message}[/red]")
        raise typer.Exit(1)

    logged = store.state.logs.weight[day]
    if json_output:
        output_json({
            "success": True,
            "command": "weight add",
            "data": {"date": day.isoformat(), "weight_kg": logged},
            "human_summary": f"Logged {logged:.1f} kg on {day.isoformat()}",
        })
    else:
        console.print(f"[green]Logged:[/green] {logged:.1f} kg on {day}")


@weight_app.command("list")
def weight_list(
    ctx: typer.Context,
    days: int = typer.Option(30, "--days", "-n", help="Number of days to show"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List weight history."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    window = set(store.history(days))
    entries = sorted((d, w) for d, w in store.state.logs.weight.items() if d in window)

    if json_output:
        output_json({
            "success": True,
            "command": "weight list",
            "data": {"entries": [{"date": d.isoformat(), "weight_kg": w} for d, w in entries]},
            "human_summary": f"{len(entries)} entries over {days} days",
        })
        return

    if not entries:
        console.print("No weight entries found")
        return

    table = Table(title=f"Weight History (last {days} days)")
    table.add_column("Date", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("", justify="right")

    previous = None
    for day, weight in entries:
        delta = f"{weight - previous:+.1f}" if previous is not None else ""
        previous = weight
        table.add_row(day.isoformat(), f"{weight:.1f}", delta)

    console.print(table)


# ============================================================================
# Food Commands
# ============================================================================


@food_app.command("add")
def food_add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Food name"),
    calories: Optional[float] = typer.Option(
        None, "--calories", "-c", help="Calories (omit to reuse the library entry)"
    ),
    protein: float = typer.Option(0.0, "--protein", "-p", help="Protein (g)"),
    carbs: float = typer.Option(0.0, "--carbs", help="Carbs (g)"),
    fat: float = typer.Option(0.0, "--fat", "-f", help="Fat (g)"),
    fiber: float = typer.Option(0.0, "--fiber", help="Fiber (g)"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log a food entry."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    day = parse_date(date_str, store)

    if calories is None:
        preset = next(
            (p for p in store.state.library if p.name.lower() == name.strip().lower()), None
        )
        if preset is None:
            console.print(f"[red]'{name}' is not in the food library; pass --calories[/red]")
            raise typer.Exit(1)
        entry = store.log_food(
            day, preset.name, preset.calories, preset.protein, preset.carbs, preset.fat, preset.fiber
        )
    else:
        entry = store.log_food(day, name, calories, protein, carbs, fat, fiber)

    if entry is None:
        console.print("[red]Food needs a name and non-negative nutrient values[/red]")
        raise typer.Exit(1)

    totals = store.get_daily_stats(day)
    if json_output:
        output_json({
            "success": True,
            "command": "food add",
            "data": {
                "id": entry.id,
                "date": day.isoformat(),
                "name": entry.name,
                "calories": entry.calories,
                "totals": totals.to_dict(),
            },
            "human_summary": f"Logged {entry.name} ({entry.calories} kcal)",
        })
    else:
        console.print(f"[green]Logged:[/green] {entry.name} ({entry.calories} kcal) [dim]{entry.id}[/dim]")
        console.print(
            f"[blue]Today:[/blue] {totals.calories:.0f} / "
            f"{store.state.profile.goals.daily_calories} kcal"
        )


@food_app.command("remove")
def food_remove(
    ctx: typer.Context,
    entry_id: str = typer.Argument(..., help="Entry ID (see 'food list')"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
) -> None:
    """Remove a food entry."""
    store = get_store(ctx)
    day = parse_date(date_str, store)

    if not store.remove_food(day, entry_id):
        console.print(f"[red]No food entry {entry_id} on {day}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Removed entry {entry_id}[/green]")


@food_app.command("list")
def food_list(
    ctx: typer.Context,
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List food entries for a day."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    day = parse_date(date_str, store)
    entries = store.state.logs.nutrition.get(day, [])
    totals = store.get_daily_stats(day)

    if json_output:
        output_json({
            "success": True,
            "command": "food list",
            "data": {
                "date": day.isoformat(),
                "entries": [
                    {
                        "id": e.id,
                        "name": e.name,
                        "calories": e.calories,
                        "protein": e.protein,
                        "carbs": e.carbs,
                        "fat": e.fat,
                        "fiber": e.fiber,
                    }
                    for e in entries
                ],
                "totals": totals.to_dict(),
            },
            "human_summary": f"{len(entries)} entries, {totals.calories:.0f} kcal",
        })
        return

    if not entries:
        console.print(f"No food logged on {day}")
        return

    table = Table(title=f"Food Log {day.isoformat()}")
    table.add_column("ID", style="dim")
    table.add_column("Food", style="cyan")
    table.add_column("kcal", justify="right")
    table.add_column("P", justify="right")
    table.add_column("C", justify="right")
    table.add_column("F", justify="right")
    table.add_column("Fiber", justify="right")

    for e in entries:
        table.add_row(
            e.id, e.name, str(e.calories),
            f"{e.protein:.0f}", f"{e.carbs:.0f}", f"{e.fat:.0f}", f"{e.fiber:.0f}",
        )
    table.add_row(
        "", "[bold]Total[/bold]", f"[bold]{totals.calories:.0f}[/bold]",
        f"{totals.protein:.0f}", f"{totals.carbs:.0f}", f"{totals.fat:.0f}", f"{totals.fiber:.0f}",
    )

    console.print(table)
    console.print(f"Net carbs: {totals.net_carbs:.0f} g")


@food_app.command("library")
def food_library(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List saved foods available for quick logging."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    library = store.state.library

    if json_output:
        output_json({
            "success": True,
            "command": "food library",
            "data": {
                "foods": [
                    {"name": p.name, "calories": p.calories, "protein": p.protein,
                     "carbs": p.carbs, "fat": p.fat, "fiber": p.fiber}
                    for p in library
                ]
            },
            "human_summary": f"{len(library)} saved foods",
        })
        return

    if not library:
        console.print("Food library is empty")
        return

    table = Table(title="Food Library")
    table.add_column("Food", style="cyan")
    table.add_column("kcal", justify="right")
    table.add_column("P/C/F", justify="right")
    for p in library:
        table.add_row(p.name, str(p.calories), f"{p.protein:.0f}/{p.carbs:.0f}/{p.fat:.0f}")
    console.print(table)


# ============================================================================
# Workout / Water / Steps / Symptom Commands
# ============================================================================


@workout_app.command("add")
def workout_add(
    ctx: typer.Context,
    workout_type: str = typer.Argument(..., help="Workout type (e.g. run, yoga)"),
    minutes: float = typer.Option(..., "--minutes", "-m", help="Duration in minutes"),
    calories: float = typer.Option(0.0, "--calories", "-c", help="Calories burned"),
    intensity: str = typer.Option("moderate", "--intensity", help="low/moderate/high"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
) -> None:
    """Log a workout."""
    store = get_store(ctx)
    day = parse_date(date_str, store)

    entry = store.log_workout(day, workout_type, minutes, intensity, calories)
    if entry is None:
        console.print("[red]Workout duration and calories must be non-negative[/red]")
        raise typer.Exit(1)
    console.print(
        f"[green]Logged:[/green] {entry.type} {entry.duration_minutes:.0f} min, "
        f"{entry.calories_burned:.0f} kcal"
    )


@workout_app.command("list")
def workout_list(
    ctx: typer.Context,
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
) -> None:
    """List workouts for a day."""
    store = get_store(ctx)
    day = parse_date(date_str, store)
    workouts = store.state.logs.workouts.get(day, [])

    if not workouts:
        console.print(f"No workouts logged on {day}")
        return

    table = Table(title=f"Workouts {day.isoformat()}")
    table.add_column("Type", style="cyan")
    table.add_column("Minutes", justify="right")
    table.add_column("Intensity")
    table.add_column("kcal", justify="right")
    for w in workouts:
        table.add_row(w.type, f"{w.duration_minutes:.0f}", w.intensity, f"{w.calories_burned:.0f}")
    console.print(table)


@water_app.command("add")
def water_add(
    ctx: typer.Context,
    amount: int = typer.Argument(..., help="Water in ml"),
) -> None:
    """Add water to today's total."""
    store = get_store(ctx)
    if not store.add_water(amount):
        console.print("[red]Water amount must be positive[/red]")
        raise typer.Exit(1)

    total = store.state.logs.water[store.today]
    goal = store.state.profile.goals.water
    console.print(f"[green]Water today:[/green] {total} / {goal} ml")


@steps_app.command("set")
def steps_set(
    ctx: typer.Context,
    count: int = typer.Argument(..., help="Step count"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
) -> None:
    """Record the step count for a day."""
    store = get_store(ctx)
    day = parse_date(date_str, store)
    if not store.set_steps(day, count):
        console.print("[red]Step count must not be negative[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Steps on {day}:[/green] {count}")


@symptom_app.command("add")
def symptom_add(
    ctx: typer.Context,
    symptom: str = typer.Argument(..., help="Symptom (e.g. cramps, headache)"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
) -> None:
    """Log a symptom."""
    store = get_store(ctx)
    day = parse_date(date_str, store)
    if not store.log_symptom(day, symptom):
        console.print(f"[yellow]'{symptom}' already logged on {day}[/yellow]")
        return
    console.print(f"[green]Logged symptom:[/green] {symptom.strip()} on {day}")


@symptom_app.command("list")
def symptom_list(
    ctx: typer.Context,
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
) -> None:
    """List symptoms for a day."""
    store = get_store(ctx)
    day = parse_date(date_str, store)
    symptoms = store.state.logs.symptoms.get(day, [])
    if not symptoms:
        console.print(f"No symptoms logged on {day}")
        return
    console.print(f"[bold]{day.isoformat()}[/bold] ({styled_phase(store.get_phase_for_date(day))})")
    for s in symptoms:
        console.print(f"  - {s}")


# ============================================================================
# Daily Summary / TDEE Commands
# ============================================================================


@app.command()
def stats(
    ctx: typer.Context,
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Daily summary: intake, burn, phase and targets."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    day = parse_date(date_str, store)
    totals = store.get_daily_stats(day)
    estimate = store.get_metabolic_estimate(day)
    target = store.get_deficit_target(day)
    logs = store.state.logs
    goals = store.state.profile.goals

    if json_output:
        output_json({
            "success": True,
            "command": "stats",
            "data": {
                **totals.to_dict(),
                "net_calories": totals.net_calories,
                "water_ml": logs.water.get(day, 0),
                "steps": logs.steps.get(day, 0),
                "weight_kg": store.weight_on(day),
                "phase": estimate.phase.value,
                "cycle_day": store.get_cycle_day(day),
                "bmr": estimate.bmr,
                "tdee": estimate.tdee,
                "target_calories": target,
            },
            "human_summary": (
                f"{day.isoformat()}: {totals.calories:.0f} kcal in, "
                f"{totals.calories_burned:.0f} burned, TDEE {estimate.tdee}"
            ),
        })
        return

    lines = [
        f"Phase: {styled_phase(estimate.phase)}",
        f"Calories: {totals.calories:.0f} / {goals.daily_calories} kcal "
        f"(burned {totals.calories_burned:.0f}, net {totals.net_calories:.0f})",
        f"Protein {totals.protein:.0f}/{goals.protein:.0f} g, "
        f"carbs {totals.carbs:.0f}/{goals.carbs:.0f} g (net {totals.net_carbs:.0f}), "
        f"fat {totals.fat:.0f}/{goals.fat:.0f} g, fiber {totals.fiber:.0f}/{goals.fiber:.0f} g",
        f"Water: {logs.water.get(day, 0)} / {goals.water} ml",
        f"Steps: {logs.steps.get(day, 0)}",
        f"Weight: {store.weight_on(day):.1f} kg",
        f"BMR {estimate.bmr}, TDEE {estimate.tdee}, target {target} kcal",
    ]
    console.print(Panel("\n".join(lines), title=f"Daily Summary {day.isoformat()}"))


@tdee_app.command("estimate")
def tdee_estimate(
    ctx: typer.Context,
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Estimate BMR and TDEE for a date."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    day = parse_date(date_str, store)
    result = store.get_metabolic_estimate(day)

    if json_output:
        output_json({
            "success": True,
            "command": "tdee estimate",
            "data": {
                "date": day.isoformat(),
                "bmr": result.bmr,
                "tdee": result.tdee,
                "method": result.method.value,
                "phase": result.phase.value,
                "activity_multiplier": result.multiplier,
                "phase_surcharge": result.phase_surcharge,
                "weight_kg": result.weight_kg,
                "lean_body_mass_kg": round(result.lbm_kg, 2) if result.lbm_kg is not None else None,
            },
            "human_summary": f"BMR {result.bmr}, TDEE {result.tdee} ({result.phase.value})",
        })
        return

    console.print(f"[bold]Metabolic estimate for {day.isoformat()}[/bold]")
    console.print(f"  Method: {result.method.value}")
    console.print(f"  Weight: {result.weight_kg:.1f} kg")
    if result.lbm_kg is not None:
        console.print(f"  Lean mass: {result.lbm_kg:.1f} kg")
    console.print(f"  BMR: {result.bmr} kcal")
    console.print(f"  Activity: x{result.multiplier}")
    console.print(f"  Phase: {styled_phase(result.phase)}")
    if result.phase_surcharge:
        console.print(f"  Luteal surcharge: +{result.phase_surcharge} kcal")
    console.print(f"  [bold]TDEE: {result.tdee} kcal[/bold]")


@tdee_app.command("target")
def tdee_target(
    ctx: typer.Context,
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    days: int = typer.Option(1, "--days", "-n", help="Show targets for this many days"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Phase-aware calorie target for weight loss."""
    store = get_store(ctx)
    json_output = json_output or prefers_json(store)
    start = parse_date(date_str, store)
    rows = []
    for offset in range(max(days, 1)):
        day = start + timedelta(days=offset)
        result = store.get_metabolic_estimate(day)
        rows.append((day, result, store.get_deficit_target(day)))

    if json_output:
        output_json({
            "success": True,
            "command": "tdee target",
            "data": {
                "targets": [
                    {"date": d.isoformat(), "phase": r.phase.value, "tdee": r.tdee, "target_calories": t}
                    for d, r, t in rows
                ]
            },
            "human_summary": f"Target {rows[0][2]} kcal on {rows[0][0].isoformat()}",
        })
        return

    if len(rows) == 1:
        day, result, target = rows[0]
        console.print(
            f"[bold]{day.isoformat()}[/bold] {styled_phase(result.phase)}: "
            f"maintenance {result.tdee} kcal, target [green]{target} kcal[/green]"
        )
        return

    table = Table(title="Calorie Targets")
    table.add_column("Date", style="cyan")
    table.add_column("Phase")
    table.add_column("TDEE", justify="right")
    table.add_column("Target", justify="right", style="green")
    for day, result, target in rows:
        table.add_row(day.isoformat(), styled_phase(result.phase), str(result.tdee), str(target))
    console.print(table)


@theme_app.command("toggle")
def theme_toggle(ctx: typer.Context) -> None:
    """Switch between light and dark themes."""
    store = get_store(ctx)
    theme = store.toggle_theme()
    console.print(f"Theme: [bold]{theme}[/bold]")


if __name__ == "__main__":
    app()
