"""Main CLI interface for the cricket stats tracker."""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from ..analytics import rollup
from ..analytics.engine import CATEGORIES, AnalyticsEngine
from ..analytics.service import AnalyticsService
from ..config import settings
from ..database import create_tables, drop_tables, get_session
from ..exceptions import CricketStatsError
from ..ingest import import_file
from .. import repository
from ..models import MatchFormat, MatchLevel, PlayerRole, VenueType
from ..schemas import AnalyticsFilters, PartitionStats, PlayerCreate, PlayerResponse, RecordPair

# Rich consoles: results on stdout, logs on stderr
console = Console()
log_console = Console(stderr=True)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Route loguru output through rich, plus an optional rotating file."""
    logger.remove()
    logger.add(
        RichHandler(console=log_console, show_time=True, show_path=False),
        level=level.upper(),
        format="{message}",
    )
    if log_file:
        logger.add(
            log_file,
            level=level.upper(),
            rotation="10 MB",
            format="{time:YYYY-MM-DD HH:mm:ss} - {name} - {level} - {message}",
        )


app = typer.Typer(
    name="cricket-stats",
    help="Cricket Stats - personal career statistics and analytics",
    no_args_is_help=True
)

FAILURES = (CricketStatsError, ValidationError, ValueError)


class BreakdownKind(str, Enum):
    FORMAT = "format"
    YEAR = "year"
    OPPONENT = "opponent"
    VENUE = "venue"
    SERIES = "series"
    HOME_AWAY = "home-away"
    POSITION = "position"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file path"),
):
    """Cricket Stats - personal career statistics and analytics."""
    log_level = "DEBUG" if verbose else settings.logging.level
    setup_logging(log_level, log_file or settings.logging.file)


def _fail(action: str, e: Exception):
    console.print(f"[red]❌ {action} failed: {e}[/red]")
    raise typer.Exit(1)


def _fmt(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def _load_pairs(player_id: Optional[int]) -> Tuple[int, List[RecordPair]]:
    with get_session() as session:
        player = (
            repository.get_player(session, player_id)
            if player_id is not None
            else repository.get_active_player(session)
        )
        return player.id, repository.load_pairs(session, player.id)


def _filters(
    format: Optional[MatchFormat],
    level: Optional[MatchLevel],
    opponent: Optional[str],
    venue: Optional[str],
    series_id: Optional[int],
    home_away: Optional[VenueType],
    date_from: Optional[datetime],
    date_to: Optional[datetime],
) -> AnalyticsFilters:
    return AnalyticsFilters(
        format=format,
        level=level,
        opponent=opponent,
        venue=venue,
        series_id=series_id,
        home_away=home_away,
        start_date=date_from.date() if date_from else None,
        end_date=date_to.date() if date_to else None,
    )


def _stats_table(title: str, key_header: str, rows: Iterable[Tuple[str, PartitionStats]]) -> Table:
    table = Table(title=title)
    table.add_column(key_header, style="cyan")
    for header in ("M", "Inns", "Runs", "Avg", "SR", "HS", "100s", "50s", "Wkts", "BAvg", "Econ", "Best"):
        table.add_column(header, justify="right")
    for label, stats in rows:
        table.add_row(
            label,
            str(stats.matches),
            str(stats.innings),
            str(stats.runs),
            _fmt(stats.batting_average),
            _fmt(stats.strike_rate),
            str(stats.highest_score) if stats.highest_score else "-",
            str(stats.centuries),
            str(stats.fifties),
            str(stats.wickets),
            _fmt(stats.bowling_average),
            _fmt(stats.economy),
            str(stats.best_bowling) if stats.best_bowling else "-",
        )
    return table


# Shared options
PlayerOption = typer.Option(None, "--player-id", help="Player ID (defaults to the active player)")


@app.command()
def setup_db(force: bool = typer.Option(False, "--force", help="Force recreation of tables")):
    """Initialize database schema."""
    console.print("[bold]Setting up database schema...[/bold]")

    try:
        if force:
            console.print("Dropping existing tables...")
            drop_tables()

        console.print("Creating database tables...")
        create_tables()

        console.print("[green]✅ Database schema initialized successfully![/green]")

    except SQLAlchemyError as e:
        _fail("Database setup", e)


@app.command("add-player")
def add_player(
    name: str = typer.Option(..., "--name", help="Player name"),
    role: Optional[PlayerRole] = typer.Option(None, "--role", help="Playing role"),
    batting_style: Optional[str] = typer.Option(None, "--batting-style", help="Batting style"),
    bowling_style: Optional[str] = typer.Option(None, "--bowling-style", help="Bowling style"),
    date_of_birth: Optional[datetime] = typer.Option(None, "--dob", formats=["%Y-%m-%d"], help="Date of birth"),
    inactive: bool = typer.Option(False, "--inactive", help="Do not make this the active player"),
):
    """Create a player (the active one unless --inactive)."""
    try:
        data = PlayerCreate(
            name=name,
            role=role,
            batting_style=batting_style,
            bowling_style=bowling_style,
            date_of_birth=date_of_birth.date() if date_of_birth else None,
            is_active=not inactive,
        )
        with get_session() as session:
            player = repository.create_player(session, data)
            player_id = player.id
        console.print(f"[green]✅ Player '{name}' created with id {player_id}[/green]")
    except FAILURES as e:
        _fail("Add player", e)


@app.command()
def players():
    """List tracked players."""
    with get_session() as session:
        rows = [PlayerResponse.model_validate(p) for p in repository.list_players(session)]

    if not rows:
        console.print("[yellow]No players yet; use add-player[/yellow]")
        return
    table = Table(title="Players")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Role")
    table.add_column("Age", justify="right")
    table.add_column("Active")
    for p in rows:
        table.add_row(
            str(p.id), p.name, p.role.value if p.role else "-", _fmt(p.age), "✅" if p.is_active else "",
        )
    console.print(table)


@app.command("set-active")
def set_active(player_id: int = typer.Argument(..., help="Player ID")):
    """Make a player the active one."""
    try:
        with get_session() as session:
            player = repository.set_active_player(session, player_id)
            name = player.name
        console.print(f"[green]✅ Active player is now {name}[/green]")
    except FAILURES as e:
        _fail("Set active player", e)


@app.command("import")
def import_cmd(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file to import"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate only, no database changes"),
):
    """Import matches and performances from a JSON file."""
    if dry_run:
        console.print("[yellow]🔍 Running in dry-run mode - no data will be saved[/yellow]")
    try:
        stats = import_file(file, dry_run=dry_run)
    except FAILURES as e:
        _fail("Import", e)

    table = Table(title="Import Summary")
    table.add_column("Inserted", style="green")
    table.add_column("Skipped", style="yellow")
    table.add_column("Errors", style="red")
    table.add_row(str(stats["inserted"]), str(stats["skipped"]), str(stats["errors"]))
    console.print(table)
    if stats["errors"]:
        raise typer.Exit(1)


@app.command("delete-match")
def delete_match(match_id: int = typer.Argument(..., help="Match ID")):
    """Delete a match together with its performance."""
    try:
        with get_session() as session:
            deleted = repository.delete_match(session, match_id)
    except FAILURES as e:
        _fail("Delete match", e)
    if not deleted:
        _fail("Delete match", f"no match with id {match_id}")
    console.print(f"[green]✅ Match {match_id} deleted[/green]")


@app.command()
def recalculate(
    category: Optional[List[str]] = typer.Option(
        None, "--category", "-c", help=f"Category to recompute ({', '.join(CATEGORIES)}); repeatable"
    ),
    player_id: Optional[int] = PlayerOption,
):
    """Recompute analytics and store snapshots."""
    try:
        if player_id is None:
            with get_session() as session:
                player_id = repository.get_active_player(session).id
        payloads = AnalyticsService(settings).recalculate(player_id, category)
    except FAILURES as e:
        _fail("Recalculation", e)
    console.print(f"[green]✅ Recalculated {', '.join(payloads)} for player {player_id}[/green]")


@app.command()
def snapshot(
    category: str = typer.Argument(..., help=f"One of {', '.join(CATEGORIES)}"),
    player_id: Optional[int] = PlayerOption,
):
    """Print the stored snapshot of one category as JSON."""
    try:
        if player_id is None:
            with get_session() as session:
                player_id = repository.get_active_player(session).id
        payload = AnalyticsService(settings).get_snapshot(player_id, category)
    except FAILURES as e:
        _fail("Snapshot lookup", e)
    console.print_json(data=payload)


@app.command()
def summary(player_id: Optional[int] = PlayerOption):
    """Show the career summary."""
    try:
        pid, pairs = _load_pairs(player_id)
        career = AnalyticsEngine(pid, settings).career(pairs)
    except FAILURES as e:
        _fail("Summary", e)

    s = career.summary
    console.print(_stats_table("Career Summary", "Career", [("All", s)]))
    span = s.career_span
    if span.start_year is not None:
        console.print(f"Career span: {span.start_year}-{span.end_year} ({span.years} seasons)")
    console.print(
        f"Won {s.matches_won}, lost {s.matches_lost}, drawn {s.matches_drawn}, "
        f"tied {s.matches_tied}, no result {s.no_results} (win {s.win_percentage:.1f}%)"
    )
    console.print(f"Catches {s.catches}, run outs {s.run_outs}, stumpings {s.stumpings}")


@app.command()
def breakdown(
    kind: BreakdownKind = typer.Argument(..., help="Partition key"),
    player_id: Optional[int] = PlayerOption,
    format: Optional[MatchFormat] = typer.Option(None, "--format", help="Only this format"),
    level: Optional[MatchLevel] = typer.Option(None, "--level", help="Only this level"),
    opponent: Optional[str] = typer.Option(None, "--opponent", help="Opponent contains"),
    venue: Optional[str] = typer.Option(None, "--venue", help="Venue contains"),
    series_id: Optional[int] = typer.Option(None, "--series-id", help="Only this series"),
    home_away: Optional[VenueType] = typer.Option(None, "--home-away", help="Only home/away/neutral"),
    date_from: Optional[datetime] = typer.Option(None, "--from", formats=["%Y-%m-%d"], help="From date"),
    date_to: Optional[datetime] = typer.Option(None, "--to", formats=["%Y-%m-%d"], help="To date"),
):
    """Show stats partitioned by format, year, opponent, venue, series, home/away or position."""
    filters = _filters(format, level, opponent, venue, series_id, home_away, date_from, date_to)
    try:
        _, pairs = _load_pairs(player_id)
        mode = settings.analytics.overs_arithmetic
        if kind == BreakdownKind.FORMAT:
            rows = [(s.format.value, s) for s in rollup.format_breakdown(pairs, filters, mode)]
        elif kind == BreakdownKind.YEAR:
            rows = [(str(s.year), s) for s in rollup.yearly_breakdown(pairs, filters, mode)]
        elif kind == BreakdownKind.OPPONENT:
            rows = [(s.opponent, s) for s in rollup.opponent_breakdown(pairs, filters, mode)]
        elif kind == BreakdownKind.VENUE:
            rows = [
                (", ".join(p for p in (s.venue, s.city, s.country) if p), s)
                for s in rollup.venue_breakdown(pairs, filters, mode)
            ]
        elif kind == BreakdownKind.SERIES:
            rows = [(s.series_name, s) for s in rollup.series_breakdown(pairs, filters, mode)]
        elif kind == BreakdownKind.HOME_AWAY:
            split = rollup.home_away_breakdown(pairs, filters, mode)
            rows = [
                (name, getattr(split, name))
                for name in ("home", "away", "neutral", "unspecified")
                if name != "unspecified" or split.unspecified.matches
            ]
        else:
            rows = [(str(s.position), s) for s in rollup.position_breakdown(pairs, filters)]
    except FAILURES as e:
        _fail("Breakdown", e)

    if not rows:
        console.print("[yellow]No matches recorded for this selection[/yellow]")
        return
    console.print(_stats_table(f"Breakdown by {kind.value}", kind.value.title(), rows))


@app.command()
def dismissals(player_id: Optional[int] = PlayerOption):
    """Show how batting innings ended."""
    try:
        _, pairs = _load_pairs(player_id)
        histogram = rollup.dismissal_histogram(pairs)
    except FAILURES as e:
        _fail("Dismissals", e)

    table = Table(title="Dismissal Types")
    table.add_column("Type", style="cyan")
    table.add_column("Innings", justify="right")
    table.add_column("%", justify="right")
    total = histogram.total
    for name, count in histogram.model_dump().items():
        share = count / total * 100 if total else 0.0
        table.add_row(name.replace("_", " "), str(count), f"{share:.1f}")
    console.print(table)


@app.command()
def conversion(player_id: Optional[int] = PlayerOption):
    """Show conversion rates between batting milestones."""
    try:
        _, pairs = _load_pairs(player_id)
        rates = rollup.conversion_rates(pairs, start_runs=settings.analytics.conversion_start_runs)
    except FAILURES as e:
        _fail("Conversion", e)

    table = Table(title="Conversion Rates")
    table.add_column("Step", style="cyan")
    table.add_column("Reached", justify="right")
    table.add_column("Converted", justify="right")
    table.add_column("Rate %", justify="right")
    table.add_row(f"{rates.start_threshold} -> 30", str(rates.starts), str(rates.thirties), _fmt(rates.start_to_thirty))
    table.add_row("30 -> 50", str(rates.thirties), str(rates.fifties), _fmt(rates.thirty_to_fifty))
    table.add_row("50 -> 100", str(rates.fifties), str(rates.hundreds), _fmt(rates.fifty_to_hundred))
    console.print(table)


@app.command()
def trend(
    player_id: Optional[int] = PlayerOption,
    last: Optional[int] = typer.Option(None, "--last", help="Only the last N matches"),
):
    """Show running career figures match by match."""
    try:
        _, pairs = _load_pairs(player_id)
        points = rollup.trend(pairs, overs_arithmetic=settings.analytics.overs_arithmetic)
    except FAILURES as e:
        _fail("Trend", e)

    if last:
        points = points[-last:]
    table = Table(title="Career Trend")
    for header in ("Date", "Format", "Opponent", "Runs", "Wkts", "Total Runs", "Total Wkts", "Avg", "SR", "Econ"):
        table.add_column(header, justify="right" if header not in ("Date", "Format", "Opponent") else "left")
    for p in points:
        table.add_row(
            p.date.isoformat(),
            p.format.value,
            p.opponent,
            str(p.runs),
            str(p.wickets),
            str(p.cumulative_runs),
            str(p.cumulative_wickets),
            _fmt(p.running_average),
            _fmt(p.running_strike_rate),
            _fmt(p.running_economy),
        )
    console.print(table)


@app.command()
def export(
    file: Path = typer.Argument(..., dir_okay=False, help="Output JSON file"),
    player_id: Optional[int] = PlayerOption,
):
    """Write the full analytics report as JSON."""
    try:
        pid, pairs = _load_pairs(player_id)
        report = AnalyticsEngine(pid, settings).report(pairs)
        file.write_text(report.model_dump_json(indent=2), encoding="utf-8")
    except (*FAILURES, OSError) as e:
        _fail("Export", e)
    console.print(f"[green]✅ Report for player {pid} written to {file}[/green]")


if __name__ == "__main__":
    app()
