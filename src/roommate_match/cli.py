"""CLI interface for roommate-match."""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from roommate_match import __version__
from roommate_match.config import load_scoring_config
from roommate_match.database.engine import get_session, init_db
from roommate_match.export.csv_exporter import export_to_csv
from roommate_match.export.json_exporter import export_to_json, match_to_dict
from roommate_match.matching.scorer import active_criteria, explain_match
from roommate_match.matching.survey_builder import build_survey_answers
from roommate_match.models.pydantic_models import MatchBreakdown, ScoringConfig
from roommate_match.services.match_service import MatchService, SurveyNotFoundError

app = typer.Typer(
    name="roommate-match",
    help="Roommate compatibility scoring from survey answers",
    add_completion=False,
)
console = Console()


class ExportFormat(str, Enum):
    """Supported ranking export formats."""

    CSV = "csv"
    JSON = "json"


def output_json(data: Any) -> None:
    """Output JSON to stdout (for programmatic consumption)."""
    print(json.dumps(data, indent=2, ensure_ascii=False))


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"roommate-match version {__version__}")
        raise typer.Exit()


def load_record(path: Path) -> tuple[dict[str, Any], dict[str, Any]]:
    """Load a survey record from a JSON file.

    The file holds either ``{"profile": {...}, "survey": {...}}`` or a flat
    survey row.

    Returns:
        Tuple of (profile, survey).

    Raises:
        ValueError: If the file or its profile/survey entries are not JSON objects.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}")
    if "survey" not in data and "profile" not in data:
        return {}, data

    profile = data.get("profile") or {}
    survey = data.get("survey") or {}
    for key, value in (("profile", profile), ("survey", survey)):
        if not isinstance(value, dict):
            raise ValueError(f"Expected '{key}' to be a JSON object in {path}")
    return profile, survey


def load_config_or_exit(config_path: Path | None) -> ScoringConfig:
    """Load the scoring config, exiting with an error message on failure."""
    if config_path is None:
        return ScoringConfig()
    try:
        return load_scoring_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Invalid config: {e}[/red]")
        raise typer.Exit(1) from e


def breakdown_to_dict(breakdown: MatchBreakdown) -> dict[str, Any]:
    """Convert a MatchBreakdown to a JSON-serializable dict."""
    return {
        "score": breakdown.score,
        "total_score": round(breakdown.total_score, 4),
        "total_possible": breakdown.total_possible,
        "criteria": [
            {
                "name": c.name,
                "weight": c.weight,
                "pieces": c.pieces,
                "score": c.score,
                "counted": c.counted,
            }
            for c in breakdown.criteria
        ],
    }


def print_breakdown(breakdown: MatchBreakdown) -> None:
    """Render a per-criterion breakdown table."""
    table = Table(title=f"Compatibility {breakdown.score}%")
    table.add_column("Criterion", style="cyan")
    table.add_column("Weight", style="magenta", justify="right")
    table.add_column("Pieces", style="white")
    table.add_column("Score", style="yellow", justify="right")

    for criterion in breakdown.criteria:
        if criterion.counted:
            pieces = ", ".join(f"{p:.2f}" for p in criterion.pieces)
            score = f"{criterion.score:.2f}"
        else:
            pieces = "[dim]no data[/dim]"
            score = "[dim]-[/dim]"
        table.add_row(criterion.name, str(criterion.weight), pieces, score)

    console.print(table)


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Log dropped survey values and cache activity.",
    ),
) -> None:
    """Roommate compatibility scoring."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def init_database(
    db_path: Path | None = typer.Option(
        None,
        "--db",
        "-d",
        help="Path to SQLite database file.",
    ),
    echo: bool = typer.Option(
        False,
        "--echo",
        help="Show SQL statements.",
    ),
) -> None:
    """Initialize the database, creating all tables."""
    console.print("[bold blue]Initializing database...[/bold blue]")

    try:
        init_db(db_path, echo=echo)
        db_location = db_path or "data/roommate_match.db"
        console.print(f"[green]Database initialized at: {db_location}[/green]")
    except Exception as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1) from e


@app.command()
def score(
    mine: Path = typer.Argument(..., help="JSON file with my survey record."),
    theirs: Path = typer.Argument(..., help="JSON file with their survey record."),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to scoring config YAML file.",
    ),
    explain: bool = typer.Option(
        False,
        "--explain",
        "-e",
        help="Show the per-criterion breakdown.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
) -> None:
    """Score two survey records from JSON files."""
    scoring_config = load_config_or_exit(config)

    try:
        my_answers = build_survey_answers(*load_record(mine))
        their_answers = build_survey_answers(*load_record(theirs))
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not read survey record: {e}[/red]")
        raise typer.Exit(1) from e

    breakdown = explain_match(my_answers, their_answers, scoring_config)

    if json_output:
        output_json(breakdown_to_dict(breakdown) if explain else {"score": breakdown.score})
        return

    if explain:
        print_breakdown(breakdown)
    else:
        console.print(f"[bold]Compatibility:[/bold] [yellow]{breakdown.score}%[/yellow]")


@app.command()
def import_survey(
    user_id: str = typer.Argument(..., help="User identifier."),
    path: Path = typer.Argument(..., help="JSON file with the survey record."),
    name: str | None = typer.Option(
        None,
        "--name",
        "-n",
        help="Display name for rankings.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
) -> None:
    """Store a survey record for a user."""
    try:
        profile, survey = load_record(path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not read survey record: {e}[/red]")
        raise typer.Exit(1) from e

    init_db()

    with get_session() as session:
        service = MatchService(session)
        answers = service.submit_survey(user_id, survey, profile=profile, display_name=name)
        stored = service.get_survey(user_id)

    provided = answers.model_dump(exclude_none=True)

    if json_output:
        output_json({
            "user_id": user_id,
            "version": stored.version,
            "answers": answers.model_dump(mode="json", exclude_none=True),
        })
        return

    console.print(
        f"[green]Stored survey for {user_id}[/green] "
        f"(version {stored.version}, {len(provided)} answers recognized)"
    )


@app.command()
def match(
    user_id: str = typer.Argument(..., help="Viewing user."),
    other_user_id: str = typer.Argument(..., help="Other user."),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to scoring config YAML file.",
    ),
    explain: bool = typer.Option(
        False,
        "--explain",
        "-e",
        help="Show the per-criterion breakdown.",
    ),
    no_cache: bool = typer.Option(
        False,
        "--no-cache",
        help="Recompute even if a fresh cached score exists.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
) -> None:
    """Score two stored users."""
    scoring_config = load_config_or_exit(config)
    init_db()

    with get_session() as session:
        service = MatchService(session, scoring_config)
        try:
            if explain:
                breakdown = service.explain(user_id, other_user_id)
            else:
                result = service.score_users(user_id, other_user_id, use_cache=not no_cache)
        except SurveyNotFoundError as e:
            if json_output:
                output_json({"error": str(e)})
            else:
                console.print(f"[red]{e}[/red]")
            raise typer.Exit(1) from e

    if explain:
        if json_output:
            output_json(breakdown_to_dict(breakdown))
        else:
            print_breakdown(breakdown)
        return

    if json_output:
        output_json(match_to_dict(result))
        return

    source = "[dim](cached)[/dim]" if result.cached else ""
    console.print(
        Panel(
            f"[bold]{user_id}[/bold] x [bold]{other_user_id}[/bold]: [yellow]{result.score}%[/yellow] {source}",
            title="Compatibility",
        )
    )


@app.command()
def rank(
    user_id: str = typer.Argument(..., help="Viewing user."),
    limit: int = typer.Option(
        20,
        "--limit",
        "-l",
        help="Maximum candidates to show.",
    ),
    min_score: int = typer.Option(
        0,
        "--min-score",
        "-m",
        help="Minimum compatibility (0-100).",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to scoring config YAML file.",
    ),
    export_format: ExportFormat | None = typer.Option(
        None,
        "--format",
        "-f",
        help="Export format (csv, json).",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path (stdout if omitted).",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
) -> None:
    """Rank every other stored user by compatibility."""
    scoring_config = load_config_or_exit(config)
    init_db()

    with get_session() as session:
        service = MatchService(session, scoring_config)
        try:
            matches = service.rank_candidates(user_id, limit=limit, min_score=min_score)
        except SurveyNotFoundError as e:
            if json_output:
                output_json({"error": str(e)})
            else:
                console.print(f"[red]{e}[/red]")
            raise typer.Exit(1) from e

    if export_format is not None:
        if export_format is ExportFormat.CSV:
            content = export_to_csv(matches, output)
        else:
            content = export_to_json(matches, output, user_id=user_id)
        if output is None:
            print(content, end="" if content.endswith("\n") else "\n")
        else:
            console.print(f"[green]Exported {len(matches)} candidates to {output}[/green]")
        return

    if json_output:
        output_json({
            "user_id": user_id,
            "matches": [match_to_dict(m) for m in matches],
            "count": len(matches),
            "filters": {"limit": limit, "min_score": min_score},
        })
        return

    if not matches:
        console.print("[yellow]No candidates found.[/yellow]")
        return

    table = Table(title=f"Candidates for {user_id} ({len(matches)} shown)")
    table.add_column("#", style="dim", justify="right")
    table.add_column("User", style="cyan")
    table.add_column("Name", style="white", max_width=30)
    table.add_column("Score", style="yellow", justify="right")

    for idx, candidate in enumerate(matches, 1):
        table.add_row(
            str(idx),
            candidate.user_id,
            candidate.display_name or "-",
            f"{candidate.score}%",
        )

    console.print(table)


@app.command()
def weights(
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to scoring config YAML file.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
) -> None:
    """Show the criteria and weights in effect."""
    scoring_config = load_config_or_exit(config)
    criteria = active_criteria(scoring_config)

    if json_output:
        output_json({criterion.name: weight for criterion, weight in criteria})
        return

    table = Table(title="Scoring Weights")
    table.add_column("Criterion", style="cyan")
    table.add_column("Weight", style="magenta", justify="right")
    for criterion, weight in criteria:
        table.add_row(criterion.name, str(weight))
    console.print(table)


if __name__ == "__main__":
    app()
