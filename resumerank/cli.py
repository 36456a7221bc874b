"""
ResumeRank Command Line Interface

Provides CLI commands for running resume analyses, checking quotas,
and preparing the database.
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from resumerank.data.models.analysis import AnalysisOutcome, BulkAnalysisReport

app = typer.Typer(
    name="resumerank",
    help="AI Resume Analysis Pipeline CLI",
    add_completion=False,
)
console = Console()


@app.callback()
def main_callback():
    """Configure logging before any command runs."""
    from resumerank.utils.logger import setup_logging

    setup_logging()


@app.command()
def version():
    """Show application version."""
    from resumerank import __version__, __app_name__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show system information and configuration."""
    from resumerank.utils.config import get_settings

    settings = get_settings()

    table = Table(title="ResumeRank Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Database Host", settings.database.host)
    table.add_row("Database Name", settings.database.name)
    table.add_row("AI Model", settings.ai.model)
    table.add_row("AI API Key", "configured" if settings.ai.api_key else "[red]missing[/red]")
    table.add_row("Max Attempts", str(settings.ai.max_attempts))
    table.add_row("Rate Limit Backend", settings.rate_limit.backend)
    table.add_row(
        "AI Analysis Limit",
        f"{settings.rate_limit.ai_analysis_requests} per {settings.rate_limit.window_seconds}s",
    )
    table.add_row("Storage Backend", settings.storage.backend)
    table.add_row("Broadcast Backend", settings.broadcast.backend)
    table.add_row("Bulk Limit", str(settings.analysis.max_bulk_candidates))
    table.add_row("Bulk Concurrency", str(settings.analysis.bulk_concurrency))
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def init_db():
    """Initialize the database with required collections and indexes."""
    from resumerank.data.database import get_database_manager
    from resumerank.utils.config import get_settings

    console.print("[yellow]Initializing database...[/yellow]")
    settings = get_settings()
    db_manager = get_database_manager()

    async def run() -> None:
        console.print("  Checking database connection...")
        if not await db_manager.check_connection():
            console.print("[red]Error: Could not connect to MongoDB.[/red]")
            console.print("[dim]Make sure MongoDB is running and connection settings are correct.[/dim]")
            raise typer.Exit(1)
        console.print("  [green]✓[/green] Connected to MongoDB")

        console.print("  Creating indexes...")
        await db_manager.ensure_indexes()
        console.print("  [green]✓[/green] Indexes created")

        if settings.broadcast.backend == "mongodb":
            await db_manager.ensure_capped_collection(
                settings.broadcast.collection_name,
                settings.broadcast.capped_size_bytes,
            )
            console.print("  [green]✓[/green] Realtime event collection ready")

    try:
        asyncio.run(run())
    finally:
        db_manager.close()

    console.print("\n[green]Database initialized successfully![/green]")


@app.command()
def analyze(
    candidate_id: str = typer.Argument(..., help="Candidate ID to analyze"),
    user: str = typer.Option(..., "--user", "-u", help="Requesting user ID"),
    reanalysis: bool = typer.Option(False, "--reanalysis", "-r", help="Record as a re-analysis"),
):
    """Analyze one candidate's resume against its job."""

    async def run(orchestrator) -> AnalysisOutcome:
        return await orchestrator.submit_single_analysis(candidate_id, user, reanalysis=reanalysis)

    outcome = _run_pipeline(run)
    _print_outcome(outcome)
    if not outcome.success:
        raise typer.Exit(1)


@app.command()
def bulk_analyze(
    candidate_ids: list[str] = typer.Argument(..., help="Candidate IDs to re-analyze"),
    user: str = typer.Option(..., "--user", "-u", help="Requesting user ID"),
):
    """Re-analyze several candidates and show itemized results."""
    from resumerank.core.errors import InvalidArgumentError

    async def run(orchestrator) -> BulkAnalysisReport:
        return await orchestrator.submit_bulk_analysis(candidate_ids, user)

    try:
        report = _run_pipeline(run)
    except InvalidArgumentError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(2)

    _print_report(report)
    if report.summary.failed:
        raise typer.Exit(1)


@app.command()
def quota(
    user_id: str = typer.Argument(..., help="User ID"),
    ensure: bool = typer.Option(
        False, "--ensure", help="Create a quota with the default credits if none exists"
    ),
):
    """Show a user's AI credit quota."""
    from resumerank.data.database import get_database_manager
    from resumerank.data.repositories import QuotaRepository
    from resumerank.utils.config import get_settings

    settings = get_settings()
    db_manager = get_database_manager()
    repository = QuotaRepository(db_manager)

    async def run():
        if ensure:
            return await repository.ensure_quota_async(
                user_id, settings.analysis.default_ai_credits
            )
        return await repository.get_by_user_async(user_id)

    try:
        user_quota = asyncio.run(run())
    finally:
        db_manager.close()

    if user_quota is None:
        console.print(f"[yellow]No quota configured for user {user_id}[/yellow]")
        raise typer.Exit(1)

    table = Table(title=f"AI Credits: {user_id}")
    table.add_column("Total", style="cyan")
    table.add_column("Used", style="yellow")
    table.add_column("Remaining", style="green")
    table.add_column("Resets", style="dim")
    table.add_row(
        str(user_quota.ai_credits),
        str(user_quota.used_credits),
        str(user_quota.remaining_credits),
        user_quota.reset_at.strftime("%Y-%m-%d") if user_quota.reset_at else "-",
    )
    console.print(table)


@app.command()
def activity(
    candidate_id: Optional[str] = typer.Option(
        None, "--candidate", "-c", help="Show the analysis history of one candidate"
    ),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Show one user's activity"),
    action: Optional[str] = typer.Option(
        None, "--action", "-a", help="Only entries with this action (with --user)"
    ),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Maximum entries to show"),
):
    """Show recorded analysis activity for a candidate or a user."""
    from resumerank.data.database import get_database_manager
    from resumerank.data.repositories import ActivityLogRepository

    if not candidate_id and not user:
        console.print("[red]Error: pass --candidate or --user[/red]")
        raise typer.Exit(2)

    db_manager = get_database_manager()
    repository = ActivityLogRepository(db_manager)

    async def run():
        if candidate_id:
            return await repository.get_by_resource_async("candidate", candidate_id, limit=limit)
        return await repository.get_by_user_async(user, action=action, limit=limit)

    try:
        entries = asyncio.run(run())
    finally:
        db_manager.close()

    if not entries:
        console.print("[yellow]No activity recorded[/yellow]")
        return

    table = Table(title="Analysis Activity")
    table.add_column("Time", style="dim")
    table.add_column("Action", style="cyan")
    table.add_column("User")
    table.add_column("Candidate")
    table.add_column("Score", justify="right")

    for entry in entries:
        score = entry.metadata.get("score")
        table.add_row(
            entry.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            entry.action,
            entry.user_id,
            entry.resource_id,
            f"{score:g}" if isinstance(score, (int, float)) else "-",
        )
    console.print(table)


@app.command()
def check_ai():
    """Verify the Gemini API key and model with a trivial prompt."""
    from resumerank.services.gemini_service import GeminiInferenceService

    async def run():
        async with GeminiInferenceService() as service:
            return await service.check_connection()

    console.print("[yellow]Testing Gemini connection...[/yellow]")
    ok, error = asyncio.run(run())
    if ok:
        console.print("[green]✓ Gemini connection OK[/green]")
        return
    console.print(f"[red]✗ Gemini connection failed: {error}[/red]")
    raise typer.Exit(1)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _run_pipeline(operation):
    """Build the pipeline, run one async operation on it, and release clients."""
    from resumerank.data.database import get_database_manager
    from resumerank.main import build_orchestrator
    from resumerank.services.gemini_service import GeminiInferenceService

    db_manager = get_database_manager()

    async def run():
        async with GeminiInferenceService() as inference:
            orchestrator = build_orchestrator(db_manager=db_manager, inference=inference)
            return await operation(orchestrator)

    try:
        return asyncio.run(run())
    finally:
        db_manager.close()


def _print_outcome(outcome: AnalysisOutcome) -> None:
    if outcome.success:
        console.print(f"[green]✓ Analysis complete[/green]  score: [bold]{outcome.score:g}[/bold]")
        if outcome.summary:
            console.print(f"[dim]{outcome.summary}[/dim]")
        return

    hint = " (temporary, try again later)" if outcome.is_temporary else ""
    console.print(f"[red]✗ {outcome.error}[/red]{hint}: {outcome.message}")


def _print_report(report: BulkAnalysisReport) -> None:
    table = Table(title="Bulk Analysis Results")
    table.add_column("#", style="dim")
    table.add_column("Candidate", style="cyan")
    table.add_column("Result")
    table.add_column("Score", justify="right")
    table.add_column("Detail", style="dim")

    for index, item in enumerate(report.results, start=1):
        if item.success:
            status = "[green]✓ success[/green]"
            score = f"{item.score:g}"
            detail = ""
        else:
            status = "[yellow]… temporary[/yellow]" if item.is_temporary else "[red]✗ failed[/red]"
            score = "-"
            detail = f"{item.error}: {item.message}"
        table.add_row(str(index), item.candidate_id or "", status, score, detail)

    console.print(table)

    summary = report.summary
    console.print()
    console.print("[bold]Summary:[/bold]")
    console.print(f"  Total: {summary.total}")
    console.print(f"  [green]✓ Successful:[/green] {summary.successful}")
    console.print(f"  [red]✗ Failed:[/red] {summary.failed}")
    console.print(f"  [yellow]Temporary:[/yellow] {summary.temporary}")


if __name__ == "__main__":
    app()
