"""
hireflow Command Line Interface

Commands for running the forwarding proxy, managing job postings and
uploading resumes for screening from the terminal.
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="hireflow",
    help="Resume ingestion and screening-webhook relay",
    add_completion=False,
)
console = Console()

STATUS_STYLES = {
    "pending": "dim",
    "processing": "yellow",
    "completed": "green",
    "error": "red",
}


def _connected_manager():
    from hireflow.data.database import get_database_manager

    db_manager = get_database_manager()
    if not db_manager.check_sync_connection():
        console.print("[red]Error: Could not connect to MongoDB.[/red]")
        console.print("[dim]Make sure MongoDB is running and DB_* settings are correct.[/dim]")
        raise typer.Exit(1)
    return db_manager


@app.command()
def version():
    """Show application version."""
    from hireflow import __app_name__, __version__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show configuration."""
    from hireflow.utils.config import get_settings

    settings = get_settings()

    table = Table(title="hireflow Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Database", f"{settings.database.host}:{settings.database.port}/{settings.database.name}")
    table.add_row("Resume Bucket", settings.database.resume_bucket)
    table.add_row("Primary Webhook", settings.webhook.webhook_url)
    table.add_row("Proxy Route", settings.proxy.route)
    table.add_row("Proxy URL (client)", settings.pipeline.proxy_url)
    table.add_row("Max Concurrency", str(settings.pipeline.max_concurrency))
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def init_db():
    """Create the indexes for jobs, candidates and resume files."""
    console.print("[yellow]Initializing database...[/yellow]")
    db_manager = _connected_manager()
    console.print("  [green]✓[/green] Connected to MongoDB")

    asyncio.run(db_manager.ensure_indexes())
    console.print("  [green]✓[/green] Indexes created")
    console.print("\n[green]Database initialized successfully![/green]")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port"),
):
    """Run the resume-screening forwarding proxy."""
    import uvicorn

    from hireflow.core.proxy.app import create_app
    from hireflow.utils.config import get_settings
    from hireflow.utils.logger import setup_logging

    setup_logging()
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=host or settings.proxy.host,
        port=port or settings.proxy.port,
        log_level=settings.logging.level.lower(),
    )


@app.command()
def endpoints(
    url: Optional[str] = typer.Argument(None, help="Primary webhook URL (defaults to N8N_WEBHOOK_URL)"),
):
    """Show the webhook URLs the proxy will try, in order."""
    from hireflow.core.proxy.endpoints import resolve_webhook_endpoints
    from hireflow.utils.config import get_settings

    primary = url or get_settings().webhook.webhook_url
    for index, candidate in enumerate(resolve_webhook_endpoints(primary), start=1):
        label = "[bold]primary[/bold]" if index == 1 else "fallback"
        console.print(f"{index}. {candidate} ({label})")


@app.command()
def create_job(
    title: str = typer.Option(..., "--title", "-t", help="Job title"),
    user_id: str = typer.Option(..., "--user", "-u", help="Owner user id"),
    description_file: Optional[Path] = typer.Option(None, "--file", "-f", help="Job description file"),
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Job location"),
    must_have: str = typer.Option("", "--must-have", help="Comma separated required skills"),
    good_to_have: str = typer.Option("", "--good-to-have", help="Comma separated nice-to-have skills"),
    draft: bool = typer.Option(False, "--draft", help="Save as draft instead of active"),
):
    """Create a job posting."""
    from hireflow.data.models.job import JobCreate
    from hireflow.data.repositories import JobRepository
    from hireflow.utils.constants import JobStatus

    description = ""
    if description_file:
        if not description_file.exists():
            console.print(f"[red]Error: File not found: {description_file}[/red]")
            raise typer.Exit(1)
        description = description_file.read_text(encoding="utf-8")

    data = JobCreate(
        title=title,
        description=description,
        location=location,
        must_have_skills=JobCreate.split_skills(must_have),
        good_to_have_skills=JobCreate.split_skills(good_to_have),
        status=JobStatus.DRAFT if draft else JobStatus.ACTIVE,
    )

    db_manager = _connected_manager()
    repo = JobRepository.from_manager(db_manager)
    job = asyncio.run(repo.create_from_schema(user_id, data))
    console.print(f"[green]✓ Job created:[/green] {job.title} [dim]({job.id})[/dim]")


@app.command()
def list_jobs(
    user_id: str = typer.Option(..., "--user", "-u", help="Owner user id"),
):
    """List a user's active job postings."""
    from hireflow.data.repositories import JobRepository

    db_manager = _connected_manager()
    repo = JobRepository.from_manager(db_manager)
    jobs = asyncio.run(repo.list_active_for_user(user_id))

    if not jobs:
        console.print("[yellow]No active jobs - create one first.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Active Jobs")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Location")
    table.add_column("Must have")
    for job in jobs:
        table.add_row(str(job.id), job.title, job.location or "-", ", ".join(job.must_have_skills))
    console.print(table)


@app.command()
def upload(
    paths: list[Path] = typer.Argument(..., help="Resume files or directories"),
    job_id: str = typer.Option(..., "--job", "-j", help="Job to screen against"),
    user_id: str = typer.Option(..., "--user", "-u", help="Uploading user id"),
):
    """Upload resumes, screen them through the proxy and save candidates."""
    from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

    from hireflow.core.exceptions import BatchValidationError, InvalidResumeFileError
    from hireflow.core.ingestion import (
        BatchOrchestrator,
        ResumeFile,
        ResumeUploadPipeline,
        UploadSession,
    )
    from hireflow.data.repositories import CandidateRepository, JobRepository
    from hireflow.services import GridFSResumeStorage, ScreeningProxyClient
    from hireflow.utils.config import get_settings
    from hireflow.utils.constants import SUPPORTED_RESUME_FORMATS

    settings = get_settings()

    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(p for p in path.iterdir() if p.suffix.lower() in SUPPORTED_RESUME_FORMATS))
        elif path.exists():
            files.append(path)
        else:
            console.print(f"[red]Error: Path does not exist: {path}[/red]")
            raise typer.Exit(1)

    db_manager = _connected_manager()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        console=console,
    ) as progress:
        bars: dict[str, int] = {}

        def show(task) -> None:
            if task.id not in bars:
                bars[task.id] = progress.add_task(task.filename, total=100)
            style = STATUS_STYLES[task.status.value]
            progress.update(
                bars[task.id],
                completed=task.progress,
                description=f"[{style}]{task.filename}[/{style}]",
            )

        session = UploadSession(max_file_size_mb=settings.pipeline.max_file_size_mb, on_update=show)
        try:
            session.add_files(ResumeFile.from_path(p) for p in files)
        except InvalidResumeFileError as e:
            progress.stop()
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

        async def run():
            storage = GridFSResumeStorage(
                db_manager.get_resume_bucket(),
                bucket=db_manager.resume_bucket_name,
                public_base_url=settings.proxy.public_base_url,
            )
            async with ScreeningProxyClient(
                settings.pipeline.proxy_url, timeout=settings.pipeline.request_timeout_seconds
            ) as client:
                pipeline = ResumeUploadPipeline(
                    storage,
                    client,
                    CandidateRepository.from_manager(db_manager),
                    step_timeout=settings.pipeline.step_timeout_seconds,
                )
                orchestrator = BatchOrchestrator(
                    pipeline,
                    JobRepository.from_manager(db_manager),
                    max_concurrency=settings.pipeline.max_concurrency,
                )
                return await orchestrator.run(session, job_id, user_id)

        try:
            summary = asyncio.run(run())
        except BatchValidationError as e:
            progress.stop()
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    console.print()
    console.print(f"[bold]Analysis Complete:[/bold] {summary.message}")
    if summary.failed:
        console.print(f"  [red]✗ Errors:[/red] {summary.failed}")
        for filename, message in summary.errors.items():
            console.print(f"  [dim]{filename}:[/dim] {message}")


@app.command()
def candidates(
    job_id: str = typer.Option(..., "--job", "-j", help="Job id"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum rows"),
):
    """List a job's candidates, best match first."""
    from hireflow.data.repositories import CandidateRepository

    db_manager = _connected_manager()
    repo = CandidateRepository.from_manager(db_manager)
    records = asyncio.run(repo.list_for_job(job_id, limit=limit))

    if not records:
        console.print("[yellow]No candidates yet.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Candidates")
    table.add_column("Name", style="cyan")
    table.add_column("Match", justify="right")
    table.add_column("Predictive", justify="right")
    table.add_column("Growth")
    table.add_column("Status")
    for record in records:
        table.add_row(
            record.name,
            f"{record.match_score}%" if record.match_score is not None else "-",
            f"{record.predictive_score}%" if record.predictive_score is not None else "-",
            record.growth_potential or "-",
            record.status,
        )
    console.print(table)


if __name__ == "__main__":
    app()
