"""Command line interface: list, start, check, hint, status, next, tools, serve."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from appsec_gym import __logo__, __version__
from appsec_gym.config import get_settings
from appsec_gym.errors import ChallengeNotFoundError, NoActiveChallengeError
from appsec_gym.logging_setup import configure_logging
from appsec_gym.services.challenge_manager import ChallengeManager
from appsec_gym.services.tool_runner import probe_security_tools
from appsec_gym.validators.report import print_report

app = typer.Typer(
    name="appsec-gym",
    help=f"{__logo__} appsec-gym - Hands-on application security training",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} appsec-gym v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
    verbose: bool = typer.Option(False, "--verbose", help="Log debug output to stderr"),
) -> None:
    """appsec-gym - Hands-on application security training."""
    configure_logging(level="debug" if verbose else None, debug=verbose or None)


def _manager() -> ChallengeManager:
    return ChallengeManager()


def _exit_no_active(e: NoActiveChallengeError) -> None:
    console.print(f"[red]{e}[/red]")
    console.print("Start one with: [cyan]appsec-gym start <challenge-id>[/cyan]")
    raise typer.Exit(1)


@app.command("list")
def list_challenges() -> None:
    """List available challenges."""
    manager = _manager()
    completed = set(manager.progress.completed_ids())

    table = Table(title="Challenges")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Difficulty")
    table.add_column("Done")

    for challenge in manager.list_challenges():
        done = "[green]✓[/green]" if challenge.id in completed else ""
        table.add_row(challenge.id, challenge.title, challenge.category, challenge.difficulty, done)

    console.print(table)


@app.command()
def start(challenge_id: str = typer.Argument(..., help="Challenge id, see `list`")) -> None:
    """Start a challenge and scaffold its files."""
    manager = _manager()
    try:
        attempt = manager.start_challenge(challenge_id)
    except ChallengeNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    challenge = attempt.challenge
    console.print(f"[green]✓[/green] Started [bold]{challenge.title}[/bold] ({challenge.difficulty})")
    if challenge.description:
        console.print(f"\n{challenge.description}")
    if challenge.learning_objectives:
        console.print("\n[bold]Learning objectives:[/bold]")
        for objective in challenge.learning_objectives:
            console.print(f"  - {objective}")
    console.print("\nEdit these files, then run [cyan]appsec-gym check[/cyan]:")
    for path in attempt.file_paths:
        console.print(f"  [cyan]{path}[/cyan]")


@app.command()
def check() -> None:
    """Validate your solution for the active challenge."""
    manager = _manager()
    try:
        outcome = asyncio.run(manager.check_solution())
    except NoActiveChallengeError as e:
        _exit_no_active(e)

    if outcome.result is not None:
        print_report(console, outcome.result)
        console.print()

    style = "green" if outcome.passed else "yellow"
    console.print(f"[{style}]{outcome.message}[/{style}]")
    if outcome.degraded:
        console.print("[dim]Validation engine unavailable - basic checks were used instead[/dim]")
    if outcome.passed:
        console.print("Run [cyan]appsec-gym next[/cyan] for the next challenge.")
    else:
        raise typer.Exit(1)


@app.command()
def hint(number: int = typer.Argument(1, help="Hint number (1-based)")) -> None:
    """Show a hint for the active challenge."""
    manager = _manager()
    try:
        result = manager.get_hint(number)
    except NoActiveChallengeError as e:
        _exit_no_active(e)
    console.print(f"[bold]Hint {result.hint_number}/{result.total_hints}:[/bold] {result.hint}")


@app.command()
def status() -> None:
    """Show the active attempt and overall progress."""
    manager = _manager()
    attempt = manager.get_current_attempt()
    total = len(manager.list_challenges())
    completed = manager.progress.completed_ids()

    if attempt is None:
        console.print("[yellow]No active challenge[/yellow]")
    else:
        console.print(f"Challenge: [cyan]{attempt.challenge.id}[/cyan] - {attempt.challenge.title}")
        console.print(f"Attempt: {attempt.attempt_id} ({attempt.status})")
        console.print(f"Workspace: {attempt.workspace_path}")
        console.print(f"Checks run: {attempt.checks_run}, hints used: {attempt.hints_used}")
        if attempt.last_score is not None:
            console.print(f"Last score: {attempt.last_score:g}/100 ({attempt.last_grade})")
    console.print(f"Completed: {len(completed)}/{total}")


@app.command("next")
def next_challenge() -> None:
    """Move on to the challenge after the current one."""
    manager = _manager()
    attempt = manager.move_to_next()
    if attempt is None:
        if manager.get_current_attempt() is None:
            console.print("[yellow]No active challenge[/yellow]")
        else:
            console.print(f"{__logo__} That was the last challenge - well done!")
        return
    console.print(f"[green]✓[/green] Started [bold]{attempt.challenge.title}[/bold]")
    for path in attempt.file_paths:
        console.print(f"  [cyan]{path}[/cyan]")


@app.command()
def tools() -> None:
    """Check which external validation tools are available."""
    available = asyncio.run(probe_security_tools())

    table = Table(title="Validation Tools")
    table.add_column("Tool", style="cyan")
    table.add_column("Status")
    for name, ok in available.items():
        table.add_row(name, "[green]available[/green]" if ok else "[yellow]unavailable (partial credit)[/yellow]")
    console.print(table)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    settings = get_settings()
    bind_host = host or settings.HOST
    bind_port = port or settings.PORT
    console.print(f"{__logo__} Serving on http://{bind_host}:{bind_port}")
    uvicorn.run("appsec_gym.main:app", host=bind_host, port=bind_port, log_level=settings.LOG_LEVEL)
