"""CLI entry point for the sportclub tool.

This module is the composition root of the application.  It is the only
place that imports concrete implementations (SessionTokenProvider,
RequestExecutor, SportClient).  All other layers depend solely on
abstractions.
"""

import csv
import io
import json
import sys
from contextlib import contextmanager
from dataclasses import asdict
from datetime import datetime
from enum import Enum

# Ensure UTF-8 output on Windows where stdout may default to cp1252.
# reconfigure() is a no-op when encoding is already utf-8.
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sportclub.auth import storage as local_store
from sportclub.config import Settings
from sportclub.core.exceptions import (
    AuthError,
    AuthUnavailableError,
    SportclubError,
)
from sportclub.core.models import UpcomingSession
from sportclub.core.schedule import DEFAULT_LIMIT
from sportclub.logging_utils import setup_logging
from sportclub.providers.innohassle.auth import (
    SessionTokenProvider,
    parse_cookie_header,
)
from sportclub.providers.innohassle.client import SportClient
from sportclub.providers.innohassle.transport import RequestExecutor
from sportclub.services.club_service import ClubService

app = typer.Typer()
clubs_app = typer.Typer(help="Browse sports clubs and their schedules.")
auth_app = typer.Typer(help="Manage InNoHassle authentication.")

app.add_typer(clubs_app, name="clubs")
app.add_typer(auth_app, name="auth")

console = Console(legacy_windows=False)
err_console = Console(stderr=True, legacy_windows=False)


# ---------------------------------------------------------------------------
# Output format
# ---------------------------------------------------------------------------


class OutputFormat(str, Enum):
    """Supported output formats for listing commands."""

    table = "table"
    json = "json"
    csv = "csv"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_settings() -> Settings:
    """Return settings read from the environment, exiting on bad values."""
    try:
        return Settings.from_env()
    except SportclubError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _get_token_provider() -> SessionTokenProvider:
    """Return the session-cookie token provider for the current settings."""
    return SessionTokenProvider(settings=_get_settings())


def _get_service() -> ClubService:
    """Build and return a ClubService backed by the InNoHassle provider.

    Returns:
        A :class:`~sportclub.services.club_service.ClubService` instance.
    """
    settings = _get_settings()
    tokens = SessionTokenProvider(settings=settings)
    executor = RequestExecutor(tokens, settings=settings)
    return ClubService(SportClient(executor))


@contextmanager
def _api_errors():
    """Turn library errors into a red one-line message and exit code 1."""
    try:
        yield
    except (AuthUnavailableError, AuthError) as e:
        err_console.print(f"[red]{e}[/red]")
        err_console.print(
            "Run [bold]sportclub auth setup[/bold] to renew your session."
        )
        raise typer.Exit(1)
    except SportclubError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _fmt_instant(value: datetime) -> str:
    """Format an aware datetime in local time as ``YYYY-MM-DD HH:MM``."""
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def _session_row(session: UpcomingSession) -> dict:
    """Return a JSON/CSV-friendly dict for an upcoming session."""
    return {
        "id": session.id,
        "start": session.start.isoformat(),
        "end": session.end.isoformat(),
        "training_class": session.training_class,
        "available_spots": session.available_spots,
    }


def _to_csv(rows: list[dict], fieldnames: list[str]) -> str:
    """Serialise a list of dicts to a CSV string.

    Args:
        rows: List of dictionaries to serialise.
        fieldnames: Ordered column names.  Extra keys in ``rows`` are ignored.

    Returns:
        A CSV-formatted string including a header row.
    """
    buf = io.StringIO()
    writer = csv.DictWriter(
        buf, fieldnames=fieldnames, extrasaction="ignore"
    )
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue()


def _print_sessions(
    sessions: list[UpcomingSession], title: str, output: OutputFormat
) -> None:
    if output == OutputFormat.json:
        print(json.dumps([_session_row(s) for s in sessions], indent=2))
    elif output == OutputFormat.csv:
        print(
            _to_csv(
                [_session_row(s) for s in sessions],
                ["id", "start", "end", "training_class", "available_spots"],
            ),
            end="",
        )
    else:
        table = Table(title=title)
        table.add_column("Start", style="cyan")
        table.add_column("End")
        table.add_column("Class")
        table.add_column("Free spots", justify="right")
        for s in sessions:
            table.add_row(
                _fmt_instant(s.start),
                _fmt_instant(s.end),
                s.training_class,
                str(s.available_spots),
            )
        console.print(table)
        if not sessions:
            console.print("[dim]No upcoming sessions.[/dim]")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log debug output to stderr."
    ),
):
    """Browse InNoHassle sports clubs from the terminal."""
    setup_logging("DEBUG" if verbose else _get_settings().log_level)


# ---------------------------------------------------------------------------
# auth commands
# ---------------------------------------------------------------------------


@auth_app.command()
def setup():
    """Save identity-service session cookies and validate them."""
    console.print("\n[bold]InNoHassle session setup[/bold]\n")
    console.print(
        "Log in to InNoHassle in your browser, open DevTools → Network, "
        "and copy the [cyan]Cookie[/cyan] request header sent to the "
        "accounts service.\n"
    )
    header = typer.prompt("Paste the Cookie header", hide_input=True)
    cookies = parse_cookie_header(header)
    if not cookies:
        err_console.print("[red]No cookies found in the pasted value.[/red]")
        raise typer.Exit(1)

    settings = _get_settings()
    console.print("\n[dim]Validating session...[/dim]")
    with _api_errors():
        SessionTokenProvider(settings=settings, cookies=cookies).acquire_token()

    store = local_store.LocalStorage(settings.storage_dir)
    local_store.save_cookies(store, cookies)
    saved_to = store.path_for(local_store.SESSION_COOKIES_KEY)
    console.print(f"[green]✓ Session saved to:[/green] {saved_to}")


@auth_app.command()
def token():
    """Acquire a fresh access token and print it."""
    with _api_errors():
        value = _get_token_provider().acquire_token()
    print(value)


@auth_app.command()
def status():
    """Show where the session comes from and whether a token is stored."""
    provider = _get_token_provider()
    source = provider.credential_source()
    if source == "none":
        console.print("[yellow]No session cookies configured.[/yellow]")
        console.print("Run [bold]sportclub auth setup[/bold].")
    else:
        console.print(f"[green]✓ Session cookies[/green]  {source}")

    if provider.current_token():
        console.print("[green]✓ Access token stored[/green]")
    else:
        console.print("[yellow]No access token stored.[/yellow]")
        raise typer.Exit(1)


@auth_app.command()
def logout():
    """Remove the stored access token and session cookies."""
    store = local_store.LocalStorage(_get_settings().storage_dir)
    removed_token = local_store.clear_token(store)
    removed_cookies = local_store.clear_cookies(store)
    if removed_token:
        console.print("[green]✓ Access token removed.[/green]")
    if removed_cookies:
        console.print("[green]✓ Session cookies removed.[/green]")
    if not removed_token and not removed_cookies:
        console.print("[yellow]No saved credentials found.[/yellow]")


# ---------------------------------------------------------------------------
# clubs commands
# ---------------------------------------------------------------------------


@clubs_app.command(name="list")
def list_clubs(
    output: OutputFormat = typer.Option(
        OutputFormat.table, "--output", "-o", help="Output format."
    ),
):
    """List all clubs with their group counts."""
    service = _get_service()
    with _api_errors(), console.status(
        "[dim]Fetching clubs…[/dim]", spinner="dots"
    ):
        clubs = service.get_clubs()

    if output == OutputFormat.json:
        print(json.dumps([asdict(c) for c in clubs], indent=2))
    elif output == OutputFormat.csv:
        print(
            _to_csv(
                [asdict(c) for c in clubs],
                ["id", "name", "description", "total_groups"],
            ),
            end="",
        )
    else:
        table = Table(title="Sports Clubs")
        table.add_column("ID", justify="right")
        table.add_column("Name", style="cyan")
        table.add_column("Groups", justify="right")
        for c in clubs:
            table.add_row(str(c.id), c.name, str(c.total_groups))
        console.print(table)
        console.print(f"[dim]Total: {len(clubs)} clubs[/]")


@clubs_app.command()
def show(club_id: int):
    """Show a club's description, groups and next sessions."""
    service = _get_service()
    with _api_errors():
        club = service.get_club(club_id)
    sessions = service.upcoming_sessions(club)

    console.print(Panel(f"[bold]{club.name}[/bold]", padding=(0, 2)))
    if club.description:
        console.print(club.description + "\n")

    table = Table(title="Groups")
    table.add_column("Name", style="cyan")
    table.add_column("Enrolled", justify="right")
    table.add_column("Trainers")
    for g in club.groups:
        table.add_row(
            g.name,
            f"{g.current_enrollment}/{g.capacity}",
            ", ".join(t.name for t in g.trainers) or "—",
        )
    console.print(table)

    _print_sessions(sessions, "Upcoming sessions", OutputFormat.table)


@clubs_app.command()
def upcoming(
    club_id: int,
    limit: int = typer.Option(
        DEFAULT_LIMIT, "--limit", "-n", help="Maximum sessions to show."
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.table, "--output", "-o", help="Output format."
    ),
):
    """List a club's upcoming sessions, earliest first."""
    service = _get_service()
    with _api_errors():
        club = service.get_club(club_id)
    sessions = service.upcoming_sessions(club, limit=limit)
    _print_sessions(sessions, f"Upcoming sessions — {club.name}", output)


# ---------------------------------------------------------------------------
# faq command
# ---------------------------------------------------------------------------


@app.command()
def faq(
    output: OutputFormat = typer.Option(
        OutputFormat.table, "--output", "-o", help="Output format."
    ),
):
    """Show frequently asked questions."""
    service = _get_service()
    with _api_errors():
        entries = service.get_faq()

    if output == OutputFormat.json:
        print(json.dumps(entries, indent=2, ensure_ascii=False))
    elif output == OutputFormat.csv:
        print(
            _to_csv(
                [{"question": q, "answer": a} for q, a in entries.items()],
                ["question", "answer"],
            ),
            end="",
        )
    else:
        for question, answer in entries.items():
            console.print(f"[bold cyan]{question}[/bold cyan]")
            console.print(answer + "\n")
