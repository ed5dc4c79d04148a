"""
Enrollment - CLI Entry Point.

Usage:
    enrollment serve         Start the API server
    enrollment wizard        Walk through the onboarding wizard in the terminal
    enrollment db            Check the record storage backend
    enrollment --help        Show help
"""

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from enrollment.client.display import FIELD_LABELS, PAYMENT_SUMMARY_FIELDS, format_expiration_input
from enrollment.client.wizard import NavigationOutcome, WizardStateMachine
from enrollment.state import WizardField, WizardStep

app = typer.Typer(
    name="enrollment",
    help="Enrollment - multi-step onboarding wizard.",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the API server."""
    import uvicorn

    console.print("\n[bold green]Enrollment API[/bold green]")
    console.print(f"Starting server on http://localhost:{port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "enrollment.web.app:app",
        host="0.0.0.0",
        port=port,
        reload=reload,
    )


@app.command()
def wizard(
    base_url: str = typer.Option(None, "--url", "-u", help="API base URL (defaults to API_BASE_URL)"),
) -> None:
    """Run the onboarding wizard against a running server."""
    from enrollment.config import configure_logging, settings

    configure_logging("WARNING")
    asyncio.run(_run_wizard(base_url or settings.api_base_url, settings.request_timeout_seconds))


@app.command()
def db() -> None:
    """Check the record storage backend."""
    from enrollment.config import settings
    from enrollment.db.client import get_repository

    console.print(f"\n[bold]Storage Check[/bold] ({settings.storage_backend})\n")

    try:
        status = get_repository().check()
    except Exception as e:
        console.print(f"[red]FAIL[/red] Storage check failed: {e}")
        raise typer.Exit(1)

    for table, rows in status.items():
        console.print(f"  [green]OK[/green] {table}: {rows} rows")


@app.command()
def version() -> None:
    """Show version information."""
    from enrollment import __version__

    console.print(f"Enrollment version {__version__}")


# =============================================================================
# Terminal Wizard
# =============================================================================


async def _run_wizard(base_url: str, timeout: float) -> None:
    from enrollment.client.api import EnrollmentClient
    from enrollment.errors import TransportFailure

    client = EnrollmentClient.connect(base_url, timeout=timeout)
    try:
        try:
            csrf_token = await client.start_session()
        except TransportFailure:
            console.print(f"[red]Could not reach {base_url}. Is the server running?[/red]")
            raise typer.Exit(1)

        console.print(
            Panel.fit(
                "[bold green]Onboarding[/bold green]\n"
                "[dim]Type 'back' at any prompt to return to the previous step, "
                "'quit' to abandon.[/dim]",
                title="Welcome",
                border_style="green",
            )
        )

        machine = WizardStateMachine(client)
        while not machine.completed:
            if machine.view.step == WizardStep.REVIEW:
                command = _review(machine)
            else:
                command = _collect_step(machine)

            if command == "quit":
                console.print("\n[dim]Wizard abandoned. Nothing was saved.[/dim]")
                return
            if command == "back":
                machine.retreat()
                continue

            if command == "submit":
                outcome = await machine.submit(csrf_token)
            else:
                outcome = await machine.advance()
            _report(machine, outcome)

        console.print(f"\n[bold green]Saved![/bold green] Your user id is {machine.user_id}.")
    finally:
        await client.aclose()


def _collect_step(machine: WizardStateMachine) -> str:
    """Prompt for every field of the current step. Returns next/back/quit."""
    step = machine.view.step
    console.print(f"\n[bold blue]Step {int(step) + 1}: {step.name.title()}[/bold blue]")

    for field in machine.view.fields:
        current = machine.inputs.get(field, "")
        hint = f" [dim][{current}][/dim]" if current else ""
        value = console.input(f"{FIELD_LABELS[field]}{hint}: ").strip()
        if value.lower() in ("back", "quit"):
            return value.lower()
        if not value:
            value = current
        if field == WizardField.EXPIRATION_DATE:
            value = format_expiration_input(value)
        machine.set_input(field, value)

    return "next"


def _review(machine: WizardStateMachine) -> str:
    table = Table(title="Review", show_header=False)
    summary = machine.view.summary or {}
    for field, value in summary.items():
        if field in PAYMENT_SUMMARY_FIELDS and not machine.view.show_payment_summary:
            continue
        table.add_row(FIELD_LABELS[field], value)
    console.print(table)

    while True:
        command = console.input("\n[bold]submit[/bold] / back / quit: ").strip().lower()
        if command in ("submit", "back", "quit"):
            return command


def _report(machine: WizardStateMachine, outcome: NavigationOutcome) -> None:
    if outcome == NavigationOutcome.REJECTED:
        for field, messages in machine.field_errors.items():
            console.print(f"[red]{FIELD_LABELS[field]}: {' | '.join(messages)}[/red]")
    elif outcome in (NavigationOutcome.FAILED, NavigationOutcome.DENIED):
        console.print(f"[red]{machine.notice}[/red]")
        if outcome == NavigationOutcome.DENIED:
            raise typer.Exit(1)


if __name__ == "__main__":
    app()
