"""Command Line Interface for Juno Outreach."""

import asyncio
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from . import __version__
from .config import config_manager, get_config, get_processing_config, validate_config
from .lead_parser import SchemaError, parse_table
from .profile import Profile, get_profile_store, load_profile_file
from .utils import RateLimitConfig, setup_logging
from .workflow_orchestrator import LeadCampaign, LeadStatus
from .export_manager import LeadExporter, gmail_compose_url

console = Console()

app = typer.Typer(
    name="juno",
    help="Classify job leads as entry-level and draft application emails",
    no_args_is_help=True
)

profile_app = typer.Typer(help="Manage the stored sender profile", no_args_is_help=True)
app.add_typer(profile_app, name="profile")

STATUS_STYLES = {
    LeadStatus.COMPLETED: "green",
    LeadStatus.SKIPPED: "yellow",
    LeadStatus.ERROR: "red",
    LeadStatus.PENDING: "dim",
    LeadStatus.ANALYZING: "cyan",
}


def version_callback(value: bool):
    """Show version information."""
    if value:
        console.print(f"Juno Outreach v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override LOG_LEVEL"
    )
):
    """Juno Outreach - entry-level job lead triage and email drafting."""
    config = get_config()
    if log_level:
        config.log_level = log_level
    config_manager.ensure_directories()
    setup_logging(config)


def _resolve_profile(profile_file: Optional[Path]) -> Profile:
    if profile_file:
        return load_profile_file(str(profile_file))
    stored = get_profile_store().load()
    if stored is None:
        console.print("[yellow]No stored profile found - drafts will omit sender details[/yellow]")
        return Profile()
    return stored


def _print_campaign(campaign: LeadCampaign) -> None:
    table = Table(title="Lead Analysis")
    table.add_column("#", justify="right")
    table.add_column("Email")
    table.add_column("Status")
    table.add_column("Subject / Reason")

    for lead in campaign.leads:
        style = STATUS_STYLES.get(lead.status, "")
        detail = lead.email_subject or lead.rejection_reason or lead.error or ""
        table.add_row(lead.id, lead.email, f"[{style}]{lead.status.value}[/{style}]", detail)

    console.print(table)

    stats = campaign.stats()
    if stats is None:
        console.print("[yellow]No leads were classified[/yellow]")
        return

    console.print(Panel(
        f"Total: {stats.total}\n"
        f"Entry level: {stats.entry_level}\n"
        f"Skipped: {stats.skipped}\n"
        f"Entry-level share: {stats.percentage}%",
        title="Summary"
    ))


def _print_compose_links(campaign: LeadCampaign) -> None:
    drafted = campaign.drafted_leads()
    if not drafted:
        console.print("[yellow]No drafted emails to open[/yellow]")
        return
    console.print("[bold]Compose links[/bold]")
    for lead in drafted:
        # one unwrapped URL per line
        console.print(f"{lead.id} {lead.email}: {gmail_compose_url(lead)}", soft_wrap=True, markup=False, highlight=False)


@app.command()
def analyze(
    leads_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Lead spreadsheet (CSV, ; or tab separated)"),
    profile_file: Optional[Path] = typer.Option(None, "--profile", "-p", exists=True, dir_okay=False,
                                                help="Profile JSON file (defaults to the stored profile)"),
    use_llm: bool = typer.Option(False, "--llm", help="Classify with the configured LLM instead of local rules"),
    export_csv: Optional[Path] = typer.Option(None, "--export-csv", help="Write results to this CSV file"),
    export_emails: Optional[Path] = typer.Option(None, "--export-emails", help="Write drafted emails to this directory"),
    compose_links: bool = typer.Option(False, "--compose-links", help="Print a Gmail compose link for every drafted email"),
):
    """Parse a lead spreadsheet, classify every lead and draft emails."""
    text = leads_file.read_text(encoding="utf-8-sig")

    try:
        records = parse_table(text)
    except SchemaError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not records:
        console.print("[yellow]No leads found in file[/yellow]")
        raise typer.Exit()

    profile = _resolve_profile(profile_file)
    campaign = LeadCampaign.from_records(records)

    if use_llm:
        from .ai_processing import get_llm_manager, LLMJobClassifier
        manager = get_llm_manager()
        if not manager.get_available_providers():
            console.print("[red]No LLM provider configured - set GEMINI_API_KEY or OPENROUTER_API_KEY[/red]")
            raise typer.Exit(1)

        def report_retry(event: str, data: dict):
            if event == "lead_retrying":
                console.print(f"[dim]Rate limit protection active. Retrying in {data['delay']:g}s...[/dim]")

        config = RateLimitConfig.from_processing_config(get_processing_config())
        campaign.add_progress_callback(report_retry)
        asyncio.run(campaign.process_with_llm(profile, LLMJobClassifier(manager), config))
    else:
        campaign.process_local(profile)

    _print_campaign(campaign)

    if compose_links:
        _print_compose_links(campaign)

    exporter = LeadExporter()
    if export_csv:
        result = exporter.export_csv(campaign.leads, str(export_csv))
        console.print(f"[green]Wrote {result['count']} leads to {export_csv}[/green]")
    if export_emails:
        result = exporter.export_email_client(campaign.drafted_leads(), str(export_emails))
        console.print(f"[green]Wrote {result['count']} drafts to {export_emails}[/green]")


@profile_app.command("show")
def profile_show():
    """Show the stored profile."""
    store = get_profile_store()
    profile = store.load()
    if profile is None:
        console.print("[yellow]No stored profile[/yellow]")
        raise typer.Exit()

    table = Table(title=f"Profile (expires in {store.remaining_hours()}h)")
    table.add_column("Field")
    table.add_column("Value")
    for key, value in profile.to_dict().items():
        table.add_row(key, value or "[dim]-[/dim]")
    console.print(table)


@profile_app.command("set")
def profile_set(
    from_file: Optional[Path] = typer.Option(None, "--from-file", exists=True, dir_okay=False,
                                             help="Load all fields from a JSON file"),
    name: Optional[str] = typer.Option(None, "--name"),
    email: Optional[str] = typer.Option(None, "--email"),
    phone: Optional[str] = typer.Option(None, "--phone"),
    portfolio: Optional[str] = typer.Option(None, "--portfolio"),
    linkedin: Optional[str] = typer.Option(None, "--linkedin"),
    figma: Optional[str] = typer.Option(None, "--figma"),
    resume_link: Optional[str] = typer.Option(None, "--resume-link"),
    bio: Optional[str] = typer.Option(None, "--bio"),
):
    """Create or update the stored profile. Unspecified fields keep their value."""
    store = get_profile_store()
    current = load_profile_file(str(from_file)) if from_file else (store.load() or Profile())

    updates = {
        "name": name, "email": email, "phone": phone, "portfolio": portfolio,
        "linkedin": linkedin, "figma": figma, "resume_link": resume_link, "bio": bio,
    }
    data = asdict(current)
    data.update({k: v for k, v in updates.items() if v is not None})

    store.save(Profile.from_dict(data))
    console.print("[green]Profile saved[/green]")


@profile_app.command("clear")
def profile_clear():
    """Delete the stored profile."""
    get_profile_store().clear()
    console.print("[green]Profile cleared[/green]")


@app.command()
def check():
    """Validate configuration."""
    issues = validate_config()

    for error in issues["errors"]:
        console.print(f"[red]ERROR[/red] {error}")
    for warning in issues["warnings"]:
        console.print(f"[yellow]WARNING[/yellow] {warning}")

    console.print_json(data=config_manager.mask_sensitive_config())

    if issues["errors"]:
        raise typer.Exit(1)
    console.print("[green]Configuration OK[/green]")


if __name__ == "__main__":
    app()
