"""applybot command line: run the apply pipeline and inspect configuration."""

from __future__ import annotations

import asyncio
import contextlib
import signal
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from applybot import __version__, config
from applybot.apply.driver import browser_session
from applybot.apply.launcher import ApplicationOrchestrator
from applybot.apply.resolver import AnswerResolver
from applybot.apply.wizard import WizardController
from applybot.discovery.blacklist import compile_patterns, first_match
from applybot.discovery.linkedin import search_pages, validate_session, wait_for_login
from applybot.errors import ConfigError
from applybot.llm import LLMClient, LLMConfig, resolve_llm_config
from applybot.models import BatchResult
from applybot.schemas import AutomationSettings, CandidateProfile

console = Console()

app = typer.Typer(
    name="applybot",
    help="Search LinkedIn and fill Easy Apply forms from your resume profile.",
    no_args_is_help=True,
)

PreferencesOption = typer.Option(None, "--preferences", help="Path to preferences.yaml")
ResumeOption = typer.Option(None, "--resume", help="Path to text_resume.yaml")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"applybot {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """applybot: automated Easy Apply."""


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


async def _run_pipeline(
    profile: CandidateProfile,
    llm_config: LLMConfig,
    settings: AutomationSettings,
    headless: bool,
) -> list[BatchResult]:
    # SIGTERM cancels the pipeline so the browser context is closed on the way out
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGTERM, task.cancel)

    client = LLMClient(llm_config, temperature=settings.temperature)
    try:
        async with browser_session(config.browser_profile_dir(), headless=headless) as driver:
            if not await validate_session(driver):
                console.print("[yellow]Log in to LinkedIn in the opened browser window...[/yellow]")
                await wait_for_login(driver)

            resolver = AnswerResolver(client, profile, default_experience=settings.default_experience)
            wizard = WizardController(driver, resolver, Path(profile.preferences.resume_path), settings)
            orchestrator = ApplicationOrchestrator(driver, wizard, profile.preferences, settings=settings)
            return await orchestrator.run(search_pages(driver, profile.preferences, settings))
    finally:
        await client.aclose()


def _summary_table(batches: list[BatchResult]) -> Table:
    table = Table(title="Application Summary", show_header=True)
    table.add_column("Job", style="cyan")
    table.add_column("Company", style="green")
    table.add_column("Outcome")
    table.add_column("Detail", style="dim")

    for batch in batches:
        for result in batch.processed:
            table.add_row(result.posting.title, result.posting.company, "[green]applied[/green]", "")
        for result in batch.unprocessed:
            table.add_row(
                result.posting.title, result.posting.company, "[red]failed[/red]", result.error or ""
            )
        for classified in batch.blacklisted:
            table.add_row(
                classified.posting.title, classified.posting.company, "[yellow]blacklisted[/yellow]", ""
            )
        for classified in batch.already_applied:
            table.add_row(classified.posting.title, classified.posting.company, "[dim]already applied[/dim]", "")
    return table


@app.command()
def run(
    headless: bool = typer.Option(False, "--headless", help="Run the browser without a window."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Fill every step but never click Submit."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on the console."),
    preferences: Optional[Path] = PreferencesOption,
    resume: Optional[Path] = ResumeOption,
) -> None:
    """Search, filter, and apply to every matching posting."""
    config.setup_logging(verbose)
    config.ensure_dirs()
    config.load_env()

    try:
        profile = config.load_profile(preferences, resume)
        llm_config = resolve_llm_config()
    except ConfigError as e:
        console.print(f"[red bold]Config error:[/red bold] {e}")
        raise typer.Exit(code=1)

    settings = profile.settings
    if dry_run:
        settings = settings.model_copy(update={"dry_run": True})
    console.print(
        f"[dim]LLM: {llm_config.provider} | Model: {llm_config.model}"
        + (" | dry run" if settings.dry_run else "")
        + "[/dim]"
    )

    try:
        batches = asyncio.run(_run_pipeline(profile, llm_config, settings, headless))
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[red bold]Stopped[/red bold]")
        raise typer.Exit(code=130)

    if not batches:
        console.print("[yellow]No postings found[/yellow]")
        raise typer.Exit(code=0)

    console.print(_summary_table(batches))
    processed = sum(len(b.processed) for b in batches)
    failed = sum(len(b.unprocessed) for b in batches)
    console.print(f"\nApplied: [green]{processed}[/green]  Failed: [red]{failed}[/red]")
    console.print(f"[dim]Results in {config.data_dir()}[/dim]")


# ---------------------------------------------------------------------------
# check-config
# ---------------------------------------------------------------------------


@app.command("check-config")
def check_config(
    preferences: Optional[Path] = PreferencesOption,
    resume: Optional[Path] = ResumeOption,
) -> None:
    """Validate preferences, resume profile, and LLM provider settings."""
    config.load_env()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Check", style="dim")
    table.add_column("Status")
    ok = True

    try:
        profile = config.load_profile(preferences, resume)
        prefs = profile.preferences
        table.add_row("Profile", "[green]OK[/green]")
        table.add_row("Resume file", prefs.resume_path)
        table.add_row("Positions", ", ".join(prefs.positions))
        table.add_row("Locations", ", ".join(prefs.locations))
        table.add_row("Title blacklist", str(len(prefs.title_blacklist)))
        table.add_row("Company blacklist", str(len(prefs.company_blacklist)))
    except ConfigError as e:
        ok = False
        table.add_row("Profile", f"[red]{e}[/red]")

    try:
        llm_config = resolve_llm_config()
        table.add_row("LLM", f"[green]{llm_config.provider}[/green] ({llm_config.model})")
    except ConfigError as e:
        ok = False
        table.add_row("LLM", f"[red]{e}[/red]")

    console.print(table)
    raise typer.Exit(code=0 if ok else 1)


# ---------------------------------------------------------------------------
# match
# ---------------------------------------------------------------------------


@app.command()
def match(
    phrases: List[str] = typer.Argument(..., help="Blacklist phrases to test"),
    text: str = typer.Option(..., "--text", "-t", help="Title or company name to test against"),
) -> None:
    """Show whether any blacklist phrase matches a text."""
    hit = first_match(compile_patterns(phrases), text)
    if hit is None:
        console.print(f"[green]No match[/green] for {text!r}")
    else:
        console.print(f"[red]Blacklisted[/red]: {text!r} matched {hit.phrase!r}")


if __name__ == "__main__":
    app()
