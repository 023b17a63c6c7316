"""CLI command implementations — all commands delegate to HybridScorer."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import IO

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from phishscore.credentials import EnvCredentialStore
from phishscore.processing.rules import matched_rules
from phishscore.processing.scorer import HybridScorer
from phishscore.processing.types import EmailInput, RiskLevel, ScoringResult
from phishscore.remote.client import RemoteClassifier
from phishscore.remote.transport import HttpxTransport
from phishscore.remote.types import RemoteConfig

logger = logging.getLogger(__name__)
console = Console(width=200)

_RISK_STYLE: dict[RiskLevel, str] = {
    RiskLevel.HIGH: "bold red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
}


@asynccontextmanager
async def scoring_session(config: RemoteConfig) -> AsyncIterator[HybridScorer]:
    """Open a transport, initialise a scorer on it, and close it afterwards."""
    async with HttpxTransport(timeout=config.timeout) as transport:
        classifier = RemoteClassifier(
            transport, config.models, max_input_chars=config.max_input_chars
        )
        scorer = HybridScorer(classifier, EnvCredentialStore())
        await scorer.initialize()
        yield scorer


def _print_result(email: EmailInput, result: ScoringResult, verbose: bool = False) -> None:
    style = _RISK_STYLE[result.risk_level]
    lines = [
        f"[bold]From:[/bold] {escape(email.sender) or '(none)'}",
        f"[bold]Subject:[/bold] {escape(email.subject) or '(none)'}",
        "",
        f"Score: [{style}]{result.score}[/{style}]  "
        f"Risk: [{style}]{result.risk_level.value}[/{style}]  "
        f"({result.confidence_text})",
        "",
        *(f"  • {escape(reason)}" for reason in result.reasons),
    ]
    if verbose:
        rules = ", ".join(matched_rules(email)) or "none"
        lines += ["", f"[dim]Rules matched: {rules}[/dim]"]
    mode = "AI model" if result.used_remote else "pattern detection"
    console.print(
        Panel("\n".join(lines), title=f"[bold]Phishing score[/bold] — {mode}", border_style=style)
    )


# ── score ───────────────────────────────────────────────────────────────────────


@click.command()
@click.option("--sender", default="", help="Sender address.")
@click.option("--subject", default="", help="Subject line.")
@click.option("--snippet", default="", help="Short body snippet.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_obj
def score(config: RemoteConfig, sender: str, subject: str, snippet: str, as_json: bool) -> None:
    """Score a single email."""
    email = EmailInput(sender=sender, subject=subject, snippet=snippet)
    result = asyncio.run(_score_async(config, email))
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _print_result(email, result, verbose=click.get_current_context().meta.get("verbose", False))


async def _score_async(config: RemoteConfig, email: EmailInput) -> ScoringResult:
    async with scoring_session(config) as scorer:
        return await scorer.score(email)


# ── batch ───────────────────────────────────────────────────────────────────────


def _load_emails(fp: IO[str]) -> list[EmailInput]:
    try:
        data = json.load(fp)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise click.ClickException("Expected a JSON array of email objects")
    emails = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise click.ClickException(f"Entry {i} is not an object")
        emails.append(EmailInput.from_dict(item))
    return emails


@click.command()
@click.argument("file", type=click.File("r"))
@click.option("--json", "as_json", is_flag=True, help="Print results as a JSON array.")
@click.pass_obj
def batch(config: RemoteConfig, file: IO[str], as_json: bool) -> None:
    """Score every email in FILE (a JSON array of {sender, subject, snippet})."""
    emails = _load_emails(file)
    if not emails:
        console.print("[yellow]No emails to score.[/yellow]")
        return

    results = asyncio.run(_batch_async(config, emails))

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
        return

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=3)
    table.add_column("From", max_width=30)
    table.add_column("Subject", max_width=40)
    table.add_column("Score", width=6)
    table.add_column("Risk", width=8)
    table.add_column("Reasons", max_width=60)

    for i, (email, result) in enumerate(zip(emails, results), start=1):
        style = _RISK_STYLE[result.risk_level]
        table.add_row(
            str(i),
            escape(email.sender),
            escape(email.subject),
            str(result.score),
            f"[{style}]{result.risk_level.value}[/{style}]",
            escape("; ".join(result.reasons)),
        )

    flagged = sum(1 for r in results if r.risk_level is RiskLevel.HIGH)
    console.print(table)
    console.print(f"{len(results)} scored, [bold red]{flagged}[/bold red] high risk.")


async def _batch_async(config: RemoteConfig, emails: list[EmailInput]) -> list[ScoringResult]:
    async with scoring_session(config) as scorer:
        return list(await asyncio.gather(*(scorer.score(e) for e in emails)))


# ── check ───────────────────────────────────────────────────────────────────────


@click.command()
@click.pass_obj
def check(config: RemoteConfig) -> None:
    """Report whether the hosted model is reachable and which one is active."""
    asyncio.run(_check_async(config))


async def _check_async(config: RemoteConfig) -> None:
    async with scoring_session(config) as scorer:
        state = scorer.state
        if state.availability:
            model = config.models[state.active_model_index]
            console.print(f"[green]Remote mode[/green] — using [bold]{model.name}[/bold]")
            console.print(f"  [dim]{model.endpoint}[/dim]")
        elif not state.credential:
            console.print(
                "[yellow]Pattern detection mode[/yellow] — no API key set "
                "(HUGGINGFACE_API_KEY)."
            )
        else:
            console.print(
                "[yellow]Pattern detection mode[/yellow] — all models unavailable."
            )
