"""CLI entry point for the hybrid phishing scorer."""

import logging

import click
from dotenv import load_dotenv

from phishscore.remote.types import RemoteConfig

logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Phishing-likelihood scoring — score, batch, and check commands."""
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )
    ctx.meta["verbose"] = verbose
    ctx.obj = RemoteConfig.from_env()


# Import and register commands after cli is defined to avoid circular imports.
from phishscore.cli.commands import batch, check, score  # noqa: E402

cli.add_command(score)
cli.add_command(batch)
cli.add_command(check)
