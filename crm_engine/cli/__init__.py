"""CRM engine CLI.

This module provides a command-line interface for the intent engine. It
includes commands for executing intents against a local record store,
computing project budgets and margins and listing stored records.
"""

from typing import Optional

import click

from crm_engine.cli.commands.budget import budget
from crm_engine.cli.commands.execute import execute_intent
from crm_engine.cli.commands.margins import margins
from crm_engine.cli.commands.records import help_text, list_records
from crm_engine.config.logging_config import LoggingConfig, configure_logging
from crm_engine.config.settings import get_config

__version__ = "1.0.0"


@click.group(help="CRM engine CLI - Execute structured CRM intents and compute budgets")
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Enable logging to stderr at this level",
)
def cli(log_level: Optional[str]):
    """CRM engine CLI main entry point."""
    if log_level:
        logging_config = LoggingConfig.from_env(get_config())
        logging_config.log_level = log_level.upper()
        configure_logging(logging_config)


# Register commands
cli.add_command(execute_intent)
cli.add_command(budget)
cli.add_command(margins)
cli.add_command(list_records)
cli.add_command(help_text)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
