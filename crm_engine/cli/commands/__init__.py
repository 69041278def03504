"""CLI commands."""

from crm_engine.cli.commands.budget import budget
from crm_engine.cli.commands.execute import execute_intent
from crm_engine.cli.commands.margins import margins
from crm_engine.cli.commands.records import help_text, list_records

__all__ = ["budget", "execute_intent", "help_text", "list_records", "margins"]
