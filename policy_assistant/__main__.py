"""Entry point for ``python -m policy_assistant``."""

from .cli import cli

cli()
