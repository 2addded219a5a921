"""Subcommand modules for invoicectl.

Provides register_commands() which uses deferred imports to keep
``invoicectl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from invoicectl.commands.clock import clock
    from invoicectl.commands.owner import owner

    cli.add_command(owner)
    cli.add_command(clock)

    # --- Standalone commands ---
    from invoicectl.commands.init_cmd import init_cmd
    from invoicectl.commands.invoice import certify, create, get, is_certified, list_cmd

    cli.add_command(init_cmd)
    cli.add_command(create)
    cli.add_command(certify)
    cli.add_command(get)
    cli.add_command(is_certified)
    cli.add_command(list_cmd)
