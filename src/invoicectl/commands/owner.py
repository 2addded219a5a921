"""Command group: registry ownership."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from invoicectl.commands._base import InvoiceGroup

if TYPE_CHECKING:
    from invoicectl.commands._context import AppContext


@click.group(
    cls=InvoiceGroup,
    examples="""\
  invoicectl owner show
  invoicectl --as CURRENT_OWNER owner transfer NEW_OWNER""",
)
def owner() -> None:
    """Inspect or transfer the registry owner role."""


@owner.command(
    examples="""\
  invoicectl owner show
  invoicectl -q owner show""",
)
@click.pass_obj
def show(app: AppContext) -> None:
    """Show the current registry owner."""
    from invoicectl.services.query import QueryService

    with app.snapshot() as registry:
        result = QueryService(registry).owner()
    app.emit(result)


@owner.command(
    examples="""\
  invoicectl --as CURRENT_OWNER owner transfer NEW_OWNER""",
)
@click.argument("new_owner")
@click.pass_obj
def transfer(app: AppContext, new_owner: str) -> None:
    """Transfer ownership to NEW_OWNER (caller must be the current owner)."""
    caller = app.require_caller()
    with app.registry() as registry:
        result = registry.transfer_ownership(new_owner, caller=caller)
    app.emit(result)
