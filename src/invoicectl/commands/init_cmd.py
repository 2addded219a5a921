"""Command: ledger initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from invoicectl.commands._base import InvoiceCommand

if TYPE_CHECKING:
    from invoicectl.commands._context import AppContext

_INIT_EXAMPLES = """\
  invoicectl init --owner ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM
  invoicectl init --owner registry-admin --start-height 100
  invoicectl --json init   # owner taken from [registry] owner in invoicectl.toml"""


@click.command("init", cls=InvoiceCommand, examples=_INIT_EXAMPLES)
@click.option("--owner", default=None, help="Initial registry owner identity.")
@click.option(
    "--start-height",
    type=click.IntRange(min=0),
    default=None,
    help="Initial block height of the ledger clock.",
)
@click.pass_obj
def init_cmd(app: AppContext, owner: str | None, start_height: int | None) -> None:
    """Create a new invoice ledger."""
    from invoicectl.infrastructure.ledger import Ledger, LedgerError
    from invoicectl.services.result import ServiceResult

    owner = owner or app.settings.registry.owner
    if not owner:
        msg = "No owner given. Pass --owner or set [registry] owner in invoicectl.toml."
        raise click.UsageError(msg)
    if start_height is None:
        start_height = app.settings.clock.start_height

    path = app.settings.database_path
    try:
        ledger = Ledger.initialize(
            path,
            owner=owner,
            start_height=start_height,
            lock_timeout=app.settings.registry.lock_timeout,
        )
    except LedgerError as exc:
        raise click.ClickException(str(exc)) from exc
    ledger.close()

    app.emit(
        ServiceResult(
            ok=True,
            op="init",
            data={"database": str(path), "owner": owner, "block_height": start_height},
        )
    )
