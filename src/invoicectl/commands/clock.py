"""Command group: the ledger's block-height clock."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from invoicectl.commands._base import InvoiceGroup

if TYPE_CHECKING:
    from invoicectl.commands._context import AppContext


@click.group(
    cls=InvoiceGroup,
    examples="""\
  invoicectl clock show
  invoicectl clock advance 10""",
)
def clock() -> None:
    """Inspect or advance the block height used as invoice timestamps."""


@clock.command(
    "show",
    examples="""\
  invoicectl clock show
  invoicectl -q clock show   # prints the height only""",
)
@click.pass_obj
def clock_show(app: AppContext) -> None:
    """Show the current block height."""
    from invoicectl.services.result import ServiceResult

    app.emit(
        ServiceResult(
            ok=True,
            op="clock_show",
            data={"block_height": app.ledger.block_height()},
        )
    )


@clock.command(
    "advance",
    examples="""\
  invoicectl clock advance
  invoicectl clock advance 25""",
)
@click.argument("blocks", type=click.IntRange(min=0), default=1)
@click.pass_obj
def clock_advance(app: AppContext, blocks: int) -> None:
    """Advance the block height by BLOCKS (default 1)."""
    from invoicectl.services.result import ServiceResult

    height = app.advance_clock(blocks)
    app.emit(
        ServiceResult(
            ok=True,
            op="clock_advance",
            data={"blocks": blocks, "block_height": height},
        )
    )
