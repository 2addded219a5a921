"""Commands: invoice creation, certification, and lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from invoicectl.commands._base import InvoiceCommand

if TYPE_CHECKING:
    from invoicectl.commands._context import AppContext


@click.command(
    cls=InvoiceCommand,
    examples="""\
  invoicectl --as SUPPLIER create INV-001 --supplier SUPPLIER --buyer BUYER \\
      --amount 1000 --due-date 200
  invoicectl --as OWNER create INV-002 --supplier S --buyer B --amount 0 --due-date 150""",
)
@click.argument("invoice_id")
@click.option("--supplier", required=True, help="Supplier identity.")
@click.option("--buyer", required=True, help="Buyer identity (may certify).")
@click.option("--amount", type=click.IntRange(min=0), required=True, help="Invoice amount.")
@click.option(
    "--due-date",
    "due_date",
    type=click.IntRange(min=0),
    required=True,
    help="Block height the invoice falls due at.",
)
@click.pass_obj
def create(
    app: AppContext,
    invoice_id: str,
    supplier: str,
    buyer: str,
    amount: int,
    due_date: int,
) -> None:
    """Create a pending invoice (caller must be the supplier or the owner)."""
    caller = app.require_caller()
    with app.registry() as registry:
        result = registry.create_invoice(
            invoice_id, supplier, buyer, amount, due_date, caller=caller
        )
    app.emit(result)


@click.command(
    cls=InvoiceCommand,
    examples="""\
  invoicectl --as BUYER certify INV-001
  invoicectl --json --as OWNER certify INV-001""",
)
@click.argument("invoice_id")
@click.pass_obj
def certify(app: AppContext, invoice_id: str) -> None:
    """Certify a pending invoice (caller must be the buyer or the owner)."""
    caller = app.require_caller()
    with app.registry() as registry:
        result = registry.certify_invoice(invoice_id, caller=caller)
    app.emit(result)


@click.command(
    cls=InvoiceCommand,
    examples="""\
  invoicectl get INV-001
  invoicectl --json get INV-001""",
)
@click.argument("invoice_id")
@click.pass_obj
def get(app: AppContext, invoice_id: str) -> None:
    """Show an invoice. Reading is open to any identity."""
    from invoicectl.services.query import QueryService

    with app.snapshot() as registry:
        result = QueryService(registry).get(invoice_id)
    app.emit(result)


@click.command(
    "is-certified",
    cls=InvoiceCommand,
    examples="""\
  invoicectl is-certified INV-001
  invoicectl -q is-certified INV-001   # prints true/false""",
)
@click.argument("invoice_id")
@click.pass_obj
def is_certified(app: AppContext, invoice_id: str) -> None:
    """Report whether an invoice exists and is certified."""
    from invoicectl.services.query import QueryService

    with app.snapshot() as registry:
        result = QueryService(registry).is_certified(invoice_id)
    app.emit(result)


@click.command(
    "list",
    cls=InvoiceCommand,
    examples="""\
  invoicectl list
  invoicectl list --status pending
  invoicectl -q list --status certified""",
)
@click.option(
    "--status",
    type=click.Choice(["pending", "certified"]),
    default=None,
    help="Only list invoices in this status.",
)
@click.pass_obj
def list_cmd(app: AppContext, status: str | None) -> None:
    """List invoices in creation order."""
    from invoicectl.domain.lifecycle import InvoiceStatus
    from invoicectl.services.query import QueryService

    with app.snapshot() as registry:
        result = QueryService(registry).list_items(
            status=InvoiceStatus(status) if status else None
        )
    app.emit(result)
