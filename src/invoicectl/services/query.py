"""QueryService — read-side wrappers around the registry.

The registry's reads return plain values (an Invoice or None, a bool).
This service wraps them in ServiceResult so the CLI can render every
command the same way. Reads never fail: an absent invoice is reported
as ``data["invoice"] is None``, not as an error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from invoicectl.services.result import ServiceResult
from invoicectl.services.telemetry import traced

if TYPE_CHECKING:
    from invoicectl.domain.lifecycle import InvoiceStatus
    from invoicectl.services.registry import InvoiceRegistry


class QueryService:
    """Read operations over an :class:`InvoiceRegistry`."""

    def __init__(self, registry: InvoiceRegistry) -> None:
        self._registry = registry

    @traced
    def get(self, invoice_id: str) -> ServiceResult:
        invoice = self._registry.get_invoice(invoice_id)
        return ServiceResult(
            ok=True,
            op="get_invoice",
            data={
                "invoice_id": invoice_id,
                "invoice": invoice.to_dict() if invoice is not None else None,
            },
        )

    @traced
    def is_certified(self, invoice_id: str) -> ServiceResult:
        return ServiceResult(
            ok=True,
            op="is_certified",
            data={
                "invoice_id": invoice_id,
                "certified": self._registry.is_certified(invoice_id),
            },
        )

    @traced
    def list_items(self, *, status: InvoiceStatus | None = None) -> ServiceResult:
        """List invoices in creation order, optionally filtered by status."""
        items = [inv.to_dict() for inv in self._registry.list_invoices(status=status)]
        data: dict[str, object] = {"count": len(items), "items": items}
        if status is not None:
            data["status"] = str(status)
        return ServiceResult(ok=True, op="list_invoices", data=data)

    @traced
    def owner(self) -> ServiceResult:
        return ServiceResult(ok=True, op="owner", data={"owner": self._registry.owner})
