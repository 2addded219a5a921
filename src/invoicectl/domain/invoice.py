"""Invoice record model.

Invoices are frozen: every attribute except ``status`` is fixed at
creation, and the status change is expressed as a new instance built by
:meth:`Invoice.certified`.
"""

from __future__ import annotations

from pydantic import BaseModel

from invoicectl.domain.lifecycle import InvoiceStatus


class Invoice(BaseModel):
    """A supplier/buyer obligation tracked through pending → certified.

    Attributes:
        invoice_id: Opaque unique key within the registry.
        supplier: Identity that issued the invoice.
        buyer: Identity allowed to certify the invoice.
        amount: Invoiced amount. Not validated by the registry.
        due_date: Counter value the invoice falls due at. Not validated.
        status: Current lifecycle status.
        created_at: Counter value at creation.
    """

    model_config = {"frozen": True}

    invoice_id: str
    supplier: str
    buyer: str
    amount: int
    due_date: int
    status: InvoiceStatus = InvoiceStatus.PENDING
    created_at: int

    @property
    def is_certified(self) -> bool:
        return self.status == InvoiceStatus.CERTIFIED

    def certified(self) -> Invoice:
        """Return a copy of this invoice with status ``certified``."""
        return self.model_copy(update={"status": InvoiceStatus.CERTIFIED})

    def to_dict(self) -> dict[str, object]:
        """JSON-friendly dump used in ServiceResult payloads."""
        return self.model_dump(mode="json")
