"""InvoiceRegistry — the invoice certification state machine.

Owns the registry owner, the invoice mapping and the clock used to stamp
``created_at``. All mutation goes through three guarded operations:

    [no invoice] --create_invoice--> pending --certify_invoice--> certified
    owner        --transfer_ownership--> new owner

Guards are evaluated in a fixed order and the first failing guard decides
the error. Failed operations leave state untouched. Reads are unrestricted.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from invoicectl.domain.invoice import Invoice
from invoicectl.domain.lifecycle import InvoiceStatus, is_valid_transition
from invoicectl.domain.types import Clock, Identity
from invoicectl.services.result import ErrorCode, ServiceResult
from invoicectl.services.telemetry import get_current_span, traced

logger = logging.getLogger(__name__)


class InvoiceRegistry:
    """In-memory ledger of invoices plus the guarded transitions over it.

    Args:
        owner: Initial registry owner.
        clock: Zero-argument callable returning the current counter value.
        invoices: Existing invoices to load (e.g. from a persisted ledger).

    One ``RLock`` covers the owner and the mapping together, so a host may
    share a registry between threads. Returned invoices are frozen and can
    be read without holding the lock.
    """

    def __init__(
        self,
        owner: Identity,
        *,
        clock: Clock,
        invoices: Iterable[Invoice] = (),
    ) -> None:
        self._owner = owner
        self._clock = clock
        self._invoices: dict[str, Invoice] = {inv.invoice_id: inv for inv in invoices}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def owner(self) -> Identity:
        """The current registry owner."""
        return self._owner

    def is_owner(self, identity: Identity) -> bool:
        return identity == self._owner

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @traced
    def create_invoice(
        self,
        invoice_id: str,
        supplier: Identity,
        buyer: Identity,
        amount: int,
        due_date: int,
        *,
        caller: Identity,
    ) -> ServiceResult:
        """Register a new pending invoice.

        Only the supplier named on the invoice or the owner may create it.
        ``amount`` and ``due_date`` are stored as supplied.
        """
        op = "create_invoice"
        _annotate(invoice_id=invoice_id, caller=caller)

        with self._lock:
            if caller != supplier and caller != self._owner:
                return _reject(op, ErrorCode.UNAUTHORIZED, invoice_id, caller)
            if invoice_id in self._invoices:
                return _reject(op, ErrorCode.ALREADY_EXISTS, invoice_id, caller)

            self._invoices[invoice_id] = Invoice(
                invoice_id=invoice_id,
                supplier=supplier,
                buyer=buyer,
                amount=amount,
                due_date=due_date,
                status=InvoiceStatus.PENDING,
                created_at=self._clock(),
            )

        logger.debug("Created invoice %s (supplier=%s, buyer=%s)", invoice_id, supplier, buyer)
        return ServiceResult(ok=True, op=op)

    @traced
    def certify_invoice(self, invoice_id: str, *, caller: Identity) -> ServiceResult:
        """Move a pending invoice to certified.

        Existence is checked before authorization, so an unknown ID is
        always NOT_FOUND whoever asks.
        """
        op = "certify_invoice"
        _annotate(invoice_id=invoice_id, caller=caller)

        with self._lock:
            invoice = self._invoices.get(invoice_id)
            if invoice is None:
                return _reject(op, ErrorCode.NOT_FOUND, invoice_id, caller)
            if caller != invoice.buyer and caller != self._owner:
                return _reject(op, ErrorCode.UNAUTHORIZED, invoice_id, caller)
            if not is_valid_transition(invoice.status, InvoiceStatus.CERTIFIED):
                return _reject(op, ErrorCode.INVALID_STATUS, invoice_id, caller)

            self._invoices[invoice_id] = invoice.certified()

        logger.debug("Certified invoice %s by %s", invoice_id, caller)
        return ServiceResult(ok=True, op=op)

    @traced
    def transfer_ownership(self, new_owner: Identity, *, caller: Identity) -> ServiceResult:
        """Hand the owner role to *new_owner*. Only the current owner may do this."""
        op = "transfer_ownership"
        _annotate(caller=caller)

        with self._lock:
            if caller != self._owner:
                return _reject(op, ErrorCode.UNAUTHORIZED, None, caller)
            previous, self._owner = self._owner, new_owner

        logger.debug("Ownership transferred from %s to %s", previous, new_owner)
        return ServiceResult(ok=True, op=op)

    # ------------------------------------------------------------------
    # Reads (no authorization: read access is open by policy)
    # ------------------------------------------------------------------

    def get_invoice(self, invoice_id: str) -> Invoice | None:
        """Return the invoice for *invoice_id*, or None if it was never created."""
        with self._lock:
            return self._invoices.get(invoice_id)

    def is_certified(self, invoice_id: str) -> bool:
        invoice = self.get_invoice(invoice_id)
        return invoice is not None and invoice.is_certified

    def list_invoices(self, *, status: InvoiceStatus | None = None) -> list[Invoice]:
        """All invoices in creation order, optionally filtered by *status*."""
        with self._lock:
            items = list(self._invoices.values())
        if status is not None:
            items = [inv for inv in items if inv.status == status]
        return sorted(items, key=lambda inv: (inv.created_at, inv.invoice_id))

    def __len__(self) -> int:
        with self._lock:
            return len(self._invoices)

    def __contains__(self, invoice_id: object) -> bool:
        with self._lock:
            return invoice_id in self._invoices


def _reject(
    op: str,
    code: ErrorCode,
    invoice_id: str | None,
    caller: Identity,
) -> ServiceResult:
    logger.debug("%s rejected: %s (invoice=%s, caller=%s)", op, code, invoice_id, caller)
    return ServiceResult.failure(op, code)


def _annotate(**values: str) -> None:
    span = get_current_span()
    if span is not None:
        for key, value in values.items():
            span.annotate(key, value)
