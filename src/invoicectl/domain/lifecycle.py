"""Invoice status lifecycle.

Two machine states: ``pending`` on creation, ``certified`` after the buyer
(or the registry owner) confirms the invoice. Certified is terminal.
"""

from __future__ import annotations

from enum import StrEnum


class InvoiceStatus(StrEnum):
    """Machine status for invoices."""

    PENDING = "pending"
    CERTIFIED = "certified"


# --- Transition map ---

INVOICE_TRANSITIONS: dict[str, list[str]] = {
    "pending": ["certified"],
    "certified": [],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = INVOICE_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed

