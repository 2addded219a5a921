"""SQLAlchemy Core table definitions for the invoicectl ledger.

``invoices`` holds one row per invoice (never deleted). ``registry_state``
is a single row (``id = 1``) carrying the owner and the block height.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Index, Integer, MetaData, Table, Text

metadata = MetaData()

STATE_ROW_ID = 1

invoices = Table(
    "invoices",
    metadata,
    Column("invoice_id", Text, primary_key=True),
    Column("supplier", Text, nullable=False),
    Column("buyer", Text, nullable=False),
    Column("amount", Integer, nullable=False),
    Column("due_date", Integer, nullable=False),
    Column("status", Text, nullable=False),  # pending | certified
    Column("created_at", Integer, nullable=False),  # block height at creation
    Index("ix_invoices_status", "status"),
)

registry_state = Table(
    "registry_state",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("owner", Text, nullable=False),
    Column("block_height", Integer, nullable=False, default=0, server_default="0"),
    CheckConstraint(f"id = {STATE_ROW_ID}", name="ck_registry_state_single_row"),
    CheckConstraint("block_height >= 0", name="ck_registry_state_height"),
)
