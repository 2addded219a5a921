"""Registry state row: owner identity and block height.

The caller owns the transaction. Pass a ``Connection`` obtained from
``engine.begin()`` so state reads and writes participate in the same
atomic transaction as the surrounding invoice writes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from sqlalchemy import insert, select, update

from invoicectl.infrastructure.database.schema import STATE_ROW_ID, registry_state

if TYPE_CHECKING:
    from sqlalchemy import Connection


class RegistryStateRow(NamedTuple):
    owner: str
    block_height: int


def read_state(conn: Connection) -> RegistryStateRow | None:
    """Return the state row, or None if the ledger was never seeded."""
    row = conn.execute(
        select(registry_state.c.owner, registry_state.c.block_height).where(
            registry_state.c.id == STATE_ROW_ID
        )
    ).first()
    if row is None:
        return None
    return RegistryStateRow(owner=row.owner, block_height=row.block_height)


def seed_state(conn: Connection, owner: str, block_height: int = 0) -> None:
    """Insert the single state row. Fails with IntegrityError if it already exists."""
    conn.execute(
        insert(registry_state).values(id=STATE_ROW_ID, owner=owner, block_height=block_height)
    )


def write_owner(conn: Connection, owner: str) -> None:
    conn.execute(
        update(registry_state).where(registry_state.c.id == STATE_ROW_ID).values(owner=owner)
    )


def advance_block_height(conn: Connection, blocks: int) -> int:
    """Add *blocks* to the stored block height and return the new value.

    Args:
        conn: Active SQLAlchemy connection (caller owns the transaction).
        blocks: Number of blocks to advance by; must be non-negative.

    Raises:
        ValueError: If *blocks* is negative (the clock never moves back).
    """
    if blocks < 0:
        msg = f"Clock cannot move backwards (blocks={blocks})"
        raise ValueError(msg)

    current: int = conn.execute(
        select(registry_state.c.block_height).where(registry_state.c.id == STATE_ROW_ID)
    ).scalar_one()

    new_height = current + blocks
    conn.execute(
        update(registry_state)
        .where(registry_state.c.id == STATE_ROW_ID)
        .values(block_height=new_height)
    )
    return new_height
