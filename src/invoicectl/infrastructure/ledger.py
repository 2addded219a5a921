"""Ledger: SQLite snapshot store for an :class:`InvoiceRegistry`.

The registry itself is purely in-memory. A CLI process is short-lived, so
each mutating command loads the registry inside one write transaction,
runs a single operation, and writes the resulting state back before the
transaction commits:

    with ledger.registry() as registry:
        result = registry.certify_invoice("INV-001", caller=buyer)

The write transaction holds SQLite's write lock from the first read, so a
second command waits for the first to commit and then loads its result.
Read-only commands use :meth:`Ledger.snapshot`, which takes no write lock.

Invoices are never deleted, so writing back means inserting new invoice
rows, updating changed statuses and storing the owner if it changed.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

from sqlalchemy import insert, select, update
from sqlalchemy.exc import OperationalError

from invoicectl.domain.invoice import Invoice
from invoicectl.domain.lifecycle import InvoiceStatus
from invoicectl.infrastructure.clock import BlockClock
from invoicectl.infrastructure.database.engine import (
    DEFAULT_LOCK_TIMEOUT,
    create_db_engine,
    for_writes,
    init_database,
)
from invoicectl.infrastructure.database.schema import invoices
from invoicectl.infrastructure.database.state import (
    advance_block_height,
    read_state,
    seed_state,
    write_owner,
)
from invoicectl.services.registry import InvoiceRegistry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for ledger storage failures."""


class LedgerNotInitializedError(LedgerError):
    """The ledger file or its state row does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"No invoice ledger at {path}. Run 'invoicectl init' first.")
        self.path = path


class LedgerAlreadyInitializedError(LedgerError):
    """``initialize`` was called on a ledger that is already seeded."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Invoice ledger already initialized at {path}")
        self.path = path


class LedgerBusyError(LedgerError):
    """Another command held the write lock for longer than the lock timeout."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Invoice ledger at {path} is locked by another command; try again.")
        self.path = path


class Ledger:
    """Persistent home of a single invoice registry.

    Open an existing ledger with ``Ledger(path)``; create one with
    :meth:`Ledger.initialize`. *lock_timeout* is how many seconds a write
    waits for a concurrent writer before raising :class:`LedgerBusyError`.
    """

    def __init__(self, path: Path, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self._path = path
        if not path.is_file():
            raise LedgerNotInitializedError(path)
        self._engine: Engine = create_db_engine(path, lock_timeout=lock_timeout)
        self._writer = for_writes(self._engine)
        with self._engine.connect() as conn:
            if read_state(conn) is None:
                self._engine.dispose()
                raise LedgerNotInitializedError(path)

    @classmethod
    def initialize(
        cls,
        path: Path,
        *,
        owner: str,
        start_height: int = 0,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> Ledger:
        """Create the ledger database and seed owner and block height.

        Raises:
            LedgerAlreadyInitializedError: If the ledger already has state.
            ValueError: If *start_height* is negative.
        """
        if start_height < 0:
            msg = f"Block height cannot be negative: {start_height}"
            raise ValueError(msg)
        engine = init_database(path, lock_timeout=lock_timeout)
        try:
            with for_writes(engine).begin() as conn:
                if read_state(conn) is not None:
                    raise LedgerAlreadyInitializedError(path)
                seed_state(conn, owner, start_height)
        finally:
            engine.dispose()
        logger.debug("Initialized ledger at %s (owner=%s, height=%d)", path, owner, start_height)
        return cls(path, lock_timeout=lock_timeout)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @contextmanager
    def registry(self) -> Iterator[InvoiceRegistry]:
        """Load the registry under the write lock and persist it on normal exit.

        If the block raises, the transaction rolls back and nothing is stored.
        """
        with self._write() as conn:
            registry, snapshot = _load(conn, self._path)
            yield registry
            _store(conn, registry, snapshot)

    @contextmanager
    def snapshot(self) -> Iterator[InvoiceRegistry]:
        """Load the committed registry for reading; changes made to it are discarded."""
        with self._engine.connect() as conn:
            registry, _ = _load(conn, self._path)
        yield registry

    def block_height(self) -> int:
        with self._engine.connect() as conn:
            state = read_state(conn)
        if state is None:
            raise LedgerNotInitializedError(self._path)
        return state.block_height

    def advance_clock(self, blocks: int = 1) -> int:
        """Advance the stored block height by *blocks*; returns the new height."""
        with self._write() as conn:
            height = advance_block_height(conn, blocks)
        logger.debug("Advanced clock by %d to %d", blocks, height)
        return height

    def close(self) -> None:
        """Dispose of the database engine."""
        self._engine.dispose()

    @contextmanager
    def _write(self) -> Iterator[Connection]:
        with self._writer.connect() as conn:
            try:
                txn = conn.begin()
            except OperationalError as exc:
                raise LedgerBusyError(self._path) from exc
            with txn:
                yield conn


# ---------------------------------------------------------------------------
# Snapshot load / store
# ---------------------------------------------------------------------------


class _Snapshot(NamedTuple):
    """State as loaded, diffed against the registry on store."""

    owner: str
    statuses: dict[str, InvoiceStatus]


def _load(conn: Connection, path: Path) -> tuple[InvoiceRegistry, _Snapshot]:
    """Build a registry from rows, plus the snapshot used to diff on store."""
    state = read_state(conn)
    if state is None:
        raise LedgerNotInitializedError(path)

    rows = conn.execute(select(invoices)).all()
    loaded = [
        Invoice(
            invoice_id=row.invoice_id,
            supplier=row.supplier,
            buyer=row.buyer,
            amount=row.amount,
            due_date=row.due_date,
            status=InvoiceStatus(row.status),
            created_at=row.created_at,
        )
        for row in rows
    ]
    registry = InvoiceRegistry(
        state.owner,
        clock=BlockClock(state.block_height),
        invoices=loaded,
    )
    return registry, _Snapshot(state.owner, {inv.invoice_id: inv.status for inv in loaded})


def _store(
    conn: Connection,
    registry: InvoiceRegistry,
    snapshot: _Snapshot,
) -> None:
    inserted = updated = 0
    for inv in registry.list_invoices():
        previous = snapshot.statuses.get(inv.invoice_id)
        if previous is None:
            conn.execute(insert(invoices).values(**inv.model_dump(mode="json")))
            inserted += 1
        elif previous != inv.status:
            conn.execute(
                update(invoices)
                .where(invoices.c.invoice_id == inv.invoice_id)
                .values(status=str(inv.status))
            )
            updated += 1
    if registry.owner != snapshot.owner:
        write_owner(conn, registry.owner)
    if inserted or updated:
        logger.debug("Stored registry: %d inserted, %d updated", inserted, updated)
