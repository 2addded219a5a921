"""SQLite database engine, schema, and registry state via SQLAlchemy Core."""

from invoicectl.infrastructure.database.engine import (
    DEFAULT_LOCK_TIMEOUT,
    create_db_engine,
    for_writes,
    init_database,
)
from invoicectl.infrastructure.database.schema import invoices, metadata, registry_state
from invoicectl.infrastructure.database.state import (
    RegistryStateRow,
    advance_block_height,
    read_state,
    seed_state,
    write_owner,
)

__all__ = [
    "DEFAULT_LOCK_TIMEOUT",
    "RegistryStateRow",
    "advance_block_height",
    "create_db_engine",
    "for_writes",
    "init_database",
    "invoices",
    "metadata",
    "read_state",
    "registry_state",
    "seed_state",
    "write_owner",
]
