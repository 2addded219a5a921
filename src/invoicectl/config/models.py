"""Section models for ``invoicectl.toml``.

Every field has a default, so the file only carries overrides. A fresh
ledger needs nothing beyond ``[registry] owner``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class RegistryConfig(BaseModel):
    """[registry] section.

    ``database`` is resolved against the directory holding
    ``invoicectl.toml`` unless it is absolute. ``lock_timeout`` is how many
    seconds a command waits for a concurrent writer.
    """

    model_config = {"frozen": True}

    owner: str | None = None
    database: str = ".invoicectl/registry.db"
    lock_timeout: float = Field(default=5.0, gt=0)


class ClockConfig(BaseModel):
    """[clock] section: block height a new ledger starts at."""

    model_config = {"frozen": True}

    start_height: int = Field(default=0, ge=0)
