"""Shared pytest fixtures and test helpers for invoicectl tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from invoicectl.infrastructure.clock import BlockClock
from invoicectl.infrastructure.ledger import Ledger
from invoicectl.services.registry import InvoiceRegistry
from invoicectl.services.telemetry import disable_telemetry

# Identities borrowed from the on-chain deployment the registry models.
OWNER = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
SUPPLIER = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"
BUYER = "ST3NBRSFKX28FQ2ZJ1MAKX58HKHSDGNV5NH7MFNY"
THIRD_PARTY = "ST1J4G6RR643BCG8G8SR6M2D9Z9KXT2NJDRK3FBTK"


@pytest.fixture(autouse=True)
def _reset_process_state() -> Iterator[None]:
    """Undo the logging and telemetry setup a CLI invocation leaves behind."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    app_level = logging.getLogger("invoicectl").level
    yield
    disable_telemetry()
    structlog.contextvars.clear_contextvars()
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("invoicectl").setLevel(app_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def clock() -> BlockClock:
    return BlockClock(100)


@pytest.fixture
def registry(clock: BlockClock) -> InvoiceRegistry:
    """Empty in-memory registry owned by OWNER at block height 100."""
    return InvoiceRegistry(OWNER, clock=clock)


@pytest.fixture
def ledger_path(tmp_path: Path) -> Path:
    return tmp_path / ".invoicectl" / "registry.db"


@pytest.fixture
def ledger(ledger_path: Path) -> Iterator[Ledger]:
    """Initialized ledger owned by OWNER at block height 100."""
    led = Ledger.initialize(ledger_path, owner=OWNER, start_height=100)
    try:
        yield led
    finally:
        led.close()


@pytest.fixture
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop INVOICECTL_* env vars that would leak into settings."""
    for var in (
        "INVOICECTL_CONFIG",
        "INVOICECTL_CALLER",
        "INVOICECTL_JSON_OUTPUT",
        "INVOICECTL_QUIET",
        "INVOICECTL_VERBOSE",
        "INVOICECTL_REGISTRY__OWNER",
        "INVOICECTL_REGISTRY__DATABASE",
        "INVOICECTL_REGISTRY__LOCK_TIMEOUT",
        "INVOICECTL_LOG_JSON",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, _clean_env: None) -> None:
    """Change CWD to a temp dir so the CLI uses an isolated ledger.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes.
    """
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def _initialized_root(_isolated_root: None, cli_runner: CliRunner) -> None:
    """Isolated CWD with a ledger already initialized for OWNER at height 100."""
    from invoicectl.cli import cli

    result = cli_runner.invoke(cli, ["init", "--owner", OWNER, "--start-height", "100"])
    assert result.exit_code == 0, result.output


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def create_invoice(
    registry: InvoiceRegistry,
    invoice_id: str = "INV-001",
    *,
    amount: int = 1000,
    due_date: int = 200,
    caller: str = SUPPLIER,
) -> None:
    """Create an invoice from SUPPLIER to BUYER, asserting success."""
    result = registry.create_invoice(
        invoice_id, SUPPLIER, BUYER, amount, due_date, caller=caller
    )
    assert result.ok, result.error
