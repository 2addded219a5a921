"""AppContext: per-invocation state shared by every command.

The root group builds one from :class:`InvoiceSettings` and commands
receive it through ``@click.pass_obj``. It owns the ledger handle, knows
who is acting, and turns results and ledger failures into CLI output and
exit codes.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

import click

from invoicectl.config.logging import bind_caller, configure_logging
from invoicectl.infrastructure.ledger import Ledger, LedgerError
from invoicectl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from collections.abc import Iterator

    from invoicectl.config.settings import InvoiceSettings
    from invoicectl.services.registry import InvoiceRegistry
    from invoicectl.services.result import ServiceResult


class AppContext:
    """Shared state for one CLI invocation.

    The ledger is opened on first use so ``--help`` and ``--examples``
    never touch the database.
    """

    def __init__(self, settings: InvoiceSettings) -> None:
        self.settings = settings
        self._ledger: Ledger | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        bind_caller(settings.caller)

        if settings.verbose:
            from invoicectl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def ledger(self) -> Ledger:
        if self._ledger is None:
            with _ledger_errors():
                self._ledger = Ledger(
                    self.settings.database_path,
                    lock_timeout=self.settings.registry.lock_timeout,
                )
        return self._ledger

    @contextmanager
    def registry(self) -> Iterator[InvoiceRegistry]:
        """Registry for one mutation, persisted when the block exits cleanly."""
        ledger = self.ledger
        with _ledger_errors(), ledger.registry() as registry:
            yield registry

    @contextmanager
    def snapshot(self) -> Iterator[InvoiceRegistry]:
        """Committed registry state for read-only commands."""
        ledger = self.ledger
        with _ledger_errors(), ledger.snapshot() as registry:
            yield registry

    def advance_clock(self, blocks: int) -> int:
        ledger = self.ledger
        with _ledger_errors():
            return ledger.advance_clock(blocks)

    def require_caller(self) -> str:
        """Return the acting identity, or fail with a usage error."""
        caller = self.settings.caller
        if not caller:
            msg = "No caller identity. Pass --as IDENTITY or set INVOICECTL_CALLER."
            raise click.UsageError(msg)
        return caller

    def emit(self, result: ServiceResult) -> None:
        """Print *result*: stdout on success, stderr plus exit code 1 on failure."""
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if not result.ok:
            click.echo(output, err=True)
            raise SystemExit(1)
        click.echo(output)
        if not settings.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)

    def close(self) -> None:
        if self._ledger is not None:
            self._ledger.close()
            self._ledger = None


@contextmanager
def _ledger_errors() -> Iterator[None]:
    try:
        yield
    except LedgerError as exc:
        raise click.ClickException(str(exc)) from exc
