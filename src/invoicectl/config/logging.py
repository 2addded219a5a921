"""Log routing for one invoicectl process.

Both stdlib ``logging`` records (the registry, the ledger) and structlog
events (telemetry spans) go through one stderr handler, so stdout only
ever carries command results. ``--log-json`` switches the renderer to
JSON lines; ``--verbose`` lowers the ``invoicectl`` logger to DEBUG.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Loggers held at WARNING whatever the verbosity.
_QUIET_LIBRARIES = ("sqlalchemy",)

_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _stderr_handler(*, log_json: bool) -> logging.Handler:
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the stderr handler; safe to call again (the handler is replaced)."""
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers[:] = [_stderr_handler(log_json=log_json)]
    root.setLevel(logging.WARNING)

    logging.getLogger("invoicectl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_caller(caller: str | None) -> None:
    """Tag every log line of this invocation with the acting identity."""
    structlog.contextvars.clear_contextvars()
    if caller is not None:
        structlog.contextvars.bind_contextvars(caller=caller)
