"""Human-readable rendering of ServiceResult.

:func:`render_result` draws with Rich onto a StringIO-backed console and
returns the text; :func:`render_quiet` reduces a result to the one value
a shell script wants. Successful results are drawn by the renderer
registered for ``result.op``; unknown ops get a plain key/value listing.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from invoicectl.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from invoicectl.services.result import ServiceResult

Renderer = Callable[["ServiceResult", "Console"], None]

_IDENTITY_KEYS = frozenset({"owner", "supplier", "buyer", "caller"})
_INVOICE_FIELDS = ("supplier", "buyer", "amount", "due_date", "created_at")


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result* for a terminal; plain text when not attached to one."""
    console = create_console()
    if result.ok:
        _RENDERERS.get(result.op, _render_fields)(result, console)
    else:
        _render_error(result, console)
    if verbose:
        _render_timing(result, console)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """The single value ``--quiet`` prints for *result*."""
    if not result.ok:
        message = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {message}"

    data = result.data
    op = result.op
    if op == "get_invoice":
        invoice = data.get("invoice")
        return str(invoice["status"]) if invoice else "absent"
    if op == "is_certified":
        return "true" if data.get("certified") else "false"
    if op == "list_invoices":
        return "\n".join(str(item["invoice_id"]) for item in data.get("items", []))
    if op == "owner":
        return str(data["owner"])
    if op in ("clock_show", "clock_advance"):
        return str(data["block_height"])
    return f"OK: {result.op}"


# ── Pieces ────────────────────────────────────────────────────────────


def _styled(key: str, value: Any) -> Text:
    text = str(value)
    if key == "invoice_id":
        return Text(text, style="inv.id")
    if key in _IDENTITY_KEYS:
        return Text(text, style="inv.identity")
    if key == "status":
        return Text(text, style=style_for_status(text))
    return Text(text)


def _render_fields(result: ServiceResult, console: Console) -> None:
    """``OK  op`` followed by one indented line per data item."""
    console.print(Text.assemble(("OK", "inv.ok"), (f"  {result.op}", "inv.op")))
    for key, value in result.data.items():
        console.print(Text.assemble((f"  {key}: ", "inv.key"), _styled(key, value)))


def _render_error(result: ServiceResult, console: Console) -> None:
    err = result.error
    line = Text.assemble(("ERROR", "inv.error"), (f"  {result.op}", "inv.op"))
    if err is not None:
        line.append(f" [{err.code}]", style="inv.error")
        line.append(f": {err.message}")
    console.print(line)


def _render_timing(result: ServiceResult, console: Console) -> None:
    span = (result.meta or {}).get("telemetry")
    if not span:
        return
    duration = span.get("duration_ms", 0.0)
    line = Text.assemble(
        ("\n  timing: ", "dim"),
        (f"{duration:.2f}ms", "inv.warning" if duration > 100 else "dim"),
        f"  {span.get('name', '?')}",
    )
    annotations = span.get("annotations") or {}
    if annotations:
        line.append("  " + " ".join(f"{k}={v}" for k, v in annotations.items()), style="dim")
    console.print(line)


# ── Per-op renderers ──────────────────────────────────────────────────


def _render_invoice(result: ServiceResult, console: Console) -> None:
    invoice = result.data.get("invoice")
    if invoice is None:
        console.print(
            Text.assemble(
                _styled("invoice_id", result.data.get("invoice_id", "")),
                (" is not present in the registry", "dim"),
            )
        )
        return
    body = Text()
    for key in (*_INVOICE_FIELDS, "status"):
        body.append(f"{key}: ", style="inv.key")
        body.append_text(_styled(key, invoice.get(key, "")))
        body.append("\n")
    body.rstrip()
    console.print(Panel(body, title=str(invoice["invoice_id"]), expand=False, border_style="dim"))


def _render_is_certified(result: ServiceResult, console: Console) -> None:
    certified = bool(result.data.get("certified"))
    console.print(
        Text.assemble(
            _styled("invoice_id", result.data.get("invoice_id", "")),
            ": ",
            _styled("status", "certified") if certified else ("not certified", "dim"),
        )
    )


def _render_invoice_list(result: ServiceResult, console: Console) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(Text("No invoices.", style="dim"))
        return
    table = Table(pad_edge=False)
    table.add_column("ID", style="inv.id", no_wrap=True)
    table.add_column("Supplier", style="inv.identity")
    table.add_column("Buyer", style="inv.identity")
    table.add_column("Amount", style="inv.amount", justify="right")
    table.add_column("Due", justify="right")
    table.add_column("Status")
    table.add_column("Created", style="dim", justify="right")
    for item in items:
        table.add_row(
            *(str(item[key]) for key in ("invoice_id", "supplier", "buyer", "amount", "due_date")),
            _styled("status", item["status"]),
            str(item["created_at"]),
        )
    console.print(table)
    console.print(Text(f"{result.data.get('count', len(items))} invoice(s)", style="dim"))


_RENDERERS: dict[str, Renderer] = {
    "get_invoice": _render_invoice,
    "is_certified": _render_is_certified,
    "list_invoices": _render_invoice_list,
}
