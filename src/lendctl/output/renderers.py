"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from lendctl.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from lendctl.services.result import ServiceResult

Renderer = Callable[..., None]

# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
        if verbose:
            _render_meta(console, result)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: ids only, one per line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items)

    for key in ("loan", "reservation", "notified_reservation", "user", "book", "copy"):
        entity = result.data.get(key)
        if isinstance(entity, dict):
            return str(entity["id"])

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _text(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    return str(value)


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="lend.ok"), Text(f"  {result.op}", style="lend.op"))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="lend.key")
    if key == "id" or key.endswith("_id"):
        v = Text(_text(value), style="lend.id")
    elif key == "status":
        v = Text(_text(value), style=style_for_status(str(value)))
    elif key in ("title", "book_title"):
        v = Text(_text(value), style="lend.title")
    else:
        v = Text(_text(value))
    console.print(k, v, sep="")


def _fields(console: Console, entity: dict[str, Any], keys: tuple[str, ...]) -> None:
    for key in keys:
        if key in entity:
            _field(console, key, entity[key])


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Telemetry and other meta (verbose only)."""
    if not result.meta:
        return
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry" and isinstance(v, dict):
            line = f"    {v.get('duration_ms', 0.0):>8.2f}ms  {v.get('name', '?')}"
            console.print(Text(line, style="dim"))
        else:
            console.print(f"    {k}: {v}")


def _table(items: list[dict[str, Any]], columns: tuple[str, ...]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for col in columns:
        if col == "id":
            table.add_column("ID", style="lend.id", no_wrap=True)
        else:
            table.add_column(col.replace("_", " ").title())
    for item in items:
        row: list[Text | str] = []
        for col in columns:
            value = item.get(col)
            if col == "status":
                row.append(Text(_text(value), style=style_for_status(str(value))))
            else:
                row.append(_text(value))
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = f"  [{err.code}]" if err else ""
    console.print(
        Text("ERROR", style="lend.error"),
        Text(f"  {result.op}", style="lend.op"),
        Text(code, style="lend.key"),
        Text(f"  {msg}"),
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Loans ─────────────────────────────────────────────────────────────

_LOAN_KEYS = ("id", "user_id", "copy_id", "borrowed_at", "due_date", "returned_at")


def _render_loan(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _fields(console, d["loan"], _LOAN_KEYS)
    _fields(console, d, ("book_title", "user_name"))


def _render_return(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _fields(console, d["loan"], ("id", "copy_id", "due_date", "returned_at"))
    _field(console, "book_id", d["book_id"])
    if d.get("is_overdue"):
        console.print(
            Text("  overdue: ", style="lend.key"),
            Text(f"{d['overdue_days']} day(s)", style="lend.overdue"),
        )
        record = d.get("overdue_record")
        if record:
            _field(console, "overdue_record_id", record["id"])
    promoted = d.get("notified_reservation")
    if promoted:
        _field(console, "notified_reservation_id", promoted["id"])
        _field(console, "notified_user_id", promoted["user_id"])


# ── Reservations ──────────────────────────────────────────────────────

_RESERVATION_KEYS = (
    "id",
    "user_id",
    "book_id",
    "status",
    "queue_position",
    "reserved_at",
    "notified_at",
    "expires_at",
)


def _render_reservation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _fields(console, result.data["reservation"], _RESERVATION_KEYS)


def _render_notified(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    promoted = result.data.get("notified_reservation")
    if promoted is None:
        _field(console, "notified", "nobody waiting")
        return
    _fields(console, promoted, ("id", "user_id", "book_id", "expires_at"))


def _render_sweep(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "expired_count", d["expired_count"])
    promoted = d.get("next_notified_reservations", [])
    _field(console, "notified_count", len(promoted))
    if promoted:
        console.print(_table(promoted, ("id", "user_id", "book_id", "expires_at")))


# ── Catalog ───────────────────────────────────────────────────────────


def _render_user(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _fields(console, result.data["user"], ("id", "name", "email", "loan_limit"))


def _render_book(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _fields(console, result.data["book"], ("id", "title", "author", "isbn", "category"))
    copies = result.data.get("copies", [])
    if copies:
        console.print(_table(copies, ("id", "status", "location")))


def _render_copy(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _fields(console, result.data["copy"], ("id", "book_id", "status", "location"))


# ── Queries ───────────────────────────────────────────────────────────

_LISTING_COLUMNS: dict[str, tuple[str, ...]] = {
    "book_queue": ("queue_position", "id", "user_id", "status", "reserved_at", "expires_at"),
    "user_loans": ("id", "copy_id", "borrowed_at", "due_date", "returned_at"),
    "user_reservations": ("id", "book_id", "status", "queue_position", "reserved_at"),
    "user_overdue_records": ("id", "loan_id", "overdue_days", "recorded_at"),
}


def _render_listing(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    console.print(_table(items, _LISTING_COLUMNS[result.op]))
    console.print(f"\n{result.data.get('count', len(items))} items")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    # Loans
    "create_loan": _render_loan,
    "return_book": _render_return,
    # Reservations
    "create_reservation": _render_reservation,
    "cancel_reservation": _render_reservation,
    "fulfill_reservation": _render_reservation,
    "process_returned_book": _render_notified,
    "expire_overdue_reservations": _render_sweep,
    # Catalog
    "register_user": _render_user,
    "add_book": _render_book,
    "add_copy": _render_copy,
    "set_copy_status": _render_copy,
    # Queries
    "book_queue": _render_listing,
    "user_loans": _render_listing,
    "user_reservations": _render_listing,
    "user_overdue_records": _render_listing,
}
