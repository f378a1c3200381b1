"""View layer for formatting Telegram messages (HTML)."""

from __future__ import annotations

import html
import math
import time

from .models.debug import DebugEntry
from .models.hostel import (
    Dashboard,
    Feedback,
    Hostel,
    MaintenanceIssue,
    Payment,
    Profile,
    Room,
    TenantPage,
)


def bold(text: str) -> str:
    return f"<b>{html.escape(str(text))}</b>"


def code(text: str) -> str:
    return f"<code>{html.escape(str(text))}</code>"


def pre(text: str) -> str:
    return f"<pre>{html.escape(str(text))}</pre>"


def chunk(msg: str, size: int = 4000) -> list[str]:
    """Split message into chunks ensuring no chunk exceeds size limit."""
    if len(msg) <= size:
        return [msg]

    lines = msg.splitlines()
    chunks: list[str] = []
    current = ""
    for line in lines:
        if len(line) > size:
            if current:
                chunks.append(current)
                current = ""
            start = 0
            while start < len(line):
                chunks.append(line[start : start + size])
                start += size
            continue
        added_length = len(line) + (1 if current else 0)
        if len(current) + added_length > size and current:
            chunks.append(current)
            current = line
        else:
            current = f"{current}\n{line}" if current else line
    if current:
        chunks.append(current)
    return chunks


def _money(amount: float) -> str:
    return f"₹{amount:,.0f}"


def render_hostel(hostel: Hostel | None) -> str:
    if hostel is None:
        return "<i>No hostel registered yet.</i>"
    return "\n".join(
        [
            f"{bold('Hostel:')} {html.escape(hostel.name)}",
            f"{bold('Category:')} {html.escape(hostel.category or 'n/a')}",
            f"{bold('Rooms:')} {hostel.total_rooms} | "
            f"{bold('Capacity:')} {hostel.max_capacity}",
        ]
    )


def render_dashboard(dash: Dashboard) -> str:
    if dash.hostel is None:
        return render_hostel(None)
    s = dash.stats
    lines = [
        bold(dash.hostel.name),
        f"{bold('Rooms:')} {s.rooms_total} total • {s.rooms_occupied} occupied • "
        f"{s.rooms_vacant} vacant",
        f"{bold('Payments:')} {s.payments_paid} paid • {s.payments_unpaid} unpaid",
        f"{bold('Tenants:')} {s.tenants_total} total • {s.tenants_current} current",
        f"{bold('Tickets:')} {s.tickets_total} total • {s.tickets_unresolved} open",
    ]
    meals = [
        ("Breakfast", dash.mess.breakfast),
        ("Lunch", dash.mess.lunch),
        ("Dinner", dash.mess.dinner),
    ]
    if any(items for _, items in meals):
        lines.append("")
        lines.append(bold("Today's menu:"))
        for label, items in meals:
            menu = ", ".join(html.escape(i) for i in items) if items else "-"
            lines.append(f"{html.escape(label)}: {menu}")
    return "\n".join(lines)


def render_rooms_page(rooms: list[Room], page: int, total_pages: int) -> str:
    if not rooms:
        return "<i>No rooms found.</i>"

    lines = [bold(f"Rooms (page {page + 1}/{max(total_pages, 1)}):")]
    for r in rooms:
        lines.append(
            f"{code(r.number)} • {html.escape(r.sharing_type or '?')} • "
            f"beds {r.available_beds}/{r.total_beds} free • {_money(r.rent)}"
        )
    return "\n".join(lines)


def render_tenant_page(result: TenantPage, page: int, limit: int) -> str:
    if not result.tenants:
        return "<i>No tenants found.</i>"
    total_pages = max(1, math.ceil(result.total / limit)) if limit else 1
    lines = [bold(f"Tenants (page {page}/{total_pages}, {result.total} total):")]
    for t in result.tenants:
        room = f"room {html.escape(t.room_number)}" if t.room_number else "no room"
        contact = f" • {html.escape(t.contact)}" if t.contact else ""
        lines.append(
            f"{code(t.id)} {html.escape(t.name)} • {room} • "
            f"{_money(t.rent_amount)}{contact}"
        )
    return "\n".join(lines)


def render_payments(tenant_id: str, payments: list[Payment]) -> str:
    if not payments:
        return f"<i>No payments recorded for</i> {code(tenant_id)}."
    lines = [bold(f"Payments for {tenant_id}:")]
    for p in payments:
        due = f" • due {_money(p.due_amount)}" if p.due_amount else ""
        lines.append(
            f"{html.escape(p.payment_date or '?')} • {_money(p.rent_amount)} • "
            f"{html.escape(p.rent_status or '?')} • {html.escape(p.payment_mode or '?')}"
            f"{due} • {code(p.transaction_id)}"
        )
    return "\n".join(lines)


def render_issues(issues: list[MaintenanceIssue], title: str = "Tickets:") -> str:
    if not issues:
        return "<i>No maintenance tickets.</i>"
    lines = [bold(title)]
    for i in issues:
        lines.append(
            f"{code(i.id)} room {html.escape(i.room_no or '?')} • "
            f"{html.escape(i.status)} • {html.escape(i.priority)}\n"
            f"  {html.escape(i.issue)}"
        )
    return "\n".join(lines)


def render_profile(profile: Profile) -> str:
    return "\n".join(
        [
            f"{bold('Name:')} {html.escape(profile.name or 'n/a')}",
            f"{bold('Email:')} {code(profile.email or 'n/a')}",
        ]
    )


def render_reviews(reviews: list[Feedback], limit: int = 10) -> str:
    if not reviews:
        return "<i>No top rated reviews yet.</i>"
    lines = [bold("Top reviews:")]
    for r in reviews[:limit]:
        stars = "⭐" * int(round(r.rating))
        lines.append(
            f"{stars} {html.escape(r.name or 'Anonymous')}: {html.escape(r.comment)}"
        )
    return "\n".join(lines)


def _format_timestamp(ts: float | None) -> str:
    if not ts:
        return "never"
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(ts))


def _p95(samples: list[float]) -> float:
    if not samples:
        return 0.0
    ordered = sorted(samples)
    idx = max(0, math.ceil(0.95 * len(ordered)) - 1)
    return ordered[idx]


def render_command_metrics(metrics: dict) -> str:
    if not metrics:
        return "<i>No command metrics recorded yet.</i>"

    lines = [bold("Command Metrics:")]
    for name in sorted(metrics.keys()):
        entry = metrics[name]
        avg = (entry.total_latency_s / entry.count) if entry.count else 0.0
        p95 = _p95(entry.latencies_s)
        last_run = _format_timestamp(entry.last_run_ts)
        line = (
            f"{code(name)} runs {entry.count} ok {entry.success} err {entry.error} "
            f"rl {entry.rate_limited} retries {entry.retries} avg {avg * 1000:.1f}ms "
            f"p95 {p95 * 1000:.1f}ms max {entry.max_latency_s * 1000:.1f}ms "
            f"last {html.escape(last_run)}"
        )
        lines.append(line)
    return "\n".join(lines)


DEBUG_DETAIL_MAX = 1000


def render_debug(entries: dict[str, list[DebugEntry]], limit: int = 10) -> str:
    if not entries:
        return "<i>No debug entries.</i>"
    lines: list[str] = []
    for command in sorted(entries):
        lines.append(bold(f"/{command}"))
        for entry in entries[command][-limit:]:
            details = ""
            if entry.details:
                text = entry.details
                if len(text) > DEBUG_DETAIL_MAX:
                    text = text[:DEBUG_DETAIL_MAX] + "…"
                details = f" | {html.escape(text)}"
            lines.append(
                f"{html.escape(_format_timestamp(entry.timestamp))} "
                f"{html.escape(entry.message)}{details}"
            )
    return "\n".join(lines)
