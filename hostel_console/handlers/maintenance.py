from __future__ import annotations

import datetime
import logging

from telegram.constants import ParseMode

from .. import view
from .common import handle_api_error, require_console, reply_usage

logger = logging.getLogger(__name__)


async def cmd_tickets(update, context) -> None:
    console = await require_console(update, context, "tickets")
    if console is None:
        return
    scope = context.args[0].lower() if context.args else "open"
    if scope not in {"open", "all"}:
        await reply_usage(update, "/tickets [open|all]")
        return
    try:
        issues = await console.maintenance_issues()
    except Exception as e:
        await handle_api_error(update, context, "tickets", e)
        return
    if scope == "open":
        issues = [i for i in issues if not i.resolved]
        title = "Open tickets:"
    else:
        title = "All tickets:"
    msg = view.render_issues(issues, title)
    for part in view.chunk(msg):
        await update.message.reply_text(part, parse_mode=ParseMode.HTML)


async def cmd_ticket(update, context) -> None:
    console = await require_console(update, context, "ticket")
    if console is None:
        return
    if len(context.args) < 2:
        await reply_usage(update, "/ticket &lt;room&gt; &lt;issue&gt;")
        return
    room, issue = context.args[0], " ".join(context.args[1:]).strip()
    payload = {
        "roomNo": room,
        "issue": issue,
        "status": "Pending",
        "priority": "Medium",
        "remarks": "",
        "requestedBy": "",
        "assignedTo": "",
        "createdDate": datetime.date.today().isoformat(),
    }
    try:
        await console.create_issue(payload)
    except Exception as e:
        await handle_api_error(update, context, "ticket", e)
        return
    await update.message.reply_text(
        f"🛠 Ticket opened for room {view.code(room)}.", parse_mode=ParseMode.HTML
    )


async def cmd_resolve(update, context) -> None:
    console = await require_console(update, context, "resolve")
    if console is None:
        return
    if len(context.args) != 1:
        await reply_usage(update, "/resolve &lt;ticket_id&gt;")
        return
    issue_id = context.args[0]
    try:
        await console.update_issue(issue_id, {"status": "Resolved"})
    except Exception as e:
        await handle_api_error(update, context, "resolve", e)
        return
    await update.message.reply_text(
        f"✅ Ticket {view.code(issue_id)} resolved.", parse_mode=ParseMode.HTML
    )


async def cmd_rmticket(update, context) -> None:
    console = await require_console(update, context, "rmticket")
    if console is None:
        return
    if len(context.args) != 1:
        await reply_usage(update, "/rmticket &lt;ticket_id&gt;")
        return
    issue_id = context.args[0]
    try:
        await console.delete_issue(issue_id)
    except Exception as e:
        await handle_api_error(update, context, "rmticket", e)
        return
    await update.message.reply_text(
        f"🗑 Ticket {view.code(issue_id)} removed.", parse_mode=ParseMode.HTML
    )
