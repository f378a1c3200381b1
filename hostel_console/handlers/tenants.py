from __future__ import annotations

import datetime
import logging

from telegram.constants import ParseMode

from .. import view
from .common import handle_api_error, require_console, reply_usage

logger = logging.getLogger(__name__)

TENANTS_PER_PAGE = 10
PAYMENT_MODES = ("Cash", "UPI", "Card", "Bank Transfer", "Cheque")


def _parse_tenant_args(args: list[str]) -> tuple[int, str | None]:
    """``/tenants [page] [search...]``: a leading integer is the page."""
    page = 1
    rest = list(args)
    if rest and rest[0].isdigit():
        page = max(1, int(rest.pop(0)))
    search = " ".join(rest).strip() or None
    return page, search


async def cmd_tenants(update, context) -> None:
    console = await require_console(update, context, "tenants")
    if console is None:
        return
    page, search = _parse_tenant_args(context.args)
    try:
        result = await console.tenants(
            page=page, limit=TENANTS_PER_PAGE, search=search
        )
    except Exception as e:
        await handle_api_error(update, context, "tenants", e)
        return
    msg = view.render_tenant_page(result, page, TENANTS_PER_PAGE)
    for part in view.chunk(msg):
        await update.message.reply_text(part, parse_mode=ParseMode.HTML)


async def cmd_payments(update, context) -> None:
    console = await require_console(update, context, "payments")
    if console is None:
        return
    if len(context.args) != 1:
        await reply_usage(update, "/payments &lt;tenant_id&gt;")
        return
    tenant_id = context.args[0]
    try:
        payments = await console.tenant_payments(tenant_id)
    except Exception as e:
        await handle_api_error(update, context, "payments", e)
        return
    msg = view.render_payments(tenant_id, payments)
    for part in view.chunk(msg):
        await update.message.reply_text(part, parse_mode=ParseMode.HTML)


async def cmd_pay(update, context) -> None:
    console = await require_console(update, context, "pay")
    if console is None:
        return
    if len(context.args) < 2:
        await reply_usage(update, "/pay &lt;tenant_id&gt; &lt;amount&gt; [mode]")
        return
    tenant_id, amount_raw = context.args[0], context.args[1]
    try:
        amount = float(amount_raw)
    except ValueError:
        await update.message.reply_text("❌ Amount must be a number.")
        return
    if amount <= 0:
        await update.message.reply_text("❌ Amount must be positive.")
        return
    mode = " ".join(context.args[2:]).strip() or "Cash"
    known = {m.lower(): m for m in PAYMENT_MODES}
    if mode.lower() not in known:
        await update.message.reply_text(
            f"❌ Unknown payment mode. Use one of: {', '.join(PAYMENT_MODES)}"
        )
        return
    mode = known[mode.lower()]
    payload = {
        "tenantId": tenant_id,
        "paymentAmount": amount,
        "rentAmount": amount,
        "dueAmount": 0,
        "paymentDate": datetime.date.today().isoformat(),
        "paymentMode": mode,
        "rentStatus": "Paid",
        "remarks": "",
    }
    try:
        await console.create_payment(payload)
    except Exception as e:
        await handle_api_error(update, context, "pay", e)
        return
    await update.message.reply_text(
        f"✅ Recorded {view.bold(f'{amount:,.0f}')} ({view.code(mode)}) "
        f"for {view.code(tenant_id)}.",
        parse_mode=ParseMode.HTML,
    )


# /edittenant and /editpay field name -> (API field, parser)
TENANT_FIELDS = {
    "name": ("tenantName", str),
    "room": ("roomNumber", str),
    "rent": ("rentAmount", float),
    "contact": ("contact", str),
    "email": ("email", str),
}
PAYMENT_FIELDS = {
    "amount": ("rentAmount", float),
    "due": ("dueAmount", float),
    "mode": ("paymentMode", str),
    "status": ("rentStatus", str),
    "remarks": ("remarks", str),
}


def _parse_field(
    fields: dict, name: str, raw: str
) -> tuple[str, object] | None:
    entry = fields.get(name.lower())
    if entry is None or not raw:
        return None
    api_name, parse = entry
    try:
        return api_name, parse(raw)
    except ValueError:
        return None


async def cmd_search(update, context) -> None:
    console = await require_console(update, context, "search")
    if console is None:
        return
    query = " ".join(context.args).strip()
    if not query:
        await reply_usage(update, "/search &lt;name, room or contact&gt;")
        return
    try:
        result = await console.search_tenants(query)
    except Exception as e:
        await handle_api_error(update, context, "search", e)
        return
    limit = max(result.total, len(result.tenants), 1)
    msg = view.render_tenant_page(result, 1, limit)
    for part in view.chunk(msg):
        await update.message.reply_text(part, parse_mode=ParseMode.HTML)


async def cmd_addtenant(update, context) -> None:
    console = await require_console(update, context, "addtenant")
    if console is None:
        return
    if len(context.args) < 4:
        await reply_usage(
            update,
            "/addtenant &lt;room&gt; &lt;rent&gt; &lt;contact&gt; &lt;name...&gt;",
        )
        return
    room, rent_raw, contact = context.args[:3]
    name = " ".join(context.args[3:]).strip()
    try:
        rent = float(rent_raw)
    except ValueError:
        rent = 0.0
    if rent <= 0:
        await update.message.reply_text("❌ Valid rent amount is required.")
        return
    if not (contact.isdigit() and len(contact) == 10):
        await update.message.reply_text("❌ Valid 10-digit mobile number is required.")
        return
    payload = {
        "tenantName": name,
        "roomNumber": room,
        "rentAmount": rent,
        "contact": contact,
        "email": "",
        "moveInDate": datetime.date.today().isoformat(),
    }
    try:
        await console.add_tenant(payload)
    except Exception as e:
        await handle_api_error(update, context, "addtenant", e)
        return
    await update.message.reply_text(
        f"✅ {view.bold(name)} moved into room {view.code(room)}.",
        parse_mode=ParseMode.HTML,
    )


async def cmd_edittenant(update, context) -> None:
    console = await require_console(update, context, "edittenant")
    if console is None:
        return
    fields = "|".join(TENANT_FIELDS)
    usage = f"/edittenant &lt;tenant_id&gt; &lt;{fields}&gt; &lt;value&gt;"
    if len(context.args) < 3:
        await reply_usage(update, usage)
        return
    tenant_id, field = context.args[0], context.args[1]
    parsed = _parse_field(TENANT_FIELDS, field, " ".join(context.args[2:]).strip())
    if parsed is None:
        await reply_usage(update, usage)
        return
    api_name, value = parsed
    try:
        await console.update_tenant(tenant_id, {api_name: value})
    except Exception as e:
        await handle_api_error(update, context, "edittenant", e)
        return
    await update.message.reply_text(
        f"✏️ Tenant {view.code(tenant_id)} updated.", parse_mode=ParseMode.HTML
    )


async def cmd_rmtenant(update, context) -> None:
    console = await require_console(update, context, "rmtenant")
    if console is None:
        return
    if len(context.args) != 1:
        await reply_usage(update, "/rmtenant &lt;tenant_id&gt;")
        return
    tenant_id = context.args[0]
    try:
        await console.delete_tenant(tenant_id)
    except Exception as e:
        await handle_api_error(update, context, "rmtenant", e)
        return
    await update.message.reply_text(
        f"🗑 Tenant {view.code(tenant_id)} removed.", parse_mode=ParseMode.HTML
    )


async def cmd_editpay(update, context) -> None:
    console = await require_console(update, context, "editpay")
    if console is None:
        return
    fields = "|".join(PAYMENT_FIELDS)
    usage = f"/editpay &lt;payment_id&gt; &lt;{fields}&gt; &lt;value&gt;"
    if len(context.args) < 3:
        await reply_usage(update, usage)
        return
    payment_id, field = context.args[0], context.args[1]
    parsed = _parse_field(PAYMENT_FIELDS, field, " ".join(context.args[2:]).strip())
    if parsed is None:
        await reply_usage(update, usage)
        return
    api_name, value = parsed
    try:
        await console.edit_payment(payment_id, {api_name: value})
    except Exception as e:
        await handle_api_error(update, context, "editpay", e)
        return
    await update.message.reply_text(
        f"✏️ Payment {view.code(payment_id)} updated.", parse_mode=ParseMode.HTML
    )


async def cmd_rmpay(update, context) -> None:
    console = await require_console(update, context, "rmpay")
    if console is None:
        return
    if len(context.args) != 1:
        await reply_usage(update, "/rmpay &lt;payment_id&gt;")
        return
    payment_id = context.args[0]
    try:
        await console.delete_payment(payment_id)
    except Exception as e:
        await handle_api_error(update, context, "rmpay", e)
        return
    await update.message.reply_text(
        f"🗑 Payment {view.code(payment_id)} removed.", parse_mode=ParseMode.HTML
    )
