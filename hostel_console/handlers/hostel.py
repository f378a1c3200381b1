from __future__ import annotations

import logging
import math

from telegram.constants import ParseMode

from .. import view
from ..models.hostel import Hostel, Room
from .common import handle_api_error, require_console, reply_usage

logger = logging.getLogger(__name__)

ROOMS_PER_PAGE = 10


def _page_arg(args: list[str]) -> int | None:
    if not args:
        return 1
    try:
        page = int(args[0])
    except ValueError:
        return None
    return page if page >= 1 else None


async def cmd_dashboard(update, context) -> None:
    console = await require_console(update, context, "dashboard")
    if console is None:
        return
    try:
        dash = await console.dashboard()
    except Exception as e:
        await handle_api_error(update, context, "dashboard", e)
        return
    await update.message.reply_text(
        view.render_dashboard(dash), parse_mode=ParseMode.HTML
    )


async def cmd_hostel(update, context) -> None:
    console = await require_console(update, context, "hostel")
    if console is None:
        return
    try:
        hostel = await console.hostel()
    except Exception as e:
        await handle_api_error(update, context, "hostel", e)
        return
    await update.message.reply_text(
        view.render_hostel(hostel), parse_mode=ParseMode.HTML
    )


async def cmd_rooms(update, context) -> None:
    console = await require_console(update, context, "rooms")
    if console is None:
        return
    page = _page_arg(context.args)
    if page is None:
        await reply_usage(update, "/rooms [page]")
        return
    try:
        rooms = await console.rooms()
    except Exception as e:
        await handle_api_error(update, context, "rooms", e)
        return
    total_pages = max(1, math.ceil(len(rooms) / ROOMS_PER_PAGE))
    idx = min(page, total_pages) - 1
    chunk = rooms[idx * ROOMS_PER_PAGE : (idx + 1) * ROOMS_PER_PAGE]
    await update.message.reply_text(
        view.render_rooms_page(chunk, idx, total_pages), parse_mode=ParseMode.HTML
    )


async def cmd_addroom(update, context) -> None:
    console = await require_console(update, context, "addroom")
    if console is None:
        return
    if len(context.args) != 4:
        await reply_usage(
            update, "/addroom &lt;number&gt; &lt;sharing&gt; &lt;beds&gt; &lt;rent&gt;"
        )
        return
    number, sharing, beds_raw, rent_raw = context.args
    try:
        beds = int(beds_raw)
        rent = int(rent_raw)
    except ValueError:
        await update.message.reply_text("❌ Beds and rent must be whole numbers.")
        return
    if beds < 1 or rent < 0:
        await update.message.reply_text("❌ Beds must be at least 1, rent at least 0.")
        return
    room = Room(
        number=number,
        sharing_type=sharing,
        total_beds=beds,
        available_beds=beds,
        rent=rent,
    )
    try:
        await console.add_room(room)
    except Exception as e:
        await handle_api_error(update, context, "addroom", e)
        return
    await update.message.reply_text(
        f"✅ Room {view.code(number)} added.", parse_mode=ParseMode.HTML
    )


async def cmd_rmroom(update, context) -> None:
    console = await require_console(update, context, "rmroom")
    if console is None:
        return
    if len(context.args) != 1:
        await reply_usage(update, "/rmroom &lt;number&gt;")
        return
    number = context.args[0]
    try:
        await console.remove_room(number)
    except Exception as e:
        await handle_api_error(update, context, "rmroom", e)
        return
    await update.message.reply_text(
        f"🗑 Room {view.code(number)} removed.", parse_mode=ParseMode.HTML
    )


async def cmd_reviews(update, context) -> None:
    console = await require_console(update, context, "reviews")
    if console is None:
        return
    try:
        reviews = await console.popular_feedback()
    except Exception as e:
        await handle_api_error(update, context, "reviews", e)
        return
    msg = view.render_reviews(reviews)
    for part in view.chunk(msg):
        await update.message.reply_text(part, parse_mode=ParseMode.HTML)


async def cmd_sethostel(update, context) -> None:
    """Create the hostel, or edit it when one is already registered."""
    console = await require_console(update, context, "sethostel")
    if console is None:
        return
    if len(context.args) < 4:
        await reply_usage(
            update,
            "/sethostel &lt;category&gt; &lt;rooms&gt; &lt;capacity&gt; &lt;name...&gt;",
        )
        return
    category, rooms_raw, capacity_raw = context.args[:3]
    name = " ".join(context.args[3:]).strip()
    try:
        total_rooms = int(rooms_raw)
        max_capacity = int(capacity_raw)
    except ValueError:
        await update.message.reply_text("❌ Rooms and capacity must be whole numbers.")
        return
    hostel = Hostel(
        name=name,
        category=category,
        total_rooms=total_rooms,
        max_capacity=max_capacity,
    )
    try:
        existing = await console.hostel()
        if existing is None:
            await console.create_hostel(hostel)
            verb = "registered"
        else:
            await console.edit_hostel(hostel)
            verb = "updated"
    except Exception as e:
        await handle_api_error(update, context, "sethostel", e)
        return
    await update.message.reply_text(
        f"✅ Hostel {view.bold(name)} {verb}.", parse_mode=ParseMode.HTML
    )


async def cmd_rmhostel(update, context) -> None:
    console = await require_console(update, context, "rmhostel")
    if console is None:
        return
    if context.args != ["confirm"]:
        await update.message.reply_text(
            "⚠️ This removes the hostel and its rooms. Send /rmhostel confirm"
        )
        return
    try:
        await console.remove_hostel()
    except Exception as e:
        await handle_api_error(update, context, "rmhostel", e)
        return
    await update.message.reply_text("🗑 Hostel removed.")


async def cmd_editroom(update, context) -> None:
    console = await require_console(update, context, "editroom")
    if console is None:
        return
    if len(context.args) != 5:
        await reply_usage(
            update,
            "/editroom &lt;number&gt; &lt;sharing&gt; &lt;beds&gt; "
            "&lt;free_beds&gt; &lt;rent&gt;",
        )
        return
    number, sharing = context.args[:2]
    try:
        beds, free, rent = (int(v) for v in context.args[2:])
    except ValueError:
        await update.message.reply_text("❌ Beds and rent must be whole numbers.")
        return
    if not 0 <= free <= beds:
        await update.message.reply_text("❌ Free beds must be between 0 and beds.")
        return
    room = Room(
        number=number,
        sharing_type=sharing,
        total_beds=beds,
        available_beds=free,
        rent=rent,
    )
    try:
        await console.edit_room(number, room)
    except Exception as e:
        await handle_api_error(update, context, "editroom", e)
        return
    await update.message.reply_text(
        f"✏️ Room {view.code(number)} updated.", parse_mode=ParseMode.HTML
    )
