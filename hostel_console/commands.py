"""Command registry (single source of truth for help + wiring)."""

from __future__ import annotations

from .models.command_spec import CommandSpec, Group


_INFO_COMMANDS = (
    CommandSpec("start", "Info", "/start", "show help", "cmd_start", needs="none"),
    CommandSpec("help", "Info", "/help", "this menu", "cmd_help", needs="none"),
    CommandSpec(
        "whoami",
        "Info",
        "/whoami",
        "show chat and user info",
        "cmd_whoami",
        needs="none",
    ),
    CommandSpec(
        "metrics",
        "Info",
        "/metrics",
        "command metrics summary",
        "cmd_metrics",
        needs="none",
    ),
    CommandSpec(
        "debug",
        "Info",
        "/debug [command]",
        "recent errors and retries",
        "cmd_debug",
        needs="none",
    ),
)

_ACCOUNT_COMMANDS = (
    CommandSpec(
        "login",
        "Account",
        "/login [email password]",
        "log in to the hostel API (defaults to configured account)",
        "cmd_login",
        needs="none",
    ),
    CommandSpec("logout", "Account", "/logout", "end the session", "cmd_logout"),
    CommandSpec(
        "session",
        "Account",
        "/session",
        "show login status and time remaining",
        "cmd_session",
        needs="none",
    ),
    CommandSpec("profile", "Account", "/profile", "admin profile", "cmd_profile"),
    CommandSpec(
        "refresh",
        "Account",
        "/refresh",
        "drop cached data for this session",
        "cmd_refresh",
    ),
)

_HOSTEL_COMMANDS = (
    CommandSpec(
        "dashboard",
        "Hostel",
        "/dashboard",
        "rooms, payments, tenants, tickets and today's menu",
        "cmd_dashboard",
        aliases=("dash",),
    ),
    CommandSpec("hostel", "Hostel", "/hostel", "hostel details", "cmd_hostel"),
    CommandSpec(
        "rooms", "Hostel", "/rooms [page]", "rooms with free beds", "cmd_rooms"
    ),
    CommandSpec(
        "addroom",
        "Hostel",
        "/addroom <number> <sharing> <beds> <rent>",
        "add a room",
        "cmd_addroom",
    ),
    CommandSpec(
        "rmroom", "Hostel", "/rmroom <number>", "remove a room", "cmd_rmroom"
    ),
    CommandSpec(
        "reviews", "Hostel", "/reviews", "top rated reviews", "cmd_reviews"
    ),
    CommandSpec(
        "editroom",
        "Hostel",
        "/editroom <number> <sharing> <beds> <free_beds> <rent>",
        "update a room",
        "cmd_editroom",
    ),
    CommandSpec(
        "sethostel",
        "Hostel",
        "/sethostel <category> <rooms> <capacity> <name>",
        "register or update the hostel",
        "cmd_sethostel",
    ),
    CommandSpec(
        "rmhostel",
        "Hostel",
        "/rmhostel confirm",
        "remove the hostel",
        "cmd_rmhostel",
    ),
)

_TENANT_COMMANDS = (
    CommandSpec(
        "tenants",
        "Tenants",
        "/tenants [page] [search]",
        "list or search tenants",
        "cmd_tenants",
    ),
    CommandSpec(
        "payments",
        "Tenants",
        "/payments <tenant_id>",
        "payment history for a tenant",
        "cmd_payments",
    ),
    CommandSpec(
        "pay",
        "Tenants",
        "/pay <tenant_id> <amount> [mode]",
        "record a rent payment",
        "cmd_pay",
    ),
    CommandSpec(
        "search",
        "Tenants",
        "/search <query>",
        "find tenants by name, room or contact",
        "cmd_search",
    ),
    CommandSpec(
        "addtenant",
        "Tenants",
        "/addtenant <room> <rent> <contact> <name>",
        "move a tenant in",
        "cmd_addtenant",
    ),
    CommandSpec(
        "edittenant",
        "Tenants",
        "/edittenant <tenant_id> <field> <value>",
        "change name, room, rent, contact or email",
        "cmd_edittenant",
    ),
    CommandSpec(
        "rmtenant",
        "Tenants",
        "/rmtenant <tenant_id>",
        "remove a tenant",
        "cmd_rmtenant",
    ),
    CommandSpec(
        "editpay",
        "Tenants",
        "/editpay <payment_id> <field> <value>",
        "correct a recorded payment",
        "cmd_editpay",
    ),
    CommandSpec(
        "rmpay", "Tenants", "/rmpay <payment_id>", "delete a payment", "cmd_rmpay"
    ),
)

_MAINTENANCE_COMMANDS = (
    CommandSpec(
        "tickets",
        "Maintenance",
        "/tickets [open|all]",
        "maintenance tickets",
        "cmd_tickets",
    ),
    CommandSpec(
        "ticket",
        "Maintenance",
        "/ticket <room> <issue>",
        "open a maintenance ticket",
        "cmd_ticket",
    ),
    CommandSpec(
        "resolve",
        "Maintenance",
        "/resolve <ticket_id>",
        "mark a ticket resolved",
        "cmd_resolve",
    ),
    CommandSpec(
        "rmticket",
        "Maintenance",
        "/rmticket <ticket_id>",
        "delete a ticket",
        "cmd_rmticket",
    ),
)


COMMANDS: tuple[CommandSpec, ...] = (
    *_INFO_COMMANDS,
    *_ACCOUNT_COMMANDS,
    *_HOSTEL_COMMANDS,
    *_TENANT_COMMANDS,
    *_MAINTENANCE_COMMANDS,
)


GROUP_ORDER: tuple[Group, ...] = (
    "Account",
    "Hostel",
    "Tenants",
    "Maintenance",
    "Info",
)
