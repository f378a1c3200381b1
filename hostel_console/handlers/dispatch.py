"""Dispatch layer: applies rate limiting then calls the real handlers."""

from __future__ import annotations

from .common import rate_limit
from . import meta, account, hostel, tenants, maintenance


# Info
cmd_start = rate_limit(meta.cmd_start, name="start")
cmd_help = rate_limit(meta.cmd_help, name="help")
cmd_whoami = rate_limit(meta.cmd_whoami, name="whoami")
cmd_metrics = rate_limit(meta.cmd_metrics, name="metrics")
cmd_debug = rate_limit(meta.cmd_debug, name="debug")

# Account
cmd_login = rate_limit(account.cmd_login, name="login")
cmd_logout = rate_limit(account.cmd_logout, name="logout")
cmd_session = rate_limit(account.cmd_session, name="session")
cmd_profile = rate_limit(account.cmd_profile, name="profile")
cmd_refresh = rate_limit(account.cmd_refresh, name="refresh")

# Hostel
cmd_dashboard = rate_limit(hostel.cmd_dashboard, name="dashboard")
cmd_hostel = rate_limit(hostel.cmd_hostel, name="hostel")
cmd_rooms = rate_limit(hostel.cmd_rooms, name="rooms")
cmd_addroom = rate_limit(hostel.cmd_addroom, name="addroom")
cmd_rmroom = rate_limit(hostel.cmd_rmroom, name="rmroom")
cmd_editroom = rate_limit(hostel.cmd_editroom, name="editroom")
cmd_reviews = rate_limit(hostel.cmd_reviews, name="reviews")
cmd_sethostel = rate_limit(hostel.cmd_sethostel, name="sethostel")
cmd_rmhostel = rate_limit(hostel.cmd_rmhostel, name="rmhostel")

# Tenants
cmd_tenants = rate_limit(tenants.cmd_tenants, name="tenants")
cmd_payments = rate_limit(tenants.cmd_payments, name="payments")
cmd_pay = rate_limit(tenants.cmd_pay, name="pay")
cmd_search = rate_limit(tenants.cmd_search, name="search")
cmd_addtenant = rate_limit(tenants.cmd_addtenant, name="addtenant")
cmd_edittenant = rate_limit(tenants.cmd_edittenant, name="edittenant")
cmd_rmtenant = rate_limit(tenants.cmd_rmtenant, name="rmtenant")
cmd_editpay = rate_limit(tenants.cmd_editpay, name="editpay")
cmd_rmpay = rate_limit(tenants.cmd_rmpay, name="rmpay")

# Maintenance
cmd_tickets = rate_limit(maintenance.cmd_tickets, name="tickets")
cmd_ticket = rate_limit(maintenance.cmd_ticket, name="ticket")
cmd_resolve = rate_limit(maintenance.cmd_resolve, name="resolve")
cmd_rmticket = rate_limit(maintenance.cmd_rmticket, name="rmticket")
