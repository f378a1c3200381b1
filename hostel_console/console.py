"""Hostel console service: cached, retried reads and plain mutations.

Reads go through the session's :class:`TtlCache` and the retry executor.
Mutations are sent once and invalidate the cache keys they affect, so a lost
response can never duplicate a non-idempotent change.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

from .api_client import HostelApiClient
from .cache import TtlCache
from .errors import ApiError, AuthError
from .inflight import InflightTracker
from .models.hostel import (
    Dashboard,
    DashboardStats,
    Feedback,
    Hostel,
    MaintenanceIssue,
    MessMenu,
    Payment,
    Profile,
    Room,
    TenantPage,
)
from .models.retry import RetryState
from .retry import (
    DEFAULT_INITIAL_DELAY_S,
    DEFAULT_MAX_DELAY_S,
    DEFAULT_MAX_RETRIES,
    retry_request,
)

logger = logging.getLogger(__name__)

# Cache keys
HOSTEL = "hostel"
ROOMS = "rooms"
MAINTENANCE = "maintenance"
STATS = "stats"
MESS = "mess"
PROFILE = "profile"
FEEDBACK = "feedback"

PROFILE_MAX_AGE_S = 5 * 60
FEEDBACK_MAX_AGE_S = 15 * 60
POPULAR_MIN_RATING = 4


class HostelConsole:
    """All operations one logged-in admin can perform against the API."""

    def __init__(
        self,
        client: HostelApiClient,
        cache: TtlCache | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        initial_delay_s: float = DEFAULT_INITIAL_DELAY_S,
        max_delay_s: float = DEFAULT_MAX_DELAY_S,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        on_retry: Callable[[RetryState, Exception], None] | None = None,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else TtlCache()
        self.inflight = InflightTracker()
        self.max_retries = max_retries
        self.initial_delay_s = initial_delay_s
        self.max_delay_s = max_delay_s
        self._sleep = sleep
        self.on_retry = on_retry
        if client.on_unauthorized is None:
            client.on_unauthorized = self.cache.clear

    async def _retry(self, fetch: Callable[[], Awaitable[Any]]) -> Any:
        return await retry_request(
            fetch,
            self.max_retries,
            self.initial_delay_s,
            max_delay=self.max_delay_s,
            sleep=self._sleep,
            on_retry=self.on_retry,
        )

    async def _read(
        self,
        key: str,
        path: str,
        force_refresh: bool = False,
        max_age_s: float | None = None,
    ) -> Any:
        return await self.cache.read(
            key,
            lambda: self._retry(lambda: self.client.get(path)),
            force_refresh=force_refresh,
            max_age_s=max_age_s,
        )

    async def login(self, email: str, password: str) -> str:
        """Log in with retries on transient failures; returns the server message."""
        return await self._retry(lambda: self.client.login(email, password))

    # Reads

    async def hostel(self, force_refresh: bool = False) -> Hostel | None:
        data = await self._read(HOSTEL, "/api/hostel/view", force_refresh)
        if isinstance(data, dict) and isinstance(data.get("hostel"), dict):
            data = data["hostel"]
        if not isinstance(data, dict) or not data:
            return None
        return Hostel.from_api(data)

    async def rooms(self, force_refresh: bool = False) -> list[Room]:
        data = await self._read(ROOMS, "/api/hostel/room/get", force_refresh)
        if isinstance(data, dict):
            data = data.get("rooms") or []
        if not isinstance(data, list):
            return []
        return [Room.from_api(r) for r in data if isinstance(r, dict)]

    async def tenants(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        room_number: str | None = None,
        month: int | None = None,
        year: int | None = None,
    ) -> TenantPage:
        """List tenants; always fetched fresh and only the latest call wins.

        Raises:
            StaleResultError: A newer ``tenants``/``search_tenants`` call started
                before this one finished.
        """
        params: dict[str, Any] = {"page": page, "limit": limit}
        if search and search.strip():
            params["search"] = search.strip()
        if room_number:
            params["roomNumber"] = room_number
        if month and year:
            params["month"] = month
            params["year"] = year
        data = await self.inflight.run(
            "tenants",
            lambda: self._retry(lambda: self.client.get("/api/tenants/all", params)),
        )
        return TenantPage.from_api(data)

    async def search_tenants(self, query: str) -> TenantPage:
        data = await self.inflight.run(
            "tenants",
            lambda: self._retry(
                lambda: self.client.get("/api/tenants/search", {"query": query})
            ),
        )
        return TenantPage.from_api(data)

    async def tenant_payments(self, tenant_id: str) -> list[Payment]:
        data = await self._retry(
            lambda: self.client.get(f"/api/payments/tenant/{tenant_id}")
        )
        if isinstance(data, dict):
            data = data.get("payments") or data.get("transactions") or []
        if not isinstance(data, list):
            return []
        return [Payment.from_api(p) for p in data if isinstance(p, dict)]

    async def maintenance_issues(
        self, force_refresh: bool = False
    ) -> list[MaintenanceIssue]:
        data = await self._read(MAINTENANCE, "/api/maintenance/all", force_refresh)
        if isinstance(data, dict):
            data = data.get("issues") or data.get("data") or []
        if not isinstance(data, list):
            return []
        return [MaintenanceIssue.from_api(i) for i in data if isinstance(i, dict)]

    async def stats(self, force_refresh: bool = False) -> DashboardStats:
        data = await self._read(STATS, "/api/hostel/stats", force_refresh)
        return DashboardStats.from_api(data)

    async def mess_menu(self, force_refresh: bool = False) -> MessMenu:
        data = await self._read(MESS, "/api/mess/today", force_refresh)
        return MessMenu.from_api(data)

    async def dashboard(self, force_refresh: bool = False) -> Dashboard:
        """Hostel first; stats and mess menu concurrently once a hostel exists.

        Stats and menu failures degrade to empty defaults. Auth failures still
        propagate.
        """
        hostel = await self.hostel(force_refresh)
        if hostel is None:
            return Dashboard(hostel=None, stats=DashboardStats(), mess=MessMenu())
        stats, mess = await asyncio.gather(
            self._optional(self.stats(force_refresh), DashboardStats(), "stats"),
            self._optional(self.mess_menu(force_refresh), MessMenu(), "mess menu"),
        )
        return Dashboard(hostel=hostel, stats=stats, mess=mess)

    @staticmethod
    async def _optional(awaitable: Awaitable[Any], default: Any, label: str) -> Any:
        try:
            return await awaitable
        except AuthError:
            raise
        except ApiError as e:
            logger.warning("Dashboard %s unavailable: %s", label, e)
            return default

    async def profile(self, force_refresh: bool = False) -> Profile:
        data = await self._read(
            PROFILE, "/api/user/view-profile", force_refresh, PROFILE_MAX_AGE_S
        )
        return Profile.from_api(data)

    async def popular_feedback(self, force_refresh: bool = False) -> list[Feedback]:
        """Reviews rated 4+ sorted best first, cached for 15 minutes."""

        async def fetch() -> list[Feedback]:
            data = await self._retry(lambda: self.client.get("/api/review/view"))
            rows = data if isinstance(data, list) else []
            items = [Feedback.from_api(r) for r in rows if isinstance(r, dict)]
            popular = [f for f in items if f.rating >= POPULAR_MIN_RATING]
            return sorted(popular, key=lambda f: f.rating, reverse=True)

        return await self.cache.read(
            FEEDBACK, fetch, force_refresh=force_refresh, max_age_s=FEEDBACK_MAX_AGE_S
        )

    # Mutations

    async def _mutate(
        self, method: str, path: str, payload: Any, *invalidate: str
    ) -> Any:
        try:
            return await self.client.request(method, path, json=payload)
        finally:
            # Invalidate on failure too; the change may have been applied.
            self.cache.invalidate(*invalidate)

    async def create_hostel(self, hostel: Hostel) -> Any:
        return await self._mutate(
            "POST", "/api/hostel/add", hostel.to_api(), HOSTEL, STATS
        )

    async def edit_hostel(self, hostel: Hostel) -> Any:
        return await self._mutate(
            "PATCH", "/api/hostel/edit", hostel.to_api(), HOSTEL, STATS
        )

    async def remove_hostel(self) -> Any:
        return await self._mutate(
            "DELETE", "/api/hostel/remove", None, HOSTEL, ROOMS, STATS
        )

    async def add_room(self, room: Room) -> Any:
        return await self._mutate(
            "POST", "/api/hostel/room/add", room.to_api(), ROOMS, STATS
        )

    async def edit_room(self, room_number: str, room: Room) -> Any:
        return await self._mutate(
            "PATCH", f"/api/hostel/room/edit/{room_number}", room.to_api(), ROOMS, STATS
        )

    async def remove_room(self, room_number: str) -> Any:
        return await self._mutate(
            "DELETE", f"/api/hostel/room/remove/{room_number}", None, ROOMS, STATS
        )

    async def add_tenant(self, tenant: dict[str, Any]) -> Any:
        return await self._mutate("POST", "/api/tenants/add", tenant, ROOMS, STATS)

    async def update_tenant(self, tenant_id: str, tenant: dict[str, Any]) -> Any:
        return await self._mutate(
            "PUT", f"/api/tenants/update/{tenant_id}", tenant, ROOMS, STATS
        )

    async def delete_tenant(self, tenant_id: str) -> Any:
        return await self._mutate(
            "DELETE", f"/api/tenants/delete/{tenant_id}", None, ROOMS, STATS
        )

    async def create_payment(self, payment: dict[str, Any]) -> Any:
        payload = dict(payment)
        if not payload.get("transactionId"):
            payload["transactionId"] = f"TXN-{int(time.time() * 1000)}"
        return await self._mutate("POST", "/api/payments/create", payload, STATS)

    async def edit_payment(self, payment_id: str, payment: dict[str, Any]) -> Any:
        return await self._mutate(
            "PUT", f"/api/payments/edit/{payment_id}", payment, STATS
        )

    async def delete_payment(self, payment_id: str) -> Any:
        return await self._mutate(
            "DELETE", f"/api/payments/delete/{payment_id}", None, STATS
        )

    async def create_issue(self, issue: dict[str, Any]) -> Any:
        return await self._mutate(
            "POST", "/api/maintenance/create", issue, MAINTENANCE, STATS
        )

    async def update_issue(self, issue_id: str, changes: dict[str, Any]) -> Any:
        return await self._mutate(
            "PUT", f"/api/maintenance/update/{issue_id}", changes, MAINTENANCE, STATS
        )

    async def delete_issue(self, issue_id: str) -> Any:
        return await self._mutate(
            "DELETE", f"/api/maintenance/delete/{issue_id}", None, MAINTENANCE, STATS
        )

    async def teardown(self) -> None:
        """Drop cached data and close the HTTP client."""
        self.cache.clear()
        self.client.clear_token()
        await self.client.aclose()


__all__ = ["HostelConsole"]
