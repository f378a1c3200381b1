import asyncio
import json

import httpx
import pytest

from conftest import FakeClock, RecordingSleep, json_response, make_console
from hostel_console import console as keys
from hostel_console.errors import (
    ApiError,
    AuthError,
    StaleResultError,
    TransientError,
)
from hostel_console.models.hostel import Hostel, MessMenu, Room

HOSTEL = {
    "hostel": {
        "name": "Sunrise",
        "category": "Boys",
        "totalRooms": 12,
        "maxCapacity": 40,
    }
}
STATS = {
    "rooms": {"total": 12, "occupied": 9, "vacant": 3},
    "payments": {"paid": 20, "unpaid": 4},
    "tenants": {"total": 30, "current": 28},
    "tickets": {"total": 5, "unresolved": 2},
}
ROOMS = [
    {
        "roomNumber": "101",
        "sharingType": "Double",
        "totalBeds": 2,
        "availableBeds": 1,
        "rent": 6000,
    }
]


class Router:
    """Routes requests by (method, path) and counts hits."""

    def __init__(self, routes: dict) -> None:
        self.routes = routes
        self.hits: dict[tuple[str, str], int] = {}
        self.bodies: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        key = (request.method, request.url.path)
        self.hits[key] = self.hits.get(key, 0) + 1
        if request.content:
            self.bodies.append(json.loads(request.content))
        route = self.routes.get(key, (404, {"message": "not found"}))
        result = route(request) if callable(route) else route
        if isinstance(result, tuple):
            return json_response(*result)
        return result


@pytest.mark.asyncio
async def test_rooms_are_cached_until_expiry() -> None:
    router = Router({("GET", "/api/hostel/room/get"): (200, ROOMS)})
    clock = FakeClock()
    console = make_console(router, clock=clock)

    first = await console.rooms()
    clock.advance(120)
    second = await console.rooms()
    clock.advance(200)
    await console.rooms()
    await console.teardown()

    assert first == second
    assert first[0].number == "101"
    assert first[0].occupied_beds == 1
    assert router.hits[("GET", "/api/hostel/room/get")] == 2


@pytest.mark.asyncio
async def test_add_room_invalidates_rooms_and_stats() -> None:
    router = Router(
        {
            ("GET", "/api/hostel/room/get"): (200, ROOMS),
            ("POST", "/api/hostel/room/add"): (201, {"message": "added"}),
        }
    )
    console = make_console(router)

    await console.rooms()
    await console.add_room(Room("102", "Single", 1, 1, 8000))
    await console.rooms()
    await console.teardown()

    assert router.hits[("GET", "/api/hostel/room/get")] == 2
    assert router.bodies[-1]["roomNumber"] == "102"


@pytest.mark.asyncio
async def test_failed_mutation_still_invalidates() -> None:
    router = Router(
        {
            ("GET", "/api/maintenance/all"): (200, []),
            ("PUT", "/api/maintenance/update/t1"): (500, None),
        }
    )
    console = make_console(router)

    await console.maintenance_issues()
    with pytest.raises(ApiError):
        await console.update_issue("t1", {"status": "Resolved"})

    assert "maintenance" not in console.cache
    await console.teardown()


@pytest.mark.asyncio
async def test_mutations_are_not_retried() -> None:
    def down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    router = Router({("POST", "/api/payments/create"): down})
    sleep = RecordingSleep()
    console = make_console(router, sleep=sleep)

    with pytest.raises(TransientError):
        await console.create_payment({"tenantId": "t1", "rentAmount": 5000})
    await console.teardown()

    assert router.hits[("POST", "/api/payments/create")] == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_reads_retry_transient_failures() -> None:
    attempts = {"n": 0}

    def flaky(request: httpx.Request) -> httpx.Response:
        attempts["n"] += 1
        if attempts["n"] < 3:
            raise httpx.ConnectError("refused", request=request)
        return (200, HOSTEL)

    sleep = RecordingSleep()
    console = make_console(Router({("GET", "/api/hostel/view"): flaky}), sleep=sleep)

    hostel = await console.hostel()
    await console.teardown()

    assert hostel.name == "Sunrise"
    assert attempts["n"] == 3
    assert len(sleep.delays) == 2


@pytest.mark.asyncio
async def test_create_payment_fills_transaction_id() -> None:
    router = Router({("POST", "/api/payments/create"): (201, {"ok": True})})
    console = make_console(router)

    await console.create_payment({"tenantId": "t1", "rentAmount": 5000})
    await console.teardown()

    assert router.bodies[0]["transactionId"].startswith("TXN-")


@pytest.mark.asyncio
async def test_dashboard_degrades_when_stats_fail() -> None:
    router = Router(
        {
            ("GET", "/api/hostel/view"): (200, HOSTEL),
            ("GET", "/api/hostel/stats"): (500, None),
            ("GET", "/api/mess/today"): (
                200,
                {"breakfast": "Poha", "lunch": ["Rice", "Dal"], "dinner": []},
            ),
        }
    )
    console = make_console(router)

    dash = await console.dashboard()
    await console.teardown()

    assert dash.hostel.name == "Sunrise"
    assert dash.stats.rooms_total == 0
    assert dash.mess.breakfast == ["Poha"]
    assert dash.mess.lunch == ["Rice", "Dal"]


@pytest.mark.asyncio
async def test_dashboard_without_hostel_skips_stats() -> None:
    router = Router({("GET", "/api/hostel/view"): (200, {"hostel": {}})})
    console = make_console(router)

    dash = await console.dashboard()
    await console.teardown()

    assert dash.hostel is None
    assert ("GET", "/api/hostel/stats") not in router.hits


@pytest.mark.asyncio
async def test_dashboard_full() -> None:
    router = Router(
        {
            ("GET", "/api/hostel/view"): (200, HOSTEL),
            ("GET", "/api/hostel/stats"): (200, STATS),
            ("GET", "/api/mess/today"): (200, {}),
        }
    )
    console = make_console(router)

    dash = await console.dashboard()
    await console.teardown()

    assert dash.stats.rooms_occupied == 9
    assert dash.stats.tickets_unresolved == 2


@pytest.mark.asyncio
async def test_unauthorized_clears_cache_and_token() -> None:
    router = Router(
        {
            ("GET", "/api/hostel/view"): (200, HOSTEL),
            ("GET", "/api/hostel/room/get"): (401, {"message": "expired"}),
        }
    )
    console = make_console(router)

    await console.hostel()
    with pytest.raises(AuthError):
        await console.rooms()

    assert len(console.cache) == 0
    assert not console.client.authenticated
    await console.teardown()


@pytest.mark.asyncio
async def test_popular_feedback_filters_and_sorts() -> None:
    reviews = [
        {"name": "A", "rating": 3, "comment": "ok"},
        {"name": "B", "rating": 5, "comment": "great"},
        {"name": "C", "rating": 4, "comment": "good"},
    ]
    router = Router({("GET", "/api/review/view"): (200, reviews)})
    console = make_console(router)

    result = await console.popular_feedback()
    await console.popular_feedback()
    await console.teardown()

    assert [f.name for f in result] == ["B", "C"]
    assert router.hits[("GET", "/api/review/view")] == 1


@pytest.mark.asyncio
async def test_tenants_sends_filters() -> None:
    seen: list[httpx.Request] = []

    def tenants(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(
            200, {"tenants": [{"_id": "t1", "tenantName": "Asha"}], "total": 11}
        )

    console = make_console(Router({("GET", "/api/tenants/all"): tenants}))

    page = await console.tenants(page=2, limit=10, search="  asha ")
    await console.teardown()

    assert page.total == 11
    assert page.tenants[0].name == "Asha"
    params = seen[0].url.params
    assert params["page"] == "2"
    assert params["search"] == "asha"


ALL_KEYS = (
    keys.HOSTEL,
    keys.ROOMS,
    keys.MAINTENANCE,
    keys.STATS,
    keys.MESS,
    keys.PROFILE,
    keys.FEEDBACK,
)
SUNRISE = Hostel("Sunrise", "Boys", 12, 40)
ROOM_102 = Room("102", "Single", 1, 1, 8000)


@pytest.mark.parametrize(
    "call, method, path, invalidated",
    [
        (
            lambda c: c.create_hostel(SUNRISE),
            "POST",
            "/api/hostel/add",
            {keys.HOSTEL, keys.STATS},
        ),
        (
            lambda c: c.edit_hostel(SUNRISE),
            "PATCH",
            "/api/hostel/edit",
            {keys.HOSTEL, keys.STATS},
        ),
        (
            lambda c: c.remove_hostel(),
            "DELETE",
            "/api/hostel/remove",
            {keys.HOSTEL, keys.ROOMS, keys.STATS},
        ),
        (
            lambda c: c.edit_room("102", ROOM_102),
            "PATCH",
            "/api/hostel/room/edit/102",
            {keys.ROOMS, keys.STATS},
        ),
        (
            lambda c: c.remove_room("102"),
            "DELETE",
            "/api/hostel/room/remove/102",
            {keys.ROOMS, keys.STATS},
        ),
        (
            lambda c: c.add_tenant({"tenantName": "Asha", "roomNumber": "102"}),
            "POST",
            "/api/tenants/add",
            {keys.ROOMS, keys.STATS},
        ),
        (
            lambda c: c.update_tenant("t1", {"rentAmount": 7000}),
            "PUT",
            "/api/tenants/update/t1",
            {keys.ROOMS, keys.STATS},
        ),
        (
            lambda c: c.delete_tenant("t1"),
            "DELETE",
            "/api/tenants/delete/t1",
            {keys.ROOMS, keys.STATS},
        ),
        (
            lambda c: c.edit_payment("p1", {"rentStatus": "Paid"}),
            "PUT",
            "/api/payments/edit/p1",
            {keys.STATS},
        ),
        (
            lambda c: c.delete_payment("p1"),
            "DELETE",
            "/api/payments/delete/p1",
            {keys.STATS},
        ),
        (
            lambda c: c.create_issue({"roomNo": "102", "issue": "Leak"}),
            "POST",
            "/api/maintenance/create",
            {keys.MAINTENANCE, keys.STATS},
        ),
        (
            lambda c: c.delete_issue("m1"),
            "DELETE",
            "/api/maintenance/delete/m1",
            {keys.MAINTENANCE, keys.STATS},
        ),
    ],
)
@pytest.mark.asyncio
async def test_mutation_endpoints_and_invalidation(
    call, method, path, invalidated
) -> None:
    router = Router({(method, path): (200, {"message": "ok"})})
    console = make_console(router)
    for key in ALL_KEYS:
        console.cache.put(key, "cached")

    await call(console)

    assert router.hits == {(method, path): 1}
    for key in ALL_KEYS:
        assert (key in console.cache) is (key not in invalidated), key
    await console.teardown()


def test_hostel_to_api_uses_server_field_names() -> None:
    assert SUNRISE.to_api() == {
        "name": "Sunrise",
        "category": "Boys",
        "totalRooms": 12,
        "maxCapacity": 40,
    }


@pytest.mark.asyncio
async def test_search_tenants_sends_query() -> None:
    seen: list[httpx.Request] = []

    def search(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(200, {"tenants": [{"_id": "t2", "tenantName": "Ravi"}]})

    console = make_console(Router({("GET", "/api/tenants/search"): search}))

    page = await console.search_tenants("ravi")
    await console.teardown()

    assert seen[0].url.params["query"] == "ravi"
    assert page.tenants[0].id == "t2"


@pytest.mark.asyncio
async def test_search_supersedes_pending_tenant_listing() -> None:
    started = asyncio.Event()
    release = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/tenants/all":
            started.set()
            await release.wait()
            return json_response(200, {"tenants": [], "total": 0})
        return json_response(200, {"tenants": [{"_id": "t2"}], "total": 1})

    console = make_console(handler)

    listing = asyncio.create_task(console.tenants())
    await started.wait()
    found = await console.search_tenants("ravi")
    release.set()

    with pytest.raises(StaleResultError) as excinfo:
        await listing
    await console.teardown()

    assert excinfo.value.kind == "tenants"
    assert found.total == 1


def test_mess_menu_ignores_unexpected_shapes() -> None:
    menu = MessMenu.from_api({"breakfast": 5, "lunch": {"rice": 1}, "dinner": ""})

    assert menu == MessMenu()


@pytest.mark.asyncio
async def test_dashboard_with_malformed_menu() -> None:
    router = Router(
        {
            ("GET", "/api/hostel/view"): (200, HOSTEL),
            ("GET", "/api/hostel/stats"): (200, STATS),
            ("GET", "/api/mess/today"): (200, {"breakfast": 7, "lunch": {"a": 1}}),
        }
    )
    console = make_console(router)

    dash = await console.dashboard()
    await console.teardown()

    assert dash.mess == MessMenu()
    assert dash.stats.rooms_total == 12
