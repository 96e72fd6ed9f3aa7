"""Shared fixtures: an in-memory store and a scripted ESI transport."""

import asyncio
from collections import Counter, defaultdict
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from higgs.clients import ESIClient, RateLimiter
from higgs.core.config import HiggsConfig
from higgs.storage import InsertOutcome

ESI_TEST_URL = "https://esi.test"


class InMemoryStore:
    """Dict-backed store keyed on ``_id``."""

    def __init__(self):
        self.collections: dict[str, dict[Any, dict]] = defaultdict(dict)
        self.insert_log: list[tuple[str, Any]] = []
        self.queries: list[str] = []

    async def insert(self, collection: str, record: dict[str, Any]) -> InsertOutcome:
        await asyncio.sleep(0)
        docs = self.collections[collection]
        key = record["_id"]
        if key in docs:
            return InsertOutcome.DUPLICATE
        docs[key] = dict(record)
        self.insert_log.append((collection, key))
        return InsertOutcome.INSERTED

    async def query(
        self, collection: str, filter: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        self.queries.append(collection)
        return [dict(doc) for doc in self.collections[collection].values()]

    async def delete_all(self, collection: str) -> int:
        removed = len(self.collections[collection])
        self.collections[collection].clear()
        return removed

    async def close(self) -> None:
        pass

    def count(self, collection: str) -> int:
        return len(self.collections[collection])


Route = Union[Any, Callable[[httpx.Request], httpx.Response]]


class FakeESI:
    """Scripted ESI server for httpx.MockTransport.

    Routes are keyed by path, or by (path, page) for paginated lists. A route
    value is either a JSON payload or a callable returning a response.
    """

    def __init__(self):
        self.routes: dict[Any, Route] = {}
        self.requests: list[str] = []
        self.counts: Counter = Counter()
        self.on_request: Optional[Callable[[str], None]] = None

    def add(self, path: str, payload: Route, page: Optional[int] = None) -> None:
        key = (path, page) if page is not None else path
        self.routes[key] = payload

    def fail(self, path: str, status: int = 500) -> None:
        self.routes[path] = lambda request: httpx.Response(status, json={"error": "nope"})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        page = request.url.params.get("page")
        self.requests.append(path)
        self.counts[path] += 1
        if self.on_request:
            self.on_request(path)

        key = (path, int(page)) if page is not None else path
        route = self.routes.get(key, self.routes.get(path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        if callable(route):
            return route(request)
        return httpx.Response(200, json=route)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def config():
    """Loader config pointed at the fake ESI host, with no warm-up pause."""
    return HiggsConfig(
        esi_base_url=ESI_TEST_URL,
        startup_delay=0.0,
        retry_limit=25,
        max_routines=2,
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def fake_esi():
    return FakeESI()


@pytest.fixture
def make_client(config):
    """Factory building an ESIClient on top of a mock transport."""

    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
        retry_limit: Optional[int] = None,
        rate_limit_threshold: int = 1000,
        rate_limiter: Optional[RateLimiter] = None,
        throttle_poll_delay: float = 0.0,
    ) -> ESIClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ESIClient(
            config=config,
            rate_limiter=rate_limiter,
            http_client=http,
            retry_limit=retry_limit,
            rate_limit_threshold=rate_limit_threshold,
            retry_delay=0.0,
            throttle_poll_delay=throttle_poll_delay,
        )

    return _make


# A tiny but complete universe: one region with one constellation holding two
# systems that share a planet reference, plus a handful of item types.
REGION_ID = 10000001
CONSTELLATION_ID = 20000001
SYSTEM_IDS = [30000001, 30000002]
STAR_ID = 40000001
PLANET_ID = 40000002
MOON_ID = 40000003
BELT_ID = 40000004
STARGATE_ID = 50000001
STATION_ID = 60000001


def populate_universe(esi: FakeESI) -> None:
    """Register every route a full snapshot needs."""
    esi.add("/latest/universe/regions/", [REGION_ID])
    esi.add(
        f"/latest/universe/regions/{REGION_ID}/",
        {"region_id": REGION_ID, "name": "Derelik", "constellations": [CONSTELLATION_ID]},
    )
    esi.add("/latest/universe/constellations/", [CONSTELLATION_ID])
    esi.add(
        f"/latest/universe/constellations/{CONSTELLATION_ID}/",
        {
            "constellation_id": CONSTELLATION_ID,
            "name": "Kiereend",
            "region_id": REGION_ID,
            "position": {"x": 1.0, "y": 2.0, "z": 3.0},
            "systems": SYSTEM_IDS,
        },
    )
    esi.add("/latest/universe/systems/", SYSTEM_IDS)
    esi.add(
        f"/latest/universe/systems/{SYSTEM_IDS[0]}/",
        {
            "system_id": SYSTEM_IDS[0],
            "name": "Tanoo",
            "constellation_id": CONSTELLATION_ID,
            "security_status": 0.86,
            "star_id": STAR_ID,
            "planets": [
                {
                    "planet_id": PLANET_ID,
                    "moons": [MOON_ID],
                    "asteroid_belts": [BELT_ID],
                }
            ],
            "stargates": [STARGATE_ID],
            "stations": [STATION_ID],
        },
    )
    esi.add(
        f"/latest/universe/systems/{SYSTEM_IDS[1]}/",
        {
            "system_id": SYSTEM_IDS[1],
            "name": "Lashesih",
            "constellation_id": CONSTELLATION_ID,
            "security_status": 0.7,
            "star_id": 0,
            "planets": [{"planet_id": PLANET_ID, "moons": [MOON_ID, 0]}],
            "stargates": [STARGATE_ID],
        },
    )
    esi.add(
        f"/v1/universe/stars/{STAR_ID}/",
        {
            "name": "Tanoo - Star",
            "age": 9398686722,
            "luminosity": 0.06615000218153,
            "radius": 346600000,
            "solar_system_id": SYSTEM_IDS[0],
            "spectral_class": "K2 V",
            "temperature": 3953,
            "type_id": 45041,
        },
    )
    esi.add(
        f"/v1/universe/planets/{PLANET_ID}/",
        {"planet_id": PLANET_ID, "name": "Tanoo I", "system_id": SYSTEM_IDS[0], "type_id": 11},
    )
    esi.add(
        f"/v1/universe/moons/{MOON_ID}/",
        {"moon_id": MOON_ID, "name": "Tanoo I - Moon 1", "system_id": SYSTEM_IDS[0]},
    )
    esi.add(
        f"/v1/universe/asteroid_belts/{BELT_ID}/",
        {"name": "Tanoo I - Asteroid Belt 1", "system_id": SYSTEM_IDS[0]},
    )
    esi.add(
        f"/v1/universe/stargates/{STARGATE_ID}/",
        {
            "stargate_id": STARGATE_ID,
            "name": "Stargate (Sasta)",
            "system_id": SYSTEM_IDS[0],
            "type_id": 29624,
            "destination": {"stargate_id": 50000002, "system_id": 30000003},
        },
    )
    esi.add(
        f"/v2/universe/stations/{STATION_ID}/",
        {
            "station_id": STATION_ID,
            "name": "Tanoo V - Moon 1 - Ammatar Consulate Bureau",
            "system_id": SYSTEM_IDS[0],
            "type_id": 2502,
            "services": ["bounty-missions", "courier-missions"],
        },
    )
    esi.add("/v1/universe/types/", [34, 35], page=1)
    esi.add("/v1/universe/types/", [], page=2)
    esi.add("/v3/universe/types/34/", {"type_id": 34, "name": "Tritanium", "group_id": 18, "published": True})
    esi.add("/v3/universe/types/35/", {"type_id": 35, "name": "Pyerite", "group_id": 18, "published": True})
    esi.add("/v1/universe/groups/", [18], page=1)
    esi.add("/v1/universe/groups/", [], page=2)
    esi.add(
        "/v1/universe/groups/18/",
        {"group_id": 18, "name": "Mineral", "category_id": 4, "published": True, "types": [34, 35]},
    )
    esi.add("/v1/universe/categories/", [4])
    esi.add(
        "/v1/universe/categories/4/",
        {"category_id": 4, "name": "Material", "published": True, "groups": [18]},
    )


@pytest.fixture
def universe_esi(fake_esi):
    """FakeESI with a complete small universe registered."""
    populate_universe(fake_esi)
    return fake_esi
