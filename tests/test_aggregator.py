import asyncio
import random

import pytest

from app.core.errors import UpstreamHTTPError, UpstreamTransportError
from app.models.media import MediaItem, MediaKind
from app.models.views import PreviewStatus
from app.services.aggregator import (
    banner_candidates,
    choose_banner_rotation,
    compose_all_genres_preview,
    compose_detail_view,
    compose_genre_view,
    compose_home_view,
)
from tests.helpers import FakeTMDB, listing, movie

GENRES = {
    "genres": [
        {"id": 28, "name": "Aksiyon"},
        {"id": 35, "name": "Komedi"},
        {"id": 18, "name": "Dram"},
    ]
}


def home_responses(**overrides):
    responses = {
        "/trending/movie/week": listing([movie(100 + i) for i in range(8)]),
        "/movie/popular": listing([movie(i) for i in range(1, 15)]),
        "/movie/now_playing": listing([movie(200), movie(201)]),
        "/movie/top_rated": listing([movie(300)]),
    }
    responses.update(overrides)
    return responses


def item(item_id):
    return MediaItem(id=item_id, kind=MediaKind.MOVIE, title=str(item_id))


@pytest.mark.asyncio
async def test_home_view_all_branches_succeed():
    client = FakeTMDB(home_responses())

    view = await compose_home_view(client)

    assert len(view.tabs.trending) == 8
    assert len(view.tabs.popular) == 14
    assert [m.id for m in view.tabs.now_playing] == [200, 201]
    assert [m.id for m in view.tabs.top_rated] == [300]
    assert sorted(client.endpoints()) == sorted(home_responses())


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failing, tab",
    [
        ("/trending/movie/week", "trending"),
        ("/movie/popular", "popular"),
        ("/movie/now_playing", "now_playing"),
        ("/movie/top_rated", "top_rated"),
    ],
)
async def test_home_view_degrades_one_failed_tab(failing, tab):
    client = FakeTMDB(home_responses(**{failing: UpstreamTransportError("timeout")}))

    view = await compose_home_view(client)

    tabs = view.tabs.model_dump()
    assert tabs[tab] == []
    for other, items in tabs.items():
        if other != tab:
            assert items, f"{other} should still be populated"


@pytest.mark.asyncio
async def test_home_view_banner_candidates_dedup():
    client = FakeTMDB(
        home_responses(
            **{
                "/trending/movie/week": listing(
                    [movie(1), movie(2), movie(500), movie(501), movie(502), movie(503)]
                )
            }
        )
    )

    view = await compose_home_view(client)

    ids = [m.id for m in view.banner_candidates]
    # top 10 popular, then the top 5 trending minus duplicates
    assert ids == list(range(1, 11)) + [500, 501, 502]


def test_banner_candidates_first_occurrence_wins():
    popular = [item(1), item(2)]
    trending = [item(2), item(3)]

    assert [m.id for m in banner_candidates(popular, trending)] == [1, 2, 3]


def test_banner_rotation_is_a_subset():
    candidates = [item(i) for i in range(12)]

    rotation = choose_banner_rotation(candidates, rng=random.Random(7))

    assert len(rotation) == 5
    assert len({m.id for m in rotation}) == 5
    assert all(m in candidates for m in rotation)
    assert len(choose_banner_rotation(candidates[:2])) == 2
    assert choose_banner_rotation([]) == []


@pytest.mark.asyncio
async def test_genre_view_clamps_requested_page_and_total_pages():
    client = FakeTMDB(
        {
            "/discover/movie": lambda params: listing(
                [movie(1)], page=int(params["page"]), total_pages=1000
            ),
            "/genre/movie/list": GENRES,
        }
    )

    view = await compose_genre_view(client, "movie", 28, page=600)

    discover_calls = [p for e, p in client.calls if e == "/discover/movie"]
    assert len(discover_calls) == 1
    assert discover_calls[0]["page"] == 500
    assert discover_calls[0]["with_genres"] == 28
    assert discover_calls[0]["sort_by"] == "popularity.desc"
    assert view.page.total_pages == 500
    assert view.page.page_number == 500
    assert view.genre.name == "Aksiyon"


@pytest.mark.asyncio
async def test_genre_view_survives_genre_lookup_failure():
    client = FakeTMDB(
        {
            "/discover/tv": listing([{"id": 9, "name": "Show"}]),
            "/genre/tv/list": UpstreamHTTPError(503, "/genre/tv/list"),
        }
    )

    view = await compose_genre_view(client, "tv", 18)

    assert view.genre is None
    assert view.kind == MediaKind.TV
    assert [m.title for m in view.page.items] == ["Show"]


@pytest.mark.asyncio
async def test_genre_view_propagates_discover_failure():
    client = FakeTMDB(
        {
            "/discover/movie": UpstreamTransportError("reset"),
            "/genre/movie/list": GENRES,
        }
    )

    with pytest.raises(UpstreamTransportError):
        await compose_genre_view(client, "movie", 28)


@pytest.mark.asyncio
async def test_all_genres_preview_isolates_failures():
    def discover(params):
        if params["with_genres"] == 35:
            return UpstreamHTTPError(500, "/discover/movie")
        return listing([movie(params["with_genres"] * 10 + i) for i in range(15)])

    client = FakeTMDB({"/genre/movie/list": GENRES, "/discover/movie": discover})

    previews = await compose_all_genres_preview(client, "movie")

    assert [p.genre.id for p in previews] == [28, 35, 18]
    by_id = {p.genre.id: p for p in previews}
    assert by_id[35].status == PreviewStatus.FAILED
    assert by_id[35].items == []
    assert by_id[28].status == PreviewStatus.OK
    assert len(by_id[28].items) == 10
    assert len(by_id[18].items) == 10
    assert all(p["page"] == 1 for e, p in client.calls if e == "/discover/movie")


@pytest.mark.asyncio
async def test_all_genres_preview_without_genres():
    client = FakeTMDB({"/genre/tv/list": UpstreamTransportError("dns")})

    assert await compose_all_genres_preview(client, "tv") == []


@pytest.mark.asyncio
async def test_detail_view_degrades_optional_branches():
    details = movie(603, "The Matrix", genres=[{"id": 28, "name": "Aksiyon"}])
    cast = [{"id": i, "name": f"Actor {i}", "order": 20 - i} for i in range(15)]
    client = FakeTMDB(
        {
            "/movie/603": details,
            "/movie/603/credits": {"cast": cast},
            "/movie/603/similar": UpstreamTransportError("timeout"),
            "/movie/603/videos": {
                "results": [
                    {"id": "a", "key": "k", "site": "YouTube", "type": "Teaser"}
                ]
            },
        }
    )

    view = await compose_detail_view(client, "movie", 603)

    assert view.details.title == "The Matrix"
    assert len(view.cast) == 10
    assert view.cast[0].order == 6
    assert view.similar == []
    assert [v.key for v in view.videos] == ["k"]


@pytest.mark.asyncio
async def test_detail_view_requires_details():
    client = FakeTMDB({"/tv/1/credits": {"cast": []}})

    with pytest.raises(UpstreamHTTPError):
        await compose_detail_view(client, "tv", 1)


class SlowTMDB(FakeTMDB):
    """Delays every endpoint except ``fast`` and records completed calls."""

    def __init__(self, responses, fast, delay=0.05):
        super().__init__(responses)
        self.fast = fast
        self.delay = delay
        self.finished = []

    async def fetch_resource(self, endpoint, params=None):
        if endpoint != self.fast:
            await asyncio.sleep(self.delay)
        result = await super().fetch_resource(endpoint, params)
        self.finished.append(endpoint)
        return result


class BarrierTMDB(FakeTMDB):
    """Holds every matching call until ``expected`` of them are in flight."""

    def __init__(self, responses, expected, prefix=""):
        super().__init__(responses)
        self.expected = expected
        self.prefix = prefix
        self.started = 0
        self.all_started = asyncio.Event()

    async def fetch_resource(self, endpoint, params=None):
        if endpoint.startswith(self.prefix):
            self.started += 1
            if self.started == self.expected:
                self.all_started.set()
            await self.all_started.wait()
        return await super().fetch_resource(endpoint, params)


@pytest.mark.asyncio
async def test_detail_view_failure_cancels_pending_branches():
    client = SlowTMDB(
        {
            "/movie/1": UpstreamHTTPError(404, "/movie/1"),
            "/movie/1/credits": {"cast": []},
            "/movie/1/similar": listing([]),
            "/movie/1/videos": {"results": []},
        },
        fast="/movie/1",
    )

    with pytest.raises(UpstreamHTTPError):
        await compose_detail_view(client, "movie", 1)
    await asyncio.sleep(0.1)

    assert client.finished == []


@pytest.mark.asyncio
async def test_genre_view_failure_cancels_genre_lookup():
    client = SlowTMDB(
        {
            "/discover/movie": UpstreamTransportError("reset"),
            "/genre/movie/list": GENRES,
        },
        fast="/discover/movie",
    )

    with pytest.raises(UpstreamTransportError):
        await compose_genre_view(client, "movie", 28)
    await asyncio.sleep(0.1)

    assert client.finished == []


@pytest.mark.asyncio
async def test_home_view_starts_all_branches_before_awaiting():
    client = BarrierTMDB(home_responses(), expected=4)

    view = await asyncio.wait_for(compose_home_view(client), timeout=1)

    assert client.started == 4
    assert len(view.tabs.top_rated) == 1


@pytest.mark.asyncio
async def test_genre_preview_starts_all_genres_before_awaiting():
    client = BarrierTMDB(
        {
            "/genre/movie/list": GENRES,
            "/discover/movie": listing([movie(1)]),
        },
        expected=3,
        prefix="/discover/",
    )

    previews = await asyncio.wait_for(
        compose_all_genres_preview(client, "movie"), timeout=1
    )

    assert client.started == 3
    assert all(p.status == PreviewStatus.OK for p in previews)
