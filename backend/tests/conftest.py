"""Shared pytest fixtures and FPL payload builders for backend tests."""

from typing import Any

import pytest
import respx
from httpx import ASGITransport, AsyncClient, Response

from fpl_analyzer.dependencies import get_bootstrap_cache, get_fpl_client
from fpl_analyzer.main import app
from fpl_analyzer.services.bootstrap_cache import BootstrapCache
from fpl_analyzer.services.fpl_client import FPL_BASE_URL, FplApiClient

# Squad ids 1-15: 1-2 GKP, 3-7 DEF, 8-12 MID, 13-15 FWD
ELEMENT_TYPES = {
    **{i: 1 for i in (1, 2)},
    **{i: 2 for i in range(3, 8)},
    **{i: 3 for i in range(8, 13)},
    **{i: 4 for i in range(13, 16)},
}


# =============================================================================
# Payload builders
# =============================================================================


def make_bootstrap(current_gameweek: int | None = 2, num_events: int = 38) -> dict[str, Any]:
    """bootstrap-static payload with three teams and fifteen players."""
    return {
        "teams": [
            {"id": 1, "name": "Arsenal", "short_name": "ARS"},
            {"id": 2, "name": "Liverpool", "short_name": "LIV"},
            {"id": 3, "name": "Man City", "short_name": "MCI"},
        ],
        "elements": [
            {
                "id": player_id,
                "web_name": f"Player{player_id}",
                "team": (player_id % 3) + 1,
                "element_type": element_type,
            }
            for player_id, element_type in ELEMENT_TYPES.items()
        ],
        "events": [
            {
                "id": gw,
                "is_current": gw == current_gameweek,
                "finished": current_gameweek is not None and gw < current_gameweek,
            }
            for gw in range(1, num_events + 1)
        ],
    }


def make_picks(
    player_ids: list[int] | None = None,
    captain: int | None = None,
    chip: str | None = None,
) -> dict[str, Any]:
    """Picks payload; players fill squad slots 1..n in the given order."""
    player_ids = player_ids if player_ids is not None else list(range(1, 16))
    return {
        "active_chip": chip,
        "picks": [
            {
                "element": player_id,
                "position": slot,
                "multiplier": 0 if slot > 11 else (2 if player_id == captain else 1),
                "is_captain": player_id == captain,
                "is_vice_captain": False,
            }
            for slot, player_id in enumerate(player_ids, start=1)
        ],
    }


def make_element_summary(
    points_by_round: dict[int, int], fixtures: list[dict[str, Any]] | None = None
) -> dict[str, Any]:
    """element-summary payload with one history record per round."""
    return {
        "history": [
            {
                "round": gw,
                "total_points": points,
                "minutes": 90,
                "fixture": 100 + gw,
                "opponent_team": 1,
                "was_home": True,
            }
            for gw, points in points_by_round.items()
        ],
        "fixtures": fixtures or [],
    }


def make_entry(points: int = 102, rank: int | None = 400000) -> dict[str, Any]:
    return {
        "id": 1234,
        "player_first_name": "Jane",
        "player_last_name": "Doe",
        "name": "Doe FC",
        "summary_overall_rank": rank,
        "summary_overall_points": points,
    }


def make_history(
    ranks: dict[int, int] | None = None,
    past_ranks: list[int] | None = None,
    chips: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    ranks = ranks if ranks is not None else {1: 500000, 2: 400000}
    past_ranks = past_ranks if past_ranks is not None else [100, 200]
    return {
        "current": [
            {"event": gw, "points": 0, "total_points": 0, "overall_rank": rank}
            for gw, rank in ranks.items()
        ],
        "past": [
            {"season_name": f"20{20 + i}/{21 + i}", "total_points": 2000, "rank": rank}
            for i, rank in enumerate(past_ranks)
        ],
        "chips": chips if chips is not None else [{"name": "bboost", "event": 2, "time": ""}],
    }


def make_standings(totals: list[int] | None = None) -> dict[str, Any]:
    totals = totals if totals is not None else [150, 120]
    return {
        "league": {"id": 314, "name": "Test League"},
        "standings": {
            "has_next": False,
            "results": [
                {
                    "entry": 90 + i,
                    "player_name": f"Manager {i}",
                    "entry_name": f"Team {i}",
                    "rank": i + 1,
                    "total": total,
                }
                for i, total in enumerate(totals)
            ],
        },
    }


def mock_element_summaries(
    router: respx.Router,
    points_for: dict[int, dict[int, int]],
    fixtures: list[dict[str, Any]] | None = None,
) -> dict[int, respx.Route]:
    """Register one element-summary route per player id."""
    return {
        player_id: router.get(f"/element-summary/{player_id}/").mock(
            return_value=Response(200, json=make_element_summary(points, fixtures))
        )
        for player_id, points in points_for.items()
    }


def mock_two_week_season(router: respx.Router) -> None:
    """Mock a manager (id 1234) two gameweeks into the season.

    GW1: squad 1-15, player 4 captain, no chip, player i scores i points.
    GW2: same squad, player 4 captain, bench boost, everyone scores 2.
    League 314 leader has 150 points; the manager has 102.
    """
    router.get("/bootstrap-static/").mock(
        return_value=Response(200, json=make_bootstrap(current_gameweek=2))
    )
    router.get("/entry/1234/").mock(return_value=Response(200, json=make_entry()))
    router.get("/entry/1234/history/").mock(return_value=Response(200, json=make_history()))
    router.get("/leagues-classic/314/standings/").mock(
        return_value=Response(200, json=make_standings())
    )
    router.get("/entry/1234/event/1/picks/").mock(
        return_value=Response(200, json=make_picks(captain=4))
    )
    router.get("/entry/1234/event/2/picks/").mock(
        return_value=Response(200, json=make_picks(captain=4, chip="bboost"))
    )
    mock_element_summaries(
        router,
        {pid: {1: pid, 2: 2} for pid in range(1, 16)},
        fixtures=[{"event": 3, "team_h": 2, "team_a": 1, "is_home": False, "difficulty": 4}],
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fpl_api():
    """respx router mocking the FPL API; unmatched requests raise."""
    with respx.mock(base_url=FPL_BASE_URL, assert_all_called=False) as router:
        yield router


@pytest.fixture
async def fpl_client():
    """FPL client for testing (closed after the test)."""
    client = FplApiClient(max_concurrent=10)
    yield client
    await client.close()


@pytest.fixture
def bootstrap_cache() -> BootstrapCache:
    """Fresh bootstrap cache per test."""
    return BootstrapCache()


@pytest.fixture
async def async_client(fpl_client: FplApiClient, bootstrap_cache: BootstrapCache):
    """Async HTTP client for testing the FastAPI app with isolated singletons."""
    app.dependency_overrides[get_fpl_client] = lambda: fpl_client
    app.dependency_overrides[get_bootstrap_cache] = lambda: bootstrap_cache
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_bootstrap_response() -> dict[str, Any]:
    return make_bootstrap()
