"""Tests for the gameweek picks resolver and the player scoring resolver."""

import pytest
import respx
from httpx import Response

from fpl_analyzer.services.fpl_client import (
    FplApiClient,
    PlayerHistory,
    PlayerRound,
    UpstreamUnavailable,
)
from fpl_analyzer.services.picks import ActiveChip, PicksResolver, parse_picks
from fpl_analyzer.services.scoring import PlayerHistoryLoader, resolve_week_points
from tests.conftest import make_element_summary, make_picks


class TestActiveChip:
    """Tests for mapping raw chip labels."""

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            (None, ActiveChip.NONE),
            ("", ActiveChip.NONE),
            ("bboost", ActiveChip.BENCH_BOOST),
            ("3xc", ActiveChip.TRIPLE_CAPTAIN),
            ("wildcard", ActiveChip.OTHER),
            ("freehit", ActiveChip.OTHER),
            ("manager", ActiveChip.OTHER),
        ],
    )
    def test_from_label(self, label, expected):
        assert ActiveChip.from_label(label) is expected


class TestParsePicks:
    """Tests for parse_picks."""

    def test_parses_squad_and_chip(self):
        picks = parse_picks(5, make_picks(captain=8, chip="wildcard"))

        assert picks.gameweek == 5
        assert len(picks.picks) == 15
        assert picks.active_chip is ActiveChip.OTHER
        assert picks.chip_label == "wildcard"
        captain = next(p for p in picks.picks if p.is_captain)
        assert captain.player_id == 8
        assert captain.multiplier == 2

    def test_starting_eleven_from_position_field(self):
        data = make_picks()
        # Slot order in the list does not matter, the position field does
        data["picks"].reverse()

        picks = parse_picks(1, data)

        starters = sorted(p.player_id for p in picks.picks if p.in_starting_11)
        assert starters == list(range(1, 12))

    def test_missing_position_falls_back_to_list_order(self):
        data = {"active_chip": None, "picks": [{"element": pid} for pid in range(20, 35)]}

        picks = parse_picks(1, data)

        assert [p.position for p in picks.picks] == list(range(1, 16))
        assert picks.picks[10].in_starting_11
        assert not picks.picks[11].in_starting_11

    def test_empty_payload(self):
        picks = parse_picks(3, {})

        assert picks.picks == []
        assert picks.active_chip is ActiveChip.NONE


class TestPicksResolver:
    """Tests for PicksResolver retries."""

    async def test_resolves_typed_picks(self, fpl_api: respx.Router, fpl_client: FplApiClient):
        fpl_api.get("/entry/1234/event/2/picks/").mock(
            return_value=Response(200, json=make_picks(captain=4, chip="3xc"))
        )

        picks = await PicksResolver(fpl_client).resolve_picks(1234, 2)

        assert picks.gameweek == 2
        assert picks.active_chip is ActiveChip.TRIPLE_CAPTAIN

    async def test_retries_transient_failure(self, fpl_api: respx.Router, fpl_client: FplApiClient):
        route = fpl_api.get("/entry/1234/event/2/picks/")
        route.side_effect = [Response(503), Response(200, json=make_picks())]

        picks = await PicksResolver(fpl_client).resolve_picks(1234, 2)

        assert route.call_count == 2
        assert len(picks.picks) == 15

    async def test_does_not_retry_404(self, fpl_api: respx.Router, fpl_client: FplApiClient):
        route = fpl_api.get("/entry/1234/event/2/picks/").mock(return_value=Response(404))

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await PicksResolver(fpl_client).resolve_picks(1234, 2)

        assert route.call_count == 1
        assert exc_info.value.status_code == 404


class TestResolveWeekPoints:
    """Tests for resolve_week_points."""

    @pytest.fixture
    def history(self) -> PlayerHistory:
        return PlayerHistory(
            player_id=7,
            rounds=[
                PlayerRound(round=1, total_points=6, minutes=90),
                PlayerRound(round=3, total_points=2, minutes=60),
                PlayerRound(round=3, total_points=9, minutes=90),
            ],
        )

    def test_returns_round_points(self, history: PlayerHistory):
        assert resolve_week_points(7, 1, history) == 6

    def test_missing_round_is_zero(self, history: PlayerHistory):
        assert resolve_week_points(7, 2, history) == 0
        assert resolve_week_points(7, 38, history) == 0

    def test_double_gameweek_sums_fixtures(self, history: PlayerHistory):
        assert resolve_week_points(7, 3, history) == 11

    def test_no_history_is_zero(self):
        assert resolve_week_points(7, 1, None) == 0

    def test_rejects_other_players_history(self, history: PlayerHistory):
        with pytest.raises(ValueError):
            resolve_week_points(8, 1, history)


class TestPlayerHistoryLoader:
    """Tests for PlayerHistoryLoader."""

    async def test_fetches_each_player_once(self, fpl_api: respx.Router, fpl_client: FplApiClient):
        route_1 = fpl_api.get("/element-summary/1/").mock(
            return_value=Response(200, json=make_element_summary({1: 5}))
        )
        route_2 = fpl_api.get("/element-summary/2/").mock(
            return_value=Response(200, json=make_element_summary({1: 3}))
        )
        loader = PlayerHistoryLoader(fpl_client)

        await loader.load_many([1, 2, 1])
        await loader.load_many([2, 1])

        assert route_1.call_count == 1
        assert route_2.call_count == 1
        assert 1 in loader
        assert resolve_week_points(1, 1, loader.get(1)) == 5

    async def test_failed_player_scores_zero(self, fpl_api: respx.Router, fpl_client: FplApiClient):
        fpl_api.get("/element-summary/9/").mock(return_value=Response(404))
        loader = PlayerHistoryLoader(fpl_client)

        await loader.load_many([9])

        history = loader.get(9)
        assert history is not None
        assert history.rounds == []
        assert resolve_week_points(9, 1, history) == 0

    async def test_unknown_player_returns_none(self, fpl_client: FplApiClient):
        assert PlayerHistoryLoader(fpl_client).get(42) is None
