"""Pure calculation functions for manager analysis.

These functions and the SeasonAccumulator are stateless with respect to the
network: everything they need is passed in, so they can be tested in
isolation and applied in a single pass after each batch of fetches.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from fpl_analyzer.services.fpl_client import (
    BootstrapData,
    ChipUsage,
    LeagueStandings,
    NotFoundError,
    PastSeason,
    PlayerHistory,
    Position,
)
from fpl_analyzer.services.picks import ActiveChip, GameweekPicks
from fpl_analyzer.services.scoring import resolve_week_points

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

CAPTAIN_MULTIPLIER = 2
TRIPLE_CAPTAIN_MULTIPLIER = 3

DIDNT_PLAY = "Didn't Play"
NO_CHIPS = "None"


# =============================================================================
# Pure Functions
# =============================================================================


def captain_multiplier(is_captain: bool, chip: ActiveChip) -> int:
    """Multiplier applied to a pick's active points."""
    if not is_captain:
        return 1
    if chip is ActiveChip.TRIPLE_CAPTAIN:
        return TRIPLE_CAPTAIN_MULTIPLIER
    return CAPTAIN_MULTIPLIER


def counts_as_active(in_starting_11: bool, chip: ActiveChip) -> bool:
    """Whether a pick's points count toward the manager's score."""
    return in_starting_11 or chip is ActiveChip.BENCH_BOOST


def past_season_ranks(past: list[PastSeason]) -> tuple[int | str, int | str]:
    """Ranks for last season and the season before, or "Didn't Play".

    Args:
        past: Past seasons in chronological order

    Returns:
        Tuple of (last season rank, season before last rank)
    """

    def rank_of(offset: int) -> int | str:
        if len(past) < offset:
            return DIDNT_PLAY
        rank = past[-offset].rank
        return rank if rank is not None else DIDNT_PLAY

    return rank_of(1), rank_of(2)


def chips_used_label(chips: list[ChipUsage]) -> str:
    """Comma-separated chip names in the order played, or "None"."""
    return ", ".join(chip.name for chip in chips) or NO_CHIPS


def point_difference(manager_points: int, standings: LeagueStandings) -> tuple[int, int]:
    """Points relative to the league leader.

    Returns:
        Tuple of (leader's points, manager points minus leader's points).
        An empty league compares the manager with themselves.
    """
    leader = standings.leader
    top_points = leader.total_points if leader is not None else manager_points
    return top_points, manager_points - top_points


# =============================================================================
# Accumulation
# =============================================================================


@dataclass(slots=True)
class PlayerStat:
    """Season totals for one player across the manager's squads."""

    id: int
    name: str
    team: str
    position: Position
    total_points_active: int = 0
    gw_in_squad: int = 0
    starts: int = 0
    capped_points: int = 0
    player_points: int = 0


@dataclass(slots=True)
class Extremum:
    """A season high or low and the gameweek it first occurred."""

    gameweek: int
    value: int


def _keep_higher(current: Extremum | None, gameweek: int, value: int) -> Extremum:
    # Strictly greater: the earliest gameweek wins ties
    if current is None or value > current.value:
        return Extremum(gameweek, value)
    return current


def _keep_lower(current: Extremum | None, gameweek: int, value: int) -> Extremum:
    if current is None or value < current.value:
        return Extremum(gameweek, value)
    return current


HistoryLookup = Callable[[int], PlayerHistory | None]


@dataclass
class SeasonAccumulator:
    """Running analysis state for one manager.

    Gameweeks must be applied in ascending order; weekly sequences are
    addressed by gameweek number so a gameweek is written to its own slot.
    """

    num_gameweeks: int
    player_stats: dict[int, PlayerStat] = field(default_factory=dict)
    position_points: dict[Position, dict[int, int]] = field(
        default_factory=lambda: {position: {} for position in Position}
    )
    weekly_points: list[int] = field(init=False)
    weekly_ranks: list[int] = field(init=False)
    total_points_active: int = 0
    total_captaincy_points: int = 0
    total_points_lost_on_bench: int = 0
    highest_points: Extremum | None = None
    lowest_points: Extremum | None = None
    best_rank: Extremum | None = None
    worst_rank: Extremum | None = None
    last_gameweek: int = 0

    def __post_init__(self) -> None:
        self.weekly_points = [0] * self.num_gameweeks
        self.weekly_ranks = [0] * self.num_gameweeks

    def _check_order(self, gameweek: int) -> None:
        if not 1 <= gameweek <= self.num_gameweeks:
            raise ValueError(
                f"Gameweek {gameweek} outside 1..{self.num_gameweeks}"
            )
        if gameweek <= self.last_gameweek:
            raise ValueError(
                f"Gameweek {gameweek} applied after gameweek {self.last_gameweek}"
            )
        self.last_gameweek = gameweek

    def _record_rank(self, gameweek: int, rank: int | None) -> None:
        self.weekly_ranks[gameweek - 1] = rank or 0
        if rank:
            self.best_rank = _keep_lower(self.best_rank, gameweek, rank)
            self.worst_rank = _keep_higher(self.worst_rank, gameweek, rank)

    def _player_stat(self, player_id: int, bootstrap: BootstrapData) -> PlayerStat:
        stat = self.player_stats.get(player_id)
        if stat is None:
            player = bootstrap.get_player(player_id)
            team = bootstrap.get_team(player.team_id)
            stat = PlayerStat(
                id=player.id,
                name=player.web_name,
                team=team.name,
                position=player.position,
            )
            self.player_stats[player_id] = stat
        return stat

    def apply_gameweek(
        self,
        picks: GameweekPicks,
        bootstrap: BootstrapData,
        history_for: HistoryLookup,
        rank: int | None,
    ) -> int:
        """Fold one gameweek's squad into the season totals.

        Args:
            picks: The manager's squad and chip for the gameweek
            bootstrap: Reference data for names, teams and positions
            history_for: Returns a player's loaded history (None if unknown)
            rank: Manager's overall rank after the gameweek, if recorded

        Returns:
            The gameweek's active points
        """
        gameweek = picks.gameweek
        self._check_order(gameweek)
        chip = picks.active_chip
        week_total = 0

        for pick in picks.picks:
            try:
                stat = self._player_stat(pick.player_id, bootstrap)
            except NotFoundError as e:
                logger.warning(f"GW{gameweek}: skipping pick - {e}")
                continue

            points = resolve_week_points(
                pick.player_id, gameweek, history_for(pick.player_id)
            )
            stat.player_points += points

            if pick.in_starting_11:
                stat.starts += 1

            if not counts_as_active(pick.in_starting_11, chip):
                self.total_points_lost_on_bench += points
                continue

            active_points = points * captain_multiplier(pick.is_captain, chip)
            if pick.is_captain:
                stat.capped_points += active_points
                self.total_captaincy_points += active_points

            stat.total_points_active += active_points
            stat.gw_in_squad += 1
            by_player = self.position_points[stat.position]
            by_player[stat.id] = by_player.get(stat.id, 0) + active_points
            week_total += active_points

        self.weekly_points[gameweek - 1] = week_total
        self.total_points_active += week_total
        self.highest_points = _keep_higher(self.highest_points, gameweek, week_total)
        self.lowest_points = _keep_lower(self.lowest_points, gameweek, week_total)
        self._record_rank(gameweek, rank)
        return week_total

    def record_gap(self, gameweek: int, rank: int | None) -> None:
        """Record a gameweek whose picks could not be resolved.

        Its points slot stays 0 and it takes no part in the points extrema.
        """
        self._check_order(gameweek)
        self._record_rank(gameweek, rank)
