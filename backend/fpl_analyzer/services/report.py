"""Report assembler - shapes accumulated analysis state into the response."""

import logging

from fpl_analyzer.schemas.analysis import (
    AnalysisResponse,
    CurrentTeamPlayer,
    FixturePreview,
    ManagerInfo,
    PlayerStatResponse,
    PositionPlayer,
    PositionSummary,
    RecentForm,
    RecentFormPlayer,
)
from fpl_analyzer.services.calculations import (
    Extremum,
    HistoryLookup,
    SeasonAccumulator,
    chips_used_label,
    past_season_ranks,
    point_difference,
)
from fpl_analyzer.services.fpl_client import (
    BootstrapData,
    LeagueStandings,
    ManagerEntry,
    ManagerHistory,
    NotFoundError,
    Position,
)
from fpl_analyzer.services.picks import GameweekPicks
from fpl_analyzer.services.scoring import resolve_week_points

logger = logging.getLogger(__name__)

RECENT_WINDOW = 5  # Gameweeks in the recent-form view
UPCOMING_FIXTURES = 5  # Fixtures per player in the current-team view


def build_manager_info(
    entry: ManagerEntry,
    history: ManagerHistory,
    standings: LeagueStandings,
    state: SeasonAccumulator,
    current_gameweek: int,
) -> ManagerInfo:
    last_season, season_before = past_season_ranks(history.past)
    top_points, difference = point_difference(entry.overall_points, standings)

    def value(extremum: Extremum | None) -> int:
        return extremum.value if extremum is not None else 0

    def gameweek(extremum: Extremum | None) -> int:
        return extremum.gameweek if extremum is not None else 0

    return ManagerInfo(
        name=entry.full_name,
        team_name=entry.team_name,
        overall_ranking=entry.overall_rank or "N/A",
        manager_points=entry.overall_points,
        all_chips_used=chips_used_label(history.chips),
        last_season_rank=last_season,
        season_before_last_rank=season_before,
        current_gameweek=current_gameweek,
        league_id=standings.league_id,
        top_league_points=top_points,
        point_difference=difference,
        total_points_active=state.total_points_active,
        total_captaincy_points=state.total_captaincy_points,
        total_points_lost_on_bench=state.total_points_lost_on_bench,
        highest_points=value(state.highest_points),
        highest_points_gw=gameweek(state.highest_points),
        lowest_points=value(state.lowest_points),
        lowest_points_gw=gameweek(state.lowest_points),
        best_rank=value(state.best_rank),
        best_rank_gw=gameweek(state.best_rank),
        worst_rank=value(state.worst_rank),
        worst_rank_gw=gameweek(state.worst_rank),
    )


def sorted_player_stats(state: SeasonAccumulator) -> list[PlayerStatResponse]:
    """All player stats, highest active points first (ties keep first-seen order)."""
    ordered = sorted(
        state.player_stats.values(),
        key=lambda stat: stat.total_points_active,
        reverse=True,
    )
    return [
        PlayerStatResponse(
            id=stat.id,
            name=stat.name,
            team=stat.team,
            position=stat.position.name,
            total_points_active=stat.total_points_active,
            gw_in_squad=stat.gw_in_squad,
            starts=stat.starts,
            capped_points=stat.capped_points,
            player_points=stat.player_points,
        )
        for stat in ordered
    ]


def position_summaries(state: SeasonAccumulator) -> list[PositionSummary]:
    """One summary per position in GKP, DEF, MID, FWD order."""
    summaries = []
    for position in Position:
        contributions = state.position_points[position]
        players = sorted(
            (
                PositionPlayer(name=state.player_stats[pid].name, points=points)
                for pid, points in contributions.items()
            ),
            key=lambda p: p.points,
            reverse=True,
        )
        summaries.append(
            PositionSummary(
                position=position.name,
                total_points=sum(contributions.values()),
                players=players,
            )
        )
    return summaries


def recent_gameweeks(current_gameweek: int, window: int = RECENT_WINDOW) -> list[int]:
    """The last ``window`` gameweeks up to the current one, oldest first."""
    return list(range(max(1, current_gameweek - window + 1), current_gameweek + 1))


def build_current_team(
    picks: GameweekPicks, bootstrap: BootstrapData, history_for: HistoryLookup
) -> list[CurrentTeamPlayer]:
    """Current squad in slot order with each player's next fixtures."""
    team = []
    for pick in picks.picks:
        player = bootstrap.find_player(pick.player_id)
        if player is None:
            continue

        history = history_for(pick.player_id)
        fixtures = []
        for fixture in (history.fixtures if history else [])[:UPCOMING_FIXTURES]:
            try:
                opponent = bootstrap.get_team(fixture.opponent_team_id)
            except NotFoundError as e:
                logger.warning(f"Skipping fixture for player {player.id}: {e}")
                continue
            fixtures.append(
                FixturePreview(
                    opponent=opponent.short_name,
                    is_home=fixture.is_home,
                    difficulty=fixture.difficulty,
                )
            )

        team.append(
            CurrentTeamPlayer(
                name=player.web_name,
                position=player.position.name,
                next_fixtures=fixtures,
            )
        )
    return team


def build_recent_form(
    picks: GameweekPicks,
    bootstrap: BootstrapData,
    history_for: HistoryLookup,
    current_gameweek: int,
) -> RecentForm:
    """Points over the recent gameweeks for every current squad player."""
    gameweeks = recent_gameweeks(current_gameweek)
    players = []
    for pick in picks.picks:
        player = bootstrap.find_player(pick.player_id)
        team = bootstrap.find_team(player.team_id) if player else None
        if player is None or team is None:
            continue

        history = history_for(pick.player_id)
        points = [resolve_week_points(player.id, gw, history) for gw in gameweeks]
        players.append(
            RecentFormPlayer(
                name=player.web_name,
                position=player.position.name,
                team=team.short_name,
                last5_gw_points=points,
                total_last5_points=sum(points),
            )
        )

    players.sort(key=lambda p: p.total_last5_points, reverse=True)
    return RecentForm(players=players, gameweeks=[f"GW{gw}" for gw in gameweeks])


def assemble_report(
    entry: ManagerEntry,
    history: ManagerHistory,
    standings: LeagueStandings,
    bootstrap: BootstrapData,
    state: SeasonAccumulator,
    current_gameweek: int,
    current_picks: GameweekPicks | None = None,
    history_for: HistoryLookup | None = None,
) -> AnalysisResponse:
    """Build the analysis response.

    The current-team and recent-form views are included only when the
    current gameweek's picks (and a history lookup) are supplied.
    """
    report = AnalysisResponse(
        manager_info=build_manager_info(entry, history, standings, state, current_gameweek),
        player_stats=sorted_player_stats(state),
        position_summary=position_summaries(state),
        weekly_points=list(state.weekly_points),
        weekly_ranks=list(state.weekly_ranks),
    )

    if current_picks is not None and history_for is not None:
        report.current_team = build_current_team(current_picks, bootstrap, history_for)
        report.last5_gws_data = build_recent_form(
            current_picks, bootstrap, history_for, current_gameweek
        )

    return report
