"""Manager analysis response schemas.

Field names are snake_case in Python and camelCase on the wire, matching the
front-end. Gameweek-suffixed keys keep their upper-case "GW" via explicit
aliases.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """Error body returned by every failing route."""

    error: str
    details: str | None = None


class ManagerInfo(CamelModel):
    """Manager identity plus season-wide derived figures."""

    name: str
    team_name: str
    overall_ranking: int | str  # "N/A" before the first gameweek is scored
    manager_points: int
    all_chips_used: str
    last_season_rank: int | str
    season_before_last_rank: int | str
    current_gameweek: int = Field(ge=0)
    league_id: int
    top_league_points: int
    point_difference: int
    total_points_active: int
    total_captaincy_points: int
    total_points_lost_on_bench: int
    highest_points: int
    highest_points_gw: int = Field(alias="highestPointsGW", ge=0)
    lowest_points: int
    lowest_points_gw: int = Field(alias="lowestPointsGW", ge=0)
    best_rank: int = Field(ge=0)
    best_rank_gw: int = Field(alias="bestRankGW", ge=0)
    worst_rank: int = Field(ge=0)
    worst_rank_gw: int = Field(alias="worstRankGW", ge=0)


class PlayerStatResponse(CamelModel):
    """Season totals for one player the manager has picked."""

    id: int
    name: str
    team: str
    position: str
    total_points_active: int
    gw_in_squad: int = Field(ge=0)
    starts: int = Field(ge=0)
    capped_points: int
    player_points: int


class PositionPlayer(CamelModel):
    """A player's active points contribution within a position."""

    name: str
    points: int


class PositionSummary(CamelModel):
    """Active points per position, best contributors first."""

    position: str
    total_points: int
    players: list[PositionPlayer]


class FixturePreview(CamelModel):
    """One upcoming fixture."""

    opponent: str
    is_home: bool
    difficulty: int


class CurrentTeamPlayer(CamelModel):
    """A player in the current squad with their next fixtures."""

    name: str
    position: str
    next_fixtures: list[FixturePreview]


class RecentFormPlayer(CamelModel):
    """A current squad player's points over the recent gameweeks."""

    name: str
    position: str
    team: str
    last5_gw_points: list[int] = Field(alias="last5GWPoints")
    total_last5_points: int = Field(alias="totalLast5Points")


class RecentForm(CamelModel):
    """Recent-window view: gameweek labels and per-player points."""

    players: list[RecentFormPlayer]
    gameweeks: list[str]


class AnalysisResponse(CamelModel):
    """Response for GET /api/analyze-manager/{manager_id}."""

    manager_info: ManagerInfo
    player_stats: list[PlayerStatResponse]
    position_summary: list[PositionSummary]
    weekly_points: list[int]
    weekly_ranks: list[int]
    current_team: list[CurrentTeamPlayer] | None = None
    last5_gws_data: RecentForm | None = Field(default=None, alias="last5GWsData")
