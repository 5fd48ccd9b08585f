"""FPL API client and typed views over its responses."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import httpx

logger = logging.getLogger(__name__)

FPL_BASE_URL = "https://fantasy.premierleague.com/api"
FPL_IMAGE_BASE_URL = (
    "https://resources.premierleague.com/premierleague/photos/players/110x140"
)
USER_AGENT = "FplAnalyzer/1.0 (Fantasy Premier League manager analysis)"

# HTTP status codes worth retrying at the caller
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def safe_int(val: Any, default: int = 0) -> int:
    """Safely convert API value to int, handling None and empty strings."""
    if val is None or val == "":
        return default
    try:
        return int(val)
    except (ValueError, TypeError):
        return default


def optional_int(val: Any) -> int | None:
    """Convert API value to int, keeping None for missing values."""
    if val is None or val == "":
        return None
    try:
        return int(val)
    except (ValueError, TypeError):
        return None


# =============================================================================
# Errors
# =============================================================================


class UpstreamUnavailable(Exception):
    """The statistics provider or image host could not serve a request.

    Raised on timeouts, network errors and non-2xx responses.
    """

    def __init__(
        self, endpoint: str, cause: str, status_code: int | None = None
    ) -> None:
        super().__init__(f"{endpoint}: {cause}")
        self.endpoint = endpoint
        self.cause = cause
        self.status_code = status_code

    @property
    def is_transient(self) -> bool:
        """Timeouts, network errors and 429/5xx may succeed on retry."""
        if self.status_code is None:
            return True
        return self.status_code in RETRYABLE_STATUS_CODES


class NotFoundError(LookupError):
    """A player or team id is absent from the bootstrap data."""


# =============================================================================
# Reference data
# =============================================================================


class Position(IntEnum):
    """Player position, valued by the FPL element_type code."""

    GKP = 1
    DEF = 2
    MID = 3
    FWD = 4

    @classmethod
    def from_element_type(cls, element_type: Any) -> "Position":
        """Convert an FPL element_type, rejecting unknown codes."""
        try:
            return cls(int(element_type))
        except (ValueError, TypeError) as e:
            raise ValueError(f"Unknown element_type: {element_type!r}") from e

    @classmethod
    def from_code(cls, code: str) -> "Position":
        """Convert a position code such as "mid" (case-insensitive)."""
        try:
            return cls[code.upper()]
        except KeyError as e:
            raise ValueError(f"Unknown position code: {code!r}") from e


@dataclass(slots=True)
class Team:
    """A Premier League team."""

    id: int
    name: str
    short_name: str


@dataclass(slots=True)
class Player:
    """A player (FPL "element")."""

    id: int
    web_name: str
    team_id: int
    position: Position


@dataclass(slots=True)
class Event:
    """A gameweek."""

    id: int
    is_current: bool
    finished: bool


@dataclass
class BootstrapData:
    """Core bootstrap data from FPL API, indexed by id for constant-time lookups."""

    players: list[Player]
    teams: list[Team]
    events: list[Event]
    current_gameweek: int | None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)
    _players_by_id: dict[int, Player] = field(init=False, repr=False)
    _teams_by_id: dict[int, Team] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._players_by_id = {p.id: p for p in self.players}
        self._teams_by_id = {t.id: t for t in self.teams}

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "BootstrapData":
        """Build typed bootstrap data from the raw bootstrap-static payload."""
        teams = [
            Team(
                id=safe_int(t.get("id")),
                name=t.get("name", ""),
                short_name=t.get("short_name", ""),
            )
            for t in data.get("teams", [])
        ]

        players = []
        for element in data.get("elements", []):
            try:
                position = Position.from_element_type(element.get("element_type"))
            except ValueError:
                logger.warning(
                    f"Skipping player {element.get('id')} with "
                    f"element_type={element.get('element_type')!r}"
                )
                continue
            players.append(
                Player(
                    id=safe_int(element.get("id")),
                    web_name=element.get("web_name", ""),
                    team_id=safe_int(element.get("team")),
                    position=position,
                )
            )

        events = [
            Event(
                id=safe_int(e.get("id")),
                is_current=bool(e.get("is_current")),
                finished=bool(e.get("finished")),
            )
            for e in data.get("events", [])
        ]

        current_gw = None
        for event in data.get("events", []):
            if event.get("is_current") and event.get("id") is not None:
                current_gw = safe_int(event["id"])
                break

        return cls(
            players=players,
            teams=teams,
            events=events,
            current_gameweek=current_gw,
            raw=data,
        )

    def find_player(self, player_id: int) -> Player | None:
        return self._players_by_id.get(player_id)

    def get_player(self, player_id: int) -> Player:
        player = self._players_by_id.get(player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id} not in bootstrap data")
        return player

    def find_team(self, team_id: int) -> Team | None:
        return self._teams_by_id.get(team_id)

    def get_team(self, team_id: int) -> Team:
        team = self._teams_by_id.get(team_id)
        if team is None:
            raise NotFoundError(f"Team {team_id} not in bootstrap data")
        return team

    def elements_for_position(self, position: Position) -> list[dict[str, Any]]:
        """Raw bootstrap elements of one position, in bootstrap order."""
        return [
            element
            for element in self.raw.get("elements", [])
            if safe_int(element.get("element_type")) == position.value
        ]


# =============================================================================
# Manager data
# =============================================================================


@dataclass(slots=True)
class ManagerEntry:
    """Manager identity and season summary (/entry/{id}/)."""

    manager_id: int
    first_name: str
    last_name: str
    team_name: str
    overall_rank: int | None
    overall_points: int

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(slots=True)
class GameweekRecord:
    """One gameweek of the manager's current season."""

    event: int
    points: int
    total_points: int
    overall_rank: int | None
    points_on_bench: int


@dataclass(slots=True)
class PastSeason:
    """Summary of a previous season."""

    season_name: str
    total_points: int
    rank: int | None


@dataclass(slots=True)
class ChipUsage:
    """A chip used by a manager in a season."""

    name: str  # "wildcard", "bboost", "3xc", "freehit"
    event: int  # Gameweek number when used


@dataclass
class ManagerHistory:
    """Season history, past seasons and chips (/entry/{id}/history/)."""

    current: list[GameweekRecord]
    past: list[PastSeason]
    chips: list[ChipUsage]

    def rank_at(self, gameweek: int) -> int | None:
        """Overall rank after the given gameweek, if recorded."""
        for record in self.current:
            if record.event == gameweek:
                return record.overall_rank
        return None


# =============================================================================
# Player data
# =============================================================================


@dataclass(slots=True)
class PlayerRound:
    """Points a player scored in one fixture of a round."""

    round: int
    total_points: int
    minutes: int


@dataclass(slots=True)
class Fixture:
    """An upcoming fixture from a player's point of view."""

    event: int | None
    team_h: int
    team_a: int
    is_home: bool
    difficulty: int

    @property
    def opponent_team_id(self) -> int:
        return self.team_a if self.is_home else self.team_h


@dataclass
class PlayerHistory:
    """Per-round scores and upcoming fixtures (/element-summary/{id}/)."""

    player_id: int
    rounds: list[PlayerRound] = field(default_factory=list)
    fixtures: list[Fixture] = field(default_factory=list)


# =============================================================================
# Leagues
# =============================================================================


@dataclass(slots=True)
class LeagueMember:
    """A manager in a mini-league."""

    manager_id: int
    player_name: str
    team_name: str
    rank: int
    total_points: int


@dataclass(slots=True)
class LeagueStandings:
    """League standings including league info and members (first page)."""

    league_id: int
    league_name: str
    members: list[LeagueMember]

    @property
    def leader(self) -> LeagueMember | None:
        return self.members[0] if self.members else None


# =============================================================================
# Client
# =============================================================================


class FplApiClient:
    """
    FPL API client.

    Every request carries a fixed timeout and is bounded by a semaphore.
    Failures surface as UpstreamUnavailable; this layer does not retry.
    """

    def __init__(
        self,
        base_url: str = FPL_BASE_URL,
        image_base_url: str = FPL_IMAGE_BASE_URL,
        timeout: float = 10.0,
        max_concurrent: int = 10,
    ):
        """
        Initialize the client.

        Args:
            base_url: FPL API root, without trailing slash
            image_base_url: Player photo host root, without trailing slash
            timeout: Per-request timeout in seconds
            max_concurrent: Maximum concurrent upstream requests
        """
        self.base_url = base_url.rstrip("/")
        self.image_base_url = image_base_url.rstrip("/")
        self.timeout = timeout
        self.semaphore = asyncio.Semaphore(max_concurrent)
        self._lock = asyncio.Lock()
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy initialization, coroutine-safe)."""
        if self._client is None:
            async with self._lock:
                if self._client is None:  # Double-check after acquiring lock
                    self._client = httpx.AsyncClient(
                        timeout=self.timeout,
                        headers={"User-Agent": USER_AGENT},
                        follow_redirects=True,
                    )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources (coroutine-safe)."""
        async with self._lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None

    async def __aenter__(self) -> "FplApiClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Exit async context manager and close client."""
        await self.close()

    async def _request(self, url: str, endpoint: str) -> httpx.Response:
        """GET a URL, translating every failure into UpstreamUnavailable."""
        async with self.semaphore:
            client = await self._get_client()
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                logger.warning(f"HTTP {status} from {endpoint}")
                raise UpstreamUnavailable(endpoint, f"HTTP {status}", status) from e
            except httpx.TimeoutException as e:
                logger.warning(f"Timeout fetching {endpoint}")
                raise UpstreamUnavailable(endpoint, "timed out") from e
            except httpx.RequestError as e:
                logger.warning(f"Request error fetching {endpoint}: {e}")
                raise UpstreamUnavailable(endpoint, str(e) or type(e).__name__) from e
        return response

    async def get_json(self, path: str) -> Any:
        """
        Fetch a JSON resource relative to the API root.

        Args:
            path: Resource path such as "/entry/123/" (leading slash, trailing slash)

        Returns:
            Parsed JSON body

        Raises:
            UpstreamUnavailable: On timeout, network error, non-2xx or invalid JSON
        """
        response = await self._request(f"{self.base_url}{path}", path)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailable(path, "invalid JSON body", response.status_code) from e

    async def get_bootstrap_static(self) -> dict[str, Any]:
        """Fetch the raw bootstrap-static payload (~1.8MB, no caching here)."""
        return await self.get_json("/bootstrap-static/")

    async def get_bootstrap(self) -> BootstrapData:
        """Fetch and index bootstrap-static data (players, teams, gameweeks)."""
        return BootstrapData.from_payload(await self.get_bootstrap_static())

    async def get_entry(self, manager_id: int) -> ManagerEntry:
        """Fetch manager identity and season summary."""
        data = await self.get_json(f"/entry/{manager_id}/")
        return ManagerEntry(
            manager_id=safe_int(data.get("id"), manager_id),
            first_name=data.get("player_first_name") or "",
            last_name=data.get("player_last_name") or "",
            team_name=data.get("name") or "",
            overall_rank=optional_int(data.get("summary_overall_rank")),
            overall_points=safe_int(data.get("summary_overall_points")),
        )

    async def get_entry_history(self, manager_id: int) -> ManagerHistory:
        """
        Fetch a manager's season history.

        The /entry/{id}/history endpoint returns:
        - current: gameweek entries for current season
        - past: summary of past seasons
        - chips: list of chips used (name, time, event)
        """
        data = await self.get_json(f"/entry/{manager_id}/history/")

        current = [
            GameweekRecord(
                event=safe_int(h.get("event")),
                points=safe_int(h.get("points")),
                total_points=safe_int(h.get("total_points")),
                overall_rank=optional_int(h.get("overall_rank")),
                points_on_bench=safe_int(h.get("points_on_bench")),
            )
            for h in data.get("current") or []
        ]
        past = [
            PastSeason(
                season_name=p.get("season_name", ""),
                total_points=safe_int(p.get("total_points")),
                rank=optional_int(p.get("rank")),
            )
            for p in data.get("past") or []
        ]
        chips = []
        for chip in data.get("chips") or []:
            name = chip.get("name", "")
            event = safe_int(chip.get("event"))
            if name and event > 0:
                chips.append(ChipUsage(name=name, event=event))

        return ManagerHistory(current=current, past=past, chips=chips)

    async def get_picks(self, manager_id: int, gameweek: int) -> dict[str, Any]:
        """Fetch a manager's raw squad selection for one gameweek."""
        return await self.get_json(f"/entry/{manager_id}/event/{gameweek}/picks/")

    async def get_player_history(self, player_id: int) -> PlayerHistory:
        """
        Fetch a player's round history and upcoming fixtures (element-summary).
        This is the heavy endpoint - one request per player.
        """
        data = await self.get_json(f"/element-summary/{player_id}/")

        rounds = [
            PlayerRound(
                round=safe_int(h.get("round")),
                total_points=safe_int(h.get("total_points")),
                minutes=safe_int(h.get("minutes")),
            )
            for h in data.get("history") or []
        ]
        fixtures = [
            Fixture(
                event=optional_int(f.get("event")),
                team_h=safe_int(f.get("team_h")),
                team_a=safe_int(f.get("team_a")),
                is_home=bool(f.get("is_home")),
                difficulty=safe_int(f.get("difficulty")),
            )
            for f in data.get("fixtures") or []
        ]
        return PlayerHistory(player_id=player_id, rounds=rounds, fixtures=fixtures)

    async def get_league_standings(self, league_id: int) -> LeagueStandings:
        """
        Fetch the first page of classic league standings.

        Only the leader is needed for analysis, so pagination is not followed.
        """
        data = await self.get_json(f"/leagues-classic/{league_id}/standings/")

        league_name = (data.get("league") or {}).get("name", f"League {league_id}")
        members: list[LeagueMember] = []
        for entry in (data.get("standings") or {}).get("results", []):
            manager_id = safe_int(entry.get("entry"))
            # manager_id=0 means the row could not be parsed
            if manager_id <= 0:
                logger.warning(f"Skipping invalid entry in league {league_id}: {entry}")
                continue
            members.append(
                LeagueMember(
                    manager_id=manager_id,
                    player_name=entry.get("player_name", ""),
                    team_name=entry.get("entry_name", ""),
                    rank=safe_int(entry.get("rank")),
                    total_points=safe_int(entry.get("total")),
                )
            )

        return LeagueStandings(league_id=league_id, league_name=league_name, members=members)

    async def get_player_image(self, player_id: int) -> tuple[bytes, str]:
        """
        Fetch a player's photo from the image host.

        Returns:
            Tuple of (image bytes, content type)
        """
        endpoint = f"/p{player_id}.png"
        response = await self._request(f"{self.image_base_url}{endpoint}", endpoint)
        return response.content, response.headers.get("content-type", "image/png")
