"""Manager analysis service - folds a manager's season into a single report.

Request flow:
1. Bootstrap (cached), entry, history and league standings fetched concurrently
2. Gameweeks 1..current processed in batches:
   - picks for every gameweek in the batch fetched concurrently
   - histories for players not seen before fetched concurrently
   - one sequential accumulation pass over the batch, ascending gameweek
3. Accumulated state assembled into the response

Accumulation never happens inside a fetch coroutine, so concurrent fetches
cannot race on a player's totals.
"""

import asyncio
import logging
import re
import time
from collections.abc import Iterator, Sequence

from fpl_analyzer.schemas.analysis import AnalysisResponse
from fpl_analyzer.services.bootstrap_cache import BootstrapCache
from fpl_analyzer.services.calculations import SeasonAccumulator
from fpl_analyzer.services.fpl_client import FplApiClient, UpstreamUnavailable
from fpl_analyzer.services.picks import GameweekPicks, PicksResolver
from fpl_analyzer.services.report import assemble_report
from fpl_analyzer.services.scoring import PlayerHistoryLoader

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
MANAGER_ID_PATTERN = re.compile(r"[0-9]+")  # ASCII digits only


class InvalidManagerIdError(ValueError):
    """Raised when a manager id is not a string of digits."""


def parse_manager_id(raw: str) -> int:
    """Validate a manager id taken from a URL path (ASCII digits only).

    Raises:
        InvalidManagerIdError: If ``raw`` is not digits only
    """
    if not MANAGER_ID_PATTERN.fullmatch(raw):
        raise InvalidManagerIdError("Invalid manager ID format")
    return int(raw)


def _batches(items: Sequence[int], size: int) -> Iterator[Sequence[int]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class AnalysisService:
    """Builds the manager analysis report from live FPL data."""

    def __init__(
        self,
        client: FplApiClient,
        bootstrap_cache: BootstrapCache,
        league_id: int,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.client = client
        self.bootstrap_cache = bootstrap_cache
        self.league_id = league_id
        self.batch_size = batch_size
        self.picks_resolver = PicksResolver(client)

    async def _resolve_or_gap(self, manager_id: int, gameweek: int) -> GameweekPicks | None:
        """Picks for a gameweek, or None if the upstream has none to give."""
        try:
            return await self.picks_resolver.resolve_picks(manager_id, gameweek)
        except UpstreamUnavailable as e:
            logger.warning(f"Manager {manager_id} GW{gameweek}: no picks ({e})")
            return None

    async def analyze_manager(
        self, manager_id: int, include_current_team: bool = False
    ) -> AnalysisResponse:
        """
        Analyze a manager's season up to the current gameweek.

        Args:
            manager_id: FPL manager (entry) id
            include_current_team: Add the current squad's fixtures and recent form

        Returns:
            The assembled analysis report

        Raises:
            UpstreamUnavailable: If bootstrap, entry, history or standings fail
        """
        start = time.monotonic()

        bootstrap, entry, history, standings = await asyncio.gather(
            self.bootstrap_cache.get(self.client.get_bootstrap_static),
            self.client.get_entry(manager_id),
            self.client.get_entry_history(manager_id),
            self.client.get_league_standings(self.league_id),
        )

        current_gw = bootstrap.current_gameweek or 0
        if current_gw == 0:
            logger.info("No current gameweek in bootstrap data; nothing to analyze")

        state = SeasonAccumulator(num_gameweeks=current_gw)
        histories = PlayerHistoryLoader(self.client)
        current_picks: GameweekPicks | None = None

        gameweeks = range(1, current_gw + 1)
        for batch in _batches(gameweeks, self.batch_size):
            # Index-addressed: slots[i] belongs to batch[i] whatever the completion order
            slots = await asyncio.gather(
                *(self._resolve_or_gap(manager_id, gw) for gw in batch)
            )

            await histories.load_many(
                pick.player_id
                for picks in slots
                if picks is not None
                for pick in picks.picks
                if bootstrap.find_player(pick.player_id) is not None
            )

            for gameweek, picks in zip(batch, slots):
                rank = history.rank_at(gameweek)
                if picks is None:
                    state.record_gap(gameweek, rank)
                    continue
                state.apply_gameweek(picks, bootstrap, histories.get, rank)
                if gameweek == current_gw:
                    current_picks = picks

        if include_current_team and current_picks is None:
            current_picks = GameweekPicks(gameweek=current_gw)

        report = assemble_report(
            entry=entry,
            history=history,
            standings=standings,
            bootstrap=bootstrap,
            state=state,
            current_gameweek=current_gw,
            current_picks=current_picks if include_current_team else None,
            history_for=histories.get,
        )

        logger.info(
            f"Analyzed manager {manager_id}: {current_gw} gameweeks, "
            f"{len(state.player_stats)} players in {time.monotonic() - start:.2f}s"
        )
        return report
