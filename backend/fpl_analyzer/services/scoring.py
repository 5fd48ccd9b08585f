"""Player scoring resolver - points a player scored in a given gameweek."""

import asyncio
import logging
from collections.abc import Iterable

from fpl_analyzer.services.fpl_client import (
    FplApiClient,
    PlayerHistory,
    UpstreamUnavailable,
)
from fpl_analyzer.services.retry import upstream_retry

logger = logging.getLogger(__name__)


def resolve_week_points(
    player_id: int, gameweek: int, history: PlayerHistory | None
) -> int:
    """Points a player scored in a gameweek.

    A round missing from the history (blank, not yet in the game, or still to
    be played) scores 0. Double gameweeks have two records for the round and
    both count.

    Raises:
        ValueError: If the history belongs to another player
    """
    if history is None:
        return 0
    if history.player_id != player_id:
        raise ValueError(
            f"History for player {history.player_id} used to score player {player_id}"
        )
    return sum(r.total_points for r in history.rounds if r.round == gameweek)


class PlayerHistoryLoader:
    """Fetches each player's element-summary at most once per analysis.

    Results are stored only after a batch's fetches have all completed, so
    callers never observe a half-filled batch.
    """

    def __init__(self, client: FplApiClient) -> None:
        self.client = client
        self._histories: dict[int, PlayerHistory] = {}

    def __contains__(self, player_id: int) -> bool:
        return player_id in self._histories

    def get(self, player_id: int) -> PlayerHistory | None:
        return self._histories.get(player_id)

    async def load_many(self, player_ids: Iterable[int]) -> None:
        """Fetch histories for players not loaded yet, concurrently."""
        missing = [pid for pid in dict.fromkeys(player_ids) if pid not in self._histories]
        if not missing:
            return

        results = await asyncio.gather(*(self._load(pid) for pid in missing))
        for player_id, history in zip(missing, results):
            self._histories[player_id] = history

    async def _load(self, player_id: int) -> PlayerHistory:
        try:
            return await self._fetch(player_id)
        except UpstreamUnavailable as e:
            logger.warning(
                f"No history for player {player_id} ({e}); scoring their rounds as 0"
            )
            return PlayerHistory(player_id=player_id)

    @upstream_retry
    async def _fetch(self, player_id: int) -> PlayerHistory:
        return await self.client.get_player_history(player_id)
