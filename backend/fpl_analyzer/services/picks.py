"""Gameweek picks resolver - a manager's squad and chip for one gameweek."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fpl_analyzer.services.fpl_client import FplApiClient, safe_int
from fpl_analyzer.services.retry import upstream_retry

logger = logging.getLogger(__name__)

# Squad slots 1-11 start; 12-15 are the bench
STARTING_XI_SIZE = 11


class ActiveChip(Enum):
    """Chip played in a gameweek, as far as scoring is concerned."""

    NONE = "none"
    BENCH_BOOST = "bboost"
    TRIPLE_CAPTAIN = "3xc"
    OTHER = "other"  # wildcard, freehit, ... (label kept on GameweekPicks)

    @classmethod
    def from_label(cls, label: str | None) -> "ActiveChip":
        if not label:
            return cls.NONE
        if label == cls.BENCH_BOOST.value:
            return cls.BENCH_BOOST
        if label == cls.TRIPLE_CAPTAIN.value:
            return cls.TRIPLE_CAPTAIN
        return cls.OTHER


@dataclass(slots=True)
class Pick:
    """One player's slot in a manager's squad for a gameweek."""

    player_id: int
    position: int  # Squad slot 1-15
    is_captain: bool
    is_vice_captain: bool = False
    multiplier: int = 1

    @property
    def in_starting_11(self) -> bool:
        return self.position <= STARTING_XI_SIZE


@dataclass
class GameweekPicks:
    """A manager's squad selection for one gameweek."""

    gameweek: int
    picks: list[Pick] = field(default_factory=list)
    active_chip: ActiveChip = ActiveChip.NONE
    chip_label: str | None = None


def parse_picks(gameweek: int, data: dict[str, Any]) -> GameweekPicks:
    """Build typed picks from an /entry/{id}/event/{gw}/picks/ payload.

    Picks without a ``position`` field fall back to their list order
    (1-based) for the squad slot.
    """
    picks = []
    for index, raw in enumerate(data.get("picks") or []):
        position = safe_int(raw.get("position"), index + 1)
        picks.append(
            Pick(
                player_id=safe_int(raw.get("element")),
                position=position,
                is_captain=bool(raw.get("is_captain")),
                is_vice_captain=bool(raw.get("is_vice_captain")),
                multiplier=safe_int(raw.get("multiplier"), 1),
            )
        )

    label = data.get("active_chip") or None
    return GameweekPicks(
        gameweek=gameweek,
        picks=picks,
        active_chip=ActiveChip.from_label(label),
        chip_label=label,
    )


class PicksResolver:
    """Resolves typed gameweek picks, retrying transient upstream failures."""

    def __init__(self, client: FplApiClient) -> None:
        self.client = client

    @upstream_retry
    async def resolve_picks(self, manager_id: int, gameweek: int) -> GameweekPicks:
        data = await self.client.get_picks(manager_id, gameweek)
        picks = parse_picks(gameweek, data)
        logger.debug(
            f"Manager {manager_id} GW{gameweek}: {len(picks.picks)} picks, "
            f"chip={picks.chip_label}"
        )
        return picks
