"""API response schemas."""

from fpl_analyzer.schemas.analysis import (
    AnalysisResponse,
    CurrentTeamPlayer,
    ErrorResponse,
    ManagerInfo,
    PlayerStatResponse,
    PositionSummary,
    RecentForm,
)

__all__ = [
    "AnalysisResponse",
    "CurrentTeamPlayer",
    "ErrorResponse",
    "ManagerInfo",
    "PlayerStatResponse",
    "PositionSummary",
    "RecentForm",
]
