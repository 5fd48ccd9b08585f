"""API route definitions - FPL pass-through relays and manager analysis."""

import logging
from pathlib import Path as FilePath
from typing import Any

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import FileResponse, JSONResponse, Response

from fpl_analyzer.dependencies import (
    get_analysis_service,
    get_bootstrap_cache,
    get_fpl_client,
)
from fpl_analyzer.schemas.analysis import AnalysisResponse, ErrorResponse
from fpl_analyzer.services.analysis import (
    AnalysisService,
    InvalidManagerIdError,
    parse_manager_id,
)
from fpl_analyzer.services.bootstrap_cache import BootstrapCache
from fpl_analyzer.services.fpl_client import FplApiClient, Position, UpstreamUnavailable

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api")

PLACEHOLDER_IMAGE = FilePath(__file__).resolve().parent.parent / "static" / "player-placeholder.svg"

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {500: {"model": ErrorResponse}}


def _error(status_code: int, message: str, details: str | None = None) -> JSONResponse:
    body: dict[str, str] = {"error": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


async def _relay(client: FplApiClient, path: str, message: str) -> Any:
    """Return an upstream JSON resource unchanged, or a 500 error body."""
    try:
        return await client.get_json(path)
    except UpstreamUnavailable as e:
        logger.error(f"{message}: {e}")
        return _error(500, message, str(e))


# =============================================================================
# Pass-through
# =============================================================================


@router.get("/bootstrap-static", responses=ERROR_RESPONSES)
async def get_bootstrap_static(
    client: FplApiClient = Depends(get_fpl_client),
    bootstrap_cache: BootstrapCache = Depends(get_bootstrap_cache),
) -> Any:
    """Bootstrap payload (players, teams, gameweeks), served from the cache."""
    try:
        bootstrap = await bootstrap_cache.get(client.get_bootstrap_static)
    except UpstreamUnavailable as e:
        logger.error(f"Failed to fetch bootstrap static data: {e}")
        return _error(500, "Failed to fetch bootstrap static data", str(e))
    return bootstrap.raw


@router.get("/entry/{manager_id}", responses=ERROR_RESPONSES)
async def get_entry(
    manager_id: int = Path(ge=1), client: FplApiClient = Depends(get_fpl_client)
) -> Any:
    return await _relay(client, f"/entry/{manager_id}/", "Failed to fetch manager entry data")


@router.get("/entry/{manager_id}/history", responses=ERROR_RESPONSES)
async def get_entry_history(
    manager_id: int = Path(ge=1), client: FplApiClient = Depends(get_fpl_client)
) -> Any:
    return await _relay(
        client, f"/entry/{manager_id}/history/", "Failed to fetch manager history"
    )


@router.get("/entry/{manager_id}/event/{gameweek}/picks", responses=ERROR_RESPONSES)
async def get_entry_picks(
    manager_id: int = Path(ge=1),
    gameweek: int = Path(ge=1),
    client: FplApiClient = Depends(get_fpl_client),
) -> Any:
    return await _relay(
        client,
        f"/entry/{manager_id}/event/{gameweek}/picks/",
        "Failed to fetch manager picks",
    )


@router.get("/element-summary/{player_id}", responses=ERROR_RESPONSES)
async def get_element_summary(
    player_id: int = Path(ge=1), client: FplApiClient = Depends(get_fpl_client)
) -> Any:
    return await _relay(
        client, f"/element-summary/{player_id}/", "Failed to fetch player summary"
    )


@router.get("/leagues-classic/{league_id}/standings", responses=ERROR_RESPONSES)
async def get_league_standings(
    league_id: int = Path(ge=1), client: FplApiClient = Depends(get_fpl_client)
) -> Any:
    return await _relay(
        client,
        f"/leagues-classic/{league_id}/standings/",
        "Failed to fetch league standings",
    )


# =============================================================================
# Derived views
# =============================================================================


@router.get("/player-stats/{position}", responses=ERROR_RESPONSES)
async def get_player_stats(
    position: str,
    client: FplApiClient = Depends(get_fpl_client),
    bootstrap_cache: BootstrapCache = Depends(get_bootstrap_cache),
) -> Any:
    """
    Bootstrap players for one position code: gkp, def, mid or fwd.

    An unknown code returns an empty list.
    """
    try:
        wanted = Position.from_code(position)
    except ValueError:
        return []

    try:
        bootstrap = await bootstrap_cache.get(client.get_bootstrap_static)
    except UpstreamUnavailable as e:
        logger.error(f"Failed to fetch player stats: {e}")
        return _error(500, "Failed to fetch player stats", str(e))
    return bootstrap.elements_for_position(wanted)


@router.get(
    "/player-image/{player_id}",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}},
        404: {"description": "Placeholder image returned", "content": {"image/svg+xml": {}}},
    },
)
async def get_player_image(
    player_id: int = Path(ge=1), client: FplApiClient = Depends(get_fpl_client)
) -> Response:
    """Player photo from the image host, or a placeholder with 404 on failure."""
    try:
        content, media_type = await client.get_player_image(player_id)
    except UpstreamUnavailable as e:
        logger.info(f"No image for player {player_id} ({e}); sending placeholder")
        return FileResponse(PLACEHOLDER_IMAGE, status_code=404, media_type="image/svg+xml")
    return Response(content=content, media_type=media_type)


@router.get(
    "/analyze-manager/{manager_id}",
    response_model=AnalysisResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze_manager(
    manager_id: str,
    include_current_team: bool = Query(
        default=False, description="Include current squad fixtures and last-5 form"
    ),
    service: AnalysisService = Depends(get_analysis_service),
) -> Any:
    """
    Season analysis for a manager.

    Player totals, position breakdown, weekly points and ranks, captaincy and
    bench figures, and the gap to the configured league's leader.
    """
    try:
        parsed_id = parse_manager_id(manager_id)
    except InvalidManagerIdError as e:
        return _error(400, str(e))

    try:
        return await service.analyze_manager(
            parsed_id, include_current_team=include_current_team
        )
    except UpstreamUnavailable as e:
        logger.error(f"Failed to analyze manager {parsed_id}: {e}")
        return _error(500, "Failed to analyze manager", str(e))
    except Exception as e:
        logger.exception(f"Failed to analyze manager {parsed_id}: {e}")
        return _error(500, "Failed to analyze manager")
