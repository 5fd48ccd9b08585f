#!/usr/bin/env python
"""
Run a manager analysis from the command line and print the JSON report.

Usage:
    python -m scripts.analyze_manager 1234567
    python -m scripts.analyze_manager 1234567 --league 314 --current-team
    python -m scripts.analyze_manager 1234567 --output report.json
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from dotenv import load_dotenv

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fpl_analyzer.config import get_settings
from fpl_analyzer.services.analysis import (
    AnalysisService,
    InvalidManagerIdError,
    parse_manager_id,
)
from fpl_analyzer.services.bootstrap_cache import BootstrapCache
from fpl_analyzer.services.fpl_client import FplApiClient, UpstreamUnavailable

# Load environment
load_dotenv(".env.local")
load_dotenv(".env")

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def run(manager_id: int, league_id: int, current_team: bool) -> dict:
    settings = get_settings()
    async with FplApiClient(
        base_url=settings.fpl_api_base_url,
        image_base_url=settings.fpl_image_base_url,
        timeout=settings.request_timeout,
        max_concurrent=settings.max_concurrent_requests,
    ) as client:
        service = AnalysisService(
            client=client,
            bootstrap_cache=BootstrapCache(ttl=settings.cache_ttl_bootstrap),
            league_id=league_id,
            batch_size=settings.analysis_batch_size,
        )
        report = await service.analyze_manager(manager_id, include_current_team=current_team)
    return report.model_dump(by_alias=True, exclude_none=True)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Analyze an FPL manager's season")
    parser.add_argument("manager_id", help="FPL manager (entry) id")
    parser.add_argument(
        "--league", type=int, default=None, help="League to compare against (default: LEAGUE_ID)"
    )
    parser.add_argument(
        "--current-team", action="store_true", help="Include current squad fixtures and form"
    )
    parser.add_argument("--output", help="Write the report to this file instead of stdout")
    args = parser.parse_args()

    try:
        manager_id = parse_manager_id(args.manager_id)
    except InvalidManagerIdError as e:
        logger.error(str(e))
        sys.exit(2)

    league_id = args.league if args.league is not None else get_settings().league_id

    try:
        report = await run(manager_id, league_id, args.current_team)
    except UpstreamUnavailable as e:
        logger.error(f"Analysis failed: {e}")
        sys.exit(1)

    text = json.dumps(report, indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info(f"Report written to {args.output}")
    else:
        print(text)


if __name__ == "__main__":
    asyncio.run(main())
