#!/usr/bin/env python
"""Run the API server on PORT (default 3000)."""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import uvicorn
from dotenv import load_dotenv

from fpl_analyzer.config import get_settings

load_dotenv(".env.local")
load_dotenv(".env")

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "fpl_analyzer.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=os.getenv("ENVIRONMENT", "production") == "development",
    )
