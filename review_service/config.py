"""Runtime configuration for the review service.

Values are read from the process environment (optionally populated from a
``.env`` file) once at import time.
"""

from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

DATABASE_ENV_KEY = "DATABASE_URL"
DATABASE_URL: str = os.getenv(DATABASE_ENV_KEY, "sqlite+aiosqlite:///./reviews.db")
SQL_ECHO: bool = os.getenv("SQL_ECHO", "false").lower() == "true"

ROOT_PATH = os.getenv("ROOT_PATH", "")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "2509"))

CORS_ORIGINS: List[str] = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_DETAILS_LIMIT = int(os.getenv("DEFAULT_DETAILS_LIMIT", "50"))
DEFAULT_TIMESERIES_DAYS = 30
MAX_TIMESERIES_DAYS = int(os.getenv("MAX_TIMESERIES_DAYS", "366"))
DEFAULT_SUMMARY_DAYS = 7
