# league_table/config.py
from __future__ import annotations

import os

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./app.db")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Text-generation collaborator (league/team names, standings automation).
# Unset => names are unavailable and automation runs in-process.
TEXTGEN_URL = os.getenv("TEXTGEN_URL") or None
TEXTGEN_TIMEOUT = float(os.getenv("TEXTGEN_TIMEOUT", "30"))

# How many times a stats read-modify-write is retried after a stale version
STATS_WRITE_RETRIES = int(os.getenv("STATS_WRITE_RETRIES", "3"))


def is_testing() -> bool:
    return os.getenv("TESTING", "0") == "1"

# Replayed responses kept by the idempotency cache (oldest evicted first)
IDEMPOTENCY_CACHE_SIZE = int(os.getenv("IDEMPOTENCY_CACHE_SIZE", "256"))
