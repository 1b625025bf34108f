"""Reward economy: tunables and the pure policy functions built on them.

Everything here is a function of stored timestamps and counters, so the same
rules back the start-ad pre-check, settlement, and the status endpoint.
"""

from __future__ import annotations

import math
import os
import time
from datetime import date, datetime, timedelta, timezone

from errors import AlreadyClaimed

# ---- Config ----
COIN_PER_AD = int(os.getenv("COIN_PER_AD", "10"))
COOLDOWN_MS = int(os.getenv("AD_COOLDOWN_MS", "30000"))
AD_MIN_PLAY_MS = int(os.getenv("AD_MIN_PLAY_MS", "18000"))
DAILY_LIMIT = int(os.getenv("AD_DAILY_LIMIT", "50"))
AD_TOKEN_TTL_MS = int(os.getenv("AD_TOKEN_TTL_SECONDS", "600")) * 1000

# Daily ad count => bonus coins (exact match only)
MILESTONE_BONUSES = {
    10: 20,
    25: 50,
    50: 100,
}

# Streak length => bonus coins; anything past the last entry pays the last entry.
STREAK_BONUSES = {
    1: 10,
    2: 20,
    3: 30,
}


def now_ms() -> int:
    return int(time.time() * 1000)


def utc_day(ts_ms: int) -> date:
    return datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc).date()


def cooldown_wait_seconds(last_ad_time: int, now: int) -> int:
    """Seconds left before another ad reward may be granted (0 = ready)."""
    elapsed = now - int(last_ad_time or 0)
    if elapsed >= COOLDOWN_MS:
        return 0
    return math.ceil((COOLDOWN_MS - elapsed) / 1000)


def effective_daily_count(daily_count: int, daily_date: date | None, today: date) -> int:
    # A counter from an earlier UTC day no longer counts against today's limit.
    if daily_date != today:
        return 0
    return int(daily_count or 0)


def milestone_bonus(daily_count: int) -> int:
    return MILESTONE_BONUSES.get(daily_count, 0)


def token_expired(created_at: int, now: int) -> bool:
    return now - int(created_at) > AD_TOKEN_TTL_MS


def next_streak(last_claim_date: date | None, streak_count: int, today: date) -> int:
    """Streak length after claiming today; raises AlreadyClaimed for a same-day claim."""
    if last_claim_date is not None and last_claim_date >= today:
        raise AlreadyClaimed()
    if last_claim_date == today - timedelta(days=1):
        return int(streak_count or 0) + 1
    return 1


def streak_bonus(streak: int) -> int:
    top = max(STREAK_BONUSES)
    return STREAK_BONUSES[min(max(streak, 1), top)]
