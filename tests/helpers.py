"""Test helpers shared across modules (imported after conftest sets the env)."""

import economy
from ads import issue_token, settle_reward
from extensions import db
from models_sessions import GameSession

# 2025-03-10T12:00:00Z
T0 = 1741608000000
DAY_MS = 24 * 60 * 60 * 1000


class FakeClock:
    def __init__(self, start: int):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


def load(session_id: str) -> GameSession:
    db.session.expire_all()
    return db.session.get(GameSession, session_id)


def watch_ad(session_id: str, clock: FakeClock) -> dict:
    """Issue, wait out the ad, settle, then wait out the cooldown."""
    ad_token = issue_token(db.session, session_id)
    clock.advance(economy.AD_MIN_PLAY_MS)
    result = settle_reward(db.session, session_id, ad_token.token)
    clock.advance(economy.COOLDOWN_MS)
    return result
