"""Session create/resume, status and leaderboard APIs."""

import re
from datetime import date

from helpers import watch_ad


class TestCreateOrResume:
    def test_creates_session_with_zeroed_counters(self, client):
        response = client.post("/api/session", json={"username": "alice"})
        assert response.status_code == 200
        session = response.get_json()["session"]
        assert session["username"] == "alice"
        assert session["coins"] == 0
        assert session["dailyCount"] == 0
        assert session["streakCount"] == 0
        assert session["lastClaimDate"] is None
        assert re.fullmatch(r"[0-9a-f-]{36}", session["sessionId"])

    def test_default_username(self, client):
        session = client.post("/api/session", json={}).get_json()["session"]
        assert re.fullmatch(r"User\d{4,5}", session["username"])

    def test_username_trimmed_and_capped(self, client):
        session = client.post("/api/session", json={"username": "  " + "x" * 60 + "  "}).get_json()["session"]
        assert session["username"] == "x" * 40

    def test_resumes_known_session(self, client):
        first = client.post("/api/session", json={"username": "alice"}).get_json()["session"]
        again = client.post("/api/session", json={"sessionId": first["sessionId"], "username": "bob"}).get_json()["session"]
        assert again["sessionId"] == first["sessionId"]
        assert again["username"] == "alice"

    def test_unknown_id_creates_new_session(self, client):
        session = client.post("/api/session", json={"sessionId": "does-not-exist"}).get_json()["session"]
        assert session["sessionId"] != "does-not-exist"

    def test_no_body(self, client):
        response = client.post("/api/session")
        assert response.status_code == 200
        assert response.get_json()["success"] is True


class TestStatus:
    def test_requires_session_id(self, client):
        response = client.get("/api/session/status")
        assert response.status_code == 400
        assert response.get_json()["code"] == "MISSING_FIELDS"

    def test_unknown_session(self, client):
        response = client.get("/api/session/status?sessionId=missing")
        assert response.status_code == 404
        assert response.get_json()["code"] == "SESSION_NOT_FOUND"

    def test_fresh_session_can_watch(self, client, clock, make_session):
        sid = make_session()
        data = client.get(f"/api/session/status?sessionId={sid}").get_json()
        assert data["canWatch"] is True
        assert data["reasons"] == []
        assert data["dailyLimit"] == 50
        assert data["canClaimStreak"] is True

    def test_cooldown_after_reward(self, client, clock, make_session):
        sid = make_session()
        watch_ad(sid, clock)
        clock.advance(-30000)  # back to the moment of settlement
        data = client.get(f"/api/session/status?sessionId={sid}").get_json()
        assert data["canWatch"] is False
        assert data["reasons"] == ["cooldown"]
        assert data["secondsRemaining"] == 30
        assert data["dailyCount"] == 1

    def test_daily_limit_and_claimed_streak(self, client, clock, make_session):
        today = date(2025, 3, 10)
        sid = make_session(daily_count=50, daily_date=today, last_claim_date=today, streak_count=2)
        data = client.get(f"/api/session/status?session_id={sid}").get_json()
        assert data["reasons"] == ["daily_limit"]
        assert data["canClaimStreak"] is False
        assert data["streakCount"] == 2

    def test_yesterdays_count_is_reset(self, client, clock, make_session):
        sid = make_session(daily_count=50, daily_date=date(2025, 3, 9))
        data = client.get(f"/api/session/status?sessionId={sid}").get_json()
        assert data["dailyCount"] == 0
        assert data["canWatch"] is True


class TestLeaderboard:
    def test_orders_by_coins_descending(self, client, make_session):
        make_session(username="low", coins=5)
        make_session(username="high", coins=50)
        make_session(username="mid", coins=20)
        board = client.get("/api/leaderboard").get_json()["leaderboard"]
        assert board == [
            {"username": "high", "coins": 50},
            {"username": "mid", "coins": 20},
            {"username": "low", "coins": 5},
        ]

    def test_limited_to_top_ten(self, client, make_session):
        for i in range(12):
            make_session(coins=i)
        board = client.get("/api/leaderboard").get_json()["leaderboard"]
        assert len(board) == 10
        assert board[0]["coins"] == 11
        assert board[-1]["coins"] == 2

    def test_empty(self, client):
        assert client.get("/api/leaderboard").get_json()["leaderboard"] == []
