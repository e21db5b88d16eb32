"""Tests for the local HTTP API"""

import random

import pytest
from fastapi.testclient import TestClient

from blackjack_coach.api.auth import RateLimiter, TokenAuth
from blackjack_coach.api.server import APIServer
from blackjack_coach.config import load_defaults
from blackjack_coach.db.store import MemoryStatsStore
from blackjack_coach.errors import StrategyLookupError
from blackjack_coach.trainer import scheduler as scheduler_mod
from blackjack_coach.trainer.scheduler import TrainingScheduler

TOKEN = "test-token"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


@pytest.fixture
def api(clock):
    config = load_defaults()
    config["api"]["token"] = TOKEN
    config["api"]["rate_limit_rps"] = 1000
    scheduler = TrainingScheduler.from_config(config, store=MemoryStatsStore(), rng=random.Random(4), clock=clock)
    return APIServer(config, scheduler, rng=random.Random(4))


@pytest.fixture
def client(api):
    with TestClient(api.app) as c:
        yield c


def _wrong(item):
    for action in item["available_actions"]:
        if action != item["correct_action"] and not (item["correct_action"] == "D" and action == "H"):
            return action
    raise AssertionError("no wrong action")


class TestAuth:
    """Bearer token and rate limiting"""

    def test_health_is_open(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        body = r.json()
        assert body["ok"] is True
        assert body["mode"] == "balanced"
        assert r.headers["X-Content-Type-Options"] == "nosniff"

    def test_missing_token_rejected(self, client):
        r = client.post("/next")
        assert r.status_code in (401, 403)

    def test_wrong_token_rejected(self, client):
        r = client.post("/next", headers={"Authorization": "Bearer nope"})
        assert r.status_code == 401
        assert r.json()["error"] == "Invalid authentication token"

    def test_generated_token_when_unset(self):
        assert len(TokenAuth("").token) > 20
        assert TokenAuth("abc").token == "abc"

    def test_rate_limiter_window(self):
        limiter = RateLimiter(max_requests=2, window_seconds=60)
        assert limiter.is_allowed("10.0.0.1")
        assert limiter.is_allowed("10.0.0.1")
        assert not limiter.is_allowed("10.0.0.1")
        assert limiter.is_allowed("10.0.0.2")

    def test_rate_limit_applies_to_remote_clients(self, api):
        api.rate_limiter.max_requests = 1
        with TestClient(api.app) as c:
            assert c.get("/stats/lifetime", headers=AUTH).status_code == 200
            r = c.get("/stats/lifetime", headers=AUTH)
        assert r.status_code == 429
        assert r.headers["Retry-After"] == "1"


class TestDrillFlow:
    """next / submit / skip"""

    def test_next_returns_a_drill(self, client):
        r = client.post("/next", headers=AUTH)
        assert r.status_code == 200
        item = r.json()
        assert item["correct_action"] in item["available_actions"]
        assert item["served_from_queue"] is False
        assert len(item["cards"]) in (2, 3)
        assert item["dealer_upcard"] in ["2", "3", "4", "5", "6", "7", "8", "9", "10", "A"]

    def test_next_is_idempotent_until_answered(self, client):
        first = client.post("/next", headers=AUTH).json()
        second = client.post("/next", headers=AUTH).json()
        assert first["key"] == second["key"]

    def test_next_with_mode(self, client):
        r = client.post("/next", headers=AUTH, json={"mode": "critical"})
        assert r.status_code == 200
        assert r.json()["base_weight"] > 1
        assert client.get("/health").json()["mode"] == "critical"

    def test_next_with_unknown_mode(self, client):
        r = client.post("/next", headers=AUTH, json={"mode": "expert"})
        assert r.status_code == 422

    def test_submit_correct(self, client):
        item = client.post("/next", headers=AUTH).json()
        r = client.post("/submit", headers=AUTH, json={"action": item["correct_action"], "response_time_ms": 900})
        assert r.status_code == 200
        body = r.json()
        assert body["is_correct"] is True
        assert body["streak"] == 1
        assert body["response_time_ms"] == 900
        assert body["queue_transition"] == "unchanged"

    def test_submit_wrong_queues(self, client):
        item = client.post("/next", headers=AUTH).json()
        r = client.post("/submit", headers=AUTH, json={"action": _wrong(item)})
        body = r.json()
        assert body["is_correct"] is False
        assert body["queue_transition"] == "added"
        assert body["explanation"]
        queue = client.get("/queue", headers=AUTH).json()
        assert queue["count"] == 1
        assert queue["entries"][0]["key"] == item["key"]

    def test_submit_without_drill_conflicts(self, client):
        r = client.post("/submit", headers=AUTH, json={"action": "H"})
        assert r.status_code == 409

    def test_submit_unavailable_action_conflicts(self, client):
        item = client.post("/next", headers=AUTH).json()
        while item["hand_type"] == "pair":
            client.post("/skip", headers=AUTH)
            item = client.post("/next", headers=AUTH).json()
        r = client.post("/submit", headers=AUTH, json={"action": "P"})
        assert r.status_code == 409
        assert client.get("/stats/session", headers=AUTH).json()["total"] == 0

    def test_skip(self, client):
        client.post("/next", headers=AUTH)
        assert client.post("/skip", headers=AUTH).json() == {"skipped": True}
        assert client.post("/skip", headers=AUTH).json() == {"skipped": False}

    def test_lookup_failure_is_server_error(self, client, monkeypatch):
        def broken(category, upcard, rules):
            raise StrategyLookupError(category, upcard)

        monkeypatch.setattr(scheduler_mod, "resolve", broken)
        r = client.post("/next", headers=AUTH)
        assert r.status_code == 500
        assert r.json()["error"] == "Strategy table mismatch"


class TestStatsEndpoints:

    def test_mode(self, client):
        assert client.put("/mode", headers=AUTH, json={"mode": "hard"}).json() == {"mode": "hard"}
        assert client.put("/mode", headers=AUTH, json={"mode": "nope"}).status_code == 422

    def test_session_and_lifetime(self, client):
        for _ in range(2):
            item = client.post("/next", headers=AUTH).json()
            client.post("/submit", headers=AUTH, json={"action": item["correct_action"]})
        session = client.get("/stats/session", headers=AUTH).json()
        assert session["total"] == 2
        assert session["accuracy"] == 100.0
        lifetime = client.get("/stats/lifetime", headers=AUTH).json()
        assert lifetime["total_hands"] == 2
        assert lifetime["best_streak"] == 2

    def test_reset(self, client):
        item = client.post("/next", headers=AUTH).json()
        client.post("/submit", headers=AUTH, json={"action": _wrong(item)})
        r = client.post("/reset", headers=AUTH)
        assert r.json()["total_hands"] == 0
        assert client.get("/queue", headers=AUTH).json() == {"count": 0, "entries": []}

    def test_weak_spots(self, client):
        item = client.post("/next", headers=AUTH).json()
        client.post("/submit", headers=AUTH, json={"action": _wrong(item)})
        assert client.get("/weak-spots", headers=AUTH).json() == []
        spots = client.get("/weak-spots", headers=AUTH, params={"min_attempts": 1}).json()
        assert spots[0]["key"] == item["key"]
        assert spots[0]["accuracy"] == 0

    def test_chart(self, client):
        body = client.get("/chart", headers=AUTH).json()
        assert body["upcards"][-1] == "A"
        assert body["rows"]["pair"][-1] == ["A,A"] + ["P"] * 10
