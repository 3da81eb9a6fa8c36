from datetime import timedelta

import pytest

from quizrank.services.leaderboard_service import LeaderboardService, leaderboard_service
from quizrank.services.scoring_service import scoring_service
from quizrank.utils.cache import cache_service

from conftest import BASE_TIME


@pytest.fixture
def ranked(db):
    """Leaderboard computed over the whole population"""
    return lambda: LeaderboardService(size=10_000).get_leaderboard(db, use_cache=False)


class FakeRedis:
    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value

    def keys(self, pattern):
        prefix = pattern.rstrip("*")
        return [k for k in self.store if k.startswith(prefix)]

    def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)


class TestGlobalLeaderboard:

    def test_only_latest_attempt_per_quiz_counts(self, db, make_user, make_quiz, add_attempt):
        user = make_user()
        quiz_a, quiz_b = make_quiz(), make_quiz(title="Investing")
        add_attempt(user, quiz_a, attempt_number=1, points=50, minutes=0)
        add_attempt(user, quiz_a, attempt_number=2, points=85, minutes=10)
        add_attempt(user, quiz_b, attempt_number=1, points=100, minutes=5)

        entry = leaderboard_service.get_leaderboard(db, use_cache=False)[0]

        assert entry["total_points"] == 185
        assert entry["total_topics"] == 2
        assert entry["last_activity"] == BASE_TIME + timedelta(minutes=10)

    def test_latest_is_highest_attempt_number_not_highest_points(self, db, make_user, make_quiz, add_attempt):
        user, quiz = make_user(), make_quiz()
        add_attempt(user, quiz, attempt_number=1, points=90)
        add_attempt(user, quiz, attempt_number=2, points=40, minutes=1)

        entry = leaderboard_service.get_leaderboard(db, use_cache=False)[0]

        assert entry["total_points"] == 40

    def test_users_without_attempts_are_included(self, db, make_user, make_quiz, add_attempt):
        active = make_user(name="Active")
        idle = make_user(name="Idle")
        add_attempt(active, make_quiz(), attempt_number=1, points=60)

        entries = leaderboard_service.get_leaderboard(db, use_cache=False)

        assert [e["name"] for e in entries] == ["Active", "Idle"]
        assert entries[1]["total_points"] == 0
        assert entries[1]["total_topics"] == 0
        assert entries[1]["last_activity"] == idle.created_at
        assert entries[1]["rank"] == 2

    def test_ties_broken_by_recent_activity(self, db, make_user, make_quiz, add_attempt):
        early, late, top = make_user(name="Early"), make_user(name="Late"), make_user(name="Top")
        quiz = make_quiz()
        add_attempt(early, quiz, attempt_number=1, points=70, minutes=1)
        add_attempt(late, quiz, attempt_number=1, points=70, minutes=9)
        add_attempt(top, quiz, attempt_number=1, points=95, minutes=0)

        entries = leaderboard_service.get_leaderboard(db, use_cache=False)

        assert [(e["name"], e["rank"]) for e in entries] == [("Top", 1), ("Late", 2), ("Early", 3)]

    def test_truncated_to_top_fifty(self, db, make_user, make_quiz, add_attempt):
        quiz = make_quiz()
        for points in range(1, 56):
            add_attempt(make_user(), quiz, attempt_number=1, points=points)

        entries = leaderboard_service.get_leaderboard(db, use_cache=False)

        assert len(entries) == 50
        assert [e["rank"] for e in entries] == list(range(1, 51))
        assert entries[0]["total_points"] == 55
        assert entries[-1]["total_points"] == 6

    def test_entry_fields(self, db, make_user):
        user = make_user(name="Ada")

        entry = leaderboard_service.get_leaderboard(db, use_cache=False)[0]

        assert entry == {
            "user_id": str(user.id),
            "name": "Ada",
            "email": user.email,
            "profile_picture": "",
            "total_points": 0,
            "total_topics": 0,
            "last_activity": user.created_at,
            "rank": 1,
        }


class TestUserRank:

    def test_user_without_attempts(self, db, make_user):
        assert leaderboard_service.get_user_rank(db, make_user().id) == {
            "user_stats": None, "rank": None
        }

    def test_user_stats_are_deduplicated(self, db, make_user, make_quiz, add_attempt):
        user = make_user()
        quiz_a, quiz_b = make_quiz(), make_quiz(title="Investing")
        add_attempt(user, quiz_a, attempt_number=1, points=50, minutes=0)
        add_attempt(user, quiz_a, attempt_number=2, points=85, minutes=10)
        add_attempt(user, quiz_b, attempt_number=1, points=100, minutes=5)

        result = leaderboard_service.get_user_rank(db, user.id)

        assert result["user_stats"] == {
            "total_points": 185,
            "total_topics": 2,
            "last_activity": BASE_TIME + timedelta(minutes=10),
        }
        assert result["rank"] == 1

    def test_rank_outside_top_fifty(self, db, make_user, make_quiz, add_attempt):
        quiz = make_quiz()
        users = [make_user() for _ in range(55)]
        for points, user in enumerate(users, start=1):
            add_attempt(user, quiz, attempt_number=1, points=points)

        assert leaderboard_service.get_user_rank(db, users[0].id)["rank"] == 55
        assert leaderboard_service.get_user_rank(db, users[-1].id)["rank"] == 1

    def test_tied_users_share_rank(self, db, make_user, make_quiz, add_attempt):
        quiz = make_quiz()
        a, b, c = make_user(), make_user(), make_user()
        add_attempt(a, quiz, attempt_number=1, points=90)
        add_attempt(b, quiz, attempt_number=1, points=60)
        add_attempt(c, quiz, attempt_number=1, points=60, minutes=3)

        assert leaderboard_service.get_user_rank(db, b.id)["rank"] == 2
        assert leaderboard_service.get_user_rank(db, c.id)["rank"] == 2

    def test_rank_agrees_with_global_aggregation(self, db, make_user, make_quiz, add_attempt, ranked):
        quizzes = [make_quiz(title=f"Quiz {i}") for i in range(3)]
        users = [make_user() for _ in range(8)]
        history = {
            0: [(0, [40, 85]), (1, [100])],
            1: [(0, [100])],
            2: [(1, [30, 30, 85]), (2, [55])],
            3: [(2, [70])],
            4: [(0, [10, 20])],
            5: [(0, [100]), (1, [100]), (2, [100])],
            6: [(1, [85])],
            # user 7 never attempts anything
        }
        minute = 0
        for user_index, per_quiz in history.items():
            for quiz_index, points_list in per_quiz:
                for number, points in enumerate(points_list, start=1):
                    minute += 1
                    add_attempt(users[user_index], quizzes[quiz_index], number, points, minutes=minute)

        entries = ranked()
        totals = {e["user_id"]: e["total_points"] for e in entries}

        assert totals[str(users[0].id)] == 185
        assert totals[str(users[2].id)] == 140
        assert totals[str(users[7].id)] == 0

        for user in users[:7]:
            result = leaderboard_service.get_user_rank(db, user.id)
            mine = totals[str(user.id)]

            assert result["user_stats"]["total_points"] == mine
            assert result["rank"] == 1 + sum(1 for t in totals.values() if t > mine)


class TestLeaderboardCache:

    @pytest.fixture
    def fake_redis(self, monkeypatch):
        fake = FakeRedis()
        monkeypatch.setattr(cache_service, "redis_client", fake)
        return fake

    def test_snapshot_is_served_until_invalidated(self, db, make_user, make_quiz, add_attempt, fake_redis):
        user, quiz = make_user(), make_quiz()
        add_attempt(user, quiz, attempt_number=1, points=40)

        assert leaderboard_service.get_leaderboard(db)[0]["total_points"] == 40
        assert fake_redis.store

        add_attempt(user, quiz, attempt_number=2, points=80, minutes=1)
        assert leaderboard_service.get_leaderboard(db)[0]["total_points"] == 40

        cache_service.invalidate_leaderboard()
        assert not fake_redis.store
        assert leaderboard_service.get_leaderboard(db)[0]["total_points"] == 80

    def test_submission_invalidates_snapshot(self, db, make_user, make_quiz, fake_redis):
        user, quiz = make_user(), make_quiz()

        assert leaderboard_service.get_leaderboard(db)[0]["total_points"] == 0

        scoring_service.submit(db, quiz.id, user.id, [1, 2, 1, 3])

        assert leaderboard_service.get_leaderboard(db)[0]["total_points"] == 75

    def test_cache_disabled_without_redis(self):
        assert cache_service.redis_client is None
        assert cache_service.get(cache_service.leaderboard_key(50)) is None
        assert cache_service.set("leaderboard:global:50", []) is False
