import uuid

import httpx
import pytest

from quizrank.client import LeaderboardClient, LeaderboardClientError

ENTRY = {
    "userId": "7c1f3a52-0d4b-4c55-9a37-4c8b6f3e2a10",
    "name": "Ada",
    "email": "ada@example.com",
    "profilePicture": "",
    "totalPoints": 185,
    "totalTopics": 2,
    "lastActivity": "2024-01-01T12:10:00",
    "rank": 1,
}


def make_client(responses, sleeps, max_retries=3):
    """Client whose transport replays the given (status, body) pairs"""
    queue = list(responses)
    seen = []

    def handler(request):
        seen.append(request)
        status, body = queue.pop(0)
        return httpx.Response(status, json=body)

    client = LeaderboardClient(
        "http://testserver",
        token="token-123",
        max_retries=max_retries,
        transport=httpx.MockTransport(handler),
        sleep=sleeps.append,
    )
    return client, seen


RATE_LIMITED = (429, {"success": False, "message": "Too many requests", "retry_after": 60})


def test_get_leaderboard():
    sleeps = []
    client, seen = make_client(
        [(200, {"success": True, "data": {"leaderboard": [ENTRY], "totalUsers": 1}})], sleeps
    )

    with client:
        assert client.get_leaderboard() == [ENTRY]

    assert sleeps == []
    assert seen[0].url.path == "/api/leaderboard"
    assert seen[0].headers["authorization"] == "Bearer token-123"


def test_backs_off_on_rate_limit():
    sleeps = []
    client, seen = make_client(
        [RATE_LIMITED, RATE_LIMITED, (200, {"success": True, "data": {"leaderboard": [], "totalUsers": 0}})],
        sleeps,
    )

    assert client.get_leaderboard() == []
    assert sleeps == [2, 4]
    assert len(seen) == 3


def test_raises_after_retries_exhausted():
    sleeps = []
    client, seen = make_client([RATE_LIMITED] * 4, sleeps)

    with pytest.raises(LeaderboardClientError) as exc_info:
        client.get_leaderboard()

    assert exc_info.value.status_code == 429
    assert sleeps == [2, 4, 8]
    assert len(seen) == 4


def test_user_rank():
    user_id = uuid.uuid4()
    sleeps = []
    data = {"userStats": {"totalPoints": 185, "totalTopics": 2, "lastActivity": None}, "rank": 3}
    client, seen = make_client([(200, {"success": True, "data": data})], sleeps)

    assert client.get_user_rank(user_id) == data
    assert seen[0].url.path == f"/api/leaderboard/user/{user_id}"


def test_error_is_not_retried():
    sleeps = []
    client, _ = make_client([(401, {"success": False, "message": "Invalid token."})], sleeps)

    with pytest.raises(LeaderboardClientError) as exc_info:
        client.get_user_rank(uuid.uuid4())

    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Invalid token."
    assert sleeps == []
