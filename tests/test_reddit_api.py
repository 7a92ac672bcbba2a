import os
import sys
from urllib.parse import parse_qs

import httpx
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import reddit_api


class FakeRedditServer:
    """Answers Reddit API requests from a path -> JSON (or raw text) table and records what was sent."""

    def __init__(self, routes=None):
        self.routes = {"/api/v1/access_token": (200, {"access_token": "tok", "expires_in": 3600})}
        self.routes.update(routes or {})
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, payload = self.routes.get(request.url.path, (404, {"error": 404}))
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    def form(self, path):
        for request in self.requests:
            if request.url.path == path:
                return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        return None

    def hits(self, path):
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture
def server(monkeypatch):
    srv = FakeRedditServer()
    transport = httpx.MockTransport(srv.handler)
    reddit_api.reset_token_cache()
    monkeypatch.setattr(reddit_api, "_make_client", lambda **kwargs: httpx.AsyncClient(transport=transport, **kwargs))
    monkeypatch.setattr(reddit_api, "SUBREDDIT", "test")
    yield srv
    reddit_api.reset_token_cache()


@pytest.mark.asyncio
async def test_token_is_fetched_once_and_sent_as_bearer(server):
    server.routes["/api/approve"] = (200, {})

    await reddit_api.approve_content("t3_abc")
    await reddit_api.approve_content("t3_def")

    assert len(server.hits("/api/v1/access_token")) == 1
    assert server.form("/api/v1/access_token")["grant_type"] == "password"
    approvals = server.hits("/api/approve")
    assert len(approvals) == 2
    assert approvals[0].headers["Authorization"] == "bearer tok"


@pytest.mark.asyncio
async def test_ban_user_sends_ban_form(server):
    server.routes["/r/test/api/friend"] = (200, {"json": {"errors": []}})

    await reddit_api.ban_user("test", "alice", 365, context_id="t1_xyz", reason="x" * 150, note="Strike added by mod")

    form = server.form("/r/test/api/friend")
    assert form["type"] == "banned"
    assert form["name"] == "alice"
    assert form["duration"] == "365"
    assert form["ban_context"] == "t1_xyz"
    assert len(form["ban_reason"]) == reddit_api.BAN_REASON_MAX
    assert form["note"] == "Strike added by mod"


@pytest.mark.asyncio
async def test_send_private_message_as_subreddit(server):
    server.routes["/api/compose"] = (200, {"json": {"errors": []}})

    await reddit_api.send_private_message("test", "alice", "Received a strike on test", "Dear alice")

    form = server.form("/api/compose")
    assert form == {
        "api_type": "json",
        "from_sr": "test",
        "to": "alice",
        "subject": "Received a strike on test",
        "text": "Dear alice",
    }


@pytest.mark.asyncio
async def test_error_status_raises(server):
    server.routes["/api/remove"] = (403, {"message": "Forbidden"})

    with pytest.raises(reddit_api.RedditAPIError) as exc:
        await reddit_api.remove_content("t3_abc")

    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_json_errors_raise(server):
    server.routes["/api/compose"] = (200, {"json": {"errors": [["USER_DOESNT_EXIST", "that user doesn't exist", "to"]]}})

    with pytest.raises(reddit_api.RedditAPIError, match="USER_DOESNT_EXIST"):
        await reddit_api.send_private_message("test", "ghost", "hi", "hi")


@pytest.mark.asyncio
async def test_rejected_token_raises(server):
    server.routes["/api/v1/access_token"] = (200, {"error": "invalid_grant"})

    with pytest.raises(reddit_api.RedditAPIError, match="invalid_grant"):
        await reddit_api.get_current_user()


@pytest.mark.asyncio
async def test_list_banned_users_filters_by_user(server):
    server.routes["/r/test/about/banned"] = (200, {"data": {"children": [{"name": "alice", "days_left": 1}]}})

    banned = await reddit_api.list_banned_users("test", username="alice")

    assert [u.username for u in banned] == ["alice"]
    assert server.hits("/r/test/about/banned")[0].url.params["user"] == "alice"


@pytest.mark.asyncio
async def test_current_subreddit_and_user(server):
    server.routes["/r/test/about"] = (200, {"data": {"display_name": "Test"}})
    server.routes["/api/v1/me"] = (200, {"name": "strikebot"})

    assert (await reddit_api.get_current_subreddit()).name == "Test"
    assert (await reddit_api.get_current_user()).username == "strikebot"


@pytest.mark.asyncio
async def test_get_thing(server):
    thing = {"kind": "t1", "data": {"name": "t1_xyz", "author": "alice"}}
    server.routes["/api/info"] = (200, {"data": {"children": [thing]}})

    assert await reddit_api.get_thing("t1_xyz") == thing
    assert server.hits("/api/info")[0].url.params["id"] == "t1_xyz"

    server.routes["/api/info"] = (200, {"data": {"children": []}})
    assert await reddit_api.get_thing("t1_gone") is None


@pytest.mark.asyncio
async def test_non_json_body_raises_reddit_error(server):
    server.routes["/api/remove"] = (200, "<html>Reddit is down for maintenance</html>")

    with pytest.raises(reddit_api.RedditAPIError, match="non-JSON") as exc:
        await reddit_api.remove_content("t3_abc")

    assert exc.value.status_code == 200


@pytest.mark.asyncio
async def test_non_json_token_response_raises_reddit_error(server):
    server.routes["/api/v1/access_token"] = (200, "<html>oops</html>")

    with pytest.raises(reddit_api.RedditAPIError, match="token request"):
        await reddit_api.get_current_user()
