"""
Reddit API adapter.

Thin async wrapper over Reddit's OAuth endpoints for the handful of
moderation calls the strike bot needs. Every call is a single request;
failures raise RedditAPIError and are left to the caller.
"""
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx

from config import (
    REDDIT_CLIENT_ID,
    REDDIT_CLIENT_SECRET,
    REDDIT_USERNAME,
    REDDIT_PASSWORD,
    REDDIT_USER_AGENT,
    REDDIT_TIMEOUT,
    SUBREDDIT,
)

logger = logging.getLogger(__name__)

TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
OAUTH_BASE_URL = "https://oauth.reddit.com"

# Field limits enforced by Reddit
BAN_REASON_MAX = 100
BAN_NOTE_MAX = 300
SUBJECT_MAX = 100


class RedditAPIError(Exception):
    """Raised when Reddit answers with an error status or an error payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class Subreddit:
    name: str


@dataclass
class RedditUser:
    username: str


# Cached OAuth token for the bot account
_token: Dict = {
    "access_token": None,
    "expires_at": 0.0,
}


def _make_client(**kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=REDDIT_TIMEOUT,
        headers={"User-Agent": REDDIT_USER_AGENT},
        **kwargs,
    )


def reset_token_cache() -> None:
    _token["access_token"] = None
    _token["expires_at"] = 0.0


async def _get_access_token() -> str:
    """Return a valid bearer token, fetching a new one with the password grant if needed."""
    now = time.time()
    if _token["access_token"] and now < _token["expires_at"]:
        return _token["access_token"]

    async with _make_client() as client:
        response = await client.post(
            TOKEN_URL,
            auth=(REDDIT_CLIENT_ID, REDDIT_CLIENT_SECRET),
            data={
                "grant_type": "password",
                "username": REDDIT_USERNAME,
                "password": REDDIT_PASSWORD,
            },
        )

    if response.status_code != 200:
        raise RedditAPIError(f"Reddit token request failed (status {response.status_code})", response.status_code)

    payload = _json_body(response, "token request")
    if "access_token" not in payload:
        raise RedditAPIError(f"Reddit token request rejected: {payload.get('error', 'unknown error')}")

    _token["access_token"] = payload["access_token"]
    # Treat the token as stale a minute before Reddit does
    _token["expires_at"] = now + float(payload.get("expires_in", 3600)) - 60
    logger.info(f"Obtained Reddit access token for u/{REDDIT_USERNAME}")
    return _token["access_token"]


def _json_body(response: httpx.Response, what: str):
    try:
        return response.json()
    except ValueError as e:
        raise RedditAPIError(f"Reddit {what} returned a non-JSON body", response.status_code) from e


async def _request(method: str, path: str, params: Optional[Dict] = None, data: Optional[Dict] = None) -> Dict:
    token = await _get_access_token()
    async with _make_client(base_url=OAUTH_BASE_URL) as client:
        response = await client.request(
            method,
            path,
            params=params,
            data=data,
            headers={"Authorization": f"bearer {token}"},
        )

    logger.debug(f"Reddit {method} {path} -> {response.status_code}")
    if response.status_code >= 400:
        raise RedditAPIError(f"Reddit {method} {path} failed (status {response.status_code})", response.status_code)

    payload = _json_body(response, f"{method} {path}") if response.content else {}
    if isinstance(payload, dict):
        errors = (payload.get("json") or {}).get("errors")
        if errors:
            raise RedditAPIError(f"Reddit {method} {path} rejected: {errors}")
    return payload


async def remove_content(content_id: str, spam: bool = False) -> None:
    """Remove a post or comment by fullname."""
    await _request("POST", "/api/remove", data={"id": content_id, "spam": str(spam).lower()})
    logger.info(f"Removed {content_id}")


async def approve_content(content_id: str) -> None:
    """Approve a post or comment by fullname."""
    await _request("POST", "/api/approve", data={"id": content_id})
    logger.info(f"Approved {content_id}")


async def ban_user(
    subreddit: str,
    username: str,
    duration_days: int,
    context_id: Optional[str] = None,
    reason: str = "",
    note: str = "",
) -> None:
    """
    Ban a user from a subreddit for ``duration_days`` days.

    Args:
        subreddit: Subreddit name without the r/ prefix
        username: User to ban
        duration_days: Length of the ban in days
        context_id: Fullname of the content the ban relates to
        reason: Ban reason shown in the ban list
        note: Moderator-only note
    """
    data = {
        "api_type": "json",
        "type": "banned",
        "name": username,
        "duration": str(duration_days),
        "ban_reason": reason[:BAN_REASON_MAX],
        "note": note[:BAN_NOTE_MAX],
    }
    if context_id:
        data["ban_context"] = context_id
    await _request("POST", f"/r/{subreddit}/api/friend", data=data)
    logger.info(f"Banned u/{username} from r/{subreddit} for {duration_days} day(s)")


async def unban_user(subreddit: str, username: str) -> None:
    await _request(
        "POST",
        f"/r/{subreddit}/api/unfriend",
        data={"api_type": "json", "type": "banned", "name": username},
    )
    logger.info(f"Unbanned u/{username} from r/{subreddit}")


async def list_banned_users(subreddit: str, username: Optional[str] = None) -> List[RedditUser]:
    """List banned users, optionally filtered by username on Reddit's side."""
    params = {"limit": 100}
    if username:
        params["user"] = username
    payload = await _request("GET", f"/r/{subreddit}/about/banned", params=params)
    children = (payload.get("data") or {}).get("children") or []
    return [RedditUser(username=child["name"]) for child in children if child.get("name")]


async def send_private_message(from_subreddit: str, to: str, subject: str, text: str) -> None:
    """Send a private message on behalf of a subreddit's moderators."""
    await _request(
        "POST",
        "/api/compose",
        data={
            "api_type": "json",
            "from_sr": from_subreddit,
            "to": to,
            "subject": subject[:SUBJECT_MAX],
            "text": text,
        },
    )
    logger.info(f"Sent '{subject}' to u/{to} as r/{from_subreddit}")


async def get_current_subreddit() -> Subreddit:
    payload = await _request("GET", f"/r/{SUBREDDIT}/about")
    data = payload.get("data") or {}
    return Subreddit(name=data.get("display_name") or SUBREDDIT)


async def get_current_user() -> RedditUser:
    payload = await _request("GET", "/api/v1/me")
    return RedditUser(username=payload.get("name") or REDDIT_USERNAME)


async def get_thing(fullname: str) -> Optional[Dict]:
    """
    Look up a post (t3_) or comment (t1_) by fullname.

    Returns the listing child (``{"kind": ..., "data": {...}}``) or None
    when Reddit does not know the id.
    """
    payload = await _request("GET", "/api/info", params={"id": fullname})
    children = (payload.get("data") or {}).get("children") or []
    return children[0] if children else None
