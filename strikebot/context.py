from __future__ import annotations

import re
from typing import Dict, Optional

from strikebot.models import COMMENT, POST, ModerationContext

# Reddit "thing" kind prefixes
KIND_PREFIXES = {
    "t3": POST,
    "t1": COMMENT,
}

_FULLNAME_RE = re.compile(r"^(t[13])_([a-z0-9]+)$", re.IGNORECASE)
# /r/<sub>/comments/<post id>/<slug>/<comment id>
_PERMALINK_RE = re.compile(
    r"/comments/(?P<post>[a-z0-9]+)(?:/[^/?#]*(?:/(?P<comment>[a-z0-9]+))?)?",
    re.IGNORECASE,
)
_SHORTLINK_RE = re.compile(r"^(?:https?://)?redd\.it/(?P<post>[a-z0-9]+)/?$", re.IGNORECASE)


def parse_target(text: str) -> Optional[str]:
    """
    Turn a moderator-supplied reference into a Reddit fullname.

    Accepts ``t3_abc``/``t1_xyz`` fullnames, full or relative permalinks
    (a comment permalink resolves to the comment) and redd.it short links.
    Returns None when nothing recognisable was given.
    """
    text = (text or "").strip().strip("<>")
    if not text:
        return None

    match = _FULLNAME_RE.match(text)
    if match:
        return f"{match.group(1).lower()}_{match.group(2).lower()}"

    match = _SHORTLINK_RE.match(text)
    if match:
        return f"t3_{match.group('post').lower()}"

    match = _PERMALINK_RE.search(text)
    if match:
        if match.group("comment"):
            return f"t1_{match.group('comment').lower()}"
        return f"t3_{match.group('post').lower()}"
    return None


def context_from_thing(thing: Dict) -> Optional[ModerationContext]:
    """Normalize a Reddit listing child (post or comment) into a ModerationContext."""
    kind = KIND_PREFIXES.get(thing.get("kind"))
    if kind is None:
        return None

    data = thing.get("data") or {}
    content_id = data.get("name")
    if not content_id and data.get("id"):
        content_id = f"{thing['kind']}_{data['id']}"

    author = data.get("author")
    # Reddit reports deleted accounts as "[deleted]"
    if author == "[deleted]":
        author = None

    return ModerationContext(
        kind=kind,
        content_id=content_id,
        author=author,
        permalink=data.get("permalink"),
    )
