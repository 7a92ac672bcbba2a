from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

POST = "post"
COMMENT = "comment"


@dataclass
class ModerationContext:
    kind: str  # "post" | "comment"
    content_id: Optional[str]  # Reddit fullname, t3_... or t1_...
    author: Optional[str]
    permalink: Optional[str]


@dataclass
class ActionResult:
    success: bool
    message: str


@dataclass
class StrikeAction:
    action: str  # "add" | "remove" | "clear"
    subreddit: str
    target_name: str
    reason: Optional[str] = None
    strikes: Optional[int] = None  # resulting strike count


@dataclass(frozen=True)
class PunishmentTier:
    ban: bool
    days: int
    description: str  # completes "has been ..."
