"""
Moderator action registry.

Every action is bound once for posts and once for comments, mirroring the
context menu moderators see on Reddit. ``dispatch`` picks the binding that
matches the normalized context and runs it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from strikebot.models import COMMENT, POST, ActionResult, ModerationContext
from strikebot.services import reversal, strikes

logger = logging.getLogger(__name__)

REMOVE_AND_STRIKE = "Remove and Strike"
CHECK_STRIKES = "Check User's Strikes"
REMOVE_STRIKE = "Remove Strike from Author"
CLEAR_STRIKES = "Remove All Strikes from Author"
UNDO_REMOVAL = "Undo Removal"

Handler = Callable[[ModerationContext, str, Optional[str]], Awaitable[ActionResult]]


@dataclass(frozen=True)
class ModeratorAction:
    name: str
    description: str
    context: str  # POST | COMMENT
    handler: Handler
    reason_label: Optional[str] = None  # set when the action asks for free-text input
    moderator_only: bool = True


async def _strike(ctx: ModerationContext, reason: str, moderator: Optional[str]) -> ActionResult:
    return await strikes.strike(ctx, reason, moderator=moderator)


async def _check_strikes(ctx: ModerationContext, reason: str, moderator: Optional[str]) -> ActionResult:
    return await strikes.check_strikes(ctx)


async def _remove_strike(ctx: ModerationContext, reason: str, moderator: Optional[str]) -> ActionResult:
    return await strikes.remove_strike(ctx)


async def _clear_strikes(ctx: ModerationContext, reason: str, moderator: Optional[str]) -> ActionResult:
    return await strikes.clear_strikes(ctx)


async def _undo_removal(ctx: ModerationContext, reason: str, moderator: Optional[str]) -> ActionResult:
    return await reversal.undo_removal(ctx, reason)


def _bind(name: str, description: str, handler: Handler, reason_label: Optional[str] = None) -> List[ModeratorAction]:
    return [
        ModeratorAction(name=name, description=description, context=kind, handler=handler, reason_label=reason_label)
        for kind in (POST, COMMENT)
    ]


ACTIONS: List[ModeratorAction] = [
    *_bind(REMOVE_AND_STRIKE, "Remove this and add a strike to the author", _strike, "Reason for strike"),
    *_bind(CHECK_STRIKES, "Tells you how many strikes the author has", _check_strikes),
    *_bind(REMOVE_STRIKE, "Remove a strike from the author of this content", _remove_strike),
    *_bind(CLEAR_STRIKES, "Reset the author's strike count to zero", _clear_strikes),
    *_bind(UNDO_REMOVAL, "Undo the removal of this post/comment", _undo_removal, "Reason for undoing removal"),
]


def find_action(name: str, kind: str) -> Optional[ModeratorAction]:
    for action in ACTIONS:
        if action.name == name and action.context == kind:
            return action
    return None


async def dispatch(
    name: str,
    ctx: ModerationContext,
    reason: str = "",
    moderator: Optional[str] = None,
) -> ActionResult:
    action = find_action(name, ctx.kind)
    if action is None:
        return ActionResult(False, f"'{name}' is not available for a {ctx.kind}.")

    logger.info(f"Dispatching '{name}' on {ctx.kind} {ctx.content_id} (invoked by {moderator})")
    # Actions without a reason prompt never see one
    return await action.handler(ctx, reason if action.reason_label else "", moderator)
