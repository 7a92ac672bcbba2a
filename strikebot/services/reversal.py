from __future__ import annotations

import logging

import httpx

import reddit_api
from strikebot.models import ActionResult, ModerationContext
from strikebot.services.messages import generate_reapproval_message
from strikebot.services.metrics import stats

logger = logging.getLogger(__name__)


async def undo_removal(ctx: ModerationContext, reason: str = "") -> ActionResult:
    """
    Re-approve content a moderator removed by mistake and apologise to its author.

    The approval does not check whether the content was actually removed.
    """
    if not ctx.content_id or not ctx.kind or not ctx.author:
        return ActionResult(False, "Metadata is missing!")

    subreddit = await reddit_api.get_current_subreddit()
    subreddit_name = subreddit.name if subreddit else None
    if not subreddit_name:
        return ActionResult(False, "Metadata is missing!")

    try:
        await reddit_api.approve_content(ctx.content_id)
    except (reddit_api.RedditAPIError, httpx.HTTPError) as e:
        logger.warning(f"Could not approve {ctx.content_id}, notifying author anyway: {e}")

    await reddit_api.send_private_message(
        from_subreddit=subreddit_name,
        to=ctx.author,
        subject=f"Your post/comment was approved on {subreddit_name}",
        text=generate_reapproval_message(subreddit_name, ctx.author, ctx.kind, reason or ""),
    )

    stats["removals_undone"] += 1
    logger.info(f"Undid removal of {ctx.kind} {ctx.content_id} by u/{ctx.author}")
    return ActionResult(True, f"Approved {ctx.kind} by u/{ctx.author}!")
