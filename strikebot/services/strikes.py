from __future__ import annotations

import logging
from typing import Optional

import httpx

import reddit_api
from config import REPEAT_STRIKE_BAN_DAYS, SECOND_STRIKE_BAN_DAYS
from strikebot.models import ActionResult, ModerationContext, PunishmentTier, StrikeAction
from strikebot.services.messages import generate_strike_message
from strikebot.services.metrics import stats
from strikes_db import kv_get, kv_put

logger = logging.getLogger(__name__)

# Strike counts are read, changed and written back without a lock or
# compare-and-swap, so two moderators striking the same author at the same
# moment can lose an increment.

WARNING = PunishmentTier(ban=False, days=0, description="sent a warning")
SHORT_BAN = PunishmentTier(ban=True, days=SECOND_STRIKE_BAN_DAYS, description="banned for 1 day")
LONG_BAN = PunishmentTier(ban=True, days=REPEAT_STRIKE_BAN_DAYS, description="banned for 1 year")


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def get_key_for_author(author: str) -> str:
    return f"u_{author}_strikes"


def get_author_strikes(author: str) -> int:
    return int(kv_get(get_key_for_author(author), 0))


def set_author_strikes(author: str, strikes: int) -> None:
    kv_put(get_key_for_author(author), strikes)


def punishment_tier(strikes: int) -> PunishmentTier:
    """Map a resulting strike count to its punishment."""
    if strikes <= 1:
        return WARNING
    if strikes == 2:
        return SHORT_BAN
    return LONG_BAN


async def _unban_if_banned(subreddit: str, author: str) -> None:
    banned = await reddit_api.list_banned_users(subreddit, username=author)
    for user in banned:
        if user.username.lower() == author.lower():
            await reddit_api.unban_user(subreddit, user.username)
    if not banned:
        logger.debug(f"u/{author} is not banned from r/{subreddit}, nothing to lift")


async def check_strikes(ctx: ModerationContext) -> ActionResult:
    if not ctx.author:
        return ActionResult(False, "Could not get author of the comment or post")

    strikes = get_author_strikes(ctx.author)
    return ActionResult(True, f"Author u/{ctx.author} has {strikes} strike{_plural(strikes)}.")


async def strike(ctx: ModerationContext, reason: str = "", moderator: Optional[str] = None) -> ActionResult:
    """
    Remove the offending content and add a strike to its author.

    The first strike only warns, the second bans for a day and every strike
    after that bans for a year. The author is told by private message
    from the subreddit. The ban note names ``moderator``, falling back to
    the Reddit account the bot runs as.
    """
    if not ctx.content_id or not ctx.author or not ctx.permalink:
        return ActionResult(False, f"Metadata is missing for {ctx.kind}!")

    author = ctx.author
    reason = reason or ""

    try:
        await reddit_api.remove_content(ctx.content_id)
    except (reddit_api.RedditAPIError, httpx.HTTPError) as e:
        logger.warning(f"Could not remove {ctx.content_id}, striking anyway: {e}")

    strikes = get_author_strikes(author) + 1
    set_author_strikes(author, strikes)

    subreddit = await reddit_api.get_current_subreddit()
    tier = punishment_tier(strikes)

    pm_message = generate_strike_message(
        StrikeAction(action="add", subreddit=subreddit.name, target_name=author, reason=reason, strikes=strikes)
    )
    await reddit_api.send_private_message(
        from_subreddit=subreddit.name,
        to=author,
        subject=f"Received a strike on {subreddit.name}",
        text=pm_message,
    )

    if tier.ban:
        moderator = moderator or (await reddit_api.get_current_user()).username
        await reddit_api.ban_user(
            subreddit=subreddit.name,
            username=author,
            duration_days=tier.days,
            context_id=ctx.content_id,
            reason=f"Received {strikes} strike{_plural(strikes)} for breaking subreddit rules",
            note=f"Strike added by {moderator}",
        )
        stats["bans_issued"] += 1

    stats["strikes_added"] += 1
    logger.info(f"Strike {strikes} for u/{author} on {ctx.content_id}: {tier.description}")
    return ActionResult(
        True,
        f"u/{author} has {strikes} strike{_plural(strikes)} and has been {tier.description}.",
    )


async def remove_strike(ctx: ModerationContext) -> ActionResult:
    author = ctx.author
    if not author:
        return ActionResult(False, "Could not get author of the comment or post")

    strikes = get_author_strikes(author)
    if strikes == 0:
        return ActionResult(False, f"u/{author} does not have any strikes!")

    subreddit = await reddit_api.get_current_subreddit()

    # Only the second strike onwards comes with a ban
    if strikes >= 2:
        await _unban_if_banned(subreddit.name, author)

    strikes -= 1
    set_author_strikes(author, strikes)

    pm_message = generate_strike_message(
        StrikeAction(action="remove", subreddit=subreddit.name, target_name=author, reason="N/A", strikes=strikes)
    )
    await reddit_api.send_private_message(
        from_subreddit=subreddit.name,
        to=author,
        subject=f"Strike removed from u/{author}!",
        text=pm_message,
    )

    stats["strikes_removed"] += 1
    logger.info(f"Removed a strike from u/{author}, {strikes} remaining")
    return ActionResult(True, f"Removed a strike from u/{author}. Remaining strikes: {strikes}.")


async def clear_strikes(ctx: ModerationContext) -> ActionResult:
    author = ctx.author
    if not author:
        return ActionResult(False, "Could not get author of post or comment.")

    had_strikes = get_author_strikes(author)
    if had_strikes == 0:
        return ActionResult(False, f"u/{author} does not have any strikes!")

    subreddit = await reddit_api.get_current_subreddit()

    if had_strikes >= 2:
        await _unban_if_banned(subreddit.name, author)

    set_author_strikes(author, 0)

    pm_message = generate_strike_message(
        StrikeAction(action="clear", subreddit=subreddit.name, target_name=author, reason="N/A")
    )
    await reddit_api.send_private_message(
        from_subreddit=subreddit.name,
        to=author,
        subject=f"Strike reset from u/{author}!",
        text=pm_message,
    )

    stats["strikes_cleared"] += had_strikes
    logger.info(f"Cleared {had_strikes} strike(s) from u/{author}")
    return ActionResult(True, f"Cleared {had_strikes} strike{_plural(had_strikes)} from u/{author}!")
