from __future__ import annotations

import logging
from datetime import datetime

from telegram import Update
from telegram.ext import ContextTypes
from telegram.helpers import escape_markdown

logger = logging.getLogger(__name__)

import reddit_api
from config import HELP_MESSAGE, MODERATOR_IDS, SUBREDDIT, WELCOME_MESSAGE
from strikebot.actions import (
    CHECK_STRIKES,
    CLEAR_STRIKES,
    REMOVE_AND_STRIKE,
    REMOVE_STRIKE,
    UNDO_REMOVAL,
    dispatch,
    find_action,
)
from strikebot.context import context_from_thing, parse_target
from strikebot.models import POST
from strikebot.services.metrics import stats


def is_moderator(user_id: int) -> bool:
    return user_id in MODERATOR_IDS


def _reason_from(text, args) -> str:
    # Everything after the command and the target, line breaks included
    if text:
        parts = text.split(None, 2)
        return parts[2].strip() if len(parts) > 2 else ""
    return " ".join(args[1:]).strip()


async def _run_action(update: Update, context: ContextTypes.DEFAULT_TYPE, command: str, action_name: str):
    """
    Resolve the Reddit target named in the command arguments and run a moderator action on it.
    Usage: /<command> <permalink or fullname> [reason]
    """
    user = update.effective_user
    if not is_moderator(user.id):
        await update.message.reply_text("⚠️ Moderator only command.")
        return

    # Reason prompts are identical for post and comment bindings
    takes_reason = find_action(action_name, POST).reason_label is not None
    usage = f"❌ Usage: /{command} <permalink or t3_/t1_ id>{' <reason>' if takes_reason else ''}"

    args = context.args or []
    if not args:
        await update.message.reply_text(usage)
        return

    fullname = parse_target(args[0])
    if not fullname:
        await update.message.reply_text(f"❌ Could not understand '{args[0]}'.\n{usage}")
        return

    thing = await reddit_api.get_thing(fullname)
    if thing is None:
        await update.message.reply_text(f"❌ Could not find {fullname} on Reddit.")
        return

    thing_subreddit = (thing.get("data") or {}).get("subreddit") or ""
    if SUBREDDIT and thing_subreddit.lower() != SUBREDDIT.lower():
        await update.message.reply_text(f"❌ {fullname} is not in r/{SUBREDDIT}.")
        return

    ctx = context_from_thing(thing)
    if ctx is None:
        await update.message.reply_text(f"❌ {fullname} is not a post or a comment.")
        return

    reason = _reason_from(update.message.text, args)
    result = await dispatch(action_name, ctx, reason, moderator=user.username or str(user.id))

    logger.info(f"/{command} by {user.id}: success={result.success} message={result.message}")
    prefix = "✅" if result.success else "❌"
    await update.message.reply_text(f"{prefix} {result.message}")


async def strike_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Remove the content and add a strike to its author."""
    await _run_action(update, context, "strike", REMOVE_AND_STRIKE)


async def strikes_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Show how many strikes the author of the content has."""
    await _run_action(update, context, "strikes", CHECK_STRIKES)


async def removestrike_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await _run_action(update, context, "removestrike", REMOVE_STRIKE)


async def clearstrikes_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await _run_action(update, context, "clearstrikes", CLEAR_STRIKES)


async def undoremoval_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Re-approve removed content and send its author an apology."""
    await _run_action(update, context, "undoremoval", UNDO_REMOVAL)


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Sends the welcome message explaining the bot's purpose.
    Triggered by the /start command.
    """
    await update.message.reply_text(
        WELCOME_MESSAGE.format(subreddit=escape_markdown(SUBREDDIT) if SUBREDDIT else "your subreddit"),
        parse_mode="Markdown",
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.message.reply_text(HELP_MESSAGE, parse_mode="Markdown")


async def stats_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Displays the actions taken since the bot started.
    Triggered by the /stats command.
    """
    if not is_moderator(update.effective_user.id):
        await update.message.reply_text("⚠️ Moderator only command.")
        return

    uptime = datetime.now() - stats["started_at"]
    hours = int(uptime.total_seconds() // 3600)
    text = (
        f"📊 **Strike Dashboard** (r/{escape_markdown(SUBREDDIT)})\n\n"
        f"• Strikes Added: **{stats['strikes_added']}**\n"
        f"• Bans Issued: **{stats['bans_issued']}**\n"
        f"• Strikes Removed: **{stats['strikes_removed']}**\n"
        f"• Strikes Cleared: **{stats['strikes_cleared']}**\n"
        f"• Removals Undone: **{stats['removals_undone']}**\n\n"
        f"_Counting since {stats['started_at'].strftime('%Y-%m-%d %H:%M')} ({hours}h)_"
    )
    await update.message.reply_text(text, parse_mode="Markdown")
