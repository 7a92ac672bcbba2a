"""
Reddit Strike Bot - Entrypoint
Moderators drive strikes, bans and reversals on Reddit from a Telegram chat.
Runs in polling mode by default, or webhook mode with RUN_MODE=webhook.
"""
import logging
import traceback

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

import reddit_api
from config import (
    BOT_TOKEN,
    MODERATOR_IDS,
    PORT,
    REDDIT_CLIENT_ID,
    REDDIT_CLIENT_SECRET,
    REDDIT_USERNAME,
    RUN_MODE,
    SUBREDDIT,
    validate_webhook_url,
)
from strikebot.handlers.commands import (
    clearstrikes_command,
    help_command,
    removestrike_command,
    start_command,
    stats_command,
    strike_command,
    strikes_command,
    undoremoval_command,
)
from strikebot.logging import configure_logging
from strikes_db import init_db

logger = configure_logging(logging.INFO)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE):
    """Log errors raised by handlers and tell the moderator the action did not go through."""
    error = context.error
    logger.error(
        "Unhandled error while processing %s:\n%s",
        update,
        "".join(traceback.format_exception(type(error), error, error.__traceback__)) if error else "no error",
    )

    message = getattr(update, "effective_message", None)
    if message:
        if isinstance(error, reddit_api.RedditAPIError):
            text = f"❌ Reddit rejected the action: {error}"
        else:
            text = "❌ The action failed. Check the bot logs for details."
        try:
            await message.reply_text(text)
        except Exception as e:
            logger.error(f"Could not report failure to moderator: {e}")


def build_application() -> Application:
    application = Application.builder().token(BOT_TOKEN).build()

    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("stats", stats_command))
    application.add_handler(CommandHandler("strike", strike_command))
    application.add_handler(CommandHandler("strikes", strikes_command))
    application.add_handler(CommandHandler("removestrike", removestrike_command))
    application.add_handler(CommandHandler("clearstrikes", clearstrikes_command))
    application.add_handler(CommandHandler("undoremoval", undoremoval_command))

    application.add_error_handler(error_handler)
    return application


def main():
    if not BOT_TOKEN:
        logger.error("BOT_TOKEN not set in environment variables!")
        exit(1)
    if not MODERATOR_IDS:
        logger.error("Neither ADMIN_ID nor MODERATOR_IDS is set in environment variables!")
        exit(1)
    if not (REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET and REDDIT_USERNAME):
        logger.error("Reddit credentials (REDDIT_CLIENT_ID/REDDIT_CLIENT_SECRET/REDDIT_USERNAME) not set!")
        exit(1)
    if not SUBREDDIT:
        logger.error("SUBREDDIT not set in environment variables!")
        exit(1)

    init_db()
    application = build_application()
    logger.info(f"Strike bot for r/{SUBREDDIT} starting in {RUN_MODE} mode, {len(MODERATOR_IDS)} moderator(s)")

    if RUN_MODE == "webhook":
        try:
            webhook_url = validate_webhook_url()
        except ValueError as e:
            logger.error(f"Invalid webhook URL: {e}")
            exit(1)

        url_path = f"webhook/{BOT_TOKEN}"
        logger.info(f"Listening for webhooks on port {PORT}")
        application.run_webhook(
            listen="0.0.0.0",
            port=PORT,
            url_path=url_path,
            webhook_url=webhook_url,
        )
    else:
        application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
