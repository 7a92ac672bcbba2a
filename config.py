"""
Configuration for the Reddit strike bot.
Values come from environment variables (a local .env file is honoured).
"""
import os

from dotenv import load_dotenv

load_dotenv()

# Telegram moderator console
BOT_TOKEN = os.getenv("BOT_TOKEN")
ADMIN_ID = int(os.getenv("ADMIN_ID", "0"))
MODERATOR_IDS = {
    int(uid) for uid in os.getenv("MODERATOR_IDS", "").replace(" ", "").split(",") if uid
}
if ADMIN_ID:
    MODERATOR_IDS.add(ADMIN_ID)

RUN_MODE = os.getenv("RUN_MODE", "polling").lower()  # "polling" | "webhook"
PORT = int(os.getenv("PORT", "5000"))

# Reddit credentials (script-type OAuth app)
REDDIT_CLIENT_ID = os.getenv("REDDIT_CLIENT_ID", "")
REDDIT_CLIENT_SECRET = os.getenv("REDDIT_CLIENT_SECRET", "")
REDDIT_USERNAME = os.getenv("REDDIT_USERNAME", "")
REDDIT_PASSWORD = os.getenv("REDDIT_PASSWORD", "")
REDDIT_USER_AGENT = os.getenv("REDDIT_USER_AGENT", "python:strikebot:v1.0 (by /u/strikebot)")
REDDIT_TIMEOUT = float(os.getenv("REDDIT_TIMEOUT", "15"))

# The subreddit this installation moderates
SUBREDDIT = os.getenv("SUBREDDIT", "")

# Strike storage
STRIKES_DB_PATH = os.getenv("STRIKES_DB_PATH", "strikes.db")

# Punishment ladder: 1 strike warns, 2 strikes ban for a day, 3+ ban for a year
SECOND_STRIKE_BAN_DAYS = 1
REPEAT_STRIKE_BAN_DAYS = 365


WELCOME_MESSAGE = """
🛡️ **Strike Bot**

I keep track of strikes against rule-breaking users on r/{subreddit} and hand out
the matching punishment for you.

Send /help to see the moderator commands.
"""

HELP_MESSAGE = """
🛡️ **MODERATOR COMMANDS**

Every command takes a Reddit permalink or fullname (`t3_…` post, `t1_…` comment).

• `/strike <link> <reason>` – Remove the content and strike its author
• `/strikes <link>` – Check how many strikes the author has
• `/removestrike <link>` – Remove one strike from the author
• `/clearstrikes <link>` – Reset the author's strikes to zero
• `/undoremoval <link> <reason>` – Re-approve content and apologise to the author
• `/stats` – Actions taken since the bot started

**Strike ladder:**
1️⃣ First strike → warning
2️⃣ Second strike → 1 day ban
3️⃣ Every strike after that → 1 year ban
"""


def get_base_webhook_url() -> str:
    """Return the base webhook URL (without token appended)."""
    base = os.getenv("WEBHOOK_URL")
    if not base:
        return ""
    return base.rstrip("/")


def get_final_webhook_url() -> str:
    """Return the webhook URL Telegram should call, with the bot token as last path segment.

    A base that already ends in the token is returned untouched; a bare host
    gets ``/webhook/<token>``.
    """
    base = get_base_webhook_url()
    token = os.getenv("BOT_TOKEN")
    if not base or not token or base.endswith(token):
        return base
    if "/" not in base.split("://", 1)[-1]:
        return f"{base}/webhook/{token}"
    return f"{base}/{token}"


def validate_webhook_url() -> str:
    url = get_final_webhook_url()
    if not url.startswith("https://"):
        raise ValueError(f"WEBHOOK_URL must be an https URL, got {url!r}")
    return url
