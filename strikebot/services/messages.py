"""
Notification templates sent to users as private messages.

Templates use ``$TOKEN`` placeholders ($NAME, $SUBREDDIT, $REASON,
$STRIKES, $TYPE) that are replaced case-insensitively in one pass.
"""
from __future__ import annotations

import re
from typing import Dict, Mapping

from strikebot.models import StrikeAction

FIRST_STRIKE = "first_strike"
SECOND_STRIKE = "second_strike"
NTH_STRIKE = "nth_strike"
STRIKE_REMOVED = "strike_removed"
STRIKES_RESET = "strikes_reset"
REAPPROVAL = "reapproval"

_SIGNATURE = """
If you have any questions, please feel free to message the moderators.

Thank you for your cooperation.

Signed
r/$SUBREDDIT moderators

---"""

_STRIKE_HEADER = """Dear $NAME

You have received a strike in r/$SUBREDDIT for the following reason:

$REASON
"""

_REVIEW_RULES = """
Please review the rules of the subreddit and try to avoid breaking them again.
"""

TEMPLATES: Dict[str, str] = {
    FIRST_STRIKE: (
        _STRIKE_HEADER
        + "\nThis is your first strike and therefore, you are only receiving a warning. "
        "Your next strike will result in a one day ban.\n"
        + _REVIEW_RULES
        + _SIGNATURE
    ),
    SECOND_STRIKE: (
        _STRIKE_HEADER
        + "\nThis is your second strike and therefore, you are receiving a one day ban. "
        "All future strikes will result in a one year ban.\n"
        + _REVIEW_RULES
        + _SIGNATURE
    ),
    NTH_STRIKE: (
        _STRIKE_HEADER
        + "\nThis is your $STRIKES strike and therefore, this and all future strikes "
        "will result in a one year ban.\n"
        + _REVIEW_RULES
        + _SIGNATURE
    ),
    STRIKE_REMOVED: (
        "Dear $NAME\n"
        "\n"
        "You have been absolved of a strike. You are now at $STRIKES strike(s).\n"
        + _SIGNATURE
    ),
    STRIKES_RESET: (
        "Dear $NAME\n"
        "\n"
        "You have had your strikes reset. All previous strikes have been removed "
        "and you are now free to post in r/$SUBREDDIT.\n"
        + _SIGNATURE
    ),
    REAPPROVAL: (
        "Dear $NAME\n"
        "\n"
        "Your $TYPE was accidentally removed by a moderator. We have re-approved it "
        "and it should be visible again.\n"
        "We sincerely apologize for the inconvenience.\n"
        + _SIGNATURE
        + "\nNote from the moderator:\n"
        "\n"
        "$REASON\n"
        "\n"
        "---"
    ),
}

_TOKEN_RE = re.compile(r"\$(NAME|SUBREDDIT|REASON|STRIKES|TYPE)", re.IGNORECASE)


def render(template: str, values: Mapping[str, str]) -> str:
    """
    Replace every ``$TOKEN`` in ``template`` with ``values[TOKEN]``.

    Token lookup is case-insensitive. Substituted text is never scanned
    again, so a reason containing ``$NAME`` stays literal. Tokens with no
    value are left in place.
    """
    lookup = {key.upper(): str(value) for key, value in values.items()}

    def _sub(match: re.Match) -> str:
        return lookup.get(match.group(1).upper(), match.group(0))

    return _TOKEN_RE.sub(_sub, template)


def template_for(action: StrikeAction) -> str:
    if action.action == "add":
        if action.strikes == 1:
            return TEMPLATES[FIRST_STRIKE]
        if action.strikes == 2:
            return TEMPLATES[SECOND_STRIKE]
        return TEMPLATES[NTH_STRIKE]
    if action.action == "remove":
        return TEMPLATES[STRIKE_REMOVED]
    if action.action == "clear":
        return TEMPLATES[STRIKES_RESET]
    return ""


def generate_strike_message(action: StrikeAction) -> str:
    """Render the notification for a strike add/remove/clear."""
    return render(
        template_for(action),
        {
            "STRIKES": str(action.strikes if action.strikes is not None else 0),
            "SUBREDDIT": action.subreddit,
            "NAME": action.target_name,
            "REASON": action.reason or "",
        },
    )


def generate_reapproval_message(subreddit: str, name: str, kind: str, reason: str = "") -> str:
    return render(
        TEMPLATES[REAPPROVAL],
        {"SUBREDDIT": subreddit, "NAME": name, "TYPE": kind, "REASON": reason or ""},
    )
