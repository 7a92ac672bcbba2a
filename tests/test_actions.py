import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from strikebot import actions
from strikebot.models import COMMENT, POST, ActionResult, ModerationContext
from strikebot.services import reversal, strikes


def make_ctx(kind=POST):
    return ModerationContext(kind=kind, content_id="t3_abc123", author="alice", permalink="/p/")


def test_every_action_is_bound_for_posts_and_comments():
    names = {a.name for a in actions.ACTIONS}

    assert names == {
        "Remove and Strike",
        "Check User's Strikes",
        "Remove Strike from Author",
        "Remove All Strikes from Author",
        "Undo Removal",
    }
    for name in names:
        assert actions.find_action(name, POST) is not None
        assert actions.find_action(name, COMMENT) is not None
    assert all(a.moderator_only for a in actions.ACTIONS)


def test_only_strike_and_undo_ask_for_a_reason():
    asking = {a.name for a in actions.ACTIONS if a.reason_label}
    assert asking == {actions.REMOVE_AND_STRIKE, actions.UNDO_REMOVAL}


@pytest.mark.asyncio
async def test_dispatch_passes_reason_to_strike(monkeypatch):
    seen = {}

    async def fake_strike(ctx, reason="", moderator=None):
        seen["ctx"], seen["reason"], seen["moderator"] = ctx, reason, moderator
        return ActionResult(True, "struck")

    monkeypatch.setattr(strikes, "strike", fake_strike)
    ctx = make_ctx(COMMENT)

    result = await actions.dispatch(actions.REMOVE_AND_STRIKE, ctx, "spam", moderator="mod_carol")

    assert result == ActionResult(True, "struck")
    assert seen == {"ctx": ctx, "reason": "spam", "moderator": "mod_carol"}


@pytest.mark.asyncio
async def test_dispatch_routes_each_action(monkeypatch):
    called = []

    def recorder(label):
        async def _handler(*args, **kwargs):
            called.append((label, args[1:]))
            return ActionResult(True, label)
        return _handler

    monkeypatch.setattr(strikes, "check_strikes", recorder("check"))
    monkeypatch.setattr(strikes, "remove_strike", recorder("remove"))
    monkeypatch.setattr(strikes, "clear_strikes", recorder("clear"))
    monkeypatch.setattr(reversal, "undo_removal", recorder("undo"))

    ctx = make_ctx()
    await actions.dispatch(actions.CHECK_STRIKES, ctx, "ignored")
    await actions.dispatch(actions.REMOVE_STRIKE, ctx)
    await actions.dispatch(actions.CLEAR_STRIKES, ctx)
    await actions.dispatch(actions.UNDO_REMOVAL, ctx, "sorry")

    assert called == [("check", ()), ("remove", ()), ("clear", ()), ("undo", ("sorry",))]


@pytest.mark.asyncio
async def test_dispatch_unknown_action():
    result = await actions.dispatch("Summon Admins", make_ctx())

    assert not result.success
    assert "not available for a post" in result.message
