import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fakes import FakeReddit
from strikebot.models import COMMENT, POST, ModerationContext
from strikebot.services import reversal


def make_ctx(**overrides):
    fields = dict(kind=POST, content_id="t3_abc123", author="alice", permalink="/r/test/comments/abc123/hi/")
    fields.update(overrides)
    return ModerationContext(**fields)


@pytest.mark.asyncio
async def test_undo_removal_approves_and_apologises(monkeypatch):
    reddit = FakeReddit().install(monkeypatch)

    result = await reversal.undo_removal(make_ctx(kind=COMMENT, content_id="t1_def456"), "wrong button")

    assert result.success
    assert result.message == "Approved comment by u/alice!"
    assert reddit.named("approve") == [{"content_id": "t1_def456"}]

    [pm] = reddit.named("message")
    assert pm["to"] == "alice"
    assert pm["subject"] == "Your post/comment was approved on test"
    assert "Your comment was accidentally removed" in pm["text"]
    assert "wrong button" in pm["text"]
    assert "$" not in pm["text"]


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["content_id", "author", "kind"])
async def test_undo_removal_requires_metadata(monkeypatch, missing):
    reddit = FakeReddit().install(monkeypatch)

    result = await reversal.undo_removal(make_ctx(**{missing: None}), "oops")

    assert not result.success
    assert result.message == "Metadata is missing!"
    assert reddit.named("approve") == []
    assert reddit.named("message") == []


@pytest.mark.asyncio
async def test_undo_removal_requires_subreddit(monkeypatch):
    reddit = FakeReddit(subreddit="").install(monkeypatch)

    result = await reversal.undo_removal(make_ctx(), "oops")

    assert not result.success
    assert reddit.calls == []


@pytest.mark.asyncio
async def test_undo_removal_notifies_even_if_approve_fails(monkeypatch):
    reddit = FakeReddit(fail_approve=True).install(monkeypatch)

    result = await reversal.undo_removal(make_ctx(), "")

    assert result.success
    assert len(reddit.named("message")) == 1
