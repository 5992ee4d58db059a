import dataclasses

import pytest
from support import PEER_KEY, RecordingConversation, make_inbound

from parley.context import build_context
from parley.errors import ReplySendError
from parley.events import DialogueEntry
from parley.identity import resolve_identity
from parley.session import Session

PEER = resolve_identity(PEER_KEY).address


def test_build_context_freezes_history(offline_session: Session) -> None:
    history = [DialogueEntry("user", "earlier")]
    context = build_context(make_inbound(PEER), history, offline_session)
    history.append(DialogueEntry("assistant", "later"))

    assert context.history == (DialogueEntry("user", "earlier"),)
    assert context.session is offline_session
    with pytest.raises(dataclasses.FrozenInstanceError):
        context.history = ()  # type: ignore[misc]


@pytest.mark.parametrize(
    ("message", "history", "session_ok"),
    [
        (None, (), True),
        ("hello", (), True),
        (make_inbound(PEER), None, True),
        (make_inbound(PEER), ("not an entry",), True),
        (make_inbound(PEER), (), False),
    ],
)
def test_build_context_rejects_malformed_inputs(
    offline_session: Session, message: object, history: object, session_ok: bool
) -> None:
    session = offline_session if session_ok else object()

    with pytest.raises(TypeError):
        build_context(message, history, session)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_reply_sends_into_originating_conversation(offline_session: Session) -> None:
    conversation = RecordingConversation(PEER)
    context = build_context(make_inbound(PEER, conversation=conversation), (), offline_session)

    await context.reply("pong")

    assert conversation.sent == ["pong"]


@pytest.mark.asyncio
async def test_reply_failure_is_reply_send_error(offline_session: Session) -> None:
    conversation = RecordingConversation(PEER, fail_sends=1)
    context = build_context(make_inbound(PEER, conversation=conversation), (), offline_session)

    with pytest.raises(ReplySendError):
        await context.reply("pong")
