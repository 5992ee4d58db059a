import pytest
from support import PEER_KEY, FakeGenerator, RecordingConversation, make_inbound

from parley.context import build_context
from parley.dispatcher import APOLOGY_REPLY, dispatch
from parley.errors import HandlerError
from parley.events import DialogueEntry
from parley.handlers import TEXT_ONLY_REPLY, ChatHandler
from parley.identity import resolve_identity
from parley.session import Session

PEER = resolve_identity(PEER_KEY).address


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ["attachment", "remoteStaticAttachment", "reaction"])
async def test_non_text_gets_text_only_notice(offline_session: Session, kind: str) -> None:
    generator = FakeGenerator()
    conversation = RecordingConversation(PEER)
    context = build_context(make_inbound(PEER, None, kind=kind, conversation=conversation), (), offline_session)

    await dispatch(ChatHandler(generator), context)

    assert conversation.sent == [TEXT_ONLY_REPLY]
    assert generator.calls == []


@pytest.mark.asyncio
async def test_generated_text_is_sent_verbatim(offline_session: Session) -> None:
    generator = FakeGenerator("  exactly this\n")
    conversation = RecordingConversation(PEER)
    history = (DialogueEntry("user", "before"), DialogueEntry("assistant", "reply"))
    context = build_context(make_inbound(PEER, "now", conversation=conversation), history, offline_session)

    await dispatch(ChatHandler(generator, system_prompt="be brief"), context)

    assert conversation.sent == ["  exactly this\n"]
    assert generator.calls == [("be brief", history, "now")]


@pytest.mark.asyncio
async def test_empty_generation_raises_handler_error(offline_session: Session) -> None:
    context = build_context(make_inbound(PEER), (), offline_session)

    with pytest.raises(HandlerError):
        await ChatHandler(FakeGenerator("")).__call__(context)


@pytest.mark.asyncio
@pytest.mark.parametrize("generator", [FakeGenerator(""), FakeGenerator(error=TimeoutError("slow model"))])
async def test_failed_or_empty_generation_sends_apology(offline_session: Session, generator: FakeGenerator) -> None:
    conversation = RecordingConversation(PEER)
    context = build_context(make_inbound(PEER, conversation=conversation), (), offline_session)

    await dispatch(ChatHandler(generator), context)

    assert conversation.sent == [APOLOGY_REPLY]
