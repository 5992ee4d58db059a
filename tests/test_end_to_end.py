import asyncio

import pytest
from support import BOT_KEY, FakeGenerator, settle, wait_until

from parley.consumer import StreamConsumer
from parley.events import DialogueEntry
from parley.handlers import ChatHandler
from parley.history import HistoryLoader
from parley.identity import Identity
from parley.network.memory import MemoryNetwork
from parley.session import SessionManager
from parley.supervisor import ReconnectSupervisor, SupervisorState


@pytest.mark.asyncio
async def test_first_contact_then_follow_up_sees_previous_turns(
    network: MemoryNetwork, bot_identity: Identity, make_peer
) -> None:
    generator = FakeGenerator("hello, human")
    supervisor = ReconnectSupervisor(
        SessionManager(network.connect), StreamConsumer(HistoryLoader()), key=BOT_KEY, env="dev"
    )
    task = asyncio.create_task(supervisor.supervise(ChatHandler(generator), 0))
    await settle()
    peer = await make_peer()
    conversation = await peer.new_conversation(bot_identity.address)

    async def _has(count: int) -> bool:
        return len(await conversation.messages()) == count

    await conversation.send("hello")
    await wait_until(lambda: _has(2))
    await conversation.send("how are you?")
    await wait_until(lambda: _has(4))
    network.end_streams()

    assert await asyncio.wait_for(task, timeout=1) is SupervisorState.STOPPED
    first, second = generator.calls
    assert first[1:] == ((), "hello")
    assert second[1:] == (
        (DialogueEntry("user", "hello"), DialogueEntry("assistant", "hello, human")),
        "how are you?",
    )
    assert [entry for entry in second[1] if entry.role == "user"] == [DialogueEntry("user", "hello")]
