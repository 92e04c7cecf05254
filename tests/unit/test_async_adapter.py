from __future__ import annotations

import asyncio
import sys

import pytest

from pipelaunch.errors import TransportClosedError
from pipelaunch.errors import TransportError
from pipelaunch.ipc import AsyncPipeTransport


@pytest.mark.asyncio
async def test_async_round_trip(pipe_peer):
    transport, peer = pipe_peer
    adapter = AsyncPipeTransport(transport)

    await adapter.send(b'{"id":1}')
    assert peer.read_exact(9) == b'{"id":1}\x00'

    peer.write(b'{"id":1,"result":{}}\x00')
    assert await adapter.receive() == b'{"id":1,"result":{}}'


@pytest.mark.asyncio
async def test_async_receive_propagates_eof(pipe_peer):
    transport, peer = pipe_peer
    adapter = AsyncPipeTransport(transport)
    peer.close_writer()

    with pytest.raises(TransportError):
        await adapter.receive()
    assert adapter.closed


@pytest.mark.asyncio
async def test_async_context_manager_closes(pipe_peer):
    transport, _peer = pipe_peer

    async with AsyncPipeTransport(transport) as adapter:
        assert adapter.transport is transport
        assert not adapter.closed

    assert transport.closed
    with pytest.raises(TransportClosedError):
        await adapter.send(b"{}")


@pytest.mark.asyncio
async def test_receive_does_not_block_the_loop(pipe_peer):
    transport, peer = pipe_peer
    adapter = AsyncPipeTransport(transport)

    pending = asyncio.ensure_future(adapter.receive())
    await asyncio.sleep(0.05)
    assert not pending.done()

    peer.write(b"late\x00")
    assert await asyncio.wait_for(pending, timeout=5) == b"late"


@pytest.mark.skipif(sys.platform == "win32", reason="close() cannot interrupt pipe reads on Windows")
@pytest.mark.asyncio
async def test_close_releases_pending_receive(pipe_peer):
    transport, _peer = pipe_peer
    adapter = AsyncPipeTransport(transport)

    pending = asyncio.ensure_future(adapter.receive())
    await asyncio.sleep(0.05)
    await adapter.close()

    with pytest.raises(TransportClosedError):
        await asyncio.wait_for(pending, timeout=5)
