import pytest
import pytest_asyncio

from relay import BroadcastRelay, resolve_room


@pytest_asyncio.fixture
async def room(transport):
    for sid in ("host", "guest-1", "guest-2"):
        transport.connect(sid)
        await transport.join(sid, "AB12")
    transport.connect("outsider")
    return "AB12"


def test_resolve_room():
    assert resolve_room("ab12") == "AB12"
    assert resolve_room({"room": "AB12", "time": 3}) == "AB12"
    assert resolve_room({"roomCode": "ab12"}) == "AB12"
    assert resolve_room({"time": 3}) is None
    assert resolve_room(42) is None
    assert resolve_room(None) is None


class TestControlRelay:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("event", ["play", "pause", "seek", "changeTrack"])
    async def test_forwarded_to_everyone_but_sender(self, transport, room, event):
        relay = BroadcastRelay(transport)
        payload = {"room": room, "track": 3, "time": 12.5, "isPlaying": True}

        assert await relay.control("host", event, payload)

        assert transport.clients["host"].received_events == []
        assert transport.clients["outsider"].received_events == []
        for sid in ("guest-1", "guest-2"):
            assert transport.clients[sid].received_events == [
                {"event": event, "data": payload}
            ]

    @pytest.mark.asyncio
    async def test_bare_room_code_payload(self, transport, room):
        relay = BroadcastRelay(transport)

        await relay.control("guest-1", "pause", "ab12")

        assert transport.clients["host"].get_events("pause") == [
            {"event": "pause", "data": "ab12"}
        ]
        assert transport.clients["guest-1"].received_events == []

    @pytest.mark.asyncio
    async def test_payload_without_room_is_dropped(self, transport, room):
        relay = BroadcastRelay(transport)

        assert not await relay.control("host", "seek", {"time": 10})

        for client in transport.clients.values():
            assert client.received_events == []

    @pytest.mark.asyncio
    async def test_unknown_control_event(self, transport, room):
        with pytest.raises(ValueError):
            await BroadcastRelay(transport).control("host", "rewind", room)


class TestChatAndCount:
    @pytest.mark.asyncio
    async def test_chat_forwarded_verbatim(self, transport, room):
        relay = BroadcastRelay(transport)
        message = {"room": room, "message": "hi", "senderName": "kim"}

        await relay.chat("guest-2", message)

        assert transport.clients["host"].get_events("chatMessage")[0]["data"] is message
        assert transport.clients["guest-1"].get_events("chatMessage")
        assert not transport.clients["guest-2"].get_events("chatMessage")

    @pytest.mark.asyncio
    async def test_user_count(self, transport, room):
        relay = BroadcastRelay(transport)

        assert relay.user_count(room) == 3
        assert relay.user_count(room, exclude="guest-1") == 2
        assert relay.user_count("NONE") == 0

    @pytest.mark.asyncio
    async def test_close_room_notifies_and_evicts(self, transport, room):
        relay = BroadcastRelay(transport)

        await relay.close_room(room, skip_sid="host")

        assert transport.clients["guest-1"].event_names() == ["roomClosed"]
        assert transport.clients["guest-2"].event_names() == ["roomClosed"]
        assert transport.clients["host"].received_events == []
        assert not transport.has_room(room)
