import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

import pytest

from room_directory import RoomDirectory
from session_handler import RoomSessionHandler
from sync_strategy import BroadcastSync, TargetedSync


@dataclass
class FakeClient:
    """Records events the server sends to one connection."""

    sid: str
    received_events: List[Dict[str, Any]] = field(default_factory=list)

    def get_events(self, event: str) -> List[Dict[str, Any]]:
        return [e for e in self.received_events if e["event"] == event]

    def event_names(self) -> List[str]:
        return [e["event"] for e in self.received_events]

    def clear_events(self) -> None:
        self.received_events.clear()


@dataclass
class FakeTransport:
    """In-memory stand-in for SocketSessionManager."""

    clients: Dict[str, FakeClient] = field(default_factory=dict)
    rooms: Dict[str, Set[str]] = field(default_factory=dict)

    def connect(self, sid: str) -> FakeClient:
        client = FakeClient(sid)
        self.clients[sid] = client
        return client

    def drop(self, sid: str) -> None:
        """Transport teardown after disconnect."""
        for members in self.rooms.values():
            members.discard(sid)
        self.rooms = {room: m for room, m in self.rooms.items() if m}

    def members(self, room: str) -> List[str]:
        return sorted(self.rooms.get(room, set()))

    def has_room(self, room: str) -> bool:
        return bool(self.rooms.get(room))

    def rooms_of(self, sid: str) -> Set[str]:
        return {room for room, members in self.rooms.items() if sid in members}

    async def join(self, sid: str, room: str) -> None:
        self.rooms.setdefault(room, set()).add(sid)

    async def leave(self, sid: str, room: str) -> None:
        members = self.rooms.get(room)
        if members is None:
            return
        members.discard(sid)
        if not members:
            del self.rooms[room]

    async def close_room(self, room: str) -> None:
        self.rooms.pop(room, None)

    async def send(self, sid: str, event: str, data=None) -> None:
        # real transports yield on every emit
        await asyncio.sleep(0)
        client = self.clients.get(sid)
        if client:
            client.received_events.append({"event": event, "data": data})

    async def broadcast(
        self, room: str, event: str, data=None, skip_sid: Optional[str] = None
    ) -> None:
        for sid in self.members(room):
            if sid != skip_sid:
                await self.send(sid, event, data)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def directory():
    return RoomDirectory()


@pytest.fixture
def handler(transport, directory):
    return RoomSessionHandler(transport, directory, TargetedSync(transport))


@pytest.fixture
def broadcast_handler(transport, directory):
    return RoomSessionHandler(transport, directory, BroadcastSync(transport))
