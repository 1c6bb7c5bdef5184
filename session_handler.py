import asyncio
import functools
import logging
from typing import Optional

from relay import BroadcastRelay
from room_directory import Closed, Open, RoomDirectory, generate_code, normalize_code
from socket_manager import SocketSessionManager
from sync_strategy import SyncStrategy

ROOM_NOT_FOUND_MESSAGE = "Room not found! Check the code."


def serialized(method):
    """
    이벤트 하나가 끝날 때까지 다음 이벤트를 처리하지 않도록 handler의 lock으로 감쌈
    """

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        async with self._lock:
            return await method(self, *args, **kwargs)

    return wrapper


class RoomSessionHandler:
    """
    room 생성/입장/퇴장/연결 종료를 처리하고
    재생 제어, 채팅, sync 이벤트를 room에 중계하는 핸들러
    """

    def __init__(
        self,
        transport: SocketSessionManager,
        directory: RoomDirectory,
        sync: SyncStrategy,
    ) -> None:
        self._transport = transport
        self._directory = directory
        self._sync = sync
        self._relay = BroadcastRelay(transport)
        self._lock = asyncio.Lock()

    @property
    def directory(self) -> RoomDirectory:
        return self._directory

    def _is_taken(self, code: str) -> bool:
        return code in self._directory or self._transport.has_room(code)

    @serialized
    async def create_room(self, sid: str) -> Open:
        """
        room 코드를 생성하고 생성한 사용자를 host로 등록
        """
        code = generate_code(self._is_taken)
        await self._transport.join(sid, code)
        room = self._directory.open(code, sid)
        logging.info(f"Room created: {code} by {sid}")

        await self._transport.send(sid, "roomCreated", code)
        await self._transport.send(
            sid, "updateUserCount", {"count": self._relay.user_count(code)}
        )
        return room

    @serialized
    async def join_room(self, sid: str, room_code) -> Optional[str]:
        """
        기존 room에 입장. room이 없으면 요청한 사용자에게만 error 전송
        """
        code = normalize_code(room_code)
        if not code:
            return None
        if not self._transport.has_room(code):
            logging.warning(f"Join failed, room {code} not found ({sid})")
            await self._transport.send(sid, "error", ROOM_NOT_FOUND_MESSAGE)
            return None

        await self._transport.join(sid, code)
        logging.info(f"User {sid} joined room {code}")
        await self._transport.send(sid, "roomJoined", code)
        await self._transport.broadcast(code, "userJoined", skip_sid=sid)

        host = self._directory.host_of(code)
        if host and host != sid:
            await self._sync.request(host, sid, code)

        await self._relay.broadcast_user_count(code, self._relay.user_count(code))
        return code

    @serialized
    async def leave_room(self, sid: str, room_code) -> None:
        """
        host가 나가면 room을 닫고, guest가 나가면 남은 사용자에게 알림
        """
        code = normalize_code(room_code)
        if not code:
            return
        if self._directory.is_host(code, sid):
            await self._close_room(code)
            return
        if sid not in self._transport.members(code):
            return

        await self._transport.leave(sid, code)
        logging.info(f"User {sid} left room {code}")
        await self._transport.broadcast(code, "userLeft")
        await self._relay.broadcast_user_count(code, self._relay.user_count(code))

    @serialized
    async def disconnecting(self, sid: str) -> None:
        await self._disconnecting(sid)

    @serialized
    async def disconnect(self, sid: str) -> Optional[Closed]:
        return await self._disconnect(sid)

    @serialized
    async def handle_disconnect(self, sid: str) -> Optional[Closed]:
        """
        python-socketio는 disconnect 핸들러 실행 중에도 room 정보가 남아있으므로
        인원 수 갱신과 room 정리를 한 번에 처리
        """
        await self._disconnecting(sid)
        return await self._disconnect(sid)

    async def _disconnecting(self, sid: str) -> None:
        """
        아직 room 정보가 남아있을 때 호출. 나간 뒤의 인원 수를 남은 사용자에게 전송
        """
        for code in self._transport.rooms_of(sid):
            remaining = self._relay.user_count(code, exclude=sid)
            if remaining:
                await self._relay.broadcast_user_count(code, remaining, skip_sid=sid)

    async def _disconnect(self, sid: str) -> Optional[Closed]:
        """
        연결이 끊긴 사용자가 host인 room이 있으면 닫음
        """
        code = self._directory.hosted_by(sid)
        if code is None:
            return None
        return await self._close_room(code, skip_sid=sid)

    @serialized
    async def request_sync(self, sid: str, room_code) -> None:
        code = normalize_code(room_code)
        host = self._directory.host_of(code) if code else None
        if not host or host == sid:
            return
        await self._sync.request(host, sid, code)

    @serialized
    async def sync_data(self, sid: str, payload) -> bool:
        return await self._sync.relay(sid, payload)

    @serialized
    async def control(self, sid: str, event: str, payload) -> bool:
        return await self._relay.control(sid, event, payload)

    @serialized
    async def chat_message(self, sid: str, payload) -> bool:
        return await self._relay.chat(sid, payload)

    async def _close_room(
        self, code: str, skip_sid: Optional[str] = None
    ) -> Optional[Closed]:
        await self._relay.close_room(code, skip_sid=skip_sid)
        closed = self._directory.close(code)
        logging.info(f"Room closed: {code}")
        return closed
