from typing import List, Optional, Set

import socketio


class SocketSessionManager:
    """
    Socket.IO 서버의 room 기능을 감싸서 방 입장/퇴장, 멤버 조회, 전송을
    일관되게 처리하는 매니저.
    """

    def __init__(self, sio: socketio.AsyncServer, namespace: str = "/") -> None:
        self._sio = sio
        self._namespace = namespace

    def members(self, room: str) -> List[str]:
        """room에 현재 참여 중인 sid 목록을 반환합니다."""
        return [
            sid
            for sid, _ in self._sio.manager.get_participants(self._namespace, room)
        ]

    def has_room(self, room: str) -> bool:
        return bool(room) and len(self.members(room)) > 0

    def rooms_of(self, sid: str) -> Set[str]:
        """
        사용자가 속한 room 집합을 반환합니다.
        Socket.IO가 sid마다 만드는 개인 room은 제외합니다.
        """
        rooms = self._sio.rooms(sid, namespace=self._namespace) or []
        return {room for room in rooms if room != sid}

    async def join(self, sid: str, room: str) -> None:
        """사용자를 room에 참여시킵니다."""
        if not room:
            return
        await self._sio.enter_room(sid, room, namespace=self._namespace)

    async def leave(self, sid: str, room: str) -> None:
        """사용자를 room에서 퇴장시킵니다."""
        if not room:
            return
        await self._sio.leave_room(sid, room, namespace=self._namespace)

    async def close_room(self, room: str) -> None:
        """room의 모든 사용자를 퇴장시킵니다."""
        await self._sio.close_room(room, namespace=self._namespace)

    async def send(self, sid: str, event: str, data=None) -> None:
        await self._sio.emit(event, data, to=sid, namespace=self._namespace)

    async def broadcast(
        self, room: str, event: str, data=None, skip_sid: Optional[str] = None
    ) -> None:
        """
        room 전체에 이벤트를 전송합니다.
        skip_sid를 넘기면 해당 사용자(보통 보낸 사람)는 제외됩니다.
        """
        await self._sio.emit(
            event, data, room=room, skip_sid=skip_sid, namespace=self._namespace
        )
