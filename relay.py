import logging
from typing import Optional

from room_directory import normalize_code
from socket_manager import SocketSessionManager

CONTROL_EVENTS = ("play", "pause", "seek", "changeTrack")


def resolve_room(payload) -> Optional[str]:
    """
    payload에서 room 코드를 꺼냄
    문자열이면 그 자체가 room 코드, dict면 room 또는 roomCode 키
    """
    if isinstance(payload, str):
        return normalize_code(payload)
    if isinstance(payload, dict):
        return normalize_code(payload.get("room") or payload.get("roomCode"))
    return None


class BroadcastRelay:
    """
    한 사용자의 이벤트를 같은 room의 다른 사용자들에게 그대로 전달
    """

    def __init__(self, transport: SocketSessionManager) -> None:
        self._transport = transport

    async def forward(self, sid: str, event: str, payload) -> bool:
        """
        payload를 변경 없이 보낸 사람을 제외한 room 전체에 전달
        room을 알 수 없는 payload는 버림
        """
        room = resolve_room(payload)
        if not room:
            logging.debug(f"Dropped {event} from {sid}: no room in payload")
            return False
        await self._transport.broadcast(room, event, payload, skip_sid=sid)
        return True

    async def control(self, sid: str, event: str, payload) -> bool:
        if event not in CONTROL_EVENTS:
            raise ValueError(f"Unknown control event: {event}")
        return await self.forward(sid, event, payload)

    async def chat(self, sid: str, payload) -> bool:
        return await self.forward(sid, "chatMessage", payload)

    def user_count(self, room: str, exclude: Optional[str] = None) -> int:
        return len([m for m in self._transport.members(room) if m != exclude])

    async def broadcast_user_count(
        self, room: str, count: int, skip_sid: Optional[str] = None
    ) -> None:
        await self._transport.broadcast(
            room, "updateUserCount", {"count": count}, skip_sid=skip_sid
        )

    async def close_room(self, room: str, skip_sid: Optional[str] = None) -> None:
        """
        roomClosed를 알린 뒤 room의 모든 사용자를 퇴장시킴
        """
        await self._transport.broadcast(room, "roomClosed", skip_sid=skip_sid)
        await self._transport.close_room(room)
