import logging
from typing import Dict, Optional, Type

from relay import resolve_room
from socket_manager import SocketSessionManager


class SyncStrategy:
    """
    새로 입장한 guest를 host의 현재 재생 상태에 맞추는 방식
    """

    name = ""

    def __init__(self, transport: SocketSessionManager) -> None:
        self._transport = transport

    async def request(self, host_sid: str, guest_sid: str, room: str) -> None:
        raise NotImplementedError

    async def relay(self, sid: str, payload) -> bool:
        raise NotImplementedError


class TargetedSync(SyncStrategy):
    """
    host에게 새 guest의 sid를 넘겨서 sync를 요청하고,
    host가 보낸 sync 데이터는 그 guest에게만 전달
    """

    name = "targeted"

    async def request(self, host_sid: str, guest_sid: str, room: str) -> None:
        await self._transport.send(host_sid, "requestSync", guest_sid)

    async def relay(self, sid: str, payload) -> bool:
        target = payload.get("targetGuestId") if isinstance(payload, dict) else None
        if not target:
            logging.debug(f"Dropped sync data from {sid}: no targetGuestId")
            return False
        await self._transport.send(target, "syncGuest", payload)
        return True


class BroadcastSync(SyncStrategy):
    """
    host에게 대상 없이 현재 상태를 요청하고,
    host의 응답은 room 전체(host 제외)에 전달
    """

    name = "broadcast"

    async def request(self, host_sid: str, guest_sid: str, room: str) -> None:
        await self._transport.send(host_sid, "requestSync")

    async def relay(self, sid: str, payload) -> bool:
        room = resolve_room(payload)
        if not room:
            logging.debug(f"Dropped sync data from {sid}: no room")
            return False
        await self._transport.broadcast(room, "syncData", payload, skip_sid=sid)
        return True


SYNC_STRATEGIES: Dict[str, Type[SyncStrategy]] = {
    TargetedSync.name: TargetedSync,
    BroadcastSync.name: BroadcastSync,
}


def make_sync_strategy(
    name: Optional[str], transport: SocketSessionManager
) -> SyncStrategy:
    strategy_cls = SYNC_STRATEGIES.get((name or "").strip().lower())
    if strategy_cls is None:
        raise ValueError(
            f"Unknown sync strategy {name!r}, expected one of {sorted(SYNC_STRATEGIES)}"
        )
    return strategy_cls(transport)
