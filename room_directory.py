import logging
import random
import string
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

ROOM_CODE_LENGTH = 4
ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class Absent:
    code: str


@dataclass(frozen=True)
class Open:
    code: str
    host: str


@dataclass(frozen=True)
class Closed:
    code: str
    host: str


RoomState = Union[Absent, Open, Closed]


def normalize_code(code) -> Optional[str]:
    """
    room 코드를 대문자로 정규화. 문자열이 아니거나 비어있으면 None
    """
    if not isinstance(code, str):
        return None
    code = code.strip().upper()
    return code or None


def generate_code(is_taken: Callable[[str], bool]) -> str:
    """
    4자리 대문자/숫자 room 코드를 생성
    이미 사용 중인 코드가 나오면 다시 생성
    """
    while True:
        code = "".join(random.choices(ROOM_CODE_ALPHABET, k=ROOM_CODE_LENGTH))
        if not is_taken(code):
            return code
        logging.debug(f"Room code collision, regenerating: {code}")


class RoomDirectory:
    """
    room 코드별 host sid를 관리하는 저장소.
    멤버 목록은 Socket.IO room이 관리하므로 여기서는 host만 기록합니다.
    """

    def __init__(self) -> None:
        self._hosts: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._hosts)

    def __contains__(self, code: str) -> bool:
        return code in self._hosts

    def put(self, code: str, sid: str) -> None:
        previous = self._hosts.get(code)
        if previous is not None and previous != sid:
            logging.warning(
                f"Room {code} host overwritten: {previous} -> {sid}"
            )
        self._hosts[code] = sid

    def get(self, code: str) -> Optional[str]:
        return self._hosts.get(code)

    def delete(self, code: str) -> None:
        self._hosts.pop(code, None)

    def host_of(self, code: str) -> Optional[str]:
        return self.get(code)

    def is_host(self, code: str, sid: str) -> bool:
        return sid is not None and self._hosts.get(code) == sid

    def hosted_by(self, sid: str) -> Optional[str]:
        """sid가 host인 room 코드를 반환. 없으면 None"""
        for code, host in self._hosts.items():
            if host == sid:
                return code
        return None

    def state(self, code: str) -> RoomState:
        host = self._hosts.get(code)
        if host is None:
            return Absent(code)
        return Open(code, host)

    def open(self, code: str, host: str) -> Open:
        """Absent -> Open"""
        self.put(code, host)
        return Open(code, host)

    def close(self, code: str) -> Optional[Closed]:
        """
        Open -> Closed
        room이 열려있지 않으면 None을 반환합니다.
        """
        host = self._hosts.pop(code, None)
        if host is None:
            return None
        return Closed(code, host)
