from __future__ import annotations

import logging
import random
from threading import RLock

from .errors import RoomCodesExhausted
from .models import DEFAULT_AVATAR, Player, Room


logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 1000


class RoomRegistry:
    """Process-wide map of live rooms, keyed by their numeric code.

    Created once at startup and handed to the game service. Nothing here
    survives a restart.
    """

    def __init__(self, code_digits: int = 4, rng: random.Random | None = None) -> None:
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._sid_rooms: dict[str, str] = {}
        self._code_digits = code_digits
        self._rng = rng or random.Random()

    def _new_code(self) -> str:
        low = 10 ** (self._code_digits - 1)
        high = 10 ** self._code_digits - 1
        for _ in range(MAX_CODE_ATTEMPTS):
            code = str(self._rng.randint(low, high))
            if code not in self._rooms:
                return code
        raise RoomCodesExhausted(f"no free {self._code_digits}-digit room code")

    def create_room(self, host_id: str) -> Room:
        with self._lock:
            code = self._new_code()
            room = Room(code=code, host_id=host_id)
            assert code not in self._rooms, f"duplicate room code {code}"
            self._rooms[code] = room
            self._sid_rooms[host_id] = code
            return room

    def create_room_with_player(self, host_id: str, nickname: str, avatar: str = "") -> Room:
        with self._lock:
            room = self.create_room(host_id)
            room.players.append(Player(id=host_id, nickname=nickname, avatar=avatar or DEFAULT_AVATAR))
            return room

    def get_room(self, code: str) -> Room | None:
        with self._lock:
            return self._rooms.get(code)

    def delete_room(self, code: str) -> bool:
        with self._lock:
            room = self._rooms.pop(code, None)
            if room is None:
                return False
            for sid in [s for s, c in self._sid_rooms.items() if c == code]:
                del self._sid_rooms[sid]
            return True

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def bind(self, sid: str, code: str) -> None:
        with self._lock:
            self._sid_rooms[sid] = code

    def unbind(self, sid: str) -> str | None:
        with self._lock:
            return self._sid_rooms.pop(sid, None)

    def room_of(self, sid: str) -> Room | None:
        with self._lock:
            code = self._sid_rooms.get(sid)
            return self._rooms.get(code) if code else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, code: str) -> bool:
        with self._lock:
            return code in self._rooms
