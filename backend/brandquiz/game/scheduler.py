from __future__ import annotations

import itertools
import logging
from threading import RLock
from typing import Callable


logger = logging.getLogger(__name__)


class Scheduler:
    """Delayed callbacks keyed by ``(room_code, kind)``.

    Scheduling a key again replaces the previous timer; a replaced or
    cancelled timer wakes up, sees its token is gone and does nothing. The
    callback receives the room generation captured at scheduling time so the
    game service can tell whether the room moved on in the meantime.

    With ``inline=True`` callbacks run immediately on the calling thread,
    which keeps tests deterministic.
    """

    def __init__(self, socketio=None, inline: bool = False) -> None:
        self._socketio = socketio
        self._inline = inline or socketio is None
        self._lock = RLock()
        self._pending: dict[tuple[str, str], int] = {}
        self._tokens = itertools.count(1)

    def schedule(
        self,
        room_code: str,
        kind: str,
        generation: int,
        delay_sec: float,
        callback: Callable[[str, int], None],
    ) -> None:
        key = (room_code, kind)
        with self._lock:
            token = next(self._tokens)
            self._pending[key] = token

        logger.debug("[timer-set] room=%s kind=%s gen=%s delay=%.2fs", room_code, kind, generation, delay_sec)

        if self._inline:
            self._fire(key, token, room_code, generation, callback)
            return

        def _worker() -> None:
            self._socketio.sleep(max(0.0, delay_sec))
            self._fire(key, token, room_code, generation, callback)

        self._socketio.start_background_task(_worker)

    def _fire(self, key, token: int, room_code: str, generation: int, callback) -> None:
        with self._lock:
            if self._pending.get(key) != token:
                logger.debug("[timer-skip] room=%s kind=%s superseded", *key)
                return
            del self._pending[key]
        logger.debug("[timer-fire] room=%s kind=%s gen=%s", key[0], key[1], generation)
        try:
            callback(room_code, generation)
        except Exception:
            logger.exception("[timer-error] room=%s kind=%s", *key)

    def cancel(self, room_code: str, kind: str | None = None) -> None:
        with self._lock:
            for key in list(self._pending):
                if key[0] == room_code and (kind is None or key[1] == kind):
                    del self._pending[key]

    def pending(self, room_code: str) -> list[str]:
        with self._lock:
            return sorted(k for (code, k) in self._pending if code == room_code)
