from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from threading import RLock
from typing import Callable, Literal

from ..game.models import DEFAULT_AVATAR


logger = logging.getLogger(__name__)

LeaderboardKind = Literal["solo", "daily", "multiplayer"]
KINDS: tuple[str, ...] = ("solo", "daily", "multiplayer")


@dataclass(frozen=True)
class ScoreEntry:
    nickname: str
    score: int
    avatar: str
    date: datetime

    def to_dict(self) -> dict:
        return {"nickname": self.nickname, "score": self.score, "avatar": self.avatar, "date": self.date.isoformat()}


@dataclass(frozen=True)
class GameSummary:
    id: str
    date: datetime
    players: tuple[dict, ...]
    winner: str
    question_count: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "players": [dict(p) for p in self.players],
            "winner": self.winner,
            "questionCount": self.question_count,
        }


@dataclass
class LeaderboardStore:
    """In-memory, append-only leaderboards.

    Entries are never edited once appended; the admin operations can only
    delete one entry or clear a whole board.
    """

    clock: Callable[[], datetime] = datetime.now
    solo: list[ScoreEntry] = field(default_factory=list)
    daily: list[ScoreEntry] = field(default_factory=list)
    multiplayer: list[GameSummary] = field(default_factory=list)
    _lock: RLock = field(default_factory=RLock, init=False, repr=False, compare=False)

    def add_solo_score(self, nickname: str, score: int, avatar: str = "") -> ScoreEntry:
        entry = ScoreEntry(nickname=nickname, score=score, avatar=avatar or DEFAULT_AVATAR, date=self.clock())
        with self._lock:
            self.solo.append(entry)
            self.daily.append(entry)
        logger.info("Solo score submitted: %s - %s", nickname, score)
        return entry

    def top_solo(self, n: int = 10) -> list[ScoreEntry]:
        with self._lock:
            return sorted(self.solo, key=lambda e: e.score, reverse=True)[:n]

    def top_daily(self, n: int = 10) -> list[ScoreEntry]:
        today = self.clock().date()
        with self._lock:
            todays = [e for e in self.daily if e.date.date() == today]
        return sorted(todays, key=lambda e: e.score, reverse=True)[:n]

    def add_game_summary(self, players, question_count: int) -> GameSummary:
        """Append a finished multiplayer game. ``players`` must already be ranked."""
        now = self.clock()
        snapshot = tuple(
            {"nickname": p.nickname, "score": p.score, "avatar": p.avatar or DEFAULT_AVATAR} for p in players
        )
        summary = GameSummary(
            id=f"game_{int(now.timestamp() * 1000)}",
            date=now,
            players=snapshot,
            winner=snapshot[0]["nickname"] if snapshot else "",
            question_count=question_count,
        )
        with self._lock:
            self.multiplayer.append(summary)
        logger.info("Saved multiplayer game session: %s", summary.id)
        return summary

    def multiplayer_games(self) -> list[GameSummary]:
        with self._lock:
            return list(self.multiplayer)

    def _board(self, kind: LeaderboardKind) -> list:
        if kind not in KINDS:
            raise ValueError(f"unknown leaderboard: {kind!r}")
        return getattr(self, kind)

    def view(self, kind: LeaderboardKind, n: int | None = None) -> list:
        """Entries of ``kind`` in the order clients display them."""
        if kind == "solo":
            return self.top_solo(n if n is not None else len(self.solo))
        if kind == "daily":
            return self.top_daily(n if n is not None else len(self.daily))
        if kind == "multiplayer":
            games = self.multiplayer_games()
            return games if n is None else games[:n]
        raise ValueError(f"unknown leaderboard: {kind!r}")

    def delete_entry(self, kind: LeaderboardKind, index: int) -> bool:
        """Delete the entry at ``index`` of the displayed ``kind`` board."""
        with self._lock:
            board = self._board(kind)
            shown = self.view(kind)
            if not 0 <= index < len(shown):
                return False
            target = shown[index]
            for i, entry in enumerate(board):
                if entry is target:
                    del board[i]
                    break
        logger.info("Deleted %s leaderboard entry %d", kind, index)
        return True

    def clear(self, kind: LeaderboardKind) -> None:
        with self._lock:
            self._board(kind).clear()
        logger.info("Cleared %s leaderboard", kind)
