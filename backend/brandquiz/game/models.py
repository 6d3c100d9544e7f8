from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Literal


RoomState = Literal["LOBBY", "QUESTION", "LEADERBOARD", "FINISHED"]
QuestionType = Literal["single", "multi-select"]

DEFAULT_AVATAR = "👤"
SINGLE_TIME_LIMIT = 12
MULTI_TIME_LIMIT = 20


@dataclass(frozen=True)
class Question:
    text: str
    options: tuple[str, ...]
    type: QuestionType = "single"
    correct_answer: int | None = None
    correct_answers: tuple[int, ...] = ()
    time_limit: int = SINGLE_TIME_LIMIT
    explanation: str = ""

    @property
    def is_multi(self) -> bool:
        return self.type == "multi-select"

    def correct_indices(self) -> tuple[int, ...]:
        if self.is_multi:
            return self.correct_answers
        return () if self.correct_answer is None else (self.correct_answer,)

    def correct_answer_text(self) -> str:
        return ", ".join(self.options[i] for i in self.correct_indices())

    def public_view(self, index: int, total: int) -> dict:
        # Correct-answer fields never leave the server before resolution.
        return {
            "text": self.text,
            "options": list(self.options),
            "timeLimit": self.time_limit,
            "type": self.type,
            "index": index,
            "total": total,
        }


@dataclass
class Player:
    id: str
    nickname: str
    avatar: str = DEFAULT_AVATAR
    score: int = 0
    streak: int = 0
    last_round_points: int = 0


@dataclass
class Answer:
    answer: Any
    time_taken: float


@dataclass
class Room:
    code: str
    host_id: str
    state: RoomState = "LOBBY"
    players: list[Player] = field(default_factory=list)
    questions: tuple[Question, ...] = ()
    current_question_index: int = -1
    answers: dict[str, Answer] = field(default_factory=dict)
    question_started_at: float | None = None
    generation: int = 0
    starting: bool = False
    start_token: int = 0
    created_at: float = field(default_factory=time.time)
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    def get_player(self, sid: str) -> Player | None:
        for p in self.players:
            if p.id == sid:
                return p
        return None

    def is_host(self, sid: str) -> bool:
        return sid == self.host_id

    @property
    def is_solo(self) -> bool:
        return len(self.players) == 1

    def current_question(self) -> Question | None:
        if 0 <= self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    def bump_generation(self) -> int:
        self.generation += 1
        return self.generation

    def roster(self) -> list[dict]:
        return [
            {"id": p.id, "nickname": p.nickname, "avatar": p.avatar, "isHost": self.is_host(p.id)}
            for p in self.players
        ]

    def ranked_players(self) -> list[Player]:
        # sorted() is stable: ties keep join order.
        return sorted(self.players, key=lambda p: p.score, reverse=True)
