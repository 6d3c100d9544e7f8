from __future__ import annotations

import hmac
import logging
import time
from threading import RLock
from typing import Any, Mapping

from ..leaderboard.store import KINDS, LeaderboardStore
from ..questions.brands import known_group_ids
from ..questions.provider import QuestionSource
from ..realtime import events
from ..realtime.transport import Transport
from .errors import GameAlreadyStarted, InvalidNickname, NicknameTaken, RoomNotFound
from .models import DEFAULT_AVATAR, Answer, Player, Room
from .registry import RoomRegistry
from .scheduler import Scheduler
from .scoring import apply_result, normalize_multi, normalize_single, score_answer


logger = logging.getLogger(__name__)

NICKNAME_MAX_LEN = 20
AVATAR_MAX_LEN = 16
SOLO_NICKNAME = "SoloPlayer"

TIMER_RESOLVE = "resolve"
TIMER_TIME_UP = "time_up"
TIMER_ADVANCE = "advance"


def clean_nickname(raw: Any) -> str:
    n = str(raw or "").strip()
    if not n or len(n) > NICKNAME_MAX_LEN:
        raise InvalidNickname()
    # Avoid obvious HTML/script injection and control characters.
    if "<" in n or ">" in n or any(ord(ch) < 32 for ch in n):
        raise InvalidNickname()
    return n


def clean_avatar(raw: Any) -> str:
    a = str(raw or "").strip()
    return a[:AVATAR_MAX_LEN] if a else DEFAULT_AVATAR


class GameService:
    """Room lifecycle and the per-room game state machine.

    All room mutation happens under the room's own lock, so different rooms
    never contend. Outbound events go through ``transport``; delayed work goes
    through ``scheduler`` and is checked against the room generation when it
    fires.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        leaderboard: LeaderboardStore,
        transport: Transport,
        questions: QuestionSource,
        scheduler: Scheduler,
        config: Mapping[str, Any] | None = None,
    ) -> None:
        self.registry = registry
        self.leaderboard = leaderboard
        self.transport = transport
        self.questions = questions
        self.scheduler = scheduler
        cfg = config or {}
        self.min_questions = int(cfg.get("MIN_QUESTIONS", 5))
        self.max_questions = int(cfg.get("MAX_QUESTIONS", 25))
        self.solo_default_questions = int(cfg.get("SOLO_DEFAULT_QUESTIONS", 15))
        self.multi_default_questions = int(cfg.get("MULTI_DEFAULT_QUESTIONS", 20))
        self.default_group = cfg.get("DEFAULT_GROUP", "MARRIOTT")
        self.answer_grace_sec = int(cfg.get("ANSWER_GRACE_MS", 500)) / 1000.0
        self.auto_advance_sec = float(cfg.get("AUTO_ADVANCE_SEC", 0))
        self.time_up_grace_sec = float(cfg.get("SERVER_TIME_UP_GRACE_SEC", 0))
        self.top_n = int(cfg.get("LEADERBOARD_TOP_N", 10))
        self._admin_password = str(cfg.get("ADMIN_PASSWORD", ""))
        self._admins: set[str] = set()
        self._admins_lock = RLock()

    # ---- room lifecycle ----

    def create_room(self, sid: str) -> str:
        self.leave(sid)
        room = self.registry.create_room(sid)
        self.transport.subscribe(sid, room.code)
        logger.info("Room created: %s by %s", room.code, sid)
        return room.code

    def create_room_with_player(self, sid: str, nickname: Any, avatar: Any = None) -> str:
        name = clean_nickname(nickname)
        self.leave(sid)
        room = self.registry.create_room_with_player(sid, name, clean_avatar(avatar))
        self.transport.subscribe(sid, room.code)
        with room.lock:
            self.transport.broadcast(room.code, events.LOBBY_UPDATE, {"players": room.roster()})
        logger.info("Room created: %s by %s (%s)", room.code, sid, name)
        return room.code

    def join_room(self, code: Any, sid: str, nickname: Any, avatar: Any = None) -> Player:
        name = clean_nickname(nickname)
        code = str(code or "").strip()
        room = self.registry.get_room(code)
        if room is None:
            logger.info("Join failed: room %s not found", code)
            raise RoomNotFound()

        current = self.registry.room_of(sid)
        if current is not None and current is not room:
            self.leave(sid)

        with room.lock:
            if self.registry.get_room(code) is not room:
                raise RoomNotFound()
            if room.state != "LOBBY" or room.starting:
                raise GameAlreadyStarted()

            existing = room.get_player(sid)
            if existing is not None:
                return existing
            if any(p.nickname == name for p in room.players):
                raise NicknameTaken()

            player = Player(id=sid, nickname=name, avatar=clean_avatar(avatar))
            room.players.append(player)
            self.registry.bind(sid, code)
            self.transport.subscribe(sid, code)

            self.transport.send(
                room.host_id,
                events.PLAYER_JOINED,
                {"id": player.id, "nickname": player.nickname, "avatar": player.avatar, "score": 0, "streak": 0},
            )
            self.transport.broadcast(code, events.LOBBY_UPDATE, {"players": room.roster()})

        logger.info("%s joined room %s", name, code)
        return player

    def leave(self, sid: str, disconnected: bool = False) -> None:
        """Remove ``sid`` from whichever room it is in. Safe to call repeatedly."""
        room = self.registry.room_of(sid)
        self.registry.unbind(sid)
        if room is None:
            return

        with room.lock:
            player = room.get_player(sid)
            if player is not None:
                room.players.remove(player)
                room.answers.pop(sid, None)
                logger.info("%s left room %s", player.nickname, room.code)
            if not disconnected:
                self.transport.unsubscribe(sid, room.code)
            if room.is_host(sid):
                logger.warning("Host left room %s (state=%s)", room.code, room.state)

            if player is not None and room.state == "LOBBY" and room.players:
                self.transport.broadcast(room.code, events.LOBBY_UPDATE, {"players": room.roster()})

            empty = not room.players
            resolve_gen = None
            if not empty and room.state == "QUESTION" and self._all_answered(room):
                resolve_gen = room.generation

        if empty:
            self.registry.delete_room(room.code)
            self.scheduler.cancel(room.code)
            logger.info("Room %s deleted (empty)", room.code)
        elif resolve_gen is not None:
            self._schedule_resolve(room.code, resolve_gen)

    # ---- game flow ----

    def resolve_question_count(self, requested: Any, player_count: int) -> int:
        try:
            count = int(requested) if requested is not None and not isinstance(requested, bool) else None
        except (TypeError, ValueError):
            count = None
        if not count:
            count = self.solo_default_questions if player_count == 1 else self.multi_default_questions
        return max(self.min_questions, min(self.max_questions, count))

    def start_game(self, code: Any, sid: str, selected_groups: Any = None, question_count: Any = None) -> bool:
        room = self.registry.get_room(str(code or ""))
        if room is None:
            return False

        with room.lock:
            if room.state != "LOBBY" or room.starting or not self._is_controller(room, sid):
                return False
            if not room.players:
                room.players.append(Player(id=room.host_id, nickname=SOLO_NICKNAME))
                self.registry.bind(room.host_id, room.code)
            count = self.resolve_question_count(question_count, len(room.players))
            groups = known_group_ids(selected_groups if isinstance(selected_groups, list) else []) or [self.default_group]
            room.starting = True
            room.start_token += 1
            token = room.start_token

        logger.info("Starting game in room %s: players=%d groups=%s count=%d", room.code, len(room.players), groups, count)
        try:
            questions, origin = self.questions.build(count, groups)
        except Exception:
            with room.lock:
                room.starting = False
            raise

        with room.lock:
            if self.registry.get_room(room.code) is not room or room.start_token != token or not room.starting:
                logger.info("Discarding stale question set for room %s", room.code)
                return False
            room.starting = False
            room.questions = tuple(questions)
            room.current_question_index = 0
            room.answers = {}
            room.state = "QUESTION"
            generation = room.bump_generation()
            logger.info("Room %s using %s questions (%d)", room.code, origin, len(room.questions))

            self.transport.broadcast(room.code, events.GAME_STARTED)
            self._broadcast_current_question(room)
            time_limit = room.current_question().time_limit

        self._schedule_time_up(room.code, generation, time_limit)
        return True

    def submit_answer(self, code: Any, sid: str, answer: Any) -> bool:
        room = self.registry.get_room(str(code or ""))
        if room is None:
            return False

        with room.lock:
            if room.state != "QUESTION":
                return False
            if room.get_player(sid) is None or sid in room.answers:
                return False
            question = room.current_question()
            value = normalize_multi(answer) if question.is_multi else normalize_single(answer)
            elapsed = time.monotonic() - (room.question_started_at or time.monotonic())
            room.answers[sid] = Answer(answer=value, time_taken=round(elapsed, 3))

            self.transport.send(
                room.host_id,
                events.PLAYER_ANSWERED,
                {"playerId": sid, "answeredCount": len(room.answers), "totalPlayers": len(room.players)},
            )
            generation = room.generation if self._all_answered(room) else None

        if generation is not None:
            logger.info("All players answered in room %s", room.code)
            self._schedule_resolve(room.code, generation)
        return True

    def time_up(self, code: Any, sid: str) -> bool:
        room = self.registry.get_room(str(code or ""))
        if room is None or not self._is_controller(room, sid):
            return False
        return self.resolve_question(room.code)

    def resolve_question(self, code: str, generation: int | None = None) -> bool:
        """Score the current question and move to LEADERBOARD.

        A no-op unless the room is in QUESTION (and, for timers, still on the
        generation the timer was scheduled for).
        """
        room = self.registry.get_room(code)
        if room is None:
            return False

        with room.lock:
            if room.state != "QUESTION":
                return False
            if generation is not None and generation != room.generation:
                return False

            room.state = "LEADERBOARD"
            next_generation = room.bump_generation()
            question = room.current_question()
            logger.info("Time up for room %s, question %d", code, room.current_question_index + 1)

            for player in room.players:
                answer = room.answers.get(player.id)
                result = score_answer(question, answer.answer if answer else None, player.streak)
                apply_result(player, result)
                if question.is_multi:
                    payload = {
                        "correct": result.correct,
                        "points": result.points,
                        "score": player.score,
                        "streak": player.streak,
                        "correctAnswers": list(question.correct_answers),
                        "correctCount": result.correct_count,
                        "totalCorrect": result.total_correct,
                        "type": question.type,
                    }
                else:
                    payload = {
                        "correct": result.correct,
                        "points": result.points,
                        "score": player.score,
                        "streak": player.streak,
                        "correctAnswer": question.options[question.correct_answer],
                    }
                self.transport.send(player.id, events.QUESTION_RESULT, payload)

            self.transport.broadcast(
                code,
                events.QUESTION_ENDED,
                {
                    "leaderboard": self.leaderboard_snapshot(room),
                    "correctAnswerText": question.correct_answer_text(),
                    "correctAnswers": list(question.correct_answers) if question.is_multi else [],
                    "type": question.type,
                },
            )

        self.scheduler.cancel(code, TIMER_RESOLVE)
        self.scheduler.cancel(code, TIMER_TIME_UP)
        if self.auto_advance_sec > 0:
            self.scheduler.schedule(code, TIMER_ADVANCE, next_generation, self.auto_advance_sec, self._on_advance_timer)
        return True

    def next_question(self, code: Any, sid: str) -> bool:
        room = self.registry.get_room(str(code or ""))
        if room is None or not self._is_controller(room, sid):
            return False
        return self.advance(room.code)

    def advance(self, code: str, generation: int | None = None) -> bool:
        room = self.registry.get_room(code)
        if room is None:
            return False

        with room.lock:
            if room.state != "LEADERBOARD":
                return False
            if generation is not None and generation != room.generation:
                return False

            room.answers = {}
            room.current_question_index += 1
            next_generation = room.bump_generation()
            time_limit = None

            if room.current_question_index >= len(room.questions):
                room.state = "FINISHED"
                ranked = room.ranked_players()
                self.transport.broadcast(
                    code,
                    events.GAME_OVER,
                    {"leaderboard": [self._final_entry(p) for p in ranked]},
                )
                if len(ranked) > 1:
                    self.leaderboard.add_game_summary(ranked, len(room.questions))
                logger.info("Game over in room %s", code)
            else:
                room.state = "QUESTION"
                logger.info("Sending question %d/%d to room %s", room.current_question_index + 1, len(room.questions), code)
                self._broadcast_current_question(room)
                time_limit = room.current_question().time_limit

        self.scheduler.cancel(code, TIMER_ADVANCE)
        if time_limit is not None:
            self._schedule_time_up(code, next_generation, time_limit)
        return True

    # ---- snapshots ----

    def leaderboard_snapshot(self, room: Room) -> list[dict]:
        return [
            {
                "id": p.id,
                "nickname": p.nickname,
                "avatar": p.avatar,
                "score": p.score,
                "lastRoundPoints": p.last_round_points,
            }
            for p in room.ranked_players()
        ]

    def room_public_state(self, room: Room) -> dict:
        with room.lock:
            return {
                "code": room.code,
                "state": room.state,
                "starting": room.starting,
                "players": [
                    {
                        "nickname": p.nickname,
                        "avatar": p.avatar,
                        "score": p.score,
                        "streak": p.streak,
                        "isHost": room.is_host(p.id),
                    }
                    for p in room.players
                ],
                "currentQuestionIndex": room.current_question_index,
                "totalQuestions": len(room.questions),
                "answeredCount": len(room.answers),
                "createdAt": room.created_at,
            }

    # ---- leaderboards & admin ----

    def submit_solo_score(self, nickname: Any, score: Any, avatar: Any = None) -> bool:
        try:
            name = clean_nickname(nickname)
        except InvalidNickname:
            return False
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            return False
        self.leaderboard.add_solo_score(name, score, clean_avatar(avatar))
        return True

    def admin_login(self, sid: str, password: Any) -> bool:
        ok = bool(self._admin_password) and hmac.compare_digest(
            str(password or "").encode("utf-8"), self._admin_password.encode("utf-8")
        )
        if ok:
            with self._admins_lock:
                self._admins.add(sid)
        logger.info("Admin login %s for %s", "ok" if ok else "rejected", sid)
        return ok

    def is_admin(self, sid: str) -> bool:
        with self._admins_lock:
            return sid in self._admins

    def admin_logout(self, sid: str) -> None:
        with self._admins_lock:
            self._admins.discard(sid)

    def admin_delete_score(self, sid: str, kind: Any, index: Any) -> bool:
        if not self.is_admin(sid) or kind not in KINDS:
            return False
        if isinstance(index, bool) or not isinstance(index, int):
            return False
        return self.leaderboard.delete_entry(kind, index)

    def admin_clear_leaderboard(self, sid: str, kind: Any) -> bool:
        if not self.is_admin(sid) or kind not in KINDS:
            return False
        self.leaderboard.clear(kind)
        return True

    # ---- internals ----

    def _is_controller(self, room: Room, sid: str) -> bool:
        # A host that moved to another room no longer controls this one.
        return room.is_host(sid) and self.registry.room_of(sid) is room

    @staticmethod
    def _all_answered(room: Room) -> bool:
        return bool(room.players) and all(p.id in room.answers for p in room.players)

    @staticmethod
    def _final_entry(player: Player) -> dict:
        return {
            "id": player.id,
            "nickname": player.nickname,
            "avatar": player.avatar,
            "score": player.score,
            "streak": player.streak,
            "lastRoundPoints": player.last_round_points,
        }

    def _broadcast_current_question(self, room: Room) -> None:
        question = room.current_question()
        room.question_started_at = time.monotonic()
        self.transport.broadcast(
            room.code,
            events.NEW_QUESTION,
            {"question": question.public_view(room.current_question_index, len(room.questions))},
        )

    def _schedule_resolve(self, code: str, generation: int) -> None:
        self.scheduler.schedule(code, TIMER_RESOLVE, generation, self.answer_grace_sec, self._on_resolve_timer)

    def _schedule_time_up(self, code: str, generation: int, time_limit: float) -> None:
        if self.time_up_grace_sec <= 0:
            return
        delay = time_limit + self.time_up_grace_sec
        self.scheduler.schedule(code, TIMER_TIME_UP, generation, delay, self._on_resolve_timer)

    def _on_resolve_timer(self, code: str, generation: int) -> None:
        self.resolve_question(code, generation=generation)

    def _on_advance_timer(self, code: str, generation: int) -> None:
        self.advance(code, generation=generation)
