from __future__ import annotations

import logging
from typing import Any

from flask import request
from flask_socketio import SocketIO

from ..game.errors import QuizError
from ..game.service import GameService
from . import events


logger = logging.getLogger(__name__)


def _payload(data: Any) -> dict:
    return data if isinstance(data, dict) else {}


def _room_code(payload: dict) -> str:
    return str(payload.get("roomCode", "")).strip()


def _leaderboard_kind(payload: dict) -> Any:
    # Admin clients have sent both key names.
    return payload.get("leaderboardType", payload.get("leaderboard"))


def register_socketio_handlers(socketio: SocketIO, service: GameService) -> None:
    @socketio.on("connect")
    def on_connect(auth=None):
        logger.info("User connected: %s", request.sid)

    @socketio.on("disconnect")
    def on_disconnect(*args):
        sid = request.sid
        logger.info("User disconnected: %s", sid)
        service.admin_logout(sid)
        service.leave(sid, disconnected=True)

    @socketio.on(events.CREATE_ROOM)
    def create_room(data=None):
        payload = _payload(data)
        nickname = payload.get("nickname")
        try:
            if nickname:
                code = service.create_room_with_player(request.sid, nickname, payload.get("avatar"))
            else:
                code = service.create_room(request.sid)
        except QuizError as exc:
            return {"success": False, "error": exc.message}
        return {"success": True, "roomCode": code}

    @socketio.on(events.JOIN_ROOM)
    def join_room(data):
        payload = _payload(data)
        try:
            service.join_room(_room_code(payload), request.sid, payload.get("nickname"), payload.get("avatar"))
        except QuizError as exc:
            return {"success": False, "error": exc.message}
        return {"success": True}

    @socketio.on(events.START_GAME)
    def start_game(data):
        payload = _payload(data)
        started = service.start_game(
            _room_code(payload),
            request.sid,
            payload.get("selectedGroups"),
            payload.get("questionCount"),
        )
        if not started:
            logger.debug("Ignored start_game from %s", request.sid)
        return {"success": started}

    @socketio.on(events.SUBMIT_ANSWER)
    def submit_answer(data):
        payload = _payload(data)
        accepted = service.submit_answer(_room_code(payload), request.sid, payload.get("answer"))
        if not accepted:
            logger.debug("Ignored answer from %s", request.sid)
        return {"success": accepted}

    @socketio.on(events.TIME_UP)
    def time_up(data):
        return {"success": service.time_up(_room_code(_payload(data)), request.sid)}

    @socketio.on(events.NEXT_QUESTION)
    def next_question(data):
        return {"success": service.next_question(_room_code(_payload(data)), request.sid)}

    @socketio.on(events.LEAVE_ROOM)
    def leave_room(data=None):
        service.leave(request.sid)
        return {"success": True}

    # ---- leaderboards ----

    @socketio.on(events.SUBMIT_SOLO_SCORE)
    def submit_solo_score(data):
        payload = _payload(data)
        ok = service.submit_solo_score(payload.get("nickname"), payload.get("score"), payload.get("avatar"))
        return {"success": ok}

    @socketio.on(events.GET_SOLO_LEADERBOARD)
    def get_solo_leaderboard(data=None):
        return [e.to_dict() for e in service.leaderboard.top_solo(service.top_n)]

    @socketio.on(events.GET_GLOBAL_LEADERBOARD)
    def get_global_leaderboard(data=None):
        return get_solo_leaderboard(data)

    @socketio.on(events.GET_DAILY_LEADERBOARD)
    def get_daily_leaderboard(data=None):
        return [e.to_dict() for e in service.leaderboard.top_daily(service.top_n)]

    @socketio.on(events.GET_MULTIPLAYER_LEADERBOARD)
    def get_multiplayer_leaderboard(data=None):
        return [g.to_dict() for g in service.leaderboard.multiplayer_games()]

    # ---- admin ----

    @socketio.on(events.ADMIN_LOGIN)
    def admin_login(data):
        if service.admin_login(request.sid, _payload(data).get("password")):
            return {"success": True}
        return {"success": False, "error": "Invalid password"}

    @socketio.on(events.ADMIN_DELETE_SCORE)
    def admin_delete_score(data):
        payload = _payload(data)
        if not service.is_admin(request.sid):
            return {"success": False, "error": "Unauthorized"}
        if service.admin_delete_score(request.sid, _leaderboard_kind(payload), payload.get("index")):
            return {"success": True}
        return {"success": False, "error": "Invalid index or leaderboard type"}

    @socketio.on(events.ADMIN_CLEAR_LEADERBOARD)
    def admin_clear_leaderboard(data):
        payload = _payload(data)
        if not service.is_admin(request.sid):
            return {"success": False, "error": "Unauthorized"}
        if service.admin_clear_leaderboard(request.sid, _leaderboard_kind(payload)):
            return {"success": True}
        return {"success": False, "error": "Invalid leaderboard type"}
