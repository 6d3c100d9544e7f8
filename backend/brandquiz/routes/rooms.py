from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("rooms", __name__)


@bp.get("/rooms/<code>")
def get_room(code: str):
    service = current_app.extensions["brandquiz"]
    room = service.registry.get_room(code)
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(service.room_public_state(room))
