from __future__ import annotations

import hmac

from flask import Blueprint, current_app, jsonify, request

bp = Blueprint("admin", __name__)


def _authorized() -> bool:
    token = current_app.config.get("ADMIN_PASSWORD", "")
    if not token:
        return False
    given = request.headers.get("X-Admin-Token", "")
    return hmac.compare_digest(given.encode("utf-8"), token.encode("utf-8"))


@bp.get("/admin/rooms")
def admin_rooms():
    if not _authorized():
        return jsonify({"error": "unauthorized"}), 401

    service = current_app.extensions["brandquiz"]
    payload = [service.room_public_state(r) for r in service.registry.list_rooms()]
    return jsonify({"rooms": payload})
