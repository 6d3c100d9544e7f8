from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("leaderboards", __name__)


@bp.get("/leaderboards/solo")
def solo():
    service = current_app.extensions["brandquiz"]
    return jsonify([e.to_dict() for e in service.leaderboard.top_solo(service.top_n)])


@bp.get("/leaderboards/daily")
def daily():
    service = current_app.extensions["brandquiz"]
    return jsonify([e.to_dict() for e in service.leaderboard.top_daily(service.top_n)])


@bp.get("/leaderboards/multiplayer")
def multiplayer():
    service = current_app.extensions["brandquiz"]
    return jsonify([g.to_dict() for g in service.leaderboard.multiplayer_games()])
