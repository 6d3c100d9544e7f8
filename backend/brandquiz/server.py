from __future__ import annotations

import random
import sys

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.registry import RoomRegistry
from .game.scheduler import Scheduler
from .game.service import GameService
from .leaderboard.store import LeaderboardStore
from .questions.provider import GeminiProvider, QuestionProvider, QuestionSource
from .realtime.handlers import register_socketio_handlers
from .realtime.transport import SocketIOTransport
from .routes.admin import bp as admin_bp
from .routes.health import bp as health_bp
from .routes.leaderboards import bp as leaderboards_bp
from .routes.rooms import bp as rooms_bp


def _pick_async_mode(configured: str) -> str:
    if configured:
        return configured
    # Default choice:
    # - Windows: threading (eventlet has known compatibility issues on newer Python)
    # - Python >= 3.13: threading
    # - Otherwise: eventlet
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(
    config_class: type = Config,
    question_provider: QuestionProvider | None = None,
) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config_class)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=_pick_async_mode(app.config.get("SOCKETIO_ASYNC_MODE", "")),
    )

    if question_provider is None and app.config.get("GEMINI_API_KEY"):
        question_provider = GeminiProvider(
            api_key=app.config["GEMINI_API_KEY"],
            model=app.config["GEMINI_MODEL"],
            timeout=app.config.get("PROVIDER_TIMEOUT_SEC", 30),
        )

    service = GameService(
        registry=RoomRegistry(code_digits=app.config.get("ROOM_CODE_DIGITS", 4)),
        leaderboard=LeaderboardStore(),
        transport=SocketIOTransport(socketio),
        questions=QuestionSource(question_provider, random.Random()),
        scheduler=Scheduler(socketio, inline=app.config.get("SCHEDULER_INLINE", False)),
        config=app.config,
    )
    app.extensions["brandquiz"] = service

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(leaderboards_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api")

    register_socketio_handlers(socketio, service)

    return app, socketio
