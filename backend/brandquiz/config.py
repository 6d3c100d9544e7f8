import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")
    TESTING = False

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO async mode ("" picks eventlet or threading per platform)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    # Shared admin secret
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "12345")

    # Question provider
    GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
    GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.0-flash-001")
    PROVIDER_TIMEOUT_SEC = float(os.environ.get("PROVIDER_TIMEOUT_SEC", "30"))

    # Rooms
    ROOM_CODE_DIGITS = int(os.environ.get("ROOM_CODE_DIGITS", "4"))

    # Game
    MIN_QUESTIONS = int(os.environ.get("MIN_QUESTIONS", "5"))
    MAX_QUESTIONS = int(os.environ.get("MAX_QUESTIONS", "25"))
    SOLO_DEFAULT_QUESTIONS = int(os.environ.get("SOLO_DEFAULT_QUESTIONS", "15"))
    MULTI_DEFAULT_QUESTIONS = int(os.environ.get("MULTI_DEFAULT_QUESTIONS", "20"))
    DEFAULT_GROUP = os.environ.get("DEFAULT_GROUP", "MARRIOTT")

    # Timers. 0 disables the optional server-side ones.
    ANSWER_GRACE_MS = int(os.environ.get("ANSWER_GRACE_MS", "500"))
    AUTO_ADVANCE_SEC = float(os.environ.get("AUTO_ADVANCE_SEC", "0"))
    SERVER_TIME_UP_GRACE_SEC = float(os.environ.get("SERVER_TIME_UP_GRACE_SEC", "0"))
    # Run scheduled callbacks synchronously (tests)
    SCHEDULER_INLINE = os.environ.get("SCHEDULER_INLINE", "0") == "1"

    # Leaderboards
    LEADERBOARD_TOP_N = int(os.environ.get("LEADERBOARD_TOP_N", "10"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
