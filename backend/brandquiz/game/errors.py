from __future__ import annotations


class QuizError(Exception):
    """A user input error. The message is safe to send back to the caller."""

    message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class RoomNotFound(QuizError):
    message = "Room not found."


class GameAlreadyStarted(QuizError):
    message = "Game already started"


class NicknameTaken(QuizError):
    message = "Nickname already taken"


class InvalidNickname(QuizError):
    message = "Invalid nickname"


class RoomCodesExhausted(RuntimeError):
    pass
