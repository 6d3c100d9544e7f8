from __future__ import annotations

from typing import Protocol

from flask_socketio import SocketIO


class Transport(Protocol):
    """What the game service needs from the realtime channel."""

    def broadcast(self, room: str, event: str, payload: dict | None = None) -> None: ...

    def send(self, sid: str, event: str, payload: dict | None = None) -> None: ...

    def subscribe(self, sid: str, room: str) -> None: ...

    def unsubscribe(self, sid: str, room: str) -> None: ...


class SocketIOTransport:
    """Flask-SocketIO implementation.

    Every connection is also a room named after its sid, so ``send`` is an
    emit to that room. Room membership goes through the underlying server so
    it works from background tasks as well as from event handlers.
    """

    def __init__(self, socketio: SocketIO, namespace: str = "/") -> None:
        self.socketio = socketio
        self.namespace = namespace

    def broadcast(self, room: str, event: str, payload: dict | None = None) -> None:
        if payload is None:
            self.socketio.emit(event, to=room, namespace=self.namespace)
        else:
            self.socketio.emit(event, payload, to=room, namespace=self.namespace)

    def send(self, sid: str, event: str, payload: dict | None = None) -> None:
        self.broadcast(sid, event, payload)

    def subscribe(self, sid: str, room: str) -> None:
        self.socketio.server.enter_room(sid, room, namespace=self.namespace)

    def unsubscribe(self, sid: str, room: str) -> None:
        self.socketio.server.leave_room(sid, room, namespace=self.namespace)
