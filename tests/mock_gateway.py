"""In-process mock gateway for testing.

Answers CoAP requests from a resource table, and can be told to drop the
session a number of times to exercise the reconnect path.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from aiocoap import Message
from aiocoap.numbers.codes import Code
from aiocoap.numbers.types import Type

from tradfri_lan_console.errors import TransportError


# Mock data
FAKE_DEVICES: dict[int, dict[str, Any]] = {
    65537: {
        "3": {"0": "IKEA of Sweden", "1": "TRADFRI bulb E27 WS opal 980lm"},
        "5750": 2,
        "9001": "Kitchen",
        "9003": 65537,
        "9019": 1,
        "3311": [{"5706": "f1e0b5", "5850": 1, "5851": 200}],
    },
    65538: {
        "3": {"0": "IKEA of Sweden", "1": "TRADFRI remote control"},
        "5750": 0,
        "9001": "Remote",
        "9003": 65538,
        "9019": 1,
    },
    65539: {
        "5750": 2,
        "9001": "Bedroom",
        "9003": 65539,
        "9019": 0,
        "3311": [{"5706": "efd275", "5850": 0, "5851": 54}],
    },
}


class FakeGateway:
    """Resource table keyed by path, answering decoded CoAP requests.

    ``errors`` rejects every request to a path, ``put_errors`` only writes,
    and requests to a path in ``silent`` are never answered.
    """

    def __init__(self, devices: Optional[dict[int, Any]] = None):
        self.devices = dict(FAKE_DEVICES if devices is None else devices)
        self.errors: dict[str, Code] = {}
        self.put_errors: dict[str, Code] = {}
        self.silent: set[str] = set()
        self.requests: list[Message] = []
        self.puts: list[tuple[str, dict[str, Any]]] = []

    def handle(self, raw: bytes) -> Optional[bytes]:
        request = Message.decode(raw)
        self.requests.append(request)
        path = "/".join(request.opt.uri_path)

        if path in self.silent:
            return None

        if path in self.errors:
            return self._reply(request, self.errors[path], b"error")

        if request.code == Code.GET:
            body = self._get(path)
            if body is None:
                return self._reply(request, Code.NOT_FOUND, b"")
            return self._reply(request, Code.CONTENT, body)

        if request.code == Code.PUT:
            if path in self.put_errors:
                return self._reply(request, self.put_errors[path], b"error")
            self.puts.append((path, json.loads(request.payload)))
            return self._reply(request, Code.CHANGED, b"")

        return self._reply(request, Code.METHOD_NOT_ALLOWED, b"")

    def _get(self, path: str) -> Optional[bytes]:
        if path == "15001":
            return json.dumps(list(self.devices)).encode()
        prefix, _, device_id = path.partition("/")
        if prefix != "15001" or not device_id.isdigit():
            return None
        device = self.devices.get(int(device_id))
        if device is None:
            return None
        if isinstance(device, bytes):
            return device
        return json.dumps(device).encode()

    @staticmethod
    def _reply(request: Message, code: Code, payload: bytes) -> bytes:
        reply = Message(code=code, token=request.token, payload=payload)
        reply.mtype = Type.ACK
        reply.mid = request.mid
        return reply.encode()


class FakeSession:
    """Stands in for SecureSession: plain bytes in, gateway bytes out."""

    def __init__(self, gateway: FakeGateway, fail_sends: int = 0, garbage_replies: int = 0):
        self.gateway = gateway
        self.fail_sends = fail_sends
        self.garbage_replies = garbage_replies
        self.closed = False
        self.sent: list[bytes] = []
        self._pending: list[bytes] = []

    def send(self, data: bytes) -> None:
        if self.closed:
            raise TransportError("session closed")
        if self.fail_sends > 0:
            self.fail_sends -= 1
            raise TransportError("connection reset")
        self.sent.append(data)
        reply = self.gateway.handle(data)
        if reply is not None:
            self._pending.append(reply)

    def recv(self) -> bytes:
        if self.garbage_replies > 0:
            self.garbage_replies -= 1
            return b"\x00"
        if not self._pending:
            raise TransportError("timed out")
        return self._pending.pop(0)

    def close(self) -> None:
        self.closed = True


class SessionFactory:
    """Hands out FakeSessions; each entry of ``plan`` is the fail_sends of one session."""

    def __init__(self, gateway: FakeGateway, plan: Optional[list[int]] = None):
        self.gateway = gateway
        self.plan = list(plan or [])
        self.sessions: list[FakeSession] = []

    def __call__(self) -> FakeSession:
        fail_sends = self.plan.pop(0) if self.plan else 0
        session = FakeSession(self.gateway, fail_sends=fail_sends)
        self.sessions.append(session)
        return session
