"""CoAP request/response exchange over the DTLS session, with one reconnect retry."""

from __future__ import annotations

import logging
import struct
from typing import Callable, Optional, Protocol

from aiocoap import Message
from aiocoap.error import UnparsableMessage
from aiocoap.numbers.codes import Code
from aiocoap.numbers.types import Type

from .errors import ConnectError, ProtocolError, TransportError

logger = logging.getLogger(__name__)

MAX_MESSAGE_ID = 0xFFFF

SUCCESS_CODES = frozenset(
    {Code.CONTENT, Code.CREATED, Code.CHANGED, Code.DELETED, Code.VALID}
)


class Session(Protocol):
    def send(self, data: bytes) -> None: ...

    def recv(self) -> bytes: ...

    def close(self) -> None: ...


class Messenger:
    """
    Frames CoAP requests and recovers from a broken session.

    The messenger owns at most one session at a time. Any I/O failure during an
    exchange discards it; the same request is then retried exactly once on a
    fresh session obtained from ``connect``.
    """

    def __init__(self, connect: Callable[[], Session]):
        """
        Initialize the messenger.

        Args:
            connect: Zero-argument factory returning a freshly handshaken session
        """
        self._connect = connect
        self._session: Optional[Session] = None
        self._message_id = 1

    @property
    def connected(self) -> bool:
        return self._session is not None

    def open(self) -> Session:
        """Establish the session if there is none. ConnectError propagates."""
        if self._session is None:
            self._session = self._connect()
        return self._session

    def close(self) -> None:
        if self._session is not None:
            session, self._session = self._session, None
            session.close()

    def next_message_id(self) -> int:
        mid = self._message_id
        self._message_id = (mid + 1) & MAX_MESSAGE_ID
        return mid

    def exchange(self, request: Message) -> Message:
        """
        Send one request and return the decoded response.

        Raises:
            TransportError: If the request failed on the current session and on a
                fresh one
        """
        raw = request.encode()
        last_error: Optional[Exception] = None

        for attempt in (1, 2):
            try:
                session = self.open()
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug("TX %s mid=%s (%d bytes)", request.code, request.mid, len(raw))
                session.send(raw)
                response = decode_response(session.recv())
            except (ConnectError, TransportError) as e:
                last_error = e
                logger.warning("Exchange attempt %d failed, dropping session: %s", attempt, e)
                self._discard()
                continue

            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "RX %s mid=%s (%d bytes)", response.code, response.mid, len(response.payload)
                )
            return response

        raise TransportError(f"Request failed after reconnect: {last_error}") from last_error

    def get(self, path: str) -> bytes:
        response = self._request(Code.GET, path)
        return response.payload

    def put(self, path: str, payload: bytes) -> None:
        self._request(Code.PUT, path, payload)

    def _request(self, code: Code, path: str, payload: bytes = b"") -> Message:
        request = Message(
            code=code,
            payload=payload,
            uri_path=tuple(path.strip("/").split("/")),
        )
        request.mtype = Type.CON
        request.mid = self.next_message_id()
        response = self.exchange(request)
        check_response(response, f"{code} {path}")
        return response

    def _discard(self) -> None:
        if self._session is None:
            return
        session, self._session = self._session, None
        try:
            session.close()
        except Exception as e:
            logger.debug("Ignoring close failure on broken session: %s", e)


def decode_response(raw: bytes) -> Message:
    """
    Decode response bytes, treating any malformed datagram as a transport failure.

    Raises:
        TransportError: If the bytes are not a well-formed CoAP message
    """
    try:
        return Message.decode(raw)
    except (UnparsableMessage, ValueError, struct.error) as e:
        raise TransportError(f"Undecodable CoAP response ({len(raw)} bytes): {e}") from e


def check_response(response: Message, what: str) -> None:
    """Raise ProtocolError unless ``response`` carries a success code."""
    code = response.code
    if code in SUCCESS_CODES or not code.is_response():
        return
    text = response.payload.decode("utf-8", errors="replace")
    raise ProtocolError(f"CoAP error {code} for {what}: {text}", code=code, payload=text)
