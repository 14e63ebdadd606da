"""
DTLS session to the gateway.

Responsibilities:
- Own the UDP transport for the lifetime of one encrypted session.
- Perform the PSK handshake (identity + pre-shared key, no certificates).
- Encrypt outbound records and decrypt inbound ones, without looking inside.

Non-responsibilities:
- CoAP framing, message ids and retry policy (see coap.Messenger).
- Keep-alive: the session is usable until a read or write fails.

The DTLS engine is tinydtls through the DTLSSocket bindings. Its only PSK
cipher suite is TLS_PSK_WITH_AES_128_CCM_8, which is what the gateway speaks.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Any, Callable, Optional

from .errors import ConnectError, TransportError
from .transport import COAPS_PORT, IO_TIMEOUT_S, UdpTransport

logger = logging.getLogger(__name__)

CIPHER_SUITE = "TLS_PSK_WITH_AES_128_CCM_8"

# tinydtls event levels/codes
LEVEL_NOALERT = 0
LEVEL_WARNING = 1
LEVEL_FATAL = 2
CODE_CLOSE_NOTIFY = 0
DTLS_EVENT_CONNECT = 0x01DC
DTLS_EVENT_CONNECTED = 0x01DE

# tinydtls addresses peers itself; the connected socket already knows the
# real gateway, so the engine only ever sees this placeholder.
_PEER_ADDRESS = "::ffff:0.0.0.0"
_PEER_PORT = 1234


def _dtls_context(**kwargs: Any) -> Any:
    from DTLSSocket import dtls

    return dtls.DTLS(**kwargs)


class SecureSession:
    """
    One DTLS-PSK channel over a connected UDP transport.

    Typical usage:
        s = SecureSession.connect("192.168.1.100", "identity", "psk")
        s.send(coap_bytes)
        reply = s.recv()
        s.close()
    """

    def __init__(
        self,
        transport: UdpTransport,
        identity: str,
        psk: str,
        *,
        timeout: float = IO_TIMEOUT_S,
        context_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.transport = transport
        self.identity = identity
        self.timeout = timeout
        self._psk = psk
        self._context_factory = context_factory or _dtls_context

        self._context: Any = None
        self._peer: Any = None
        self._inbox: deque[bytes] = deque()
        self._established = False
        self._alert: Optional[int] = None
        self._write_error: Optional[TransportError] = None

    @classmethod
    def connect(
        cls,
        host: str,
        identity: str,
        psk: str,
        *,
        port: int = COAPS_PORT,
        timeout: float = IO_TIMEOUT_S,
        context_factory: Optional[Callable[..., Any]] = None,
    ) -> SecureSession:
        """
        Open the transport and complete the handshake.

        Raises:
            ConnectError: Invalid address, bind failure or handshake failure
        """
        logger.info("Connecting to gateway %s:%s as %r", host, port, identity)
        transport = UdpTransport.open(host, port, timeout)
        session = cls(
            transport, identity, psk, timeout=timeout, context_factory=context_factory
        )
        try:
            session.handshake()
        except ConnectError:
            session.close()
            raise
        logger.info("DTLS handshake with %s:%s complete", host, port)
        return session

    @property
    def connected(self) -> bool:
        return self._established and self._alert is None

    def handshake(self) -> None:
        identity = self.identity.encode("utf-8")
        self._context = self._context_factory(
            read=self._on_read,
            write=self._on_write,
            event=self._on_event,
            pskId=identity,
            pskStore={identity: self._psk.encode("utf-8")},
        )
        self._peer = self._context.connect(_PEER_ADDRESS, _PEER_PORT)

        deadline = time.monotonic() + self.timeout
        while not self._established:
            if self._alert is not None:
                raise ConnectError(
                    f"DTLS handshake rejected by {self.transport.host} (alert {self._alert}); "
                    "check identity and psk"
                )
            if self._write_error is not None:
                raise ConnectError(f"DTLS handshake failed: {self._write_error}")
            if time.monotonic() >= deadline:
                raise ConnectError(f"DTLS handshake with {self.transport.host} timed out")
            try:
                datagram = self.transport.recv()
            except TransportError as e:
                raise ConnectError(f"DTLS handshake failed: {e}") from e
            self._context.handleMessage(self._peer, datagram)

    def send(self, data: bytes) -> None:
        self._require_ready()
        self._write_error = None
        written = self._context.write(self._peer, data)
        if self._write_error is not None:
            raise self._write_error
        if written < 0:
            raise TransportError(f"DTLS write to {self.transport.host} failed ({written})")

    def recv(self) -> bytes:
        """Block until one decrypted record arrives (bounded by the socket timeout)."""
        self._require_ready()
        while not self._inbox:
            datagram = self.transport.recv()
            self._context.handleMessage(self._peer, datagram)
            if self._alert is not None:
                raise TransportError(
                    f"DTLS session with {self.transport.host} closed (alert {self._alert})"
                )
        return self._inbox.popleft()

    def close(self) -> None:
        """Send close-notify if possible and release the socket."""
        if self._context is not None and self._peer is not None and self._established:
            try:
                self._context.close(self._peer)
            except Exception as e:
                logger.debug("Ignoring DTLS close failure: %s", e)
        self._context = None
        self._peer = None
        self._established = False
        self._inbox.clear()
        self.transport.close()

    def _require_ready(self) -> None:
        if self._context is None or not self.connected:
            raise TransportError("DTLS session is not established")

    # tinydtls callbacks. Exceptions must not escape into the C layer.

    def _on_read(self, sender: Any, data: bytes) -> int:
        self._inbox.append(bytes(data))
        return len(data)

    def _on_write(self, recipient: Any, data: bytes) -> int:
        try:
            return self.transport.send(bytes(data))
        except TransportError as e:
            self._write_error = e
            return -1

    def _on_event(self, level: int, code: int) -> None:
        if (level, code) == (LEVEL_NOALERT, DTLS_EVENT_CONNECT):
            return
        if (level, code) == (LEVEL_NOALERT, DTLS_EVENT_CONNECTED):
            self._established = True
            return
        if (level, code) == (LEVEL_WARNING, CODE_CLOSE_NOTIFY):
            logger.info("Gateway %s closed the DTLS session", self.transport.host)
            self._alert = code
            return
        if level == LEVEL_FATAL:
            logger.warning("Fatal DTLS alert %s from %s", code, self.transport.host)
            self._alert = code
            return
        logger.debug("DTLS event level=%s code=%#x", level, code)
