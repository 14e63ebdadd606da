"""Connected UDP socket to the gateway."""

from __future__ import annotations

import ipaddress
import logging
import socket

from .errors import ConnectError, TransportError

logger = logging.getLogger(__name__)

COAPS_PORT = 5684
IO_TIMEOUT_S = 10.0
RECV_MAX_BYTES = 4096


class UdpTransport:
    """A datagram socket bound to an ephemeral port and connected to one peer."""

    def __init__(self, sock: socket.socket, host: str, port: int):
        self.sock = sock
        self.host = host
        self.port = port

    @classmethod
    def open(
        cls,
        host: str,
        port: int = COAPS_PORT,
        timeout: float = IO_TIMEOUT_S,
    ) -> UdpTransport:
        """
        Bind a local endpoint and associate it with the gateway.

        Args:
            host: Gateway IP address (IPv4 or IPv6 literal)
            port: Gateway UDP port
            timeout: Read/write timeout in seconds

        Raises:
            ConnectError: If the address is invalid or the socket cannot be set up
        """
        try:
            address = ipaddress.ip_address(host)
        except ValueError as e:
            raise ConnectError(f"Invalid gateway address: {host!r}") from e

        if address.version == 6:
            family, local = socket.AF_INET6, ("::", 0)
        else:
            family, local = socket.AF_INET, ("0.0.0.0", 0)

        sock = socket.socket(family, socket.SOCK_DGRAM)
        try:
            sock.bind(local)
            sock.settimeout(timeout)
            sock.connect((str(address), port))
        except OSError as e:
            sock.close()
            raise ConnectError(f"Failed to bind UDP socket for {host}:{port}: {e}") from e

        logger.debug("UDP socket %s connected to %s:%s", sock.getsockname(), host, port)
        return cls(sock, str(address), port)

    def send(self, data: bytes) -> int:
        try:
            return self.sock.send(data)
        except socket.timeout as e:
            raise TransportError(f"Timed out writing to {self.host}:{self.port}") from e
        except OSError as e:
            raise TransportError(f"Socket write to {self.host}:{self.port} failed: {e}") from e

    def recv(self) -> bytes:
        try:
            return self.sock.recv(RECV_MAX_BYTES)
        except socket.timeout as e:
            raise TransportError(f"Timed out waiting for {self.host}:{self.port}") from e
        except OSError as e:
            raise TransportError(f"Socket read from {self.host}:{self.port} failed: {e}") from e

    def close(self) -> None:
        """Close the socket. Safe to call multiple times."""
        try:
            self.sock.close()
        except OSError:
            pass
