"""
udp_source.py: UDP transport for the game's telemetry stream.

What this module does:
  • Binds a datagram socket on the configured host/port (default 20777, the game's port).
  • Hands back one datagram per receive() call without blocking, so a timer-driven
    worker can drain whatever has arrived since its last tick.
  • Supports `with UdpTelemetrySource(...) as src:`.

A failure to bind is fatal for the application and surfaces as TransportError.
"""

from __future__ import annotations

import logging
log = logging.getLogger(__name__)

import socket
from typing import Optional

DEFAULT_PORT = 20777
DEFAULT_BUFFER_SIZE = 2048


class TransportError(RuntimeError):
    """Raised when the UDP socket cannot be opened."""
    pass


class UdpTelemetrySource:
    def __init__(self,
                 host: str = "0.0.0.0",
                 port: int = DEFAULT_PORT,
                 buffer_size: int = DEFAULT_BUFFER_SIZE):
        self.host = host
        self.port = int(port)
        self.buffer_size = max(1, int(buffer_size))
        self._sock: Optional[socket.socket] = None

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    # --- lifecycle / context management ---

    def open(self) -> "UdpTelemetrySource":
        if self._sock is not None:
            return self

        log.info(f"Binding telemetry socket on {self.host}:{self.port}")
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
            sock.setblocking(False)
        except OSError as e:
            sock.close()
            log.error(f"Could not bind UDP socket on {self.host}:{self.port}: {e}")
            raise TransportError(
                f"Could not open UDP socket on {self.host}:{self.port}: {e}"
            ) from e

        self._sock = sock
        return self

    def close(self) -> None:
        """Close the socket; safe to call more than once."""
        if self._sock is None:
            log.debug("UdpTelemetrySource.close() called, but no socket was open.")
            return

        try:
            self._sock.close()
            log.info("Closed telemetry socket.")
        except OSError as e:
            log.warning(f"Error while closing telemetry socket: {e}", exc_info=True)
        finally:
            self._sock = None

    def __enter__(self) -> "UdpTelemetrySource":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    # --- receive ---

    def receive(self) -> Optional[bytes]:
        """Return the next pending datagram, or None if nothing is waiting."""
        if self._sock is None:
            raise TransportError("Socket not open")
        try:
            data, _addr = self._sock.recvfrom(self.buffer_size)
        except BlockingIOError:
            return None
        return data
