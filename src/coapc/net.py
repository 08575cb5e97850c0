from __future__ import annotations

import logging
import socket
from typing import Any, Tuple

from .constants import DEFAULT_RECV_BUFFER

Address = Tuple[Any, ...]

_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0)


class RecvBuffer:
    """Fixed-capacity receive buffer that remembers how much was written.

    ``readable()`` only ever exposes the bytes of the last datagram, never
    leftovers from an earlier, longer one. A datagram larger than the buffer
    is marked ``truncated``.
    """

    __slots__ = ("_data", "_used", "_truncated")

    def __init__(self, capacity: int = DEFAULT_RECV_BUFFER):
        if capacity <= 0:
            raise ValueError("buffer capacity must be positive")
        self._data = bytearray(capacity)
        self._used = 0
        self._truncated = False

    @property
    def capacity(self) -> int:
        return len(self._data)

    @property
    def used(self) -> int:
        return self._used

    @property
    def truncated(self) -> bool:
        return self._truncated

    def writable(self) -> memoryview:
        self._used = 0
        self._truncated = False
        return memoryview(self._data)

    def commit(self, nbytes: int, truncated: bool = False) -> None:
        """Record a datagram of ``nbytes``; sizes past capacity mark it truncated."""
        if nbytes < 0:
            raise ValueError(f"invalid datagram size {nbytes}")
        self._used = min(nbytes, len(self._data))
        self._truncated = truncated or nbytes > len(self._data)

    def readable(self) -> bytes:
        return bytes(self._data[: self._used])


class UdpEndpoint:
    """A UDP socket connected to exactly one peer."""

    def __init__(self, sock: socket.socket, peer: Address):
        self.sock = sock
        self.peer = peer

    @classmethod
    def connected(cls, host: str, port: int, timeout_ms: int = 0) -> "UdpEndpoint":
        family, _, _, _, addr = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
        sock = socket.socket(family, socket.SOCK_DGRAM)
        try:
            sock.bind(("::" if family == socket.AF_INET6 else "0.0.0.0", 0))
            sock.connect(addr)
            if timeout_ms > 0:
                sock.settimeout(timeout_ms / 1000.0)
            peer = sock.getpeername()
        except OSError:
            sock.close()
            raise
        logging.debug("bound %s, peer %s", sock.getsockname(), peer)
        return cls(sock, peer)

    @property
    def local(self) -> Address:
        return self.sock.getsockname()

    def send(self, data: bytes) -> None:
        self.sock.send(data)

    def recv_into(self, buf: RecvBuffer) -> Address:
        view = buf.writable()
        if _MSG_TRUNC:
            # reports the full datagram size even when the buffer is smaller
            nbytes, addr = self.sock.recvfrom_into(view, len(view), _MSG_TRUNC)
            buf.commit(nbytes)
        else:
            nbytes, addr = self.sock.recvfrom_into(view)
            buf.commit(nbytes, truncated=nbytes >= len(view))
        return addr

    def close(self) -> None:
        self.sock.close()
