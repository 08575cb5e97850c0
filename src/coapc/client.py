from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field

from .cache import ResponseCache
from .constants import (
    DEFAULT_CACHE_MAX_AGE_S,
    DEFAULT_FIRST_MESSAGE_ID,
    DEFAULT_RECV_BUFFER,
    DEFAULT_TIMEOUT_MS,
    MAX_MESSAGE_ID,
)
from .errors import DecodeError, InvalidMessageTypeError
from .message import Message, MessageType
from .net import RecvBuffer, UdpEndpoint


@dataclass(slots=True)
class Client:
    """Request/response correlation with a single peer.

    Message ids are handed out from a wrapping 16-bit counter. Responses sent
    with ``send_response`` are remembered so that a retransmitted confirmable
    message is answered again from the cache without reaching the caller.
    """

    udp: UdpEndpoint
    message_id: int = DEFAULT_FIRST_MESSAGE_ID
    cache: ResponseCache = field(default_factory=ResponseCache)
    buffer: RecvBuffer = field(default_factory=RecvBuffer)

    @classmethod
    def connect(
        cls,
        host: str,
        port: int,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        first_message_id: int = DEFAULT_FIRST_MESSAGE_ID,
        cache_max_age_s: float = DEFAULT_CACHE_MAX_AGE_S,
        cache_max_entries: int | None = None,
        buffer_size: int = DEFAULT_RECV_BUFFER,
    ) -> "Client":
        udp = UdpEndpoint.connected(host, port, timeout_ms=timeout_ms)
        return cls(
            udp,
            message_id=first_message_id & MAX_MESSAGE_ID,
            cache=ResponseCache(max_age_s=cache_max_age_s, max_entries=cache_max_entries),
            buffer=RecvBuffer(buffer_size),
        )

    def next_message_id(self) -> int:
        ret = self.message_id
        self.message_id = (self.message_id + 1) & MAX_MESSAGE_ID
        return ret

    def send(self, message: Message) -> int:
        """Send ``message`` under a fresh message id, which is returned."""
        mid = self.next_message_id()
        data = dataclasses.replace(message, message_id=mid).to_bytes()
        self.udp.send(data)
        logging.debug("sent %s id=%d (%d bytes)", MessageType(message.message_type).name, mid, len(data))
        return mid

    def receive(self) -> Message:
        while True:
            addr = self.udp.recv_into(self.buffer)
            if addr != self.udp.peer:
                logging.debug("dropping datagram from unexpected source %s", addr)
                continue
            if self.buffer.truncated:
                logging.debug("dropping datagram larger than %d byte buffer", self.buffer.capacity)
                continue

            try:
                message = Message.from_bytes(self.buffer.readable())
            except DecodeError as e:
                logging.debug("dropping malformed datagram (%d bytes): %s", self.buffer.used, e)
                continue

            if message.is_confirmable:
                cached = self.cache.get_response(message.message_id)
                if cached is not None:
                    logging.debug("duplicate id=%d; replaying cached response", message.message_id)
                    self.udp.send(cached)
                    continue

            return message

    def send_response(self, response: Message) -> None:
        if response.message_type not in (MessageType.ACKNOWLEDGEMENT, MessageType.RESET):
            raise InvalidMessageTypeError(
                f"cannot send message type {response.message_type!r} as a response"
            )

        data = response.to_bytes()
        self.udp.send(data)
        self.cache.add(response.message_id, data)
        logging.debug("sent %s id=%d", MessageType(response.message_type).name, response.message_id)

    def close(self) -> None:
        self.udp.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
