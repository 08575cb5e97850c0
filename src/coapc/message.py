from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field

from .codes import EMPTY
from .constants import (
    ACKNOWLEDGEMENT,
    CONFIRMABLE,
    HEADER_FORMAT,
    MAX_MESSAGE_ID,
    MAX_OPTION_NUMBER,
    MAX_TOKEN_LEN,
    NON_CONFIRMABLE,
    PAYLOAD_MARKER,
    RESET,
    VERSION,
)
from .errors import DecodeError, EncodeError
from .options import Option, OptionBucket, decode_extended

_HEADER = struct.Struct(HEADER_FORMAT)


class MessageType(enum.IntEnum):
    CONFIRMABLE = CONFIRMABLE
    NON_CONFIRMABLE = NON_CONFIRMABLE
    ACKNOWLEDGEMENT = ACKNOWLEDGEMENT
    RESET = RESET


@dataclass(slots=True)
class Message:
    message_type: MessageType
    code: int
    message_id: int = 0
    token: bytes = b""
    options: OptionBucket = field(default_factory=OptionBucket)
    payload: bytes = b""

    def add_option(self, number: int, value: bytes | str) -> None:
        self.options.add(number, value)

    def to_bytes(self) -> bytes:
        if len(self.token) > MAX_TOKEN_LEN:
            raise EncodeError(f"token too long: {len(self.token)} bytes")
        if not 0 <= self.message_id <= MAX_MESSAGE_ID:
            raise EncodeError(f"message id out of range: {self.message_id}")
        if not 0 <= self.code <= 0xFF:
            raise EncodeError(f"code out of range: {self.code}")
        try:
            mtype = MessageType(self.message_type)
        except ValueError:
            raise EncodeError(f"invalid message type: {self.message_type!r}") from None

        first = (VERSION << 6) | (mtype << 4) | len(self.token)
        out = bytearray(_HEADER.pack(first, self.code, self.message_id))
        out += self.token
        self.options.encode_to(out)
        if self.payload:
            out.append(PAYLOAD_MARKER)
            out += self.payload
        return bytes(out)

    @staticmethod
    def from_bytes(raw: bytes) -> "Message":
        if len(raw) < _HEADER.size:
            raise DecodeError("datagram too small to hold a header")

        first, code, message_id = _HEADER.unpack_from(raw)
        version = first >> 6
        if version != VERSION:
            raise DecodeError(f"version mismatch: expected {VERSION}, got {version}")
        token_len = first & 0x0F
        if token_len > MAX_TOKEN_LEN:
            raise DecodeError(f"invalid token length {token_len}")

        pos = _HEADER.size
        if pos + token_len > len(raw):
            raise DecodeError("token extends past end of datagram")
        token = bytes(raw[pos : pos + token_len])
        pos += token_len

        options = OptionBucket()
        number = 0
        payload = b""
        while pos < len(raw):
            head = raw[pos]
            pos += 1
            if head == PAYLOAD_MARKER:
                if pos == len(raw):
                    raise DecodeError("payload marker without payload")
                payload = bytes(raw[pos:])
                break

            delta, pos = decode_extended(head >> 4, raw, pos)
            length, pos = decode_extended(head & 0x0F, raw, pos)
            number += delta
            if number > MAX_OPTION_NUMBER:
                raise DecodeError(f"option number overflow: {number}")
            if pos + length > len(raw):
                raise DecodeError(f"truncated value for option {number}")
            options.push(Option(number, bytes(raw[pos : pos + length])))
            pos += length

        return Message(
            message_type=MessageType((first >> 4) & 0x03),
            code=code,
            message_id=message_id,
            token=token,
            options=options,
            payload=payload,
        )

    @property
    def is_confirmable(self) -> bool:
        return self.message_type == MessageType.CONFIRMABLE

    @staticmethod
    def request(method: int, *, confirmable: bool = True, token: bytes = b"") -> "Message":
        mtype = MessageType.CONFIRMABLE if confirmable else MessageType.NON_CONFIRMABLE
        return Message(message_type=mtype, code=method, token=token)

    @staticmethod
    def empty_ack(message_id: int) -> "Message":
        return Message(message_type=MessageType.ACKNOWLEDGEMENT, code=EMPTY, message_id=message_id)

    @staticmethod
    def reset(message_id: int) -> "Message":
        return Message(message_type=MessageType.RESET, code=EMPTY, message_id=message_id)
