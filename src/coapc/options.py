from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Iterator

from .constants import (
    EXT_BYTE,
    EXT_BYTE_OFFSET,
    EXT_WORD,
    EXT_WORD_OFFSET,
    MAX_EXTENDED,
    MAX_OPTION_NUMBER,
)
from .errors import DecodeError, EncodeError


def encode_extended(value: int) -> tuple[int, bytes]:
    """Split an option delta or length into its 4-bit nibble and extension bytes."""
    if value < 0:
        raise EncodeError(f"negative option delta/length: {value}")
    if value < EXT_BYTE_OFFSET:
        return value, b""
    if value < EXT_WORD_OFFSET:
        return EXT_BYTE, bytes((value - EXT_BYTE_OFFSET,))
    if value <= MAX_EXTENDED:
        return EXT_WORD, struct.pack("!H", value - EXT_WORD_OFFSET)
    raise EncodeError(f"option delta/length too large: {value}")


def decode_extended(nibble: int, raw: bytes, pos: int) -> tuple[int, int]:
    """Resolve a nibble read at ``raw[pos - 1]``; returns (value, new_pos)."""
    if nibble < EXT_BYTE:
        return nibble, pos
    if nibble == EXT_BYTE:
        if pos + 1 > len(raw):
            raise DecodeError("truncated one-byte option extension")
        return raw[pos] + EXT_BYTE_OFFSET, pos + 1
    if nibble == EXT_WORD:
        if pos + 2 > len(raw):
            raise DecodeError("truncated two-byte option extension")
        (ext,) = struct.unpack_from("!H", raw, pos)
        return ext + EXT_WORD_OFFSET, pos + 2
    raise DecodeError("reserved option nibble 15")


def encode_uint(value: int) -> bytes:
    if value < 0:
        raise ValueError("uint option values cannot be negative")
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def decode_uint(value: bytes) -> int:
    return int.from_bytes(value, "big")


@dataclass(frozen=True, slots=True)
class Option:
    number: int
    value: bytes = b""

    @staticmethod
    def string(number: int, text: str) -> "Option":
        return Option(number, text.encode("utf-8"))

    @staticmethod
    def uint(number: int, value: int) -> "Option":
        return Option(number, encode_uint(value))


@dataclass(slots=True)
class OptionBucket:
    """Options kept ascending by number; repeated numbers keep push order."""

    options: list[Option] = field(default_factory=list)

    def push(self, option: Option) -> None:
        insert_pos = len(self.options)
        for i, existing in enumerate(self.options):
            if existing.number > option.number:
                insert_pos = i
                break
        self.options.insert(insert_pos, option)

    def add(self, number: int, value: bytes | str) -> None:
        if isinstance(value, str):
            value = value.encode("utf-8")
        self.push(Option(int(number), value))

    def get_all(self, number: int) -> list[bytes]:
        return [o.value for o in self.options if o.number == number]

    def encode_to(self, out: bytearray) -> None:
        prev_number = 0
        for option in self.options:
            if not 0 <= option.number <= MAX_OPTION_NUMBER:
                raise EncodeError(f"option number out of range: {option.number}")
            delta_nibble, delta_ext = encode_extended(option.number - prev_number)
            len_nibble, len_ext = encode_extended(len(option.value))
            out.append((delta_nibble << 4) | len_nibble)
            out += delta_ext
            out += len_ext
            out += option.value
            prev_number = option.number

    def __iter__(self) -> Iterator[Option]:
        return iter(self.options)

    def __len__(self) -> int:
        return len(self.options)
