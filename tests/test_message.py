from __future__ import annotations

import pytest

from coapc.codes import Method, OptionNumber, ResponseCode
from coapc.errors import DecodeError, EncodeError
from coapc.message import Message, MessageType
from coapc.options import Option, OptionBucket


def test_header_layout():
    msg = Message(MessageType.NON_CONFIRMABLE, Method.GET, message_id=0x1234, token=b"\xaa\xbb")
    assert msg.to_bytes() == b"\x52\x01\x12\x34\xaa\xbb"


@pytest.mark.parametrize(
    "mtype, first",
    [
        (MessageType.CONFIRMABLE, 0x40),
        (MessageType.NON_CONFIRMABLE, 0x50),
        (MessageType.ACKNOWLEDGEMENT, 0x60),
        (MessageType.RESET, 0x70),
    ],
)
def test_type_bits(mtype, first):
    raw = Message(mtype, 0, message_id=1).to_bytes()
    assert raw[0] == first
    assert Message.from_bytes(raw).message_type is mtype


def test_full_encoding():
    msg = Message(MessageType.CONFIRMABLE, Method.POST, message_id=7, token=b"\x01")
    msg.add_option(OptionNumber.URI_QUERY, "lt=5")
    msg.add_option(OptionNumber.URI_PATH, "rd")
    msg.payload = b"hi"
    assert msg.to_bytes() == (
        b"\x41\x02\x00\x07\x01"
        + b"\xb2rd"
        + b"\x44lt=5"
        + b"\xffhi"
    )


def boundary_options() -> OptionBucket:
    options = OptionBucket()
    options.add(1, b"")
    options.add(11, "a" * 12)
    options.add(11, "b" * 13)
    options.add(300, b"\x00" * 300)
    options.add(65535, b"\xff")
    return options


@pytest.mark.parametrize("token_len", range(9))
@pytest.mark.parametrize("payload", [b"", b"\xff", b"\xff\x00payload"])
@pytest.mark.parametrize("with_options", [False, True])
def test_roundtrip(token_len, payload, with_options):
    msg = Message(
        MessageType(token_len % 4),
        ResponseCode.CONTENT,
        message_id=0xFFFF - token_len,
        token=bytes(range(0xF0, 0xF0 + token_len)),
        options=boundary_options() if with_options else OptionBucket(),
        payload=payload,
    )
    assert Message.from_bytes(msg.to_bytes()) == msg


def test_roundtrip_empty_message():
    msg = Message.empty_ack(42)
    raw = msg.to_bytes()
    assert raw == b"\x60\x00\x00\x2a"
    assert Message.from_bytes(raw) == msg


def test_no_marker_without_payload():
    msg = Message(MessageType.CONFIRMABLE, Method.GET, message_id=1)
    msg.add_option(OptionNumber.URI_PATH, "x")
    assert not msg.to_bytes().endswith(b"\xff")
    assert Message.from_bytes(msg.to_bytes()).payload == b""


def test_token_too_long():
    msg = Message(MessageType.CONFIRMABLE, Method.GET, token=b"123456789")
    with pytest.raises(EncodeError):
        msg.to_bytes()


@pytest.mark.parametrize("mtype", [4, 7, -1, "CON"])
def test_invalid_message_type(mtype):
    msg = Message(mtype, Method.GET, message_id=1)
    with pytest.raises(EncodeError):
        msg.to_bytes()


def test_message_id_out_of_range():
    with pytest.raises(EncodeError):
        Message(MessageType.CONFIRMABLE, Method.GET, message_id=0x10000).to_bytes()


def test_options_out_of_order_rejected():
    bucket = OptionBucket([Option(11), Option(3)])
    with pytest.raises(EncodeError):
        Message(MessageType.CONFIRMABLE, Method.GET, options=bucket).to_bytes()


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"\x40\x01\x00",  # short header
        b"\x00\x01\x00\x01",  # version 0
        b"\x49\x01\x00\x01" + b"\x00" * 9,  # token length 9
        b"\x44\x01\x00\x01\xaa",  # token past the end
        b"\x40\x01\x00\x01\xf0",  # delta nibble 15
        b"\x40\x01\x00\x01\x0f",  # length nibble 15
        b"\x40\x01\x00\x01\xd0",  # missing delta extension
        b"\x40\x01\x00\x01\x0e\x00",  # short length extension
        b"\x40\x01\x00\x01\xb3rd",  # value shorter than declared
        b"\x40\x01\x00\x01\xff",  # marker without payload
        b"\x40\x01\x00\x01\xe0\xfe\xf2\xe0\x00\x00",  # number past 0xffff
    ],
)
def test_malformed(raw):
    with pytest.raises(DecodeError):
        Message.from_bytes(raw)


def test_decode_error_is_value_error():
    with pytest.raises(ValueError):
        Message.from_bytes(b"\x40")


def test_decode_reads_only_given_bytes():
    msg = Message(MessageType.CONFIRMABLE, Method.GET, message_id=9, payload=b"abc")
    raw = msg.to_bytes()
    view = memoryview(raw + b"junk")[: len(raw)]
    assert Message.from_bytes(view).payload == b"abc"


def test_repeated_options_keep_order():
    raw = b"\x40\x02\x00\x01" + b"\xb2rd" + b"\x44ep=a" + b"\x04lt=5"
    msg = Message.from_bytes(raw)
    assert [(o.number, o.value) for o in msg.options] == [
        (11, b"rd"),
        (15, b"ep=a"),
        (15, b"lt=5"),
    ]
