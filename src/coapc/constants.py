from __future__ import annotations

HEADER_FORMAT = "!BBH"  # ver|type|tkl, code, message_id
VERSION = 1

CONFIRMABLE = 0
NON_CONFIRMABLE = 1
ACKNOWLEDGEMENT = 2
RESET = 3

MAX_TOKEN_LEN = 8
PAYLOAD_MARKER = 0xFF

# option delta/length nibbles
EXT_BYTE = 13
EXT_WORD = 14
EXT_BYTE_OFFSET = 13
EXT_WORD_OFFSET = 269
MAX_EXTENDED = 0xFFFF + EXT_WORD_OFFSET  # 65804

MAX_OPTION_NUMBER = 0xFFFF
MAX_MESSAGE_ID = 0xFFFF

DEFAULT_PORT = 5683
DEFAULT_FIRST_MESSAGE_ID = 1231
DEFAULT_CACHE_MAX_AGE_S = 60.0
DEFAULT_RECV_BUFFER = 65535
DEFAULT_TIMEOUT_MS = 0
