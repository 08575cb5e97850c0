from __future__ import annotations

import enum


def make_code(cls: int, detail: int) -> int:
    if not 0 <= cls <= 7 or not 0 <= detail <= 31:
        raise ValueError(f"invalid code {cls}.{detail:02d}")
    return (cls << 5) | detail


def code_string(code: int) -> str:
    return f"{code >> 5}.{code & 0x1F:02d}"


EMPTY = 0


class Method(enum.IntEnum):
    GET = make_code(0, 1)
    POST = make_code(0, 2)
    PUT = make_code(0, 3)
    DELETE = make_code(0, 4)


class ResponseCode(enum.IntEnum):
    CREATED = make_code(2, 1)
    DELETED = make_code(2, 2)
    VALID = make_code(2, 3)
    CHANGED = make_code(2, 4)
    CONTENT = make_code(2, 5)
    BAD_REQUEST = make_code(4, 0)
    UNAUTHORIZED = make_code(4, 1)
    BAD_OPTION = make_code(4, 2)
    FORBIDDEN = make_code(4, 3)
    NOT_FOUND = make_code(4, 4)
    METHOD_NOT_ALLOWED = make_code(4, 5)
    INTERNAL_SERVER_ERROR = make_code(5, 0)
    NOT_IMPLEMENTED = make_code(5, 1)
    SERVICE_UNAVAILABLE = make_code(5, 3)


class OptionNumber(enum.IntEnum):
    IF_MATCH = 1
    URI_HOST = 3
    ETAG = 4
    IF_NONE_MATCH = 5
    OBSERVE = 6
    URI_PORT = 7
    LOCATION_PATH = 8
    URI_PATH = 11
    CONTENT_FORMAT = 12
    MAX_AGE = 14
    URI_QUERY = 15
    ACCEPT = 17
    LOCATION_QUERY = 20
    PROXY_URI = 35
    PROXY_SCHEME = 39
    SIZE1 = 60


LINK_FORMAT = 40
