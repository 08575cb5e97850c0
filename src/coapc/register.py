from __future__ import annotations

from dataclasses import dataclass

from .codes import LINK_FORMAT, Method, OptionNumber
from .message import Message
from .options import encode_uint

LWM2M_VERSION = "1.2"
DEFAULT_OBJECT_LINKS = "</>;ct=110,</1/0>"


@dataclass(frozen=True, slots=True)
class Register:
    """LwM2M registration request sent to a resource directory at ``/rd``."""

    endpoint: str
    lifetime: int
    version: str = LWM2M_VERSION
    links: str = DEFAULT_OBJECT_LINKS

    def to_message(self) -> Message:
        msg = Message.request(Method.POST, confirmable=True)
        msg.add_option(OptionNumber.URI_PATH, "rd")
        msg.add_option(OptionNumber.URI_QUERY, f"ep={self.endpoint}")
        msg.add_option(OptionNumber.URI_QUERY, f"lt={self.lifetime}")
        msg.add_option(OptionNumber.URI_QUERY, f"lwm2m={self.version}")
        msg.add_option(OptionNumber.CONTENT_FORMAT, encode_uint(LINK_FORMAT))
        msg.payload = self.links.encode("utf-8")
        return msg
