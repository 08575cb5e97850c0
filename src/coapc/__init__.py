"""coapc: a small CoAP client engine over UDP

- bit-exact message framing, including extended option delta/length encoding
- options kept ordered by number, stable for repeated options
- one client per peer: message ids, response correlation, and replay of
  cached responses to retransmitted confirmable messages
"""

from .cache import ResponseCache
from .client import Client
from .errors import CoapError, DecodeError, EncodeError, InvalidMessageTypeError
from .message import Message, MessageType
from .options import Option, OptionBucket

__all__ = [
    "Client",
    "CoapError",
    "DecodeError",
    "EncodeError",
    "InvalidMessageTypeError",
    "Message",
    "MessageType",
    "Option",
    "OptionBucket",
    "ResponseCache",
]
