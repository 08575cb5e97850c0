from __future__ import annotations


class CoapError(Exception):
    pass


class DecodeError(CoapError, ValueError):
    """Raised for datagrams that are not a well-formed message."""


class EncodeError(CoapError, ValueError):
    """Raised when a message cannot be put on the wire."""


class InvalidMessageTypeError(CoapError):
    """Only Acknowledgement and Reset messages can be sent as responses."""
