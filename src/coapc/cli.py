from __future__ import annotations

import argparse
import json
import logging
import os

from .client import Client
from .codes import Method, OptionNumber, code_string
from .constants import DEFAULT_PORT
from .message import Message, MessageType
from .options import decode_uint
from .register import LWM2M_VERSION, Register


def exchange(client: Client, request: Message) -> Message:
    """Send ``request`` and wait for its response.

    A piggybacked response arrives in the ACK; an empty ACK means the
    response follows separately, matched by token and acknowledged if it is
    confirmable.
    """
    mid = client.send(request)
    while True:
        reply = client.receive()
        if reply.message_type == MessageType.ACKNOWLEDGEMENT and reply.message_id == mid:
            if reply.code != 0:
                return reply
            logging.info("empty ACK for id=%d; waiting for separate response", mid)
            continue
        if reply.message_type == MessageType.RESET and reply.message_id == mid:
            return reply
        if reply.token == request.token and reply.code != 0:
            if reply.is_confirmable:
                client.send_response(Message.empty_ack(reply.message_id))
            return reply
        logging.debug("ignoring unrelated message id=%d", reply.message_id)


def summarize(reply: Message) -> dict:
    content_format = reply.options.get_all(OptionNumber.CONTENT_FORMAT)
    return {
        "type": MessageType(reply.message_type).name,
        "code": code_string(reply.code),
        "message_id": reply.message_id,
        "token": reply.token.hex(),
        "location": "/".join(v.decode("utf-8", "replace") for v in reply.options.get_all(OptionNumber.LOCATION_PATH)),
        "content_format": decode_uint(content_format[0]) if content_format else None,
        "payload": reply.payload.decode("utf-8", "replace"),
    }


def _connect(args: argparse.Namespace) -> Client:
    return Client.connect(args.host, args.port, timeout_ms=args.timeout_ms)


def cmd_register(args: argparse.Namespace) -> int:
    request = Register(args.endpoint, args.lifetime, version=args.lwm2m).to_message()
    request.token = os.urandom(4)
    with _connect(args) as client:
        reply = exchange(client, request)

    payload = {"role": "register", **summarize(reply)}
    print(json.dumps(payload, indent=2) if args.json else payload)
    return 0 if reply.code >> 5 == 2 else 1


def cmd_get(args: argparse.Namespace) -> int:
    request = Message.request(Method.GET, confirmable=not args.non, token=os.urandom(4))
    for segment in args.path.strip("/").split("/"):
        if segment:
            request.add_option(OptionNumber.URI_PATH, segment)
    with _connect(args) as client:
        reply = exchange(client, request)

    payload = {"role": "get", **summarize(reply)}
    print(json.dumps(payload, indent=2) if args.json else payload)
    return 0 if reply.code >> 5 == 2 else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="coapc", description="Minimal CoAP client over UDP.")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(x: argparse.ArgumentParser) -> None:
        x.add_argument("--host", required=True)
        x.add_argument("--port", type=int, default=DEFAULT_PORT)
        x.add_argument("--timeout-ms", type=int, default=5000)
        x.add_argument("--json", action="store_true")

    register = sub.add_parser("register", help="register an endpoint with a resource directory")
    add_common(register)
    register.add_argument("--endpoint", required=True)
    register.add_argument("--lifetime", type=int, default=86400)
    register.add_argument("--lwm2m", default=LWM2M_VERSION)
    register.set_defaults(func=cmd_register)

    get = sub.add_parser("get", help="fetch a resource")
    add_common(get)
    get.add_argument("--path", default="/")
    get.add_argument("--non", action="store_true", help="send as non-confirmable")
    get.set_defaults(func=cmd_get)

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
