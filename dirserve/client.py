"""Interactive line client for the directory command server."""

from __future__ import annotations

import os
import re
import socket
import sys
from typing import TextIO

_BUFFER_SIZE = 4096


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def connect_to_server(ip: str, port: int) -> socket.socket:
    """Open a TCP connection to an IPv4 address; raises ``OSError``."""
    socket.inet_pton(socket.AF_INET, ip)
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.connect((ip, port))
    except OSError:
        sock.close()
        raise
    print(f"Connected to server at {ip}:{port}")
    return sock


def _receive_response(sock: socket.socket) -> bytes | None:
    response = bytearray()
    while True:
        chunk = sock.recv(_BUFFER_SIZE - 1 - len(response))
        if not chunk:
            return None
        response += chunk
        if response.endswith(b"\n") or len(response) >= _BUFFER_SIZE - 1:
            return bytes(response)


def run_client_loop(
    sock: socket.socket,
    input_stream: TextIO | None = None,
    output_stream: TextIO | None = None,
) -> None:
    """Read commands, send them and print replies until quit or EOF."""
    source = sys.stdin if input_stream is None else input_stream
    out = sys.stdout if output_stream is None else output_stream

    while True:
        out.write("> ")
        out.flush()

        raw = source.readline()
        if not raw:
            break
        line = raw.split("\n", 1)[0]
        if not line:
            continue
        if line == "quit":
            break
        payload = line.encode("utf-8")
        if len(payload) >= _BUFFER_SIZE - 1:
            out.write("Command too long\n")
            continue

        try:
            sock.sendall(payload + b"\n")
        except OSError as exc:
            print(f"send: {exc}", file=sys.stderr)
            break

        try:
            response = _receive_response(sock)
        except OSError as exc:
            print(f"recv: {exc}", file=sys.stderr)
            sock.close()
            return
        if response is None:
            out.write("Server closed connection.\n")
            out.flush()
            sock.close()
            return

        out.write(response.decode("utf-8", "replace"))
        out.flush()

    sock.close()
    out.write("Connection closed.\n")
    out.flush()


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 2:
        prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "client"
        print(f"Usage: {prog} <server_ip> <port>", file=sys.stderr)
        return 1

    try:
        sock = connect_to_server(args[0], _atoi(args[1]))
    except OSError as exc:
        print(f"connect: {exc}", file=sys.stderr)
        return 1

    run_client_loop(sock)
    return 0