"""Logging, path containment and host address helpers."""

from __future__ import annotations

import os
import socket
import sys
from datetime import datetime
from typing import TextIO


def format_timestamp(moment: datetime) -> str:
    """Render a moment as ``YYYY.MM.DD-HH:MM:SS.mmm``."""
    return (
        f"{moment.year:04d}.{moment.month:02d}.{moment.day:02d}-"
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}."
        f"{moment.microsecond // 1000:03d}"
    )


def log_event(event: str, stream: TextIO | None = None) -> None:
    """Write a timestamped event line and flush it."""
    out = sys.stdout if stream is None else stream
    out.write(f"{format_timestamp(datetime.now())} {event}\n")
    out.flush()


def is_inside_root(root: str, path: str) -> bool:
    """Tell whether ``path`` resolves to ``root`` or somewhere below it.

    The root must exist. The path must contain a slash; if it does not exist
    itself, its parent directory must, and the last component is appended
    to the resolved parent.
    """
    try:
        abs_root = os.path.realpath(root, strict=True)
    except OSError as exc:
        print(f"realpath root: {exc}", file=sys.stderr)
        return False

    head, sep, tail = path.rpartition("/")
    if not sep:
        return False
    try:
        abs_path = os.path.realpath(path, strict=True)
    except OSError:
        if not head:
            return False
        try:
            abs_path = os.path.realpath(head, strict=True) + "/" + tail
        except OSError:
            return False

    return abs_path == abs_root or abs_path.startswith(abs_root.rstrip("/") + "/")


def server_ip() -> str:
    """Return the first IPv4 address the local host name resolves to."""
    return socket.gethostbyname(socket.gethostname())


def print_server_ip() -> None:
    """Print the local host's address; lookup failures raise ``OSError``."""
    print(f"Server IP address: {server_ip()}")