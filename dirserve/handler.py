"""Per-client command session and connection handling."""

from __future__ import annotations

import os
import platform
import sys
import threading
import time
from typing import TextIO

from dirserve.utils import is_inside_root, log_event

_BUFFER_SIZE = 4096
_PATH_MAX = 4096
_INFO_LIMIT = 511

_HELP = (
    "Available commands:\n"
    "ECHO <message> - Echo back the message\n"
    "QUIT - Disconnect from server\n"
    "INFO - Show server information\n"
    "CD <path> - Change directory\n"
    "LIST - List directory contents\n"
    "HELP - Show this help message\n"
)


def _byte_length(text: str) -> int:
    return len(os.fsencode(text))


def _first_line(text: str) -> str:
    for index, char in enumerate(text):
        if char in "\r\n":
            return text[:index]
    return text


class ClientRegistry:
    """Thread-safe count of connected clients."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active = 0

    def add(self) -> None:
        with self._lock:
            self._active += 1

    def remove(self) -> None:
        with self._lock:
            self._active -= 1

    def count(self) -> int:
        with self._lock:
            return self._active

    def wait_until_empty(self, interval: float = 1.0, stream: TextIO | None = None) -> None:
        """Block, reporting once per interval, until no clients remain."""
        while (active := self.count()) > 0:
            out = sys.stdout if stream is None else stream
            out.write(f"Waiting for {active} clients to disconnect...\n")
            out.flush()
            time.sleep(interval)


_DEFAULT_REGISTRY = ClientRegistry()


class Session:
    """Command state for one client, confined to a root directory."""

    def __init__(self, root_dir: str) -> None:
        root = os.path.realpath(root_dir, strict=True)
        if not os.path.isdir(root):
            raise NotADirectoryError(f"not a directory: {root_dir}")
        self.root = root
        self.cwd = root

    def respond(self, line: str) -> str | None:
        """Return the reply to one command line, or ``None`` on QUIT."""
        command = _first_line(line)
        if not command:
            return "EMPTY COMMAND\n"
        if command == "HELP":
            return _HELP
        if command.startswith("ECHO "):
            return command[5:] + "\n"
        if command == "QUIT":
            return None
        if command == "INFO":
            return self._info()
        if command.startswith("CD "):
            return self._change_dir(command[3:])
        if command == "LIST":
            return self._list()
        return "UNKNOWN COMMAND\n"

    def _info(self) -> str:
        uts = platform.uname()
        text = (
            "Welcome to the File Server!\n"
            f"PID: {os.getpid()}\nHost: {uts.node[:64]}\nOS: {uts.system[:64]}\n"
            f"Current Dir: {self.cwd[:256]}\n"
        )
        return text[:_INFO_LIMIT]

    def _change_dir(self, path: str) -> str:
        if not path:
            return "INVALID PATH\n"
        if _byte_length(self.cwd) + 1 + _byte_length(path) >= _PATH_MAX:
            return "PATH TOO LONG\n"
        try:
            target = os.path.realpath(self.cwd + "/" + path, strict=True)
        except OSError:
            return "ACCESS DENIED\n"
        if not is_inside_root(self.root, target):
            return "ACCESS DENIED\n"
        if os.path.isdir(target) and os.access(target, os.X_OK):
            self.cwd = target
            return "OK\n"
        return "FAIL\n"

    def _list(self) -> str:
        try:
            names = os.listdir(self.cwd)
        except OSError:
            return "FAIL\n"
        kept: list[str] = []
        used = 0
        for name in names:
            size = _byte_length(name)
            if used + size + 1 < _BUFFER_SIZE:
                kept.append(name + "\n")
                used += size + 1
        return "".join(kept) if kept else "EMPTY\n"


def handle_client(client_sock, root_dir: str, registry: ClientRegistry | None = None) -> None:
    """Serve commands on a connected socket until QUIT or disconnect.

    Each received chunk is taken as one command. The socket is closed on
    return; an unusable root directory raises ``OSError``.
    """
    clients = _DEFAULT_REGISTRY if registry is None else registry
    try:
        session = Session(root_dir)
    except OSError:
        client_sock.close()
        raise

    clients.add()
    try:
        with client_sock:
            while True:
                try:
                    data = client_sock.recv(_BUFFER_SIZE - 1)
                except OSError:
                    break
                if not data:
                    break
                command = _first_line(data.decode("utf-8", "surrogateescape"))
                log_event(command if command else "Received empty command")
                reply = session.respond(command)
                if reply is None:
                    break
                try:
                    client_sock.sendall(reply.encode("utf-8", "surrogateescape"))
                except OSError:
                    break
        log_event("Client disconnected")
    finally:
        clients.remove()


def cleanup_clients(
    registry: ClientRegistry | None = None,
    interval: float = 1.0,
    stream: TextIO | None = None,
) -> None:
    """Wait until every client of ``registry`` has disconnected."""
    (_DEFAULT_REGISTRY if registry is None else registry).wait_until_empty(interval, stream)