"""Threaded TCP server for the directory command protocol."""

from __future__ import annotations

import os
import re
import signal
import socket
import sys
import threading

from dirserve.handler import ClientRegistry, handle_client
from dirserve.utils import print_server_ip

_BACKLOG = 10
_ACCEPT_TIMEOUT = 0.5


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


class FileServer:
    """Accepts clients and serves each one on its own thread."""

    def __init__(self, root_dir: str, port: int, host: str = "0.0.0.0") -> None:
        self.root_dir = root_dir
        self.port = port
        self.host = host
        self.registry = ClientRegistry()
        self.wait_interval = 1.0
        self._sock: socket.socket | None = None
        self._stopping = threading.Event()

    def start(self) -> None:
        """Bind and listen; raises ``OSError`` on failure."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
            sock.listen(_BACKLOG)
        except OSError:
            sock.close()
            raise
        sock.settimeout(_ACCEPT_TIMEOUT)
        self._sock = sock

    def address(self) -> tuple[str, int]:
        if self._sock is None:
            raise RuntimeError("server is not started")
        return self._sock.getsockname()

    def serve_forever(self) -> None:
        """Accept clients until :meth:`shutdown` is called."""
        if self._sock is None:
            self.start()
        listener = self._sock
        while not self._stopping.is_set():
            try:
                client, _ = listener.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if self._stopping.is_set():
                    break
                print(f"accept: {exc}", file=sys.stderr)
                continue
            client.settimeout(None)
            threading.Thread(target=self._serve_client, args=(client,), daemon=True).start()

    def _serve_client(self, client: socket.socket) -> None:
        try:
            handle_client(client, self.root_dir, self.registry)
        except OSError as exc:
            print(f"chdir: {exc}", file=sys.stderr)

    def shutdown(self) -> None:
        """Stop accepting, wait for clients to leave, close the socket."""
        self._stopping.set()
        self.registry.wait_until_empty(self.wait_interval)
        if self._sock is not None:
            self._sock.close()
            self._sock = None


def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 2:
        prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "server"
        print(f"Usage: {prog} <root_dir> <port>", file=sys.stderr)
        return 1

    root_dir, port = args[0], _atoi(args[1])

    try:
        print_server_ip()
    except OSError as exc:
        print(f"gethostbyname: {exc}", file=sys.stderr)
        return 1
    print(f"Server root directory: {root_dir}")
    print(f"Listening on port {port}...", flush=True)

    server = FileServer(root_dir, port)
    try:
        server.start()
    except OSError as exc:
        print(f"bind: {exc}", file=sys.stderr)
        return 1

    in_main_thread = threading.current_thread() is threading.main_thread()
    previous = signal.signal(signal.SIGTERM, _raise_interrupt) if in_main_thread else None
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down server...", flush=True)
        server.shutdown()
    finally:
        if in_main_thread:
            signal.signal(signal.SIGTERM, previous)
    return 0