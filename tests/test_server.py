import socket
import threading

import pytest

from dirserve.server import FileServer, main


def _recv_until(sock, suffix):
    data = b""
    while not data.endswith(suffix):
        chunk = sock.recv(4096)
        if not chunk:
            break
        data += chunk
    return data


@pytest.fixture
def served(tmp_path):
    (tmp_path / "hello.txt").write_text("hi")
    server = FileServer(str(tmp_path), 0, "127.0.0.1")
    server.wait_interval = 0.05
    server.start()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server, thread
    server.shutdown()
    thread.join(timeout=5)


def test_address_reports_bound_port(served):
    server, _ = served
    host, port = server.address()
    assert host == "127.0.0.1"
    assert port > 0


def test_address_before_start_raises(tmp_path):
    with pytest.raises(RuntimeError):
        FileServer(str(tmp_path), 0, "127.0.0.1").address()


def test_help_over_network(served):
    server, _ = served
    with socket.create_connection(server.address(), timeout=5) as client:
        client.sendall(b"HELP\n")
        reply = _recv_until(client, b"HELP - Show this help message\n")
    assert reply.startswith(b"Available commands:\n")


def test_list_over_network(served):
    server, _ = served
    with socket.create_connection(server.address(), timeout=5) as client:
        client.sendall(b"LIST\n")
        assert _recv_until(client, b"\n") == b"hello.txt\n"


def test_quit_closes_connection(served):
    server, _ = served
    with socket.create_connection(server.address(), timeout=5) as client:
        client.sendall(b"QUIT\n")
        assert client.recv(4096) == b""


def test_clients_are_independent(served):
    server, _ = served
    with socket.create_connection(server.address(), timeout=5) as first, \
            socket.create_connection(server.address(), timeout=5) as second:
        first.sendall(b"ECHO one\n")
        second.sendall(b"ECHO two\n")
        assert _recv_until(first, b"\n") == b"one\n"
        assert _recv_until(second, b"\n") == b"two\n"


def test_shutdown_stops_serving(tmp_path):
    server = FileServer(str(tmp_path), 0, "127.0.0.1")
    server.wait_interval = 0.05
    server.start()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    with socket.create_connection(server.address(), timeout=5) as client:
        client.sendall(b"ECHO x\n")
        assert _recv_until(client, b"\n") == b"x\n"
    server.shutdown()
    thread.join(timeout=5)
    assert not thread.is_alive()
    assert server.registry.count() == 0


def test_main_usage_error(capsys):
    assert main([]) == 1
    assert "<root_dir> <port>" in capsys.readouterr().err


def test_main_bind_failure(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(socket, "gethostbyname", lambda name: "192.0.2.1")
    with socket.create_server(("0.0.0.0", 0)) as occupied:
        port = occupied.getsockname()[1]
        assert main([str(tmp_path), str(port)]) == 1
    captured = capsys.readouterr()
    assert f"Listening on port {port}...\n" in captured.out
    assert f"Server root directory: {tmp_path}\n" in captured.out