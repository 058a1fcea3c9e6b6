import socket

import pytest

from relaychat.server import SERVER_FULL_MESSAGE, ChatServer, save_message


@pytest.fixture
def server(tmp_path):
    srv = ChatServer("127.0.0.1", 0, tmp_path / "history.txt", 10)
    srv.start()
    yield srv
    srv.close()


def _connect(srv):
    sock = socket.create_connection(srv.address, timeout=2)
    srv.poll(1.0)
    return sock


def test_save_message_appends_lines(tmp_path):
    path = tmp_path / "h.txt"
    save_message(path, "one")
    save_message(path, "two")
    assert path.read_text(encoding="utf-8") == "one\ntwo\n"


def test_accepts_clients(server):
    a = _connect(server)
    b = _connect(server)
    try:
        assert server.client_count == 2
    finally:
        a.close()
        b.close()


def test_message_relayed_to_others_not_sender(server):
    a = _connect(server)
    b = _connect(server)
    try:
        a.sendall(b"alice: hello")
        server.poll(1.0)
        assert b.recv(1024) == b"alice: hello"
        a.settimeout(0.2)
        with pytest.raises(TimeoutError):
            a.recv(1024)
    finally:
        a.close()
        b.close()


def test_message_saved_to_history(server):
    a = _connect(server)
    try:
        a.sendall(b"bob: salut")
        server.poll(1.0)
        assert server.history_path.read_text(encoding="utf-8") == "bob: salut\n"
    finally:
        a.close()


def test_disconnect_frees_slot(server):
    a = _connect(server)
    assert server.client_count == 1
    a.close()
    server.poll(1.0)
    assert server.client_count == 0


def test_full_server_refuses(tmp_path):
    with ChatServer("127.0.0.1", 0, tmp_path / "h.txt", 1) as srv:
        first = _connect(srv)
        second = _connect(srv)
        try:
            assert second.recv(1024) == SERVER_FULL_MESSAGE.encode("utf-8")
            assert second.recv(1024) == b""
            assert srv.client_count == 1
        finally:
            first.close()
            second.close()


def test_broadcast_skips_sender(server):
    a = _connect(server)
    b = _connect(server)
    try:
        server.broadcast_message("ping", None)
        assert a.recv(1024) == b"ping"
        assert b.recv(1024) == b"ping"
    finally:
        a.close()
        b.close()


def test_poll_requires_start(tmp_path):
    srv = ChatServer("127.0.0.1", 0, tmp_path / "h.txt", 2)
    with pytest.raises(RuntimeError):
        srv.poll(0)


def test_close_disconnects_clients(server):
    a = _connect(server)
    try:
        server.close()
        assert a.recv(1024) == b""
        assert server.client_count == 0
    finally:
        a.close()