import socket

import pytest

from relaychat.client import MESSAGE_MAX, ChatClient, format_message


@pytest.fixture
def listener():
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(1)
    srv.settimeout(2)
    yield srv
    srv.close()


def _pair(listener, username="alice"):
    client = ChatClient(username, "127.0.0.1", listener.getsockname()[1])
    client.connect()
    peer, _ = listener.accept()
    peer.settimeout(2)
    return client, peer


def test_format_message():
    assert format_message("alice", "hi") == "alice: hi"


def test_send_prefixes_username(listener):
    client, peer = _pair(listener)
    try:
        client.send("hello")
        assert peer.recv(2048) == b"alice: hello"
    finally:
        client.close()
        peer.close()


def test_send_empty_sends_nothing(listener):
    client, peer = _pair(listener)
    try:
        client.send("")
        client.close()
        assert peer.recv(2048) == b""
    finally:
        peer.close()


def test_send_truncates_long_message(listener):
    client, peer = _pair(listener, "bob")
    try:
        client.send("x" * 5000)
        client.close()
        received = b""
        while chunk := peer.recv(4096):
            received += chunk
        assert len(received) == MESSAGE_MAX
        assert received.startswith(b"bob: xxx")
    finally:
        peer.close()


def test_messages_until_server_closes(listener):
    client, peer = _pair(listener)
    try:
        peer.sendall(b"bonjour")
        peer.close()
        assert "".join(client.messages()) == "bonjour"
    finally:
        client.close()


def test_invalid_address():
    client = ChatClient("alice", "not-an-address", 8082)
    with pytest.raises(ValueError):
        client.connect()


def test_send_before_connect():
    client = ChatClient("alice", "127.0.0.1", 8082)
    with pytest.raises(RuntimeError):
        client.send("hello")


def test_connect_refused(listener):
    port = listener.getsockname()[1]
    listener.close()
    client = ChatClient("alice", "127.0.0.1", port)
    with pytest.raises(OSError):
        client.connect()