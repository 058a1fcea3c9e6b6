"""Multi-client relay chat server built on a single-threaded select loop."""

from __future__ import annotations

import argparse
import selectors
import socket
import sys
from dataclasses import dataclass
from pathlib import Path

PORT = 8080
BUFFER_SIZE = 1024
MAX_CLIENTS = 10
DEFAULT_CHANNEL = "GENERAL"
HISTORY_FILE = "history.txt"
SERVER_FULL_MESSAGE = "Serveur plein, connexion refusée.\n"


@dataclass
class _Client:
    sock: socket.socket
    username: str = ""


def save_message(path, message):
    """Append one message, followed by a newline, to the history file."""
    try:
        with open(path, "a", encoding="utf-8") as history:
            history.write(f"{message}\n")
    except OSError as exc:
        print(f"Erreur d'ouverture du fichier: {exc}", file=sys.stderr)


class ChatServer:
    """Accepts up to ``max_clients`` connections and relays every message to the others."""

    def __init__(self, host="", port=PORT, history_path=HISTORY_FILE, max_clients=MAX_CLIENTS):
        self.host = host
        self.port = port
        self.history_path = Path(history_path)
        self.max_clients = max_clients
        self.address = None
        self._slots: list[_Client | None] = [None] * max_clients
        self._listener: socket.socket | None = None
        self._selector: selectors.BaseSelector | None = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def client_count(self):
        """Number of connected clients."""
        return sum(slot is not None for slot in self._slots)

    def start(self):
        """Bind, listen and get ready to serve."""
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind((self.host, self.port))
            listener.listen(self.max_clients)
        except OSError:
            listener.close()
            raise
        self._listener = listener
        self.address = listener.getsockname()
        self._selector = selectors.DefaultSelector()
        self._selector.register(listener, selectors.EVENT_READ)
        print(f"Serveur en écoute sur le port {self.address[1]}...")

    def poll(self, timeout=None):
        """Wait for activity once and handle it; return the number of ready sockets."""
        if self._selector is None or self._listener is None:
            raise RuntimeError("server is not started")
        try:
            events = self._selector.select(timeout)
        except InterruptedError:
            return 0
        ready = {key.fileobj for key, _ in events}
        if self._listener in ready:
            self._accept()
        for index, client in enumerate(self._slots):
            if client is not None and client.sock in ready:
                self._handle_client(index)
        return len(ready)

    def serve_forever(self):
        """Serve until interrupted, then close everything."""
        try:
            while True:
                self.poll()
        except KeyboardInterrupt:
            pass
        finally:
            self.close()

    def broadcast_message(self, message, sender=None):
        """Send ``message`` to every connected client except ``sender``."""
        data = message.encode("utf-8") if isinstance(message, str) else bytes(message)
        for client in self._slots:
            if client is None or client.sock is sender:
                continue
            try:
                client.sock.sendall(data)
            except OSError:
                pass

    def close(self):
        """Disconnect every client and stop listening."""
        if self._listener is None:
            return
        print("\nArrêt du serveur...")
        for index, client in enumerate(self._slots):
            if client is not None:
                client.sock.close()
                self._slots[index] = None
        if self._selector is not None:
            self._selector.close()
            self._selector = None
        self._listener.close()
        self._listener = None
        print("Serveur arrêté proprement.")

    def _accept(self):
        try:
            conn, _ = self._listener.accept()
        except OSError as exc:
            print(f"Erreur lors de l'acceptation: {exc}", file=sys.stderr)
            return
        print(f"Nouvelle connexion acceptée, socket: {conn.fileno()}")
        for index, slot in enumerate(self._slots):
            if slot is None:
                self._slots[index] = _Client(conn)
                self._selector.register(conn, selectors.EVENT_READ)
                return
        try:
            conn.sendall(SERVER_FULL_MESSAGE.encode("utf-8"))
        except OSError:
            pass
        conn.close()

    def _handle_client(self, index):
        client = self._slots[index]
        try:
            data = client.sock.recv(BUFFER_SIZE)
        except OSError:
            data = b""
        if not data:
            print(f"Client déconnecté, socket: {client.sock.fileno()}")
            self._selector.unregister(client.sock)
            client.sock.close()
            self._slots[index] = None
            return
        text = data.decode("utf-8", errors="replace")
        print(f"Message reçu de {client.username}: {text}", end="")
        save_message(self.history_path, text)
        self.broadcast_message(data, client.sock)


def main(argv=None):
    """Run the chat server from the command line."""
    parser = argparse.ArgumentParser(description="Relay chat server.")
    parser.add_argument("--host", default="", help="address to bind (default: all)")
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--history", default=HISTORY_FILE, help="message history file")
    parser.add_argument("--max-clients", type=int, default=MAX_CLIENTS)
    args = parser.parse_args(argv)

    server = ChatServer(args.host, args.port, args.history, args.max_clients)
    try:
        server.start()
    except OSError as exc:
        print(f"Echec de la liaison: {exc}", file=sys.stderr)
        return 1
    server.serve_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())