"""Chat client: a socket connection and a small Tk window around it."""

from __future__ import annotations

import argparse
import ipaddress
import queue
import socket
import sys
import threading

SERVER_IP = "172.16.80.70"
PORT = 8082
BUFFER_SIZE = 1024
USERNAME_MAX = 49
MESSAGE_MAX = BUFFER_SIZE + 49


def format_message(username, text):
    """Return the wire form of a chat line."""
    return f"{username}: {text}"


class ChatClient:
    """A connection to the chat server under one user name."""

    def __init__(self, username, host=SERVER_IP, port=PORT):
        self.username = username
        self.host = host
        self.port = port
        self._sock: socket.socket | None = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, *exc_info):
        self.close()

    def connect(self):
        """Open the connection; raises ValueError for a malformed address."""
        try:
            ipaddress.IPv4Address(self.host)
        except ValueError:
            raise ValueError(f"Adresse invalide: {self.host!r}") from None
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.connect((self.host, self.port))
        except OSError:
            sock.close()
            raise
        self._sock = sock

    def send(self, text):
        """Send ``text`` prefixed with the user name; empty text is ignored."""
        if not text:
            return
        if self._sock is None:
            raise RuntimeError("client is not connected")
        data = format_message(self.username, text).encode("utf-8")[:MESSAGE_MAX]
        self._sock.sendall(data)

    def messages(self):
        """Yield incoming messages until the server closes the connection."""
        if self._sock is None:
            raise RuntimeError("client is not connected")
        while True:
            try:
                data = self._sock.recv(BUFFER_SIZE - 1)
            except OSError:
                return
            if not data:
                return
            yield data.decode("utf-8", errors="replace")

    def close(self):
        """Close the connection."""
        if self._sock is not None:
            try:
                self._sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            self._sock.close()
            self._sock = None


class ChatWindow:
    """Tk window showing incoming messages with an entry to send new ones."""

    _POLL_MS = 100

    def __init__(self, client):
        import tkinter as tk

        self.client = client
        self._incoming: queue.Queue[str | None] = queue.Queue()
        self._closed = False

        self.root = tk.Tk()
        self.root.title("Chat Client")
        self.root.minsize(400, 300)
        self.root.protocol("WM_DELETE_WINDOW", self._on_destroy)

        frame = tk.Frame(self.root, padx=10, pady=10)
        frame.pack(fill=tk.BOTH, expand=True)

        display_frame = tk.Frame(frame)
        display_frame.pack(fill=tk.BOTH, expand=True, pady=(0, 5))
        scrollbar = tk.Scrollbar(display_frame)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)
        self.display = tk.Text(display_frame, state=tk.DISABLED, yscrollcommand=scrollbar.set)
        self.display.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scrollbar.config(command=self.display.yview)

        self.entry = tk.Entry(frame)
        self.entry.pack(fill=tk.X, pady=(0, 5))

        buttons = tk.Frame(frame)
        buttons.pack(fill=tk.X)
        tk.Button(buttons, text="Envoyer", command=self._on_send).pack(
            side=tk.LEFT, fill=tk.X, expand=True, padx=(0, 5)
        )
        tk.Button(buttons, text="Quitter", command=self._on_quit).pack(
            side=tk.LEFT, fill=tk.X, expand=True
        )

    def run(self):
        """Start receiving in the background and run the window until closed."""
        threading.Thread(target=self._receive, daemon=True).start()
        self.root.after(self._POLL_MS, self._drain)
        self.root.mainloop()

    def _receive(self):
        for message in self.client.messages():
            self._incoming.put(message)
        self._incoming.put(None)

    def _drain(self):
        import tkinter as tk

        while True:
            try:
                message = self._incoming.get_nowait()
            except queue.Empty:
                break
            if message is None:
                if not self._closed:
                    print("Le serveur a fermé la connexion.")
                    self._shutdown()
                return
            self.display.config(state=tk.NORMAL)
            self.display.insert(tk.END, message + "\n")
            self.display.config(state=tk.DISABLED)
            self.display.see(tk.END)
        if not self._closed:
            self.root.after(self._POLL_MS, self._drain)

    def _on_send(self):
        text = self.entry.get()
        if not text:
            return
        if text == "exit":
            self._on_quit()
            return
        try:
            self.client.send(text)
        except OSError as exc:
            print(f"Erreur d'envoi: {exc}", file=sys.stderr)
            return
        self.entry.delete(0, "end")

    def _on_quit(self):
        self._closed = True
        self.client.close()
        print("Déconnexion en cours...")
        self.root.destroy()

    def _on_destroy(self):
        print("\nDéconnexion en cours...")
        self._shutdown()

    def _shutdown(self):
        self._closed = True
        self.client.close()
        self.root.destroy()


def main(argv=None):
    """Ask for a user name, connect and open the chat window."""
    parser = argparse.ArgumentParser(description="Relay chat client.")
    parser.add_argument("--host", default=SERVER_IP)
    parser.add_argument("--port", type=int, default=PORT)
    args = parser.parse_args(argv)

    try:
        username = input("Entrez votre nom: ")[:USERNAME_MAX]
    except (EOFError, KeyboardInterrupt):
        return 1

    client = ChatClient(username, args.host, args.port)
    try:
        client.connect()
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Connexion échouée: {exc}", file=sys.stderr)
        return 1
    print("Connecté au serveur. Vous pouvez commencer à chatter !")

    try:
        ChatWindow(client).run()
    except KeyboardInterrupt:
        print("\nDéconnexion en cours...")
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())