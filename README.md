# relaychat

A small chat system over plain TCP, in two modules:

- `relaychat.server` holds **a server** that accepts a limited number of
  clients, appends every message it receives to a history file, and relays
  each message to every other connected client;
- `relaychat.client` holds **a client** that asks for your name, connects to
  the server and opens a small Tkinter window where you read incoming messages
  and send your own.

Messages travel as plain UTF-8 text in the form `name: text`. The server does
not change them; it only stores and forwards what it reads.

The program's console messages are in French.

## Installation

```
pip install .
```

The client window uses Tkinter from the Python standard library. No other
libraries are needed.

## Running the server

```
relaychat-server [--host HOST] [--port PORT] [--history FILE] [--max-clients N]
```

| option          | default          | meaning                                  |
|-----------------|------------------|------------------------------------------|
| `--host`        | all interfaces   | address to bind                          |
| `--port`        | `8080`           | port to listen on                        |
| `--history`     | `history.txt`    | file every received message is appended to |
| `--max-clients` | `10`             | number of clients served at once         |

The server runs a single-threaded select loop. New connections are taken until
it holds its maximum number of clients; any further client is sent
`Serveur plein, connexion refusée.` and disconnected. Data is read in chunks
of up to 1024 bytes; each chunk is appended as one line to the history file
and sent unchanged to every other client. Press Ctrl+C to stop it: every
client connection and the listening socket are closed. If the port cannot be
bound, the command prints the error and exits with status 1.

## Running the client

```
relaychat-client [--host HOST] [--port PORT]
```

The defaults are host `172.16.80.70` and port `8082`, which differ from the
server's default port, so you will usually pass both, for example
`relaychat-client --host 127.0.0.1 --port 8080`.

You are asked for your name (cut to 49 characters), then the client connects
and opens the chat window. Type a message and press **Envoyer** to send it;
an empty entry sends nothing. Typing `exit`, pressing **Quitter** or closing
the window disconnects and closes it. When the server closes the connection,
the window closes too. A host that is not an IPv4 address, or a failed
connection, ends the command with status 1.

## Using it from Python

```python
from relaychat.server import ChatServer

with ChatServer("127.0.0.1", 9000, "history.txt", 10) as server:
    print(server.address)          # bound (host, port)
    server.poll(timeout=1.0)       # handle one round of activity
    print(server.client_count)
```

`ChatServer.start()` binds and listens, `poll(timeout)` waits once and
returns the number of ready sockets, `serve_forever()` polls until Ctrl+C
and then closes, `broadcast_message(message, sender)` sends text or bytes to
every client except the `sender` socket, and `close()` disconnects everyone.
Using the server as a context manager calls `start()` and `close()`.
Port `0` lets the system choose a free port. `save_message(path, message)`
appends one line to a history file.

```python
from relaychat.client import ChatClient, format_message

with ChatClient("alice", "127.0.0.1", 9000) as client:
    client.send("hello")
    for message in client.messages():
        print(message)
```

`ChatClient.send(text)` sends `format_message(username, text)`, which gives
the text exactly as it goes over the wire: `alice: hello`. Sent data is cut to
1073 bytes. `messages()` yields each chunk received until the server closes
the connection. `ChatWindow(client).run()` opens the chat window for an
already connected client.

## What it does not do

- There are no channels or rooms: every message goes to every other client.
- The server does not learn user names; names appear only because the client
  puts them in front of each message.
- The history file is only written, never sent to clients that join later.
- There is no message framing: a chunk read from a socket is what gets
  relayed, so long or quickly sent messages may be split or joined.
- Connections are neither encrypted nor authenticated.

## Tests

```
pip install .[test]
pytest
```