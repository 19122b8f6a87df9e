# dirserve

A small TCP server that lets clients browse a directory tree through a
line-based text protocol. The package also has an interactive client for
talking to the server.

Each connected client is served on its own thread and has its own session.
A session keeps its own current directory, and that directory always stays
inside the server's root directory. Every request and every disconnect is
logged to standard output with a timestamp of the form
`YYYY.MM.DD-HH:MM:SS.mmm`.

## Installation

```
pip install .
```

## Running the server

```
dirserve-server <root_dir> <port>
```

On start-up the server prints its IP address, the root directory and the
port. It then listens on all interfaces (`0.0.0.0`).

To stop it, press Ctrl+C or send SIGTERM. The server stops accepting new
connections. It then reports once a second how many clients are still
connected, and waits until they have all disconnected before it exits.

## Running the client

```
dirserve-client <server_ip> <port>
```

`<server_ip>` must be an IPv4 address.

The client shows a `> ` prompt and sends each line you type to the server,
then prints the server's reply. It handles input this way:

- Empty lines are ignored.
- A line of 4095 bytes or more is refused with `Command too long`.
- Typing `quit`, or ending the input, closes the connection.

## Commands

| Command          | Reply                                                              |
|------------------|--------------------------------------------------------------------|
| `HELP`           | List of available commands                                         |
| `ECHO <message>` | The message, echoed back                                           |
| `INFO`           | Server PID, host name, OS name and the session's current directory |
| `CD <path>`      | `OK`, `ACCESS DENIED`, `INVALID PATH`, `PATH TOO LONG` or `FAIL`   |
| `LIST`           | Entries of the current directory, one per line, or `EMPTY`         |
| `QUIT`           | Ends the session                                                   |

Any other input gets the reply `UNKNOWN COMMAND`. An empty line gets the
reply `EMPTY COMMAND`.

The `CD` replies mean the following:

- `ACCESS DENIED`: the target does not exist, or it resolves outside the root.
- `FAIL`: the target is not an enterable directory.

A `LIST` reply is kept under 4096 bytes.

The server reads each chunk it receives as one command, and only the first
line of that chunk counts.

## Library use

The protocol logic does not depend on sockets:

```python
from dirserve.handler import Session

session = Session("/srv/files")
print(session.respond("LIST"))
print(session.respond("CD subdir"))
```

`Session.respond` returns the reply text, or `None` for `QUIT`. A `Session`
raises `OSError` if the root does not exist or is not a directory.

Other building blocks:

- `dirserve.handler.handle_client(sock, root_dir, registry)` serves one
  connected socket until the client quits or disconnects.
- `dirserve.handler.ClientRegistry` counts connected clients.
  `dirserve.handler.cleanup_clients` waits until a registry is empty.
- `dirserve.server.FileServer(root_dir, port, host)` has `start`,
  `serve_forever`, `shutdown` and `address` methods.
- `dirserve.client.connect_to_server(ip, port)` opens the connection.
  `dirserve.client.run_client_loop(sock, input_stream, output_stream)` runs
  the prompt loop over any text streams.
- `dirserve.utils.is_inside_root(root, path)` checks whether a path stays
  under a given root.
- `dirserve.utils.log_event` and `dirserve.utils.format_timestamp` produce
  the log lines.

## What it does not do

The server only lets clients move around and list directories. It cannot:

- download or upload file contents;
- authenticate clients;
- encrypt the connection.

## Tests

```
pip install .[test]
pytest
```