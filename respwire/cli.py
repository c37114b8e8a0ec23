#!/usr/bin/env python3
"""
respwire Command-Line Client

Interactive client for talking to any RESP2 server.

Usage:
    respwire                          # Connect to 127.0.0.1:6379
    respwire --host 1.2.3.4           # Connect to specific host
    respwire --port 6380              # Connect to specific port
    respwire --debug                  # Enable debug logging
    respwire --pipe < commands.txt    # Send stdin lines as one pipeline

Environment Variables:
    RESPWIRE_HOST       - Default server host
    RESPWIRE_PORT       - Default server port
    RESPWIRE_TIMEOUT    - Socket timeout in seconds
    RESPWIRE_DEBUG      - Enable debug mode (true/false)
"""

import argparse
import logging
import shlex
import sys
from typing import List

from .client.client import RespClient
from .config.settings import settings
from .exceptions import ConnectionError
from .protocol.values import Value, ValueType

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default


def parse_args(argv: List[str] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="respwire: interactive RESP client",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Server host",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Server port",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.TIMEOUT,
        help="Socket timeout in seconds (0 = block forever)",
    )

    parser.add_argument(
        "--pipe",
        action="store_true",
        help="Read one command per line from stdin and send them as a single pipeline",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def format_reply(value: Value, indent: int = 0) -> str:
    """
    Render a reply the way redis-cli does.

    Examples:
        >>> format_reply(Value.integer(5))
        '(integer) 5'
        >>> format_reply(Value.null())
        '(nil)'
        >>> print(format_reply(Value.array([Value.bulk("a"), Value.array([])])))
        1) "a"
        2) (empty array)
    """
    if value.is_null():
        return "(nil)"
    if value.type == ValueType.ERROR:
        return f"(error) {value.data}"
    if value.type == ValueType.INTEGER:
        return f"(integer) {value.data}"
    if value.type == ValueType.SIMPLE_STRING:
        return value.data
    if value.type == ValueType.BULK_STRING:
        return '"' + repr(value.data)[2:-1].replace('"', '\\"') + '"'

    if not value.data:
        return "(empty array)"
    width = len(str(len(value.data)))
    lines = []
    for number, item in enumerate(value.data, start=1):
        label = f"{number:>{width}}) "
        rendered = format_reply(item, indent + len(label))
        prefix = label if number == 1 else " " * indent + label
        lines.append(prefix + rendered)
    return "\n".join(lines)


def print_help() -> None:
    """Print help message."""
    print("""
Any RESP command can be typed directly, for example:
  SET mykey "hello world"
  GET mykey
  LRANGE mylist 0 -1

Client Commands:
----------------
  help                      Show this help message
  exit                      Exit the client
  reconnect                 Reconnect to the server
  status                    Show connection status
""")


def run_pipe(client: RespClient, lines: List[str]) -> int:
    """Send every non-empty line as one pipeline and print the replies."""
    pipe = client.pipeline()
    for line in lines:
        parts = shlex.split(line)
        if parts:
            pipe.enqueue(*parts)

    replies = pipe.execute()
    for reply in replies:
        print(format_reply(reply))
    return 1 if any(reply.is_error() for reply in replies) else 0


def run_interactive(client: RespClient, args: argparse.Namespace) -> None:
    """Read-eval-print loop."""
    print("Connected! Type 'help' for commands.\n")
    prompt = f"{args.host}:{args.port}> "

    while True:
        try:
            line = input(prompt).strip()
        except EOFError:
            print("\nGoodbye!")
            break

        if not line:
            continue

        lower_cmd = line.lower()

        if lower_cmd == "help":
            print_help()
            continue

        if lower_cmd in ("exit", "quit"):
            print("Goodbye!")
            break

        if lower_cmd == "reconnect":
            client.close()
            try:
                client.connection.connect()
                print("Reconnected!")
            except ConnectionError as e:
                print(f"Reconnection failed: {e}")
            continue

        if lower_cmd == "status":
            status = "Connected" if client.connection.is_connected() else "Disconnected"
            print(f"Status: {status}")
            print(f"Server: {client.connection.address}")
            continue

        try:
            parts = shlex.split(line)
        except ValueError as e:
            print(f"Invalid command line: {e}")
            continue

        try:
            print(format_reply(client.execute_command(*parts)))
        except ConnectionError as e:
            print(f"Connection error: {e}")
            print("Type 'reconnect' to try again.")


def main(argv: List[str] = None) -> int:
    """Main entry point for the client."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    client = RespClient(host=args.host, port=args.port, timeout=args.timeout)
    logger.debug(f"Connecting to {client.connection.address}")

    try:
        client.connection.connect()
    except ConnectionError as e:
        print(f"Failed to connect: {e}")
        return 1

    try:
        if args.pipe:
            return run_pipe(client, sys.stdin.read().splitlines())
        run_interactive(client, args)
        return 0
    except ConnectionError as e:
        print(f"Connection error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
        return 0
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
