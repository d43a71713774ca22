"""
Command Client
==============
Sends one message to a command endpoint and collects the replies until the
server closes the connection.

Usage:
    python -m command_socket.client ws://127.0.0.1:8000/ws "hola#ana"
    python -m command_socket.client ws://127.0.0.1:8000/ws hola --fragments 3
"""

import argparse
import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

from websockets.asyncio.client import connect


@dataclass
class CommandResult:
    """Replies received for one message, and how the server closed."""
    replies: List[str] = field(default_factory=list)
    close_code: Optional[int] = None
    close_reason: Optional[str] = None


def split_fragments(message: str, fragments: int) -> List[str]:
    """Split ``message`` into at most ``fragments`` non-empty pieces."""
    if fragments <= 1 or len(message) <= 1:
        return [message]
    fragments = min(fragments, len(message))
    size, extra = divmod(len(message), fragments)
    pieces, start = [], 0
    for index in range(fragments):
        end = start + size + (1 if index < extra else 0)
        pieces.append(message[start:end])
        start = end
    return pieces


async def send_command(url: str, message: str, fragments: int = 1, timeout: float = 10.0) -> CommandResult:
    """
    Send ``message`` (as ``fragments`` WebSocket frames) and wait for the server to close.

    Args:
        url: WebSocket URL of the command endpoint
        message: Text to send
        fragments: Number of frames the message is split into
        timeout: Seconds to wait for the whole exchange

    Returns:
        CommandResult with the text replies and the close code/reason
    """
    result = CommandResult()

    async def exchange():
        async with connect(url) as websocket:
            pieces = split_fragments(message, fragments)
            await websocket.send(pieces if len(pieces) > 1 else pieces[0])
            async for reply in websocket:
                if isinstance(reply, str):
                    result.replies.append(reply)
            result.close_code = websocket.close_code
            result.close_reason = websocket.close_reason

    await asyncio.wait_for(exchange(), timeout=timeout)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Send one command to a command socket endpoint")
    parser.add_argument("url", help="WebSocket URL, e.g. ws://127.0.0.1:8000/ws")
    parser.add_argument("message", help="Message to send, e.g. hola or hola#ana")
    parser.add_argument("--fragments", type=int, default=1, help="Number of frames to split the message into")
    parser.add_argument("--timeout", type=float, default=10.0, help="Seconds to wait for the server")
    args = parser.parse_args(argv)

    result = asyncio.run(send_command(args.url, args.message, args.fragments, args.timeout))
    for reply in result.replies:
        print(reply)
    print(f"[closed] code={result.close_code} reason={result.close_reason!r}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
