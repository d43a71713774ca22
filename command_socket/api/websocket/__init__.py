"""
WebSocket Command Endpoint
==========================
- transport/: frame-level adapters (Starlette, websockets)
- utils/: FrameAssembler, the receive path
- handlers/: CommandDispatcher, the command protocol
- lifecycle/: SessionLifecycle, one message per connection
- middleware.py: ASGI upgrade boundary
"""

from .handlers import CommandDispatcher
from .lifecycle import SessionLifecycle
from .middleware import CommandSocketMiddleware
from .utils import FrameAssembler

__all__ = ["CommandDispatcher", "CommandSocketMiddleware", "FrameAssembler", "SessionLifecycle"]
