"""
command_socket
==============
WebSocket command endpoint: reads one text message per connection,
answers it from a fixed command table and releases the socket.
"""

__version__ = "1.0.0"
