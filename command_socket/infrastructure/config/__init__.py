"""
Infrastructure Configuration
============================
AppSettings is the single source of truth; it is created once at startup
and passed down explicitly.
"""

from .settings import AppSettings, LoggingSettings, WebSocketSettings, ServerMode, LogLevel

__all__ = ['AppSettings', 'LoggingSettings', 'WebSocketSettings', 'ServerMode', 'LogLevel']
