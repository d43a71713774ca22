"""
Unified Configuration Settings - Single Source of Truth
=======================================================
All application configuration using Pydantic Settings.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from enum import Enum


class LogLevel(str, Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class ServerMode(str, Enum):
    """How the command endpoint is hosted"""
    ASGI = "asgi"              # FastAPI app + middleware under uvicorn
    STANDALONE = "standalone"  # websockets library server


# === LOGGING CONFIGURATION ===

class LoggingSettings(BaseSettings):
    """Logging configuration"""
    level: LogLevel = Field(default=LogLevel.INFO)
    file_enabled: bool = Field(default=False)
    console_enabled: bool = Field(default=True)
    structured_logging: bool = Field(default=True)
    log_dir: str = Field(default="logs")
    max_file_size_mb: int = Field(default=100)
    backup_count: int = Field(default=5)

    class Config:
        env_prefix = "LOG_"


# === WEBSOCKET CONFIGURATION ===

class WebSocketSettings(BaseSettings):
    """WebSocket endpoint configuration"""
    mode: ServerMode = Field(default=ServerMode.ASGI, description="Hosting mode")
    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    path: str = Field(default="/ws", description="Path served by the command endpoint")
    receive_buffer_size: int = Field(default=8192, description="Bytes requested per receive")
    max_message_size: int = Field(default=2**20, description="Maximum message size (standalone host)")
    close_timeout_seconds: float = Field(default=5.0, description="Closing handshake timeout (standalone host)")

    @field_validator('receive_buffer_size', 'max_message_size')
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError(f"Size must be positive, got {v}")
        return v

    @field_validator('port')
    @classmethod
    def validate_port(cls, v):
        if not 0 <= v <= 65535:
            raise ValueError(f"Invalid port: {v}")
        return v

    @field_validator('path')
    @classmethod
    def validate_path(cls, v):
        if not v.startswith('/'):
            raise ValueError(f"Path must start with '/': '{v}'")
        return v

    class Config:
        env_prefix = "WEBSOCKET_"


class AppSettings(BaseSettings):
    """Main application settings - Single Source of Truth"""

    app_name: str = Field(default="Command Socket")
    version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    websocket: WebSocketSettings = Field(default_factory=WebSocketSettings)

    class Config:
        env_file = ".env"
        env_nested_delimiter = "__"  # Allows WEBSOCKET__PORT=9000
        case_sensitive = False
        extra = "ignore"
