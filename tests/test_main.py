"""
Unit tests for the entry point
==============================
Tests argument parsing, settings overrides and mode selection.
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from command_socket import main as entry_point
from command_socket.infrastructure.config.settings import ServerMode


class TestResolveSettings:
    """Test CLI overrides on top of config"""

    def test_overrides_applied(self, tmp_path):
        """Test --mode/--host/--port override the config file"""
        args = entry_point.build_parser().parse_args([
            "--config", str(tmp_path / "missing.json"),
            "--mode", "standalone",
            "--host", "0.0.0.0",
            "--port", "9300",
        ])

        settings = entry_point.resolve_settings(args)

        assert settings.websocket.mode == ServerMode.STANDALONE
        assert settings.websocket.host == "0.0.0.0"
        assert settings.websocket.port == 9300

    def test_no_overrides(self, tmp_path):
        """Test settings are untouched without flags"""
        args = entry_point.build_parser().parse_args(["--config", str(tmp_path / "missing.json")])

        settings = entry_point.resolve_settings(args)

        assert settings.websocket.path == "/ws"

    def test_invalid_port_override_rejected(self, tmp_path):
        """Test an out-of-range --port fails validation"""
        args = entry_point.build_parser().parse_args([
            "--config", str(tmp_path / "missing.json"), "--port", "70000"
        ])

        with pytest.raises(ValidationError):
            entry_point.resolve_settings(args)


class TestMain:
    """Test mode dispatch in main()"""

    def test_asgi_mode_runs_uvicorn(self, tmp_path):
        """Test asgi mode hands the FastAPI app to uvicorn"""
        with patch.object(entry_point.uvicorn, "run") as mock_run:
            exit_code = entry_point.main(["--config", str(tmp_path / "missing.json"), "--mode", "asgi", "--port", "9400"])

        assert exit_code == 0
        mock_run.assert_called_once()
        assert mock_run.call_args.kwargs["port"] == 9400

    def test_standalone_mode(self, tmp_path):
        """Test standalone mode runs the websockets server"""
        with patch.object(entry_point, "run_standalone") as mock_run_standalone:
            entry_point.main(["--config", str(tmp_path / "missing.json"), "--mode", "standalone"])

        settings = mock_run_standalone.call_args[0][0]
        assert settings.websocket.mode == ServerMode.STANDALONE

    def test_invalid_override_exits_with_usage_error(self, tmp_path):
        """Test main() reports a bad override as an argument error"""
        with patch.object(entry_point.uvicorn, "run") as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                entry_point.main(["--config", str(tmp_path / "missing.json"), "--port", "70000"])

        assert exc_info.value.code == 2
        mock_run.assert_not_called()


class TestRunStandalone:
    """Test run_standalone() wiring"""

    def test_uses_cached_logger(self, test_settings):
        """Test the standalone host logs through get_logger()"""
        with patch.object(entry_point, "get_logger") as mock_get_logger, \
                patch.object(entry_point, "StandaloneCommandServer") as mock_server_cls, \
                patch.object(entry_point.asyncio, "run") as mock_asyncio_run:
            entry_point.run_standalone(test_settings)

        mock_get_logger.assert_called_once_with("command_socket", test_settings.logging)
        assert mock_server_cls.call_args[0][2] is mock_get_logger.return_value
        mock_asyncio_run.assert_called_once_with(mock_server_cls.return_value.serve_forever.return_value)
