"""
Tests for main.py - Main Entry Point

Tests for the main entry point including:
- Logging configuration
- Settings validation
- Bot initialization
- Error handling
"""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from pydantic import SecretStr

from discord_node_manager.domain.shared.messages import ErrorMessages
from discord_node_manager.main import (
    LOGGING_CONFIG_PATH,
    _missing_requirement,
    cli,
    main,
    setup_logging,
)


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.discord.token = SecretStr("test_token_123")
    settings.node.password = SecretStr("secret")
    settings.log_level = "INFO"
    settings.environment = "test"
    return settings


@pytest.fixture
def restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield root
    root.setLevel(level)


class TestLoggingSetup:
    """Tests for logging configuration."""

    def _make_valid_config(self) -> dict:
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "handlers": {},
            "loggers": {
                "discord": {"level": "WARNING"},
                "aiohttp": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
            },
            "root": {"level": "INFO", "handlers": []},
        }

    def _write_config(self, tmp_path, content) -> Path:
        path = tmp_path / "logging_config.json"
        path.write_text(content if isinstance(content, str) else json.dumps(content))
        return path

    def test_dictconfig_called_when_json_exists(self, tmp_path, restore_root_level):
        """Should call dictConfig with the contents of the config file."""
        config = self._make_valid_config()
        path = self._write_config(tmp_path, config)

        with patch("logging.config.dictConfig") as mock_dc:
            setup_logging(config_path=path)

        mock_dc.assert_called_once_with(config)

    def test_fallback_to_basicconfig_when_json_missing(self, tmp_path, restore_root_level, caplog):
        """Should fall back to basicConfig and say so when the file is missing."""
        path = tmp_path / "missing.json"

        with (
            patch("logging.basicConfig") as mock_bc,
            caplog.at_level(logging.WARNING),
        ):
            setup_logging(config_path=path)

        mock_bc.assert_called_once()
        assert mock_bc.call_args[1]["level"] == logging.INFO
        assert "Could not load logging config" in caplog.text
        assert "missing.json" in caplog.text

    def test_fallback_to_basicconfig_when_json_malformed(self, tmp_path, restore_root_level):
        """Should fall back to basicConfig when JSON is malformed."""
        path = self._write_config(tmp_path, "{invalid json")

        with patch("logging.basicConfig") as mock_bc:
            setup_logging(config_path=path)

        mock_bc.assert_called_once()

    def test_fallback_when_dictconfig_rejects_file(self, tmp_path, restore_root_level):
        """Should fall back to basicConfig when the config is valid JSON but not a valid schema."""
        path = self._write_config(tmp_path, {"version": 99})

        with patch("logging.basicConfig") as mock_bc:
            setup_logging("WARNING", config_path=path)

        assert mock_bc.call_args[1]["level"] == logging.WARNING

    def test_root_logger_level_overridden_by_settings(self, tmp_path, restore_root_level):
        """Should set the root level to log_level even when the file declares another."""
        path = self._write_config(tmp_path, self._make_valid_config())

        with patch("logging.config.dictConfig"):
            setup_logging("DEBUG", config_path=path)

        assert restore_root_level.level == logging.DEBUG

    def test_unknown_level_defaults_to_info(self, tmp_path, restore_root_level):
        """Should use INFO when the level name is not recognised."""
        path = self._write_config(tmp_path, self._make_valid_config())

        with patch("logging.config.dictConfig"):
            setup_logging("verbose", config_path=path)

        assert restore_root_level.level == logging.INFO

    def test_bundled_config_is_valid(self, restore_root_level):
        """Should ship a logging config that dictConfig accepts."""
        loaded = json.loads(LOGGING_CONFIG_PATH.read_text(encoding="utf-8"))

        with patch("logging.config.dictConfig") as mock_dc:
            setup_logging()

        mock_dc.assert_called_once_with(loaded)
        assert loaded["formatters"]["console"]["()"].endswith("ColoredFormatter")
        for name in ("discord", "aiohttp", "httpx"):
            assert loaded["loggers"][name]["level"] == "WARNING"


class TestMissingRequirement:
    """Tests for the startup credential check."""

    def test_nothing_missing(self, mock_settings):
        assert _missing_requirement(mock_settings) is None

    def test_token_checked_first(self, mock_settings):
        """Should report the token before the node password."""
        mock_settings.discord.token = SecretStr("")
        mock_settings.node.password = SecretStr("")

        assert _missing_requirement(mock_settings) == ErrorMessages.DISCORD_TOKEN_REQUIRED

    def test_node_password(self, mock_settings):
        mock_settings.node.password = SecretStr("")

        assert _missing_requirement(mock_settings) == ErrorMessages.NODE_PASSWORD_REQUIRED


class TestMainFunction:
    """Tests for main entry point function."""

    def test_main_returns_error_without_token(self, mock_settings):
        """Should return error code when Discord token is missing."""
        mock_settings.discord.token = SecretStr("")

        with (
            patch("discord_node_manager.config.settings.get_settings", return_value=mock_settings),
            patch("discord_node_manager.main.setup_logging"),
            patch("discord_node_manager.infrastructure.discord.bot.create_bot") as mock_create_bot,
        ):
            exit_code = main()

        assert exit_code == 1
        mock_create_bot.assert_not_called()

    def test_main_returns_error_without_node_password(self, mock_settings):
        """Should return error code when the node password is missing."""
        mock_settings.node.password = SecretStr("")

        with (
            patch("discord_node_manager.config.settings.get_settings", return_value=mock_settings),
            patch("discord_node_manager.main.setup_logging"),
            patch("discord_node_manager.infrastructure.discord.bot.create_bot") as mock_create_bot,
        ):
            exit_code = main()

        assert exit_code == 1
        mock_create_bot.assert_not_called()

    def test_main_successful_run(self, mock_settings):
        """Should return 0 on successful bot run."""
        mock_bot = MagicMock()

        with (
            patch("discord_node_manager.config.settings.get_settings", return_value=mock_settings),
            patch("discord_node_manager.main.setup_logging"),
            patch(
                "discord_node_manager.infrastructure.discord.bot.create_bot", return_value=mock_bot
            ) as mock_create_bot,
        ):
            exit_code = main()

        assert exit_code == 0
        mock_create_bot.assert_called_once_with(mock_settings)
        mock_bot.run.assert_called_once_with("test_token_123", log_handler=None)

    def test_main_handles_keyboard_interrupt(self, mock_settings):
        """Should return 0 on KeyboardInterrupt (graceful shutdown)."""
        mock_bot = MagicMock()
        mock_bot.run.side_effect = KeyboardInterrupt()

        with (
            patch("discord_node_manager.config.settings.get_settings", return_value=mock_settings),
            patch("discord_node_manager.main.setup_logging"),
            patch(
                "discord_node_manager.infrastructure.discord.bot.create_bot", return_value=mock_bot
            ),
        ):
            exit_code = main()

        assert exit_code == 0

    def test_main_handles_exception(self, mock_settings):
        """Should return error code on unhandled exception."""
        mock_bot = MagicMock()
        mock_bot.run.side_effect = RuntimeError("Bot crashed!")

        with (
            patch("discord_node_manager.config.settings.get_settings", return_value=mock_settings),
            patch("discord_node_manager.main.setup_logging"),
            patch(
                "discord_node_manager.infrastructure.discord.bot.create_bot", return_value=mock_bot
            ),
        ):
            exit_code = main()

        assert exit_code == 1

    def test_main_configures_logging_from_settings(self, mock_settings):
        """Should set up logging with the configured level."""
        mock_settings.log_level = "DEBUG"

        with (
            patch("discord_node_manager.config.settings.get_settings", return_value=mock_settings),
            patch("discord_node_manager.main.setup_logging") as mock_setup,
            patch("discord_node_manager.infrastructure.discord.bot.create_bot"),
        ):
            main()

        mock_setup.assert_called_once_with("DEBUG")

    def test_cli_exits_with_main_code(self):
        """Should exit the process with main's return code."""
        with (
            patch("discord_node_manager.main.main", return_value=3),
            pytest.raises(SystemExit) as exc_info,
        ):
            cli()

        assert exc_info.value.code == 3
