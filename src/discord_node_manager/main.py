#!/usr/bin/env python3
"""Main entry point for the node manager bot."""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from discord_node_manager.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_node_manager.config.settings import Settings

LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"

_FALLBACK_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_FALLBACK_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_level: str = "INFO", config_path: Path = LOGGING_CONFIG_PATH) -> None:
    """Apply the dictConfig at ``config_path``, or a plain console handler if it is unusable.

    The root level is set to ``log_level`` afterwards either way, so the
    configured level wins over whatever the file declares.
    """
    level = _resolve_level(log_level)

    try:
        config = json.loads(config_path.read_text(encoding="utf-8"))
        logging.config.dictConfig(config)
    except (OSError, ValueError) as e:
        logging.basicConfig(level=level, format=_FALLBACK_FORMAT, datefmt=_FALLBACK_DATEFMT)
        logging.getLogger(__name__).warning(LogTemplates.LOGGING_CONFIG_FALLBACK, config_path, e)

    logging.getLogger().setLevel(level)


def _missing_requirement(settings: Settings) -> str | None:
    if not settings.discord.token.get_secret_value():
        return ErrorMessages.DISCORD_TOKEN_REQUIRED
    if not settings.node.password.get_secret_value():
        return ErrorMessages.NODE_PASSWORD_REQUIRED
    return None


def main() -> int:
    from discord_node_manager.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)

    missing = _missing_requirement(settings)
    if missing is not None:
        logger.error(missing)
        return 1

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))

    from discord_node_manager.infrastructure.discord.bot import create_bot

    bot = create_bot(settings)

    try:
        logger.info(LogTemplates.BOT_STARTING_RUN)
        bot.run(settings.discord.token.get_secret_value(), log_handler=None)
        logger.info(LogTemplates.BOT_STOPPED)
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
