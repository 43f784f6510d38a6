"""Configuration management with environment variable support."""

import logging
import os
from dataclasses import dataclass, field


def _parse_optional_int(name: str) -> int | None:
    """Parse an optional integer environment variable."""
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


@dataclass(frozen=True)
class GameConfig:
    """Default game configuration."""

    initial_bankroll: int = field(
        default_factory=lambda: int(os.getenv("QBJ_INITIAL_BANKROLL", "1000"))
    )
    min_bet: int = field(default_factory=lambda: int(os.getenv("QBJ_MIN_BET", "10")))
    max_bet: int = field(default_factory=lambda: int(os.getenv("QBJ_MAX_BET", "1000")))
    num_decks: int = field(default_factory=lambda: int(os.getenv("QBJ_NUM_DECKS", "1")))
    reshuffle_threshold: int = 10
    event_buffer: int = field(default_factory=lambda: int(os.getenv("QBJ_EVENT_BUFFER", "500")))
    seed: int | None = field(default_factory=lambda: _parse_optional_int("QBJ_SEED"))


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING").upper())
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    session_path: str = field(
        default_factory=lambda: os.getenv(
            "QBJ_SESSION_PATH",
            os.path.expanduser("~/.quantum_blackjack_session.json"),
        )
    )

    game: GameConfig = field(default_factory=GameConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def configure_logging(app_config: AppConfig | None = None) -> None:
    """Apply the logging configuration to the root logger."""
    app_config = app_config or config
    level = "DEBUG" if app_config.debug else app_config.logging.level
    logging.basicConfig(level=level, format=app_config.logging.format)


# Global configuration instance
config = AppConfig()
