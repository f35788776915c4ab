"""
Runtime configuration.

Values come from a dotenv-format file (default: pastescrape.env) and may be
overridden by PASTESCRAPE_<KEY> environment variables. A missing file is not
fatal: defaults are applied and a warning is kept for the caller to log once
logging is configured.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Optional, Tuple

from dotenv import dotenv_values

from .errors import ConfigurationError

DEFAULT_CONFIG_FILE = "pastescrape.env"
ENV_PREFIX = "PASTESCRAPE_"
TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ScrapeConfig:
    dsn: str = "sqlite:///data/pastes.db"
    test_mode: bool = False
    monitor_interval: int = 5  # minutes
    paste_limit: int = 100
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    request_delay: float = 1.0  # seconds between item requests
    request_timeout: Optional[float] = None  # None = block until the server answers
    base_url: str = "https://scrape.pastebin.com"
    warnings: Tuple[str, ...] = field(default=(), compare=False)


def _parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(f"{key} must be a boolean, got {raw!r}")


def _parse_positive_int(key: str, raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {value}")
    return value


def _parse_float(key: str, raw: str) -> float:
    try:
        value = float(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")
    if value < 0:
        raise ConfigurationError(f"{key} must not be negative, got {value}")
    return value


def _read_file(path: Path) -> Tuple[Dict[str, str], Tuple[str, ...]]:
    if not path.is_file():
        return {}, (f"Config file {path} not found; using defaults",)
    try:
        values = dotenv_values(dotenv_path=path, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return {}, (f"Config file {path} unreadable ({e}); using defaults",)
    return {k.upper(): v for k, v in values.items() if v is not None}, ()


def _read_environ(environ) -> Dict[str, str]:
    return {
        k[len(ENV_PREFIX):].upper(): v
        for k, v in environ.items()
        if k.startswith(ENV_PREFIX)
    }


def build_config(values: Dict[str, str], warnings: Tuple[str, ...] = ()) -> ScrapeConfig:
    """
    Build a ScrapeConfig from raw string values keyed like the config file.

    Raises:
        ConfigurationError: a value is present but cannot be interpreted
    """
    config = ScrapeConfig(warnings=warnings)
    updates = {}
    if "DSN" in values and values["DSN"].strip():
        updates["dsn"] = values["DSN"].strip()
    if "TEST_MODE" in values:
        updates["test_mode"] = _parse_bool("TEST_MODE", values["TEST_MODE"])
    if "MONITOR_INTERVAL" in values:
        updates["monitor_interval"] = _parse_positive_int("MONITOR_INTERVAL", values["MONITOR_INTERVAL"])
    if "PASTE_LIMIT" in values:
        updates["paste_limit"] = _parse_positive_int("PASTE_LIMIT", values["PASTE_LIMIT"])
    if values.get("LOG_DIR", "").strip():
        updates["log_dir"] = Path(values["LOG_DIR"].strip())
    if values.get("LOG_LEVEL", "").strip():
        level = values["LOG_LEVEL"].strip().upper()
        if level not in LOG_LEVELS:
            raise ConfigurationError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
        updates["log_level"] = level
    if "REQUEST_DELAY" in values:
        updates["request_delay"] = _parse_float("REQUEST_DELAY", values["REQUEST_DELAY"])
    if values.get("REQUEST_TIMEOUT", "").strip():
        updates["request_timeout"] = _parse_float("REQUEST_TIMEOUT", values["REQUEST_TIMEOUT"])
    if values.get("BASE_URL", "").strip():
        updates["base_url"] = values["BASE_URL"].strip().rstrip("/")
    return replace(config, **updates)


def load_config(path: Optional[Path] = None, environ=None) -> ScrapeConfig:
    """
    Load configuration from a dotenv-format file plus environment overrides.

    Args:
        path: Config file (default: ./pastescrape.env)
        environ: Mapping used for overrides (default: os.environ)

    Returns:
        ScrapeConfig; .warnings holds non-fatal problems to log
    """
    if path is None:
        path = Path.cwd() / DEFAULT_CONFIG_FILE
    if environ is None:
        environ = os.environ
    values, warnings = _read_file(Path(path))
    values.update(_read_environ(environ))
    return build_config(values, warnings)
