# config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _load_env_file() -> None:
    """
    Load .env from the project root (same folder as this config.py).
    Never overwrites already-set environment variables.
    """
    dotenv_path = Path(__file__).resolve().parent / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path, override=False)


@dataclass(frozen=True)
class MySqlConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    minsize: int = 1
    maxsize: int = 5
    connect_timeout: int = 10


@dataclass(frozen=True)
class AppConfig:
    log_level: str
    randomize_players: bool
    mysql: MySqlConfig


def _getenv(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip()
    return v if v else default


def _int(value: str | None, var_name: str, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{var_name} must be an integer, got: {value!r}") from e


def _bool(value: str | None, var_name: str, default: bool) -> bool:
    if value is None:
        return default
    v = value.lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{var_name} must be a boolean, got: {value!r}")


def load_config() -> AppConfig:
    _load_env_file()

    log_level = (_getenv("LOG_LEVEL", "INFO") or "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"LOG_LEVEL is not a logging level, got: {log_level!r}")

    host = _getenv("DB_HOST", "127.0.0.1") or "127.0.0.1"
    port = _int(_getenv("DB_PORT"), "DB_PORT", 3306)
    user = _getenv("DB_USER", "root") or "root"
    password = _getenv("DB_PASSWORD", "") or ""
    database = _getenv("DB_NAME", "brackets") or "brackets"

    minsize = _int(_getenv("DB_POOL_MIN"), "DB_POOL_MIN", 1)
    maxsize = _int(_getenv("DB_POOL_MAX"), "DB_POOL_MAX", 5)
    connect_timeout = _int(_getenv("DB_CONNECT_TIMEOUT"), "DB_CONNECT_TIMEOUT", 10)

    if minsize < 1:
        raise ValueError("DB_POOL_MIN must be >= 1")
    if maxsize < minsize:
        raise ValueError("DB_POOL_MAX must be >= DB_POOL_MIN")

    return AppConfig(
        log_level=log_level,
        randomize_players=_bool(_getenv("BRACKET_RANDOMIZE"), "BRACKET_RANDOMIZE", False),
        mysql=MySqlConfig(
            host=host,
            port=port,
            user=user,
            password=password,
            database=database,
            minsize=minsize,
            maxsize=maxsize,
            connect_timeout=connect_timeout,
        ),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
    )
