"""
SQLite-backed persistence for the user's provider ``Config``.

Schema
──────
table: kv
  key    TEXT PRIMARY KEY
  value  TEXT NOT NULL   (Config serialised as camelCase JSON)

Only one row is ever written (``key = 'app-config'``). There is no
versioning or migration of the stored value.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Callable
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from structkb.models import Config

logger = logging.getLogger(__name__)

CONFIG_KEY = "app-config"


@contextmanager
def _connect(path: Path):
    """Yield a connected sqlite3.Connection, creating the file/dir if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(path: Path) -> None:
    """Create the kv table if it doesn't exist yet."""
    with _connect(path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
    logger.info("Config store initialised at %s", path)


def load(path: Path) -> Config:
    """Return the persisted config, or the default when nothing is stored.

    A stored value that no longer parses is logged and replaced by the
    default rather than raised, so a bad row never blocks startup.
    """
    with _connect(path) as conn:
        row = conn.execute(
            "SELECT value FROM kv WHERE key = ?", (CONFIG_KEY,)
        ).fetchone()

    if row is None:
        return Config()

    try:
        return Config.model_validate_json(row["value"])
    except ValidationError as exc:
        logger.warning("Ignoring unreadable stored config: %s", exc)
        return Config()


def save(config: Config, path: Path) -> None:
    """Write the full config, replacing any previous value."""
    with _connect(path) as conn:
        conn.execute(
            "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
            (CONFIG_KEY, config.model_dump_json(by_alias=True)),
        )
    logger.info("Saved config model_type=%s", config.model_type.value)


class ConfigHolder:
    """The single in-process slot for the current ``Config``.

    ``on_change`` is called with the new value on every ``set()``, whether
    or not it differs from the previous one.
    """

    def __init__(
        self,
        initial: Config,
        on_change: Optional[Callable[[Config], None]] = None,
    ) -> None:
        self._config = initial
        self._on_change = on_change
        self._lock = threading.Lock()

    def get(self) -> Config:
        return self._config

    def set(self, config: Config) -> None:
        with self._lock:
            self._config = config
            if self._on_change is not None:
                self._on_change(config)


def open_store(path: Path) -> ConfigHolder:
    """Load the persisted config and return a holder that saves on every set."""
    init_db(path)
    return ConfigHolder(load(path), on_change=lambda config: save(config, path))
