"""
Process configuration shared by the API and the CLI.

Settings come from the environment; backends are built from settings plus the
loaded rules and handed to whoever needs them.
"""

import logging
import os
from pathlib import Path

from src.adapters.auth.crypto import DEV_SECRET_KEY
from src.adapters.auth.session_store import InMemorySessionStore, SQLiteSessionStore
from src.adapters.memory.store import InMemoryStorage
from src.adapters.sqlite.repos import SQLiteStorage
from src.components.auth.ports import SessionStorePort
from src.ports.clock import ClockPort
from src.ports.repo import StoragePort
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./data/bizmanager.db"
SQLITE_PREFIX = "sqlite:///"
STORAGE_BACKENDS = ("sqlite", "memory")


def sqlite_path(database_url: str) -> str:
    """
    File path of a ``sqlite:///`` URL.

    ``sqlite:///./data/app.db`` -> ``./data/app.db``;
    ``sqlite:////var/app.db`` -> ``/var/app.db``.
    Raises ValueError for any other scheme and for in-memory databases.
    """
    if not database_url.startswith(SQLITE_PREFIX):
        raise ValueError(f"Unsupported DATABASE_URL (expected {SQLITE_PREFIX}...): {database_url}")
    path = database_url[len(SQLITE_PREFIX) :]
    if not path or path == ":memory:":
        raise ValueError("DATABASE_URL must name a database file; use BIZ_STORAGE=memory instead")
    return path


class Settings:
    def __init__(
        self,
        database_url: str | None = None,
        storage: str | None = None,
        rules_path: str | Path | None = None,
        secret_key: str | None = None,
        log_level: str | None = None,
    ) -> None:
        self.base_dir = Path(os.getcwd())
        self.database_url = database_url or os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)
        self.db_path = sqlite_path(self.database_url)

        self.storage = (storage or os.environ.get("BIZ_STORAGE", "sqlite")).lower()
        if self.storage not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown BIZ_STORAGE {self.storage!r}; expected one of {STORAGE_BACKENDS}"
            )

        self.rules_path = Path(
            rules_path or os.environ.get("BIZ_RULES_PATH", self.base_dir / "rules.yaml")
        )
        self.secret_key = secret_key or os.environ.get("BIZ_SECRET_KEY", DEV_SECRET_KEY)
        self.log_level = (log_level or os.environ.get("BIZ_LOG_LEVEL", "INFO")).upper()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_app_rules(settings: Settings) -> Rules:
    """
    Rules for this process.
    A missing file means defaults; an invalid one raises ValueError.
    """
    try:
        rules = load_rules(settings.rules_path)
    except FileNotFoundError:
        logger.warning("No rules file at %s; using defaults", settings.rules_path)
        return Rules()
    logger.info("Rules loaded from %s", settings.rules_path)
    return rules


def build_storage(settings: Settings, rules: Rules, clock: ClockPort | None = None) -> StoragePort:
    web_link_base = rules.profile.web_link_base
    if settings.storage == "memory":
        return InMemoryStorage(clock=clock, web_link_base=web_link_base)
    return SQLiteStorage(settings.db_path, clock=clock, web_link_base=web_link_base)


def build_session_store(storage: StoragePort) -> SessionStorePort:
    """Sessions live next to the data: same SQLite file, or in memory."""
    if isinstance(storage, SQLiteStorage):
        return SQLiteSessionStore(storage.db_path)
    return InMemorySessionStore()
