"""Where catalogsync keeps its database, HTTP cache, media and run lock."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "catalogsync"
DATA_DIR_ENV: Final[str] = "CATALOGSYNC_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"

DEFAULT_DB_FILENAME: Final[str] = "catalog.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"
MEDIA_DIRNAME: Final[str] = "media"
RUN_LOCK_FILENAME: Final[str] = "import.lock"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Everything lives below one data directory, created on first use."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME
    http_cache_filename: str = HTTP_CACHE_FILENAME
    media_dirname: str = MEDIA_DIRNAME
    run_lock_filename: str = RUN_LOCK_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def _entry(self, name: str, *, ensure: bool) -> Path:
        base = self.resolve_data_dir()
        if ensure:
            base.mkdir(parents=True, exist_ok=True)
        return base / name

    def database_path(self, *, ensure: bool = True) -> Path:
        return self._entry(self.database_filename, ensure=ensure)

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        return self._entry(self.http_cache_filename, ensure=ensure)

    def media_dir(self, *, ensure: bool = True) -> Path:
        return self._entry(self.media_dirname, ensure=ensure)

    def run_lock_path(self, *, ensure: bool = True) -> Path:
        return self._entry(self.run_lock_filename, ensure=ensure)

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _platform_data_home() -> Path:
    if os.name == "nt":
        local_app_data = os.getenv("LOCALAPPDATA")
        return Path(local_app_data) if local_app_data else Path.home() / "AppData" / "Local"
    xdg_data_home = os.getenv("XDG_DATA_HOME")
    return Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    override = os.getenv(DATA_DIR_ENV)
    data_dir = Path(override) if override else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    override = os.getenv(DATABASE_URI_ENV)
    if override:
        return DatabaseConfig(uri=override)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())


def get_database_uri() -> str:
    """SQLAlchemy URI of the catalog database, honouring ``DATABASE_URI``."""

    return get_database_config().uri
