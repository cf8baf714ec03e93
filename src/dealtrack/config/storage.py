"""Where dealtrack keeps its deal store."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "dealtrack"
DEFAULT_DB_FILENAME: Final[str] = "dealtrack.db"
DATA_DIR_ENV: Final[str] = "DEALTRACK_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Data directory holding the SQLite deal store when no URI is configured."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    @property
    def database_path(self) -> Path:
        return self.data_dir / self.database_filename

    def sqlite_uri(self) -> str:
        """URI of the SQLite file, creating the data directory on first use."""

        self.data_dir.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{self.database_path}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    from_env: bool = False


def platform_data_home() -> Path:
    if os.name == "nt":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    override = os.getenv(DATA_DIR_ENV, "").strip()
    base = Path(override) if override else platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=base.expanduser().resolve())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """Resolve the store location; ``DATABASE_URI`` wins over the data directory."""

    uri = os.getenv(DATABASE_URI_ENV, "").strip()
    if uri:
        return DatabaseConfig(uri=uri, from_env=True)
    return DatabaseConfig(uri=(storage or get_storage_config()).sqlite_uri())
