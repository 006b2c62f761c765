"""
Configuration management for snippet stores.

The configuration is stored as a TOML file in the store directory, next
to the data file. It names the data file and sets editor and search
preferences.
"""

import os
import tomllib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import tomli_w


CONFIG_FILENAME = "rcs.toml"
CONFIG_VERSION = 1
DEFAULT_DATA_FILE = "segfile.rcs"
DEFAULT_SEARCH_LIMIT = 10


def get_default_store_path() -> Path:
    """Store directory: RCS_STORE_PATH if set, else ~/.rcs."""
    env = os.environ.get("RCS_STORE_PATH")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".rcs"


@dataclass
class StoreConfig:
    """Complete store configuration."""
    path: Path
    version: int = CONFIG_VERSION
    created: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    data_file: str = DEFAULT_DATA_FILE
    editor: str = ""
    search_limit: int = DEFAULT_SEARCH_LIMIT

    @property
    def config_path(self) -> Path:
        """Path to the TOML config file."""
        return self.path / CONFIG_FILENAME

    @property
    def data_path(self) -> Path:
        """Path to the snippet data file."""
        return self.path / self.data_file

    def exists(self) -> bool:
        """Check if config file exists."""
        return self.config_path.exists()


def load_config(store_path: Path) -> StoreConfig:
    """
    Load configuration from a store directory.

    Raises:
        FileNotFoundError: If config doesn't exist
        ValueError: If config is invalid
    """
    config_path = store_path / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    store = data.get("store", {})
    version = store.get("version", 1)
    if version > CONFIG_VERSION:
        raise ValueError(f"Config version {version} is newer than supported ({CONFIG_VERSION})")

    data_file = store.get("file", DEFAULT_DATA_FILE)
    if not data_file or "/" in data_file or "\\" in data_file:
        raise ValueError(f"Invalid data file name in {config_path}: {data_file!r}")

    limit = data.get("search", {}).get("limit", DEFAULT_SEARCH_LIMIT)
    if not isinstance(limit, int) or limit < 1:
        raise ValueError(f"search.limit must be a positive integer, got {limit!r}")

    return StoreConfig(
        path=store_path,
        version=version,
        created=store.get("created", ""),
        data_file=data_file,
        editor=data.get("editor", {}).get("command", ""),
        search_limit=limit,
    )


def save_config(config: StoreConfig) -> None:
    """
    Save configuration to the store directory.

    Creates the directory if it doesn't exist.
    """
    config.path.mkdir(parents=True, exist_ok=True)

    data = {
        "store": {
            "version": config.version,
            "created": config.created,
            "file": config.data_file,
        },
        "editor": {
            "command": config.editor,
        },
        "search": {
            "limit": config.search_limit,
        },
    }

    with open(config.config_path, "wb") as f:
        tomli_w.dump(data, f)


def load_or_create_config(store_path: Optional[Path] = None) -> StoreConfig:
    """
    Load existing config or create a new one with defaults.

    This is the main entry point for config management.
    """
    if store_path is None:
        store_path = get_default_store_path()
    store_path = Path(store_path).expanduser()

    if (store_path / CONFIG_FILENAME).exists():
        return load_config(store_path)
    config = StoreConfig(path=store_path)
    save_config(config)
    return config
