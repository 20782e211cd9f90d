#!/usr/bin/env python3
"""
Configuration for Rituals.

Settings come from the process environment, optionally seeded from a .env
file at the project root.

Usage:
    from Rituals.config import RitualsConfig

    config = RitualsConfig.from_env()
    store = KVStore(config.db_path)
"""

import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from Rituals.error_logger import log_warning

PROJECT_ROOT = Path(__file__).resolve().parent.parent
PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULT_DB_PATH = PROJECT_ROOT / "State" / "rituals.db"
DEFAULT_CATALOG_PATH = PACKAGE_DIR / "data" / "catalog.json"
DEFAULT_RECENT_LIMIT = 10


@dataclass
class RitualsConfig:
    """Resolved runtime settings."""
    db_path: Path = DEFAULT_DB_PATH
    catalog_path: Path = DEFAULT_CATALOG_PATH
    timezone: Optional[str] = None  # IANA name; None means system local
    recent_limit: int = DEFAULT_RECENT_LIMIT

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "RitualsConfig":
        """
        Build a config from environment variables.

        Args:
            env_path: Optional .env file. Defaults to PROJECT_ROOT/.env.
                      Existing environment variables are not overridden.
        """
        env_file = Path(env_path) if env_path else PROJECT_ROOT / ".env"
        if env_file.exists():
            load_dotenv(env_file, override=False)

        config = cls()

        db_path = os.environ.get("RITUALS_DB_PATH")
        if db_path:
            config.db_path = Path(db_path).expanduser()

        catalog_path = os.environ.get("RITUALS_CATALOG_PATH")
        if catalog_path:
            config.catalog_path = Path(catalog_path).expanduser()

        tz_name = os.environ.get("RITUALS_TIMEZONE", "").strip()
        if tz_name:
            try:
                ZoneInfo(tz_name)
                config.timezone = tz_name
            except (ZoneInfoNotFoundError, ValueError):
                log_warning("config", f"Unknown timezone '{tz_name}', using system local time")

        recent_limit = os.environ.get("RITUALS_RECENT_LIMIT")
        if recent_limit:
            try:
                value = int(recent_limit)
                if value < 1:
                    raise ValueError(recent_limit)
                config.recent_limit = value
            except ValueError:
                log_warning("config", f"Invalid RITUALS_RECENT_LIMIT '{recent_limit}', "
                                      f"using {DEFAULT_RECENT_LIMIT}")

        return config

    def tzinfo(self) -> Optional[tzinfo]:
        """Timezone used for day keys, or None for system local."""
        return ZoneInfo(self.timezone) if self.timezone else None
