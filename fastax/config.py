"""Where the local taxonomy database lives."""

import os
from pathlib import Path
from typing import Mapping, Optional

APP_NAME = "fastax"
DB_FILENAME = "taxonomy.db"
DB_ENV = "FASTAX_DB"


def data_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    """``$XDG_DATA_HOME/fastax``, or ``~/.local/share/fastax`` when unset."""
    env = os.environ if env is None else env
    base = env.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(base) / APP_NAME


def db_path(override: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> Path:
    """Resolve the database path: explicit option, then ``$FASTAX_DB``, then the data dir."""
    env = os.environ if env is None else env
    if override:
        return Path(override).expanduser()
    if env.get(DB_ENV):
        return Path(env[DB_ENV]).expanduser()
    return data_dir(env) / DB_FILENAME
