# Rev 0.2.0

"""Where clientdesk keeps its files (Rev 0.2.0)

Per-user state follows XDG: logs under $XDG_STATE_HOME/clientdesk/logs,
settings.json under $XDG_CONFIG_HOME/clientdesk. The schema, the showcase
seed and (unless CLIENTDESK_DB says otherwise) the database sit in the
checkout's data/ folder next to the package.
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "clientdesk"


def _xdg(var: str, *fallback: str) -> Path:
    return Path(os.environ.get(var) or Path.home().joinpath(*fallback)) / APP_NAME


STATE_DIR = _xdg("XDG_STATE_HOME", ".local", "state")
LOGS_DIR = STATE_DIR / "logs"
CONFIG_DIR = _xdg("XDG_CONFIG_HOME", ".config")

REPO_ROOT = Path(__file__).resolve().parents[2]
PROJECT_DATA_DIR = REPO_ROOT / "data"
MIGRATIONS_DIR = PROJECT_DATA_DIR / "migrations"
SEED_FILE = PROJECT_DATA_DIR / "seed.sql"

DB_PATH = Path(os.environ.get("CLIENTDESK_DB") or PROJECT_DATA_DIR / f"{APP_NAME}.db")


def config_dir() -> Path:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


def logs_dir() -> Path:
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    return LOGS_DIR


def ensure_dirs() -> None:
    """Create every directory the GUI writes to before the first window opens."""
    for p in (LOGS_DIR, CONFIG_DIR, DB_PATH.parent):
        p.mkdir(parents=True, exist_ok=True)
