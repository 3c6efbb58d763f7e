# clientdesk/utils/config.py
# Rev 0.2.0
from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .paths import DB_PATH, config_dir

log = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"

_DEFAULTS: Dict[str, Any] = {
    "database": {
        "path": str(DB_PATH),
    },
    "mail": {
        "api_url": "https://api.resend.com/emails",
        "api_key": "",
        "sender": "Portfolio <noreply@clientdesk.local>",
        "recipient": "",
        "timeout_secs": 10,
    },
    "auth": {
        "min_password_length": 6,
    },
    "main_window": {
        "width": 1100,
        "height": 720,
    },
}

# env var -> (section, key)
_ENV_OVERRIDES = {
    "CLIENTDESK_DB": ("database", "path"),
    "RESEND_API_KEY": ("mail", "api_key"),
    "CONTACT_RECIPIENT": ("mail", "recipient"),
    "CONTACT_FROM": ("mail", "sender"),
}


def settings_file() -> Path:
    return config_dir() / SETTINGS_FILE_NAME


def _merge(base: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    out = {k: (dict(v) if isinstance(v, dict) else v) for k, v in base.items()}
    for k, v in extra.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_settings(path: Optional[Path] = None, env: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Defaults <- settings.json <- environment."""
    path = path or settings_file()
    env = os.environ if env is None else env

    data = _merge(_DEFAULTS, {})
    if path.exists():
        try:
            data = _merge(data, json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError):
            log.warning("Ignoring unreadable settings file %s", path, exc_info=True)

    for var, (section, key) in _ENV_OVERRIDES.items():
        if env.get(var):
            data.setdefault(section, {})[key] = env[var]
    return data


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
