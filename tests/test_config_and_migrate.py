# tests/test_config_and_migrate.py
from __future__ import annotations

import logging
import sys
from pathlib import Path

from clientdesk.app_context import AppContext
from clientdesk.repositories.db import Database
from clientdesk.tools import migrate
from clientdesk.utils.config import load_settings, save_settings
from clientdesk.utils.logging_setup import setup_logging
from clientdesk.utils.paths import MIGRATIONS_DIR


def test_settings_defaults_file_then_env(tmp_path: Path):
    path = tmp_path / "settings.json"
    assert load_settings(path, env={})["auth"]["min_password_length"] == 6

    save_settings({"mail": {"recipient": "file@example.com", "timeout_secs": 3}}, path)
    s = load_settings(path, env={})
    assert s["mail"]["recipient"] == "file@example.com"
    assert s["mail"]["timeout_secs"] == 3
    assert s["mail"]["api_url"] == "https://api.resend.com/emails"  # untouched default

    s = load_settings(path, env={"CONTACT_RECIPIENT": "env@example.com", "RESEND_API_KEY": "re_x"})
    assert s["mail"]["recipient"] == "env@example.com"
    assert s["mail"]["api_key"] == "re_x"


def test_unreadable_settings_fall_back(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_settings(path, env={})["database"]["path"]


def test_migrations_apply_once(tmp_path: Path):
    db = Database(tmp_path / "m.db")
    try:
        first = db.run_migrations(MIGRATIONS_DIR)
        assert first and first[0].startswith("0001")
        assert db.run_migrations(MIGRATIONS_DIR) == []
        assert db.applied() == set(first)
    finally:
        db.close()


def test_migrate_cli_up_status_and_seed(tmp_path: Path, capsys):
    target = tmp_path / "cli.db"
    assert migrate.main(["up", "--seed", "--db", str(target)]) == 0
    assert migrate.main(["up", "--seed", "--db", str(target)]) == 0
    assert migrate.main(["status", "--db", str(target)]) == 0
    out = capsys.readouterr().out
    assert "Pending count: 0" in out
    assert "No changes" in out

    db = Database(target)
    try:
        (count,) = db.conn.execute("SELECT COUNT(*) FROM showcase_projects").fetchone()
    finally:
        db.close()
    assert count == 3  # second seed is a no-op


def test_app_context_wires_mailer(tmp_path: Path):
    settings = load_settings(tmp_path / "none.json", env={})
    ctx = AppContext.create(db_path=tmp_path / "ctx.db", settings=settings)
    try:
        assert ctx.notifier.subscriber_count("contact_submissions") == 1
        assert not ctx.mailer.configured
        assert ctx.sessions.session is None
    finally:
        ctx.close()


def test_setup_logging_twice_keeps_one_file_handler(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setenv("CLIENTDESK_LOG_LEVEL", "debug")
    root = logging.getLogger()
    level = root.level
    try:
        setup_logging("cdtest", log_dir=tmp_path)
        logfile = setup_logging("cdtest", log_dir=tmp_path)
        ours = [h for h in root.handlers if getattr(h, "_clientdesk", False)]
        assert len(ours) == 2
        assert root.level == logging.DEBUG

        logging.getLogger("clientdesk.test").debug("hello file")
        for h in ours:
            h.flush()
        assert "hello file" in logfile.read_text(encoding="utf-8")
    finally:
        for h in [h for h in root.handlers if getattr(h, "_clientdesk", False)]:
            root.removeHandler(h)
            h.close()
        root.setLevel(level)
