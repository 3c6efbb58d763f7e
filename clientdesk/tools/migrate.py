# File: clientdesk/tools/migrate.py
# Usage examples:
#   python -m clientdesk.tools.migrate up
#   python -m clientdesk.tools.migrate up --seed
#   python -m clientdesk.tools.migrate status
#   python -m clientdesk.tools.migrate rebuild --seed --db /tmp/clientdesk.db
#
# Notes:
# - DB path defaults to env CLIENTDESK_DB or data/clientdesk.db
# - Applies data/migrations/*.sql in lexicographic order through Database.run_migrations
# - Seeds the portfolio showcase from data/seed.sql when --seed is given

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from clientdesk.repositories.db import Database
from clientdesk.utils.paths import DB_PATH, MIGRATIONS_DIR, SEED_FILE


def pending_migrations(db: Database, migrations_dir: Path) -> list[str]:
    applied = db.applied()
    return [p.name for p in sorted(migrations_dir.glob("*.sql")) if p.name not in applied]


def cmd_status(db_path: Path, migrations_dir: Path) -> int:
    db = Database(db_path)
    try:
        applied = sorted(db.applied())
        print(f"DB: {db_path}")
        print(f"Migrations dir: {migrations_dir}")
        print(f"Applied count: {len(applied)}")
        for name in applied:
            print(f"  ✔ {name}")
        pending = pending_migrations(db, migrations_dir)
        print(f"Pending count: {len(pending)}")
        for name in pending:
            print(f"  ⧗ {name}")
        return 0
    finally:
        db.close()


def cmd_up(db_path: Path, migrations_dir: Path, seed: bool, seed_file: Path = SEED_FILE) -> int:
    db = Database(db_path)
    try:
        applied_now = db.run_migrations(migrations_dir)
        for name in applied_now:
            print(f"→ Applied migration: {name}")
        if applied_now:
            print("✓ Database is up to date.")
        else:
            print("✓ No changes. Database already up to date.")
        if seed and not db.seed(seed_file):
            print(f"ℹ️  Seed requested but {seed_file} was not found.")
        return 0
    finally:
        db.close()


def cmd_rebuild(db_path: Path, migrations_dir: Path, seed: bool) -> int:
    if db_path.exists():
        print(f"⟲ Rebuilding: removing existing DB {db_path}")
        db_path.unlink()
        for suffix in ("-wal", "-shm"):
            side = db_path.with_name(db_path.name + suffix)
            if side.exists():
                side.unlink()
    rc = cmd_up(db_path, migrations_dir, seed)
    if rc == 0:
        print("✓ Rebuild complete.")
    return rc


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="clientdesk-migrate", description="SQLite migration runner for clientdesk")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(sp: argparse.ArgumentParser):
        sp.add_argument("--db", type=Path, default=DB_PATH, help=f"Path to SQLite DB (default: {DB_PATH})")
        sp.add_argument("--migrations-dir", type=Path, default=MIGRATIONS_DIR, help=f"Migrations directory (default: {MIGRATIONS_DIR})")

    s_up = sub.add_parser("up", help="Run pending migrations")
    add_common(s_up)
    s_up.add_argument("--seed", action="store_true", help="Seed after applying")

    s_rebuild = sub.add_parser("rebuild", help="Drop and recreate DB from migrations")
    add_common(s_rebuild)
    s_rebuild.add_argument("--seed", action="store_true", help="Seed after rebuild")

    s_status = sub.add_parser("status", help="Show applied and pending migrations")
    add_common(s_status)

    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    if ns.cmd == "status":
        return cmd_status(ns.db, ns.migrations_dir)
    if ns.cmd == "up":
        return cmd_up(ns.db, ns.migrations_dir, ns.seed)
    if ns.cmd == "rebuild":
        return cmd_rebuild(ns.db, ns.migrations_dir, ns.seed)
    raise SystemExit(1)


if __name__ == "__main__":
    raise SystemExit(main())
