# Rev 0.2.0

"""Pytest fixtures for clientdesk (Rev 0.2.0)"""
from __future__ import annotations
from pathlib import Path
from typing import Callable

import pytest

from clientdesk.repositories.db import Database
from clientdesk.repositories.gateway import Gateway
from clientdesk.repositories.sqlite_document_repository import SQLiteDocumentRepository
from clientdesk.repositories.sqlite_member_repository import SQLiteMemberRepository
from clientdesk.repositories.sqlite_message_repository import SQLiteMessageRepository
from clientdesk.repositories.sqlite_phase_repository import SQLitePhaseRepository
from clientdesk.repositories.sqlite_profile_repository import SQLiteProfileRepository
from clientdesk.repositories.sqlite_project_repository import SQLiteProjectRepository
from clientdesk.services.change_notifier import ChangeNotifier
from clientdesk.services.project_service import ProjectService
from clientdesk.services.session import Session, SessionStore


@pytest.fixture()
def db(tmp_path: Path):
    database = Database(path=str(tmp_path / "test.db"))
    try:
        database.run_migrations()
        yield database
    finally:
        database.close()


@pytest.fixture()
def notifier() -> ChangeNotifier:
    return ChangeNotifier()


@pytest.fixture()
def gateway(db, notifier) -> Gateway:
    return Gateway(db, notifier)


@pytest.fixture()
def sessions(gateway) -> SessionStore:
    return SessionStore(gateway)


@pytest.fixture()
def add_user(gateway) -> Callable[..., str]:
    """Insert a profile row directly (no password) and return its id."""

    def _add(user_id: str, role: str = "client", full_name: str = "") -> str:
        gateway.table("profiles").insert({
            "id": user_id,
            "email": f"{user_id}@example.com",
            "full_name": full_name or user_id.title(),
            "role": role,
        }).execute()
        return user_id

    return _add


@pytest.fixture()
def login(sessions) -> Callable[[str], Session]:
    def _login(user_id: str) -> Session:
        session = sessions.load(user_id)
        assert session is not None, f"no profile for {user_id}"
        return session

    return _login


@pytest.fixture()
def service(gateway) -> ProjectService:
    return ProjectService(
        projects=SQLiteProjectRepository(gateway),
        members=SQLiteMemberRepository(gateway),
        phases=SQLitePhaseRepository(gateway),
        messages=SQLiteMessageRepository(gateway),
        documents=SQLiteDocumentRepository(gateway),
        profiles=SQLiteProfileRepository(gateway),
    )


@pytest.fixture()
def people(add_user):
    """admin + two freelancers + one client."""
    return {
        "admin": add_user("admin", "admin", "Ada Admin"),
        "alice": add_user("alice", "freelancer", "Alice"),
        "bob": add_user("bob", "freelancer", "Bob"),
        "carol": add_user("carol", "client", "Carol"),
    }


@pytest.fixture()
def project_form():
    return {
        "name": "Website rebuild",
        "description": "New marketing site",
        "status": "planning",
        "deadline": "2026-12-31",
        "progress": 10,
        "client_id": "carol",
    }
