# clientdesk application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .utils.config import load_settings
from .utils.logging_setup import get_logger
from .repositories.db import Database
from .repositories.gateway import Gateway
from .repositories.sqlite_document_repository import SQLiteDocumentRepository
from .repositories.sqlite_member_repository import SQLiteMemberRepository
from .repositories.sqlite_message_repository import SQLiteMessageRepository
from .repositories.sqlite_phase_repository import SQLitePhaseRepository
from .repositories.sqlite_profile_repository import SQLiteProfileRepository
from .repositories.sqlite_project_repository import SQLiteProjectRepository
from .repositories.sqlite_showcase_repository import SQLiteShowcaseRepository
from .services.change_notifier import ChangeNotifier
from .services.contact_mailer import ContactMailer
from .services.project_service import ProjectService
from .services.session import SessionStore


@dataclass
class AppContext:
    """Central container for shared app resources."""
    settings: Dict[str, Any]
    db: Database
    notifier: ChangeNotifier
    gateway: Gateway
    sessions: SessionStore
    projects: ProjectService
    profiles: SQLiteProfileRepository
    showcase: SQLiteShowcaseRepository
    mailer: ContactMailer

    @classmethod
    def create(cls, db_path: Optional[Path | str] = None, settings: Optional[Dict[str, Any]] = None) -> "AppContext":
        """Open the DB, apply migrations, wire repositories and services."""
        log = get_logger("AppContext")
        settings = settings or load_settings()
        db = Database(db_path or settings["database"]["path"])
        db.run_migrations()

        notifier = ChangeNotifier()
        gw = Gateway(db, notifier)
        profiles = SQLiteProfileRepository(gw)
        service = ProjectService(
            projects=SQLiteProjectRepository(gw),
            members=SQLiteMemberRepository(gw),
            phases=SQLitePhaseRepository(gw),
            messages=SQLiteMessageRepository(gw),
            documents=SQLiteDocumentRepository(gw),
            profiles=profiles,
        )
        mailer = ContactMailer.from_settings(settings)
        mailer.attach(notifier)

        log.info("AppContext initialized with DB=%s", db.path)
        return cls(
            settings=settings,
            db=db,
            notifier=notifier,
            gateway=gw,
            sessions=SessionStore(gw, min_password_length=int(settings["auth"]["min_password_length"])),
            projects=service,
            profiles=profiles,
            showcase=SQLiteShowcaseRepository(gw),
            mailer=mailer,
        )

    def close(self) -> None:
        self.sessions.clear()
        self.mailer.close()
        self.db.close()
