# Rev 0.2.0
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from clientdesk.models.types import PHASE_STATUS_LABELS, Tables
from clientdesk.services.authz import PermissionDenied
from clientdesk.services.project_service import ProjectBundle, ProjectSaveError
from clientdesk.services.validation import ValidationError

log = logging.getLogger(__name__)


class ProjectDetailViewModel(QObject):
    """
    One open project: overview, team, roadmap, chat, documents.
    While open it holds a chat subscription; close() releases it.
    Emits:
      - loaded(bundle: ProjectBundle)     project is None when not found
      - messagesReloaded(rows: list[Message])
      - phasesReloaded(rows: list[Phase])
      - errorChanged(str)
    """

    loaded = Signal(object)
    messagesReloaded = Signal(list)
    phasesReloaded = Signal(list)
    errorChanged = Signal(str)

    def __init__(self, project_service, session_store, notifier):
        super().__init__()
        self._svc = project_service
        self._store = session_store
        self._notifier = notifier
        self._project_id: Optional[int] = None
        self._subscription = None
        self._bundle: Optional[ProjectBundle] = None

    @property
    def project_id(self) -> Optional[int]:
        return self._project_id

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    @property
    def can_edit(self) -> bool:
        s = self._store.session
        return bool(s and s.is_admin)

    def is_own_message(self, msg) -> bool:
        s = self._store.session
        return bool(s and msg.user_id == s.user_id)

    @staticmethod
    def phase_status_label(status: str) -> str:
        return PHASE_STATUS_LABELS.get(status, status)

    # ---- lifecycle ----
    def open(self, project_id: int) -> Optional[ProjectBundle]:
        self.close()
        self._project_id = project_id
        self._subscription = self._notifier.subscribe(
            Tables.MESSAGES, "INSERT", {"project_id": project_id}, self._on_message_insert
        )
        return self.reload()

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._project_id = None

    # ---- queries ----
    def reload(self) -> Optional[ProjectBundle]:
        if self._project_id is None:
            return None
        try:
            bundle = self._svc.load_detail(self._store.session, self._project_id)
        except PermissionDenied as exc:
            self.errorChanged.emit(str(exc))
            bundle = ProjectBundle(project=None)
        self._bundle = bundle
        self.loaded.emit(bundle)
        return bundle

    def reload_messages(self) -> list:
        if self._project_id is None:
            return []
        rows = self._svc.load_messages(self._project_id)
        self.messagesReloaded.emit(rows)
        return rows

    def reload_phases(self) -> list:
        if self._project_id is None:
            return []
        rows = self._svc.load_phases(self._project_id)
        self.phasesReloaded.emit(rows)
        return rows

    def _on_message_insert(self, payload: dict) -> None:
        log.debug("chat insert in project %s: %s", self._project_id, payload.get("record", {}).get("id"))
        self.reload_messages()

    # ---- commands ----
    def send_message(self, text: str) -> bool:
        """Empty text is ignored. The list refreshes through the subscription."""
        if self._project_id is None:
            return False
        try:
            msg = self._svc.post_message(self._store.session, self._project_id, text)
        except (PermissionDenied, ProjectSaveError) as exc:
            log.error("Error sending message: %s", exc)
            self.errorChanged.emit(str(exc))
            return False
        return msg is not None

    def change_phase_status(self, phase_id: int, status: str) -> bool:
        try:
            self._svc.change_phase_status(self._store.session, phase_id, status)
        except (PermissionDenied, ProjectSaveError, ValidationError) as exc:
            log.error("Error updating phase: %s", exc)
            self.errorChanged.emit(str(exc))
            return False
        self.reload_phases()
        return True
