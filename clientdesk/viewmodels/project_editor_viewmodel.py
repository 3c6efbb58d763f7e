# Rev 0.2.0
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from clientdesk.models.types import PROJECT_STATUSES
from clientdesk.services.authz import PermissionDenied
from clientdesk.services.project_service import EditSnapshot, ProjectSaveError
from clientdesk.services.reconciler import MemberDraft, PhaseDraft, add_phase, remove_phase
from clientdesk.services.validation import ValidationError

log = logging.getLogger(__name__)

_EMPTY_FORM: Dict[str, Any] = {
    "name": "",
    "description": "",
    "status": "planning",
    "deadline": "",
    "client_id": "",
    "progress": 0,
}


class ProjectEditorViewModel(QObject):
    """
    Create / edit form state. Holds the working copy of team members and
    phases; submit() hands it to ProjectService together with the snapshot
    taken at load time.

    Emits:
      - loaded()
      - membersChanged(list[MemberDraft])
      - phasesChanged(list[PhaseDraft])
      - errorChanged(str)        "" clears
      - savingChanged(bool)
      - saved(project_id: int)
    """

    loaded = Signal()
    membersChanged = Signal(list)
    phasesChanged = Signal(list)
    errorChanged = Signal(str)
    savingChanged = Signal(bool)
    saved = Signal(int)

    def __init__(self, project_service, session_store):
        super().__init__()
        self._svc = project_service
        self._store = session_store
        self._snapshot: Optional[EditSnapshot] = None
        self.form: Dict[str, Any] = dict(_EMPTY_FORM)
        self.members: List[MemberDraft] = []
        self.phases: List[PhaseDraft] = [PhaseDraft()]
        self.candidates: list = []
        self._saving = False

    @property
    def is_edit(self) -> bool:
        return self._snapshot is not None

    @property
    def saving(self) -> bool:
        return self._saving

    @property
    def clients(self) -> list:
        return [p for p in self.candidates if p.role == "client"]

    @property
    def can_remove_phase(self) -> bool:
        return len(self.phases) > 1

    # ---- loading ----
    def load(self, project_id: Optional[int] = None) -> bool:
        self.errorChanged.emit("")
        session = self._store.session
        self.candidates = self._svc.member_candidates(session) if session else []
        if project_id is None:
            self._snapshot = None
            self.form = dict(_EMPTY_FORM)
            self.members = []
            self.phases = [PhaseDraft()]
        else:
            try:
                snap = self._svc.load_for_edit(session, project_id)
            except (PermissionDenied, ProjectSaveError) as exc:
                log.error("Error loading project %s: %s", project_id, exc)
                self.errorChanged.emit(str(exc))
                return False
            self._snapshot = snap
            self.form = {k: ("" if v is None else v) for k, v in snap.project.form_values().items()}
            self.members = [replace(m) for m in snap.members]
            self.phases = [replace(p) for p in snap.phases]
        self.loaded.emit()
        self.membersChanged.emit(list(self.members))
        self.phasesChanged.emit(list(self.phases))
        return True

    # ---- project fields ----
    def set_field(self, name: str, value: Any) -> None:
        if name not in _EMPTY_FORM:
            raise KeyError(name)
        if name == "status" and value not in PROJECT_STATUSES:
            raise ValueError(f"unknown status: {value}")
        self.form[name] = value

    # ---- team members ----
    def add_member(self) -> None:
        self.members.append(MemberDraft())
        self.membersChanged.emit(list(self.members))

    def update_member(self, index: int, field: str, value: str) -> None:
        m = self.members[index]
        if field == "user_id":
            # the user of a persisted row is fixed; only its role is editable
            if m.is_existing:
                return
            m.user_id = value
        elif field == "role":
            m.role = value
        else:
            raise KeyError(field)
        self.membersChanged.emit(list(self.members))

    def remove_member(self, index: int) -> None:
        del self.members[index]
        self.membersChanged.emit(list(self.members))

    # ---- phases ----
    def add_phase(self) -> None:
        self.phases = add_phase(self.phases)
        self.phasesChanged.emit(list(self.phases))

    def update_phase(self, index: int, field: str, value: Any) -> None:
        if field not in ("name", "description", "status"):
            raise KeyError(field)
        setattr(self.phases[index], field, value)
        self.phasesChanged.emit(list(self.phases))

    def remove_phase(self, index: int) -> None:
        if not self.can_remove_phase:
            return
        self.phases = remove_phase(self.phases, index)
        self.phasesChanged.emit(list(self.phases))

    # ---- submit ----
    def _set_saving(self, value: bool) -> None:
        self._saving = value
        self.savingChanged.emit(value)

    def submit(self) -> Optional[int]:
        self.errorChanged.emit("")
        session = self._store.session
        self._set_saving(True)
        try:
            if self._snapshot is None:
                project = self._svc.create_project(session, self.form, self.members, self.phases)
                project_id = int(project.id)
            else:
                report = self._svc.save_project(session, self._snapshot, self.form, self.members, self.phases)
                project_id = report.project_id
        except (ValidationError, PermissionDenied, ProjectSaveError) as exc:
            log.error("Error saving project: %s", exc)
            self.errorChanged.emit(str(exc))
            self._set_saving(False)
            return None
        self._set_saving(False)
        self.saved.emit(project_id)
        return project_id
