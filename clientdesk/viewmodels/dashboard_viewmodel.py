# Rev 0.2.0
# clientdesk/viewmodels/dashboard_viewmodel.py
from __future__ import annotations

from PySide6.QtCore import QObject, Signal

from clientdesk.models.types import PROJECT_STATUS_LABELS


class DashboardViewModel(QObject):
    """
    Emits:
      projectsReloaded(rows: list[dict])  id, name, description, status, status_label, deadline, progress
    """

    projectsReloaded = Signal(list)
    loadingChanged = Signal(bool)

    def __init__(self, project_service, session_store):
        super().__init__()
        self._svc = project_service
        self._store = session_store

    @property
    def is_admin(self) -> bool:
        s = self._store.session
        return bool(s and s.is_admin)

    @property
    def subtitle(self) -> str:
        return "Manage all projects" if self.is_admin else "Your assigned projects"

    @property
    def empty_hint(self) -> str:
        if self.is_admin:
            return "Create your first project to get started"
        return "You haven't been assigned to any projects yet"

    @staticmethod
    def status_label(status: str) -> str:
        return PROJECT_STATUS_LABELS.get(status, status)

    def reload(self) -> list[dict]:
        session = self._store.session
        if session is None:
            self.projectsReloaded.emit([])
            return []
        self.loadingChanged.emit(True)
        rows = [
            {
                "id": p.id,
                "name": p.name,
                "description": p.description,
                "status": p.status,
                "status_label": self.status_label(p.status),
                "deadline": p.deadline,
                "progress": p.progress,
            }
            for p in self._svc.list_dashboard_projects(session)
        ]
        self.loadingChanged.emit(False)
        self.projectsReloaded.emit(rows)
        return rows
