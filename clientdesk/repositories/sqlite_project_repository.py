# Rev 0.2.0
# clientdesk – SQLiteProjectRepository (Rev 0.2.0)
from __future__ import annotations
from typing import Any, Dict, List, Optional

from clientdesk.models.entities import Project
from clientdesk.models.types import Tables


class SQLiteProjectRepository:
    """
    Project rows. Visibility rules live in services/authz.py; this class
    only knows how to read and write.
    """

    def __init__(self, gateway):
        self._gw = gateway

    # ---------- queries ----------

    def list_projects(self) -> List[Project]:
        """All projects, newest first."""
        rows = self._gw.table(Tables.PROJECTS).select().order("created_at", ascending=False).order("id", ascending=False).execute()
        return [Project.from_row(r) for r in rows]

    def list_projects_for_member(self, user_id: str) -> List[Project]:
        """Projects where user_id holds a membership row, newest first."""
        links = self._gw.table(Tables.PROJECT_MEMBERS).select("project_id").eq("user_id", user_id).execute()
        ids = sorted({int(r["project_id"]) for r in links})
        if not ids:
            return []
        rows = (
            self._gw.table(Tables.PROJECTS)
            .select()
            .in_("id", ids)
            .order("created_at", ascending=False)
            .order("id", ascending=False)
            .execute()
        )
        return [Project.from_row(r) for r in rows]

    def get_project(self, project_id: int) -> Optional[Project]:
        row = self._gw.table(Tables.PROJECTS).select().eq("id", project_id).maybe_single()
        return Project.from_row(row) if row else None

    # ---------- mutations ----------

    def create_project(self, fields: Dict[str, Any], *, created_by: str) -> Project:
        row = dict(fields)
        row["created_by"] = created_by
        inserted = self._gw.table(Tables.PROJECTS).insert(row).execute()
        return Project.from_row(inserted[0])

    def update_project(self, project_id: int, fields: Dict[str, Any]) -> bool:
        rows = self._gw.table(Tables.PROJECTS).update(fields).eq("id", project_id).execute()
        return bool(rows)
