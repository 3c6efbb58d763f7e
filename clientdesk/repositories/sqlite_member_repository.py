# Rev 0.2.0
# clientdesk – SQLiteMemberRepository (Rev 0.2.0)
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional

from clientdesk.models.entities import Membership, Profile
from clientdesk.models.types import Tables


class SQLiteMemberRepository:
    """
    'project_members' rows: (project_id, user_id, role).
    The acting user's own row can be kept out of every list and every delete.
    """

    def __init__(self, gateway):
        self._gw = gateway

    # ---------- queries ----------

    def list_members(
        self,
        project_id: int,
        *,
        exclude_user_id: Optional[str] = None,
        with_profiles: bool = False,
    ) -> List[Membership]:
        q = self._gw.table(Tables.PROJECT_MEMBERS).select().eq("project_id", project_id)
        if exclude_user_id is not None:
            q = q.neq("user_id", exclude_user_id)
        rows = q.order("id").execute()

        profiles: Dict[str, Profile] = {}
        if with_profiles and rows:
            ids = sorted({str(r["user_id"]) for r in rows})
            found = (
                self._gw.table(Tables.PROFILES)
                .select("id, email, full_name, role, avatar_url")
                .in_("id", ids)
                .execute()
            )
            profiles = {str(p["id"]): Profile.from_row(p) for p in found}
        return [Membership.from_row(r, profiles.get(str(r["user_id"]))) for r in rows]

    def member_user_ids(self, project_id: int) -> List[str]:
        rows = self._gw.table(Tables.PROJECT_MEMBERS).select("user_id").eq("project_id", project_id).execute()
        return [str(r["user_id"]) for r in rows]

    # ---------- mutations ----------

    def add_members(self, project_id: int, rows: Iterable[Dict[str, Any]]) -> List[Membership]:
        payload = [{"project_id": project_id, "user_id": r["user_id"], "role": r["role"]} for r in rows]
        if not payload:
            return []
        return [Membership.from_row(r) for r in self._gw.table(Tables.PROJECT_MEMBERS).insert(payload).execute()]

    def update_member(self, member_id: int, fields: Dict[str, Any]) -> bool:
        return bool(self._gw.table(Tables.PROJECT_MEMBERS).update(fields).eq("id", member_id).execute())

    def delete_members(self, project_id: int, member_ids: Iterable[int], *, protect_user_id: Optional[str] = None) -> int:
        """Delete exactly member_ids within project_id. An empty id list issues no delete."""
        ids = list(member_ids)
        if not ids:
            return 0
        q = self._gw.table(Tables.PROJECT_MEMBERS).delete().eq("project_id", project_id).in_("id", ids)
        if protect_user_id is not None:
            q = q.neq("user_id", protect_user_id)
        return len(q.execute())
