# Rev 0.2.0

# clientdesk – SQLitePhaseRepository (Rev 0.2.0)
from __future__ import annotations
from typing import Any, Dict, Iterable, List

from clientdesk.models.entities import Phase
from clientdesk.models.types import Tables


class SQLitePhaseRepository:
    """
    Thin wrapper around 'project_phases'.
    Schema: (id, project_id, name, description, order_num, status)
    """

    def __init__(self, gateway):
        self._gw = gateway

    # --- public API ---------------------------------------------------------

    def list_phases(self, project_id: int) -> List[Phase]:
        """Phases of one project in roadmap order."""
        rows = (
            self._gw.table(Tables.PROJECT_PHASES)
            .select()
            .eq("project_id", project_id)
            .order("order_num")
            .execute()
        )
        return [Phase.from_row(r) for r in rows]

    def add_phases(self, project_id: int, rows: Iterable[Dict[str, Any]]) -> List[Phase]:
        payload = [dict(r, project_id=project_id) for r in rows]
        if not payload:
            return []
        return [Phase.from_row(r) for r in self._gw.table(Tables.PROJECT_PHASES).insert(payload).execute()]

    def update_phase(self, phase_id: int, fields: Dict[str, Any]) -> bool:
        return bool(self._gw.table(Tables.PROJECT_PHASES).update(fields).eq("id", phase_id).execute())

    def set_status(self, phase_id: int, status: str) -> bool:
        return self.update_phase(phase_id, {"status": status})

    def delete_phases(self, project_id: int, phase_ids: Iterable[int]) -> int:
        """Delete exactly phase_ids within project_id. An empty id list issues no delete."""
        ids = list(phase_ids)
        if not ids:
            return 0
        return len(
            self._gw.table(Tables.PROJECT_PHASES).delete().eq("project_id", project_id).in_("id", ids).execute()
        )
