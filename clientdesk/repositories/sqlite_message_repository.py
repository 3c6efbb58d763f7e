# Rev 0.2.0
# clientdesk – SQLiteMessageRepository (Rev 0.2.0)
from __future__ import annotations
from datetime import datetime, timezone
from typing import List

from clientdesk.models.entities import Message
from clientdesk.models.types import Tables


class SQLiteMessageRepository:
    """Project chat. Inserts go through the gateway so subscribers hear about them."""

    def __init__(self, gateway):
        self._gw = gateway

    def list_messages(self, project_id: int) -> List[Message]:
        """Oldest first, each decorated with the author's display name."""
        rows = (
            self._gw.table(Tables.MESSAGES)
            .select()
            .eq("project_id", project_id)
            .order("created_at")
            .order("id")
            .execute()
        )
        names = {}
        ids = sorted({str(r["user_id"]) for r in rows})
        if ids:
            for p in self._gw.table(Tables.PROFILES).select("id, email, full_name").in_("id", ids).execute():
                names[str(p["id"])] = p.get("full_name") or p.get("email") or ""
        return [Message.from_row(r, names.get(str(r["user_id"]), "")) for r in rows]

    def add_message(self, project_id: int, user_id: str, text: str) -> Message:
        row = self._gw.table(Tables.MESSAGES).insert({
            "project_id": project_id,
            "user_id": user_id,
            "message": text,
            "created_at": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        }).execute()[0]
        return Message.from_row(row)
