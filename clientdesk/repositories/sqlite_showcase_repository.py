# Rev 0.2.0
# clientdesk – SQLiteShowcaseRepository (Rev 0.2.0)
from __future__ import annotations
from typing import List

from clientdesk.models.entities import ContactSubmission, ShowcaseProject
from clientdesk.models.types import Tables


class SQLiteShowcaseRepository:
    """Public side of the app: portfolio entries and contact form submissions."""

    def __init__(self, gateway):
        self._gw = gateway

    def list_active(self) -> List[ShowcaseProject]:
        rows = (
            self._gw.table(Tables.SHOWCASE_PROJECTS)
            .select()
            .eq("is_active", 1)
            .order("display_order")
            .execute()
        )
        return [ShowcaseProject.from_row(r) for r in rows]

    def submit_contact(self, submission: ContactSubmission) -> ContactSubmission:
        """Insert; the outbound notification email hangs off the insert event."""
        row = self._gw.table(Tables.CONTACT_SUBMISSIONS).insert(submission.to_row()).execute()[0]
        return ContactSubmission(
            id=int(row["id"]),
            name=row["name"],
            email=row["email"],
            project_type=row.get("project_type"),
            message=row["message"],
            created_at=row.get("created_at"),
        )
