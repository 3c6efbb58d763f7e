# Rev 0.2.0
# clientdesk – SQLiteDocumentRepository (Rev 0.2.0)
from __future__ import annotations
from typing import List, Optional

from clientdesk.models.entities import Document
from clientdesk.models.types import Tables


class SQLiteDocumentRepository:
    """
    Document metadata for a project. The file itself lives at `url`
    (object storage or a local path); only the listing is managed here.
    """

    def __init__(self, gateway):
        self._gw = gateway

    def list_documents(self, project_id: int) -> List[Document]:
        """Newest first."""
        rows = (
            self._gw.table(Tables.DOCUMENTS)
            .select()
            .eq("project_id", project_id)
            .order("created_at", ascending=False)
            .order("id", ascending=False)
            .execute()
        )
        return [Document.from_row(r) for r in rows]

    def add_document(
        self,
        project_id: int,
        *,
        name: str,
        url: str,
        description: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> Document:
        row = self._gw.table(Tables.DOCUMENTS).insert({
            "project_id": project_id,
            "name": name,
            "url": url,
            "description": description,
            "uploaded_by": uploaded_by,
        }).execute()[0]
        return Document.from_row(row)
