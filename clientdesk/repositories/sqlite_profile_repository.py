# Rev 0.2.0
# clientdesk – SQLiteProfileRepository (Rev 0.2.0)
from __future__ import annotations
from typing import List, Optional

from clientdesk.models.entities import Profile
from clientdesk.models.types import Tables

_PUBLIC_COLS = "id, email, full_name, role, avatar_url"


class SQLiteProfileRepository:
    """
    Read access to 'profiles'. Credential columns are never selected here;
    services/session.py owns those.
    """

    def __init__(self, gateway):
        self._gw = gateway

    def get_profile(self, user_id: str) -> Optional[Profile]:
        row = self._gw.table(Tables.PROFILES).select(_PUBLIC_COLS).eq("id", user_id).maybe_single()
        return Profile.from_row(row) if row else None

    def list_profiles(self, *, exclude_user_id: Optional[str] = None) -> List[Profile]:
        """Everyone except (optionally) the acting user; used by the member picker."""
        q = self._gw.table(Tables.PROFILES).select(_PUBLIC_COLS)
        if exclude_user_id is not None:
            q = q.neq("id", exclude_user_id)
        return [Profile.from_row(r) for r in q.order("full_name").execute()]

