# Rev 0.2.0
"""Authorization predicates, checked by services before any gateway write.

Row visibility is not left to the store: each service asks these
predicates first and raises PermissionDenied when they say no.
"""
from __future__ import annotations
from typing import Iterable, Optional

from clientdesk.services.session import Session


class PermissionDenied(PermissionError):
    pass


def is_admin(session: Optional[Session]) -> bool:
    return session is not None and session.is_admin


def can_create_project(session: Optional[Session]) -> bool:
    return is_admin(session)


def can_edit_project(session: Optional[Session]) -> bool:
    return is_admin(session)


def can_view_project(session: Optional[Session], member_user_ids: Iterable[str]) -> bool:
    if session is None:
        return False
    return session.is_admin or session.user_id in {str(u) for u in member_user_ids}


def can_post_message(session: Optional[Session], member_user_ids: Iterable[str]) -> bool:
    return can_view_project(session, member_user_ids)


def can_change_phase_status(session: Optional[Session]) -> bool:
    return is_admin(session)


def require(allowed: bool, message: str = "Not allowed") -> None:
    if not allowed:
        raise PermissionDenied(message)
