# Rev 0.2.0
"""Client-side form checks. Everything here runs before any gateway call."""
from __future__ import annotations
import re
from datetime import date
from typing import Any, Dict, Mapping

from clientdesk.models.types import PHASE_STATUSES, PROJECT_STATUSES, USER_ROLES

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_PASSWORD_LENGTH = 6


class ValidationError(ValueError):
    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


def _required(values: Mapping[str, Any], name: str, label: str) -> str:
    v = values.get(name)
    v = "" if v is None else str(v).strip()
    if not v:
        raise ValidationError(f"{label} is required", field=name)
    return v


def validate_email(email: str) -> str:
    email = (email or "").strip()
    if not email:
        raise ValidationError("Email is required", field="email")
    if not _EMAIL.match(email):
        raise ValidationError("Enter a valid email address", field="email")
    return email.lower()


def validate_login(email: str, password: str) -> tuple[str, str]:
    email = validate_email(email)
    if not password:
        raise ValidationError("Password is required", field="password")
    return email, password


def validate_signup(
    *,
    full_name: str,
    email: str,
    password: str,
    confirm_password: str,
    role: str,
    min_length: int = MIN_PASSWORD_LENGTH,
) -> Dict[str, str]:
    name = _required({"full_name": full_name}, "full_name", "Full name")
    email = validate_email(email)
    if password != confirm_password:
        raise ValidationError("Passwords do not match", field="confirm_password")
    if len(password or "") < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters", field="password")
    if role not in USER_ROLES:
        raise ValidationError(f"Unknown role: {role}", field="role")
    return {"full_name": name, "email": email, "password": password, "role": role}


def validate_project_form(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Returns the cleaned project row (name, description, status, deadline, client_id, progress)."""
    out: Dict[str, Any] = {
        "name": _required(values, "name", "Project name"),
        "description": _required(values, "description", "Description"),
        "status": _required(values, "status", "Status"),
        "deadline": _required(values, "deadline", "Deadline"),
    }
    if out["status"] not in PROJECT_STATUSES:
        raise ValidationError(f"Unknown status: {out['status']}", field="status")
    try:
        date.fromisoformat(out["deadline"])
    except ValueError:
        raise ValidationError("Deadline must be a date (YYYY-MM-DD)", field="deadline") from None

    raw = values.get("progress")
    try:
        progress = int(raw) if raw not in (None, "") else 0
    except (TypeError, ValueError):
        raise ValidationError("Progress must be a number", field="progress") from None
    if not 0 <= progress <= 100:
        raise ValidationError("Progress must be between 0 and 100", field="progress")
    out["progress"] = progress

    client = values.get("client_id")
    out["client_id"] = str(client).strip() if client not in (None, "") else None
    return out


def validate_phase_status(status: str) -> str:
    if status not in PHASE_STATUSES:
        raise ValidationError(f"Unknown phase status: {status}", field="status")
    return status


def validate_contact(values: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "name": _required(values, "name", "Name"),
        "email": validate_email(str(values.get("email") or "")),
        "project_type": (str(values.get("project_type") or "").strip() or None),
        "message": _required(values, "message", "Message"),
    }
