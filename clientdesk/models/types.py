# clientdesk type definitions
# Rev 0.2.0

from __future__ import annotations
from typing import Literal

UserRole = Literal["admin", "freelancer", "client"]
ProjectStatus = Literal["planning", "in_progress", "review", "completed", "on_hold"]
PhaseStatus = Literal["pending", "in_progress", "completed"]
ChangeEvent = Literal["INSERT", "UPDATE", "DELETE"]


class Tables:
    PROFILES = "profiles"
    PROJECTS = "projects"
    PROJECT_MEMBERS = "project_members"
    PROJECT_PHASES = "project_phases"
    DOCUMENTS = "documents"
    MESSAGES = "messages"
    SHOWCASE_PROJECTS = "showcase_projects"
    CONTACT_SUBMISSIONS = "contact_submissions"


USER_ROLES: tuple[str, ...] = ("admin", "freelancer", "client")
PROJECT_STATUSES: tuple[str, ...] = ("planning", "in_progress", "review", "completed", "on_hold")
PHASE_STATUSES: tuple[str, ...] = ("pending", "in_progress", "completed")

PROJECT_STATUS_LABELS = {
    "planning": "Planning",
    "in_progress": "In Progress",
    "review": "In Review",
    "completed": "Completed",
    "on_hold": "On Hold",
}

PHASE_STATUS_LABELS = {
    "pending": "Pending",
    "in_progress": "In Progress",
    "completed": "Completed",
}

# role label given to the creator's own membership row
OWNER_MEMBER_ROLE = "Admin"
