# Rev 0.2.0
"""Typed records for gateway rows (schema 0001).

Rows come back from the gateway as plain dicts; each entity maps one table
and keeps required vs optional fields explicit.
"""
from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class Profile:
    id: str
    email: str
    full_name: str = ""
    role: str = "client"
    avatar_url: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Profile":
        return cls(
            id=str(row["id"]),
            email=row.get("email") or "",
            full_name=row.get("full_name") or "",
            role=row.get("role") or "client",
            avatar_url=row.get("avatar_url"),
        )


@dataclass
class Project:
    id: int | None
    name: str
    description: str = ""
    status: str = "planning"
    deadline: Optional[str] = None
    client_id: Optional[str] = None
    progress: int = 0
    created_by: Optional[str] = None
    created_at: Optional[str] = None

    # editable through the create/edit form
    FORM_FIELDS = ("name", "description", "status", "deadline", "client_id", "progress")

    def form_values(self) -> Dict[str, Any]:
        return {f: getattr(self, f) for f in self.FORM_FIELDS}

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Project":
        return cls(
            id=int(row["id"]),
            name=row.get("name") or "",
            description=row.get("description") or "",
            status=row.get("status") or "planning",
            deadline=row.get("deadline"),
            client_id=row.get("client_id"),
            progress=int(row.get("progress") or 0),
            created_by=row.get("created_by"),
            created_at=row.get("created_at"),
        )


@dataclass
class Membership:
    id: int | None
    project_id: int
    user_id: str
    role: str
    profile: Optional[Profile] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any], profile: Optional[Profile] = None) -> "Membership":
        return cls(
            id=int(row["id"]),
            project_id=int(row["project_id"]),
            user_id=str(row["user_id"]),
            role=row.get("role") or "",
            profile=profile,
        )


@dataclass
class Phase:
    id: int | None
    project_id: int
    name: str
    description: str = ""
    order_num: int = 1
    status: str = "pending"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Phase":
        return cls(
            id=int(row["id"]),
            project_id=int(row["project_id"]),
            name=row.get("name") or "",
            description=row.get("description") or "",
            order_num=int(row.get("order_num") or 1),
            status=row.get("status") or "pending",
        )


@dataclass
class Message:
    id: int
    project_id: int
    user_id: str
    message: str
    created_at: str
    author_name: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any], author_name: str = "") -> "Message":
        return cls(
            id=int(row["id"]),
            project_id=int(row["project_id"]),
            user_id=str(row["user_id"]),
            message=row.get("message") or "",
            created_at=row.get("created_at") or "",
            author_name=author_name,
        )


@dataclass
class Document:
    id: int
    project_id: int
    name: str
    url: str
    description: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Document":
        return cls(
            id=int(row["id"]),
            project_id=int(row["project_id"]),
            name=row.get("name") or "",
            url=row.get("url") or "",
            description=row.get("description"),
            created_at=row.get("created_at"),
        )


@dataclass
class ShowcaseProject:
    id: int
    title: str
    description: str = ""
    category: Optional[str] = None
    tech_stack: List[str] = field(default_factory=list)
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    display_order: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ShowcaseProject":
        stack = row.get("tech_stack") or "[]"
        if isinstance(stack, str):
            try:
                stack = json.loads(stack)
            except ValueError:
                stack = [s.strip() for s in stack.split(",") if s.strip()]
        return cls(
            id=int(row["id"]),
            title=row.get("title") or "",
            description=row.get("description") or "",
            category=row.get("category"),
            tech_stack=list(stack),
            image_url=row.get("image_url"),
            demo_url=row.get("demo_url"),
            github_url=row.get("github_url"),
            display_order=int(row.get("display_order") or 0),
        )


@dataclass
class ContactSubmission:
    name: str
    email: str
    message: str
    project_type: Optional[str] = None
    id: int | None = None
    created_at: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "project_type": self.project_type or None,
            "message": self.message,
        }
