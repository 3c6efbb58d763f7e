# Rev 0.2.0
"""Project create / edit / detail orchestration (Rev 0.2.0)

Loads fan out in parallel and degrade per collection: a failed read is
logged and replaced by an empty default.

Saves are sequential and non-transactional. Per collection: delete removed
rows, update kept rows, insert new rows in one batch. The first failing
write raises ProjectSaveError; writes that already succeeded stay.
"""
from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from clientdesk.models.entities import Document, Membership, Message, Phase, Profile, Project
from clientdesk.models.types import OWNER_MEMBER_ROLE
from clientdesk.repositories.gateway import GatewayError
from clientdesk.services import authz
from clientdesk.services.reconciler import (
    MemberDraft,
    PhaseDraft,
    ReconcilePlan,
    reconcile_members,
    reconcile_phases,
)
from clientdesk.services.session import Session
from clientdesk.services.validation import validate_phase_status, validate_project_form

log = logging.getLogger(__name__)


class ProjectSaveError(RuntimeError):
    def __init__(self, message: str, *, step: str = ""):
        super().__init__(message)
        self.step = step


@dataclass
class ProjectBundle:
    project: Optional[Project]
    members: List[Membership] = field(default_factory=list)
    phases: List[Phase] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)
    documents: List[Document] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


@dataclass
class EditSnapshot:
    """What the edit form started from. Ids here drive the delete side of the diff."""
    project: Project
    members: List[MemberDraft]
    phases: List[PhaseDraft]
    member_rows: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    phase_rows: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    protected_member_ids: Tuple[int, ...] = ()

    @property
    def member_ids(self) -> Tuple[int, ...]:
        return tuple(self.member_rows)

    @property
    def phase_ids(self) -> Tuple[int, ...]:
        return tuple(self.phase_rows)


@dataclass
class SaveReport:
    project_id: int
    members: ReconcilePlan
    phases: ReconcilePlan


class ProjectService:
    def __init__(self, *, projects, members, phases, messages, documents, profiles, max_workers: int = 5):
        self._projects = projects
        self._members = members
        self._phases = phases
        self._messages = messages
        self._documents = documents
        self._profiles = profiles
        self._max_workers = max_workers

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def list_dashboard_projects(self, session: Session) -> List[Project]:
        """Admins see everything; everyone else sees projects they belong to."""
        try:
            if authz.is_admin(session):
                return self._projects.list_projects()
            return self._projects.list_projects_for_member(session.user_id)
        except GatewayError:
            log.exception("Error loading projects for %s", session.user_id)
            return []

    def _parallel(self, loaders: Mapping[str, Callable[[], Any]], defaults: Mapping[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
        results: Dict[str, Any] = {}
        failed: List[str] = []
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            futures = {name: pool.submit(fn) for name, fn in loaders.items()}
            for name, fut in futures.items():
                try:
                    results[name] = fut.result()
                except GatewayError:
                    log.exception("Error loading %s", name)
                    results[name] = defaults[name]
                    failed.append(name)
        return results, failed

    def _member_user_ids(self, project_id: int) -> List[str]:
        try:
            return self._members.member_user_ids(project_id)
        except GatewayError:
            log.exception("Error loading members of project %s", project_id)
            return []

    def load_detail(self, session: Session, project_id: int) -> ProjectBundle:
        authz.require(
            authz.can_view_project(session, self._member_user_ids(project_id)),
            "You are not a member of this project",
        )
        loaded, failed = self._parallel(
            {
                "project": lambda: self._projects.get_project(project_id),
                "members": lambda: self._members.list_members(project_id, with_profiles=True),
                "phases": lambda: self._phases.list_phases(project_id),
                "messages": lambda: self._messages.list_messages(project_id),
                "documents": lambda: self._documents.list_documents(project_id),
            },
            {"project": None, "members": [], "phases": [], "messages": [], "documents": []},
        )
        return ProjectBundle(failed=failed, **loaded)

    def load_messages(self, project_id: int) -> List[Message]:
        try:
            return self._messages.list_messages(project_id)
        except GatewayError:
            log.exception("Error loading messages for project %s", project_id)
            return []

    def load_phases(self, project_id: int) -> List[Phase]:
        try:
            return self._phases.list_phases(project_id)
        except GatewayError:
            log.exception("Error loading phases for project %s", project_id)
            return []

    def member_candidates(self, session: Session) -> List[Profile]:
        try:
            return self._profiles.list_profiles(exclude_user_id=session.user_id)
        except GatewayError:
            log.exception("Error loading users")
            return []

    def load_for_edit(self, session: Session, project_id: int) -> EditSnapshot:
        """Raises ProjectSaveError when the project itself cannot be loaded."""
        authz.require(authz.can_edit_project(session), "Only admins can edit projects")
        loaded, failed = self._parallel(
            {
                "project": lambda: self._projects.get_project(project_id),
                "members": lambda: self._members.list_members(project_id, exclude_user_id=session.user_id),
                "own": lambda: [
                    m for m in self._members.list_members(project_id) if m.user_id == session.user_id
                ],
                "phases": lambda: self._phases.list_phases(project_id),
            },
            {"project": None, "members": [], "own": [], "phases": []},
        )
        project = loaded["project"]
        if project is None:
            raise ProjectSaveError("Failed to load project", step="load")

        members: List[Membership] = loaded["members"]
        phases: List[Phase] = loaded["phases"]
        phase_drafts = [
            PhaseDraft(name=p.name, description=p.description, order=p.order_num, status=p.status, id=p.id)
            for p in phases
        ]
        if not phase_drafts:
            phase_drafts = [PhaseDraft()]
        return EditSnapshot(
            project=project,
            members=[MemberDraft(user_id=m.user_id, role=m.role, id=m.id) for m in members],
            phases=phase_drafts,
            member_rows={m.id: {"role": m.role} for m in members},
            phase_rows={
                p.id: {"name": p.name, "description": p.description, "order_num": p.order_num, "status": p.status}
                for p in phases
            },
            protected_member_ids=tuple(m.id for m in loaded["own"]),
        )

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------

    @staticmethod
    def _step(step: str, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except GatewayError as exc:
            log.error("Project save failed at %s: %s", step, exc)
            raise ProjectSaveError(str(exc), step=step) from exc

    def create_project(
        self,
        session: Session,
        form: Mapping[str, Any],
        members: Sequence[MemberDraft] = (),
        phases: Sequence[PhaseDraft] = (),
    ) -> Project:
        authz.require(authz.can_create_project(session), "Only admins can create projects")
        fields = validate_project_form(form)

        project = self._step("project", lambda: self._projects.create_project(fields, created_by=session.user_id))
        team = [{"user_id": session.user_id, "role": OWNER_MEMBER_ROLE}]
        team += [
            r for r in reconcile_members((), members).to_insert if r["user_id"] != session.user_id
        ]
        self._step("members.insert", lambda: self._members.add_members(project.id, team))

        new_phases = reconcile_phases((), phases).to_insert
        if new_phases:
            self._step("phases.insert", lambda: self._phases.add_phases(project.id, new_phases))
        log.info("Project %s created by %s", project.id, session.user_id)
        return project

    def save_project(
        self,
        session: Session,
        snapshot: EditSnapshot,
        form: Mapping[str, Any],
        members: Sequence[MemberDraft],
        phases: Sequence[PhaseDraft],
    ) -> SaveReport:
        authz.require(authz.can_edit_project(session), "Only admins can edit projects")
        fields = validate_project_form(form)
        project_id = int(snapshot.project.id)

        self._step("project", lambda: self._projects.update_project(project_id, fields))

        editable = [m for m in members if m.user_id != session.user_id or m.is_existing]
        drafts = self._step("members.load", lambda: self._adopt_persisted(project_id, editable))
        member_plan = reconcile_members(
            snapshot.member_ids,
            drafts,
            protected_ids=snapshot.protected_member_ids,
        ).without_unchanged(snapshot.member_rows)
        self._apply_members(session, project_id, member_plan)

        phase_plan = reconcile_phases(snapshot.phase_ids, phases).without_unchanged(snapshot.phase_rows)
        self._apply_phases(project_id, phase_plan)

        log.info(
            "Project %s saved: members -%d ~%d +%d, phases -%d ~%d +%d",
            project_id,
            len(member_plan.to_delete), len(member_plan.to_update), len(member_plan.to_insert),
            len(phase_plan.to_delete), len(phase_plan.to_update), len(phase_plan.to_insert),
        )
        return SaveReport(project_id, member_plan, phase_plan)

    def _adopt_persisted(self, project_id: int, drafts: Sequence[MemberDraft]) -> List[MemberDraft]:
        """New drafts whose user already has a row (left by an earlier failed save) become updates of it."""
        by_user = {m.user_id: m.id for m in self._members.list_members(project_id)}
        return [
            d if d.is_existing or d.user_id not in by_user
            else MemberDraft(user_id=d.user_id, role=d.role, id=by_user[d.user_id])
            for d in drafts
        ]

    def _apply_members(self, session: Session, project_id: int, plan: ReconcilePlan) -> None:
        if plan.to_delete:
            self._step(
                "members.delete",
                lambda: self._members.delete_members(project_id, plan.to_delete, protect_user_id=session.user_id),
            )
        for upd in plan.to_update:
            self._step("members.update", lambda u=upd: self._members.update_member(u.id, u.fields))
        if plan.to_insert:
            self._step("members.insert", lambda: self._members.add_members(project_id, plan.to_insert))

    def _apply_phases(self, project_id: int, plan: ReconcilePlan) -> None:
        if plan.to_delete:
            self._step("phases.delete", lambda: self._phases.delete_phases(project_id, plan.to_delete))
        for upd in plan.to_update:
            self._step("phases.update", lambda u=upd: self._phases.update_phase(u.id, u.fields))
        if plan.to_insert:
            self._step("phases.insert", lambda: self._phases.add_phases(project_id, plan.to_insert))

    def change_phase_status(self, session: Session, phase_id: int, status: str) -> bool:
        authz.require(authz.can_change_phase_status(session), "Only admins can change phase status")
        status = validate_phase_status(status)
        return self._step("phases.status", lambda: self._phases.set_status(phase_id, status))

    def post_message(self, session: Session, project_id: int, text: str) -> Optional[Message]:
        text = (text or "").strip()
        if not text:
            return None
        authz.require(
            authz.can_post_message(session, self._members.member_user_ids(project_id)),
            "You are not a member of this project",
        )
        return self._step("messages.insert", lambda: self._messages.add_message(project_id, session.user_id, text))
