# tests/test_viewmodels.py
# Editor / dashboard / portfolio view models driven without any widgets

from __future__ import annotations

import pytest

from clientdesk.repositories.gateway import GatewayError
from clientdesk.repositories.sqlite_showcase_repository import SQLiteShowcaseRepository
from clientdesk.services.reconciler import MemberDraft, PhaseDraft
from clientdesk.viewmodels.dashboard_viewmodel import DashboardViewModel
from clientdesk.viewmodels.portfolio_viewmodel import CONTACT_FAILED, CONTACT_OK, PortfolioViewModel
from clientdesk.viewmodels.project_editor_viewmodel import ProjectEditorViewModel


def _fill(vm, form):
    for k, v in form.items():
        vm.set_field(k, v)


# --- editor -------------------------------------------------------------------

def test_editor_create_flow(service, sessions, gateway, people, login, project_form):
    login("admin")
    vm = ProjectEditorViewModel(service, sessions)
    saved = []
    vm.saved.connect(saved.append)

    assert vm.load() is True
    assert not vm.is_edit
    assert [p.id for p in vm.candidates] == ["alice", "bob", "carol"]
    assert [c.id for c in vm.clients] == ["carol"]
    assert len(vm.phases) == 1 and not vm.can_remove_phase

    _fill(vm, project_form)
    vm.add_member()
    vm.update_member(0, "user_id", "alice")
    vm.update_member(0, "role", "dev")
    vm.add_member()  # left blank, dropped on save
    vm.update_phase(0, "name", "Kickoff")
    vm.add_phase()
    vm.update_phase(1, "name", "Delivery")

    pid = vm.submit()
    assert pid is not None and saved == [pid]
    names = [p.name for p in service.load_phases(pid)]
    assert names == ["Kickoff", "Delivery"]
    members = gateway.table("project_members").select("user_id").eq("project_id", pid).execute()
    assert sorted(r["user_id"] for r in members) == ["admin", "alice"]


def test_editor_edit_flow(service, sessions, gateway, people, login, project_form):
    admin = login("admin")
    project = service.create_project(
        admin, project_form,
        members=[MemberDraft(user_id="alice", role="dev"), MemberDraft(user_id="bob", role="qa")],
        phases=[PhaseDraft(name="A"), PhaseDraft(name="B"), PhaseDraft(name="C")],
    )
    vm = ProjectEditorViewModel(service, sessions)
    assert vm.load(project.id)
    assert vm.is_edit
    assert vm.form["name"] == "Website rebuild"
    assert [m.user_id for m in vm.members] == ["alice", "bob"]

    vm.update_member(0, "user_id", "carol")  # ignored for a persisted row
    vm.update_member(0, "role", "lead")
    vm.remove_member(1)
    vm.remove_phase(1)
    assert [(p.order, p.name) for p in vm.phases] == [(1, "A"), (2, "C")]

    assert vm.submit() == project.id
    rows = gateway.table("project_members").select().eq("project_id", project.id).execute()
    assert {r["user_id"]: r["role"] for r in rows} == {"admin": "Admin", "alice": "lead"}
    assert [(p.order_num, p.name) for p in service.load_phases(project.id)] == [(1, "A"), (2, "C")]


def test_editor_reports_validation_error(service, sessions, people, login, project_form):
    login("admin")
    vm = ProjectEditorViewModel(service, sessions)
    errors, saving = [], []
    vm.errorChanged.connect(errors.append)
    vm.savingChanged.connect(saving.append)
    vm.load()
    _fill(vm, dict(project_form, name=""))

    assert vm.submit() is None
    assert errors[-1] == "Project name is required"
    assert saving == [True, False]
    assert not vm.saving


def test_editor_load_denied_for_non_admin(service, sessions, people, login, project_form):
    project = service.create_project(login("admin"), project_form)
    login("alice")
    vm = ProjectEditorViewModel(service, sessions)
    errors = []
    vm.errorChanged.connect(errors.append)
    assert vm.load(project.id) is False
    assert errors[-1] == "Only admins can edit projects"


def test_editor_keeps_last_phase(service, sessions, people, login):
    login("admin")
    vm = ProjectEditorViewModel(service, sessions)
    vm.load()
    vm.remove_phase(0)
    assert len(vm.phases) == 1


def test_editor_rejects_unknown_field(service, sessions, people, login):
    login("admin")
    vm = ProjectEditorViewModel(service, sessions)
    with pytest.raises(KeyError):
        vm.set_field("budget", 10)
    with pytest.raises(ValueError):
        vm.set_field("status", "shipped")


# --- dashboard ----------------------------------------------------------------

def test_dashboard_rows(service, sessions, people, login, project_form):
    login("admin")
    service.create_project(sessions.session, dict(project_form, status="in_progress"))
    vm = DashboardViewModel(service, sessions)
    got = []
    vm.projectsReloaded.connect(got.append)

    rows = vm.reload()
    assert vm.is_admin and vm.subtitle == "Manage all projects"
    assert [(r["name"], r["status_label"]) for r in rows] == [("Website rebuild", "In Progress")]
    assert got == [rows]

    login("bob")
    assert vm.reload() == []
    assert vm.empty_hint == "You haven't been assigned to any projects yet"

    sessions.sign_out()
    assert vm.reload() == []


# --- portfolio ----------------------------------------------------------------

def test_portfolio_lists_active_in_order(gateway, db):
    db.seed()
    vm = PortfolioViewModel(SQLiteShowcaseRepository(gateway))
    rows = vm.load_showcase()
    assert [r.title for r in rows] == ["Client Dashboard", "Route Planner"]
    assert rows[0].tech_stack == ["Python", "PySide6", "SQLite"]


def test_portfolio_falls_back_to_empty(gateway, monkeypatch):
    repo = SQLiteShowcaseRepository(gateway)

    def boom():
        raise GatewayError("no such table: showcase_projects")

    monkeypatch.setattr(repo, "list_active", boom)
    assert PortfolioViewModel(repo).load_showcase() == []


def test_contact_form(gateway, monkeypatch):
    repo = SQLiteShowcaseRepository(gateway)
    vm = PortfolioViewModel(repo)
    statuses = []
    vm.contactStatusChanged.connect(lambda kind, msg: statuses.append((kind, msg)))

    assert not vm.submit_contact({"name": "", "email": "e@example.com", "message": "hi"})
    assert statuses[-1] == ("error", "Name is required")

    assert vm.submit_contact({"name": "Eve", "email": "e@example.com", "project_type": "", "message": "hi"})
    assert statuses[-1] == ("success", CONTACT_OK)
    row = gateway.table("contact_submissions").select().single()
    assert row["project_type"] is None

    def boom(_sub):
        raise GatewayError("database is locked")

    monkeypatch.setattr(repo, "submit_contact", boom)
    assert not vm.submit_contact({"name": "Eve", "email": "e@example.com", "message": "again"})
    assert statuses[-1] == ("error", CONTACT_FAILED)
