# tests/test_change_notifier.py
from __future__ import annotations

import pytest

from clientdesk.services.change_notifier import ChangeNotifier
from clientdesk.services.reconciler import MemberDraft
from clientdesk.viewmodels.project_detail_viewmodel import ProjectDetailViewModel


def test_subscribe_requires_callback():
    with pytest.raises(ValueError):
        ChangeNotifier().subscribe("messages")


def test_filtered_delivery_and_unsubscribe():
    n = ChangeNotifier()
    got = []
    sub = n.subscribe("messages", "INSERT", {"project_id": 1}, got.append)

    assert n.publish("messages", "INSERT", {"id": 1, "project_id": 1}) == 1
    assert n.publish("messages", "INSERT", {"id": 2, "project_id": 2}) == 0
    assert n.publish("messages", "UPDATE", {"id": 1, "project_id": 1}) == 0
    assert n.publish("documents", "INSERT", {"id": 3, "project_id": 1}) == 0
    assert got == [{"table": "messages", "event": "INSERT", "record": {"id": 1, "project_id": 1}}]

    sub.unsubscribe()
    assert not sub.active
    assert n.subscriber_count("messages") == 0
    assert n.publish("messages", "INSERT", {"id": 4, "project_id": 1}) == 0
    sub.unsubscribe()  # second call is a no-op


def test_failing_callback_does_not_block_others(caplog):
    n = ChangeNotifier()
    got = []

    def broken(_payload):
        raise RuntimeError("boom")

    n.subscribe("messages", "INSERT", None, broken)
    n.subscribe("messages", "INSERT", None, got.append)
    assert n.publish("messages", "INSERT", {"id": 1}) == 1
    assert len(got) == 1
    assert "failed" in caplog.text


# --- chat subscription held by the detail screen ---------------------------

@pytest.fixture()
def chat_project(service, people, login, project_form):
    project = service.create_project(
        login("admin"), project_form, members=[MemberDraft(user_id="alice", role="dev")]
    )
    return project.id


def test_detail_reloads_chat_once_per_insert(service, sessions, notifier, login, chat_project):
    login("alice")
    vm = ProjectDetailViewModel(service, sessions, notifier)
    reloads = []
    vm.messagesReloaded.connect(lambda rows: reloads.append([m.message for m in rows]))

    vm.open(chat_project)
    assert vm.subscribed
    assert vm.send_message("first") is True
    assert vm.send_message("   ") is False
    # another member posting through the service reaches this screen too
    service.post_message(login("admin"), chat_project, "second")

    assert reloads == [["first"], ["first", "second"]]


def test_detail_close_releases_subscription(service, sessions, notifier, login, chat_project):
    admin = login("admin")
    vm = ProjectDetailViewModel(service, sessions, notifier)
    reloads = []
    vm.messagesReloaded.connect(reloads.append)

    vm.open(chat_project)
    assert notifier.subscriber_count("messages") == 1
    vm.close()
    assert notifier.subscriber_count("messages") == 0
    assert not vm.subscribed

    service.post_message(admin, chat_project, "nobody listening")
    assert reloads == []


def test_detail_ignores_other_projects(service, sessions, notifier, login, chat_project, project_form):
    admin = login("admin")
    other = service.create_project(admin, dict(project_form, name="Other")).id
    vm = ProjectDetailViewModel(service, sessions, notifier)
    reloads = []
    vm.messagesReloaded.connect(reloads.append)
    vm.open(chat_project)

    service.post_message(admin, other, "elsewhere")
    assert reloads == []


def test_detail_for_non_member(service, sessions, notifier, login, chat_project):
    login("carol")
    vm = ProjectDetailViewModel(service, sessions, notifier)
    errors, bundles = [], []
    vm.errorChanged.connect(errors.append)
    vm.loaded.connect(bundles.append)

    vm.open(chat_project)
    assert bundles[0].project is None
    assert errors == ["You are not a member of this project"]
    vm.close()
