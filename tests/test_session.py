# tests/test_session.py
from __future__ import annotations

import pytest

from clientdesk.services.session import hash_password, verify_password
from clientdesk.services.validation import ValidationError, validate_signup
from clientdesk.viewmodels.auth_viewmodel import AuthViewModel


def test_password_hash_roundtrip():
    digest, salt = hash_password("s3cret!")
    assert verify_password("s3cret!", digest, salt)
    assert not verify_password("s3cret?", digest, salt)
    assert hash_password("s3cret!")[0] != digest  # fresh salt each time


def test_sign_up_then_sign_in(sessions):
    changes = []
    sessions.on_change(changes.append)

    res = sessions.sign_up("Ann@Example.com ", "hunter22", {"full_name": "Ann", "role": "freelancer"})
    assert res.ok
    assert sessions.current_user()["email"] == "ann@example.com"
    assert sessions.current_profile().role == "freelancer"

    sessions.sign_out()
    assert sessions.session is None
    assert sessions.current_user() is None

    assert sessions.sign_in("ann@example.com", "hunter22").ok
    assert sessions.session.profile.full_name == "Ann"
    assert [c is not None for c in changes] == [True, False, True]


def test_sign_in_rejects_bad_password(sessions):
    sessions.sign_up("bo@example.com", "hunter22", {"full_name": "Bo"})
    sessions.sign_out()
    res = sessions.sign_in("bo@example.com", "wrong-one")
    assert not res.ok
    assert res.error == "Invalid login credentials"
    assert sessions.session is None


def test_sign_up_duplicate_and_short_password(sessions):
    assert sessions.sign_up("cy@example.com", "hunter22").ok
    dup = sessions.sign_up("cy@example.com", "hunter22")
    assert not dup.ok and dup.error == "User already registered"
    short = sessions.sign_up("dee@example.com", "abc")
    assert not short.ok and "at least 6" in short.error


def test_oauth_creates_profile_once(sessions):
    assert sessions.sign_in_with_oauth("google", "g@example.com", "Gee").ok
    first = sessions.session.user_id
    sessions.sign_out()
    assert sessions.sign_in_with_oauth("google", "G@example.com").ok
    assert sessions.session.user_id == first
    assert sessions.session.role == "client"
    assert not sessions.sign_in_with_oauth("github", "g@example.com").ok


def test_oauth_account_cannot_use_password_login(sessions):
    sessions.sign_in_with_oauth("google", "g@example.com")
    sessions.sign_out()
    assert sessions.sign_in("g@example.com", "").error == "Invalid login credentials"


def test_refresh_picks_up_role_change(sessions, gateway, add_user):
    add_user("zed", "client")
    sessions.load("zed")
    gateway.table("profiles").update({"role": "admin"}).eq("id", "zed").execute()
    assert sessions.refresh().is_admin


def test_load_unknown_user_clears(sessions, add_user):
    sessions.load(add_user("x1"))
    assert sessions.load("missing") is None
    assert sessions.session is None


@pytest.mark.parametrize(
    "kwargs,message",
    [
        (dict(confirm_password="other1"), "Passwords do not match"),
        (dict(password="abc", confirm_password="abc"), "Password must be at least 6 characters"),
        (dict(email="not-an-email"), "Enter a valid email address"),
        (dict(full_name=" "), "Full name is required"),
        (dict(role="admin-ish"), "Unknown role: admin-ish"),
    ],
)
def test_signup_validation(kwargs, message):
    base = dict(full_name="Ann", email="ann@example.com", password="hunter22", confirm_password="hunter22", role="client")
    base.update(kwargs)
    with pytest.raises(ValidationError, match=message):
        validate_signup(**base)


def test_auth_viewmodel_flow(sessions):
    vm = AuthViewModel(sessions)
    errors, events = [], []
    vm.errorChanged.connect(errors.append)
    vm.signedIn.connect(lambda: events.append("in"))
    vm.signedOut.connect(lambda: events.append("out"))

    assert not vm.sign_up(full_name="Ann", email="ann@example.com", password="hunter22",
                          confirm_password="hunter23", role="client")
    assert errors[-1] == "Passwords do not match"
    assert sessions.session is None  # validation blocks before any store call

    assert vm.sign_up(full_name="Ann", email="ann@example.com", password="hunter22",
                      confirm_password="hunter22", role="client")
    vm.sign_out()
    assert not vm.sign_in("ann@example.com", "nope-nope")
    assert errors[-1] == "Invalid login credentials"
    assert vm.sign_in("ann@example.com", "hunter22")
    assert events == ["in", "out", "in"]
    assert not vm.busy


def test_profile_repository_hides_credentials(sessions, gateway):
    from clientdesk.repositories.sqlite_profile_repository import SQLiteProfileRepository

    sessions.sign_up("kim@example.com", "hunter22", {"full_name": "Kim", "role": "client"})
    repo = SQLiteProfileRepository(gateway)
    prof = repo.get_profile(sessions.session.user_id)
    assert (prof.full_name, prof.role) == ("Kim", "client")
    row = gateway.table("profiles").select("id, password_hash").eq("id", prof.id).single()
    assert row["password_hash"]  # stored, but never selected by the repository
    assert repo.get_profile("nobody") is None
    assert [p.email for p in repo.list_profiles(exclude_user_id=prof.id)] == []
