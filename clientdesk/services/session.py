# Rev 0.2.0
"""Session handle and local identity provider (Rev 0.2.0)

`SessionStore` owns the lifecycle: load on sign-in (or explicit `load()`),
clear on sign-out. Screens receive the read-only `Session` it hands out and
never reach for a global.
"""
from __future__ import annotations
import base64
import hashlib
import hmac
import logging
import secrets
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from clientdesk.models.entities import Profile
from clientdesk.models.types import Tables
from clientdesk.repositories.gateway import GatewayError
from clientdesk.services.validation import MIN_PASSWORD_LENGTH

log = logging.getLogger(__name__)

_PBKDF2_ROUNDS = 310_000
OAUTH_PROVIDERS = ("google",)


def hash_password(password: str, salt_b64: Optional[str] = None) -> Tuple[str, str]:
    salt = base64.b64decode(salt_b64) if salt_b64 else secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ROUNDS)
    return base64.b64encode(digest).decode("utf-8"), base64.b64encode(salt).decode("utf-8")


def verify_password(password: str, expected_hash: str, salt_b64: str) -> bool:
    computed, _ = hash_password(password, salt_b64)
    return hmac.compare_digest(computed, expected_hash)


@dataclass(frozen=True)
class Session:
    user_id: str
    email: str
    profile: Profile

    @property
    def role(self) -> str:
        return self.profile.role

    @property
    def is_admin(self) -> bool:
        return self.profile.is_admin


class AuthResult(NamedTuple):
    ok: bool
    error: Optional[str] = None


class SessionStore:
    def __init__(self, gateway, *, min_password_length: int = MIN_PASSWORD_LENGTH):
        self._gw = gateway
        self._min_len = min_password_length
        self._session: Optional[Session] = None
        self._listeners: List[Callable[[Optional[Session]], None]] = []

    # ---------- read side ----------

    @property
    def session(self) -> Optional[Session]:
        return self._session

    def current_user(self) -> Optional[Dict[str, str]]:
        if self._session is None:
            return None
        return {"id": self._session.user_id, "email": self._session.email}

    def current_profile(self) -> Optional[Profile]:
        return self._session.profile if self._session else None

    def on_change(self, listener: Callable[[Optional[Session]], None]) -> None:
        self._listeners.append(listener)

    # ---------- lifecycle ----------

    def load(self, user_id: str) -> Optional[Session]:
        """(Re)load the profile for user_id and make it the current session."""
        row = self._gw.table(Tables.PROFILES).select().eq("id", user_id).maybe_single()
        if row is None:
            self.clear()
            return None
        profile = Profile.from_row(row)
        self._set(Session(user_id=profile.id, email=profile.email, profile=profile))
        return self._session

    def refresh(self) -> Optional[Session]:
        if self._session is None:
            return None
        return self.load(self._session.user_id)

    def clear(self) -> None:
        self._set(None)

    def _set(self, session: Optional[Session]) -> None:
        self._session = session
        for fn in list(self._listeners):
            fn(session)

    # ---------- identity operations ----------

    def sign_in(self, email: str, password: str) -> AuthResult:
        email = (email or "").strip().lower()
        try:
            row = self._gw.table(Tables.PROFILES).select().eq("email", email).maybe_single()
        except GatewayError as exc:
            return AuthResult(False, str(exc))
        if not row or not row.get("password_hash") or not verify_password(
            password or "", row["password_hash"], row["password_salt"]
        ):
            log.info("Sign-in rejected for %s", email)
            return AuthResult(False, "Invalid login credentials")
        self.load(str(row["id"]))
        log.info("Signed in %s", email)
        return AuthResult(True)

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, str]] = None) -> AuthResult:
        metadata = metadata or {}
        email = (email or "").strip().lower()
        if len(password or "") < self._min_len:
            return AuthResult(False, f"Password should be at least {self._min_len} characters")
        try:
            if self._gw.table(Tables.PROFILES).select("id").eq("email", email).maybe_single():
                return AuthResult(False, "User already registered")
            pw_hash, salt = hash_password(password)
            row = self._gw.table(Tables.PROFILES).insert({
                "id": str(uuid.uuid4()),
                "email": email,
                "full_name": metadata.get("full_name", ""),
                "role": metadata.get("role", "client"),
                "password_hash": pw_hash,
                "password_salt": salt,
                "auth_provider": "email",
            }).execute()[0]
        except GatewayError as exc:
            return AuthResult(False, str(exc))
        self.load(str(row["id"]))
        log.info("Signed up %s as %s", email, row["role"])
        return AuthResult(True)

    def sign_in_with_oauth(self, provider: str, email: str, full_name: str = "") -> AuthResult:
        """Complete an OAuth sign-in for an identity the provider already verified."""
        if provider not in OAUTH_PROVIDERS:
            return AuthResult(False, f"Unsupported provider: {provider}")
        email = (email or "").strip().lower()
        if not email:
            return AuthResult(False, "Provider returned no email")
        try:
            row = self._gw.table(Tables.PROFILES).select().eq("email", email).maybe_single()
            if row is None:
                row = self._gw.table(Tables.PROFILES).insert({
                    "id": str(uuid.uuid4()),
                    "email": email,
                    "full_name": full_name,
                    "role": "client",
                    "auth_provider": provider,
                }).execute()[0]
        except GatewayError as exc:
            return AuthResult(False, str(exc))
        self.load(str(row["id"]))
        return AuthResult(True)

    def sign_out(self) -> AuthResult:
        if self._session is not None:
            log.info("Signed out %s", self._session.email)
        self.clear()
        return AuthResult(True)
