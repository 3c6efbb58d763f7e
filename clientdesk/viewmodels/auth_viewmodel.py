# Rev 0.2.0
# clientdesk/viewmodels/auth_viewmodel.py
from __future__ import annotations

from PySide6.QtCore import QObject, Signal

from clientdesk.services.validation import ValidationError, validate_login, validate_signup


class AuthViewModel(QObject):
    """
    Login / sign-up screens.
    Emits:
      - busyChanged(bool)
      - errorChanged(str)      "" clears the message
      - signedIn()
      - signedOut()
    """

    busyChanged = Signal(bool)
    errorChanged = Signal(str)
    signedIn = Signal()
    signedOut = Signal()

    def __init__(self, session_store):
        super().__init__()
        self._store = session_store
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def _set_busy(self, value: bool) -> None:
        self._busy = value
        self.busyChanged.emit(value)

    def _finish(self, result) -> bool:
        if result.ok:
            self._set_busy(False)
            self.signedIn.emit()
            return True
        self.errorChanged.emit(result.error or "Authentication failed")
        self._set_busy(False)
        return False

    # ---- commands ----
    def sign_in(self, email: str, password: str) -> bool:
        self.errorChanged.emit("")
        try:
            email, password = validate_login(email, password)
        except ValidationError as exc:
            self.errorChanged.emit(str(exc))
            return False
        self._set_busy(True)
        return self._finish(self._store.sign_in(email, password))

    def sign_up(self, *, full_name: str, email: str, password: str, confirm_password: str, role: str = "client") -> bool:
        self.errorChanged.emit("")
        try:
            clean = validate_signup(
                full_name=full_name,
                email=email,
                password=password,
                confirm_password=confirm_password,
                role=role,
            )
        except ValidationError as exc:
            self.errorChanged.emit(str(exc))
            return False
        self._set_busy(True)
        return self._finish(
            self._store.sign_up(clean["email"], clean["password"], {"full_name": clean["full_name"], "role": clean["role"]})
        )

    def sign_in_with_oauth(self, provider: str, email: str, full_name: str = "") -> bool:
        self.errorChanged.emit("")
        self._set_busy(True)
        return self._finish(self._store.sign_in_with_oauth(provider, email, full_name))

    def sign_out(self) -> None:
        self._store.sign_out()
        self.signedOut.emit()
