# Rev 0.2.0
# clientdesk/ui/login_widget.py
from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QComboBox, QFormLayout, QHBoxLayout, QInputDialog, QLabel, QLineEdit,
    QPushButton, QTabWidget, QVBoxLayout, QWidget,
)

from clientdesk.viewmodels.auth_viewmodel import AuthViewModel


class LoginWidget(QWidget):
    """Sign in / Sign up tabs. Emits `showPortfolio` for the back link."""

    showPortfolio = Signal()

    def __init__(self, vm: AuthViewModel, parent: QWidget | None = None):
        super().__init__(parent)
        self._vm = vm

        self._error = QLabel("")
        self._error.setStyleSheet("color: #b00020;")
        self._error.setWordWrap(True)
        self._error.hide()

        tabs = QTabWidget(self)
        tabs.addTab(self._build_sign_in(), "Sign In")
        tabs.addTab(self._build_sign_up(), "Sign Up")

        btn_google = QPushButton("Sign in with Google")
        btn_google.clicked.connect(self._google)
        btn_back = QPushButton("← Back to Portfolio")
        btn_back.setFlat(True)
        btn_back.clicked.connect(self.showPortfolio.emit)

        lay = QVBoxLayout(self)
        lay.addWidget(self._error)
        lay.addWidget(tabs)
        row = QHBoxLayout()
        row.addWidget(btn_google)
        row.addStretch(1)
        row.addWidget(btn_back)
        lay.addLayout(row)
        lay.addStretch(1)

        vm.errorChanged.connect(self._show_error)
        vm.busyChanged.connect(self._set_busy)

    def _build_sign_in(self) -> QWidget:
        w = QWidget()
        self._in_email = QLineEdit()
        self._in_email.setPlaceholderText("you@example.com")
        self._in_password = QLineEdit()
        self._in_password.setEchoMode(QLineEdit.Password)
        self._btn_in = QPushButton("Sign In")
        self._btn_in.clicked.connect(
            lambda: self._vm.sign_in(self._in_email.text(), self._in_password.text())
        )
        self._in_password.returnPressed.connect(self._btn_in.click)

        form = QFormLayout(w)
        form.addRow("Email Address:", self._in_email)
        form.addRow("Password:", self._in_password)
        form.addRow(self._btn_in)
        return w

    def _build_sign_up(self) -> QWidget:
        w = QWidget()
        self._up_name = QLineEdit()
        self._up_name.setPlaceholderText("John Doe")
        self._up_email = QLineEdit()
        self._up_email.setPlaceholderText("you@example.com")
        self._up_role = QComboBox()
        self._up_role.addItem("Client", "client")
        self._up_role.addItem("Freelancer", "freelancer")
        self._up_password = QLineEdit()
        self._up_password.setEchoMode(QLineEdit.Password)
        self._up_confirm = QLineEdit()
        self._up_confirm.setEchoMode(QLineEdit.Password)
        self._btn_up = QPushButton("Create Account")
        self._btn_up.clicked.connect(self._sign_up)

        form = QFormLayout(w)
        form.addRow("Full Name:", self._up_name)
        form.addRow("Email Address:", self._up_email)
        form.addRow("I am a:", self._up_role)
        form.addRow("Password:", self._up_password)
        form.addRow("Confirm Password:", self._up_confirm)
        form.addRow(self._btn_up)
        return w

    def _sign_up(self) -> None:
        self._vm.sign_up(
            full_name=self._up_name.text(),
            email=self._up_email.text(),
            password=self._up_password.text(),
            confirm_password=self._up_confirm.text(),
            role=self._up_role.currentData(),
        )

    def _google(self) -> None:
        email, ok = QInputDialog.getText(self, "Sign in with Google", "Google account email:")
        if ok and email.strip():
            self._vm.sign_in_with_oauth("google", email.strip())

    def _show_error(self, text: str) -> None:
        self._error.setText(text)
        self._error.setVisible(bool(text))

    def _set_busy(self, busy: bool) -> None:
        for b in (self._btn_in, self._btn_up):
            b.setEnabled(not busy)
        self.setCursor(Qt.WaitCursor if busy else Qt.ArrowCursor)

    def clear(self) -> None:
        for e in (self._in_password, self._up_password, self._up_confirm):
            e.clear()
        self._show_error("")
