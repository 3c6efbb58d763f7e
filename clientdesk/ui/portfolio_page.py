# Rev 0.2.0
# clientdesk/ui/portfolio_page.py
from __future__ import annotations

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QComboBox, QFormLayout, QGroupBox, QHBoxLayout, QLabel, QLineEdit,
    QListWidget, QListWidgetItem, QPushButton, QTextEdit, QVBoxLayout, QWidget,
)

from clientdesk.viewmodels.portfolio_viewmodel import PortfolioViewModel

_PROJECT_TYPES = ["", "Web Application", "Mobile App", "Machine Learning", "Consulting", "Other"]


class PortfolioPage(QWidget):
    showLogin = Signal()

    def __init__(self, vm: PortfolioViewModel, parent: QWidget | None = None):
        super().__init__(parent)
        self._vm = vm

        self._list = QListWidget(self)
        box_projects = QGroupBox("Featured Projects")
        v = QVBoxLayout(box_projects)
        v.addWidget(self._list)

        self._name = QLineEdit()
        self._email = QLineEdit()
        self._type = QComboBox()
        for t in _PROJECT_TYPES:
            self._type.addItem(t or "Select project type", t)
        self._message = QTextEdit()
        self._message.setAcceptRichText(False)
        self._status = QLabel("")
        self._status.setWordWrap(True)
        self._btn_send = QPushButton("Send Message")
        self._btn_send.clicked.connect(self._submit)

        box_contact = QGroupBox("Get In Touch")
        form = QFormLayout(box_contact)
        form.addRow("Name:", self._name)
        form.addRow("Email:", self._email)
        form.addRow("Project Type:", self._type)
        form.addRow("Message:", self._message)
        form.addRow(self._status)
        form.addRow(self._btn_send)

        btn_login = QPushButton("Client Login")
        btn_login.clicked.connect(self.showLogin.emit)
        top = QHBoxLayout()
        top.addWidget(QLabel("<h2>Portfolio</h2>"))
        top.addStretch(1)
        top.addWidget(btn_login)

        lay = QVBoxLayout(self)
        lay.addLayout(top)
        body = QHBoxLayout()
        body.addWidget(box_projects, 3)
        body.addWidget(box_contact, 2)
        lay.addLayout(body)

        vm.showcaseReloaded.connect(self._fill)
        vm.contactStatusChanged.connect(self._show_status)
        vm.contactBusyChanged.connect(lambda busy: self._btn_send.setEnabled(not busy))

    def load(self) -> None:
        self._vm.load_showcase()

    def _fill(self, rows: list) -> None:
        self._list.clear()
        if not rows:
            self._list.addItem("No projects to show yet.")
            return
        for p in rows:
            stack = ", ".join(p.tech_stack)
            text = f"{p.title}  [{p.category or 'Project'}]\n{p.description}"
            if stack:
                text += f"\n{stack}"
            item = QListWidgetItem(text)
            item.setToolTip(p.demo_url or p.github_url or "")
            self._list.addItem(item)

    def _submit(self) -> None:
        ok = self._vm.submit_contact({
            "name": self._name.text(),
            "email": self._email.text(),
            "project_type": self._type.currentData(),
            "message": self._message.toPlainText(),
        })
        if ok:
            self._name.clear()
            self._email.clear()
            self._type.setCurrentIndex(0)
            self._message.clear()

    def _show_status(self, kind: str, message: str) -> None:
        color = {"success": "#1b5e20", "error": "#b00020"}.get(kind, "")
        self._status.setStyleSheet(f"color: {color};" if color else "")
        self._status.setText(message)
