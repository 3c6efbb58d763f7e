# Rev 0.2.0
# clientdesk: project detail window, Overview | Roadmap | Chat | Documents
from __future__ import annotations

from PySide6.QtCore import Qt, QUrl, Signal
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import (
    QComboBox, QFormLayout, QGroupBox, QHBoxLayout, QLabel, QLineEdit,
    QListWidget, QListWidgetItem, QPushButton, QTabWidget, QTableWidget,
    QTableWidgetItem, QHeaderView, QVBoxLayout, QWidget,
)

from clientdesk.models.types import PHASE_STATUS_LABELS, PROJECT_STATUS_LABELS
from clientdesk.services.project_service import ProjectBundle
from clientdesk.viewmodels.project_detail_viewmodel import ProjectDetailViewModel


class ProjectDetailWindow(QWidget):
    editRequested = Signal(int)  # project_id

    def __init__(self, vm: ProjectDetailViewModel, project_id: int, parent: QWidget | None = None):
        super().__init__(parent)
        self.setWindowFlag(Qt.Window, True)
        self.setAttribute(Qt.WA_DeleteOnClose, True)
        self.resize(960, 680)
        self._vm = vm
        self._project_id = project_id

        self._title = QLabel("Loading...")
        self._error = QLabel("")
        self._error.setStyleSheet("color: #b00020;")
        self._error.hide()
        self._btn_edit = QPushButton("Edit Project")
        self._btn_edit.clicked.connect(lambda: self.editRequested.emit(self._project_id))
        self._btn_edit.setVisible(vm.can_edit)

        top = QHBoxLayout()
        top.addWidget(self._title, 1)
        top.addWidget(self._btn_edit)

        self._tabs = QTabWidget(self)
        self._tabs.addTab(self._build_overview(), "Overview")
        self._tabs.addTab(self._build_roadmap(), "Roadmap")
        self._tabs.addTab(self._build_chat(), "Chat")
        self._tabs.addTab(self._build_documents(), "Documents")

        lay = QVBoxLayout(self)
        lay.addLayout(top)
        lay.addWidget(self._error)
        lay.addWidget(self._tabs)

        vm.loaded.connect(self._on_loaded)
        vm.messagesReloaded.connect(self._fill_messages)
        # queued: a status combo inside the table triggers this reload
        vm.phasesReloaded.connect(self._fill_phases, Qt.QueuedConnection)
        vm.errorChanged.connect(self._show_error)
        vm.open(project_id)

    # ---------- tabs ----------
    def _build_overview(self) -> QWidget:
        w = QWidget()
        self._lbl_desc = QLabel("-")
        self._lbl_desc.setWordWrap(True)
        self._lbl_status = QLabel("-")
        self._lbl_deadline = QLabel("-")
        self._lbl_progress = QLabel("-")
        form = QFormLayout()
        form.addRow("Description:", self._lbl_desc)
        form.addRow("Status:", self._lbl_status)
        form.addRow("Due:", self._lbl_deadline)
        form.addRow("Progress:", self._lbl_progress)
        box = QGroupBox("Project Summary")
        box.setLayout(form)

        self._team = QListWidget()
        team_box = QGroupBox("Team")
        QVBoxLayout(team_box).addWidget(self._team)

        v = QVBoxLayout(w)
        v.addWidget(box)
        v.addWidget(team_box)
        return w

    def _build_roadmap(self) -> QWidget:
        w = QWidget()
        self._tbl_phases = QTableWidget(0, 4)
        self._tbl_phases.setHorizontalHeaderLabels(["#", "Phase", "Description", "Status"])
        self._tbl_phases.verticalHeader().setVisible(False)
        self._tbl_phases.setEditTriggers(QTableWidget.NoEditTriggers)
        h = self._tbl_phases.horizontalHeader()
        h.setSectionResizeMode(0, QHeaderView.ResizeToContents)
        h.setSectionResizeMode(1, QHeaderView.ResizeToContents)
        h.setSectionResizeMode(2, QHeaderView.Stretch)
        h.setSectionResizeMode(3, QHeaderView.ResizeToContents)
        QVBoxLayout(w).addWidget(self._tbl_phases)
        return w

    def _build_chat(self) -> QWidget:
        w = QWidget()
        self._chat = QListWidget()
        self._chat.setWordWrap(True)
        self._chat_input = QLineEdit()
        self._chat_input.setPlaceholderText("Type your message...")
        btn = QPushButton("Send")
        btn.clicked.connect(self._send)
        self._chat_input.returnPressed.connect(self._send)
        row = QHBoxLayout()
        row.addWidget(self._chat_input, 1)
        row.addWidget(btn)
        v = QVBoxLayout(w)
        v.addWidget(self._chat)
        v.addLayout(row)
        return w

    def _build_documents(self) -> QWidget:
        w = QWidget()
        self._docs = QListWidget()
        self._docs.itemDoubleClicked.connect(self._open_document)
        QVBoxLayout(w).addWidget(self._docs)
        return w

    # ---------- fill ----------
    def _on_loaded(self, bundle: ProjectBundle) -> None:
        p = bundle.project
        if p is None:
            self._title.setText("<h2>Project not found</h2>")
            self._tabs.setEnabled(False)
            self._btn_edit.hide()
            return
        self.setWindowTitle(f"clientdesk - {p.name}")
        self._title.setText(f"<h2>{p.name}</h2>")
        self._lbl_desc.setText(p.description or "-")
        self._lbl_status.setText(PROJECT_STATUS_LABELS.get(p.status, p.status))
        self._lbl_deadline.setText(p.deadline or "-")
        self._lbl_progress.setText(f"{p.progress}%")

        self._team.clear()
        for m in bundle.members:
            name = m.profile.display_name if m.profile else m.user_id
            self._team.addItem(f"{name} ({m.role})")

        self._fill_phases(bundle.phases)
        self._fill_messages(bundle.messages)

        self._docs.clear()
        for d in bundle.documents:
            item = QListWidgetItem(f"{d.name}  ({(d.created_at or '')[:10]})")
            item.setToolTip(d.description or d.url)
            item.setData(Qt.UserRole, d.url)
            self._docs.addItem(item)

    def _fill_phases(self, phases: list) -> None:
        self._tbl_phases.setRowCount(0)
        for p in phases:
            r = self._tbl_phases.rowCount()
            self._tbl_phases.insertRow(r)
            self._tbl_phases.setItem(r, 0, QTableWidgetItem(str(p.order_num)))
            self._tbl_phases.setItem(r, 1, QTableWidgetItem(p.name))
            self._tbl_phases.setItem(r, 2, QTableWidgetItem(p.description))
            if self._vm.can_edit:
                cb = QComboBox()
                for key, label in PHASE_STATUS_LABELS.items():
                    cb.addItem(label, key)
                cb.setCurrentIndex(max(cb.findData(p.status), 0))
                cb.currentIndexChanged.connect(
                    lambda _i, pid=p.id, c=cb: self._vm.change_phase_status(pid, c.currentData())
                )
                self._tbl_phases.setCellWidget(r, 3, cb)
            else:
                self._tbl_phases.setItem(r, 3, QTableWidgetItem(PHASE_STATUS_LABELS.get(p.status, p.status)))

    def _fill_messages(self, messages: list) -> None:
        self._chat.clear()
        for m in messages:
            when = (m.created_at or "")[11:16]
            item = QListWidgetItem(f"{m.author_name or '?'}  {when}\n{m.message}")
            if self._vm.is_own_message(m):
                item.setTextAlignment(Qt.AlignRight)
            self._chat.addItem(item)
        self._chat.scrollToBottom()

    # ---------- actions ----------
    def reload(self) -> None:
        self._vm.reload()

    def _send(self) -> None:
        if self._vm.send_message(self._chat_input.text()):
            self._chat_input.clear()

    def _open_document(self, item: QListWidgetItem) -> None:
        url = item.data(Qt.UserRole)
        if url:
            QDesktopServices.openUrl(QUrl(url))

    def _show_error(self, text: str) -> None:
        self._error.setText(text)
        self._error.setVisible(bool(text))

    def closeEvent(self, event) -> None:
        self._vm.close()
        super().closeEvent(event)
