# clientdesk/ui/project_editor_dialog.py
# Rev 0.2.0: create/edit form with project fields, team members, phases
from __future__ import annotations
from typing import Optional

from PySide6.QtCore import QDate
from PySide6.QtWidgets import (
    QComboBox, QDateEdit, QDialog, QDialogButtonBox, QFormLayout, QGridLayout,
    QGroupBox, QLabel, QLineEdit, QPushButton, QScrollArea,
    QSpinBox, QTextEdit, QVBoxLayout, QWidget,
)

from clientdesk.models.types import PHASE_STATUS_LABELS, PROJECT_STATUS_LABELS
from clientdesk.viewmodels.project_editor_viewmodel import ProjectEditorViewModel


class ProjectEditorDialog(QDialog):
    """
    Project Details, Team Members, Project Phases, Save/Cancel.
    All state lives in the view model; the member and phase sections are
    rebuilt when a row is added or removed.
    """

    def __init__(self, *, vm: ProjectEditorViewModel, project_id: Optional[int] = None, parent: QWidget | None = None):
        super().__init__(parent)
        self._vm = vm
        self._project_id = project_id
        self.setWindowTitle("Edit Project" if project_id else "Create Project")
        self.resize(820, 760)

        # ---- error banner ----
        self._error = QLabel("")
        self._error.setStyleSheet("color: #b00020;")
        self._error.setWordWrap(True)
        self._error.hide()

        # ---- project details ----
        self._name = QLineEdit()
        self._status = QComboBox()
        for key, label in PROJECT_STATUS_LABELS.items():
            self._status.addItem(label, key)
        self._desc = QTextEdit()
        self._desc.setAcceptRichText(False)
        self._deadline = QDateEdit()
        self._deadline.setCalendarPopup(True)
        self._deadline.setDisplayFormat("yyyy-MM-dd")
        self._deadline.setDate(QDate.currentDate())
        self._progress = QSpinBox()
        self._progress.setRange(0, 100)
        self._progress.setSuffix(" %")
        self._client = QComboBox()

        details = QGroupBox("Project Details")
        form = QFormLayout(details)
        form.addRow("Project Name *", self._name)
        form.addRow("Status *", self._status)
        form.addRow("Description *", self._desc)
        form.addRow("Deadline *", self._deadline)
        form.addRow("Progress", self._progress)
        form.addRow("Client", self._client)

        # ---- team members ----
        self._members_box = QGroupBox("Team Members")
        self._members_grid = QGridLayout()
        btn_add_member = QPushButton("Add Member")
        btn_add_member.clicked.connect(self._vm.add_member)
        mv = QVBoxLayout(self._members_box)
        mv.addLayout(self._members_grid)
        mv.addWidget(btn_add_member)

        # ---- phases ----
        self._phases_box = QGroupBox("Project Phases")
        self._phases_grid = QGridLayout()
        btn_add_phase = QPushButton("Add Phase")
        btn_add_phase.clicked.connect(self._vm.add_phase)
        pv = QVBoxLayout(self._phases_box)
        pv.addLayout(self._phases_grid)
        pv.addWidget(btn_add_phase)

        body = QWidget()
        bl = QVBoxLayout(body)
        bl.addWidget(details)
        bl.addWidget(self._members_box)
        bl.addWidget(self._phases_box)
        bl.addStretch(1)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(body)

        self._btns = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        self._btns.accepted.connect(self._save)
        self._btns.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addWidget(self._error)
        lay.addWidget(scroll)
        lay.addWidget(self._btns)

        # ---- wiring ----
        vm.errorChanged.connect(self._show_error)
        # field edits keep the row count; only add/remove/load rebuild the rows
        self._member_rows = -1
        self._phase_rows = -1
        vm.membersChanged.connect(self._on_members_changed)
        vm.phasesChanged.connect(self._on_phases_changed)
        vm.savingChanged.connect(self._on_saving)
        vm.saved.connect(lambda _pid: self.accept())

        if vm.load(project_id):
            self._fill_details()

    # ----- data -----
    def _fill_details(self) -> None:
        f = self._vm.form
        self._name.setText(str(f.get("name") or ""))
        self._desc.setPlainText(str(f.get("description") or ""))
        i = self._status.findData(f.get("status") or "planning")
        if i >= 0:
            self._status.setCurrentIndex(i)
        if f.get("deadline"):
            d = QDate.fromString(str(f["deadline"]), "yyyy-MM-dd")
            if d.isValid():
                self._deadline.setDate(d)
        self._progress.setValue(int(f.get("progress") or 0))

        self._client.clear()
        self._client.addItem("Select a client", "")
        for c in self._vm.clients:
            self._client.addItem(f"{c.full_name} ({c.email})", c.id)
        j = self._client.findData(f.get("client_id") or "")
        self._client.setCurrentIndex(max(j, 0))

    def _push_details(self) -> None:
        self._vm.set_field("name", self._name.text())
        self._vm.set_field("description", self._desc.toPlainText())
        self._vm.set_field("status", self._status.currentData())
        self._vm.set_field("deadline", self._deadline.date().toString("yyyy-MM-dd"))
        self._vm.set_field("progress", self._progress.value())
        self._vm.set_field("client_id", self._client.currentData() or "")

    def _on_members_changed(self, rows: list) -> None:
        if len(rows) != self._member_rows:
            self._rebuild_members()

    def _on_phases_changed(self, rows: list) -> None:
        if len(rows) != self._phase_rows:
            self._rebuild_phases()

    @staticmethod
    def _clear_grid(grid: QGridLayout) -> None:
        while grid.count():
            item = grid.takeAt(0)
            w = item.widget()
            if w is not None:
                w.deleteLater()

    def _rebuild_members(self) -> None:
        self._clear_grid(self._members_grid)
        self._member_rows = len(self._vm.members)
        for row, m in enumerate(self._vm.members):
            user = QComboBox()
            user.addItem("Select user", "")
            for p in self._vm.candidates:
                user.addItem(f"{p.full_name} - {p.role}", p.id)
            idx = user.findData(m.user_id)
            user.setCurrentIndex(max(idx, 0))
            user.setEnabled(not m.is_existing)
            user.currentIndexChanged.connect(
                lambda _i, r=row, cb=user: self._vm.update_member(r, "user_id", cb.currentData() or "")
            )

            role = QLineEdit(m.role)
            role.setPlaceholderText("Role")
            role.editingFinished.connect(lambda r=row, e=role: self._vm.update_member(r, "role", e.text()))

            btn = QPushButton("Remove")
            btn.clicked.connect(lambda _c=False, r=row: self._vm.remove_member(r))

            self._members_grid.addWidget(user, row, 0)
            self._members_grid.addWidget(role, row, 1)
            self._members_grid.addWidget(btn, row, 2)

    def _rebuild_phases(self) -> None:
        self._clear_grid(self._phases_grid)
        self._phase_rows = len(self._vm.phases)
        for row, p in enumerate(self._vm.phases):
            label = QLabel(f"Phase {p.order}")
            name = QLineEdit(p.name)
            name.setPlaceholderText("Phase name")
            name.editingFinished.connect(lambda r=row, e=name: self._vm.update_phase(r, "name", e.text()))
            desc = QLineEdit(p.description)
            desc.setPlaceholderText("Phase description")
            desc.editingFinished.connect(lambda r=row, e=desc: self._vm.update_phase(r, "description", e.text()))
            status = QComboBox()
            for key, text in PHASE_STATUS_LABELS.items():
                status.addItem(text, key)
            status.setCurrentIndex(max(status.findData(p.status), 0))
            status.currentIndexChanged.connect(
                lambda _i, r=row, cb=status: self._vm.update_phase(r, "status", cb.currentData())
            )

            self._phases_grid.addWidget(label, row, 0)
            self._phases_grid.addWidget(name, row, 1)
            self._phases_grid.addWidget(desc, row, 2)
            self._phases_grid.addWidget(status, row, 3)
            if self._vm.can_remove_phase:
                btn = QPushButton("Remove")
                btn.clicked.connect(lambda _c=False, r=row: self._vm.remove_phase(r))
                self._phases_grid.addWidget(btn, row, 4)

    # ----- actions -----
    def _save(self) -> None:
        self._push_details()
        self._vm.submit()

    def _show_error(self, text: str) -> None:
        self._error.setText(text)
        self._error.setVisible(bool(text))

    def _on_saving(self, saving: bool) -> None:
        btn = self._btns.button(QDialogButtonBox.Save)
        btn.setEnabled(not saving)
        btn.setText("Saving..." if saving else "Save")
