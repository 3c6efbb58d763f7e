# Rev 0.2.0
# clientdesk: main window with Portfolio | Login | Dashboard
# Dashboard columns: ID | Name | Description | Status | Due | Progress

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QHBoxLayout, QHeaderView, QLabel, QMainWindow, QPushButton, QStackedWidget,
    QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget,
)

from clientdesk.app_context import AppContext
from clientdesk.ui.login_widget import LoginWidget
from clientdesk.ui.portfolio_page import PortfolioPage
from clientdesk.ui.project_detail_window import ProjectDetailWindow
from clientdesk.ui.project_editor_dialog import ProjectEditorDialog
from clientdesk.utils.logging_setup import get_logger
from clientdesk.viewmodels.auth_viewmodel import AuthViewModel
from clientdesk.viewmodels.dashboard_viewmodel import DashboardViewModel
from clientdesk.viewmodels.portfolio_viewmodel import PortfolioViewModel
from clientdesk.viewmodels.project_detail_viewmodel import ProjectDetailViewModel
from clientdesk.viewmodels.project_editor_viewmodel import ProjectEditorViewModel

log = get_logger("ui.main_window")


class MainWindow(QMainWindow):
    def __init__(self, ctx: AppContext, *, logfile: str | None = None, parent=None):
        super().__init__(parent)
        self._ctx = ctx
        self._logfile = logfile
        self._detail_windows: dict[int, ProjectDetailWindow] = {}

        self.setWindowTitle("clientdesk")
        size = ctx.settings.get("main_window", {})
        self.resize(int(size.get("width", 1100)), int(size.get("height", 720)))

        self._auth_vm = AuthViewModel(ctx.sessions)
        self._dash_vm = DashboardViewModel(ctx.projects, ctx.sessions)
        self._portfolio_vm = PortfolioViewModel(ctx.showcase)

        self._stack = QStackedWidget(self)
        self._portfolio = PortfolioPage(self._portfolio_vm)
        self._login = LoginWidget(self._auth_vm)
        self._dashboard = self._build_dashboard()
        for w in (self._portfolio, self._login, self._dashboard):
            self._stack.addWidget(w)
        self.setCentralWidget(self._stack)

        self._portfolio.showLogin.connect(self.show_login)
        self._login.showPortfolio.connect(self.show_portfolio)
        self._auth_vm.signedIn.connect(self.show_dashboard)
        self._auth_vm.signedOut.connect(self.show_login)
        self._dash_vm.projectsReloaded.connect(self._fill_projects)

        self.show_portfolio()

    # -------------------- screens --------------------

    def _build_dashboard(self) -> QWidget:
        w = QWidget(self)
        v = QVBoxLayout(w)

        self._lbl_user = QLabel("")
        self._lbl_subtitle = QLabel("")
        self._btn_create = QPushButton("Create Project")
        self._btn_create.clicked.connect(lambda: self._open_editor(None))
        btn_refresh = QPushButton("Refresh")
        btn_refresh.clicked.connect(self._dash_vm.reload)
        btn_sign_out = QPushButton("Sign out")
        btn_sign_out.clicked.connect(self._auth_vm.sign_out)

        top = QHBoxLayout()
        top.addWidget(self._lbl_user)
        top.addStretch(1)
        top.addWidget(self._btn_create)
        top.addWidget(btn_refresh)
        top.addWidget(btn_sign_out)
        v.addLayout(top)
        v.addWidget(self._lbl_subtitle)

        self._tbl = QTableWidget(0, 6, w)
        self._tbl.setSelectionBehavior(QTableWidget.SelectRows)
        self._tbl.setSelectionMode(QTableWidget.SingleSelection)
        self._tbl.setEditTriggers(QTableWidget.NoEditTriggers)
        self._tbl.setAlternatingRowColors(True)
        self._tbl.verticalHeader().setVisible(False)
        self._tbl.setHorizontalHeaderLabels(["ID", "Name", "Description", "Status", "Due", "Progress"])
        h = self._tbl.horizontalHeader()
        h.setSectionResizeMode(0, QHeaderView.ResizeToContents)
        h.setSectionResizeMode(1, QHeaderView.Stretch)
        h.setSectionResizeMode(2, QHeaderView.Stretch)
        h.setSectionResizeMode(3, QHeaderView.ResizeToContents)
        h.setSectionResizeMode(4, QHeaderView.ResizeToContents)
        h.setSectionResizeMode(5, QHeaderView.ResizeToContents)
        self._tbl.doubleClicked.connect(self._open_selected_project)
        v.addWidget(self._tbl)

        self._lbl_empty = QLabel("")
        self._lbl_empty.setAlignment(Qt.AlignCenter)
        v.addWidget(self._lbl_empty)
        return w

    def show_portfolio(self) -> None:
        self._stack.setCurrentWidget(self._portfolio)
        self._portfolio.load()

    def show_login(self) -> None:
        self._close_detail_windows()
        self._login.clear()
        self._stack.setCurrentWidget(self._login)

    def show_dashboard(self) -> None:
        # signed-out users never see the dashboard
        session = self._ctx.sessions.session
        if session is None:
            self.show_login()
            return
        self._lbl_user.setText(f"<b>{session.profile.display_name}</b> ({session.role})")
        self._lbl_subtitle.setText(self._dash_vm.subtitle)
        self._btn_create.setVisible(self._dash_vm.is_admin)
        self._stack.setCurrentWidget(self._dashboard)
        self._dash_vm.reload()

    # -------------------- dashboard --------------------

    def _fill_projects(self, rows: list) -> None:
        self._tbl.setRowCount(0)
        for r in rows:
            i = self._tbl.rowCount()
            self._tbl.insertRow(i)
            id_item = QTableWidgetItem(str(r["id"]))
            id_item.setData(Qt.UserRole, int(r["id"]))
            self._tbl.setItem(i, 0, id_item)
            self._tbl.setItem(i, 1, QTableWidgetItem(r["name"]))
            self._tbl.setItem(i, 2, QTableWidgetItem(r["description"]))
            self._tbl.setItem(i, 3, QTableWidgetItem(r["status_label"]))
            self._tbl.setItem(i, 4, QTableWidgetItem(r["deadline"] or "-"))
            self._tbl.setItem(i, 5, QTableWidgetItem(f"{r['progress']}%"))
        self._lbl_empty.setText("" if rows else self._dash_vm.empty_hint)
        self._lbl_empty.setVisible(not rows)

    def _open_selected_project(self) -> None:
        row = self._tbl.currentRow()
        if row < 0:
            return
        item = self._tbl.item(row, 0)
        if item is not None:
            self._open_detail(int(item.data(Qt.UserRole)))

    def _open_detail(self, project_id: int) -> None:
        existing = self._detail_windows.get(project_id)
        if existing is not None:
            existing.raise_()
            existing.activateWindow()
            return
        vm = ProjectDetailViewModel(self._ctx.projects, self._ctx.sessions, self._ctx.notifier)
        win = ProjectDetailWindow(vm, project_id, parent=self)
        win.editRequested.connect(self._open_editor)
        win.destroyed.connect(lambda _o=None, pid=project_id: self._detail_windows.pop(pid, None))
        self._detail_windows[project_id] = win
        win.show()

    def _open_editor(self, project_id: int | None) -> None:
        vm = ProjectEditorViewModel(self._ctx.projects, self._ctx.sessions)
        dlg = ProjectEditorDialog(vm=vm, project_id=project_id, parent=self)
        if dlg.exec():
            log.info("Project %s saved", project_id or "(new)")
            self._dash_vm.reload()
            if project_id is not None and project_id in self._detail_windows:
                self._detail_windows[project_id].reload()

    def _close_detail_windows(self) -> None:
        for win in list(self._detail_windows.values()):
            win.close()
        self._detail_windows.clear()

    def closeEvent(self, event) -> None:
        self._close_detail_windows()
        super().closeEvent(event)
