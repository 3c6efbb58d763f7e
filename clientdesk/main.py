# Rev 0.2.0

# clientdesk/main.py  (Rev 0.2.0)
import sys
from PySide6.QtGui import QGuiApplication, QFont
from PySide6.QtCore import Qt, QCoreApplication
from PySide6.QtWidgets import QApplication

from clientdesk.app_context import AppContext
from clientdesk.ui.main_window import MainWindow
from clientdesk.utils.logging_setup import setup_logging
from clientdesk.utils.paths import ensure_dirs


def main():
    app = QApplication(sys.argv)

    QGuiApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )
    QCoreApplication.setOrganizationName("clientdesk")
    QCoreApplication.setApplicationName("clientdesk")

    ensure_dirs()
    logfile = setup_logging("clientdesk")
    print(f"[logging] Writing to: {logfile}")

    ctx = AppContext.create()
    win = MainWindow(ctx, logfile=str(logfile))
    win.show()

    app.setProperty("mainWindow", win)
    app.setFont(QFont("Sans Serif", 10))
    app.aboutToQuit.connect(ctx.close)

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
