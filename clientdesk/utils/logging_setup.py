# Rev 0.2.0

# clientdesk – logging setup (Rev 0.2.0)
from __future__ import annotations
import logging, os, sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

from .paths import APP_NAME, logs_dir

FMT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"
LEVEL_ENV = "CLIENTDESK_LOG_LEVEL"

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}


def _qt_to_logging(msg_type, _context, message) -> None:
    logging.getLogger("qt").log(_QT_LEVELS.get(msg_type, logging.INFO), message)


def _log_uncaught(exctype, value, tb) -> None:
    logging.getLogger("unhandled").error("Uncaught exception", exc_info=(exctype, value, tb))
    sys.__excepthook__(exctype, value, tb)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{APP_NAME}.{name}")


def setup_logging(app_name: str = APP_NAME, *, log_dir: Optional[Path] = None) -> Path:
    """Rotating file (5 MB x 7) plus stdout on the root logger; returns the log file path.

    Calling it again replaces the handlers it installed earlier.
    """
    level_name = os.environ.get(LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logfile = (log_dir or logs_dir()) / f"{app_name}.log"
    logfile.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    for h in [h for h in root.handlers if getattr(h, "_clientdesk", False)]:
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(FMT, DATEFMT)
    for handler in (
        RotatingFileHandler(logfile, maxBytes=5_000_000, backupCount=7, encoding="utf-8"),
        logging.StreamHandler(sys.stdout),
    ):
        handler.setFormatter(fmt)
        handler.setLevel(level)
        handler._clientdesk = True
        root.addHandler(handler)

    sys.excepthook = _log_uncaught
    qInstallMessageHandler(_qt_to_logging)

    logging.getLogger(__name__).info("Logging initialized at %s; file: %s", level_name, logfile)
    return logfile
