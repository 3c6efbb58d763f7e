# Rev 0.2.0
from __future__ import annotations

import logging
from typing import Any, List, Mapping

from PySide6.QtCore import QObject, Signal

from clientdesk.models.entities import ContactSubmission, ShowcaseProject
from clientdesk.repositories.gateway import GatewayError
from clientdesk.services.validation import ValidationError, validate_contact

log = logging.getLogger(__name__)

CONTACT_OK = "Thank you! I'll get back to you soon."
CONTACT_FAILED = "Failed to send message. Please try again."


class PortfolioViewModel(QObject):
    """
    Public showcase list + contact form.
    Emits:
      - showcaseReloaded(list[ShowcaseProject])
      - contactStatusChanged(kind: str, message: str)   kind in {"", "success", "error"}
      - contactBusyChanged(bool)
    """

    showcaseReloaded = Signal(list)
    contactStatusChanged = Signal(str, str)
    contactBusyChanged = Signal(bool)

    def __init__(self, showcase_repo):
        super().__init__()
        self._repo = showcase_repo

    def load_showcase(self) -> List[ShowcaseProject]:
        try:
            rows = self._repo.list_active()
        except GatewayError:
            log.exception("Error loading projects")
            rows = []
        self.showcaseReloaded.emit(rows)
        return rows

    def submit_contact(self, form: Mapping[str, Any]) -> bool:
        self.contactStatusChanged.emit("", "")
        try:
            clean = validate_contact(form)
        except ValidationError as exc:
            self.contactStatusChanged.emit("error", str(exc))
            return False

        self.contactBusyChanged.emit(True)
        try:
            self._repo.submit_contact(ContactSubmission(**clean))
        except GatewayError:
            log.exception("Contact submission failed")
            self.contactStatusChanged.emit("error", CONTACT_FAILED)
            return False
        finally:
            self.contactBusyChanged.emit(False)
        self.contactStatusChanged.emit("success", CONTACT_OK)
        return True
