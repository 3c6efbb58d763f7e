# Rev 0.2.0
"""Contact form → notification email (Rev 0.2.0)

Subscribed to INSERT on contact_submissions. Each new record is formatted
into an HTML mail and posted to the Resend API from a single background
worker, so the inserting thread never waits on the network. The handler
reports success to its caller no matter what happens downstream; failures
only reach the log.
"""
from __future__ import annotations
import html
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

import requests

from clientdesk.models.types import Tables

log = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.resend.com/emails"


def _fmt_submitted(created_at: Optional[str]) -> str:
    if not created_at:
        return "Unknown"
    try:
        ts = datetime.fromisoformat(str(created_at).replace("Z", "+00:00"))
    except ValueError:
        return str(created_at)
    return ts.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def format_contact_email(record: Mapping[str, Any], *, sender: str, recipient: str) -> Dict[str, Any]:
    """Build the Resend request body for one contact_submissions row."""
    esc = lambda v: html.escape(str(v or ""))  # noqa: E731
    name = str(record.get("name") or "")
    body = (
        "<h2>New Contact Form Submission</h2>"
        f"<p><strong>Name:</strong> {esc(name)}</p>"
        f"<p><strong>Email:</strong> {esc(record.get('email'))}</p>"
        f"<p><strong>Project Type:</strong> {esc(record.get('project_type') or 'Not specified')}</p>"
        "<p><strong>Message:</strong></p>"
        f"<p>{esc(record.get('message'))}</p>"
        f"<p><strong>Submitted:</strong> {esc(_fmt_submitted(record.get('created_at')))}</p>"
    )
    return {
        "from": sender,
        "to": [recipient],
        "subject": f"New Contact Form Submission from {name}",
        "html": body,
    }


def _log_crash(fut: Future) -> None:
    exc = fut.exception()
    if exc is not None:
        log.error("Contact mail worker crashed", exc_info=exc)


class ContactMailer:
    def __init__(
        self,
        *,
        api_key: str,
        recipient: str,
        sender: str,
        api_url: str = DEFAULT_API_URL,
        timeout_secs: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self._api_key = api_key
        self._recipient = recipient
        self._sender = sender
        self._api_url = api_url
        self._timeout = float(timeout_secs)
        self._http = session or requests.Session()
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="contact-mail")

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "ContactMailer":
        mail = settings.get("mail", {})
        return cls(
            api_key=mail.get("api_key", ""),
            recipient=mail.get("recipient", ""),
            sender=mail.get("sender", ""),
            api_url=mail.get("api_url", DEFAULT_API_URL),
            timeout_secs=mail.get("timeout_secs", 10),
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key and self._recipient and self._sender)

    def attach(self, notifier):
        """Subscribe to contact_submissions inserts; returns the Subscription."""
        return notifier.subscribe(Tables.CONTACT_SUBMISSIONS, "INSERT", None, self.handle_insert)

    def send(self, record: Mapping[str, Any]) -> bool:
        if not self.configured:
            log.warning("Contact mail not configured; dropping submission from %s", record.get("email"))
            return False
        payload = format_contact_email(record, sender=self._sender, recipient=self._recipient)
        try:
            resp = self._http.post(
                self._api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            log.error("Contact mail to %s failed: %s", self._recipient, exc)
            return False
        log.info("Contact mail sent for submission %s", record.get("id"))
        return True

    def dispatch(self, record: Mapping[str, Any]) -> Optional[Future]:
        """Queue send() on the mail worker. Returns None once the mailer is closed."""
        try:
            fut = self._pool.submit(self.send, dict(record))
        except RuntimeError:
            log.warning("Contact mailer closed; dropping submission from %s", record.get("email"))
            return None
        fut.add_done_callback(_log_crash)
        return fut

    def handle_insert(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        self.dispatch(payload.get("record") or {})
        return {"success": True}

    def close(self, wait: bool = True) -> None:
        """Stop the worker; with wait=True queued mails are sent first."""
        self._pool.shutdown(wait=wait)
