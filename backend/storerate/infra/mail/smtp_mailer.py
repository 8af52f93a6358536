"""Outbound email over SMTP, sent on a background thread."""

from __future__ import annotations

import logging
import smtplib
import threading
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from storerate.services._shared.ports import Mailer

log = logging.getLogger(__name__)


@dataclass(slots=True)
class SMTPMailer(Mailer):
    """
    Fire-and-forget SMTP sender.

    :meth:`send` returns immediately; delivery happens on a daemon thread and
    failures are logged at ``WARNING``.
    """

    host: str
    port: int = 587
    username: str | None = None
    password: str | None = None
    use_tls: bool = True
    sender: str = "no-reply@storerate.local"
    timeout: float = 10.0

    def build_message(self, *, to: str, subject: str, text: str, html: str | None = None):
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.attach(MIMEText(text, "plain", "utf-8"))
        if html:
            msg.attach(MIMEText(html, "html", "utf-8"))
        return msg

    def send(self, *, to: str, subject: str, text: str, html: str | None = None) -> None:
        msg = self.build_message(to=to, subject=subject, text=text, html=html)
        thread = threading.Thread(target=self._deliver, args=(to, msg), daemon=True)
        thread.start()

    def _deliver(self, to: str, msg) -> None:
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as s:
                if self.use_tls:
                    s.starttls()
                if self.username and self.password:
                    s.login(self.username, self.password)
                s.sendmail(self.sender, [to], msg.as_string())
            log.info("mail.sent to=%s subject=%s", to, msg["Subject"])
        except (smtplib.SMTPException, OSError) as exc:
            log.warning("mail.failed to=%s subject=%s error=%s", to, msg["Subject"], exc)
