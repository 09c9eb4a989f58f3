# app/services/mailer.py
from __future__ import annotations

import logging
import os
from email.message import EmailMessage
from typing import List, Optional

import requests

log = logging.getLogger("app.mailer")

RESEND_API_URL = "https://api.resend.com/emails"


class MailConfigError(Exception):
    pass


class MailSendError(Exception):
    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def build_message(
    subject: str,
    body_text: str,
    sender: str,
    recipient: str,
    *,
    html: Optional[str] = None,
    reply_to: Optional[str] = None,
) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = recipient
    if reply_to:
        msg["Reply-To"] = reply_to
    msg.set_content(body_text)
    if html:
        msg.add_alternative(html, subtype="html")
    return msg


def _split_emails(s: str) -> List[str]:
    if not s:
        return []
    parts = [p.strip() for p in s.replace(";", ",").split(",") if p.strip()]
    return [p for p in parts if "@" in p]


def send_email(msg: EmailMessage) -> str:
    """
    Send through the Resend HTTP API. Returns the provider message id.
    Raises MailConfigError for missing key/sender/recipients, MailSendError for HTTP failures.
    """
    api_key = os.getenv("RESEND_API_KEY")
    if not api_key:
        raise MailConfigError("RESEND_API_KEY is not set")

    from_email = msg.get("From")
    to_emails = _split_emails(msg.get("To", ""))
    if not from_email:
        raise MailConfigError("From address missing")
    if not to_emails:
        raise MailConfigError("Recipient(s) missing")

    data = {
        "from": from_email,
        "to": to_emails,
        "subject": msg.get("Subject", ""),
    }

    text_part = msg.get_body(preferencelist=("plain",))
    if text_part is not None:
        data["text"] = text_part.get_content()
    html_part = msg.get_body(preferencelist=("html",))
    if html_part is not None:
        data["html"] = html_part.get_content()

    reply_to = msg.get("Reply-To")
    if reply_to:
        data["reply_to"] = reply_to

    resp = requests.post(
        RESEND_API_URL,
        headers={"Authorization": f"Bearer {api_key}"},
        json=data,
        timeout=float(os.getenv("MAIL_TIMEOUT", "20")),
    )
    if resp.status_code >= 400:
        raise MailSendError(
            f"Resend error {resp.status_code}: {resp.text[:300]}",
            status_code=resp.status_code,
        )

    msg_id = (resp.json() or {}).get("id")
    if not msg_id:
        raise MailSendError("Resend did not confirm the email (no id in response)")
    log.info("mail sent to=%s subject=%r id=%s", ",".join(to_emails), data["subject"], msg_id)
    return msg_id
