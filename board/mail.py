from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from .constants import EMAIL_TYPES, LOCKOUT_MINUTES, MAX_FAILED_ATTEMPTS
from .exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    body: str
    type: str

    def to_dict(self) -> dict:
        return {"to": self.to, "subject": self.subject, "body": self.body, "type": self.type}


def _text(payload: dict, key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        return None
    return value


def validate_email(payload: dict) -> EmailMessage:
    to = _text(payload, "to")
    if not to or "@" not in to.strip():
        raise ValidationError("Invalid email address", field="to")
    kind = _text(payload, "type")
    if kind is None or kind.strip().lower() not in EMAIL_TYPES:
        raise ValidationError("Invalid email type", field="type")
    subject = _text(payload, "subject")
    body = _text(payload, "body")
    if subject is None or body is None:
        raise ValidationError("Subject and body must be text", field="subject" if subject is None else "body")
    return EmailMessage(
        to=to.strip(),
        subject=subject.strip(),
        body=body,
        type=kind.strip().lower(),
    )


def recovery_email(to: str, app_name: str) -> EmailMessage:
    return EmailMessage(
        to=to,
        subject=f"Password Recovery - {app_name}",
        body=(
            f"You have requested to reset your password for {app_name}.\n\n"
            "Please contact your administrator to reset your password.\n\n"
            "If you did not request this, please ignore this email."
        ),
        type="recovery",
    )


def lockout_email(to: str, app_name: str, failed_attempts: int = MAX_FAILED_ATTEMPTS) -> EmailMessage:
    return EmailMessage(
        to=to,
        subject=f"Account Locked - {app_name}",
        body=(
            f"Your account has been locked due to {failed_attempts} failed password attempts.\n\n"
            f"For security reasons, access has been temporarily restricted for {LOCKOUT_MINUTES} minutes.\n\n"
            "If this was not you, please contact your administrator immediately."
        ),
        type="lockout",
    )


def hint_email(to: str, app_name: str, hint: str) -> EmailMessage:
    return EmailMessage(
        to=to,
        subject=f"Password Hint - {app_name}",
        body=(
            f'Your password hint: "{hint}"\n\n'
            "If you did not request this, someone may be trying to access your account."
        ),
        type="hint",
    )


def dispatch(message: EmailMessage) -> dict:
    """Stub delivery: the message is only written to the log."""
    rule = "=" * 50
    logger.info(
        "\n%s\nEMAIL NOTIFICATION [%s]\n%s\nTo: %s\nSubject: %s\n%s\n%s\n%s",
        rule, message.type.upper(), rule, message.to, message.subject, "-" * 50, message.body, rule,
    )
    return {"success": True, "message": f"Email notification sent to {message.to}", "type": message.type}


class EmailClient:
    """Posts messages to the board's email endpoint. Failures are logged."""

    def __init__(self, base_url: str, *, session: requests.Session | None = None, timeout: float = 10):
        self.url = base_url.rstrip("/") + "/api/email/"
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, message: EmailMessage) -> bool:
        try:
            resp = self.session.post(self.url, json=message.to_dict(), timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error("Failed to send %s email: %s", message.type, e)
            return False
        return True
