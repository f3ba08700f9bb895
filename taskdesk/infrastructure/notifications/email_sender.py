"""
Name: Email Senders

Responsibilities:
  - Render the assignment and status-change emails (HTML)
  - Deliver them over SMTP (SSL or STARTTLS)
  - Offer a recording fake for tests and FAKE_EMAIL=true

Collaborators:
  - smtplib / email.message (stdlib)
  - crosscutting.config.Settings: smtp_* values

Notes:
  - Senders raise on delivery failure; the event channel decides what to do
  - User-supplied values are HTML-escaped before rendering
"""

from __future__ import annotations

import smtplib
from dataclasses import dataclass, field
from datetime import datetime
from email.message import EmailMessage
from html import escape
from threading import Lock
from typing import Optional, Protocol

from ...crosscutting.config import Settings
from ...crosscutting.logger import logger
from ...domain.entities import TaskStatus

SIGNATURE = "Task Management System"


class EmailSender(Protocol):
    """R: Outbound notification contract used by the dispatcher."""

    def send_assignment(
        self,
        email: str,
        name: str,
        title: str,
        description: Optional[str],
        deadline: Optional[datetime],
    ) -> None:
        ...

    def send_status_change(
        self,
        email: str,
        name: str,
        title: str,
        new_status: TaskStatus,
        actor_name: str,
    ) -> None:
        ...


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    html: str


def format_status(status: TaskStatus) -> str:
    """R: in_progress -> 'In progress'."""
    text = TaskStatus(status).value.replace("_", " ")
    return text[:1].upper() + text[1:]


def _format_deadline(deadline: Optional[datetime]) -> str:
    if deadline is None:
        return "No deadline set"
    return deadline.strftime("%Y-%m-%d")


def _wrap(heading: str, name: str, intro: str, details: str, outro: str) -> str:
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">{heading}</h2>
  <p>Hello {escape(name)},</p>
  <p>{intro}</p>
  <div style="background-color: #f5f5f5; padding: 20px; border-radius: 5px; margin: 20px 0;">
    <h3 style="color: #2c3e50; margin-top: 0;">Task Details:</h3>
{details}
  </div>
  <p>{outro}</p>
  <p>Best regards,<br>{SIGNATURE}</p>
</div>
"""


def render_assignment(
    name: str,
    title: str,
    description: Optional[str],
    deadline: Optional[datetime],
) -> OutgoingEmail:
    details = "\n".join(
        [
            f"    <p><strong>Title:</strong> {escape(title)}</p>",
            "    <p><strong>Description:</strong> "
            f"{escape(description or 'No description provided')}</p>",
            f"    <p><strong>Deadline:</strong> {_format_deadline(deadline)}</p>",
            f"    <p><strong>Status:</strong> {format_status(TaskStatus.PENDING)}</p>",
        ]
    )
    return OutgoingEmail(
        to="",
        subject=f"New Task Assigned: {title}",
        html=_wrap(
            "New Task Assigned",
            name,
            "You have been assigned a new task:",
            details,
            "Please log in to your account to view and manage your tasks.",
        ),
    )


def render_status_change(
    name: str, title: str, new_status: TaskStatus, actor_name: str
) -> OutgoingEmail:
    details = "\n".join(
        [
            f"    <p><strong>Title:</strong> {escape(title)}</p>",
            f"    <p><strong>New Status:</strong> {format_status(new_status)}</p>",
            f"    <p><strong>Updated by:</strong> {escape(actor_name)}</p>",
        ]
    )
    return OutgoingEmail(
        to="",
        subject=f"Task Status Updated: {title}",
        html=_wrap(
            "Task Status Updated",
            name,
            "The status of your task has been updated:",
            details,
            "Please log in to your account to view the updated task details.",
        ),
    )


class SmtpEmailSender:
    """R: Delivers rendered emails through an SMTP server."""

    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.use_ssl = settings.smtp_use_ssl
        self.username = settings.smtp_username
        self.password = settings.smtp_password
        self.sender = settings.smtp_from or settings.smtp_username
        self.timeout = settings.smtp_timeout_seconds

    def send_assignment(self, email, name, title, description, deadline) -> None:
        message = render_assignment(name, title, description, deadline)
        self._deliver(email, message)
        logger.info("Task assignment email sent", extra={"to": email})

    def send_status_change(self, email, name, title, new_status, actor_name) -> None:
        message = render_status_change(name, title, new_status, actor_name)
        self._deliver(email, message)
        logger.info("Task status update email sent", extra={"to": email})

    def _build(self, to: str, rendered: OutgoingEmail) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = rendered.subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.set_content(f"{rendered.subject}\n\nPlease view this email in HTML.")
        msg.add_alternative(rendered.html, subtype="html")
        return msg

    def _deliver(self, to: str, rendered: OutgoingEmail) -> None:
        msg = self._build(to, rendered)
        if self.use_ssl:
            server = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        with server:
            if not self.use_ssl:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.send_message(msg)


@dataclass
class FakeEmailSender:
    """R: Records emails instead of sending them."""

    sent: list[OutgoingEmail] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock, repr=False)

    def send_assignment(self, email, name, title, description, deadline) -> None:
        rendered = render_assignment(name, title, description, deadline)
        self._record(email, rendered)

    def send_status_change(self, email, name, title, new_status, actor_name) -> None:
        rendered = render_status_change(name, title, new_status, actor_name)
        self._record(email, rendered)

    def _record(self, to: str, rendered: OutgoingEmail) -> None:
        with self._lock:
            self.sent.append(
                OutgoingEmail(to=to, subject=rendered.subject, html=rendered.html)
            )
        logger.info(
            "Fake email recorded", extra={"to": to, "subject": rendered.subject}
        )

    def clear(self) -> None:
        with self._lock:
            self.sent.clear()
