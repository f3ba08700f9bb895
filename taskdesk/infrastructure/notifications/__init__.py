"""Lifecycle event channel and email notifications"""

from .channel import InProcessEventChannel
from .dispatcher import NotificationDispatcher
from .email_sender import EmailSender, FakeEmailSender, OutgoingEmail, SmtpEmailSender

__all__ = [
    "InProcessEventChannel",
    "NotificationDispatcher",
    "EmailSender",
    "FakeEmailSender",
    "OutgoingEmail",
    "SmtpEmailSender",
]
