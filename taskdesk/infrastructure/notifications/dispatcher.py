"""
Name: Notification Dispatcher

Responsibilities:
  - Turn lifecycle events into emails addressed to the task's assignee

Collaborators:
  - domain.events: TaskAssigned, TaskStatusChanged
  - notifications.email_sender.EmailSender
"""

from __future__ import annotations

from ...crosscutting.logger import logger
from ...domain.events import LifecycleEvent, TaskAssigned, TaskStatusChanged
from .email_sender import EmailSender


class NotificationDispatcher:
    """R: Channel subscriber that sends one email per event."""

    def __init__(self, sender: EmailSender):
        self.sender = sender

    def __call__(self, event: LifecycleEvent) -> None:
        self.handle(event)

    def handle(self, event: LifecycleEvent) -> None:
        if isinstance(event, TaskAssigned):
            self.sender.send_assignment(
                event.assignee.email,
                event.assignee.name,
                event.title,
                event.description,
                event.deadline,
            )
        elif isinstance(event, TaskStatusChanged):
            self.sender.send_status_change(
                event.assignee.email,
                event.assignee.name,
                event.title,
                event.new_status,
                event.updated_by_name,
            )
        else:
            logger.warning(
                "Unhandled lifecycle event", extra={"event_type": type(event).__name__}
            )
