"""
Notification dispatcher for workflow stages.

notify() never raises: transport errors are logged and reported through the
return value, so a committed state transition is never undone by a failed
email.
"""

import logging
from dataclasses import dataclass

from django.conf import settings

from apps.notifications.messages import NotificationStage, build_message
from apps.notifications.transports import build_sender

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationConfig:
    manager_email: str
    tto_email: str
    engineer_email: str
    seller_email: str
    from_email: str
    frontend_url: str

    @classmethod
    def from_settings(cls, django_settings=None):
        django_settings = django_settings or settings
        workflow = django_settings.TIRE_WORKFLOW
        return cls(
            manager_email=workflow["MANAGER_EMAIL"],
            tto_email=workflow["TTO_EMAIL"],
            engineer_email=workflow["ENGINEER_EMAIL"],
            seller_email=workflow["SELLER_EMAIL"],
            from_email=django_settings.DEFAULT_FROM_EMAIL,
            frontend_url=workflow["FRONTEND_URL"],
        )

    def default_recipient(self, stage):
        return {
            NotificationStage.MANAGER_REVIEW: self.manager_email,
            NotificationStage.TTO_REVIEW: self.tto_email,
            NotificationStage.ENGINEER_REVIEW: self.engineer_email,
            NotificationStage.SELLER_ORDER: self.seller_email,
        }.get(stage)


class NotificationDispatcher:
    def __init__(self, sender, config):
        self.sender = sender
        self.config = config

    def resolve_recipient(self, stage, record, recipient=None):
        if recipient:
            return recipient
        default = self.config.default_recipient(stage)
        if default:
            return default
        # Submitter-facing stages fall back to the address on the record.
        return getattr(record, "email", None) or getattr(record, "user_email", None)

    def notify(self, stage, record, recipient=None, **context):
        """
        Send the notification for `stage` about `record`.

        Returns:
            bool: True when the transport accepted the message
        """
        log_extra = {
            "operation": "NOTIFY",
            "stage": getattr(stage, "value", stage),
            "entity_id": str(getattr(record, "id", "")),
        }
        try:
            stage = NotificationStage(stage)
            to = self.resolve_recipient(stage, record, recipient)
            if not to:
                logger.warning("notification_skipped_no_recipient", extra=log_extra)
                return False

            subject, body, html_body = build_message(
                stage, record, self.config.frontend_url, **context
            )
            self.sender.send(to, subject, body, html_body)
        except Exception:
            logger.exception("notification_failed", extra=log_extra)
            return False

        logger.info("notification_sent", extra={**log_extra, "recipient": to})
        return True


def get_dispatcher():
    """Dispatcher wired to the configured transport and recipients."""
    return NotificationDispatcher(
        build_sender(settings), NotificationConfig.from_settings(settings)
    )
