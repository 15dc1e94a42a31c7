"""
Mail transports behind a single `send` capability.

The transport is chosen by TIRE_WORKFLOW["NOTIFICATION_TRANSPORT"]:
- "django": django.core.mail, honouring EMAIL_BACKEND (SMTP, console, locmem)
- "sendgrid": SendGrid v3 HTTP API via requests

Both are bounded by a timeout; neither retries. Failures raise and are
handled by the dispatcher.
"""

import logging

import requests
from django.core.mail import EmailMultiAlternatives, get_connection

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20
SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


class MailSender:
    """Send one message; raise on failure, return True on success."""

    name = "base"

    def send(self, recipient, subject, body, html_body=None):
        raise NotImplementedError

    def check(self):
        """Cheap configuration check used by the readiness probe."""
        return True


class DjangoMailSender(MailSender):
    name = "django"

    def __init__(self, from_email, timeout=DEFAULT_TIMEOUT):
        self.from_email = from_email
        self.timeout = timeout

    def send(self, recipient, subject, body, html_body=None):
        connection = get_connection(fail_silently=False, timeout=self.timeout)
        message = EmailMultiAlternatives(
            subject=subject,
            body=body,
            from_email=self.from_email,
            to=[recipient],
            connection=connection,
        )
        if html_body:
            message.attach_alternative(html_body, "text/html")
        return message.send(fail_silently=False) == 1


class SendGridMailSender(MailSender):
    name = "sendgrid"

    def __init__(self, api_key, from_email, timeout=DEFAULT_TIMEOUT, session=None):
        self.api_key = api_key
        self.from_email = from_email
        self.timeout = timeout
        self.session = session or requests.Session()

    def check(self):
        return bool(self.api_key)

    def send(self, recipient, subject, body, html_body=None):
        if not self.api_key:
            raise RuntimeError("SendGrid API key is not configured")

        content = [{"type": "text/plain", "value": body}]
        if html_body:
            content.append({"type": "text/html", "value": html_body})

        response = self.session.post(
            SENDGRID_URL,
            json={
                "personalizations": [{"to": [{"email": recipient}]}],
                "from": {"email": self.from_email},
                "subject": subject,
                "content": content,
            },
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return True


def build_sender(settings):
    """Build the configured MailSender from Django settings."""
    workflow = getattr(settings, "TIRE_WORKFLOW", {})
    transport = (workflow.get("NOTIFICATION_TRANSPORT") or "django").lower()
    timeout = workflow.get("NOTIFICATION_TIMEOUT", DEFAULT_TIMEOUT)
    from_email = settings.DEFAULT_FROM_EMAIL

    if transport == "sendgrid":
        return SendGridMailSender(
            api_key=workflow.get("SENDGRID_API_KEY", ""),
            from_email=from_email,
            timeout=timeout,
        )
    if transport != "django":
        raise ValueError(f"Unknown notification transport: {transport}")
    return DjangoMailSender(from_email=from_email, timeout=timeout)
