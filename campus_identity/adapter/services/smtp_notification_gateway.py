"""
SMTP notification adapter.

Renders the built-in templates and delivers them with aiosmtplib.
"""

import html
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, NamedTuple, Optional

import aiosmtplib

from campus_identity.app.services.data_protection import mask_email
from campus_identity.app.services.notification_gateway import NotificationGateway

logger = logging.getLogger(__name__)


class EmailTemplate(NamedTuple):
    subject: str
    text: str
    html: str


TEMPLATES: Dict[str, EmailTemplate] = {
    "email-verification": EmailTemplate(
        subject="Verify your email address",
        text=(
            "Hello {name},\n\n"
            "Please confirm your email address to activate your student account:\n"
            "{verification_link}\n\n"
            "If you did not register, you can ignore this email."
        ),
        html=(
            "<p>Hello {name},</p>"
            "<p>Please confirm your email address to activate your student account.</p>"
            '<p><a href="{verification_link}">Verify email address</a></p>'
            "<p>If you did not register, you can ignore this email.</p>"
        ),
    ),
    "welcome-student": EmailTemplate(
        subject="Welcome to the student portal",
        text=(
            "Hello {name},\n\n"
            "Your email address is verified and your account is active.\n"
            "Sign in here: {signin_link}"
        ),
        html=(
            "<p>Hello {name},</p>"
            "<p>Your email address is verified and your account is active.</p>"
            '<p><a href="{signin_link}">Sign in</a></p>'
        ),
    ),
    "password-reset": EmailTemplate(
        subject="Reset your password",
        text=(
            "Hello {name},\n\n"
            "Use this link to choose a new password. It expires in "
            "{expires_in_minutes} minutes:\n"
            "{reset_link}\n\n"
            "If you did not ask for a reset, you can ignore this email."
        ),
        html=(
            "<p>Hello {name},</p>"
            "<p>Use this link to choose a new password. It expires in "
            "{expires_in_minutes} minutes.</p>"
            '<p><a href="{reset_link}">Reset password</a></p>'
            "<p>If you did not ask for a reset, you can ignore this email.</p>"
        ),
    ),
    "password-reset-confirmation": EmailTemplate(
        subject="Your password was changed",
        text=(
            "Hello {name},\n\n"
            "Your password was changed. If this was not you, reset it again "
            "immediately.\nSign in here: {signin_link}"
        ),
        html=(
            "<p>Hello {name},</p>"
            "<p>Your password was changed. If this was not you, reset it again "
            "immediately.</p>"
            '<p><a href="{signin_link}">Sign in</a></p>'
        ),
    ),
}


class SmtpNotificationGateway(NotificationGateway):
    """Async SMTP delivery of templated notifications"""

    def __init__(
        self,
        host: str,
        port: int,
        from_email: str,
        from_name: str = "",
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.from_email = from_email
        self.from_name = from_name
        self.username = username
        self.password = password
        self.use_tls = use_tls

    def render(self, to: str, template_id: str, context: Dict[str, Any]) -> MIMEMultipart:
        """
        Build the message for a template.

        Raises:
            KeyError: unknown template or missing context value
        """
        template = TEMPLATES[template_id]

        message = MIMEMultipart("alternative")
        sender = f"{self.from_name} <{self.from_email}>" if self.from_name else self.from_email
        message["From"] = sender
        message["To"] = to
        message["Subject"] = template.subject
        escaped = {key: html.escape(str(value)) for key, value in context.items()}
        message.attach(MIMEText(template.text.format(**context), "plain"))
        message.attach(MIMEText(template.html.format(**escaped), "html"))
        return message

    async def send(self, to: str, template_id: str, context: Dict[str, Any]) -> bool:
        try:
            message = self.render(to, template_id, context)
        except KeyError:
            logger.error("[Email/SMTP] Cannot render template %s", template_id)
            return False

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=self.use_tls,
            )
        except aiosmtplib.SMTPException as exc:
            logger.error("[Email/SMTP] Failed to send %s to %s: %s", template_id, mask_email(to), exc)
            return False

        logger.info("[Email/SMTP] Sent %s to %s", template_id, mask_email(to))
        return True
