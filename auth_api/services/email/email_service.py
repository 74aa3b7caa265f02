"""Email service for account verification and password reset mail."""

import asyncio
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import Optional
from urllib.parse import urlencode

import boto3
from aiosmtplib import SMTP, SMTPException
from botocore.exceptions import BotoCoreError, ClientError

from auth_api.services.email.email_config import (
    EmailProvider,
    email_settings,
    ses_settings,
    smtp_settings,
)
from auth_api.utils.logger import logger


@dataclass
class EmailResult:
    """Outcome of a send. Failures are reported here, never raised."""

    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class EmailService:
    """Email service supporting both SMTP and AWS SES."""

    def __init__(self, provider: EmailProvider, app_base_url: str = email_settings.APP_BASE_URL):
        """
        Initialize email service with specified provider.

        Args:
            provider: Email provider to use
            app_base_url: Frontend origin used to build links in mails
        """
        self.provider = provider
        self.app_base_url = app_base_url.rstrip("/")
        self._ses_client = None

        if self.provider == EmailProvider.AWS_SES:
            self._ses_client = boto3.client(
                "ses",
                region_name=ses_settings.AWS_REGION,
                aws_access_key_id=ses_settings.AWS_ACCESS_KEY_ID or None,
                aws_secret_access_key=ses_settings.AWS_SECRET_ACCESS_KEY or None,
            )

    def build_link(self, path: str, token: str) -> str:
        return f"{self.app_base_url}{path}?{urlencode({'token': token})}"

    async def send_email(self, to_email: str, subject: str, html_content: str) -> EmailResult:
        """Send an HTML email using the configured provider."""
        if self.provider == EmailProvider.AWS_SES:
            return await self._send_email_ses(to_email, subject, html_content)
        return await self._send_email_smtp(to_email, subject, html_content)

    async def _send_email_smtp(self, to_email: str, subject: str, html_content: str) -> EmailResult:
        """Send email via Google Workspace SMTP."""
        message = MIMEMultipart()
        message["Subject"] = subject
        message["From"] = formataddr((smtp_settings.SEND_FROM_NAME, smtp_settings.SMTP_USER))
        message["To"] = to_email
        message["Message-ID"] = make_msgid()
        message.attach(MIMEText(html_content, "html", "utf-8"))

        try:
            async with SMTP(
                hostname=smtp_settings.SMTP_HOST,
                port=smtp_settings.SMTP_PORT,
                use_tls=True,
            ) as smtp:
                await smtp.login(smtp_settings.SMTP_USER, smtp_settings.SMTP_PASSWORD)
                await smtp.send_message(message)
        except (SMTPException, OSError) as e:
            logger.error(f"SMTP error sending '{subject}' to {to_email}: {e}")
            return EmailResult(success=False, error=str(e))

        logger.info(f"SMTP email '{subject}' sent to {to_email}")
        return EmailResult(success=True, message_id=message["Message-ID"])

    async def _send_email_ses(self, to_email: str, subject: str, html_content: str) -> EmailResult:
        """Send email via AWS SES."""
        try:
            response = await asyncio.to_thread(
                self._ses_client.send_email,
                Source=f"{ses_settings.SEND_FROM_NAME} <{ses_settings.SES_FROM_EMAIL}>",
                Destination={"ToAddresses": [to_email]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Html": {"Data": html_content, "Charset": "UTF-8"}},
                },
            )
        except ClientError as e:
            error = e.response["Error"]["Message"]
            logger.error(f"SES error sending '{subject}' to {to_email}: {error}")
            return EmailResult(success=False, error=error)
        except BotoCoreError as e:
            logger.error(f"Error sending '{subject}' to {to_email}: {e}")
            return EmailResult(success=False, error=str(e))

        logger.info(f"SES email '{subject}' sent to {to_email}, MessageId: {response['MessageId']}")
        return EmailResult(success=True, message_id=response["MessageId"])

    async def send_verification_email(self, to_email: str, token: str) -> EmailResult:
        link = self.build_link(email_settings.VERIFY_EMAIL_PATH, token)
        html_content = f"""
<html>
<body>
    <p>Welcome! Please confirm your email address.</p>
    <p><a href="{link}">Verify email</a></p>
    <p>This link expires in 24 hours.</p>
</body>
</html>
"""
        return await self.send_email(to_email, "Verify your email address", html_content)

    async def send_password_reset_email(self, to_email: str, token: str) -> EmailResult:
        link = self.build_link(email_settings.RESET_PASSWORD_PATH, token)
        html_content = f"""
<html>
<body>
    <p>We received a request to reset your password.</p>
    <p><a href="{link}">Reset password</a></p>
    <p>This link expires in 1 hour. If you did not ask for a reset, ignore this email.</p>
</body>
</html>
"""
        return await self.send_email(to_email, "Reset your password", html_content)


# Singleton cache per provider
_email_service_cache: dict[EmailProvider, EmailService] = {}


def get_email_service(provider: EmailProvider) -> EmailService:
    """Get or create EmailService instance (singleton per provider)."""
    if provider not in _email_service_cache:
        _email_service_cache[provider] = EmailService(provider)

    return _email_service_cache[provider]


def get_mailer() -> EmailService:
    """FastAPI dependency returning the mailer for the configured provider."""
    return get_email_service(email_settings.PROVIDER)
