"""Email service package."""

from auth_api.services.email.email_config import EmailProvider, EmailSettings, email_settings
from auth_api.services.email.email_service import (
    EmailResult,
    EmailService,
    get_email_service,
    get_mailer,
)

__all__ = [
    "EmailProvider",
    "EmailResult",
    "EmailService",
    "EmailSettings",
    "email_settings",
    "get_email_service",
    "get_mailer",
]
