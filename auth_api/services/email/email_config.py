"""Email service configuration."""

from enum import Enum

from pydantic_settings import BaseSettings


class EmailProvider(str, Enum):
    """Email provider options."""

    GOOGLE_WORKSPACE = "google_workspace"
    AWS_SES = "aws_ses"


class EmailSettings(BaseSettings):
    """Provider selection and link targets."""

    PROVIDER: EmailProvider = EmailProvider.GOOGLE_WORKSPACE
    APP_BASE_URL: str = "http://localhost:3000"
    VERIFY_EMAIL_PATH: str = "/verify-email"
    RESET_PASSWORD_PATH: str = "/reset-password"

    class Config:
        env_prefix = "EMAIL_"


class SMTPSettings(BaseSettings):
    """Google Workspace SMTP configuration."""

    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SEND_FROM_NAME: str = "Auth API"

    class Config:
        env_prefix = "EMAIL_"


class SESSettings(BaseSettings):
    """AWS SES configuration."""

    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    SES_FROM_EMAIL: str = ""
    SEND_FROM_NAME: str = "Auth API"

    class Config:
        env_prefix = "EMAIL_"


email_settings = EmailSettings()
smtp_settings = SMTPSettings()
ses_settings = SESSettings()
