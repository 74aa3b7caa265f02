import pytest

from auth_api.services.email import EmailProvider, EmailResult, EmailService


def test_build_link_encodes_token():
    service = EmailService(EmailProvider.GOOGLE_WORKSPACE, app_base_url="https://app.test/")

    assert service.build_link("/verify-email", "a+b/c") == "https://app.test/verify-email?token=a%2Bb%2Fc"


@pytest.mark.asyncio
async def test_mails_carry_the_token_link(monkeypatch):
    service = EmailService(EmailProvider.GOOGLE_WORKSPACE, app_base_url="https://app.test")
    sent = []

    async def fake_send(to_email, subject, html_content):
        sent.append((to_email, subject, html_content))
        return EmailResult(success=True)

    monkeypatch.setattr(service, "send_email", fake_send)

    await service.send_verification_email("a@b.com", "tok1")
    await service.send_password_reset_email("a@b.com", "tok2")

    assert sent[0][1] == "Verify your email address"
    assert "https://app.test/verify-email?token=tok1" in sent[0][2]
    assert sent[1][1] == "Reset your password"
    assert "https://app.test/reset-password?token=tok2" in sent[1][2]


@pytest.mark.asyncio
async def test_smtp_failure_is_reported_not_raised(monkeypatch):
    service = EmailService(EmailProvider.GOOGLE_WORKSPACE)
    monkeypatch.setattr("auth_api.services.email.email_service.smtp_settings.SMTP_HOST", "127.0.0.1")
    monkeypatch.setattr("auth_api.services.email.email_service.smtp_settings.SMTP_PORT", 1)

    result = await service.send_email("a@b.com", "Subject", "<p>hi</p>")

    assert result.success is False
    assert result.error
