"""
Email service with provider abstraction.

Supports the Resend HTTP API (default) and SMTP.
Provider is selected via configuration.
"""

from __future__ import annotations

import ssl
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import structlog
from pydantic import BaseModel

from portal.config import get_settings
from portal.email.templates import password_changed_email, verification_email, welcome_email

logger = structlog.get_logger()

RESEND_API_URL = "https://api.resend.com/emails"


class EmailResult(BaseModel):
    """Outcome of a single send. Providers never raise; they report here."""

    success: bool
    error: str | None = None


class BaseEmailProvider(ABC):
    """Abstract base class for email delivery providers."""

    @abstractmethod
    async def send(self, to_email: str, subject: str, html_body: str, text_body: str) -> EmailResult:
        """Send an email."""
        ...


class ResendProvider(BaseEmailProvider):
    """Send emails via the Resend API."""

    def __init__(self, api_key: str, from_address: str, from_name: str) -> None:
        self.api_key = api_key
        self.from_address = from_address
        self.from_name = from_name

    async def send(self, to_email: str, subject: str, html_body: str, text_body: str) -> EmailResult:
        """Send via Resend HTTP API."""
        import httpx

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    RESEND_API_URL,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "from": f"{self.from_name} <{self.from_address}>",
                        "to": [to_email],
                        "subject": subject,
                        "html": html_body,
                        "text": text_body,
                    },
                    timeout=10.0,
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.exception("email_send_failed", to=to_email, provider="resend")
            return EmailResult(success=False, error=str(e) or type(e).__name__)

        logger.info("email_sent", to=to_email, subject=subject, provider="resend")
        return EmailResult(success=True)


class SMTPProvider(BaseEmailProvider):
    """Send emails via SMTP using aiosmtplib."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_address: str,
        from_name: str,
        use_tls: bool = True,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address
        self.from_name = from_name
        self.use_tls = use_tls

    async def send(self, to_email: str, subject: str, html_body: str, text_body: str) -> EmailResult:
        """Send via SMTP."""
        import aiosmtplib

        msg = MIMEMultipart("alternative")
        msg["From"] = f"{self.from_name} <{self.from_address}>"
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            tls_context = ssl.create_default_context() if self.use_tls else None
            await aiosmtplib.send(
                msg,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=self.use_tls,
                tls_context=tls_context,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.exception("email_send_failed", to=to_email, provider="smtp")
            return EmailResult(success=False, error=str(e) or type(e).__name__)

        logger.info("email_sent", to=to_email, subject=subject, provider="smtp")
        return EmailResult(success=True)


def _create_provider() -> BaseEmailProvider:
    """Create email provider based on configuration."""
    settings = get_settings()
    provider_name = settings.email_provider.lower()

    if provider_name == "resend":
        return ResendProvider(
            api_key=settings.resend_api_key,
            from_address=settings.email_from_address,
            from_name=settings.email_from_name,
        )
    if provider_name == "smtp":
        return SMTPProvider(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            from_address=settings.email_from_address,
            from_name=settings.email_from_name,
            use_tls=settings.smtp_use_tls,
        )
    msg = f"Unsupported email provider: {provider_name}"
    raise ValueError(msg)


class EmailService:
    """High-level email service: renders templates and hands them to the provider."""

    def __init__(self, provider: BaseEmailProvider | None = None) -> None:
        self.provider = provider or _create_provider()

    async def send(self, to: str, subject: str, html: str, text: str = "") -> EmailResult:
        """Send an already-rendered message."""
        return await self.provider.send(to, subject, html, text)

    async def send_welcome_email(self, to: str, name: str | None = None) -> EmailResult:
        settings = get_settings()
        subject, html_body, text_body = welcome_email(name, settings.app_name, settings.app_url)
        return await self.send(to, subject, html_body, text_body)

    async def send_verification_email(self, to: str, verify_url: str) -> EmailResult:
        expires_hours = get_settings().email_verification_token_ttl_hours
        subject, html_body, text_body = verification_email(verify_url, expires_hours)
        return await self.send(to, subject, html_body, text_body)

    async def send_password_changed_email(self, to: str, name: str | None = None) -> EmailResult:
        subject, html_body, text_body = password_changed_email(name)
        return await self.send(to, subject, html_body, text_body)


# Module-level singleton
_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get or create the email service singleton."""
    global _email_service  # noqa: PLW0603
    if _email_service is None:
        _email_service = EmailService()
    return _email_service


def reset_email_service() -> None:
    """Reset the email service singleton (for testing)."""
    global _email_service  # noqa: PLW0603
    _email_service = None
