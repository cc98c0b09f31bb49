"""Outbound email over SMTP."""
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import html
import logging
import re
import smtplib

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Email could not be handed to the SMTP server."""


class Mailer:
    """Sends HTML email through the configured SMTP account."""

    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = settings.smtp_user or ""
        self.password = settings.smtp_password or ""
        self.from_email = settings.smtp_from_email
        self.timeout = settings.external_timeout_seconds

    def send(self, to_email: str, subject: str, html_content: str) -> None:
        """Send an email, raising EmailDeliveryError on any failure."""
        if not self.host:
            raise EmailDeliveryError("SMTP is not configured")

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to_email

        # Plain text fallback
        plain_text = html_content.replace("<br>", "\n").replace("</p>", "\n\n")
        plain_text = re.sub(r"<[^>]+>", "", plain_text)

        msg.attach(MIMEText(plain_text, "plain"))
        msg.attach(MIMEText(html_content, "html"))

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls()
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(f"Failed to send email '{subject}': {exc}")
            raise EmailDeliveryError(str(exc)) from exc

        logger.info(f"Sent email '{subject}'")


def generate_reset_email_html(name: str, reset_url: str, expires_minutes: int) -> str:
    """Generate HTML content for the password reset email."""
    name = html.escape(name)
    reset_url = html.escape(reset_url, quote=True)
    return f"""
    <html>
    <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <h1 style="color: #1e40af;">Reset your password</h1>
        <p>Hi {name},</p>
        <p>We received a request to reset the password for your FinTrack account.</p>
        <p style="margin: 24px 0;">
            <a href="{reset_url}" style="background: #2563eb; color: #ffffff; padding: 12px 20px; border-radius: 8px; text-decoration: none;">Reset password</a>
        </p>
        <p>This link expires in {expires_minutes} minutes and can only be used once.</p>
        <p style="margin-top: 24px; padding-top: 16px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 12px;">
            If you did not ask for a reset you can ignore this email; your password will not change.
        </p>
    </body>
    </html>
    """


def get_mailer() -> Mailer:
    """Dependency that provides the SMTP mailer."""
    return Mailer(get_settings())
