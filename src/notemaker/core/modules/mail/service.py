import asyncio
import smtplib
from email.message import EmailMessage

import structlog

from notemaker.core.core import Service
from notemaker.core.modules.otp.models import OtpPurpose

logger = structlog.get_logger(__name__)

SUBJECT = "Your OTP for Note Maker"

HEADINGS = {
    OtpPurpose.SIGNUP: "Verify Your Email",
    OtpPurpose.LOGIN: "Sign In To Note Maker",
    OtpPurpose.PASSWORD_RESET: "Reset Your Password",
}


def render_otp_email(code: str, purpose: OtpPurpose, ttl_minutes: int) -> tuple[str, str]:
    """Return (plain text, html) bodies for an OTP message."""
    heading = HEADINGS[purpose]
    text = (
        f"{heading}\n\nYour OTP code is: {code}\n\n"
        f"This code will expire in {ttl_minutes} minutes.\n"
        "If you didn't request this code, please ignore this email."
    )
    html = f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #007AFF;">{heading}</h2>
        <p>Your OTP code is:</p>
        <div style="background: #f5f5f5; padding: 20px; text-align: center; margin: 20px 0;">
          <h1 style="color: #007AFF; font-size: 32px; margin: 0; letter-spacing: 5px;">{code}</h1>
        </div>
        <p>This code will expire in {ttl_minutes} minutes.</p>
        <p>If you didn't request this code, please ignore this email.</p>
      </div>
    """
    return text, html


class MailService(Service):
    """Outbound OTP mail over SMTP.

    Delivery is best effort: failures are logged and never surface to the
    flow that requested the message.
    """

    async def send_otp(self, email: str, code: str, purpose: OtpPurpose) -> bool:
        """Send an OTP message. Returns whether the SMTP server accepted it."""
        config = self.core.config
        if not config.smtp_host:
            logger.warning("mail_not_configured", purpose=purpose.value)
            return False

        text, html = render_otp_email(code, purpose, config.otp_ttl_minutes)
        message = EmailMessage()
        message["From"] = config.smtp_from or config.smtp_username or ""
        message["To"] = email
        message["Subject"] = SUBJECT
        message.set_content(text)
        message.add_alternative(html, subtype="html")

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError):
            logger.exception("mail_delivery_failed", purpose=purpose.value)
            return False
        logger.info("mail_sent", purpose=purpose.value)
        return True

    def _deliver(self, message: EmailMessage) -> None:
        config = self.core.config
        with smtplib.SMTP(config.smtp_host or "", config.smtp_port, timeout=10) as server:
            if config.smtp_use_tls:
                server.starttls()
            if config.smtp_username and config.smtp_password:
                server.login(config.smtp_username, config.smtp_password)
            server.send_message(message)
