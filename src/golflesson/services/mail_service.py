"""Email delivery through the Resend API."""

from dataclasses import dataclass
from typing import Any

import resend

from golflesson.config.types import MailConfig
from golflesson.utils.logging_utils import EnhancedLoggerMixin


@dataclass(frozen=True)
class SendResult:
    """Outcome of a single delivery attempt."""
    success: bool
    id: str | None = None
    error: str | None = None

class MailService(EnhancedLoggerMixin):
    """Service for sending HTML email via Resend."""

    def __init__(self, config: MailConfig):
        """Initialize mail service."""
        super().__init__()
        self.config = config
        self.set_log_context(service="mail")

        if not self.config.enabled:
            self.warning("Resend API key not configured - email delivery will be disabled")

    def is_enabled(self) -> bool:
        """Check if Resend is configured."""
        return self.config.enabled

    def send(self, to: str, subject: str, html: str) -> SendResult:
        """Send a single email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body

        Returns:
            SendResult; failures are reported here, never raised
        """
        if not self.is_enabled():
            self.warning("Email not sent, delivery disabled", subject=subject)
            return SendResult(success=False, error="メール送信が設定されていません")

        email_data: dict[str, Any] = {
            "from": self.config.sender,
            "to": [to],
            "subject": subject,
            "html": html,
        }

        # The SDK reads the key from module state
        resend.api_key = self.config.api_key
        try:
            response = resend.Emails.send(email_data)
        except Exception as e:
            self.error("Resend delivery failed", subject=subject, error=str(e))
            return SendResult(success=False, error="メール送信に失敗しました")

        message_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)
        self.info("Email sent", subject=subject, message_id=message_id)
        return SendResult(success=True, id=message_id)
