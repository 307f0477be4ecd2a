# backend/app/services/email.py
"""
Outbound email for Sideout.

``EMAIL_PROVIDER=resend`` delivers through the Resend API; ``console`` writes
the message to the log, which is what local development and tests use.
"""

import logging
import re
from typing import Any, Dict, Optional

import resend
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ExternalServiceException, ServiceException
from .base import BaseService

logger = logging.getLogger(__name__)

_TAG_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


def html_to_text(html_content: str) -> str:
    """Plain-text alternative part: tags stripped, whitespace collapsed."""
    text = re.sub(r"<[^>]+>", "", html_content)
    return re.sub(r"\s+", " ", text).strip()


class EmailService(BaseService):
    def __init__(self, db: Session, provider: Optional[str] = None):
        super().__init__(db)
        self.provider = provider or settings.email_provider
        self.from_email = settings.from_email

        if self.provider == "resend":
            if not settings.resend_api_key:
                raise ServiceException("Resend API key not configured")
            resend.api_key = settings.resend_api_key

    @BaseService.measure_operation("send_email")
    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send one message.

        ``category`` (for example ``lesson_reminder``) is attached as a Resend
        tag so deliveries can be filtered per notification kind.

        Raises:
            ExternalServiceException: Resend rejected the message or was unreachable
        """
        text_content = text_content or html_to_text(html_content)

        if self.provider == "console":
            self.logger.info(f"[console email] to={to_email} subject={subject!r}\n{text_content}")
            return {"id": "console", "to": to_email}

        email_data: Dict[str, Any] = {
            "from": self.from_email,
            "to": to_email,
            "subject": subject,
            "html": html_content,
            "text": text_content,
        }
        if category:
            email_data["tags"] = [{"name": "category", "value": _TAG_UNSAFE.sub("_", category)}]

        try:
            response = resend.Emails.send(email_data)
        except Exception as e:
            self.log_operation("email_failed", to_email=to_email, subject=subject, error=str(e))
            raise ExternalServiceException(f"Email sending failed: {str(e)}", code="EMAIL_FAILED")

        self.log_operation("email_sent", to_email=to_email, subject=subject)
        return dict(response)
