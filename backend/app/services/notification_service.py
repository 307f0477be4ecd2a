# backend/app/services/notification_service.py
"""
Notification Service for the Sideout Platform

Renders email templates and hands them to EmailService. Notifications are
best-effort: a failed email is logged and reported as False, never raised
into the booking or payment flow that triggered it.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import BRAND_NAME
from ..models.lesson import Lesson
from ..models.profile import Profile
from .base import BaseService
from .email import EmailService
from .template_service import TemplateService, lesson_type_label

logger = logging.getLogger(__name__)

class NotificationService(BaseService):
    """
    Central notification service for the platform using Jinja2 templates.
    """

    def __init__(
        self,
        db: Session,
        email_service: Optional[EmailService] = None,
        template_service: Optional[TemplateService] = None,
    ) -> None:
        super().__init__(db)
        self.email_service = email_service or EmailService(db)
        self.template_service = template_service or TemplateService()

    def _deliver(
        self, to_email: str, subject: str, template_name: str, context: Dict[str, Any]
    ) -> bool:
        try:
            html_content = self.template_service.render_template(template_name, context)
            self.email_service.send_email(
                to_email=to_email,
                subject=subject,
                html_content=html_content,
                category=template_name.rsplit("/", 1)[-1].split(".", 1)[0],
            )
            return True
        except Exception as e:
            self.logger.error(f"Notification '{template_name}' to {to_email} failed: {str(e)}")
            return False

    @BaseService.measure_operation("send_welcome")
    def send_welcome(self, profile: Profile) -> bool:
        return self._deliver(
            profile.email,
            f"Welcome to {BRAND_NAME}",
            "email/welcome.html",
            {"first_name": profile.first_name, "is_instructor": profile.is_instructor},
        )

    @BaseService.measure_operation("send_lesson_confirmed")
    def send_lesson_confirmed(self, lesson: Lesson) -> bool:
        """Send confirmation to the student and a booking notice to the instructor."""
        label = lesson_type_label(lesson.lesson_type)
        context = {
            "lesson": lesson,
            "payout_cents": lesson.price_cents - lesson.platform_fee_cents,
        }
        student_ok = self._deliver(
            lesson.student.email,
            f"Lesson confirmed with {lesson.instructor.display_name}",
            "email/lesson_confirmed_student.html",
            context,
        )
        instructor_ok = self._deliver(
            lesson.instructor.profile.email,
            f"New {label} lesson booked",
            "email/lesson_confirmed_instructor.html",
            context,
        )
        if not (student_ok and instructor_ok):
            self.logger.warning(f"Some confirmation emails failed for lesson {lesson.id}")
        return student_ok and instructor_ok

    @BaseService.measure_operation("send_lesson_cancelled")
    def send_lesson_cancelled(
        self,
        lesson: Lesson,
        cancelled_by: Profile,
        reason: Optional[str] = None,
        refund_cents: int = 0,
    ) -> bool:
        """Notify both participants; the refund note only goes to the student."""
        by_student = cancelled_by.id == lesson.student_id
        if cancelled_by.is_admin:
            cancelled_by_label = f"{BRAND_NAME} support"
        elif by_student:
            cancelled_by_label = lesson.student.display_name
        else:
            cancelled_by_label = lesson.instructor.display_name

        base_context = {
            "lesson": lesson,
            "reason": reason,
            "cancelled_by_label": cancelled_by_label,
        }
        student_ok = self._deliver(
            lesson.student.email,
            "Your lesson was cancelled",
            "email/lesson_cancelled.html",
            {
                **base_context,
                "recipient_name": lesson.student.first_name,
                "refund_cents": refund_cents,
                "show_refund_note": lesson.payment_status == "succeeded" or refund_cents > 0,
            },
        )
        instructor_ok = self._deliver(
            lesson.instructor.profile.email,
            "A lesson was cancelled",
            "email/lesson_cancelled.html",
            {
                **base_context,
                "recipient_name": lesson.instructor.profile.first_name,
                "refund_cents": 0,
                "show_refund_note": False,
            },
        )
        return student_ok and instructor_ok

    @BaseService.measure_operation("send_lesson_reminder")
    def send_lesson_reminder(self, lesson: Lesson) -> bool:
        student_ok = self._deliver(
            lesson.student.email,
            "Reminder: beach volleyball lesson coming up",
            "email/lesson_reminder.html",
            {
                "lesson": lesson,
                "recipient_name": lesson.student.first_name,
                "counterpart_name": lesson.instructor.display_name,
            },
        )
        instructor_ok = self._deliver(
            lesson.instructor.profile.email,
            "Reminder: you are teaching soon",
            "email/lesson_reminder.html",
            {
                "lesson": lesson,
                "recipient_name": lesson.instructor.profile.first_name,
                "counterpart_name": lesson.student.display_name,
            },
        )
        return student_ok and instructor_ok

    @BaseService.measure_operation("send_review_request")
    def send_review_request(self, lesson: Lesson) -> bool:
        return self._deliver(
            lesson.student.email,
            f"How was your lesson with {lesson.instructor.display_name}?",
            "email/review_request.html",
            {"lesson": lesson, "review_window_days": settings.review_window_days},
        )
