# backend/app/services/availability_service.py
"""
Availability Service for the Sideout Platform

Instructors publish recurring weekly windows and one-off blackout dates.
Open slots for a date are derived on read: candidate start times step
through each window for that weekday and are dropped when the date is
blacked out, when they overlap a live lesson, or when they fall outside
the booking notice and horizon.
"""

from datetime import date, datetime, time, timedelta
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    BusinessRuleException,
    ConflictException,
    NotFoundException,
    ValidationException,
)
from ..core.timezone_utils import get_location_now, get_location_timezone, utc_now
from ..models.availability import InstructorAvailability, InstructorBlackout
from ..models.instructor import Instructor
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .conflict_checker import ConflictChecker, overlaps

logger = logging.getLogger(__name__)


def _add_minutes(day: date, at: time, minutes: int) -> datetime:
    return datetime.combine(day, at) + timedelta(minutes=minutes)


class AvailabilityService(BaseService):
    """
    Service for weekly availability, blackouts and open slot lookup.
    """

    def __init__(self, db: Session, conflict_checker: Optional[ConflictChecker] = None):
        super().__init__(db)
        self.repository = RepositoryFactory.create_availability_repository(db)
        self.instructor_repository = RepositoryFactory.create_instructor_repository(db)
        self.location_repository = RepositoryFactory.create_location_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db)

    def _get_instructor(self, instructor_id: str) -> Instructor:
        instructor = self.instructor_repository.get_by_id(instructor_id)
        if instructor is None:
            raise NotFoundException(
                "Instructor not found",
                code="INSTRUCTOR_NOT_FOUND",
                details={"instructor_id": instructor_id},
            )
        return instructor

    # Weekly windows

    @BaseService.measure_operation("get_weekly_availability")
    def get_weekly_availability(
        self, instructor: Instructor, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        windows = self.repository.get_windows(instructor.id)
        # Blackouts stay listed until the day is over at every beach the instructor uses
        locations = {w.location_id: w.location for w in windows if w.location is not None}
        location_today = min(
            (get_location_now(loc, now).date() for loc in locations.values()),
            default=get_location_now(None, now).date(),
        )
        return {
            "windows": windows,
            "blackouts": self.repository.list_blackouts(instructor.id, from_date=location_today),
        }

    @BaseService.measure_operation("set_weekly_availability")
    def set_weekly_availability(
        self, instructor: Instructor, windows: List[Dict[str, Any]]
    ) -> List[InstructorAvailability]:
        """
        Replace all weekly windows of an instructor.

        Args:
            instructor: The instructor whose schedule is saved
            windows: Dicts with day_of_week, start_time, end_time, location_id

        Raises:
            ValidationException: Windows overlap on a day, or a window names an
                unknown or inactive location
        """
        self._validate_windows(windows)

        with self.transaction():
            created = self.repository.replace_windows(instructor.id, windows)

        self.log_operation(
            "set_weekly_availability", instructor_id=instructor.id, window_count=len(created)
        )
        return created

    def _validate_windows(self, windows: List[Dict[str, Any]]) -> None:
        by_day: Dict[int, List[Dict[str, Any]]] = {}
        for window in windows:
            if window["start_time"] >= window["end_time"]:
                raise ValidationException(
                    "End time must be after start time",
                    code="INVALID_WINDOW",
                    details={"day_of_week": window["day_of_week"]},
                )
            by_day.setdefault(window["day_of_week"], []).append(window)

        for day_of_week, day_windows in by_day.items():
            day_windows.sort(key=lambda w: w["start_time"])
            for previous, current in zip(day_windows, day_windows[1:]):
                if overlaps(
                    previous["start_time"],
                    previous["end_time"],
                    current["start_time"],
                    current["end_time"],
                ):
                    raise ValidationException(
                        "Availability windows on the same day cannot overlap",
                        code="OVERLAPPING_WINDOWS",
                        details={
                            "day_of_week": day_of_week,
                            "first": f"{previous['start_time']}-{previous['end_time']}",
                            "second": f"{current['start_time']}-{current['end_time']}",
                        },
                    )

        location_ids = {w["location_id"] for w in windows if w.get("location_id")}
        for location_id in location_ids:
            if self.location_repository.get_active(location_id) is None:
                raise ValidationException(
                    "Availability must reference an active location",
                    code="LOCATION_INACTIVE",
                    details={"location_id": location_id},
                )

    # Blackouts

    @BaseService.measure_operation("add_blackout")
    def add_blackout(
        self, instructor: Instructor, blackout_date: date, reason: Optional[str] = None
    ) -> InstructorBlackout:
        if self.repository.get_blackout(instructor.id, blackout_date):
            raise ConflictException(
                "Date is already blacked out",
                code="BLACKOUT_EXISTS",
                details={"blackout_date": blackout_date.isoformat()},
            )
        try:
            with self.transaction():
                blackout = self.repository.add_blackout(instructor.id, blackout_date, reason)
        except IntegrityError:
            raise ConflictException("Date is already blacked out", code="BLACKOUT_EXISTS")

        live = self.conflict_checker.check_instructor_conflicts(
            instructor.id, blackout_date, time.min, time.max
        )
        if live:
            self.logger.warning(
                f"Instructor {instructor.id} blacked out {blackout_date} "
                f"with {len(live)} live lessons still booked"
            )
        return blackout

    @BaseService.measure_operation("remove_blackout")
    def remove_blackout(self, instructor: Instructor, blackout_date: date) -> None:
        with self.transaction():
            deleted = self.repository.delete_blackout(instructor.id, blackout_date)
        if not deleted:
            raise NotFoundException(
                "Blackout not found",
                code="BLACKOUT_NOT_FOUND",
                details={"blackout_date": blackout_date.isoformat()},
            )

    # Slot derivation

    def _windows_for(
        self, instructor_id: str, lesson_date: date, location_id: Optional[str]
    ) -> List[InstructorAvailability]:
        windows = self.repository.get_windows_for_day(instructor_id, lesson_date.weekday())
        if location_id:
            windows = [w for w in windows if w.location_id in (None, location_id)]
        return windows

    def find_covering_window(
        self,
        instructor_id: str,
        lesson_date: date,
        start_time: time,
        end_time: time,
        location_id: str,
    ) -> Optional[InstructorAvailability]:
        for window in self._windows_for(instructor_id, lesson_date, location_id):
            if window.start_time <= start_time and end_time <= window.end_time:
                return window
        return None

    def validate_slot_available(
        self,
        instructor_id: str,
        lesson_date: date,
        start_time: time,
        end_time: time,
        location_id: str,
    ) -> InstructorAvailability:
        """
        Require the slot to sit inside a weekly window on a day that is not
        blacked out.

        Raises:
            BusinessRuleException: Date blacked out or slot outside every window
        """
        if self.repository.is_blacked_out(instructor_id, lesson_date):
            raise BusinessRuleException(
                "Instructor is not teaching on this date",
                code="INSTRUCTOR_UNAVAILABLE",
                details={"lesson_date": lesson_date.isoformat()},
            )
        window = self.find_covering_window(
            instructor_id, lesson_date, start_time, end_time, location_id
        )
        if window is None:
            raise BusinessRuleException(
                "Requested time is outside the instructor's availability",
                code="OUTSIDE_AVAILABILITY",
                details={
                    "lesson_date": lesson_date.isoformat(),
                    "start_time": start_time.isoformat(),
                    "end_time": end_time.isoformat(),
                },
            )
        return window

    @BaseService.measure_operation("get_open_slots")
    def get_open_slots(
        self,
        instructor_id: str,
        lesson_date: date,
        duration_minutes: int,
        location_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        Open start times for a lesson of the given length on a date.

        Returns:
            List of {start_time, end_time, location_id}, ordered by start time
        """
        self._get_instructor(instructor_id)
        now = now or utc_now()

        if self.repository.is_blacked_out(instructor_id, lesson_date):
            return []

        windows = self._windows_for(instructor_id, lesson_date, location_id)
        if not windows:
            return []

        live_lessons = self.conflict_checker.repository.get_live_for_instructor_on_date(
            instructor_id, lesson_date, ConflictChecker.hold_cutoff(now)
        )
        fallback_location = (
            self.location_repository.get_by_id(location_id) if location_id else None
        )

        step = timedelta(minutes=settings.slot_step_minutes)
        slots: List[Dict[str, Any]] = []
        for window in windows:
            tz = get_location_timezone(window.location or fallback_location)
            window_end = datetime.combine(lesson_date, window.end_time)
            candidate = datetime.combine(lesson_date, window.start_time)

            while candidate + timedelta(minutes=duration_minutes) <= window_end:
                start = candidate.time()
                end = _add_minutes(lesson_date, start, duration_minutes).time()
                candidate += step

                if any(overlaps(start, end, l.start_time, l.end_time) for l in live_lessons):
                    continue
                if not ConflictChecker.timing_allows(lesson_date, start, tz, now):
                    continue
                slots.append(
                    {
                        "start_time": start,
                        "end_time": end,
                        "location_id": window.location_id or location_id,
                    }
                )

        slots.sort(key=lambda s: s["start_time"])
        return slots
