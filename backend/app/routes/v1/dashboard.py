# backend/app/routes/v1/dashboard.py
"""
Dashboard routes - API v1

Endpoints:
    GET /student      → Upcoming, recent and review-pending lessons
    GET /instructor   → Schedule, status counts, earnings and rating
"""

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import get_current_instructor, require_student
from ...api.dependencies.services import get_dashboard_service
from ...models.instructor import Instructor
from ...models.profile import Profile
from ...schemas.dashboard import InstructorDashboardResponse, StudentDashboardResponse
from ...schemas.lesson import LessonResponse
from ...services.dashboard_service import DashboardService

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["dashboard-v1"])


@router.get("/student", response_model=StudentDashboardResponse)
def student_dashboard(
    current_user: Profile = Depends(require_student),
    service: DashboardService = Depends(get_dashboard_service),
) -> StudentDashboardResponse:
    data = service.get_student_dashboard(current_user)
    return StudentDashboardResponse(
        **{
            key: [LessonResponse.from_lesson(lesson) for lesson in lessons]
            for key, lessons in data.items()
        }
    )


@router.get("/instructor", response_model=InstructorDashboardResponse)
def instructor_dashboard(
    instructor: Instructor = Depends(get_current_instructor),
    service: DashboardService = Depends(get_dashboard_service),
) -> InstructorDashboardResponse:
    data = service.get_instructor_dashboard(instructor)
    data["upcoming_lessons"] = [
        LessonResponse.from_lesson(lesson) for lesson in data["upcoming_lessons"]
    ]
    return InstructorDashboardResponse(**data)
