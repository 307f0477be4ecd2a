# backend/app/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

The bearer token carries the profile id; the profile is loaded on every
request so deactivation and role changes take effect immediately.
"""

import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...auth import get_current_profile_id
from ...database import get_db
from ...models.instructor import Instructor
from ...models.profile import Profile
from ...repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)


def get_current_user(
    profile_id: str = Depends(get_current_profile_id),
    db: Session = Depends(get_db),
) -> Profile:
    """
    Get the current authenticated profile from the database.

    Raises:
        HTTPException: 401 if the profile no longer exists, 403 if inactive
    """
    profile = RepositoryFactory.create_profile_repository(db).get_by_id(profile_id)
    if profile is None:
        logger.warning(f"Token subject {profile_id} has no profile")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not profile.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return profile


def require_student(user: Profile = Depends(get_current_user)) -> Profile:
    """Dependency that ensures the caller is a student."""
    if not user.is_student:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Student access required")
    return user


def require_instructor(user: Profile = Depends(get_current_user)) -> Profile:
    """Dependency that ensures the caller holds the instructor role."""
    if not user.is_instructor:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Instructor access required"
        )
    return user


def get_current_instructor(
    user: Profile = Depends(require_instructor),
    db: Session = Depends(get_db),
) -> Instructor:
    """
    Get the coaching profile of the calling instructor.

    Raises:
        HTTPException: 404 if the instructor has not created a profile yet
    """
    instructor = RepositoryFactory.create_instructor_repository(db).get_by_profile_id(user.id)
    if instructor is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Instructor profile not found"
        )
    return instructor


def require_admin(user: Profile = Depends(get_current_user)) -> Profile:
    """Dependency that ensures the caller has administrator privileges."""
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
