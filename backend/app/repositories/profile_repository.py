# backend/app/repositories/profile_repository.py
"""
Profile Repository for the Sideout Platform

Handles account lookups used by authentication and role checks.
"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.profile import Profile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository[Profile]):
    """Repository for Profile data access."""

    def __init__(self, db: Session):
        super().__init__(db, Profile)
        self.logger = logging.getLogger(__name__)

    def get_by_email(self, email: str) -> Optional[Profile]:
        """Get a profile by email, case-insensitively."""
        try:
            return (
                self.db.query(Profile)
                .filter(func.lower(Profile.email) == email.strip().lower())
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting profile by email: {str(e)}")
            raise RepositoryException(f"Failed to get profile: {str(e)}")
