# backend/app/services/auth_service.py
"""
Authentication Service for the Sideout Platform

Handles account registration, authentication and self-service profile
updates. Follows the service layer pattern to keep business logic out of
routes.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import DUMMY_HASH_FOR_TIMING_ATTACK, get_password_hash, verify_password
from ..core.enums import RoleName
from ..core.exceptions import ConflictException, ValidationException
from ..models.profile import Profile
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

SELF_REGISTRATION_ROLES = (RoleName.STUDENT.value, RoleName.INSTRUCTOR.value)
UPDATABLE_PROFILE_FIELDS = ("first_name", "last_name", "phone", "skill_level")


class AuthService(BaseService):
    """Service for handling authentication operations."""

    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
    ) -> None:
        super().__init__(db)
        self.profile_repository = RepositoryFactory.create_profile_repository(db)
        self._notification_service = notification_service

    @property
    def notification_service(self) -> NotificationService:
        if self._notification_service is None:
            self._notification_service = NotificationService(self.db)
        return self._notification_service

    @BaseService.measure_operation("register_user")
    def register_user(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        role: Optional[str] = None,
        skill_level: Optional[str] = None,
    ) -> Profile:
        """
        Register a new account.

        Args:
            email: Login email (stored lower-cased)
            password: Plain text password (will be hashed)
            first_name: First name
            last_name: Last name
            phone: Optional phone number
            role: 'student' (default) or 'instructor'
            skill_level: Optional student self-assessment

        Returns:
            Created profile

        Raises:
            ConflictException: If email already exists
            ValidationException: If the role cannot be self-assigned
        """
        normalized_email = email.strip().lower()
        role_name = role or RoleName.STUDENT.value
        self.log_operation("register_user", email=normalized_email, role=role_name)

        if role_name not in SELF_REGISTRATION_ROLES:
            raise ValidationException(f"Cannot register with role '{role_name}'")

        if self.profile_repository.get_by_email(normalized_email):
            self.logger.warning(f"Registration failed - email already exists: {normalized_email}")
            raise ConflictException("Email already registered", code="EMAIL_TAKEN")

        try:
            with self.transaction():
                profile = self.profile_repository.create(
                    email=normalized_email,
                    hashed_password=get_password_hash(password),
                    first_name=first_name.strip(),
                    last_name=last_name.strip(),
                    phone=phone,
                    role=role_name,
                    skill_level=skill_level,
                )
        except IntegrityError as e:
            self.logger.error(f"Integrity error registering {normalized_email}: {str(e)}")
            raise ConflictException("Email already registered", code="EMAIL_TAKEN")

        self.logger.info(f"Successfully registered {normalized_email} with role: {role_name}")
        self.notification_service.send_welcome(profile)
        return profile

    @BaseService.measure_operation("authenticate_user")
    def authenticate_user(self, email: str, password: str) -> Optional[Profile]:
        """
        Authenticate by email and password.

        Runs a bcrypt verification even when the email is unknown so response
        timing does not reveal which emails are registered.

        Returns:
            Profile if authentication succeeded, None otherwise
        """
        profile = self.profile_repository.get_by_email(email)
        if profile is None:
            verify_password(password, DUMMY_HASH_FOR_TIMING_ATTACK)
            self.logger.info("Authentication failed for unknown email")
            return None

        if not verify_password(password, profile.hashed_password):
            self.logger.info(f"Authentication failed for profile {profile.id}")
            return None

        return profile

    @BaseService.measure_operation("update_profile")
    def update_profile(self, profile: Profile, updates: Dict[str, Any]) -> Profile:
        """Apply self-service changes (names, phone, skill level)."""
        changes = {k: v for k, v in updates.items() if k in UPDATABLE_PROFILE_FIELDS}
        with self.transaction():
            for key, value in changes.items():
                setattr(profile, key, value)
            self.db.flush()
        self.log_operation("update_profile", profile_id=profile.id, fields=list(changes))
        return profile
