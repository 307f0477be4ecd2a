# backend/app/models/profile.py
"""
Profile model for the Sideout platform.

A profile is the account record shared by students, instructors and admins.
Instructors additionally own an Instructor row (one-to-one) holding their
public coaching profile.

Classes:
    Profile: Main account model for authentication and role management
"""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Profile(Base):
    """
    Main account model for authentication and profile management.

    Attributes:
        id: ULID primary key
        email: Unique email address used for login
        hashed_password: Bcrypt hashed password
        first_name: User's first name
        last_name: User's last name
        phone: Optional phone number
        role: One of student, instructor, admin
        skill_level: Student self-assessment used to match instructors
        is_active: Whether the account may sign in
    """

    __tablename__ = "profiles"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    phone = Column(String(20), nullable=True)
    role = Column(String(20), nullable=False, default="student")
    skill_level = Column(String(20), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    instructor = relationship(
        "Instructor", back_populates="profile", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("role IN ('student', 'instructor', 'admin')", name="ck_profiles_role"),
        CheckConstraint(
            "skill_level IS NULL OR skill_level IN "
            "('beginner', 'intermediate', 'advanced', 'competitive')",
            name="ck_profiles_skill_level",
        ),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self) -> str:
        """Public-facing name: first name and last initial."""
        first = (self.first_name or "").strip()
        last_initial = (self.last_name or "")[:1]
        return f"{first} {last_initial}.".strip() if last_initial else first

    @property
    def is_instructor(self) -> bool:
        return self.role == "instructor"

    @property
    def is_student(self) -> bool:
        return self.role == "student"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"<Profile {self.email} ({self.role})>"
