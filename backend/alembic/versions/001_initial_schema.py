# backend/alembic/versions/001_initial_schema.py
"""Initial schema - accounts, locations, scheduling, lessons, payments, reviews

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-09-01 00:00:00.000000

All tables are created in their final form. Ids are 26-char ULID strings
generated by the application. Roles, statuses and lesson types are VARCHAR
with CHECK constraints rather than native enums.

The partial unique index uq_lessons_instructor_live_slot lets only one
PENDING or CONFIRMED lesson start at a given slot for an instructor.
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LIVE_STATUS_PREDICATE = "status IN ('PENDING', 'CONFIRMED')"


def upgrade() -> None:
    """Create the Sideout schema."""
    print("Creating accounts and instructor profiles...")

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("skill_level", sa.String(20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("role IN ('student', 'instructor', 'admin')", name="ck_profiles_role"),
        sa.CheckConstraint(
            "skill_level IS NULL OR skill_level IN "
            "('beginner', 'intermediate', 'advanced', 'competitive')",
            name="ck_profiles_skill_level",
        ),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=True)
    op.create_index("ix_profiles_id", "profiles", ["id"])

    op.create_table(
        "instructors",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("profile_id", sa.String(26), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("years_experience", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("certifications", sa.JSON(), nullable=False),
        sa.Column("specialties", sa.JSON(), nullable=False),
        sa.Column("skill_levels", sa.JSON(), nullable=False),
        sa.Column("hourly_rate_cents", sa.Integer(), nullable=False),
        sa.Column("photo_url", sa.String(500), nullable=True),
        sa.Column("photo_key", sa.String(255), nullable=True),
        sa.Column(
            "stripe_account_id",
            sa.String(255),
            nullable=True,
            comment="Stripe Connect account",
        ),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "is_accepting_students", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column("rating_average", sa.Float(), nullable=True),
        sa.Column("review_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["profile_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("profile_id"),
        sa.CheckConstraint("years_experience >= 0", name="ck_instructors_experience"),
        sa.CheckConstraint("hourly_rate_cents > 0", name="ck_instructors_rate_positive"),
        sa.CheckConstraint("review_count >= 0", name="ck_instructors_review_count"),
        sa.CheckConstraint(
            "rating_average IS NULL OR (rating_average >= 1 AND rating_average <= 5)",
            name="ck_instructors_rating_range",
        ),
    )
    op.create_index("ix_instructors_id", "instructors", ["id"])

    print("Creating locations and scheduling tables...")

    op.create_table(
        "locations",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(50), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("court_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "timezone", sa.String(50), nullable=False, server_default="America/Los_Angeles"
        ),
        sa.Column("amenities", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("court_count >= 1", name="ck_locations_court_count"),
        sa.CheckConstraint(
            "latitude IS NULL OR (latitude >= -90 AND latitude <= 90)",
            name="ck_locations_latitude",
        ),
        sa.CheckConstraint(
            "longitude IS NULL OR (longitude >= -180 AND longitude <= 180)",
            name="ck_locations_longitude",
        ),
    )
    op.create_index("ix_locations_id", "locations", ["id"])
    op.create_index("idx_locations_city_active", "locations", ["city", "is_active"])

    op.create_table(
        "instructor_availability",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("instructor_id", sa.String(26), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("location_id", sa.String(26), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["instructor_id"], ["instructors.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"], ondelete="SET NULL"),
        sa.CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_availability_day"),
        sa.CheckConstraint("start_time < end_time", name="ck_availability_time_order"),
    )
    op.create_index(
        "idx_availability_instructor_day",
        "instructor_availability",
        ["instructor_id", "day_of_week"],
    )

    op.create_table(
        "instructor_blackouts",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("instructor_id", sa.String(26), nullable=False),
        sa.Column("blackout_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["instructor_id"], ["instructors.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "instructor_id", "blackout_date", name="uq_blackouts_instructor_date"
        ),
    )

    print("Creating lessons and payments...")

    op.create_table(
        "lessons",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("student_id", sa.String(26), nullable=False),
        sa.Column("instructor_id", sa.String(26), nullable=False),
        sa.Column("location_id", sa.String(26), nullable=False),
        sa.Column("lesson_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("lesson_type", sa.String(20), nullable=False, server_default="private"),
        sa.Column("participants", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("skill_level", sa.String(20), nullable=True),
        sa.Column("student_note", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("platform_fee_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "payment_intent_id",
            sa.String(255),
            nullable=True,
            comment="Current Stripe payment intent",
        ),
        sa.Column(
            "payment_status", sa.String(50), nullable=True, comment="Mirrors Stripe intent status"
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reminder_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_by_id", sa.String(26), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["student_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["instructor_id"], ["instructors.id"]),
        sa.ForeignKeyConstraint(["location_id"], ["locations.id"]),
        sa.ForeignKeyConstraint(["cancelled_by_id"], ["profiles.id"]),
        sa.CheckConstraint("start_time < end_time", name="ck_lessons_time_order"),
        sa.CheckConstraint("duration_minutes IN (60, 90, 120)", name="ck_lessons_duration"),
        sa.CheckConstraint(
            "participants >= 1 AND participants <= 6", name="ck_lessons_participants"
        ),
        sa.CheckConstraint("price_cents > 0", name="ck_lessons_price_positive"),
        sa.CheckConstraint("platform_fee_cents >= 0", name="ck_lessons_fee_non_negative"),
        sa.CheckConstraint(
            "lesson_type IN ('private', 'semi_private', 'group')", name="ck_lessons_type"
        ),
        sa.CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED', 'NO_SHOW')",
            name="ck_lessons_status",
        ),
    )
    op.create_index("ix_lessons_id", "lessons", ["id"])
    op.create_index("ix_lessons_student_id", "lessons", ["student_id"])
    op.create_index("ix_lessons_instructor_id", "lessons", ["instructor_id"])
    op.create_index("ix_lessons_lesson_date", "lessons", ["lesson_date"])
    op.create_index("ix_lessons_status", "lessons", ["status"])
    op.create_index("idx_lessons_instructor_date", "lessons", ["instructor_id", "lesson_date"])
    op.create_index("idx_lessons_student_date", "lessons", ["student_id", "lesson_date"])
    op.create_index(
        "uq_lessons_instructor_live_slot",
        "lessons",
        ["instructor_id", "lesson_date", "start_time"],
        unique=True,
        postgresql_where=sa.text(LIVE_STATUS_PREDICATE),
        sqlite_where=sa.text(LIVE_STATUS_PREDICATE),
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("lesson_id", sa.String(26), nullable=False),
        sa.Column("stripe_payment_intent_id", sa.String(255), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("application_fee_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="usd"),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("refunded_amount_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("stripe_refund_id", sa.String(255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["lesson_id"], ["lessons.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("stripe_payment_intent_id"),
    )
    op.create_index("ix_payments_lesson_id", "payments", ["lesson_id"])

    op.create_table(
        "stripe_webhook_events",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("event_id", sa.String(255), nullable=False),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="processed"),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column(
            "processed_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_id"),
    )

    print("Creating reviews...")

    op.create_table(
        "reviews",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("lesson_id", sa.String(26), nullable=False),
        sa.Column("student_id", sa.String(26), nullable=False),
        sa.Column("instructor_id", sa.String(26), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("is_visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["lesson_id"], ["lessons.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["instructor_id"], ["instructors.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("lesson_id", name="uq_reviews_lesson"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        sa.CheckConstraint(
            "comment IS NULL OR length(comment) <= 1000", name="ck_reviews_comment_length"
        ),
    )
    op.create_index("ix_reviews_student_id", "reviews", ["student_id"])
    op.create_index("ix_reviews_instructor_id", "reviews", ["instructor_id"])
    op.create_index(
        "idx_reviews_instructor_visible", "reviews", ["instructor_id", "is_visible"]
    )

    op.create_table(
        "review_responses",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("review_id", sa.String(26), nullable=False),
        sa.Column("instructor_id", sa.String(26), nullable=False),
        sa.Column("response_text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["review_id"], ["reviews.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["instructor_id"], ["instructors.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("review_id", name="uq_review_responses_review"),
        sa.CheckConstraint(
            "length(response_text) <= 1000", name="ck_review_responses_length"
        ),
    )

    print("Initial schema created")


def downgrade() -> None:
    """Drop every Sideout table, children first."""
    print("Dropping Sideout schema...")
    op.drop_table("review_responses")
    op.drop_table("reviews")
    op.drop_table("stripe_webhook_events")
    op.drop_table("payments")
    op.drop_index("uq_lessons_instructor_live_slot", table_name="lessons")
    op.drop_table("lessons")
    op.drop_table("instructor_blackouts")
    op.drop_table("instructor_availability")
    op.drop_table("locations")
    op.drop_table("instructors")
    op.drop_table("profiles")
