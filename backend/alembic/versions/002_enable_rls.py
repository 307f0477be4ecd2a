# backend/alembic/versions/002_enable_rls.py
"""Enable Row Level Security with owner policies

Revision ID: 002_enable_rls
Revises: 001_initial_schema
Create Date: 2026-09-01 00:00:01.000000

Postgres only; other dialects (SQLite in tests) skip this migration.

The API connects as the table owner, which bypasses RLS, so these policies
govern direct database access (Supabase PostgREST clients). The caller is
identified by the `sub` claim of the request JWT, which is the profile id.

Policies:
- profiles: a profile reads and updates its own row
- instructors, locations, instructor_availability: public read; an
  instructor updates its own row / windows
- instructor_blackouts: the owning instructor only
- lessons: the student and the instructor of the lesson read it
- reviews, review_responses: public read of visible reviews
- payments, stripe_webhook_events: RLS on, no policies (service role only)
"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002_enable_rls"
down_revision: Union[str, None] = "001_initial_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CALLER = "(current_setting('request.jwt.claims', true)::json ->> 'sub')"
CALLER_INSTRUCTOR_IDS = f"(SELECT id FROM public.instructors WHERE profile_id = {CALLER})"

RLS_TABLES = [
    "profiles",
    "instructors",
    "locations",
    "instructor_availability",
    "instructor_blackouts",
    "lessons",
    "payments",
    "stripe_webhook_events",
    "reviews",
    "review_responses",
]

# (table, policy name, command, USING expression, WITH CHECK expression)
POLICIES = [
    ("profiles", "profiles_select_own", "SELECT", f"id = {CALLER}", None),
    ("profiles", "profiles_update_own", "UPDATE", f"id = {CALLER}", f"id = {CALLER}"),
    ("instructors", "instructors_public_read", "SELECT", "true", None),
    (
        "instructors",
        "instructors_update_own",
        "UPDATE",
        f"profile_id = {CALLER}",
        f"profile_id = {CALLER}",
    ),
    ("locations", "locations_public_read", "SELECT", "true", None),
    ("instructor_availability", "availability_public_read", "SELECT", "true", None),
    (
        "instructor_availability",
        "availability_manage_own",
        "ALL",
        f"instructor_id IN {CALLER_INSTRUCTOR_IDS}",
        f"instructor_id IN {CALLER_INSTRUCTOR_IDS}",
    ),
    (
        "instructor_blackouts",
        "blackouts_manage_own",
        "ALL",
        f"instructor_id IN {CALLER_INSTRUCTOR_IDS}",
        f"instructor_id IN {CALLER_INSTRUCTOR_IDS}",
    ),
    (
        "lessons",
        "lessons_participants_read",
        "SELECT",
        f"student_id = {CALLER} OR instructor_id IN {CALLER_INSTRUCTOR_IDS}",
        None,
    ),
    ("reviews", "reviews_public_read_visible", "SELECT", "is_visible", None),
    ("review_responses", "review_responses_public_read", "SELECT", "true", None),
]


def _is_postgres() -> bool:
    return op.get_bind().dialect.name == "postgresql"


def upgrade() -> None:
    """Enable RLS and create owner policies."""
    if not _is_postgres():
        print("Skipping RLS: not a Postgres database")
        return

    print("Enabling RLS on application tables...")
    for table in RLS_TABLES:
        op.execute(f"ALTER TABLE public.{table} ENABLE ROW LEVEL SECURITY")

    for table, name, command, using, check in POLICIES:
        op.execute(f"DROP POLICY IF EXISTS {name} ON public.{table}")
        statement = f"CREATE POLICY {name} ON public.{table} FOR {command} USING ({using})"
        if check is not None:
            statement += f" WITH CHECK ({check})"
        op.execute(statement)
    print(f"RLS enabled on {len(RLS_TABLES)} tables with {len(POLICIES)} policies")


def downgrade() -> None:
    """Drop the policies and disable RLS."""
    if not _is_postgres():
        return

    for table, name, _command, _using, _check in POLICIES:
        op.execute(f"DROP POLICY IF EXISTS {name} ON public.{table}")
    for table in RLS_TABLES:
        op.execute(f"ALTER TABLE public.{table} DISABLE ROW LEVEL SECURITY")
