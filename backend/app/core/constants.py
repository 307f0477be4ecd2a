# backend/app/core/constants.py
"""
Application-wide constants for the Sideout platform.
"""

BRAND_NAME = "Sideout"

API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Book beach volleyball lessons with vetted instructors."
API_VERSION = "1.0.0"

# Lesson configuration
ALLOWED_DURATIONS_MINUTES = (60, 90, 120)
MAX_PARTICIPANTS = 6

# Review configuration
REVIEW_COMMENT_MIN_LENGTH = 3
REVIEW_COMMENT_MAX_LENGTH = 1000
REVIEW_RESPONSE_MAX_LENGTH = 1000

# Uploads
ALLOWED_IMAGE_CONTENT_TYPES = ("image/jpeg", "image/png", "image/webp")
UPLOADTHING_FILE_URL_BASE = "https://utfs.io/f"

# Pagination
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
