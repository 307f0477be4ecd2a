# backend/app/services/template_service.py
"""
Jinja2 rendering for Sideout emails.

Templates live in ``app/templates``; every render sees the brand name, the
frontend URL and the current year alongside the caller's context.
"""

from datetime import date, datetime, time
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader

from ..core.config import settings
from ..core.constants import BRAND_NAME

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

LESSON_TYPE_LABELS = {
    "private": "private",
    "semi_private": "semi-private",
    "group": "group",
}


def currency(cents: Optional[int]) -> str:
    return f"${(cents or 0) / 100:,.2f}"


def format_date(value: Union[date, datetime, str], format_str: str = "%A, %B %-d, %Y") -> str:
    if isinstance(value, str):
        return value
    return value.strftime(format_str)


def format_time(value: Union[time, datetime, str], format_str: str = "%-I:%M %p") -> str:
    if isinstance(value, str):
        return value
    return value.strftime(format_str)


def lesson_type_label(lesson_type: str) -> str:
    return LESSON_TYPE_LABELS.get(lesson_type, lesson_type)


class TemplateService:
    def __init__(self, template_dir: Optional[Path] = None):
        self.env = Environment(
            loader=FileSystemLoader(template_dir or TEMPLATE_DIR),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters.update(
            currency=currency,
            format_date=format_date,
            format_time=format_time,
            lesson_type=lesson_type_label,
        )
        self.env.globals.update(
            brand_name=BRAND_NAME,
            frontend_url=settings.frontend_url,
        )

    def render_template(
        self, template_name: str, context: Optional[Dict[str, Any]] = None, **kwargs: Any
    ) -> str:
        """Render ``template_name``; raises TemplateNotFound for an unknown name."""
        template = self.env.get_template(template_name)
        values = {"current_year": datetime.now().year, **(context or {}), **kwargs}
        return template.render(values)
