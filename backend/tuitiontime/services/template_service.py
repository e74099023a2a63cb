# backend/tuitiontime/services/template_service.py
"""
Template rendering service for TuitionTime.

Provides centralized template rendering using Jinja2 for transactional
emails. Every template receives the common context (brand name, frontend
URL, current year) in addition to the caller's variables.
"""

from datetime import datetime
from decimal import Decimal
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from ..core.config import settings
from ..core.constants import BRAND_NAME
from ..core.exceptions import ServiceException

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


def _currency(value: Union[Decimal, float, int, None]) -> str:
    """Format a rupee amount, e.g. 1500 -> '₹1,500.00'."""
    if value is None:
        return "₹0.00"
    return f"₹{Decimal(str(value)):,.2f}"


def _datetime_display(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime("%a %d %b %Y, %H:%M UTC")


class TemplateService:
    """Jinja2 environment wrapper shared by the notification layer."""

    def __init__(self, template_dir: Optional[Path] = None):
        self.env = Environment(
            loader=FileSystemLoader(template_dir or TEMPLATE_DIR),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["currency"] = _currency
        self.env.filters["when"] = _datetime_display

    def get_common_context(self) -> Dict[str, Any]:
        return {
            "brand_name": BRAND_NAME,
            "frontend_url": settings.frontend_url,
            "current_year": datetime.now().year,
        }

    def render_template(self, template_name: str, context: Optional[Dict[str, Any]] = None) -> str:
        """
        Render a template with the common context merged in.

        Raises:
            ServiceException: If the template does not exist
        """
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound as exc:
            logger.error(f"Template not found: {template_name}")
            raise ServiceException(f"Template not found: {template_name}") from exc
        full_context = {**self.get_common_context(), **(context or {})}
        return template.render(**full_context)
