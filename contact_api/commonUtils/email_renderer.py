"""
Email template renderer using Jinja2 for easy maintenance
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "emails"


class EmailRenderer:
    """Renders email templates using Jinja2"""

    def __init__(self, template_dir: Optional[Path] = None, brand_name: str = "Portfolio"):
        """
        Initialize email renderer

        Args:
            template_dir: Directory containing email template files
            brand_name: Shown in the footer of every email
        """
        self.template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR

        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            autoescape=select_autoescape(['html', 'xml'])
        )

        # Brand configuration - change once, applies everywhere
        self.brand_config = {
            'brand_name': brand_name,
            'colors': {
                'background': '#f4f4f4',
                'card': '#ffffff',
                'field': '#f9f9f9',
                'dark_text': '#333333',
                'light_text': '#555555',
                'muted_text': '#999999',
            },
            'year': datetime.now(timezone.utc).year
        }

    def render(self, template_name: str, **context) -> str:
        """
        Render an email template with context

        Args:
            template_name: Name of template file (e.g., 'contact_submission.html')
            **context: Variables to pass to template

        Returns:
            Rendered HTML string
        """
        template = self.env.get_template(template_name)

        # Merge brand config with user context
        full_context = {**self.brand_config, **context}

        return template.render(**full_context)

    def contact_submission_email(self, name: str, email: str, message: str) -> str:
        """
        Render the contact form notification.

        The fields must already be sanitized: they are entity-escaped text and are
        marked safe here so autoescape does not escape them a second time.
        """
        return self.render(
            'contact_submission.html',
            name=Markup(name),
            email=Markup(email),
            message=Markup(message),
        )


# Singleton instance
_renderer = None


def get_email_renderer(brand_name: str = "Portfolio") -> EmailRenderer:
    """Get or create email renderer instance"""
    global _renderer
    if _renderer is None or _renderer.brand_config['brand_name'] != brand_name:
        _renderer = EmailRenderer(brand_name=brand_name)
    return _renderer
