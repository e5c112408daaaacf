"""
Email Template Renderer
=======================

Fills {{NAME}} placeholders in the static HTML email templates shipped in
templates/email/. Templates are read from disk on every call, so edits show up
without a restart.
"""

import os
import re
import logging
from datetime import datetime

from markupsafe import escape

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), 'templates', 'email')

# {{COMPANY_NAME}}, {{ YEAR }}, ...
PLACEHOLDER = re.compile(r'\{\{\s*([A-Z][A-Z0-9_]*)\s*\}\}')


def substitute(html, variables):
    """Replace every placeholder in html. Unknown or missing names become empty text."""
    def _replace(match):
        value = variables.get(match.group(1))
        if value is None:
            return ''
        return str(escape(value))

    return PLACEHOLDER.sub(_replace, html)


class TemplateRenderer:
    """Loads a template by name and fills its placeholders."""

    def __init__(self, template_dir=DEFAULT_TEMPLATE_DIR):
        self.template_dir = template_dir

    def _load(self, name):
        path = os.path.join(self.template_dir, name)
        with open(path, 'r', encoding='utf-8') as fh:
            return fh.read()

    def render(self, name, **values):
        """Render templates/email/<name> with the given placeholder values.

        YEAR defaults to the current year.
        """
        variables = {'YEAR': datetime.now().year}
        variables.update({k: v for k, v in values.items() if v is not None})
        return substitute(self._load(name), variables)
