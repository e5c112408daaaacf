"""
Email Module
============

Provides transactional email sending over SMTP (or Resend) and the placeholder
renderer for the welcome and farewell templates.
"""

from .email_service import EmailService
from .renderer import TemplateRenderer

__all__ = ['EmailService', 'TemplateRenderer']
