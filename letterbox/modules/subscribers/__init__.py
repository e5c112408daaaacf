"""
Subscribers Module
==================

Provides:
- Signup form page
- Subscribe endpoint (rate limited, sends the welcome email)
- Token based unsubscribe endpoint (sends the farewell email)
- Health check
"""

from flask import Blueprint

subscribers_bp = Blueprint(
    'subscribers',
    __name__,
    template_folder='templates'
)

from . import routes
