"""
Letterbox Modules
=================

Flask blueprint modules for newsletter subscriptions and email delivery.
"""

__all__ = ['email', 'subscribers']
