"""
Letterbox Core
==============

Configuration, database binding, error taxonomy and rate limiting shared by the
Letterbox modules.
"""

from .config import Config
from .database import db
from .errors import (
    LetterboxError, ValidationError, RateLimitError, ConflictError,
    NotFoundError, StoreError, MailError,
)
from .rate_limiter import RateLimiter

__all__ = [
    'Config', 'db', 'RateLimiter',
    'LetterboxError', 'ValidationError', 'RateLimitError', 'ConflictError',
    'NotFoundError', 'StoreError', 'MailError',
]
