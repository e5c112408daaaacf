"""
Subscriber Store
================

The subscribers table and the four operations the routes need. Uniqueness of
email and token is enforced by the database, so concurrent signups for the same
address end in exactly one row and a ConflictError for the loser.
"""

import logging
import secrets
from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from letterbox.core.database import db
from letterbox.core.errors import ConflictError, StoreError

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def generate_token():
    """Random URL-safe unsubscribe token (256 bits)"""
    return secrets.token_urlsafe(TOKEN_BYTES)


def _utcnow():
    return datetime.now(timezone.utc)


class Subscriber(db.Model):
    __tablename__ = 'subscribers'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(254), unique=True, nullable=False)
    unsubscribe_token = db.Column(db.String(64), unique=True, nullable=False)
    subscribed_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self):
        return f'<Subscriber {self.email}>'


class SubscriberStore:
    """Persistence for Subscriber rows. Callers pass normalized emails."""

    def __init__(self, database=db):
        self.db = database

    @property
    def session(self):
        return self.db.session

    def _fail(self, action, error):
        self.session.rollback()
        logger.error(f"Database error while trying to {action}: {error}")
        raise StoreError() from error

    def exists(self, email):
        try:
            stmt = select(Subscriber.id).filter_by(email=email).limit(1)
            return self.session.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            self._fail('check subscriber', e)

    def insert(self, email):
        """Add a subscriber and return its unsubscribe token."""
        token = generate_token()
        try:
            self.session.add(Subscriber(email=email, unsubscribe_token=token))
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.info(f"Insert rejected by unique constraint for: {email}")
            raise ConflictError() from e
        except SQLAlchemyError as e:
            self._fail('insert subscriber', e)

        logger.info(f"New subscriber stored: {email}")
        return token

    def find_by_token(self, token):
        """Return the Subscriber for token, or None."""
        if not token:
            return None
        try:
            stmt = select(Subscriber).filter_by(unsubscribe_token=token)
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            self._fail('look up token', e)

    def delete_by_token(self, token):
        """Delete the subscriber owning token. Returns whether a row was removed."""
        if not token:
            return False
        try:
            stmt = delete(Subscriber).where(Subscriber.unsubscribe_token == token)
            result = self.session.execute(stmt)
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail('delete subscriber', e)
        return result.rowcount > 0

    def count(self):
        try:
            stmt = select(func.count(Subscriber.id))
            return self.session.execute(stmt).scalar_one()
        except SQLAlchemyError as e:
            self._fail('count subscribers', e)
