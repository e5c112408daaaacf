"""
Subscribers Routes
==================

Provides:
- GET / -- signup form
- POST /subscribe -- subscribe an email (form field or JSON body 'email')
- GET /unsubscribe?token= -- remove the subscriber owning the token
- GET /health -- database reachability

Requests made with a JSON body get JSON responses; everything else gets the
styled HTML message page. Failures are raised as LetterboxError subclasses and
turned into responses by handle_letterbox_error.
"""

import logging
import re
from urllib.parse import urlencode

from flask import request, jsonify, render_template, current_app
from sqlalchemy.exc import SQLAlchemyError

from letterbox.core import database
from letterbox.core.errors import (
    LetterboxError, ValidationError, RateLimitError, ConflictError,
    NotFoundError, StoreError, MailError,
)
from . import subscribers_bp

# local@domain.tld: no whitespace, exactly one '@', dotted domain without empty labels
EMAIL_REGEX = re.compile(r'^[^\s@]+@[^\s@.]+(\.[^\s@.]+)+$')
MAX_EMAIL_LENGTH = 254

# Setup logging
logger = logging.getLogger(__name__)


def get_letterbox():
    """The Letterbox extension holding the store, mailer and rate limiter"""
    return current_app.extensions['letterbox']


def normalize_email(raw):
    """Trim and lower-case; anything that isn't a string normalizes to ''"""
    if not isinstance(raw, str):
        return ''
    return raw.strip().lower()


def validate_email(email):
    """Validate email format"""
    if not email or len(email) > MAX_EMAIL_LENGTH:
        return False
    return EMAIL_REGEX.match(email) is not None


def get_client_ip():
    """Get client IP address from request"""
    if current_app.config.get('TRUST_PROXY_HEADERS'):
        if request.headers.get('X-Forwarded-For'):
            return request.headers.get('X-Forwarded-For').split(',')[0].strip()
        elif request.headers.get('X-Real-IP'):
            return request.headers.get('X-Real-IP')
    return request.remote_addr or 'unknown'


def build_unsubscribe_url(token):
    base_url = current_app.config.get('PUBLIC_BASE_URL', '').rstrip('/')
    return f"{base_url}/unsubscribe?{urlencode({'token': token})}"


def _respond(message, status=200, title='Newsletter', kind='success', email=None, headers=None):
    """JSON for JSON clients, the styled message page for everyone else"""
    if request.is_json:
        key = 'error' if status >= 400 else 'message'
        response = jsonify({key: message})
    else:
        response = current_app.make_response(render_template(
            'subscribers/message.html',
            title=title,
            message=message,
            kind=kind,
            email=email,
            company_name=current_app.config.get('COMPANY_NAME', ''),
            company_website=current_app.config.get('COMPANY_WEBSITE', ''),
        ))
    response.status_code = status
    for name, value in (headers or {}).items():
        response.headers[name] = value
    return response


@subscribers_bp.errorhandler(LetterboxError)
def handle_letterbox_error(error):
    """Map the error taxonomy onto HTTP responses"""
    if isinstance(error, RateLimitError):
        return _respond(error.message, error.status_code, title='Slow down', kind='error',
                        headers={'Retry-After': str(error.retry_after)})
    if isinstance(error, (ConflictError, NotFoundError)):
        return _respond(error.message, error.status_code, title='Newsletter', kind='info')
    if isinstance(error, ValidationError):
        return _respond(error.message, error.status_code, title='Invalid request', kind='error')

    # StoreError, MailError and anything else: details stay in the log
    logger.error(f"{type(error).__name__} on {request.method} {request.path}: {error}")
    return _respond(LetterboxError.public_message, 500, title='Something went wrong', kind='error')


# ===================
# PUBLIC ROUTES
# ===================

@subscribers_bp.route('/', methods=['GET'])
def index():
    """Signup form"""
    return render_template(
        'subscribers/index.html',
        company_name=current_app.config.get('COMPANY_NAME', ''),
        logo_url=current_app.config.get('LOGO_URL', ''),
        company_website=current_app.config.get('COMPANY_WEBSITE', ''),
    )


@subscribers_bp.route('/subscribe', methods=['POST'])
def subscribe():
    """Handle new subscription requests"""
    letterbox = get_letterbox()
    ip_address = get_client_ip()

    if not letterbox.rate_limiter.check(ip_address):
        logger.warning(f"Subscribe rate limit hit for ip: {ip_address}")
        raise RateLimitError(letterbox.rate_limiter.retry_after(ip_address))

    data = request.get_json(silent=True) if request.is_json else request.form
    if not isinstance(data, dict):
        data = {}
    email = normalize_email(data.get('email'))

    if not validate_email(email):
        raise ValidationError()

    store = letterbox.store
    if store.exists(email):
        logger.info(f"Already subscribed: {email}")
        raise ConflictError()

    token = store.insert(email)

    try:
        letterbox.email_service.send_welcome_email(email, build_unsubscribe_url(token))
    except Exception as e:
        # Drop the row so the visitor can retry once mail works again
        store.delete_by_token(token)
        if isinstance(e, LetterboxError):
            raise
        logger.exception(f"Unexpected error sending welcome email to {email}")
        raise MailError(str(e)) from e

    logger.info(f"New subscription: {email}")
    return _respond(
        'Subscription successful! Check your inbox for the welcome email.',
        title='You are subscribed',
        email=email,
    )


@subscribers_bp.route('/unsubscribe', methods=['GET'])
def unsubscribe():
    """Handle unsubscribe links"""
    token = request.args.get('token', '').strip()
    if not token:
        raise ValidationError('The unsubscribe link is missing its token.')

    letterbox = get_letterbox()
    store = letterbox.store

    subscriber = store.find_by_token(token)
    if subscriber is None:
        raise NotFoundError()

    # Read before the delete expires the row
    email = subscriber.email
    if not store.delete_by_token(token):
        raise NotFoundError()

    logger.info(f"Unsubscribed: {email}")
    letterbox.email_service.send_farewell_email(email)

    return _respond(
        'You have been unsubscribed and will not receive any more newsletters.',
        title='Unsubscribed',
        email=email,
    )


@subscribers_bp.route('/health', methods=['GET'])
def health():
    """Report whether the subscriber database answers"""
    try:
        database.ping()
        subscribers = get_letterbox().store.count()
    except (SQLAlchemyError, StoreError) as e:
        logger.error(f"Health check failed: {e}")
        database.db.session.rollback()
        return jsonify({'status': 'critical', 'checks': {'database': 'unreachable'}}), 503

    return jsonify({
        'status': 'ok',
        'checks': {'database': 'ok', 'subscribers': subscribers},
    }), 200
