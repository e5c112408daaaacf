"""
Letterbox - Newsletter Subscriptions for Flask
==============================================

A small Flask extension that serves a newsletter signup form, stores
subscribers, sends the welcome and farewell emails and handles token based
unsubscribe links.

Usage:
    from flask import Flask
    from letterbox import Letterbox

    app = Flask(__name__)
    Letterbox(app)

The store, email service and rate limiter are plain objects created here (or
passed in) and shared by the routes through app.extensions['letterbox'].
"""

import os
import logging

from flask_cors import CORS
from sqlalchemy.engine import make_url

__version__ = '0.1.0'

from .core.config import Config
from .core.database import db
from .core.rate_limiter import RateLimiter
from .modules.email import EmailService
from .modules.subscribers import subscribers_bp
from .modules.subscribers.store import SubscriberStore

logger = logging.getLogger(__name__)

__all__ = ['Letterbox', 'Config', 'db']


class Letterbox:
    """Flask extension wiring the subscriber routes to their collaborators."""

    def __init__(self, app=None, store=None, email_service=None, rate_limiter=None):
        self.store = store
        self.email_service = email_service
        self.rate_limiter = rate_limiter

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self._load_config(app)
        self._setup_database_dir(app)

        db.init_app(app)
        with app.app_context():
            db.create_all()

        if self.store is None:
            self.store = SubscriberStore(db)
        if self.email_service is None:
            self.email_service = EmailService(app)
        if self.rate_limiter is None:
            self.rate_limiter = RateLimiter(
                limit=int(app.config['SUBSCRIBE_RATE_LIMIT']),
                window=int(app.config['SUBSCRIBE_RATE_WINDOW']),
            )

        if app.config.get('CORS_ORIGINS'):
            CORS(app, resources={r'/subscribe': {'origins': app.config['CORS_ORIGINS']}})
            logger.info(f"Cross-origin signups allowed from: {app.config['CORS_ORIGINS']}")

        app.register_blueprint(subscribers_bp)
        app.extensions['letterbox'] = self
        logger.info(f"Letterbox initialised (database: {make_url(app.config['SQLALCHEMY_DATABASE_URI']).render_as_string(hide_password=True)})")

    @staticmethod
    def _load_config(app):
        """Fill in anything the app has not configured from the environment-backed Config"""
        for key, value in Config.as_dict().items():
            app.config.setdefault(key, value)
        # Flask pre-populates SECRET_KEY with None
        if not app.config.get('SECRET_KEY'):
            app.config['SECRET_KEY'] = Config.SECRET_KEY
        app.config.setdefault('SQLALCHEMY_DATABASE_URI', app.config['DATABASE_URL'])

    @staticmethod
    def _setup_database_dir(app):
        """Create the directory a SQLite database file lives in"""
        url = make_url(app.config['SQLALCHEMY_DATABASE_URI'])
        if url.get_backend_name() != 'sqlite' or not url.database or url.database == ':memory:':
            return
        path = url.database
        # Flask-SQLAlchemy resolves relative SQLite paths against the instance folder
        if not os.path.isabs(path):
            path = os.path.join(app.instance_path, path)
        db_dir = os.path.dirname(path)
        os.makedirs(db_dir, exist_ok=True)
