"""
Shared fixtures: a Letterbox app on a throwaway SQLite database with an email
double that records sends instead of talking to SMTP.
"""

import os
import shutil
import tempfile
from urllib.parse import urlparse, parse_qs

import pytest
from flask import Flask

from letterbox import Letterbox
from letterbox.core.errors import MailError


class RecordingEmailService:
    """Stands in for EmailService; set fail=True to simulate a relay outage."""

    def __init__(self):
        self.welcomes = []   # [(email, unsubscribe_url)]
        self.farewells = []  # [email]
        self.fail = False

    def send_welcome_email(self, email, unsubscribe_url):
        if self.fail:
            raise MailError('SMTP relay unreachable: connection refused by 10.0.0.25')
        self.welcomes.append((email, unsubscribe_url))

    def send_farewell_email(self, email):
        if self.fail:
            raise MailError('SMTP relay unreachable: connection refused by 10.0.0.25')
        self.farewells.append(email)

    def token_for(self, email):
        """Token embedded in the most recent welcome email sent to email"""
        for recipient, url in reversed(self.welcomes):
            if recipient == email:
                return parse_qs(urlparse(url).query)['token'][0]
        raise KeyError(email)


def configure_app(app, db_dir):
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DATABASE_URL"] = "sqlite:///" + os.path.join(db_dir, "subscribers.db")
    app.config["PUBLIC_BASE_URL"] = "https://news.example.com"
    app.config["COMPANY_NAME"] = "TestCo"
    app.config["COMPANY_WEBSITE"] = "https://testco.example.com"
    app.config["LOGO_URL"] = "https://testco.example.com/logo.png"
    app.config["SUBSCRIBE_RATE_LIMIT"] = 2
    app.config["SUBSCRIBE_RATE_WINDOW"] = 900
    app.config["TRUST_PROXY_HEADERS"] = False
    app.config["CORS_ORIGINS"] = []
    return app


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="letterbox-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def mailer():
    return RecordingEmailService()


@pytest.fixture
def app(tmp_db_dir, mailer):
    """Flask app with Letterbox registered and the recording mailer injected."""
    app = configure_app(Flask(__name__), tmp_db_dir)
    Letterbox(app, email_service=mailer)
    yield app
    with app.app_context():
        from letterbox.core.database import db
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def subscriber_count(app):
    """Callable returning the number of rows in the subscribers table."""
    def _count():
        with app.app_context():
            return app.extensions["letterbox"].store.count()
    return _count
