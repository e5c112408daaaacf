import os
from dotenv import load_dotenv

load_dotenv(override=True)


def _env_bool(name, default='false'):
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """
    Base configuration for Letterbox.
    Deployments provide credentials and URLs via environment variables (or a .env file).
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Any SQLAlchemy URL works (e.g. postgresql://...); SQLite file is the local fallback
    DATABASE_URL = os.getenv('DATABASE_URL') or 'sqlite:///' + os.path.join(DB_DIR, 'subscribers.db')

    # Public URL the unsubscribe links are built from
    PUBLIC_BASE_URL = os.getenv('PUBLIC_BASE_URL', 'http://localhost:3000')

    # Email settings
    EMAIL_PROVIDER = os.getenv('EMAIL_PROVIDER', 'smtp')
    EMAIL_ADDRESS = os.getenv('EMAIL_ADDRESS') or os.getenv('EMAIL_USER')
    EMAIL_USERNAME = os.getenv('EMAIL_USERNAME')  # defaults to EMAIL_ADDRESS
    EMAIL_PASSWORD = os.getenv('EMAIL_PASSWORD') or os.getenv('EMAIL_PASS')
    EMAIL_HOST = os.getenv('EMAIL_HOST', 'smtp.gmail.com')
    EMAIL_PORT = int(os.getenv('EMAIL_PORT', '587'))
    EMAIL_USE_SSL = _env_bool('EMAIL_USE_SSL')
    EMAIL_TIMEOUT = float(os.getenv('EMAIL_TIMEOUT', '10'))

    # Resend API settings (only used when EMAIL_PROVIDER=resend)
    RESEND_API_KEY = os.getenv('RESEND_API_KEY') or os.getenv('RESEND')

    # Branding placeholders for the newsletter templates
    COMPANY_NAME = os.getenv('COMPANY_NAME', 'Dev Da Vez')
    LOGO_URL = os.getenv('LOGO_URL', 'https://devdavez.com.br/img/logo-dark.png')
    COMPANY_WEBSITE = os.getenv('COMPANY_WEBSITE', 'https://www.devdavez.com.br')

    # Signup throttling: max attempts per client IP inside the window (seconds)
    SUBSCRIBE_RATE_LIMIT = int(os.getenv('SUBSCRIBE_RATE_LIMIT', '2'))
    SUBSCRIBE_RATE_WINDOW = int(os.getenv('SUBSCRIBE_RATE_WINDOW', '900'))

    # Only honour X-Forwarded-For / X-Real-IP when running behind a proxy we control
    TRUST_PROXY_HEADERS = _env_bool('TRUST_PROXY_HEADERS')

    # Comma separated origins allowed to post the signup form cross-site
    CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', '').split(',') if o.strip()]

    # Port for local server
    PORT = int(os.getenv('PORT', '3000'))

    @classmethod
    def as_dict(cls):
        """Upper-case settings as a plain dict, ready for app.config"""
        return {key: getattr(cls, key) for key in dir(cls) if key.isupper()}
