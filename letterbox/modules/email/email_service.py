"""
Email Service Module
====================

Sends the transactional newsletter emails (welcome and farewell) through SMTP
or the Resend API. Provider is selected via EMAIL_PROVIDER config ('smtp' or
'resend'). Every send is a single blocking call; failures raise MailError and
are never retried here.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from letterbox.core.errors import MailError
from .renderer import TemplateRenderer

logger = logging.getLogger(__name__)

# Try to import resend - it's optional
try:
    import resend
    RESEND_AVAILABLE = True
except ImportError:
    RESEND_AVAILABLE = False
    logger.info("resend package not installed.")


class EmailService:
    """
    Transactional email sender.

    Configuration (set in Flask app.config):
        EMAIL_PROVIDER: 'smtp' (default) or 'resend'
        EMAIL_ADDRESS: Sender email address
        EMAIL_HOST / EMAIL_PORT: SMTP relay (default smtp.gmail.com:587)
        EMAIL_USERNAME: SMTP login (default: EMAIL_ADDRESS)
        EMAIL_PASSWORD: SMTP password/app password
        EMAIL_USE_SSL: connect with implicit TLS instead of STARTTLS
        EMAIL_TIMEOUT: seconds before a slow relay is abandoned (default 10)
        RESEND_API_KEY: Resend API key (only if provider is 'resend')
        COMPANY_NAME / LOGO_URL / COMPANY_WEBSITE: template branding
    """

    def __init__(self, app=None, renderer=None):
        self.provider = 'smtp'
        self.sender_email = None
        self.smtp_host = 'smtp.gmail.com'
        self.smtp_port = 587
        self.smtp_username = None
        self.smtp_password = None
        self.use_ssl = False
        self.timeout = 10.0
        self.api_key = None
        self.company_name = ''
        self.logo_url = ''
        self.company_website = ''
        self.renderer = renderer or TemplateRenderer()

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Initialize email service with Flask app configuration"""
        self.provider = (app.config.get('EMAIL_PROVIDER') or 'smtp').lower()
        logger.info(f"Initializing email service (provider: {self.provider})")

        self.sender_email = app.config.get('EMAIL_ADDRESS')
        self.timeout = float(app.config.get('EMAIL_TIMEOUT', 10))

        # Branding settings
        self.company_name = app.config.get('COMPANY_NAME', '')
        self.logo_url = app.config.get('LOGO_URL', '')
        self.company_website = app.config.get('COMPANY_WEBSITE', '')

        if not self.sender_email:
            logger.warning("EMAIL_ADDRESS not configured - email sending will fail")

        if self.provider == 'resend':
            self._init_resend(app)
        else:
            self._init_smtp(app)

    def _init_resend(self, app):
        """Initialize Resend provider"""
        self.api_key = app.config.get('RESEND_API_KEY')

        if not self.api_key:
            logger.warning("RESEND_API_KEY not configured - email sending disabled")
            return

        if not RESEND_AVAILABLE:
            logger.error("resend package not installed")
            return

        resend.api_key = self.api_key
        logger.info("Resend API client initialized successfully")

    def _init_smtp(self, app):
        """Initialize SMTP provider (e.g. Gmail)"""
        self.smtp_host = app.config.get('EMAIL_HOST', 'smtp.gmail.com')
        self.smtp_port = int(app.config.get('EMAIL_PORT', 587))
        self.smtp_username = app.config.get('EMAIL_USERNAME') or self.sender_email
        self.smtp_password = app.config.get('EMAIL_PASSWORD')
        self.use_ssl = bool(app.config.get('EMAIL_USE_SSL', False))

        if not self.smtp_password:
            logger.warning("EMAIL_PASSWORD not configured - SMTP email sending disabled")
            return

        logger.info(f"SMTP configured: {self.smtp_host}:{self.smtp_port}")

    def send_email(self, to: str, subject: str, html_body: str,
                   text_body: Optional[str] = None) -> None:
        """
        Send one email via the configured provider.

        Raises:
            MailError: the provider is not configured or rejected the message
        """
        if not self.sender_email:
            raise MailError("Sender email not configured")

        logger.info(f"Sending email from: {self.sender_email} to: {to} ({subject})")

        if self.provider == 'resend':
            self._send_via_resend(to, subject, html_body, text_body)
        else:
            self._send_via_smtp(to, subject, html_body, text_body)

        logger.info(f"Email sent to {to}: {subject}")

    def _send_via_resend(self, recipient: str, subject: str, html_body: str,
                         text_body: Optional[str] = None) -> None:
        """Send a single email via Resend API"""
        if not RESEND_AVAILABLE:
            raise MailError("resend package not installed")

        if not self.api_key:
            raise MailError("Resend API key not configured")

        email_params = {
            "from": self.sender_email,
            "to": recipient,
            "subject": subject,
            "html": html_body
        }
        if text_body:
            email_params["text"] = text_body

        try:
            r = resend.Emails.send(email_params)
        except Exception as e:
            logger.error(f"Resend error for {recipient}: {e}")
            raise MailError(str(e)) from e

        if not r or not r.get('id'):
            logger.error(f"Resend error for {recipient}: {r}")
            raise MailError("Resend did not accept the message")

        logger.debug(f"Resend accepted email for {recipient}, ID: {r['id']}")

    def _send_via_smtp(self, recipient: str, subject: str, html_body: str,
                       text_body: Optional[str] = None) -> None:
        """Send a single email via SMTP (e.g. Gmail)"""
        if not self.smtp_password:
            raise MailError("SMTP password not configured")

        msg = MIMEMultipart('alternative')
        msg['From'] = self.sender_email
        msg['To'] = recipient
        msg['Subject'] = subject

        if text_body:
            msg.attach(MIMEText(text_body, 'plain', 'utf-8'))
        msg.attach(MIMEText(html_body, 'html', 'utf-8'))

        try:
            if self.use_ssl:
                with smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                    server.login(self.smtp_username, self.smtp_password)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                    server.starttls()
                    server.login(self.smtp_username, self.smtp_password)
                    server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP error for {recipient}: {e}")
            raise MailError(str(e)) from e

    def _render(self, name, **values):
        """Render an email template; a missing or unreadable template is a MailError"""
        try:
            return self.renderer.render(name, **values)
        except OSError as e:
            logger.error(f"Could not load email template {name}: {e}")
            raise MailError(str(e)) from e

    def _branding(self):
        return {
            'COMPANY_NAME': self.company_name,
            'LOGO_URL': self.logo_url,
            'COMPANY_WEBSITE': self.company_website,
        }

    # ==================== Welcome Email ====================

    def send_welcome_email(self, email: str, unsubscribe_url: str) -> None:
        """Send the newsletter welcome email with the subscriber's unsubscribe link."""
        subject = f"Welcome to the {self.company_name} newsletter!"
        html_body = self._render('newsletter.html', UNSUBSCRIBE_URL=unsubscribe_url,
                                         **self._branding())
        text_body = f"""
Thanks for subscribing to the {self.company_name} newsletter!

You'll get our latest posts and announcements straight to your inbox.

{self.company_website}

To unsubscribe, visit: {unsubscribe_url}
        """

        self.send_email(email, subject, html_body, text_body)

    # ==================== Farewell Email ====================

    def send_farewell_email(self, email: str) -> None:
        """Confirm to a removed subscriber that they will get no more newsletters."""
        subject = f"You have unsubscribed from the {self.company_name} newsletter"
        html_body = self._render('farewell.html', EMAIL=email, **self._branding())
        text_body = f"""
Hi {email},

You have been removed from the {self.company_name} newsletter and will not receive any more emails from us.

Changed your mind? You can subscribe again any time at {self.company_website}
        """

        self.send_email(email, subject, html_body, text_body)
