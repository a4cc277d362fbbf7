"""Mailer registry — the configured email adapter as a process-wide singleton.

``FURNISHOP_MAIL_BACKEND=smtp`` selects the SMTP relay; anything else keeps
the in-memory fake, which is what tests inspect.
"""

from shared.settings import get_settings
from storefront.mail.email_port import EmailPort

_mailer: EmailPort | None = None


def get_mailer() -> EmailPort:
    global _mailer
    if _mailer is None:
        settings = get_settings()
        if settings.mail_backend == "smtp":
            from storefront.mail.smtp_email import SmtpEmailAdapter

            _mailer = SmtpEmailAdapter(
                host=settings.smtp_host,
                port=settings.smtp_port,
                sender=settings.mail_sender,
                username=settings.smtp_username,
                password=settings.smtp_password,
                use_tls=settings.smtp_use_tls,
            )
        else:
            from storefront.mail.fake_email import FakeEmailAdapter

            _mailer = FakeEmailAdapter()
    return _mailer


def set_mailer(mailer: EmailPort) -> None:
    global _mailer
    _mailer = mailer


def reset_mailer() -> None:
    """Drop the singleton (useful for testing)."""
    global _mailer
    _mailer = None
