"""Forgotten passwords — emailed one-time reset links.

The raw token only ever exists in the e-mail; the account stores its
SHA-256 digest and an expiry. Requesting a link for an unknown address looks
exactly like requesting one for a real account, and a failed delivery is
logged rather than reported, so the endpoint cannot be used to discover which
addresses are registered.
"""

import hashlib
import secrets
from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from identity.auth.passwords import hash_password
from identity.domain import identity
from identity.shared.email import normalize_email
from identity.user.user import User
from shared.queries import fetch_all
from shared.settings import get_settings
from storefront.mail import get_mailer

logger = structlog.get_logger(__name__)

GENERIC_RESET_MESSAGE = "Nếu email đã đăng ký, link đặt lại sẽ được gửi trong vài phút"
INVALID_TOKEN_MESSAGE = "Reset link is invalid or has expired"


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def reset_email(name, reset_url, minutes) -> dict:
    return {
        "subject": "Đặt lại mật khẩu",
        "body": (
            f"Xin chào {name},\n\n"
            "Chúng tôi nhận được yêu cầu đặt lại mật khẩu cho tài khoản của bạn.\n"
            f"Mở liên kết sau trong vòng {minutes} phút để đặt mật khẩu mới:\n\n"
            f"{reset_url}\n\n"
            "Nếu bạn không yêu cầu, hãy bỏ qua email này."
        ),
    }


@identity.command(part_of="User")
class RequestPasswordReset:
    email: String(required=True, max_length=254)


@identity.command(part_of="User")
class ResetPassword:
    token: String(required=True, max_length=128)
    new_password: String(required=True, max_length=128)


@identity.command_handler(part_of=User)
class PasswordRecoveryHandler:
    @handle(RequestPasswordReset)
    def request_reset(self, command):
        matches = fetch_all(User, email_key=normalize_email(command.email))
        if not matches:
            logger.info("Password reset requested for unknown email")
            return GENERIC_RESET_MESSAGE

        user = matches[0]
        settings = get_settings()
        token = secrets.token_hex(32)
        expires_at = datetime.now(UTC) + timedelta(minutes=settings.password_reset_minutes)

        user.request_password_reset(hash_reset_token(token), expires_at)
        current_domain.repository_for(User).add(user)

        reset_url = f"{settings.frontend_url.rstrip('/')}/quen-mat-khau?token={token}"
        message = reset_email(user.name, reset_url, settings.password_reset_minutes)
        result = get_mailer().send(to=user.email_key, subject=message["subject"], body=message["body"])
        if result.get("status") != "sent":
            logger.warning("Password reset e-mail not delivered", user_id=str(user.id), error=result.get("error"))
        else:
            logger.info("Password reset e-mail sent", user_id=str(user.id))
        return GENERIC_RESET_MESSAGE

    @handle(ResetPassword)
    def reset_password(self, command):
        token_hash = hash_reset_token(command.token)
        now = datetime.now(UTC)
        candidates = [u for u in fetch_all(User, reset_token_hash=token_hash) if u.reset_token_valid(token_hash, now)]
        if not candidates:
            raise ValidationError({"token": [INVALID_TOKEN_MESSAGE]})

        user = candidates[0]
        user.change_password(hash_password(command.new_password))
        current_domain.repository_for(User).add(user)
        logger.info("Password reset completed", user_id=str(user.id))
