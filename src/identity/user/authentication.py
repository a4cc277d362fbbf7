"""Login — check credentials and issue an access token.

Accounts can sign in with either their e-mail or their phone number. Unknown
accounts and wrong passwords produce the same message.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String

from identity.auth.passwords import verify_password
from identity.auth.tokens import create_access_token
from identity.domain import identity
from identity.shared.email import normalize_email
from identity.shared.phone import normalize_phone
from identity.user.user import User
from shared.queries import fetch_all

logger = structlog.get_logger(__name__)

_BAD_CREDENTIALS = "Email/phone number or password is incorrect"


@identity.command(part_of="User")
class AuthenticateUser:
    email: String(max_length=254)
    phone: String(max_length=20)
    password: String(required=True, max_length=128)


def _find_user(email, phone) -> User | None:
    if email:
        found = fetch_all(User, email_key=normalize_email(email))
    elif phone:
        found = fetch_all(User, phone_key=normalize_phone(phone))
    else:
        raise ValidationError({"email": ["Provide an email or a phone number"]})
    return found[0] if found else None


@identity.command_handler(part_of=User)
class AuthenticateUserHandler:
    @handle(AuthenticateUser)
    def authenticate(self, command):
        user = _find_user(command.email, command.phone)
        if user is None or not verify_password(command.password, user.password_hash):
            logger.info("Login rejected", email=command.email, phone=command.phone)
            raise ValidationError({"credentials": [_BAD_CREDENTIALS]})

        return {
            "access_token": create_access_token(str(user.id), user.role),
            "token_type": "bearer",
            "user": user.to_public(),
        }
