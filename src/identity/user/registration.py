"""User registration — command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from identity.auth.passwords import hash_password
from identity.domain import identity
from identity.shared.email import normalize_email
from identity.shared.phone import normalize_phone
from identity.user.user import Role, User
from shared.queries import fetch_all


@identity.command(part_of="User")
class RegisterUser:
    email: String(required=True, max_length=254)
    name: String(required=True, max_length=150)
    password: String(required=True, max_length=128)
    phone: String(max_length=20)
    role: String(choices=Role, default=Role.USER.value)


def ensure_contact_available(email=None, phone=None, exclude_id=None):
    """Email and phone are both login handles, so each may belong to one account only."""
    for field_name, value in (("email_key", normalize_email(email)), ("phone_key", normalize_phone(phone))):
        if not value:
            continue
        clash = [u for u in fetch_all(User, **{field_name: value}) if str(u.id) != str(exclude_id)]
        if clash:
            raise ValidationError({field_name.removesuffix("_key"): ["Email or phone number is already in use"]})


@identity.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        ensure_contact_available(email=command.email, phone=command.phone)

        user = User.register(
            email=command.email,
            name=command.name,
            password_hash=hash_password(command.password),
            phone=command.phone,
            role=command.role or Role.USER.value,
        )
        current_domain.repository_for(User).add(user)
        return str(user.id)
