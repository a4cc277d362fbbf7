"""Domain events for the User aggregate."""

from protean.fields import DateTime, Identifier, String

from identity.domain import identity


@identity.event(part_of="User")
class UserRegistered:
    """A shopper created an account."""

    __version__ = 1

    user_id = Identifier(required=True)
    email = String(required=True)
    name = String(required=True)
    role = String(required=True)
    registered_at = DateTime(required=True)


@identity.event(part_of="User")
class ProfileUpdated:
    __version__ = 1

    user_id = Identifier(required=True)
    name = String()
    phone = String()
    email = String()


@identity.event(part_of="User")
class PasswordChanged:
    __version__ = 1

    user_id = Identifier(required=True)
    changed_at = DateTime(required=True)


@identity.event(part_of="User")
class PasswordResetRequested:
    """A reset link was issued; the token itself is never recorded."""

    __version__ = 1

    user_id = Identifier(required=True)
    expires_at = DateTime(required=True)
