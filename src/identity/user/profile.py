"""Profile maintenance — contact details and password changes."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from identity.auth.passwords import hash_password, verify_password
from identity.domain import identity
from identity.user.registration import ensure_contact_available
from identity.user.user import User


@identity.command(part_of="User")
class UpdateProfile:
    user_id: Identifier(required=True)
    name: String(max_length=150)
    phone: String(max_length=20)
    email: String(max_length=254)


@identity.command(part_of="User")
class ChangePassword:
    user_id: Identifier(required=True)
    current_password: String(required=True, max_length=128)
    new_password: String(required=True, max_length=128)


@identity.command_handler(part_of=User)
class ProfileHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)

        ensure_contact_available(email=command.email, phone=command.phone, exclude_id=user.id)
        user.update_profile(name=command.name, phone=command.phone, email=command.email)
        repo.add(user)

    @handle(ChangePassword)
    def change_password(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)

        if not verify_password(command.current_password, user.password_hash):
            raise ValidationError({"current_password": ["Current password is incorrect"]})

        user.change_password(hash_password(command.new_password))
        repo.add(user)
