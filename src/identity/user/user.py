"""User aggregate — a shop account, either a customer or an administrator."""

import hmac
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, String, ValueObject

from identity.domain import identity
from identity.shared.email import EmailAddress, normalize_email
from identity.shared.phone import PhoneNumber, normalize_phone
from identity.user.events import PasswordChanged, PasswordResetRequested, ProfileUpdated, UserRegistered
from shared.clock import as_naive_utc


class Role(Enum):
    USER = "user"
    ADMIN = "admin"


@identity.aggregate
class User:
    email: ValueObject(EmailAddress, required=True)
    email_key: String(required=True, max_length=254)  # lower-cased address, for lookups
    name: String(required=True, max_length=150)
    phone: ValueObject(PhoneNumber)
    phone_key: String(max_length=20)
    password_hash: String(required=True, max_length=255)
    role: String(choices=Role, default=Role.USER.value)
    reset_token_hash: String(max_length=64)  # sha256 hex of the emailed token
    reset_token_expires_at: DateTime()
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def register(cls, email, name, password_hash, phone=None, role=Role.USER.value):
        now = datetime.now(UTC)
        email = normalize_email(email)
        phone = normalize_phone(phone) or None
        user = cls(
            email=EmailAddress(address=email),
            email_key=email,
            name=name.strip(),
            phone=PhoneNumber(number=phone) if phone else None,
            phone_key=phone,
            password_hash=password_hash,
            role=role,
            created_at=now,
            updated_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=str(user.id),
                email=email,
                name=user.name,
                role=user.role,
                registered_at=now,
            )
        )
        return user

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def update_profile(self, name=None, phone=None, email=None):
        if name is not None:
            self.name = name.strip()
        if phone is not None:
            phone = normalize_phone(phone)
            self.phone = PhoneNumber(number=phone) if phone else None
            self.phone_key = phone or None
        if email is not None:
            email = normalize_email(email)
            self.email = EmailAddress(address=email)
            self.email_key = email
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProfileUpdated(
                user_id=str(self.id),
                name=name,
                phone=self.phone_key if phone is not None else None,
                email=self.email_key if email is not None else None,
            )
        )

    def change_password(self, password_hash):
        now = datetime.now(UTC)
        self.password_hash = password_hash
        self.reset_token_hash = None
        self.reset_token_expires_at = None
        self.updated_at = now
        self.raise_(PasswordChanged(user_id=str(self.id), changed_at=now))

    def request_password_reset(self, token_hash, expires_at):
        """Remember a fresh reset token; any earlier one stops working."""
        self.reset_token_hash = token_hash
        self.reset_token_expires_at = expires_at
        self.raise_(PasswordResetRequested(user_id=str(self.id), expires_at=expires_at))

    def reset_token_valid(self, token_hash, now) -> bool:
        if not self.reset_token_hash or not hmac.compare_digest(self.reset_token_hash, token_hash):
            return False
        expires_at = as_naive_utc(self.reset_token_expires_at)
        return expires_at is not None and as_naive_utc(now) < expires_at

    def to_public(self) -> dict:
        return {
            "id": str(self.id),
            "email": self.email_key,
            "name": self.name,
            "phone": self.phone_key or "",
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
