"""PhoneNumber value object for Vietnamese phone numbers."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from identity.domain import identity

# 10 digits starting with 0, or +84 followed by 9 digits
_VN_PHONE = re.compile(r"^(0\d{9}|\+84\d{9})$")


def normalize_phone(value: str | None) -> str:
    return re.sub(r"[\s\-().]", "", value or "")


@identity.value_object
class PhoneNumber:
    number: String(required=True, max_length=20)

    @invariant.post
    def validate_phone_format(self):
        if not _VN_PHONE.match(self.number):
            raise ValidationError({"phone": ["Invalid phone number, e.g. 0901234567"]})
