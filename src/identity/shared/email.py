"""EmailAddress value object for validated, normalized email addresses."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from identity.domain import identity


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


@identity.value_object
class EmailAddress:
    """A validated email address, stored lower-cased.

    Enforces structural validity: exactly one @, non-empty local and domain
    parts, a dot in the domain, no whitespace and no consecutive dots.
    """

    address: String(required=True, max_length=254)

    @invariant.post
    def verify_email_address(self):
        email = self.address
        error = ValidationError({"email": [f"Invalid email address: {email!r}"]})

        if any(ch.isspace() for ch in email) or email.count("@") != 1:
            raise error

        local_part, domain_part = email.split("@", 1)
        if not local_part or not domain_part or "." not in domain_part:
            raise error
        if domain_part.startswith(".") or domain_part.endswith(".") or ".." in email:
            raise error
