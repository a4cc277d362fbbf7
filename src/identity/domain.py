"""Identity bounded context — shop user accounts and access tokens."""

from protean.domain import Domain

from shared.logging import configure_logging

configure_logging()

identity = Domain(name="identity")
