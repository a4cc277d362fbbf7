"""Support bounded context — live chat rooms, messages and the keyword bot."""

import structlog
from protean.domain import Domain

from shared.logging import configure_logging

configure_logging()

support = Domain(name="support")

logger = structlog.get_logger(__name__)
