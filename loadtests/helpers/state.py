"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state — no cross-user sharing.
State tracks ids and tokens returned by earlier steps so follow-up
requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class AccountState:
    """Tracks a single simulated shopper account."""

    user_id: str | None = None
    email: str | None = None
    password: str | None = None
    access_token: str | None = None

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.access_token}"} if self.access_token else {}


@dataclass
class BrowsingState:
    """Product cards seen while browsing, used to pick items for checkout."""

    products: list[dict] = field(default_factory=list)
    product_id: str | None = None
    slug: str | None = None


@dataclass
class OrderState:
    """Tracks a single order from checkout to tracking or cancellation."""

    order_id: str | None = None
    order_code: str | None = None
    total: float = 0.0
    current_status: str = "Pending"
    items: list[dict] = field(default_factory=list)


@dataclass
class CatalogAdminState:
    """Tracks what an admin session created so it can be cleaned up."""

    access_token: str | None = None
    category_id: str | None = None
    product_id: str | None = None

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.access_token}"} if self.access_token else {}
