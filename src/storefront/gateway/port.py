"""Wallet gateway port (abstract interface).

Checkout talks to the e-wallet only through this contract, so MomoGateway
(production) and FakeWalletGateway (dev/test) are interchangeable.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentLink:
    """Result of asking the wallet for a pay URL."""

    success: bool
    pay_url: str | None = None
    request_id: str | None = None
    raw: dict | None = None
    failure_reason: str | None = None


class WalletGateway(ABC):
    """Abstract e-wallet gateway interface."""

    @abstractmethod
    def create_payment(
        self,
        order_code: str,
        amount: int,
        order_info: str,
        redirect_url: str,
        ipn_url: str,
    ) -> PaymentLink:
        """Request a pay URL the shopper is redirected to."""
        ...

    @abstractmethod
    def verify_callback(self, payload: dict) -> bool:
        """Verify that an IPN callback payload is authentically from the wallet."""
        ...
