"""Wallet gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeWalletGateway for development and testing
- MomoGateway for production (``FURNISHOP_PAYMENT_GATEWAY=momo``)
"""

from shared.settings import get_settings
from storefront.gateway.fake_adapter import FakeWalletGateway
from storefront.gateway.port import WalletGateway

_current_gateway: WalletGateway | None = None


def _build_default() -> WalletGateway:
    settings = get_settings()
    if settings.payment_gateway == "momo":
        from storefront.gateway.momo_adapter import MomoGateway

        return MomoGateway(
            partner_code=settings.momo_partner_code,
            access_key=settings.momo_access_key,
            secret_key=settings.momo_secret_key,
            endpoint=settings.momo_endpoint,
            timeout=settings.momo_timeout_seconds,
        )
    return FakeWalletGateway()


def get_gateway() -> WalletGateway:
    """Return the current wallet gateway, built from settings on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_default()
    return _current_gateway


def set_gateway(gateway: WalletGateway) -> None:
    """Override the active wallet gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
