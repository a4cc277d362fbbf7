"""Configurable fake wallet gateway for development and testing.

No network calls are made. Callbacks are accepted when their ``signature``
is ``"test-signature"``, so webhook tests can post hand-written payloads.
"""

from uuid import uuid4

from storefront.gateway.port import PaymentLink, WalletGateway


class FakeWalletGateway(WalletGateway):
    """Configurable fake wallet gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Wallet unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Wallet unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_payment(
        self,
        order_code: str,
        amount: int,
        order_info: str,
        redirect_url: str,
        ipn_url: str,
    ) -> PaymentLink:
        self.calls.append(
            {
                "method": "create_payment",
                "order_code": order_code,
                "amount": amount,
                "order_info": order_info,
                "redirect_url": redirect_url,
                "ipn_url": ipn_url,
            }
        )

        if self.should_succeed:
            request_id = f"fake_req_{uuid4().hex[:12]}"
            return PaymentLink(
                success=True,
                pay_url=f"https://test-payment.momo.vn/pay/{order_code}?requestId={request_id}",
                request_id=request_id,
                raw={"resultCode": 0, "message": "Successful."},
            )
        return PaymentLink(success=False, failure_reason=self.failure_reason)

    def verify_callback(self, payload: dict) -> bool:
        return payload.get("signature") == "test-signature"
