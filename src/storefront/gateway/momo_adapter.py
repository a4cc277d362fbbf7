"""MoMo e-wallet adapter (captureWallet flow).

Requests are signed with HMAC-SHA256 over a fixed, alphabetically ordered
``key=value`` string and posted as JSON. IPN callbacks carry a signature over
their own field set, which is recomputed here to authenticate them.
"""

import hashlib
import hmac
import time

import requests
import structlog

from storefront.gateway.port import PaymentLink, WalletGateway

logger = structlog.get_logger(__name__)

REQUEST_TYPE = "captureWallet"

IPN_SIGNATURE_FIELDS = (
    "amount",
    "extraData",
    "message",
    "orderId",
    "orderInfo",
    "orderType",
    "partnerCode",
    "payType",
    "requestId",
    "responseTime",
    "resultCode",
    "transId",
)


def sign(secret_key: str, raw_signature: str) -> str:
    return hmac.new(secret_key.encode("utf-8"), raw_signature.encode("utf-8"), hashlib.sha256).hexdigest()


class MomoGateway(WalletGateway):
    def __init__(
        self,
        partner_code: str,
        access_key: str,
        secret_key: str,
        endpoint: str,
        timeout: int = 30,
        session: requests.Session | None = None,
    ) -> None:
        self.partner_code = partner_code
        self.access_key = access_key
        self.secret_key = secret_key
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    def payment_signature(self, order_code, amount, order_info, redirect_url, ipn_url, request_id) -> str:
        raw_signature = (
            f"accessKey={self.access_key}&amount={amount}&extraData=&ipnUrl={ipn_url}"
            f"&orderId={order_code}&orderInfo={order_info}&partnerCode={self.partner_code}"
            f"&redirectUrl={redirect_url}&requestId={request_id}&requestType={REQUEST_TYPE}"
        )
        return sign(self.secret_key, raw_signature)

    def create_payment(
        self,
        order_code: str,
        amount: int,
        order_info: str,
        redirect_url: str,
        ipn_url: str,
    ) -> PaymentLink:
        request_id = f"{order_code}-{int(time.time() * 1000)}"
        body = {
            "partnerCode": self.partner_code,
            "accessKey": self.access_key,
            "requestId": request_id,
            "amount": str(amount),
            "orderId": order_code,
            "orderInfo": order_info,
            "redirectUrl": redirect_url,
            "ipnUrl": ipn_url,
            "extraData": "",
            "requestType": REQUEST_TYPE,
            "signature": self.payment_signature(order_code, amount, order_info, redirect_url, ipn_url, request_id),
            "lang": "vi",
        }

        try:
            response = self.session.post(self.endpoint, json=body, timeout=self.timeout)
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("MoMo create payment request failed", order_code=order_code, error=str(exc))
            return PaymentLink(success=False, request_id=request_id, failure_reason=str(exc))

        pay_url = data.get("payUrl")
        if not pay_url:
            logger.warning(
                "MoMo returned no pay URL",
                order_code=order_code,
                result_code=data.get("resultCode"),
                message=data.get("message"),
            )
            return PaymentLink(
                success=False,
                request_id=request_id,
                raw=data,
                failure_reason=data.get("message") or "No payUrl in MoMo response",
            )

        return PaymentLink(success=True, pay_url=pay_url, request_id=request_id, raw=data)

    def verify_callback(self, payload: dict) -> bool:
        signature = payload.get("signature")
        if not signature:
            return False

        raw_signature = f"accessKey={self.access_key}&" + "&".join(
            f"{field}={payload.get(field, '')}" for field in IPN_SIGNATURE_FIELDS
        )
        return hmac.compare_digest(sign(self.secret_key, raw_signature), signature)
