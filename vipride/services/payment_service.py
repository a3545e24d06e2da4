import base64
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

import requests

from vipride.core.config import settings
from vipride.core.errors import PaymentGatewayError
from vipride.core.logger import logger
from vipride.models.schemas import PaymentRequest

PAYMENT_PATH = "/payment/auth"


class PaymentGateway:
    """Minimal iyzico client: a single non-3DS card payment."""

    def __init__(self, api_key: str = None, secret_key: str = None, base_url: str = None, timeout: int = 30):
        self.api_key = api_key if api_key is not None else settings.IYZI_API_KEY
        self.secret_key = secret_key if secret_key is not None else settings.IYZI_SECRET_KEY
        self.base_url = (base_url or settings.IYZI_BASE_URL).rstrip("/")
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.secret_key)

    def _auth_headers(self, uri_path: str, body: str) -> Dict[str, str]:
        random_key = f"{int(time.time() * 1000)}123456789"
        signature = hmac.new(
            self.secret_key.encode("utf-8"),
            f"{random_key}{uri_path}{body}".encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        token = f"apiKey:{self.api_key}&randomKey:{random_key}&signature:{signature}"
        return {
            "Authorization": "IYZWSv2 " + base64.b64encode(token.encode("utf-8")).decode("ascii"),
            "x-iyzi-rnd": random_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @staticmethod
    def build_request(payment: PaymentRequest, conversation_id: Optional[str] = None) -> Dict[str, Any]:
        return {
            "locale": "tr",
            "conversationId": conversation_id or f"CONV-{int(time.time() * 1000)}",
            "price": payment.price,
            "paidPrice": payment.paidPrice,
            "currency": payment.currency,
            "installment": "1",
            "basketId": payment.basketId,
            "paymentChannel": "WEB",
            "paymentGroup": "PRODUCT",
            "paymentCard": payment.paymentCard,
            "buyer": payment.buyer,
            "shippingAddress": payment.shippingAddress,
            "billingAddress": payment.billingAddress,
            "basketItems": payment.basketItems,
        }

    def create_payment(self, payment: PaymentRequest) -> Dict[str, Any]:
        """
        Charges the card. Returns iyzico's JSON answer ("status" is "success" or "failure").
        Raises PaymentGatewayError if the gateway can't be reached or doesn't answer JSON.
        """
        request_body = json.dumps(self.build_request(payment), separators=(",", ":"))
        url = f"{self.base_url}{PAYMENT_PATH}"

        logger.info(f"💳 Sending payment {payment.basketId} ({payment.paidPrice} {payment.currency}) to iyzico")
        try:
            response = requests.post(
                url,
                data=request_body,
                headers=self._auth_headers(PAYMENT_PATH, request_body),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"❌ iyzico request failed: {e}")
            raise PaymentGatewayError(f"Payment gateway unreachable: {e}") from e

        try:
            result = response.json()
        except ValueError as e:
            logger.error(f"❌ iyzico answered non-JSON (HTTP {response.status_code})")
            raise PaymentGatewayError("Invalid response from payment gateway") from e

        if result.get("status") == "success":
            logger.info(f"✅ Payment {payment.basketId} accepted (paymentId={result.get('paymentId')})")
        else:
            logger.warning(f"⚠️ Payment {payment.basketId} declined: {result.get('errorMessage')}")
        return result


payment_gateway = PaymentGateway()
