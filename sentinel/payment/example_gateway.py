"""Example payment gateway adapter.

Use this module as a reference when implementing real provider adapters.
Implement BasePaymentGateway and register the provider in PaymentGatewayFactory.
"""

import hashlib
import hmac
from collections.abc import Mapping
from html import escape
from typing import ClassVar

from sentinel.payment.base import BasePaymentGateway
from sentinel.payment.exceptions import PaymentGatewayError
from sentinel.payment.models import CallbackVerification, PaymentOrder


class ExampleGatewayAdapter(BasePaymentGateway):
    """Offline gateway that signs forms and callbacks with a shared HMAC secret.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters.
    """

    SIGNATURE_FIELD: ClassVar[str] = "sign"
    SUCCESS_STATUSES: ClassVar[frozenset[str]] = frozenset({"TRADE_SUCCESS", "TRADE_FINISHED"})

    def __init__(
        self,
        *,
        secret: str,
        checkout_url: str,
        return_url: str,
        notify_url: str,
    ) -> None:
        if not secret:
            raise PaymentGatewayError("Example gateway requires a non-empty secret")
        self._secret = secret.encode("utf-8")
        self._checkout_url = checkout_url
        self._return_url = return_url
        self._notify_url = notify_url

    def initiate(self, order: PaymentOrder) -> str:
        fields = {
            "out_trade_no": order.order_id,
            "total_amount": order.amount,
            "subject": order.subject,
            "body": f"File ID: {order.file_id}",
            "return_url": self._return_url.format(file_id=order.file_id),
            "notify_url": self._notify_url,
        }
        fields[self.SIGNATURE_FIELD] = self.sign(fields)
        inputs = "\n".join(
            f'  <input type="hidden" name="{escape(name)}" value="{escape(value)}">'
            for name, value in fields.items()
        )
        return (
            f'<form id="payment" method="post" action="{escape(self._checkout_url)}">\n'
            f"{inputs}\n"
            "</form>\n"
            '<script>document.getElementById("payment").submit();</script>'
        )

    def verify_callback(self, payload: Mapping[str, str]) -> CallbackVerification:
        signature = payload.get(self.SIGNATURE_FIELD)
        if not signature or not isinstance(signature, str):
            return CallbackVerification(valid=False)
        fields = {k: v for k, v in payload.items() if k != self.SIGNATURE_FIELD}
        expected = self.sign(fields).encode("utf-8")
        if not hmac.compare_digest(signature.encode("utf-8"), expected):
            return CallbackVerification(valid=False)
        order_id = fields.get("out_trade_no")
        if not order_id:
            return CallbackVerification(valid=False)
        return CallbackVerification(
            valid=True,
            order_id=order_id,
            succeeded=fields.get("trade_status") in self.SUCCESS_STATUSES,
        )

    def sign(self, fields: Mapping[str, str]) -> str:
        """HMAC-SHA256 over ``k=v`` pairs sorted by key and joined with ``&``."""
        canonical = "&".join(f"{key}={fields[key]}" for key in sorted(fields))
        return hmac.new(self._secret, canonical.encode("utf-8"), hashlib.sha256).hexdigest()
