from abc import ABC, abstractmethod
from collections.abc import Mapping

from sentinel.payment.models import CallbackVerification, PaymentOrder


class BasePaymentGateway(ABC):
    """Contract for payment provider adapters."""

    @abstractmethod
    def initiate(self, order: PaymentOrder) -> str:
        """Start a payment and return the redirect form HTML for the browser.

        Raises:
            PaymentGatewayError: if the provider rejects the order.
        """

    @abstractmethod
    def verify_callback(self, payload: Mapping[str, str]) -> CallbackVerification:
        """Check the signature and status of an asynchronous notification.

        Must not raise for forged or malformed payloads; report them with
        ``valid=False`` instead.
        """
