from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentOrder:
    """What the gateway is asked to charge for."""

    order_id: str
    file_id: str
    amount: str
    subject: str


@dataclass(frozen=True)
class CallbackVerification:
    """Outcome of checking an asynchronous payment notification."""

    valid: bool
    order_id: str | None = None
    succeeded: bool = False
