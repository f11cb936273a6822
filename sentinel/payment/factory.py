from sentinel.config.settings import Settings
from sentinel.payment.base import BasePaymentGateway
from sentinel.payment.example_gateway import ExampleGatewayAdapter


class PaymentGatewayFactory:
    """Creates the configured payment gateway adapter."""

    PROVIDERS = ("example",)

    @classmethod
    def create(cls, settings: Settings) -> BasePaymentGateway:
        provider = settings.payment_provider.lower()
        if provider == "example":
            host = settings.server_host.rstrip("/")
            return ExampleGatewayAdapter(
                secret=settings.payment_secret,
                checkout_url=f"{host}/api/payment/checkout",
                return_url=f"{host}/?status=paid&fileId={{file_id}}",
                notify_url=f"{host}/api/payment/notify",
            )
        raise ValueError(
            f"Unknown payment provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )
