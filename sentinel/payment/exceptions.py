class PaymentGatewayError(Exception):
    """Raised when a payment cannot be initiated with the provider."""
