class PaymentError(Exception):
    """Base exception for payment verification."""


class PaymentRejectedError(PaymentError):
    """Raised when a payment reference cannot pay for a report. The message is the reason."""


class PaymentGatewayError(PaymentError):
    """Raised when the payment provider call fails."""
