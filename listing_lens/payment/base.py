from abc import ABC, abstractmethod

from listing_lens.payment.models import PaymentRecord


class BasePaymentGateway(ABC):
    """Contract for payment provider adapters."""

    @abstractmethod
    def fetch(self, reference: str) -> PaymentRecord:
        """Look up a payment by its provider reference.

        Raises:
            PaymentGatewayError: if the provider call fails.
        """

    @abstractmethod
    def mark_used(self, reference: str) -> None:
        """Record on the payment that it has paid for a report.

        Raises:
            PaymentGatewayError: if the provider call fails.
        """
