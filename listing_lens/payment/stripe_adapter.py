import stripe

from listing_lens.payment.base import BasePaymentGateway
from listing_lens.payment.exceptions import PaymentGatewayError
from listing_lens.payment.models import PaymentRecord


class StripePaymentGateway(BasePaymentGateway):
    """Payment gateway over Stripe PaymentIntents.

    Usage is recorded in the intent's metadata so a reference cannot buy two
    reports.
    """

    USED_MARKER = "report_generated"

    def __init__(self, *, api_key: str) -> None:
        self._api_key = api_key

    def fetch(self, reference: str) -> PaymentRecord:
        try:
            intent = stripe.PaymentIntent.retrieve(reference, api_key=self._api_key)
        except stripe.StripeError as exc:
            raise PaymentGatewayError(f"Payment provider error: {exc}") from exc

        metadata = intent.metadata
        already_used = (
            metadata is not None
            and self.USED_MARKER in metadata
            and metadata[self.USED_MARKER] == "true"
        )
        return PaymentRecord(
            reference=reference,
            status=str(intent.status),
            amount=int(intent.amount),
            currency=str(intent.currency).lower(),
            already_used=already_used,
        )

    def mark_used(self, reference: str) -> None:
        try:
            stripe.PaymentIntent.modify(
                reference,
                api_key=self._api_key,
                metadata={self.USED_MARKER: "true"},
            )
        except stripe.StripeError as exc:
            raise PaymentGatewayError(f"Payment provider error: {exc}") from exc
