from listing_lens.config.settings import Settings
from listing_lens.logging.logger import Log
from listing_lens.payment.base import BasePaymentGateway
from listing_lens.payment.exceptions import PaymentGatewayError, PaymentRejectedError
from listing_lens.payment.stripe_adapter import StripePaymentGateway
from listing_lens.store.base import BaseEphemeralStore

SUCCEEDED = "succeeded"


def claim_key(reference: str) -> str:
    return f"payment:{reference}"


class PaymentVerifier:
    """Checks that a payment can pay for one report, then marks it used.

    A reference is claimed in the store before the provider is asked about
    it, so concurrent workers holding the same reference cannot both pass.
    The claim is released when verification fails and kept when it succeeds.
    """

    def __init__(
        self,
        gateway: BasePaymentGateway | None,
        settings: Settings,
        store: BaseEphemeralStore,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._bypass = settings.payment_bypass
        self._claim_ttl = settings.payment_claim_ttl_seconds
        self._accepted_amounts = frozenset(settings.accepted_amounts)
        self._currency = settings.accepted_currency.lower()

    def verify(self, reference: str | None) -> None:
        """Accept the payment or raise.

        Raises:
            PaymentRejectedError: with the reason the payment was refused.
            StoreError: if the claim cannot be written.
        """
        if self._bypass:
            Log.warning("Payment verification bypassed by configuration")
            return
        if not reference:
            raise PaymentRejectedError("No payment reference")
        if self._gateway is None:
            raise PaymentRejectedError("Payment provider not configured")

        if not self._store.put_if_absent(claim_key(reference), "1", self._claim_ttl):
            raise PaymentRejectedError("Payment already used")
        try:
            self._check(self._gateway, reference)
        except Exception:
            self._release(reference)
            raise
        Log.info(f"Payment {reference} verified and marked used")

    def _check(self, gateway: BasePaymentGateway, reference: str) -> None:
        try:
            record = gateway.fetch(reference)
        except PaymentGatewayError as exc:
            raise PaymentRejectedError(str(exc)) from exc

        if record.status != SUCCEEDED:
            raise PaymentRejectedError(f"Payment status: {record.status}")
        if record.amount not in self._accepted_amounts:
            raise PaymentRejectedError(f"Invalid amount: {record.amount}")
        if record.currency != self._currency:
            raise PaymentRejectedError("Wrong currency")
        if record.already_used:
            raise PaymentRejectedError("Payment already used")

        try:
            gateway.mark_used(reference)
        except PaymentGatewayError as exc:
            raise PaymentRejectedError(str(exc)) from exc

    def _release(self, reference: str) -> None:
        try:
            self._store.delete(claim_key(reference))
        except Exception as exc:
            Log.warning(f"Could not release claim on payment {reference}: {exc}")


def build_payment_verifier(settings: Settings, store: BaseEphemeralStore) -> PaymentVerifier:
    """Build a verifier with the Stripe gateway when a secret key is configured."""
    gateway = (
        StripePaymentGateway(api_key=settings.stripe_secret_key)
        if settings.stripe_secret_key
        else None
    )
    return PaymentVerifier(gateway, settings, store)
