from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentRecord:
    """Provider-independent view of a payment."""

    reference: str
    status: str
    amount: int
    currency: str
    already_used: bool = False
