from decimal import Decimal

PAYMENT_STATUS_PAID = 'paid'
PAYMENT_STATUS_PARTIAL = 'partial'
PAYMENT_STATUS_PENDING = 'pending'

PAYMENT_STATUS_CHOICES = (
    (PAYMENT_STATUS_PAID, 'Paid'),
    (PAYMENT_STATUS_PARTIAL, 'Partially Paid'),
    (PAYMENT_STATUS_PENDING, 'Pending'),
)

PAYMENT_STATUS_LABELS = {
    PAYMENT_STATUS_PAID: 'Fully Paid',
    PAYMENT_STATUS_PARTIAL: 'Partially Paid',
    PAYMENT_STATUS_PENDING: 'Payment Pending',
}


def derive_payment_status(paid_amount, total_fee):
    """
    Payment status of an enrollment from what has been paid against its fee.

    ``paid`` once the fee is covered, ``partial`` while something but not all
    of it is in, ``pending`` before the first payment. A zero fee counts as
    paid.
    """
    paid_amount = Decimal(str(paid_amount or 0))
    total_fee = Decimal(str(total_fee or 0))

    if paid_amount >= total_fee:
        return PAYMENT_STATUS_PAID
    elif paid_amount > 0:
        return PAYMENT_STATUS_PARTIAL
    return PAYMENT_STATUS_PENDING
