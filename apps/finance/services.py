# finance/services.py

"""
Payment Ledger Operations

Every change to what an enrollment has paid goes through
``PaymentService.record_payment``: the ledger row and the enrollment's
cached ``paid_amount`` / ``payment_status`` are written together or not at
all.
"""

from decimal import Decimal
from django.db import transaction
from django.db.models import Q, Sum
from django.core.exceptions import ValidationError
import logging

from apps.admission.models import Enrollment
from apps.core.exceptions import get_or_not_found
from apps.core.utils import parse_iso_date, to_decimal, today
from apps.finance.models import Payment
from apps.finance.utils import PAYMENT_STATUS_CHOICES, PAYMENT_STATUS_LABELS, derive_payment_status
from apps.students.models import Parent

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


# =============================================================================
# PAYMENT SERVICE - LEDGER AND ENROLLMENT PAYMENT STATUS
# =============================================================================

class PaymentService:
    """
    Ledger writes and the read models built on top of them.
    """

    @staticmethod
    def record_payment(enrollment_id, amount, method, transaction_id=None, payment_type=None, payment_date=None):
        """
        Append a payment to the enrollment's ledger.

        Args:
            enrollment_id: Enrollment id
            amount: positive amount, not more than the remaining balance
            method: 'online', 'cash' or 'transfer'
            transaction_id (str): gateway or bank reference
            payment_type (str): 'installment_1', 'installment_2' or 'full_payment'
            payment_date: date or ISO string, defaults to today

        Returns:
            Payment instance

        Example:
            payment = PaymentService.record_payment('enr_1', 5000, 'cash',
                                                    payment_type='installment_1')
        """
        # Validate input before touching the store
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValidationError({'amount': "Payment amount must be positive"})

        if method not in dict(Payment.PAYMENT_METHODS):
            raise ValidationError({'method': f"Unknown payment method '{method}'"})

        if payment_type and payment_type not in dict(Payment.PAYMENT_TYPES):
            raise ValidationError({'payment_type': f"Unknown payment type '{payment_type}'"})

        payment_date = parse_iso_date(payment_date, 'payment_date') if payment_date else today()

        with transaction.atomic():
            enrollment = get_or_not_found(Enrollment.objects.select_for_update(), enrollment_id)

            if enrollment.status == Enrollment.REJECTED:
                logger.warning(f"Payment refused for rejected enrollment {enrollment.pk}")
                raise ValidationError("Cannot record a payment for a rejected enrollment")

            remaining = enrollment.total_fee - enrollment.paid_amount
            if amount > remaining:
                logger.warning(
                    f"Overpayment refused for enrollment {enrollment.pk}: {amount} > {remaining}"
                )
                raise ValidationError(
                    {'amount': f"Payment amount ({amount}) exceeds remaining balance ({remaining})"}
                )

            payment = Payment(
                enrollment=enrollment,
                amount=amount,
                method=method,
                transaction_id=transaction_id or '',
                payment_type=payment_type or '',
                payment_date=payment_date,
                status=Payment.STATUS_PAID,
            )
            payment.full_clean(exclude=['payment_number'])
            payment.save()

            enrollment.paid_amount += amount
            enrollment.save(update_fields=['paid_amount'])

        logger.info(
            f"Recorded payment {payment.payment_number} for enrollment {enrollment.pk}: "
            f"{amount} ({enrollment.payment_status})"
        )
        return payment

    @staticmethod
    def ledger_total(enrollment):
        """Sum of the paid ledger rows of an enrollment (instance or id)."""
        total = Payment.objects.filter(
            enrollment=enrollment, status=Payment.STATUS_PAID
        ).aggregate(total=Sum('amount'))['total']
        return total or ZERO

    @staticmethod
    def verify_ledger(enrollment):
        """
        True when the enrollment's cached paid amount and payment status
        agree with its ledger.
        """
        ledger = PaymentService.ledger_total(enrollment)
        consistent = (
            enrollment.paid_amount == ledger
            and enrollment.payment_status == derive_payment_status(ledger, enrollment.total_fee)
        )
        if not consistent:
            logger.warning(
                f"Ledger mismatch on enrollment {enrollment.pk}: "
                f"cached {enrollment.paid_amount}, ledger {ledger}"
            )
        return consistent

    @staticmethod
    def payment_summary(enrollment_id):
        """Fee card for one enrollment: amounts, status and payment history."""
        enrollment = get_or_not_found(Enrollment, enrollment_id)
        return PaymentService._summary_for(enrollment)

    @staticmethod
    def _summary_for(enrollment):
        payments = enrollment.payments.order_by('payment_date', 'created_at')
        return {
            'enrollment_id': enrollment.pk,
            'student_name': enrollment.student_name,
            'total_fee': enrollment.total_fee,
            'paid_amount': enrollment.paid_amount,
            'balance': enrollment.balance,
            'payment_status': enrollment.payment_status,
            'status_label': PAYMENT_STATUS_LABELS[enrollment.payment_status],
            'installment_plan': enrollment.installment_plan,
            'payments': [
                {
                    'id': payment.pk,
                    'payment_number': payment.payment_number,
                    'amount': payment.amount,
                    'payment_date': payment.payment_date,
                    'method': payment.method,
                    'payment_type': payment.payment_type,
                    'transaction_id': payment.transaction_id,
                    'status': payment.status,
                }
                for payment in payments
            ],
        }

    @staticmethod
    def parent_fee_overview(parent_id):
        """Fee cards for each of a parent's children that has an enrollment."""
        parent = get_or_not_found(Parent, parent_id)

        children = []
        for child in parent.children.select_related('enrollment').order_by('name'):
            if child.enrollment is None:
                continue
            summary = PaymentService._summary_for(child.enrollment)
            summary['student_id'] = child.pk
            children.append(summary)

        return {
            'parent_id': parent.pk,
            'children': children,
            'total_fee': sum((c['total_fee'] for c in children), ZERO),
            'total_paid': sum((c['paid_amount'] for c in children), ZERO),
            'total_balance': sum((c['balance'] for c in children), ZERO),
        }

    @staticmethod
    def revenue_collected(status=None, search=None):
        """
        Money actually received: paid ledger rows, optionally narrowed to
        enrollments with a given payment status or matching a name/email
        search.
        """
        payments = Payment.objects.filter(status=Payment.STATUS_PAID)

        if status:
            if status not in dict(PAYMENT_STATUS_CHOICES):
                raise ValidationError({'status': f"Unknown payment status '{status}'"})
            payments = payments.filter(enrollment__payment_status=status)

        if search:
            payments = payments.filter(
                Q(enrollment__student_name__icontains=search) | Q(enrollment__email__icontains=search)
            )

        return payments.aggregate(total=Sum('amount'))['total'] or ZERO
