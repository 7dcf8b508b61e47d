import logging

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models.functions import Length
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from decimal import Decimal

from apps.core.models import PrefixedId, TimeStampedModel
from apps.core.utils import today

logger = logging.getLogger(__name__)


class Payment(TimeStampedModel):
    """
    One row of an enrollment's payment ledger.

    Rows are append-only: once saved a payment can be neither edited nor
    deleted, so the enrollment's cached ``paid_amount`` can always be
    rebuilt from the ledger.
    """
    PAYMENT_METHODS = (
        ('online', 'Online'),
        ('cash', 'Cash'),
        ('transfer', 'Bank Transfer'),
    )

    PAYMENT_TYPES = (
        ('installment_1', 'Installment 1'),
        ('installment_2', 'Installment 2'),
        ('full_payment', 'Full Payment'),
    )

    STATUS_PAID = 'paid'
    STATUS_PENDING = 'pending'
    STATUS_FAILED = 'failed'
    STATUS_CHOICES = (
        (STATUS_PAID, 'Paid'),
        (STATUS_PENDING, 'Pending'),
        (STATUS_FAILED, 'Failed'),
    )

    id = models.CharField(primary_key=True, max_length=40, default=PrefixedId('pay'), editable=False)
    payment_number = models.CharField(max_length=50, unique=True, blank=True)
    enrollment = models.ForeignKey(
        'admission.Enrollment',
        on_delete=models.PROTECT,
        related_name='payments',
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    payment_date = models.DateField(default=today)
    method = models.CharField(max_length=10, choices=PAYMENT_METHODS)
    transaction_id = models.CharField(max_length=100, blank=True)
    payment_type = models.CharField(max_length=20, choices=PAYMENT_TYPES, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PAID)

    class Meta:
        db_table = 'finance_payment'
        ordering = ['-payment_date', '-created_at']
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        indexes = [
            models.Index(fields=['enrollment', 'status']),
        ]

    def __str__(self):
        return f"{self.payment_number} - {self.amount}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError(_("Payments are immutable once recorded."))

        if not self.payment_number:
            year = timezone.now().year
            month = timezone.now().month
            prefix = f"PAY-{year}-{month:02d}-"
            last_payment = (
                Payment.objects.filter(payment_number__startswith=prefix)
                .order_by(Length("payment_number"), "payment_number")
                .last()
            )
            if last_payment:
                last_number = int(last_payment.payment_number.split("-")[-1])
                self.payment_number = f"{prefix}{last_number + 1:04d}"
            else:
                self.payment_number = f"{prefix}0001"

        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        logger.warning(f"Attempted to delete payment {self.pk} - operation blocked")
        raise ValidationError(_("Payments are immutable once recorded."))
