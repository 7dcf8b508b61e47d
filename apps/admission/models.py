from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.academics.models import Course, class_level_validators
from apps.core.models import PrefixedId, TimeStampedModel
from apps.core.utils import today
from apps.finance.utils import PAYMENT_STATUS_CHOICES, PAYMENT_STATUS_PENDING, derive_payment_status
from apps.students.models import Student, phone_regex


# ==================== ENROLLMENT ====================

class Enrollment(TimeStampedModel):
    """
    An admission record. Online enrollments arrive as ``pending`` and are
    confirmed or rejected by an admin; offline enrollments are entered at the
    desk and confirmed immediately.

    ``paid_amount`` mirrors the sum of the enrollment's paid ledger rows and
    ``payment_status`` is derived from it on every save. Neither is edited
    directly; payments go through ``PaymentService.record_payment``.
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    REJECTED = 'rejected'
    STATUS_CHOICES = (
        (PENDING, _("Pending")),
        (CONFIRMED, _("Confirmed")),
        (REJECTED, _("Rejected")),
    )

    ONLINE = 'online'
    OFFLINE = 'offline'
    MODE_CHOICES = (
        (ONLINE, _("Online")),
        (OFFLINE, _("Offline")),
    )

    PLAN_FULL = 'full'
    PLAN_TWO_INSTALLMENTS = 'two_installments'
    INSTALLMENT_PLAN_CHOICES = (
        (PLAN_FULL, _("Full Payment")),
        (PLAN_TWO_INSTALLMENTS, _("Two Installments")),
    )

    id = models.CharField(primary_key=True, max_length=40, default=PrefixedId('enr'), editable=False)
    student_name = models.CharField(max_length=150, verbose_name=_("Student Name"))
    phone = models.CharField(max_length=17, validators=[phone_regex], verbose_name=_("Phone"))
    email = models.EmailField(blank=True, verbose_name=_("Email"))
    address = models.TextField(blank=True, verbose_name=_("Address"))
    class_level = models.PositiveSmallIntegerField(validators=class_level_validators, verbose_name=_("Class"))
    batch = models.CharField(max_length=50, verbose_name=_("Batch"))
    course = models.ForeignKey(
        Course,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='enrollments',
        verbose_name=_("Course"),
    )
    mode = models.CharField(max_length=10, choices=MODE_CHOICES, default=OFFLINE)
    category = models.CharField(max_length=20, choices=Student.CATEGORY_CHOICES, default=Student.NORMAL)
    register_number = models.CharField(max_length=50, blank=True, db_index=True, verbose_name=_("Register Number"))
    roll_number = models.CharField(max_length=20, blank=True, verbose_name=_("Roll Number"))
    installment_plan = models.CharField(max_length=20, choices=INSTALLMENT_PLAN_CHOICES, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)
    submitted_date = models.DateField(default=today)

    total_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(0)]
    )
    paid_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'), editable=False)
    payment_status = models.CharField(
        max_length=10, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_STATUS_PENDING, editable=False
    )

    class Meta:
        db_table = 'admission_enrollment'
        ordering = ['-submitted_date', 'student_name']
        verbose_name = _("Enrollment")
        verbose_name_plural = _("Enrollments")
        indexes = [
            models.Index(fields=['status']),
            models.Index(fields=['class_level', 'batch']),
        ]

    def __str__(self):
        return f"{self.student_name} - Class {self.class_level} ({self.get_status_display()})"

    def save(self, *args, **kwargs):
        # Auto update payment status
        self.payment_status = derive_payment_status(self.paid_amount, self.total_fee)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'payment_status', 'updated_at'}
        super().save(*args, **kwargs)

    @property
    def balance(self):
        return max(self.total_fee - self.paid_amount, Decimal('0.00'))

    @property
    def is_pending(self):
        return self.status == self.PENDING
