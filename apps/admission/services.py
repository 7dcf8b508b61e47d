# admission/services.py

"""
Admission workflow: online submissions, desk (offline) admissions and the
admin's confirm / reject decision. Confirming an enrollment is what turns
it into a ``Student``.
"""

from decimal import Decimal
from django.db import transaction
from django.core.exceptions import ValidationError
import logging

from apps.academics.models import Course
from apps.admission.models import Enrollment
from apps.admission.utils import allocate_register_number, allocate_roll_number
from apps.core.exceptions import InvalidStateTransition, get_or_not_found
from apps.core.utils import to_decimal
from apps.finance.services import PaymentService
from apps.students.models import Student

logger = logging.getLogger(__name__)

ENROLLMENT_FIELDS = ('student_name', 'phone', 'email', 'address', 'class_level', 'batch', 'category', 'total_fee')

ALLOWED_TRANSITIONS = {
    Enrollment.PENDING: {Enrollment.CONFIRMED, Enrollment.REJECTED},
}


class AdmissionService:

    @staticmethod
    def _build_enrollment(fields, **overrides):
        data = {key: fields[key] for key in ENROLLMENT_FIELDS if fields.get(key) not in (None, '')}

        course_id = fields.get('course')
        if course_id:
            course = get_or_not_found(Course, course_id)
            data.update(course=course, class_level=course.class_level, batch=course.batch, total_fee=course.fee)

        if 'total_fee' in data:
            data['total_fee'] = to_decimal(data['total_fee'], 'total_fee')

        data.update(overrides)
        return Enrollment(**data)

    @staticmethod
    def _create_student(enrollment):
        student = Student(
            name=enrollment.student_name,
            email=enrollment.email,
            phone=enrollment.phone,
            class_level=enrollment.class_level,
            batch=enrollment.batch,
            category=enrollment.category,
            register_number=enrollment.register_number,
            roll_number=enrollment.roll_number or None,
            enrollment=enrollment,
        )
        student.full_clean()
        student.save()
        logger.info(f"Created student {student.pk} ({student.register_number}) from enrollment {enrollment.pk}")
        return student

    @staticmethod
    @transaction.atomic
    def submit_enrollment(fields):
        """
        Public self-enrollment. The record waits in ``pending`` for an admin.

        Args:
            fields (dict): student_name, phone, class_level, batch, and
                optionally email, address, category, mode, total_fee, a free
                register_number or a course id (which supplies class, batch
                and fee)

        Returns:
            Enrollment instance
        """
        register_number = (fields.get('register_number') or '').strip()
        if register_number:
            register_number = allocate_register_number(register_number)

        enrollment = AdmissionService._build_enrollment(
            fields,
            mode=fields.get('mode') or Enrollment.OFFLINE,
            register_number=register_number,
            status=Enrollment.PENDING,
            paid_amount=Decimal('0.00'),
        )
        enrollment.full_clean()
        enrollment.save()

        logger.info(f"Enrollment {enrollment.pk} submitted for {enrollment.student_name}")
        return enrollment

    @staticmethod
    @transaction.atomic
    def confirm_offline_enrollment(fields):
        """
        Admit a student at the desk.

        The enrollment is created already confirmed, the student is created
        with it and the first payment goes through the ledger: the whole fee
        for plan ``full``, ``initial_payment`` (possibly 0) for plan
        ``two_installments``.

        Args:
            fields (dict): as for ``submit_enrollment`` plus
                installment_plan, initial_payment, register_number (manual
                override), payment_method (default 'cash'), transaction_id

        Returns:
            Enrollment instance

        Example:
            enrollment = AdmissionService.confirm_offline_enrollment({
                'student_name': 'Asha Rao',
                'phone': '+919876543210',
                'class_level': 10,
                'batch': 'Batch-A',
                'total_fee': 15000,
                'installment_plan': 'two_installments',
                'initial_payment': 7500,
            })
        """
        plan = fields.get('installment_plan') or Enrollment.PLAN_FULL
        if plan not in dict(Enrollment.INSTALLMENT_PLAN_CHOICES):
            raise ValidationError({'installment_plan': f"Unknown installment plan '{plan}'"})

        enrollment = AdmissionService._build_enrollment(
            fields,
            mode=Enrollment.OFFLINE,
            status=Enrollment.CONFIRMED,
            installment_plan=plan,
            paid_amount=Decimal('0.00'),
        )
        enrollment.full_clean(exclude=['register_number', 'roll_number'])

        if plan == Enrollment.PLAN_FULL:
            initial = enrollment.total_fee
            payment_type = 'full_payment'
        else:
            initial = to_decimal(fields.get('initial_payment') or 0, 'initial_payment')
            payment_type = 'installment_1'
            if initial < 0 or initial > enrollment.total_fee:
                raise ValidationError({'initial_payment': "Initial payment must be between 0 and the total fee"})

        enrollment.register_number = allocate_register_number(fields.get('register_number'))
        enrollment.roll_number = allocate_roll_number(enrollment.class_level, enrollment.batch)
        enrollment.save()
        AdmissionService._create_student(enrollment)

        if initial > 0:
            PaymentService.record_payment(
                enrollment.pk,
                initial,
                fields.get('payment_method') or 'cash',
                transaction_id=fields.get('transaction_id'),
                payment_type=payment_type,
            )
            enrollment.refresh_from_db()

        logger.info(
            f"Offline enrollment {enrollment.pk} confirmed for {enrollment.student_name} "
            f"({enrollment.register_number}, {enrollment.payment_status})"
        )
        return enrollment

    @staticmethod
    @transaction.atomic
    def update_enrollment_status(enrollment_id, new_status):
        """
        Admin decision on a pending enrollment. Only ``pending -> confirmed``
        and ``pending -> rejected`` are allowed. Confirming allocates the
        register and roll numbers and creates the student.
        """
        if new_status not in dict(Enrollment.STATUS_CHOICES):
            raise ValidationError({'status': f"Unknown enrollment status '{new_status}'"})

        enrollment = get_or_not_found(Enrollment.objects.select_for_update(), enrollment_id)
        old_status = enrollment.status

        if new_status not in ALLOWED_TRANSITIONS.get(old_status, set()):
            logger.warning(f"Enrollment {enrollment.pk}: transition {old_status} -> {new_status} refused")
            raise InvalidStateTransition(
                f"Cannot move enrollment from '{old_status}' to '{new_status}'",
                current=old_status,
                requested=new_status,
            )

        enrollment.status = new_status
        if new_status == Enrollment.CONFIRMED:
            enrollment.register_number = allocate_register_number(
                enrollment.register_number, exclude_enrollment=enrollment.pk
            )
            enrollment.roll_number = allocate_roll_number(enrollment.class_level, enrollment.batch)
            enrollment.save()
            AdmissionService._create_student(enrollment)
        else:
            enrollment.save()

        logger.info(f"Enrollment {enrollment.pk}: status changed from {old_status} to {new_status}")
        return enrollment

    @staticmethod
    @transaction.atomic
    def update_total_fee(enrollment_id, total_fee):
        """Change the agreed fee; the payment status follows."""
        total_fee = to_decimal(total_fee, 'total_fee')
        if total_fee < 0:
            raise ValidationError({'total_fee': "Total fee cannot be negative"})

        enrollment = get_or_not_found(Enrollment.objects.select_for_update(), enrollment_id)
        if total_fee < enrollment.paid_amount:
            raise ValidationError(
                {'total_fee': f"Total fee ({total_fee}) is below the amount already paid ({enrollment.paid_amount})"}
            )

        enrollment.total_fee = total_fee
        enrollment.save(update_fields=['total_fee'])

        logger.info(f"Enrollment {enrollment.pk}: total fee set to {total_fee} ({enrollment.payment_status})")
        return enrollment
