# core/stats.py
"""
Numbers shown on the admin dashboard overview.
"""
import logging
from decimal import Decimal

from django.db.models import F, Sum

from apps.admission.models import Enrollment
from apps.attendance.models import Attendance
from apps.core.models import SystemSettings
from apps.core.utils import percentage, today
from apps.finance.services import PaymentService
from apps.students.models import Parent, Student
from apps.teachers.models import Teacher

logger = logging.getLogger(__name__)


def dashboard_stats(on_date=None):
    on_date = on_date or today()
    system_settings = SystemSettings.get_instance()

    active_enrollments = Enrollment.objects.exclude(status=Enrollment.REJECTED)
    fee_totals = active_enrollments.aggregate(
        fee_total=Sum('total_fee'),
        outstanding=Sum(F('total_fee') - F('paid_amount')),
    )

    inconsistent = [
        enrollment.pk
        for enrollment in Enrollment.objects.all()
        if not PaymentService.verify_ledger(enrollment)
    ]
    if inconsistent:
        logger.warning(f"Enrollments out of step with their ledger: {inconsistent}")

    total_students = Student.objects.count()
    present_today = Attendance.objects.filter(date=on_date, status=Attendance.PRESENT).count()

    return {
        'total_students': total_students,
        'total_teachers': Teacher.objects.count(),
        'total_parents': Parent.objects.count(),
        'total_enrollments': Enrollment.objects.count(),
        'pending_enrollments': Enrollment.objects.filter(status=Enrollment.PENDING).count(),
        'revenue_collected': PaymentService.revenue_collected(),
        'total_fees': fee_totals['fee_total'] or Decimal('0.00'),
        'outstanding_fees': fee_totals['outstanding'] or Decimal('0.00'),
        'attendance_date': on_date,
        'present_today': present_today,
        'attendance_percentage': percentage(present_today, total_students),
        'ranking_enabled': system_settings.ranking_enabled,
        'ledger_consistent': not inconsistent,
        'inconsistent_enrollments': inconsistent,
    }
