# attendance/services.py

"""
Day-keyed attendance.

There is at most one record per (student, date); every write is an upsert
on that key, so marking the same day again only changes its status.
"""

from django.db import transaction
from django.core.exceptions import ValidationError
import logging

from apps.attendance.models import Attendance
from apps.core.exceptions import NotFound, get_or_not_found
from apps.core.utils import parse_class_level, parse_iso_date, percentage, today
from apps.students.models import Student

logger = logging.getLogger(__name__)


def _validate_status(status):
    if status not in dict(Attendance.STATUS_CHOICES):
        raise ValidationError({'status': f"Unknown attendance status '{status}'"})
    return status


def _class_students(class_level, batch=None):
    students = Student.objects.filter(class_level=parse_class_level(class_level))
    if batch:
        students = students.filter(batch=batch)
    return students


def _upsert(student, date, status, marked_by=''):
    record, created = Attendance.objects.update_or_create(
        student=student,
        date=date,
        defaults={
            'status': status,
            'class_level': student.class_level,
            'marked_by': marked_by or '',
        },
    )
    return record


class AttendanceService:

    @staticmethod
    def mark_attendance(student_id, date, status, marked_by=''):
        """Set a student's status for a day, creating or replacing the record."""
        date = parse_iso_date(date)
        _validate_status(status)

        with transaction.atomic():
            student = get_or_not_found(Student, student_id)
            record = _upsert(student, date, status, marked_by)

        logger.info(f"Attendance {date} for {student.pk}: {status}")
        return record

    @staticmethod
    def toggle_attendance(student_id, date, marked_by=''):
        """Unmarked days become present; present and absent swap."""
        date = parse_iso_date(date)

        with transaction.atomic():
            student = get_or_not_found(Student, student_id)
            current = (
                Attendance.objects.filter(student=student, date=date)
                .values_list('status', flat=True)
                .first()
            )
            status = Attendance.ABSENT if current == Attendance.PRESENT else Attendance.PRESENT
            record = _upsert(student, date, status, marked_by)

        logger.info(f"Attendance {date} for {student.pk} toggled: {current or 'unmarked'} -> {status}")
        return record

    @staticmethod
    def mark_all_present(class_level, batch, date, marked_by=''):
        """Mark every student of the class and batch present. Returns how many."""
        date = parse_iso_date(date)

        with transaction.atomic():
            students = list(_class_students(class_level, batch))
            for student in students:
                _upsert(student, date, Attendance.PRESENT, marked_by)

        logger.info(f"Marked {len(students)} students present in class {class_level} {batch} on {date}")
        return len(students)

    @staticmethod
    def save_class_attendance(class_level, batch, date, statuses, marked_by=''):
        """
        Save a whole register at once.

        ``statuses`` maps student id to 'present' / 'absent'. Students of
        the class left out of it are saved as present; ids of students
        outside the class are rejected before anything is written.
        """
        date = parse_iso_date(date)
        statuses = dict(statuses or {})
        for status in statuses.values():
            _validate_status(status)

        with transaction.atomic():
            students = list(_class_students(class_level, batch))
            outside = set(statuses) - {student.pk for student in students}
            if outside:
                logger.warning(f"Class attendance refused, students not in class {class_level} {batch}: {sorted(outside)}")
                raise ValidationError(
                    {'statuses': f"Students not in class {class_level} {batch}: {', '.join(sorted(outside))}"}
                )

            for student in students:
                _upsert(student, date, statuses.get(student.pk, Attendance.PRESENT), marked_by)

        logger.info(f"Saved attendance for {len(students)} students in class {class_level} {batch} on {date}")
        return len(students)

    @staticmethod
    def resolve_scan_token(token):
        """
        Student for a scanned code: student id first, then register
        number, then enrollment id.
        """
        token = (token or '').strip()
        if not token:
            raise ValidationError({'token': "Scan code is empty"})

        for lookup in ('pk', 'register_number', 'enrollment_id'):
            student = Student.objects.filter(**{lookup: token}).first()
            if student is not None:
                return student
        raise NotFound('Student', token)

    @staticmethod
    def scan_attendance(token, date=None, marked_by='scanner'):
        """Mark the scanned student present for the day."""
        date = parse_iso_date(date) if date else today()

        with transaction.atomic():
            student = AttendanceService.resolve_scan_token(token)
            _upsert(student, date, Attendance.PRESENT, marked_by)

        logger.info(f"Scanned {token!r}: {student.pk} present on {date}")
        return student

    @staticmethod
    def class_daily_stats(class_level, batch, date):
        """
        Head count for one class on one day.

        Returns:
            dict: total, present, absent, not_marked and the present
            percentage (0 for an empty class)
        """
        date = parse_iso_date(date)
        students = _class_students(class_level, batch)
        total = students.count()

        statuses = list(
            Attendance.objects.filter(student__in=students, date=date).values_list('status', flat=True)
        )
        present = statuses.count(Attendance.PRESENT)
        absent = statuses.count(Attendance.ABSENT)

        return {
            'total': total,
            'present': present,
            'absent': absent,
            'not_marked': total - present - absent,
            'percentage': percentage(present, total),
        }

    @staticmethod
    def student_attendance_rate(student_id, from_date=None, to_date=None):
        """Share of recorded days the student was present. Unrecorded days do not count."""
        student = get_or_not_found(Student, student_id)
        records = Attendance.objects.filter(student=student)
        if from_date:
            records = records.filter(date__gte=parse_iso_date(from_date, 'from_date'))
        if to_date:
            records = records.filter(date__lte=parse_iso_date(to_date, 'to_date'))

        total_days = records.count()
        present_days = records.filter(status=Attendance.PRESENT).count()
        return {
            'present_days': present_days,
            'total_days': total_days,
            'percentage': percentage(present_days, total_days),
        }

    @staticmethod
    def student_attendance_history(student_id, limit=30):
        """Most recent records, newest first, with the rate over them."""
        student = get_or_not_found(Student, student_id)
        records = list(Attendance.objects.filter(student=student).order_by('-date')[:limit])
        present_days = sum(1 for record in records if record.status == Attendance.PRESENT)
        return {
            'student_id': student.pk,
            'records': [{'date': record.date, 'status': record.status} for record in records],
            'present_days': present_days,
            'total_days': len(records),
            'percentage': percentage(present_days, len(records)),
        }
