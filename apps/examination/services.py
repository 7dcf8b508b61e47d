# examination/services.py

"""
Marks entry and the weighted class ranking.

A student's weighted total for an exam is the sum of the raw marks of each
mark row multiplied by the weight of its subject. Weights come from
``SystemSettings.ranking_weightage`` (subjects missing from the map weigh
1). Every ranking call reads the settings once and the marks once, so a
single ranking is always computed from one consistent snapshot.
"""

from collections import OrderedDict
from decimal import Decimal
from django.db import transaction
from django.core.exceptions import ValidationError
import logging

from apps.academics.models import Subject
from apps.core.exceptions import get_or_not_found
from apps.core.models import SystemSettings
from apps.core.permissions import STUDENT, can_view_rank
from apps.core.utils import parse_class_level, parse_iso_date, round_half_up, to_decimal, today
from apps.examination.models import Mark
from apps.examination.utils import get_grade
from apps.students.models import Student

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')

MARK_FIELDS = ('subject', 'marks', 'max_marks', 'exam_type', 'date', 'remarks')


def _resolve_config(config):
    return config if config is not None else SystemSettings.get_instance().as_ranking_config()


def _mean_percentage(rows):
    """Average of marks/max_marks*100 over mark rows, to two places."""
    if not rows:
        return ZERO
    total = sum(row['marks'] / row['max_marks'] * 100 for row in rows)
    return round_half_up(total / len(rows), 2)


def _overall_percentage(marks, max_marks):
    if not max_marks:
        return ZERO
    return round_half_up(marks / max_marks * 100, 2)


# =============================================================================
# MARK SERVICE
# =============================================================================

class MarkService:

    @staticmethod
    @transaction.atomic
    def record_mark(student_id, subject_id, marks, max_marks=100, exam_type='Mid-term', date=None, remarks=''):
        """
        Enter one mark. The subject must belong to the student's class and
        ``0 <= marks <= max_marks``.
        """
        student = get_or_not_found(Student, student_id)
        subject = get_or_not_found(Subject, subject_id)

        mark = Mark(
            student=student,
            subject=subject,
            class_level=student.class_level,
            marks=to_decimal(marks, 'marks'),
            max_marks=to_decimal(max_marks, 'max_marks'),
            exam_type=exam_type,
            date=parse_iso_date(date) if date else today(),
            remarks=remarks or '',
        )
        mark.full_clean()
        mark.save()

        logger.info(f"Recorded mark {mark.pk}: {student.pk} {subject.name} {mark.marks}/{mark.max_marks}")
        return mark

    @staticmethod
    @transaction.atomic
    def update_mark(mark_id, **changes):
        """Correct a mark; the same checks as ``record_mark`` apply."""
        unknown = set(changes) - set(MARK_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update mark fields: {', '.join(sorted(unknown))}")

        mark = get_or_not_found(Mark.objects.select_for_update(), mark_id)

        if 'subject' in changes:
            mark.subject = get_or_not_found(Subject, changes['subject'])
        if 'marks' in changes:
            mark.marks = to_decimal(changes['marks'], 'marks')
        if 'max_marks' in changes:
            mark.max_marks = to_decimal(changes['max_marks'], 'max_marks')
        if 'exam_type' in changes:
            mark.exam_type = changes['exam_type']
        if 'date' in changes:
            mark.date = parse_iso_date(changes['date'])
        if 'remarks' in changes:
            mark.remarks = changes['remarks'] or ''

        mark.class_level = mark.student.class_level
        mark.full_clean()
        mark.save()

        logger.info(f"Updated mark {mark.pk}: {', '.join(sorted(changes))}")
        return mark


# =============================================================================
# RANKING ENGINE
# =============================================================================

class RankingEngine:

    @staticmethod
    def subject_percentage(student_id, subject_id, exam_type):
        """Mean percentage over the student's marks in one subject; 0 without marks."""
        rows = list(
            Mark.objects.filter(student_id=student_id, subject_id=subject_id, exam_type=exam_type)
            .values('marks', 'max_marks')
        )
        return _mean_percentage(rows)

    @staticmethod
    def weighted_total(student_id, class_level, exam_type, config=None):
        config = _resolve_config(config)
        rows = Mark.objects.filter(
            student_id=student_id, class_level=class_level, exam_type=exam_type
        ).values('subject_id', 'marks')
        return sum((row['marks'] * config.weight_for(row['subject_id']) for row in rows), ZERO)

    @staticmethod
    def class_ranking(class_level, exam_type, config=None):
        """
        Students of a class ordered by weighted total, highest first.

        Equal totals share a rank and the next rank skips (1, 1, 3). Within
        a tie rows are ordered by register number, then student id.

        Returns:
            list of dicts: rank, student_id, student_name, register_number,
            weighted_total, total_marks, max_marks, percentage
        """
        config = _resolve_config(config)
        class_level = parse_class_level(class_level)
        rows = list(
            Mark.objects.filter(class_level=class_level, exam_type=exam_type).values(
                'student_id', 'student__name', 'student__register_number', 'subject_id', 'marks', 'max_marks'
            )
        )

        totals = OrderedDict()
        for row in rows:
            entry = totals.setdefault(row['student_id'], {
                'student_id': row['student_id'],
                'student_name': row['student__name'],
                'register_number': row['student__register_number'],
                'weighted_total': ZERO,
                'total_marks': ZERO,
                'max_marks': ZERO,
            })
            entry['weighted_total'] += row['marks'] * config.weight_for(row['subject_id'])
            entry['total_marks'] += row['marks']
            entry['max_marks'] += row['max_marks']

        ranking = sorted(
            totals.values(),
            key=lambda entry: (-entry['weighted_total'], entry['register_number'], entry['student_id']),
        )

        previous_total = None
        for position, entry in enumerate(ranking, start=1):
            if entry['weighted_total'] != previous_total:
                rank = position
                previous_total = entry['weighted_total']
            entry['rank'] = rank
            entry['percentage'] = _overall_percentage(entry['total_marks'], entry['max_marks'])

        return ranking

    @staticmethod
    def student_report(student_id, exam_type, viewer_role, config=None):
        """
        Report card for one exam.

        Per-subject rows with percentage, grade and weight, the totals, and
        ``rank`` / ``class_size`` only when ``can_view_rank`` allows the
        viewer to see them.
        """
        config = _resolve_config(config)
        student = get_or_not_found(Student, student_id)

        rows = list(
            Mark.objects.filter(student=student, class_level=student.class_level, exam_type=exam_type)
            .order_by('subject__name', 'date')
            .values('subject_id', 'subject__name', 'marks', 'max_marks')
        )

        by_subject = OrderedDict()
        for row in rows:
            by_subject.setdefault(row['subject_id'], []).append(row)

        subjects = []
        for subject_id, subject_rows in by_subject.items():
            subject_percentage = _mean_percentage(subject_rows)
            subjects.append({
                'subject_id': subject_id,
                'subject_name': subject_rows[0]['subject__name'],
                'marks': sum((row['marks'] for row in subject_rows), ZERO),
                'max_marks': sum((row['max_marks'] for row in subject_rows), ZERO),
                'percentage': subject_percentage,
                'grade': get_grade(subject_percentage),
                'weight': config.weight_for(subject_id),
            })

        total_marks = sum((row['marks'] for row in rows), ZERO)
        max_marks = sum((row['max_marks'] for row in rows), ZERO)
        overall = _overall_percentage(total_marks, max_marks)

        report = {
            'student_id': student.pk,
            'student_name': student.name,
            'register_number': student.register_number,
            'class_level': student.class_level,
            'batch': student.batch,
            'exam_type': exam_type,
            'subjects': subjects,
            'total_marks': total_marks,
            'max_marks': max_marks,
            'weighted_total': sum((row['marks'] * config.weight_for(row['subject_id']) for row in rows), ZERO),
            'percentage': overall,
            'grade': get_grade(overall) if rows else None,
        }

        if can_view_rank(viewer_role, config):
            ranking = RankingEngine.class_ranking(student.class_level, exam_type, config)
            report['rank'] = next((entry['rank'] for entry in ranking if entry['student_id'] == student.pk), None)
            report['class_size'] = len(ranking)

        return report

    @staticmethod
    def public_result(register_number, exam_type=None):
        """
        Result looked up by register number, as a student would see it.
        Without ``exam_type`` the student's most recent exam is used.
        """
        register_number = (register_number or '').strip()
        if not register_number:
            raise ValidationError({'register_number': "Register number is required"})

        student = get_or_not_found(Student, register_number, register_number=register_number)

        if exam_type is None:
            exam_type = (
                Mark.objects.filter(student=student)
                .order_by('-date')
                .values_list('exam_type', flat=True)
                .first()
            )

        if exam_type is None:
            return {
                'published': False,
                'student_name': student.name,
                'register_number': student.register_number,
            }

        report = RankingEngine.student_report(student.pk, exam_type, STUDENT)
        report['published'] = bool(report['subjects'])
        return report


@transaction.atomic
def update_ranking_settings(enabled=None, weightage=None):
    """
    Admin change to the ranking settings. Weights must be numbers >= 0 keyed
    by existing subject ids; the map replaces the stored one.

    Returns:
        RankingConfig with the new values
    """
    system_settings = SystemSettings.get_instance()

    if enabled is not None:
        if not isinstance(enabled, bool):
            raise ValidationError({'enabled': "Ranking enabled must be true or false"})
        system_settings.ranking_enabled = enabled

    if weightage is not None:
        if not isinstance(weightage, dict):
            raise ValidationError({'weightage': "Weightage must map subject ids to numbers"})

        missing = set(weightage) - set(Subject.objects.filter(pk__in=list(weightage)).values_list('pk', flat=True))
        if missing:
            raise ValidationError({'weightage': f"Unknown subject ids: {', '.join(sorted(missing))}"})

        cleaned = {}
        for subject_id, weight in weightage.items():
            weight = to_decimal(weight, 'weightage')
            if weight < 0:
                raise ValidationError({'weightage': f"Weight for {subject_id} cannot be negative"})
            cleaned[subject_id] = int(weight) if weight == weight.to_integral_value() else float(weight)
        system_settings.ranking_weightage = cleaned

    system_settings.save()
    logger.info(
        f"Ranking settings updated: enabled={system_settings.ranking_enabled}, "
        f"weightage={system_settings.ranking_weightage}"
    )
    return system_settings.as_ranking_config()
