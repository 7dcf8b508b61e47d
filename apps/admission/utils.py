import logging
import random

from django.conf import settings
from django.core.exceptions import ValidationError

from apps.admission.models import Enrollment
from apps.core.utils import today as local_today
from apps.students.models import Student

logger = logging.getLogger(__name__)

MAX_ALLOCATION_ATTEMPTS = 20


def generate_registration_id(today=None, rng=None):
    """
    Register number for a new student: ``YYMMDD`` of the day it is issued
    followed by a zero-padded three digit random suffix.

    Example: ``260129042`` for a student registered on 29 January 2026.

    ``REGISTRATION_ID_PREFIX`` (empty by default) is put in front. Nothing
    is looked up here; :func:`allocate_register_number` deals with
    collisions.
    """
    day = today or local_today()
    rng = rng or random
    suffix = rng.randint(0, 999)
    prefix = getattr(settings, 'REGISTRATION_ID_PREFIX', '')
    return f"{prefix}{day:%y%m%d}{suffix:03d}"


def _identifier_taken(value, exclude_enrollment=None):
    enrollments = Enrollment.objects.all()
    if exclude_enrollment is not None:
        enrollments = enrollments.exclude(pk=exclude_enrollment)

    return (
        Student.objects.filter(register_number=value).exists()
        or Student.objects.filter(pk=value).exists()
        or enrollments.filter(register_number=value).exists()
        or enrollments.filter(pk=value).exists()
    )


def allocate_register_number(manual=None, today=None, rng=None, exclude_enrollment=None):
    """
    Pick the register number for a student being admitted.

    A manual value is used as given but must not match any existing student
    id, register number or enrollment id, so the attendance scanner can
    never resolve one token to two students. Generated values are retried
    on collision.
    """
    manual = (manual or '').strip()
    if manual:
        if _identifier_taken(manual, exclude_enrollment=exclude_enrollment):
            logger.warning(f"Register number {manual} rejected: already in use")
            raise ValidationError({'register_number': f"Register number '{manual}' is already in use."})
        return manual

    for attempt in range(MAX_ALLOCATION_ATTEMPTS):
        candidate = generate_registration_id(today=today, rng=rng)
        if not _identifier_taken(candidate, exclude_enrollment=exclude_enrollment):
            return candidate
        logger.info(f"Register number {candidate} collided, retrying ({attempt + 1})")

    raise ValidationError({'register_number': "Could not allocate a free register number for today."})


def allocate_roll_number(class_level, batch):
    """Next numeric roll number within a class and batch, as a string."""
    rolls = Student.objects.filter(class_level=class_level, batch=batch).values_list('roll_number', flat=True)
    numbers = [int(roll) for roll in rolls if roll and roll.isdigit()]
    return str(max(numbers, default=0) + 1)
