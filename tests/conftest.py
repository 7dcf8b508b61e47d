import datetime
from decimal import Decimal

import pytest

from apps.admission.models import Enrollment
from apps.core.seed import load_demo_data


class SequenceRandom:
    """Stands in for ``random`` and hands out the given suffixes in order."""

    def __init__(self, *values):
        self.values = list(values)

    def randint(self, a, b):
        return self.values.pop(0)


@pytest.fixture
def demo_data(db):
    return load_demo_data()


@pytest.fixture
def make_enrollment(db):
    def _make(total_fee=Decimal('15000'), **fields):
        data = {
            'student_name': 'Test Student',
            'phone': '+919811111111',
            'class_level': 10,
            'batch': 'Batch-A',
            'total_fee': Decimal(total_fee),
            'submitted_date': datetime.date(2026, 2, 1),
        }
        data.update(fields)
        return Enrollment.objects.create(**data)
    return _make


@pytest.fixture
def seq_random():
    return SequenceRandom
