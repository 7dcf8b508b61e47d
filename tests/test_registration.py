import datetime
import re

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.admission.utils import allocate_register_number, allocate_roll_number, generate_registration_id


def test_registration_id_is_date_plus_three_digits(seq_random):
    assert generate_registration_id(datetime.date(2026, 1, 29), seq_random(7)) == '260129007'
    assert generate_registration_id(datetime.date(2025, 12, 1), seq_random(999)) == '251201999'


def test_registration_id_uses_today_by_default():
    value = generate_registration_id()
    assert re.fullmatch(r'\d{9}', value)
    assert value[:6] == timezone.localdate().strftime('%y%m%d')


def test_registration_id_prefix(settings, seq_random):
    settings.REGISTRATION_ID_PREFIX = 'LMS'
    assert generate_registration_id(datetime.date(2026, 1, 29), seq_random(42)) == 'LMS260129042'


def test_manual_register_number_wins(demo_data):
    assert allocate_register_number('  REG-2026-77 ') == 'REG-2026-77'


@pytest.mark.parametrize('value', ['260105101', 's1', 'e5'])
def test_manual_register_number_must_be_free(demo_data, value):
    # existing register number, student id, enrollment id
    with pytest.raises(ValidationError):
        allocate_register_number(value)


def test_generated_register_number_retries_on_collision(demo_data, seq_random):
    value = allocate_register_number(today=datetime.date(2026, 1, 5), rng=seq_random(101, 102, 200))
    assert value == '260105200'


def test_generated_register_number_gives_up(demo_data, seq_random):
    rng = seq_random(*([101] * 20))
    with pytest.raises(ValidationError):
        allocate_register_number(today=datetime.date(2026, 1, 5), rng=rng)


def test_roll_number_follows_highest_in_class(demo_data):
    assert allocate_roll_number(10, 'Batch-A') == '4'
    assert allocate_roll_number(12, 'Batch-A') == '1'
