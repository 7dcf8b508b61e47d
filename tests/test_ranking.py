from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from apps.admission.services import AdmissionService
from apps.core.exceptions import NotFound
from apps.core.models import RankingConfig, SystemSettings
from apps.core.permissions import can_view_rank
from apps.examination.models import Mark
from apps.examination.services import MarkService, RankingEngine, update_ranking_settings
from apps.examination.utils import get_grade


def ranking_ids(ranking):
    return [(entry['rank'], entry['student_id']) for entry in ranking]


def test_weighted_total_and_subject_percentage(demo_data):
    MarkService.record_mark('s1', 'sub6', 80, 100, exam_type='Unit Test', date='2026-02-01')
    MarkService.record_mark('s1', 'sub6', 90, 100, exam_type='Unit Test', date='2026-02-08')
    config = RankingConfig(enabled=True, weightage={'sub6': 2})

    assert RankingEngine.weighted_total('s1', 10, 'Unit Test', config) == Decimal('340')
    assert RankingEngine.subject_percentage('s1', 'sub6', 'Unit Test') == Decimal('85')


def test_subject_percentage_without_marks(demo_data):
    assert RankingEngine.subject_percentage('s1', 'sub9', 'Final') == 0


def test_subject_percentage_uses_each_max_marks(demo_data):
    MarkService.record_mark('s2', 'sub7', 40, 50, exam_type='Unit Test')
    MarkService.record_mark('s2', 'sub7', 45, 100, exam_type='Unit Test')

    assert RankingEngine.subject_percentage('s2', 'sub7', 'Unit Test') == Decimal('62.50')


def test_class_ranking_orders_by_weighted_total(demo_data):
    ranking = RankingEngine.class_ranking(10, 'Mid-term', RankingConfig())

    assert ranking_ids(ranking) == [(1, 's1'), (2, 's2'), (3, 's5')]
    assert [entry['weighted_total'] for entry in ranking] == [Decimal('418'), Decimal('378'), Decimal('266')]
    assert ranking[0]['percentage'] == Decimal('83.60')


def test_class_ranking_reads_weights_from_settings(demo_data):
    update_ranking_settings(weightage={'sub7': 10})

    ranking = RankingEngine.class_ranking(10, 'Mid-term')

    # Science: s1 78, s2 68, s5 91
    assert ranking_ids(ranking) == [(1, 's1'), (2, 's5'), (3, 's2')]
    assert ranking[1]['weighted_total'] == Decimal('88') + Decimal('910') + Decimal('87')


def test_zero_weight_drops_a_subject(demo_data):
    config = RankingConfig(weightage={'sub6': 0})
    assert RankingEngine.weighted_total('s1', 10, 'Mid-term', config) == Decimal('333')


def test_ties_share_rank_and_break_on_register_number(demo_data):
    MarkService.record_mark('s5', 'sub6', 90, exam_type='Final')
    MarkService.record_mark('s2', 'sub6', 90, exam_type='Final')
    MarkService.record_mark('s1', 'sub6', 70, exam_type='Final')

    ranking = RankingEngine.class_ranking(10, 'Final', RankingConfig())

    assert ranking_ids(ranking) == [(1, 's2'), (1, 's5'), (3, 's1')]


def test_class_ranking_is_empty_without_marks(demo_data):
    assert RankingEngine.class_ranking(12, 'Mid-term', RankingConfig()) == []
    assert RankingEngine.class_ranking(10, 'Final', RankingConfig()) == []


@pytest.mark.parametrize('value, grade', [
    (100, 'A+'), (90, 'A+'), (89.99, 'A'), (80, 'A'), (70, 'B'), (65, 'C'), (50, 'D'), (49.5, 'F'), (0, 'F'),
])
def test_get_grade(value, grade):
    assert get_grade(value) == grade


def test_student_report(demo_data):
    report = RankingEngine.student_report('s1', 'Mid-term', 'student', RankingConfig())

    assert len(report['subjects']) == 5
    assert report['total_marks'] == Decimal('418')
    assert report['max_marks'] == Decimal('500')
    assert report['percentage'] == Decimal('83.60')
    assert report['grade'] == 'A'
    assert report['rank'] == 1
    assert report['class_size'] == 3

    english = next(row for row in report['subjects'] if row['subject_id'] == 'sub8')
    assert english['grade'] == 'A+'
    assert english['weight'] == 1


def test_disabled_ranking_hides_rank_from_students_and_parents(demo_data):
    update_ranking_settings(enabled=False)

    student_view = RankingEngine.student_report('s2', 'Mid-term', 'student')
    parent_view = RankingEngine.student_report('s2', 'Mid-term', 'parent')
    admin_view = RankingEngine.student_report('s2', 'Mid-term', 'admin')
    teacher_view = RankingEngine.student_report('s2', 'Mid-term', 'teacher')

    assert 'rank' not in student_view and 'class_size' not in student_view
    assert 'rank' not in parent_view
    assert admin_view['rank'] == teacher_view['rank'] == 2
    assert admin_view['class_size'] == 3
    assert student_view['total_marks'] == admin_view['total_marks']


def test_can_view_rank():
    assert can_view_rank('admin', RankingConfig(enabled=False))
    assert can_view_rank('Teacher', RankingConfig(enabled=False))
    assert not can_view_rank('student', RankingConfig(enabled=False))
    assert not can_view_rank(None, RankingConfig(enabled=False))
    assert can_view_rank('parent', RankingConfig(enabled=True))


def test_update_ranking_settings_validates_weights(demo_data):
    with pytest.raises(ValidationError):
        update_ranking_settings(weightage={'sub6': -1})
    with pytest.raises(ValidationError):
        update_ranking_settings(weightage={'sub99': 2})
    with pytest.raises(ValidationError):
        update_ranking_settings(weightage={'sub6': 'heavy'})
    with pytest.raises(ValidationError):
        update_ranking_settings(enabled='yes')

    assert SystemSettings.get_instance().ranking_weightage == {}


def test_update_ranking_settings_stores_weights(demo_data):
    config = update_ranking_settings(enabled=True, weightage={'sub6': 2, 'sub7': '1.5'})

    assert config.weight_for('sub6') == 2
    assert config.weight_for('sub7') == Decimal('1.5')
    assert config.weight_for('sub8') == 1
    assert SystemSettings.get_instance().as_ranking_config() == config


def test_record_mark_validation(demo_data):
    with pytest.raises(ValidationError):
        MarkService.record_mark('s1', 'sub1', 50)  # class 9 subject
    with pytest.raises(ValidationError):
        MarkService.record_mark('s1', 'sub6', 101, 100)
    with pytest.raises(ValidationError):
        MarkService.record_mark('s1', 'sub6', -1, 100)
    with pytest.raises(ValidationError):
        MarkService.record_mark('s1', 'sub6', 10, 0)
    with pytest.raises(NotFound):
        MarkService.record_mark('s1', 'sub404', 10)


def test_update_mark(demo_data):
    mark = MarkService.update_mark('m1', marks=95, remarks='Re-evaluated')

    assert mark.marks == Decimal('95')
    assert Mark.objects.get(pk='m1').remarks == 'Re-evaluated'
    with pytest.raises(ValidationError):
        MarkService.update_mark('m1', marks=120)
    with pytest.raises(ValidationError):
        MarkService.update_mark('m1', student='s2')


def test_public_result(demo_data):
    update_ranking_settings(enabled=False)

    result = RankingEngine.public_result(' 260105101 ')

    assert result['published'] is True
    assert result['exam_type'] == 'Mid-term'
    assert result['student_id'] == 's1'
    assert 'rank' not in result


def test_public_result_before_any_marks(demo_data):
    enrollment = AdmissionService.update_enrollment_status('e5', 'confirmed')

    result = RankingEngine.public_result(enrollment.register_number)
    assert result == {
        'published': False,
        'student_name': 'Frank Miller',
        'register_number': enrollment.register_number,
    }
    assert RankingEngine.public_result('260105101', 'Final')['published'] is False


def test_public_result_unknown_register_number(demo_data):
    with pytest.raises(NotFound):
        RankingEngine.public_result('000000000')
    with pytest.raises(ValidationError):
        RankingEngine.public_result('')
