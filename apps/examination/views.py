from apps.core.decorators import error_response, json_view
from apps.core.models import SystemSettings
from apps.core.permissions import can_view_rank
from apps.core.utils import parse_class_level
from apps.examination.services import RankingEngine

DEFAULT_EXAM_TYPE = 'Mid-term'


@json_view(['GET'])
def class_ranking(request):
    config = SystemSettings.get_instance().as_ranking_config()
    if not can_view_rank(request.GET.get('role'), config):
        return error_response('Ranking is not published', 'forbidden', 403)

    class_level = parse_class_level(request.GET.get('class_level'))
    exam_type = request.GET.get('exam_type') or DEFAULT_EXAM_TYPE
    return {
        'class_level': class_level,
        'exam_type': exam_type,
        'ranking': RankingEngine.class_ranking(class_level, exam_type, config),
    }


@json_view(['GET'])
def student_report(request, student_id):
    return RankingEngine.student_report(
        student_id,
        request.GET.get('exam_type') or DEFAULT_EXAM_TYPE,
        request.GET.get('role'),
    )


@json_view(['GET'])
def public_result(request):
    return RankingEngine.public_result(request.GET.get('register_number'), request.GET.get('exam_type') or None)
