from apps.core.decorators import error_response, json_view
from apps.core.stats import dashboard_stats
from apps.core.utils import parse_iso_date
from apps.examination.services import update_ranking_settings


@json_view(['GET'])
def dashboard(request):
    on_date = request.GET.get('date')
    return dashboard_stats(parse_iso_date(on_date) if on_date else None)


@json_view(['POST'])
def ranking_settings(request):
    config = update_ranking_settings(
        enabled=request.data.get('enabled'),
        weightage=request.data.get('weightage'),
    )
    return {'enabled': config.enabled, 'weightage': config.weightage}


def handler404(request, exception):
    return error_response('Not found', 'not_found', 404)


def handler500(request):
    return error_response('Server error', 'server_error', 500)
