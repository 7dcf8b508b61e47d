# core/decorators.py
import functools
import json
import logging

from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.core.exceptions import InvalidStateTransition, NotFound

logger = logging.getLogger(__name__)


def error_response(message, code, status):
    return JsonResponse({'error': message, 'code': code}, status=status)


def validation_message(exc):
    if hasattr(exc, 'error_dict'):
        return exc.message_dict
    return exc.messages


def read_json(request):
    """Request body as a dict. Empty bodies read as {}."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON") from None
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def json_view(methods=('GET',)):
    """
    Turn a function returning plain data into a JSON endpoint.

    Service errors become ``{"error", "code"}`` bodies: validation errors
    400, unknown ids 404, refused workflow moves 409. POST bodies are parsed
    into ``request.data``.
    """
    def decorator(view_func):
        @csrf_exempt
        @require_http_methods(list(methods))
        @functools.wraps(view_func)
        def wrapper(request, *args, **kwargs):
            try:
                request.data = read_json(request) if request.method == 'POST' else {}
                result = view_func(request, *args, **kwargs)
            except ValidationError as e:
                logger.warning(f"{request.method} {request.path} rejected: {validation_message(e)}")
                return error_response(validation_message(e), 'invalid', 400)
            except NotFound as e:
                return error_response(e.message, e.code, 404)
            except InvalidStateTransition as e:
                logger.warning(f"{request.method} {request.path} refused: {e.message}")
                return error_response(e.message, e.code, 409)

            if isinstance(result, HttpResponse):
                return result
            return JsonResponse(result, encoder=DjangoJSONEncoder, safe=False)
        return wrapper
    return decorator
