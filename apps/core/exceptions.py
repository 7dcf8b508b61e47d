# core/exceptions.py
"""
Errors raised by the dashboard services.

Malformed or out-of-range input is reported with Django's own
``django.core.exceptions.ValidationError``; the two classes below cover the
remaining failure kinds. None of them is retryable: a rejected call leaves
the store exactly as it was.
"""
from django.core.exceptions import ObjectDoesNotExist


class InvalidStateTransition(Exception):
    """A workflow move that the current state does not allow."""

    code = "invalid_state_transition"

    def __init__(self, message, current=None, requested=None):
        super().__init__(message)
        self.message = message
        self.current = current
        self.requested = requested


class NotFound(ObjectDoesNotExist):
    """An id that is not present in the store."""

    code = "not_found"

    def __init__(self, model_name, lookup):
        self.model_name = model_name
        self.lookup = lookup
        self.message = f"{model_name} '{lookup}' not found"
        super().__init__(self.message)


def get_or_not_found(queryset_or_model, lookup, **filters):
    """
    ``get()`` that raises :class:`NotFound` instead of ``Model.DoesNotExist``.

    ``lookup`` is the value reported in the error; ``filters`` default to
    ``pk=lookup``.
    """
    manager = getattr(queryset_or_model, 'objects', queryset_or_model)
    model = getattr(manager, 'model', queryset_or_model)
    try:
        return manager.get(**(filters or {'pk': lookup}))
    except model.DoesNotExist:
        raise NotFound(model._meta.object_name, lookup) from None
