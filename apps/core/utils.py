# core/utils.py
import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.dateparse import parse_date


def parse_iso_date(value, field_name="date"):
    """
    Accept a ``date`` or an ISO ``YYYY-MM-DD`` string.
    Raises ValidationError for anything else.
    """
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_date(value.strip())
        except ValueError:
            parsed = None
        if parsed:
            return parsed
    raise ValidationError({field_name: f"Enter a valid date in YYYY-MM-DD format (got {value!r})."})


def today():
    return timezone.localdate()


def to_decimal(value, field_name="amount"):
    """Convert form input to Decimal without going through float."""
    if isinstance(value, bool):
        raise ValidationError({field_name: "Enter a number."})
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError({field_name: f"Enter a number (got {value!r})."}) from None
    if not result.is_finite():
        raise ValidationError({field_name: "Enter a finite number."})
    return result


def round_half_up(value, places=0):
    """Round like the dashboard displays numbers (2.5 -> 3, not 2)."""
    exponent = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else rounded


def percentage(part, total, places=0):
    """part / total * 100, rounded half-up. 0 when total is 0."""
    if not total:
        return 0 if places == 0 else Decimal(0).quantize(Decimal(1).scaleb(-places))
    return round_half_up(Decimal(part) / Decimal(total) * 100, places)


def parse_class_level(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError({'class_level': f"Enter a class number (got {value!r})."}) from None
