from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Optional

from marshmallow import ValidationError


def validate_latitude(value: Decimal) -> None:
    if value is not None and not (Decimal("-90") <= value <= Decimal("90")):
        raise ValidationError("latitude must be between -90 and 90.")


def validate_longitude(value: Decimal) -> None:
    if value is not None and not (Decimal("-180") <= value <= Decimal("180")):
        raise ValidationError("longitude must be between -180 and 180.")


def validate_max_length(limit: int):
    def _validate(value):
        if value is not None and len(value) > limit:
            raise ValidationError(f"must be {limit} characters or less.")
    return _validate


def validate_not_blank(value: str) -> None:
    if value is None or not value.strip():
        raise ValidationError("must not be blank.")


def parse_day(raw: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse YYYY-MM-DD into a UTC datetime (start or end of that day).
    Invalid or empty values yield None so the filter is simply skipped.
    """
    if not raw:
        return None
    try:
        day = date.fromisoformat(raw.strip())
    except ValueError:
        return None
    moment = time(23, 59, 59, 999999) if end_of_day else time(0, 0)
    return datetime.combine(day, moment, tzinfo=timezone.utc)
