"""Limits for list endpoints (?limit=&offset=)."""
from procurement.errors import ValidationError

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


def _as_int(raw, field: str, default: int) -> int:
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(description=f'{field} must be an integer')


def normalize_pagination(limit_raw, offset_raw):
    """Return (limit, offset); limit is clamped to 1..MAX_LIMIT, a negative offset is rejected."""
    limit = min(max(_as_int(limit_raw, 'limit', DEFAULT_LIMIT), 1), MAX_LIMIT)
    offset = _as_int(offset_raw, 'offset', 0)
    if offset < 0:
        raise ValidationError(description='offset cannot be negative')
    return limit, offset
