"""page/limit handling shared by paginated queries."""

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _positive_int(value: object, default: int) -> int:
    try:
        number = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def normalize_pagination(page: object = None, limit: object = None) -> tuple[int, int]:
    """Coerce raw page/limit to positive ints.

    Missing, non-numeric or non-positive values fall back to 1 and 10.
    limit is capped at MAX_LIMIT.
    """
    return _positive_int(page, DEFAULT_PAGE), min(_positive_int(limit, DEFAULT_LIMIT), MAX_LIMIT)


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit
