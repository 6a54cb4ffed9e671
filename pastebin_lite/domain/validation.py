from __future__ import annotations

from typing import Any, Optional

from .errors import ValidationError


CONTENT_ERROR = "content is required and must be a non-empty string"
TTL_SECONDS_ERROR = "ttl_seconds must be an integer >= 1"
MAX_VIEWS_ERROR = "max_views must be an integer >= 1"

# Upper bound of the 32-bit ``ttl_seconds`` / ``max_views`` columns. About 68
# years of TTL, so expiry instants stay well inside the datetime range.
MAX_INT_FIELD = 2**31 - 1

# Characters ``str.isspace`` accepts that are not trimmed as whitespace.
_NON_TRIM_SPACE = frozenset("\x1c\x1d\x1e\x1f\x85")
_BYTE_ORDER_MARK = "\ufeff"


def _is_blank(text: str) -> bool:
    return all(
        ch == _BYTE_ORDER_MARK or (ch.isspace() and ch not in _NON_TRIM_SPACE)
        for ch in text
    )


def _as_positive_int(value: Any) -> Optional[int]:
    """
    Return ``value`` as an int if it is an integer in ``[1, MAX_INT_FIELD]``,
    else ``None``.

    Integral floats such as ``5.0`` are accepted and converted. Booleans are
    rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if not isinstance(value, int) or not 1 <= value <= MAX_INT_FIELD:
        return None
    return value


def validate_create_request(
    content: Any,
    ttl_seconds: Any = None,
    max_views: Any = None,
) -> tuple[str, Optional[int], Optional[int]]:
    """
    Validate paste creation parameters, in order, raising ``ValidationError``
    with a message naming the first constraint that failed.

    Returns ``(content, ttl_seconds, max_views)`` with the numeric values
    normalised to ``int``. ``content`` is returned untouched; only its
    emptiness is judged, treating the byte order mark as whitespace.
    """
    if not isinstance(content, str) or _is_blank(content):
        raise ValidationError(CONTENT_ERROR)

    ttl: Optional[int] = None
    if ttl_seconds is not None:
        ttl = _as_positive_int(ttl_seconds)
        if ttl is None:
            raise ValidationError(TTL_SECONDS_ERROR)

    views: Optional[int] = None
    if max_views is not None:
        views = _as_positive_int(max_views)
        if views is None:
            raise ValidationError(MAX_VIEWS_ERROR)

    return content, ttl, views
