from __future__ import annotations

from typing import Any, Optional

from .clock import ms_to_iso
from .models import Paste


def project(paste: Paste, now: Optional[int] = None) -> dict[str, Any]:
    """
    Build the externally visible shape of a paste.

    - ``remaining_views`` is ``None`` without a view limit, otherwise
      ``max(0, max_views - views)``.
    - ``expires_at`` is ``None`` without a TTL, otherwise the expiry instant
      as an ISO-8601 UTC string.

    ``now`` is accepted so callers can pass the same reference time they
    used for the read; none of the current fields depend on it.
    """
    remaining_views: Optional[int] = None
    if paste.max_views is not None:
        remaining_views = max(0, paste.max_views - paste.views)

    expires_at: Optional[str] = None
    if paste.expires_at_ms is not None:
        expires_at = ms_to_iso(paste.expires_at_ms)

    return {
        "content": paste.content,
        "remaining_views": remaining_views,
        "expires_at": expires_at,
    }
