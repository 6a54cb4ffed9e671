from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pastebin_lite.domain.errors import ValidationError
from pastebin_lite.domain.models import Paste
from pastebin_lite.domain.projection import project
from pastebin_lite.observability import get_correlation_id
from pastebin_lite.repositories.paste_store import PasteStore


logger = logging.getLogger(__name__)


@dataclass
class PasteService:
    """
    Application service coordinating paste-related use cases.

    Delegates storage and lifecycle rules to the configured ``PasteStore``
    and adds structured logging around each use case. ``now`` arguments are
    epoch milliseconds and are passed straight through to the store.
    """

    store: PasteStore

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------
    def create_paste(
        self,
        *,
        content: Any,
        ttl_seconds: Any = None,
        max_views: Any = None,
        now: Optional[int] = None,
    ) -> Paste:
        """
        Create a new paste.

        Raises ``ValidationError`` when a parameter is invalid and
        ``StorageError`` when the backend fails.
        """
        try:
            paste = self.store.create(
                content,
                ttl_seconds=ttl_seconds,
                max_views=max_views,
                now=now,
            )
        except ValidationError as exc:
            logger.warning(
                "Invalid parameters when creating paste: %s",
                exc,
                extra={
                    "event": "paste_create_invalid_parameters",
                    "error_type": type(exc).__name__,
                    "correlation_id": get_correlation_id(),
                },
            )
            raise

        logger.info(
            "Paste created",
            extra={
                "event": "paste_created",
                "paste_id": paste.id,
                "correlation_id": get_correlation_id(),
            },
        )
        return paste

    # -------------------------------------------------------------------------
    # Retrieval / viewing
    # -------------------------------------------------------------------------
    def fetch_paste(
        self,
        paste_id: str,
        *,
        now: Optional[int] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Consume one view of a paste and return its projection.

        Returns ``None`` when the paste is missing, expired or has used up
        its views.
        """
        logger.info(
            "Paste access attempt",
            extra={
                "event": "paste_access_attempt",
                "paste_id": paste_id,
                "correlation_id": get_correlation_id(),
            },
        )

        paste = self.store.get(paste_id, consume_view=True, now=now)
        if paste is None:
            logger.info(
                "Paste not available",
                extra={
                    "event": "paste_not_found",
                    "paste_id": paste_id,
                    "correlation_id": get_correlation_id(),
                },
            )
            return None

        logger.info(
            "Paste access successful",
            extra={
                "event": "paste_access_success",
                "paste_id": paste.id,
                "correlation_id": get_correlation_id(),
            },
        )
        return project(paste, now)

    def preview_paste(
        self,
        paste_id: str,
        *,
        now: Optional[int] = None,
    ) -> Optional[Paste]:
        """Return the paste without spending a view, or ``None``."""
        return self.store.get(paste_id, consume_view=False, now=now)
