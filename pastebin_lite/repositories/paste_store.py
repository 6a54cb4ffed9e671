from __future__ import annotations

import abc
import logging
import threading
import uuid
from dataclasses import replace
from typing import Any, Optional

from pastebin_lite.domain.clock import Clock, current_time_ms
from pastebin_lite.domain.models import Paste
from pastebin_lite.domain.validation import validate_create_request
from pastebin_lite.observability import get_correlation_id


logger = logging.getLogger(__name__)


class PasteStore(abc.ABC):
    """
    Keyed store of pastes.

    Every backend must make the read-check-increment sequence of a consuming
    ``get`` a single critical section per paste: with ``max_views = N``, at
    most N consuming reads may ever succeed, however they interleave.

    ``now`` arguments are epoch milliseconds. When omitted, the store reads
    its ``clock``.
    """

    def __init__(self, clock: Clock = current_time_ms) -> None:
        self._clock = clock

    def _resolve_now(self, now: Optional[int]) -> int:
        return self._clock() if now is None else now

    def create(
        self,
        content: Any,
        ttl_seconds: Any = None,
        max_views: Any = None,
        now: Optional[int] = None,
    ) -> Paste:
        """
        Validate and insert a new paste, returning the stored record.

        Raises ``ValidationError`` naming the first constraint that failed.
        """
        content, ttl, views = validate_create_request(content, ttl_seconds, max_views)
        paste = Paste(
            id=str(uuid.uuid4()),
            content=content,
            created_at=self._resolve_now(now),
            ttl_seconds=ttl,
            max_views=views,
        )
        self._insert(paste)
        return replace(paste)

    @abc.abstractmethod
    def _insert(self, paste: Paste) -> None:
        """Persist a freshly built paste."""

    @abc.abstractmethod
    def get(
        self,
        paste_id: str,
        consume_view: bool = False,
        now: Optional[int] = None,
    ) -> Optional[Paste]:
        """
        Return the paste if it is accessible at ``now``, else ``None``.

        A consuming read increments ``views`` by one and returns the updated
        record. Missing, expired and exhausted pastes all yield ``None``.
        """

    @abc.abstractmethod
    def delete(self, paste_id: str) -> bool:
        """Remove a paste. Returns whether anything was removed."""

    @abc.abstractmethod
    def purge_expired(self, now: Optional[int] = None) -> int:
        """Remove every paste that is no longer accessible; return the count."""


class InMemoryPasteStore(PasteStore):
    """
    Process-local store backed by a dict.

    A single lock guards the dict, so lookups, increments and removals never
    interleave. Inaccessible pastes are removed as soon as a read sees them.
    Records handed to callers are copies.
    """

    def __init__(self, clock: Clock = current_time_ms) -> None:
        super().__init__(clock)
        self._pastes: dict[str, Paste] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._pastes)

    def _insert(self, paste: Paste) -> None:
        with self._lock:
            self._pastes[paste.id] = replace(paste)

    def get(
        self,
        paste_id: str,
        consume_view: bool = False,
        now: Optional[int] = None,
    ) -> Optional[Paste]:
        now_ms = self._resolve_now(now)

        with self._lock:
            paste = self._pastes.get(paste_id)
            if paste is None:
                return None

            if not paste.is_accessible(now_ms):
                del self._pastes[paste_id]
                removed = True
            else:
                removed = False
                if consume_view:
                    paste.views += 1
                snapshot = replace(paste)

        if removed:
            logger.info(
                "Inaccessible paste removed on read",
                extra={
                    "event": "paste_removed_on_read",
                    "paste_id": paste_id,
                    "correlation_id": get_correlation_id(),
                },
            )
            return None
        return snapshot

    def delete(self, paste_id: str) -> bool:
        with self._lock:
            return self._pastes.pop(paste_id, None) is not None

    def purge_expired(self, now: Optional[int] = None) -> int:
        now_ms = self._resolve_now(now)
        with self._lock:
            stale = [
                paste_id
                for paste_id, paste in self._pastes.items()
                if not paste.is_accessible(now_ms)
            ]
            for paste_id in stale:
                del self._pastes[paste_id]
        return len(stale)
