from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import BigInteger, Delete, Update, and_, cast, delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pastebin_lite.domain.clock import Clock, current_time_ms
from pastebin_lite.domain.errors import StorageError
from pastebin_lite.domain.models import Paste, PasteRecord
from pastebin_lite.observability import get_correlation_id
from pastebin_lite.repositories.paste_store import PasteStore


logger = logging.getLogger(__name__)


class SqlPasteStore(PasteStore):
    """
    Paste store backed by a relational table through SQLAlchemy.

    Each operation runs in its own session: committed on success, rolled
    back on failure and always closed. Database faults surface as
    ``StorageError``.

    A consuming read is a single conditional ``UPDATE ... RETURNING``, so the
    database serialises concurrent increments on the same row.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Clock = current_time_ms,
    ) -> None:
        super().__init__(clock)
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception(
                "Paste storage failure",
                extra={
                    "event": "paste_storage_error",
                    "error_type": type(exc).__name__,
                    "correlation_id": get_correlation_id(),
                },
            )
            raise StorageError(f"Paste storage failed during {operation}.") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def __len__(self) -> int:
        with self._session("count") as session:
            return int(session.execute(select(func.count()).select_from(PasteRecord)).scalar_one())

    def _insert(self, paste: Paste) -> None:
        with self._session("create") as session:
            session.add(PasteRecord.from_paste(paste))
            session.commit()

    def get(
        self,
        paste_id: str,
        consume_view: bool = False,
        now: Optional[int] = None,
    ) -> Optional[Paste]:
        now_ms = self._resolve_now(now)

        with self._session("get") as session:
            record = session.get(PasteRecord, paste_id)
            if record is None:
                return None

            paste = record.to_paste()
            if not paste.is_accessible(now_ms):
                session.delete(record)
                session.commit()
                logger.info(
                    "Inaccessible paste removed on read",
                    extra={
                        "event": "paste_removed_on_read",
                        "paste_id": paste_id,
                        "correlation_id": get_correlation_id(),
                    },
                )
                return None

            if not consume_view:
                return paste

            # created_at and ttl_seconds never change, so only the view
            # limit needs re-checking inside the statement.
            stmt: Update = (
                update(PasteRecord)
                .where(
                    PasteRecord.id == paste_id,
                    or_(
                        PasteRecord.max_views.is_(None),
                        PasteRecord.views < PasteRecord.max_views,
                    ),
                )
                .values(views=PasteRecord.views + 1)
                .returning(PasteRecord.views)
                .execution_options(synchronize_session=False)
            )
            row = session.execute(stmt).one_or_none()
            if row is None:
                # Another reader took the last view first.
                session.rollback()
                return None

            session.commit()
            (new_views,) = row
            paste.views = int(new_views)
            return paste

    def delete(self, paste_id: str) -> bool:
        with self._session("delete") as session:
            stmt: Delete = (
                delete(PasteRecord)
                .where(PasteRecord.id == paste_id)
                .execution_options(synchronize_session=False)
            )
            result = session.execute(stmt)
            session.commit()
            return bool(result.rowcount)

    def purge_expired(self, now: Optional[int] = None) -> int:
        now_ms = self._resolve_now(now)
        expires_at = PasteRecord.created_at + cast(PasteRecord.ttl_seconds, BigInteger) * 1000

        with self._session("purge") as session:
            stmt: Delete = (
                delete(PasteRecord)
                .where(
                    or_(
                        and_(
                            PasteRecord.ttl_seconds.isnot(None),
                            expires_at <= now_ms,
                        ),
                        and_(
                            PasteRecord.max_views.isnot(None),
                            PasteRecord.views >= PasteRecord.max_views,
                        ),
                    )
                )
                .execution_options(synchronize_session=False)
            )
            result = session.execute(stmt)
            session.commit()
            return int(result.rowcount or 0)
