from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from pastebin_lite.db import Base


@dataclass
class Paste:
    """
    A stored text snippet plus its expiry metadata and view counter.

    ``created_at`` is epoch milliseconds. ``ttl_seconds`` and ``max_views``
    are ``None`` when the paste has no time expiry or no view limit.
    """

    id: str
    content: str
    created_at: int
    ttl_seconds: Optional[int] = None
    max_views: Optional[int] = None
    views: int = 0

    @property
    def expires_at_ms(self) -> Optional[int]:
        if self.ttl_seconds is None:
            return None
        return self.created_at + self.ttl_seconds * 1000

    def is_expired(self, now_ms: int) -> bool:
        """True once ``now_ms`` reaches ``created_at + ttl_seconds * 1000``."""
        expires_at = self.expires_at_ms
        return expires_at is not None and now_ms >= expires_at

    def is_exhausted(self) -> bool:
        return self.max_views is not None and self.views >= self.max_views

    def is_accessible(self, now_ms: int) -> bool:
        return not self.is_expired(now_ms) and not self.is_exhausted()


class PasteRecord(Base):
    """Paste row persisted via SQLAlchemy."""

    __tablename__ = "pastes"
    __table_args__ = (
        CheckConstraint(
            "ttl_seconds IS NULL OR ttl_seconds >= 1",
            name="ck_pastes_ttl_seconds_min_1",
        ),
        CheckConstraint(
            "max_views IS NULL OR max_views >= 1",
            name="ck_pastes_max_views_min_1",
        ),
        CheckConstraint("views >= 0", name="ck_pastes_views_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    ttl_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_views: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    views: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )

    @validates("content")
    def _validate_immutable_content(self, key: str, value: str) -> str:
        """
        Enforce that ``content`` is immutable after initial creation.

        The value can be set on new instances, but any subsequent attempt to
        change it will raise an error.
        """

        if getattr(self, "content", None) is not None and self.content != value:
            raise ValueError("Paste content is immutable and cannot be modified.")
        return value

    @classmethod
    def from_paste(cls, paste: Paste) -> "PasteRecord":
        return cls(
            id=paste.id,
            content=paste.content,
            ttl_seconds=paste.ttl_seconds,
            max_views=paste.max_views,
            created_at=paste.created_at,
            views=paste.views,
        )

    def to_paste(self) -> Paste:
        return Paste(
            id=self.id,
            content=self.content,
            created_at=self.created_at,
            ttl_seconds=self.ttl_seconds,
            max_views=self.max_views,
            views=self.views,
        )
