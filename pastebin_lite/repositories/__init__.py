from __future__ import annotations

from .paste_store import InMemoryPasteStore, PasteStore
from .sql_paste_store import SqlPasteStore

__all__ = ["InMemoryPasteStore", "PasteStore", "SqlPasteStore"]
