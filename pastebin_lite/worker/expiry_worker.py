from __future__ import annotations

import logging
import threading
import time
from typing import NoReturn, Optional

from flask import Flask

from pastebin_lite.domain.errors import StorageError
from pastebin_lite.repositories.paste_store import PasteStore


logger = logging.getLogger(__name__)

WORKER_CORRELATION_ID = "expiry-worker"

_worker_started = False
_worker_lock = threading.Lock()


def run_expiry_sweep(store: PasteStore, now: Optional[int] = None) -> int:
    """Remove expired and exhausted pastes once; return how many went."""

    purged = store.purge_expired(now)
    if purged:
        logger.info(
            "Expiry worker: removed inaccessible pastes",
            extra={
                "event": "expiry_worker_purge",
                "purged": purged,
                "correlation_id": WORKER_CORRELATION_ID,
            },
        )
    return purged


def _expiry_loop(store: PasteStore, interval_seconds: float) -> NoReturn:
    """Background loop that periodically purges inaccessible pastes."""

    while True:
        try:
            run_expiry_sweep(store)
        except StorageError:
            logger.warning(
                "Expiry worker: storage unavailable; skipping cycle",
                extra={
                    "event": "expiry_worker_storage_error",
                    "correlation_id": WORKER_CORRELATION_ID,
                },
            )
        except Exception:
            logger.exception(
                "Error in expiry worker loop",
                extra={
                    "event": "expiry_worker_error",
                    "correlation_id": WORKER_CORRELATION_ID,
                },
            )

        time.sleep(interval_seconds)


def start_expiry_worker(app: Flask) -> None:
    """
    Start the expiry worker in a background thread.

    This function is idempotent and will only start a single worker thread.
    """

    global _worker_started
    with _worker_lock:
        if _worker_started:
            return

        thread = threading.Thread(
            target=_expiry_loop,
            args=(
                app.extensions["paste_store"],
                app.config["EXPIRY_SWEEP_INTERVAL_SECONDS"],
            ),
            name="expiry-worker",
            daemon=True,
        )
        thread.start()
        _worker_started = True
