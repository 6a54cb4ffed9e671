from __future__ import annotations

from .expiry_worker import run_expiry_sweep, start_expiry_worker

__all__ = ["run_expiry_sweep", "start_expiry_worker"]
