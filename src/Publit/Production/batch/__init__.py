"""Concurrent batch operations over file lists."""

from __future__ import annotations

from .orchestrator import FileBatch, ResultMap
from .pool import Outcome, WorkerPool
from .transfer import fetch_to_file, target_path

__all__ = [
    "FileBatch",
    "Outcome",
    "ResultMap",
    "WorkerPool",
    "fetch_to_file",
    "target_path",
]
