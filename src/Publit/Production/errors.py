"""
Exception Types for the Production API Client

Library calls raise these for whole-call failures. Batch operations never raise
them per item; instead each failed file carries one of them as the value in the
returned ``{file_id: error}`` map, and only a bad destination is raised.
"""

from __future__ import annotations

from typing import Optional


class ProductionAPIError(Exception):
    """Base class for all Production API client errors."""


class ResponseError(ProductionAPIError):
    """The API answered with a status other than 200."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ModelStateError(ProductionAPIError, ValueError):
    """
    Raise when a model is in the wrong state for the requested write.

    Storing a record that already has an id, or updating/deleting one that has
    none, is refused before any request is sent.
    """


class DestinationError(ProductionAPIError):
    """Download destination is missing or not a directory."""


class ResolutionError(ProductionAPIError):
    """A file could not be given a presigned URL."""


class TransferError(ProductionAPIError):
    """A file could not be fetched from its presigned URL."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class DownloadAbortedError(ProductionAPIError):
    """
    Download skipped because presigned URL resolution failed for the batch.

    Assigned to every file that did not fail resolution itself, so the result
    map still holds an error for each file in the batch.
    """
