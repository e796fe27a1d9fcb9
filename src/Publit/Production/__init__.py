"""
Publit Production API client.

Resource wrappers for print orders, statuses, print data, files, countries and
delivery numbers, plus concurrent presigned URL resolution and download of
file lists.

Example:
    >>> from Publit.Production import APIClient, FileBatch
    >>> from Publit.Production.resources import file
    >>> client = APIClient("https://url.to.api", auth=httpx.BasicAuth("user", "pw"))  # doctest: +SKIP
    >>> files = file.index(client).data  # doctest: +SKIP
    >>> errors = FileBatch(client).download_files(files, "out")  # doctest: +SKIP
"""

from __future__ import annotations

from .batch import FileBatch, Outcome, ResultMap, WorkerPool
from .client import APIClient, build_http_client, make_response_error
from .config import BatchSettings, HttpClientConfig, ProductionConfig, load_config
from .errors import (
    DestinationError,
    DownloadAbortedError,
    ModelStateError,
    ProductionAPIError,
    ResolutionError,
    ResponseError,
    TransferError,
)

__all__ = [
    "APIClient",
    "BatchSettings",
    "DestinationError",
    "DownloadAbortedError",
    "FileBatch",
    "HttpClientConfig",
    "ModelStateError",
    "Outcome",
    "ProductionAPIError",
    "ProductionConfig",
    "ResolutionError",
    "ResponseError",
    "ResultMap",
    "TransferError",
    "WorkerPool",
    "build_http_client",
    "load_config",
    "make_response_error",
]
