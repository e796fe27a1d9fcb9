# === NAVMAP v1 ===
# {
#   "module": "Publit.Production.batch.orchestrator",
#   "purpose": "Presigned URL resolution and concurrent download of file lists",
#   "sections": [
#     {"id": "filebatch", "name": "FileBatch", "anchor": "class-filebatch", "kind": "class"},
#     {"id": "resolve-presigned", "name": "FileBatch.resolve_presigned", "anchor": "method-resolve-presigned", "kind": "method"},
#     {"id": "download-files", "name": "FileBatch.download_files", "anchor": "method-download-files", "kind": "method"}
#   ]
# }
# === /NAVMAP ===

"""
Batch operations over file lists.

``FileBatch`` runs two stages on a ``WorkerPool``:

1. **Resolve**: files without a presigned URL get one via a ``files/{id}``
   show call with ``aux=presigned_url``. Workers return refreshed copies; the
   copies are written back into the caller's list after the pool joins, so no
   file object is shared between threads.
2. **Download**: every file is streamed from its presigned URL into
   ``out_dir/<original_name>``.

Both operations return ``{file_id: error_or_None}`` with one entry per file.
Only an invalid destination is raised. If any file fails resolution, no file
is downloaded: failed files keep their resolution error and every other file
gets a ``DownloadAbortedError``.

**Usage:**

    batch = FileBatch(client, settings=BatchSettings(workers=3))
    errors = batch.download_files(files, "some/path/to/folder")
    failed = {fid: err for fid, err in errors.items() if err is not None}
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import MutableSequence, Optional, Sequence, Union

import httpx

from ..client import build_http_client
from ..config.models import BatchSettings, HttpClientConfig
from ..errors import DestinationError, DownloadAbortedError
from ..resources.base import ProductionAPIGetter
from ..resources.file import File, get_presigned_url
from .pool import Outcome, WorkerPool
from .transfer import fetch_to_file, target_path

__all__ = ["FileBatch", "ResultMap"]

logger = logging.getLogger(__name__)

#: Per-file errors keyed by file id; None means success
ResultMap = dict[int, Optional[Exception]]


def _file_id(f: File) -> int:
    return f.id


class FileBatch:
    """
    Concurrent presigned URL resolution and download for lists of files.

    Attributes:
        client: API client used for ``files/{id}`` show calls
        settings: Worker count and stream chunk size for every run
    """

    def __init__(
        self,
        client: ProductionAPIGetter,
        *,
        settings: Optional[BatchSettings] = None,
        download_client: Optional[httpx.Client] = None,
    ) -> None:
        """
        Initialize the batch runner.

        Args:
            client: API client (``APIClient`` or anything with a compatible ``get``)
            settings: Batch settings; defaults to 5 workers
            download_client: Client for presigned URL GETs. Defaults to a
                client without auth built from the API client's HTTP settings.
        """
        self.client = client
        self.settings = settings or BatchSettings()
        self._download_client = download_client
        self._owns_download_client = download_client is None

    @property
    def download_client(self) -> httpx.Client:
        if self._download_client is None:
            config = getattr(self.client, "config", None)
            http_cfg = getattr(config, "http", None) or HttpClientConfig()
            self._download_client = build_http_client(http_cfg)
        return self._download_client

    def close(self) -> None:
        if self._owns_download_client and self._download_client is not None:
            self._download_client.close()
            self._download_client = None

    def __enter__(self) -> "FileBatch":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _pool(self, name: str) -> WorkerPool:
        return WorkerPool(self.settings.workers, name=name)

    # ------------------------------------------------------------------
    # Stage 1: presigned URLs
    # ------------------------------------------------------------------

    def resolve_presigned(self, files: MutableSequence[File]) -> ResultMap:
        """
        Fetch presigned URLs for every file in ``files`` that lacks one.

        Resolved files are replaced in ``files`` by refreshed copies. Files
        that already hold a presigned URL are not requested again and map to
        None.

        Returns:
            ``{file_id: error_or_None}`` with one entry per file
        """
        errors: ResultMap = {f.id: None for f in files}
        pending = [f for f in files if not f.has_presigned]
        if pending:
            errors.update(self._resolve(files, pending))
        return errors

    def _resolve(self, files: MutableSequence[File], pending: Sequence[File]) -> ResultMap:
        logger.info(f"Resolving presigned URLs for {len(pending)} file(s)")
        outcomes = self._pool("presign").run(
            pending, lambda f: get_presigned_url(self.client, f), key=_file_id
        )

        refreshed = {o.item_id: o.value for o in outcomes if o.ok}
        for i, f in enumerate(files):
            if f.id in refreshed:
                files[i] = refreshed[f.id]

        errors = _collect(outcomes)
        for file_id, err in errors.items():
            if err is not None:
                logger.warning(f"Presigned URL for file {file_id} failed: {err}")
        return errors

    # ------------------------------------------------------------------
    # Stage 2: downloads
    # ------------------------------------------------------------------

    def download_files(
        self, files: MutableSequence[File], out_dir: Union[str, os.PathLike]
    ) -> ResultMap:
        """
        Download every file in ``files`` into ``out_dir``.

        Files without a presigned URL are resolved first. If any of those
        resolutions fails, nothing is downloaded.

        Args:
            files: Files to download; updated in place with resolved copies
            out_dir: Existing directory receiving ``<original_name>`` files

        Returns:
            ``{file_id: error_or_None}`` with one entry per file

        Raises:
            DestinationError: If ``out_dir`` does not exist or is not a directory
        """
        dest = Path(out_dir)
        if not dest.is_dir():
            raise DestinationError(f"Output dir is not a directory: {dest}")

        errors: ResultMap = {f.id: None for f in files}

        pending = [f for f in files if not f.has_presigned]
        if pending:
            resolved = self._resolve(files, pending)
            failed = {fid: err for fid, err in resolved.items() if err is not None}
            if failed:
                logger.warning(
                    f"Download aborted: {len(failed)} of {len(pending)} presigned URL(s) failed"
                )
                reason = (
                    f"Download aborted: presigned URL resolution failed for {len(failed)} file(s)"
                )
                return {
                    fid: failed[fid] if fid in failed else DownloadAbortedError(reason)
                    for fid in errors
                }

        logger.info(f"Downloading {len(files)} file(s) to {dest}")
        chunk_size = self.settings.chunk_size_bytes
        client = self.download_client

        def fetch(f: File) -> int:
            return fetch_to_file(
                client, f.presigned_url, target_path(dest, f.original_name), chunk_size=chunk_size
            )

        outcomes = self._pool("download").run(list(files), fetch, key=_file_id)
        errors.update(_collect(outcomes))

        failed_count = 0
        for file_id, err in errors.items():
            if err is not None:
                failed_count += 1
                logger.warning(f"Download of file {file_id} failed: {err}")
        logger.info(f"Downloaded {len(errors) - failed_count}/{len(errors)} file(s) to {dest}")
        return errors


def _collect(outcomes: Sequence[Outcome]) -> ResultMap:
    return {o.item_id: o.error for o in outcomes}
