"""
Content transfer for presigned file URLs.

Streams a presigned URL into a file inside a destination directory:
- Plain GET; the credential travels in the URL, no auth header is sent
- Only HTTP 200 is accepted; nothing is written for any other status
- Body streamed to a temporary sibling, then promoted with ``os.replace``
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import httpx

from ..client import redact_url
from ..errors import TransferError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1 << 16


def target_path(out_dir: Path, name: str) -> Path:
    """
    Return ``out_dir / name`` for a plain file name.

    Raises:
        TransferError: If ``name`` is empty or would leave ``out_dir``
    """
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise TransferError(f"Unusable file name: {name!r}")
    return out_dir / name


def fetch_to_file(
    client: httpx.Client,
    url: str,
    dest: Path,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """
    Download ``url`` to ``dest``, replacing any existing file.

    Args:
        client: HTTP client used for the plain GET (no auth attached)
        url: Presigned download URL
        dest: Final file path; its directory must exist
        chunk_size: Stream chunk size in bytes

    Returns:
        Number of bytes written

    Raises:
        TransferError: If the server answers with anything but 200
        httpx.HTTPError: On transport failure
        OSError: If the file cannot be written
    """
    with client.stream("GET", url, auth=None) as resp:
        if resp.status_code != httpx.codes.OK:
            raise TransferError(
                f'Could not download file. Server responded with code: "{resp.status_code}"',
                status_code=resp.status_code,
            )

        tmp_path: Path | None = None
        written = 0
        try:
            with tempfile.NamedTemporaryFile(
                dir=dest.parent, prefix=".tmp-", delete=False
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                for chunk in resp.iter_bytes(chunk_size=chunk_size):
                    tmp_file.write(chunk)
                    written += len(chunk)
            os.replace(tmp_path, dest)
        except BaseException:
            if tmp_path is not None:
                try:
                    tmp_path.unlink(missing_ok=True)
                except OSError as e:
                    logger.warning(f"Failed to cleanup temp file {tmp_path}: {e}")
            raise

    logger.debug(f"Downloaded {redact_url(url)} → {dest} ({written} bytes)")
    return written
