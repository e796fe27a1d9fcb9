"""
File resource.

Shows and indexes files from the production API and resolves presigned
download URLs for single files. Batch resolution and downloading of file lists
live in :mod:`Publit.Production.batch`.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import Field

from .base import Endpoint, IndexResponse, ProductionAPIGetter, PublitModel, Resource
from ..errors import ResolutionError
from ..query import PRESIGNED_URL, aux, merge
from ..types import PublitBool, PublitInt, PublitTime

# File attributes
ID = "id"
TYPE = "type"
ORIGINAL_NAME = "original_name"
SIZE = "size"
EXTENSION = "extension"
MIME = "mime"
CHECKSUM = "checksum"
URL = "url"
AUTO_GENERATED = "auto_generated"
CREATED_AT = "created_at"
UPDATED_AT = "updated_at"
DELETED_AT = "deleted_at"
PRESIGNED = "presigned"

#: Auxiliary value asking the API to include a time-limited download URL
AUX_PRESIGNED = PRESIGNED_URL

ENDPOINTS: dict[Endpoint, str] = {
    Endpoint.INDEX: "files",
    Endpoint.SHOW: "files/{id}",
}


class File(PublitModel):
    """A file as returned by the production API ``files`` resource."""

    id: PublitInt = 0
    type: str = ""
    original_name: str = ""
    size: PublitInt = 0
    extension: str = ""
    mime: str = Field(default="", alias="mime_type")
    checksum: str = ""
    url: str = ""
    auto_generated: PublitBool = False
    created_at: PublitTime = None
    updated_at: PublitTime = None
    deleted_at: PublitTime = None
    presigned_url: str = ""

    @property
    def has_presigned(self) -> bool:
        return bool(self.presigned_url)


FileList = list[File]
FileIndex = IndexResponse[File]


def presigned_params() -> dict[str, Any]:
    return aux(AUX_PRESIGNED)


def show(client: ProductionAPIGetter, id: int, params: Optional[Mapping[str, Any]] = None) -> File:
    body = client.get(Resource(ENDPOINTS[Endpoint.SHOW], id), params)
    return File.model_validate(body)


def index(client: ProductionAPIGetter, params: Optional[Mapping[str, Any]] = None) -> FileIndex:
    body = client.get(Resource(ENDPOINTS[Endpoint.INDEX]), params)
    return FileIndex.model_validate(body)


def get_presigned_url(
    client: ProductionAPIGetter, file: File, params: Optional[Mapping[str, Any]] = None
) -> File:
    """
    Fetch a presigned download URL for ``file``.

    The presigned URL is a download URL valid for a limited time. Returns a
    refreshed copy of ``file``: attributes present in the response replace the
    old ones, the rest are kept. ``file`` itself is not modified.

    Raises:
        ResponseError: If the API answers with anything but 200
        ResolutionError: If the response carries no presigned URL
        httpx.HTTPError: On transport failure
    """
    fetched = show(client, file.id, merge(params, presigned_params()))
    refreshed = file.model_copy(update=fetched.model_dump(exclude_unset=True))
    if not refreshed.presigned_url:
        raise ResolutionError(f"No presigned URL returned for file {file.id}")
    return refreshed
