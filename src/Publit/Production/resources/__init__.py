"""Resource wrappers for the Publit production API."""

from __future__ import annotations

from . import country, deliverynumber, file, printdata, printorder, printorderstatus
from .base import Endpoint, IndexResponse, Resource

__all__ = [
    "Endpoint",
    "IndexResponse",
    "Resource",
    "country",
    "deliverynumber",
    "file",
    "printdata",
    "printorder",
    "printorderstatus",
]
