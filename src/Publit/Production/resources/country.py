"""Country resource: show and index countries known to the production API."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .base import Endpoint, IndexResponse, ProductionAPIGetter, PublitModel, Resource
from ..types import PublitInt

# Country attributes
ID = "id"
NAME = "name"
NATIVE_NAME = "native_name"
ISO2 = "iso2"
ISO3 = "iso3"
ISONUM = "isonum"

ENDPOINTS: dict[Endpoint, str] = {
    Endpoint.INDEX: "countries",
    Endpoint.SHOW: "countries/{id}",
}


class Country(PublitModel):
    id: PublitInt = 0
    name: str = ""
    native_name: str = ""
    iso2: str = ""
    iso3: str = ""
    isonum: str = ""


CountryIndex = IndexResponse[Country]


def show(
    client: ProductionAPIGetter, id: int, params: Optional[Mapping[str, Any]] = None
) -> Country:
    body = client.get(Resource(ENDPOINTS[Endpoint.SHOW], id), params)
    return Country.model_validate(body)


def index(client: ProductionAPIGetter, params: Optional[Mapping[str, Any]] = None) -> CountryIndex:
    body = client.get(Resource(ENDPOINTS[Endpoint.INDEX]), params)
    return CountryIndex.model_validate(body)
