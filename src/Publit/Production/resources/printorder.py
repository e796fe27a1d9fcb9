"""Print orders: show and index, with optional relations."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import Field

from .base import Endpoint, IndexResponse, ProductionAPIGetter, PublitModel, Resource
from .country import Country
from .file import File
from .printdata import PrintData
from .printorderstatus import Status, latest
from ..types import OptionalPublitInt, PublitBool, PublitInt, PublitTime

# Relations loadable with ``query.with_relations``
WITH_STATUSES = "print_order_statuses"
WITH_PRINT_DATA = "print_order_print_data"
WITH_PRINT_DATA_FILE = "print_order_print_data.file"
WITH_PRINT_DATA_MANIFESTATION = "print_order_print_data.manifestation"
WITH_PRINT_DATA_MANIFESTATION_ISBN = "print_order_print_data.manifestation.isbn"
WITH_PRINT_DATA_PRINT_ITEM_PAPER = "print_order_print_data.print_item_paper"
WITH_PRINT_DATA_PRINT_ITEM = "print_order_print_data.print_item_paper.print_item"
WITH_PRINT_DATA_BOOK_BINDING = "print_order_print_data.book_binding"
WITH_DELIVERY_COUNTRY = "delivery_country"

# PrintOrder attributes
ID = "id"
INTERMEDIATOR_REF = "intermediator_order_reference"
CLIENT_REF = "client_order_reference"
DELIVERY_MSG = "delivery_message"
ORDER_WEIGHT = "order_weight"
BULKY = "is_bulky"
RECIPIENT_FIRSTNAME = "firstname"
RECIPIENT_LASTNAME = "lastname"
RECIPIENT_COMPANY_NAME = "delivery_company_name"
DELIVERY_STREET = "delivery_street"
DELIVERY_ZIP = "delivery_zip"
DELIVERY_CITY = "delivery_city"
DELIVERY_PHONE = "delivery_phone_number"
DELIVERY_COUNTRY_ID = "delivery_country_id"
DELIVERY_PRE_PAID = "delivery_address_pre_paid"
STATUS = "status"
ACTIVE = "active"
EXPECTED_SHIP_DATE = "expected_shipment_date"
CREATED_AT = "created_at"
UPDATED_AT = "updated_at"

ENDPOINTS: dict[Endpoint, str] = {
    Endpoint.INDEX: "print_orders",
    Endpoint.SHOW: "print_orders/{id}",
}


class PrintOrder(PublitModel):
    """Print order as returned by the ``print_orders`` resource."""

    id: PublitInt = 0
    intermediator_ref: str = Field(default="", alias="intermediator_order_reference")
    client_ref: str = Field(default="", alias="client_order_reference")
    delivery_message: str = ""
    order_weight: str = ""
    bulky: PublitBool = Field(default=False, alias="is_bulky")
    firstname: str = ""
    lastname: str = ""
    delivery_company_name: str = ""
    delivery_street: str = ""
    delivery_zip: str = ""
    delivery_city: str = ""
    delivery_phone_number: str = ""
    delivery_country_id: OptionalPublitInt = None
    delivery_address_pre_paid: str = ""
    status: str = ""
    active: PublitBool = False
    expected_shipment_date: PublitTime = None
    created_at: PublitTime = None
    updated_at: PublitTime = None
    statuses: list[Status] = Field(default_factory=list, alias="print_order_statuses")
    print_data: list[PrintData] = Field(default_factory=list, alias="print_order_print_data")
    delivery_country: Optional[Country] = None

    def latest_status(self) -> Optional[Status]:
        """Most recently updated loaded status (load with ``WITH_STATUSES``)."""
        return latest(self.statuses)

    def files(self) -> list[File]:
        """Files of the loaded print data (load with ``WITH_PRINT_DATA_FILE``)."""
        return [pd.file for pd in self.print_data if pd.file is not None]


PrintOrderIndex = IndexResponse[PrintOrder]


def show(
    client: ProductionAPIGetter, id: int, params: Optional[Mapping[str, Any]] = None
) -> PrintOrder:
    body = client.get(Resource(ENDPOINTS[Endpoint.SHOW], id), params)
    return PrintOrder.model_validate(body)


def index(
    client: ProductionAPIGetter, params: Optional[Mapping[str, Any]] = None
) -> PrintOrderIndex:
    body = client.get(Resource(ENDPOINTS[Endpoint.INDEX]), params)
    return PrintOrderIndex.model_validate(body)
