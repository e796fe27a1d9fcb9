"""Print order delivery numbers: show, index, store, update and delete."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .base import (
    Endpoint,
    IndexResponse,
    ProductionAPIDeleter,
    ProductionAPIGetter,
    ProductionAPIPoster,
    ProductionAPIPutter,
    PublitModel,
    Resource,
    first_record,
)
from ..errors import ModelStateError
from ..types import OptionalPublitInt, PublitInt, PublitTime

# DeliveryNumber attributes
ID = "id"
PRINT_ORDER_ID = "print_order_id"
DELIVERY_NUMBER = "delivery_number"
MESSAGE = "message"
CREATED_AT = "created_at"
UPDATED_AT = "updated_at"

ENDPOINTS: dict[Endpoint, str] = {
    Endpoint.INDEX: "print_order_delivery_numbers",
    Endpoint.SHOW: "print_order_delivery_numbers/{id}",
    Endpoint.POST: "print_order_delivery_numbers",
    Endpoint.PUT: "print_order_delivery_numbers/{id}",
    Endpoint.DELETE: "print_order_delivery_numbers/{id}",
}


class DeliveryNumber(PublitModel):
    id: OptionalPublitInt = None
    print_order_id: PublitInt = 0
    delivery_number: str = ""
    message: Optional[str] = None
    created_at: PublitTime = None
    updated_at: PublitTime = None


DeliveryNumberList = list[DeliveryNumber]
DeliveryNumberIndex = IndexResponse[DeliveryNumber]


def new(print_order_id: int, delivery_number: str, message: str = "") -> DeliveryNumber:
    """Create an unsaved delivery number for a print order."""
    return DeliveryNumber(
        print_order_id=print_order_id,
        delivery_number=delivery_number,
        message=message or None,
    )


def show(
    client: ProductionAPIGetter, id: int, params: Optional[Mapping[str, Any]] = None
) -> DeliveryNumber:
    body = client.get(Resource(ENDPOINTS[Endpoint.SHOW], id), params)
    return DeliveryNumber.model_validate(body)


def index(
    client: ProductionAPIGetter, params: Optional[Mapping[str, Any]] = None
) -> DeliveryNumberIndex:
    body = client.get(Resource(ENDPOINTS[Endpoint.INDEX]), params)
    return DeliveryNumberIndex.model_validate(body)


def store(client: ProductionAPIPoster, number: DeliveryNumber) -> DeliveryNumber:
    """Store a new delivery number and return it as saved by the API."""
    if number.id:
        raise ModelStateError(
            "Can not create new delivery number for an existing one. (ID is set)."
        )
    body = client.post(Resource(ENDPOINTS[Endpoint.POST]), number.to_payload())
    return DeliveryNumber.model_validate(first_record(body))


def update(client: ProductionAPIPutter, number: DeliveryNumber) -> DeliveryNumber:
    if not number.id:
        raise ModelStateError("Can not update a non existing number. (ID is missing).")
    body = client.put(Resource(ENDPOINTS[Endpoint.PUT], number.id), number.to_payload())
    return DeliveryNumber.model_validate(first_record(body))


def delete(client: ProductionAPIDeleter, number: DeliveryNumber) -> DeliveryNumber:
    """Delete ``number``; returns the record echoed back by the API."""
    if not number.id:
        raise ModelStateError("Can not DELETE a non existing number. (ID is missing).")
    body = client.delete(Resource(ENDPOINTS[Endpoint.DELETE], number.id))
    return DeliveryNumber.model_validate(first_record(body))
