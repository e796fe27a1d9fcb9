"""
Print order statuses.

Statuses communicate the state of a print order. Whenever a print order
changes state it should be reported to Publit by storing a new status.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from .base import (
    Endpoint,
    IndexResponse,
    ProductionAPIGetter,
    ProductionAPIPoster,
    PublitModel,
    Resource,
    first_record,
)
from ..errors import ModelStateError
from ..types import OptionalPublitInt, PublitInt, PublitTime

#: Only sender type accepted through the production API
SENDER_TYPE_SUBCONTRACTOR = "Subcontractor"

# Status attributes
ID = "id"
PRINT_ORDER_ID = "print_order_id"
SENDER_TYPE = "sender_type"
STATUS = "status"
MESSAGE = "message"
CREATED_AT = "created_at"
UPDATED_AT = "updated_at"

ENDPOINTS: dict[Endpoint, str] = {
    Endpoint.INDEX: "print_order_statuses",
    Endpoint.SHOW: "print_order_statuses/{id}",
    Endpoint.POST: "print_order_statuses",
}


class State(Enum):
    """Print order states as named by the Publit APIs."""

    EXPORTED = "Exported"
    ACCEPTED = "Accepted"
    IN_PRODUCTION = "In production"
    SENT = "Sent"
    PARTIALLY_SENT = "Partially sent"
    DELIVERED = "Delivered"
    ABORTED = "Aborted"
    RETURNED = "Returned"
    RESEND = "Resend"

    @classmethod
    def parse(cls, text: str) -> "State":
        """Look a state up by value or member name, case-insensitively."""
        needle = text.strip().lower().replace("_", " ")
        for state in cls:
            if needle in (state.value.lower(), state.name.lower().replace("_", " ")):
                return state
        raise ValueError(f"Unknown print order state: {text!r}")


class Status(PublitModel):
    id: OptionalPublitInt = None
    print_order_id: PublitInt = 0
    sender_type: str = ""
    status: str = ""
    message: Optional[str] = None
    created_at: PublitTime = None
    updated_at: PublitTime = None


StatusList = list[Status]
StatusIndex = IndexResponse[Status]


def new(state: State, print_order_id: int, message: str = "") -> Status:
    """Create an unsaved status sent as a subcontractor."""
    return Status(
        status=state.value,
        print_order_id=print_order_id,
        sender_type=SENDER_TYPE_SUBCONTRACTOR,
        message=message or None,
    )


def store(client: ProductionAPIPoster, status: Status) -> Status:
    """
    Store a new status and return it as saved by the API.

    Raises:
        ModelStateError: If ``status`` already has an id
    """
    if status.id:
        raise ModelStateError("Can not create new status for an existing one. (ID is set).")
    body = client.post(Resource(ENDPOINTS[Endpoint.POST]), status.to_payload())
    return Status.model_validate(first_record(body))


def show(client: ProductionAPIGetter, id: int, params: Optional[Mapping[str, Any]] = None) -> Status:
    body = client.get(Resource(ENDPOINTS[Endpoint.SHOW], id), params)
    return Status.model_validate(body)


def index(client: ProductionAPIGetter, params: Optional[Mapping[str, Any]] = None) -> StatusIndex:
    body = client.get(Resource(ENDPOINTS[Endpoint.INDEX]), params)
    return StatusIndex.model_validate(body)


def latest(statuses: Sequence[Status]) -> Optional[Status]:
    """Return the most recently updated status, or None for an empty list."""
    if not statuses:
        return None
    return max(statuses, key=lambda s: s.updated_at or datetime.min)
