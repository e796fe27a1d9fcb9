"""
Print order print data.

Print data describes one print item of a print order: quantities, page
counts, sizes and the file to print. Each print order has a list of print data
defining what should be printed and how many.

Book binding, manifestation (with ISBN) and print item paper (with print item)
are only reachable as relations of print data, so their models live here too.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Mapping, Optional, Sequence

from .base import Endpoint, IndexResponse, ProductionAPIGetter, PublitModel, Resource
from .file import File
from ..types import OptionalPublitInt, PublitBool, PublitInt, PublitTime

# Relations loadable with ``query.with_relations``
WITH_MANIFESTATION = "manifestation"
WITH_MANIFESTATION_ISBN = "manifestation.isbn"
WITH_FILE = "file"
WITH_PRINT_ITEM_PAPER = "print_item_paper"
WITH_PRINT_ITEM = "print_item_paper.print_item"
WITH_BOOK_BINDING = "book_binding"

# PrintData attributes
ID = "id"
PRINT_ORDER_ID = "print_order_id"
MANIFESTATION_ID = "manifestation_id"
FILE_ID = "file_id"
PRINT_ITEM_PAPER_ID = "print_item_paper_id"
BOOK_BINDING_ID = "book_binding_id"
AMOUNT = "amount"
PAGES = "pages"
WIDTH = "width"
HEIGHT = "height"
COLOR_PAGES_AMOUNT = "color_pages_amount"
COLOR_PAGES = "color_pages"
REFERENCE_NUMBER = "reference_number"
COLOR_PRINT = "color_print"
LENGTH_UNIT = "length_unit"
FORMAT = "format"
PUBLISHER = "publisher"
TITLE = "title"
SUBTITLE = "subtitle"
EDGE_WIDTH = "edgewidth"
CREATED_AT = "created_at"
UPDATED_AT = "updated_at"

ENDPOINTS: dict[Endpoint, str] = {
    Endpoint.INDEX: "print_order_print_data",
    Endpoint.SHOW: "print_order_print_data/{id}",
}


# ============================================================================
# Relation models
# ============================================================================


class BookBinding(PublitModel):
    id: PublitInt = 0
    type: str = ""
    created_at: PublitTime = None
    updated_at: PublitTime = None


class ISBN(PublitModel):
    id: PublitInt = 0
    formatted_isbn: str = ""
    account_id: OptionalPublitInt = None
    contractor_id: OptionalPublitInt = None
    created_at: PublitTime = None
    updated_at: PublitTime = None


class Manifestation(PublitModel):
    id: PublitInt = 0
    work_id: OptionalPublitInt = None
    product_id: OptionalPublitInt = None
    isbn_id: OptionalPublitInt = None
    type: str = ""
    status: str = ""
    format: str = ""
    published_at: PublitTime = None
    created_at: PublitTime = None
    updated_at: PublitTime = None
    deleted_at: PublitTime = None
    isbn: Optional[ISBN] = None


class PrintItem(PublitModel):
    id: PublitInt = 0
    type: str = ""


class PrintItemPaper(PublitModel):
    id: PublitInt = 0
    print_item_id: OptionalPublitInt = None
    name: str = ""
    proprietary_paper_name: str = ""
    paper_code: str = ""
    bulk: str = ""
    weight: str = ""
    description: str = ""
    print_item: Optional[PrintItem] = None
    created_at: PublitTime = None
    updated_at: PublitTime = None


# ============================================================================
# Print data
# ============================================================================


class PrintData(PublitModel):
    """Print data as returned by the ``print_order_print_data`` resource."""

    id: PublitInt = 0
    print_order_id: OptionalPublitInt = None
    manifestation_id: OptionalPublitInt = None
    file_id: OptionalPublitInt = None
    print_item_paper_id: OptionalPublitInt = None
    book_binding_id: OptionalPublitInt = None
    amount: PublitInt = 0
    pages: PublitInt = 0
    width: float = 0.0
    height: float = 0.0
    color_pages_amount: PublitInt = 0
    color_pages: str = ""
    reference_number: str = ""
    color_print: PublitBool = False
    length_unit: str = ""
    format: str = ""
    publisher: str = ""
    title: str = ""
    subtitle: str = ""
    edgewidth: float = 0.0
    file: Optional[File] = None
    manifestation: Optional[Manifestation] = None
    print_item_paper: Optional[PrintItemPaper] = None
    book_binding: Optional[BookBinding] = None
    created_at: PublitTime = None
    updated_at: PublitTime = None


PrintDataList = list[PrintData]
PrintDataIndex = IndexResponse[PrintData]


def show(
    client: ProductionAPIGetter, id: int, params: Optional[Mapping[str, Any]] = None
) -> PrintData:
    body = client.get(Resource(ENDPOINTS[Endpoint.SHOW], id), params)
    return PrintData.model_validate(body)


def index(
    client: ProductionAPIGetter, params: Optional[Mapping[str, Any]] = None
) -> PrintDataIndex:
    body = client.get(Resource(ENDPOINTS[Endpoint.INDEX]), params)
    return PrintDataIndex.model_validate(body)


def group_by_manifestation(data: Sequence[PrintData]) -> dict[Optional[int], list[PrintData]]:
    """Group print data by manifestation id, keeping input order within each group."""
    grouped: dict[Optional[int], list[PrintData]] = defaultdict(list)
    for pd in data:
        grouped[pd.manifestation_id].append(pd)
    return dict(grouped)


def files(data: Sequence[PrintData]) -> list[File]:
    """Return the loaded file relations of ``data`` (load with ``WITH_FILE``)."""
    return [pd.file for pd in data if pd.file is not None]
