"""
Wire Value Types for Publit Resources

The API sends most numbers as JSON strings, booleans as ``"0"``/``"1"`` and
timestamps as ``"YYYY-MM-DD HH:MM:SS"``. These annotated types decode those
leniently and encode them back the way the API expects.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import BeforeValidator, PlainSerializer

PUBLIT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_TRUE = {"1", "true", "yes"}
_FALSE = {"0", "false", "no", ""}


def _to_naive_utc(value: datetime) -> datetime:
    # Publit times carry no offset; aware values are folded to UTC so all compare
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_publit_time(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return _to_naive_utc(value)
    if isinstance(value, str):
        text = value.strip()
        if not text or text.startswith("0000-00-00"):
            return None
        try:
            return datetime.strptime(text, PUBLIT_TIME_FORMAT)
        except ValueError:
            # Some relations come back in ISO 8601
            return _to_naive_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    raise ValueError(f"Unsupported time value: {value!r}")


def format_publit_time(value: Optional[datetime]) -> Optional[str]:
    return value.strftime(PUBLIT_TIME_FORMAT) if value is not None else None


def parse_publit_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    raise ValueError(f"Unsupported boolean value: {value!r}")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


PublitTime = Annotated[
    Optional[datetime],
    BeforeValidator(parse_publit_time),
    PlainSerializer(format_publit_time, return_type=Optional[str], when_used="json"),
]

PublitBool = Annotated[
    bool,
    BeforeValidator(parse_publit_bool),
    PlainSerializer(lambda v: "1" if v else "0", return_type=str, when_used="json"),
]

#: Integer carried as a JSON string on the wire
PublitInt = Annotated[
    int,
    PlainSerializer(str, return_type=str, when_used="json"),
]

#: Like PublitInt, but blank strings decode to None
OptionalPublitInt = Annotated[
    Optional[int],
    BeforeValidator(_blank_to_none),
    PlainSerializer(lambda v: None if v is None else str(v), return_type=Optional[str], when_used="json"),
]
