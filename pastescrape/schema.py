from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from .errors import DecodeError
from .normalize import normalize_text, parse_size, epoch_to_datetime

REQUIRED_STR_FIELDS = ["key"]
OPTIONAL_STR_FIELDS = [
    "scrape_url",
    "full_url",
    "title",
    "syntax",
    "user",
]
# Field -> parser that raises ValueError on a bad value
NUMERIC_FIELDS = {
    "date": epoch_to_datetime,
    "size": parse_size,
    "expire": epoch_to_datetime,
}


@dataclass(frozen=True)
class ListingEntry:
    """One decoded element of a listing response."""

    key: str
    scrape_url: str = ""
    full_url: str = ""
    publish_time: Optional[datetime] = None
    size: Optional[int] = None
    expire_time: Optional[datetime] = None
    title: str = ""
    syntax: str = ""
    author: str = ""


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_listing_entry(data: Any) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    if not isinstance(data, dict):
        return [f"Listing element must be an object, got {type(data).__name__}"]

    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    for f in OPTIONAL_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    # Numeric fields may be absent or empty; if present they must parse and be in range
    for f, parse in NUMERIC_FIELDS.items():
        v = data.get(f)
        if v is None or v == "":
            continue
        try:
            parse(v)
        except ValueError as e:
            errors.append(f"Field '{f}' must be an in-range integer or numeric string ({e})")

    return errors


def to_listing_entry(data: Dict[str, Any]) -> ListingEntry:
    """Convert a validated listing element into a ListingEntry."""
    size = data.get("size")
    return ListingEntry(
        key=data["key"].strip(),
        scrape_url=normalize_text(data.get("scrape_url")),
        full_url=normalize_text(data.get("full_url")),
        publish_time=epoch_to_datetime(data.get("date")),
        size=parse_size(size) if size not in (None, "") else None,
        expire_time=epoch_to_datetime(data.get("expire")),
        title=normalize_text(data.get("title")),
        syntax=normalize_text(data.get("syntax")),
        author=normalize_text(data.get("user")),
    )


def parse_listing(payload: Any) -> List[ListingEntry]:
    """
    Decode a listing payload (already JSON-decoded) into entries.

    The listing is all-or-nothing: any invalid element fails the whole payload.

    Raises:
        DecodeError: payload is not an array of valid listing objects
    """
    if not isinstance(payload, list):
        raise DecodeError(f"Listing must be a JSON array, got {type(payload).__name__}")

    entries = []
    for index, item in enumerate(payload):
        errors = validate_listing_entry(item)
        if errors:
            raise DecodeError(f"Invalid listing element at index {index}: {'; '.join(errors)}")
        entries.append(to_listing_entry(item))
    return entries
