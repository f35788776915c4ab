import hashlib
from datetime import datetime, timezone
from typing import Any, Optional

MAX_BIGINT = 2 ** 63 - 1


def normalize_text(s: Any) -> str:
    if s is None:
        return ""
    return " ".join(str(s).strip().split())


def parse_int(value: Any) -> int:
    """Parse an integer that may arrive as a JSON number or a numeric string."""
    if isinstance(value, bool):
        raise ValueError(f"not an integer: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip():
        return int(value.strip())
    raise ValueError(f"not an integer: {value!r}")


def parse_size(value: Any) -> int:
    """Parse a byte size that fits a signed 64-bit column."""
    size = parse_int(value)
    if not 0 <= size <= MAX_BIGINT:
        raise ValueError(f"size out of range: {size}")
    return size


def epoch_to_datetime(value: Any) -> Optional[datetime]:
    """Epoch seconds -> naive UTC datetime. 0, empty or missing -> None.

    Raises ValueError for anything that is not a representable epoch.
    """
    if value is None or value == "":
        return None
    seconds = parse_int(value)
    if seconds <= 0:
        return None
    try:
        return datetime.fromtimestamp(seconds, timezone.utc).replace(tzinfo=None)
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"epoch out of range: {seconds}") from e


def compute_digest(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()
