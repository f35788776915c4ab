from typing import List, Optional

import requests

from ..errors import DecodeError
from ..logger import get_logger
from ..schema import ListingEntry, parse_listing
from .common import fetch_with_error_handling

LISTING_PATH = "/api_scraping.php"


def listing_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}{LISTING_PATH}"


def fetch_listing(
    session: requests.Session,
    limit: int,
    base_url: str,
    timeout: Optional[float] = None,
) -> List[ListingEntry]:
    """Fetch up to `limit` most recent pastes from the listing endpoint.

    Entries keep the service's order (most recent first).

    Raises:
        RemoteHTTPError: non-200 response or transport failure
        DecodeError: body is not a JSON array of valid listing objects
    """
    logger = get_logger()
    url = listing_url(base_url)
    resp = fetch_with_error_handling(
        session,
        url,
        endpoint="listing",
        params={"limit": limit},
        headers={"Accept": "application/json"},
        timeout=timeout,
    )
    try:
        payload = resp.json()
    except ValueError as e:
        logger.record_error("listing_DecodeError")
        raise DecodeError(f"Listing body is not valid JSON: {e}") from e
    finally:
        resp.close()

    try:
        entries = parse_listing(payload)
    except DecodeError:
        logger.record_error("listing_DecodeError")
        raise
    logger.debug("Listing decoded", url=url, entries=len(entries))
    return entries
