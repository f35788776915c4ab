from typing import Optional

import requests

from .common import fetch_with_error_handling

ITEM_PATH = "/api_scrape_item.php"


def item_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}{ITEM_PATH}"


def fetch_paste_content(
    session: requests.Session,
    key: str,
    base_url: str,
    timeout: Optional[float] = None,
) -> bytes:
    """Fetch the raw body of one paste.

    Raises:
        RemoteHTTPError: non-200 response or transport failure
    """
    resp = fetch_with_error_handling(
        session,
        item_url(base_url),
        endpoint="item",
        params={"i": key},
        timeout=timeout,
    )
    try:
        return resp.content
    finally:
        resp.close()
