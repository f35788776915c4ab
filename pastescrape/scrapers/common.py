"""Shared HTTP handling for the listing and item endpoints."""

from typing import Any, Dict, Optional

import requests

from ..errors import RemoteHTTPError
from ..logger import get_logger

USER_AGENT = "pastescrape/1.0"


def new_session() -> requests.Session:
    """Session reused for every request of the process."""
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    return session


def fetch_with_error_handling(
    session: requests.Session,
    url: str,
    endpoint: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> requests.Response:
    """Fetch URL with standardized error handling and logging.

    Only HTTP 200 counts as success. Nothing is retried.

    Args:
        session: HTTP session to issue the request on
        url: The URL to fetch
        endpoint: Endpoint name for logging (e.g., 'listing', 'item')
        params: Query parameters
        headers: Extra request headers
        timeout: Seconds to wait; None blocks until the server answers

    Returns:
        Response object on success

    Raises:
        RemoteHTTPError: On a non-200 status or any transport failure
    """
    logger = get_logger()
    logger.record_api_call()
    try:
        resp = session.get(url, params=params, headers=headers, timeout=timeout)
    except requests.exceptions.Timeout:
        logger.record_error(f"{endpoint}_Timeout")
        logger.warning(f"{endpoint.capitalize()} request timed out", url=url)
        raise RemoteHTTPError(f"{endpoint.capitalize()} request timed out: {url}", url=url)
    except requests.exceptions.RequestException as e:
        logger.record_error(f"{endpoint}_RequestException")
        logger.error(f"{endpoint.capitalize()} request error", url=url, error=str(e))
        raise RemoteHTTPError(f"{endpoint.capitalize()} request error: {e}", url=url) from e

    if resp.status_code != 200:
        logger.record_error(f"{endpoint}_HTTP_{resp.status_code}")
        logger.error(f"{endpoint.capitalize()} returned non-200 response", url=url, status=resp.status_code)
        resp.close()
        raise RemoteHTTPError(
            f"{endpoint.capitalize()} request failed ({resp.status_code}): {url}",
            url=url,
            status_code=resp.status_code,
        )
    return resp
