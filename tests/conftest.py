"""
Pytest configuration and shared fixtures.
"""

import time
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

from pastescrape.config import ScrapeConfig
from pastescrape.logger import configure_logger, reset_logger
from pastescrape.scrapers.content import ITEM_PATH
from pastescrape.scrapers.listing import LISTING_PATH
from pastescrape.storage import PasteStore

BASE_URL = "https://scrape.example.com"


def make_response(status_code: int = 200, content: bytes = b"", json_data: Any = None, json_error: Exception = None):
    """Stand-in for requests.Response with just what the fetchers read."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = content
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = json_data
    return resp


class FakeRemote:
    """
    Routes session.get calls to canned listing and item responses.

    items maps key -> (status_code, body). Unknown keys answer 404.
    """

    def __init__(self, listing=None, items=None):
        self.listing = listing if listing is not None else make_response(json_data=[])
        self.items: Dict[str, tuple] = dict(items or {})
        self.calls: List[dict] = []
        self.session = MagicMock()
        self.session.get.side_effect = self._get

    def _get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params or {}), "headers": headers, "timeout": timeout})
        if url.endswith(LISTING_PATH):
            return self.listing
        if url.endswith(ITEM_PATH):
            status, body = self.items.get(params["i"], (404, b"Not Found"))
            return make_response(status_code=status, content=body)
        return make_response(status_code=404)

    @property
    def item_requests(self) -> List[str]:
        return [c["params"]["i"] for c in self.calls if c["url"].endswith(ITEM_PATH)]


@pytest.fixture(autouse=True)
def isolated_logger(tmp_path):
    """Send log files to tmp_path and keep the console quiet."""
    reset_logger()
    logger = configure_logger(level="DEBUG", log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def store(tmp_path):
    """Temporary SQLite store with schema provisioned."""
    paste_store = PasteStore.from_dsn(f"sqlite:///{tmp_path / 'pastes.db'}")
    paste_store.ensure_schema()
    yield paste_store
    paste_store.engine.dispose()


@pytest.fixture
def config(tmp_path) -> ScrapeConfig:
    """Config pointing at the fake service with no pacing delay."""
    return ScrapeConfig(
        dsn=f"sqlite:///{tmp_path / 'pastes.db'}",
        paste_limit=50,
        log_dir=tmp_path / "logs",
        request_delay=0,
        base_url=BASE_URL,
    )


def listing_element(key: str, expire: Any = "0", **overrides) -> Dict[str, Any]:
    """One listing element shaped like the remote service returns it."""
    element = {
        "scrape_url": f"{BASE_URL}/api_scrape_item.php?i={key}",
        "full_url": f"https://pastebin.com/{key}",
        "date": str(int(time.time()) - 60),
        "key": key,
        "size": "42",
        "expire": expire,
        "title": f"paste {key}",
        "syntax": "text",
        "user": "someone",
    }
    element.update(overrides)
    return element


@pytest.fixture
def listing_payload() -> List[Dict[str, Any]]:
    """Two pastes: one without expiry, one expiring in an hour."""
    return [
        listing_element("abc1"),
        listing_element("abc2", expire=str(int(time.time()) + 3600)),
    ]
