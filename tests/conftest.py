"""
Pytest configuration and shared fixtures.
"""

import pytest
import requests
from typing import Any, Callable, Dict, List

from paysage2ror.http import JsonFetcher
from paysage2ror.logger import get_logger, reset_logger


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload: Any = None, status_code: int = 200, invalid_json: bool = False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def json(self):
        if self.invalid_json:
            raise ValueError("No JSON object could be decoded")
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Records every GET and answers through a handler(url, params, headers)."""

    def __init__(self, handler: Callable):
        self.handler = handler
        self.calls: List[Dict[str, Any]] = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        outcome = self.handler(url, params or {}, headers or {})
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path_factory):
    """Route the global logger to a temp dir and keep the console clean."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path_factory.mktemp("logs"), enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def make_fetcher():
    """Build a JsonFetcher on a FakeSession, with instant retries."""
    def _make(handler: Callable, max_retries: int = 2, source: str = "Test"):
        session = FakeSession(handler)
        fetcher = JsonFetcher(
            source,
            session=session,
            timeout=5,
            max_retries=max_retries,
            base_delay=0.01,
            max_delay=0.05,
            sleep=lambda _: None,
        )
        return fetcher, session
    return _make


def structure(id: str, display: str = None, official: str = None, usual: str = None, ror: str = None) -> Dict[str, Any]:
    """Paysage structure payload as returned by the API."""
    item = {"id": id, "displayName": display, "identifiers": []}
    if official is not None or usual is not None:
        item["currentName"] = {"officialName": official, "usualName": usual}
    if ror:
        item["identifiers"].append({"type": "ror", "value": ror})
    return item


def ror_items(ror_id: str = None, name: str = None, chosen: bool = True) -> Dict[str, Any]:
    """RoR affiliation response with a single item (or none)."""
    if ror_id is None:
        return {"number_of_results": 0, "items": []}
    return {
        "number_of_results": 1,
        "items": [{
            "substring": name,
            "score": 0.9,
            "matching_type": "PHRASE",
            "chosen": chosen,
            "organization": {"id": ror_id, "name": name},
        }],
    }
