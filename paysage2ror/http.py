"""Shared HTTP plumbing for the Paysage and RoR clients."""

from typing import Any, Dict, Optional

import requests

from .logger import get_logger
from .retry import RetryError, exponential_backoff, should_retry_http_status


class FetchError(Exception):
    """A request failed for good: non-retryable status or retries exhausted."""
    pass


class TransientStatusError(Exception):
    """Raised for HTTP statuses worth retrying (429, 5xx...)."""

    def __init__(self, status_code: int, url: str):
        super().__init__(f"HTTP {status_code} from {url}")
        self.status_code = status_code
        self.url = url


TRANSIENT_EXCEPTIONS = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    TransientStatusError,
)


class JsonFetcher:
    """
    GET JSON documents with a timeout, retries and uniform error reporting.

    One instance wraps one ``requests.Session`` so the connection pool is
    shared by every call made through it.
    """

    def __init__(
        self,
        source: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        max_retries: int = 5,
        base_delay: float = 180.0,
        max_delay: float = 900.0,
        sleep=None,
    ):
        if timeout <= 0:
            raise ValueError("timeout must be greater than 0")
        self.source = source
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = get_logger()

        backoff_kwargs = {}
        if sleep is not None:
            backoff_kwargs["sleep"] = sleep
        self._get_with_retry = exponential_backoff(
            max_retries=max_retries,
            base_delay=base_delay,
            max_delay=max_delay,
            exceptions=TRANSIENT_EXCEPTIONS,
            on_retry=self._on_retry,
            **backoff_kwargs,
        )(self._get)

    def _on_retry(self, attempt: int, error: Exception, delay: float):
        self.logger.record_failure(type(error).__name__)
        self.logger.warning(
            f"{self.source} request failed, retrying",
            attempt=attempt, delay=delay, error=str(error),
        )

    def _get(self, url: str, params: Optional[Dict[str, Any]], headers: Optional[Dict[str, str]]):
        self.logger.record_api_call()
        resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        if should_retry_http_status(resp.status_code):
            raise TransientStatusError(resp.status_code, url)
        return resp

    def get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Fetch URL and decode its JSON body.

        Raises:
            FetchError: On any HTTP error, exhausted retries or undecodable body
        """
        try:
            resp = self._get_with_retry(url, params, headers)
            resp.raise_for_status()
        except RetryError as e:
            self.logger.error(f"{self.source} request gave up", url=url, error=str(e))
            raise FetchError(f"{self.source} request failed after retries: {url}") from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "HTTPError"
            self.logger.record_failure(f"HTTPError_{status}")
            self.logger.error(f"{self.source} request failed", url=url, status=status)
            raise FetchError(f"{self.source} request failed ({status}): {url}") from e
        except requests.exceptions.RequestException as e:
            self.logger.record_failure("RequestException")
            self.logger.error(f"{self.source} request error", url=url, error=str(e))
            raise FetchError(f"{self.source} request error: {e}") from e

        try:
            return resp.json()
        except ValueError as e:
            self.logger.record_failure("InvalidJSON")
            self.logger.error(f"{self.source} returned invalid JSON", url=url)
            raise FetchError(f"{self.source} returned invalid JSON: {url}") from e
