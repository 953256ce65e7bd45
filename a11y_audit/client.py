"""Crawling service client.

Usage:
    client  = CrawlClient(url="https://api.spider.cloud", token="sk-xxx")
    records = client.crawl("https://example.com", limit=25)

Each record is a dict carrying ``url`` and ``content`` (raw HTML). Records
are handed to ``a11y_audit.rules.audit_records`` unchanged.
"""

import warnings
from typing import Any

import requests

DEFAULT_LIMIT = 25


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class CrawlClientError(Exception):
    """Base exception for all client errors."""


class AuthenticationError(CrawlClientError):
    """Raised on HTTP 401/403 - invalid or expired token."""


class NotFoundError(CrawlClientError):
    """Raised on HTTP 404 - wrong crawler URL or endpoint."""


class NetworkError(CrawlClientError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class CrawlClient:
    """Thin wrapper around the crawling service's REST API."""

    def __init__(self, url: str, token: str, timeout: int = 60) -> None:
        self.base_url = url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {token}",
            "Content-Type":  "application/json",
        })

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def crawl(self, target: str, limit: int = DEFAULT_LIMIT) -> list[dict]:
        """Crawl *target* and return up to *limit* page records.

        The service may answer with a bare JSON array or with an object
        holding the array under ``"data"``.

        Emits a warning when the page count reaches *limit*, since the
        site probably has more pages than were crawled.

        Raises:
            AuthenticationError: HTTP 401 / 403
            NotFoundError:       HTTP 404
            CrawlClientError:    Any other non-2xx response or a bad body
            NetworkError:        Timeout or connection failure
        """
        payload = {"url": target, "limit": limit, "return_format": "raw"}
        data = self._request("/crawl", payload)

        records = data.get("data", []) if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise CrawlClientError(
                f"Unexpected crawl response from {self.base_url}: expected a list of pages"
            )

        if limit and len(records) >= limit:
            warnings.warn(
                f"Crawl returned {len(records)} pages, the configured limit. "
                "Some pages of the site may not be audited; raise --limit to crawl more.",
                UserWarning,
                stacklevel=2,
            )

        return records

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _request(self, endpoint: str, payload: dict[str, Any]) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._session.post(url, json=payload, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach crawling service at '{self.base_url}'"
            ) from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(
                "Authentication failed: check that your crawler token is valid and not expired."
            )
        if response.status_code == 404:
            raise NotFoundError(f"Resource not found: {url}")
        if not response.ok:
            raise CrawlClientError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise CrawlClientError(f"Response from {url} is not valid JSON") from exc
