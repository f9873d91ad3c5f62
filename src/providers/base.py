"""HTTP JSON client with an on-disk response cache and request throttling."""

import hashlib
import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Optional

import requests

from ..config import CACHE_DIR, PROVIDER_TIMEOUT_SECONDS
from ..errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

CACHE_ENTRY_KEYS = ("url", "fetched_at", "payload")


class ProviderError(UpstreamUnavailable):
    """Base exception for match-data provider errors."""

    pass


class FetchError(ProviderError):
    """Raised when the provider cannot be reached or answers with an error."""

    pass


class RateLimitError(FetchError):
    """Raised when the provider answers 429 Too Many Requests."""

    pass


class ParseError(ProviderError):
    """Raised when a provider payload cannot be decoded."""

    pass


class BaseClient:
    """
    JSON API client with a file cache and a minimum interval between requests.

    Subclasses build URLs and turn decoded payloads into model objects.
    Query parameters named in ``secret_params`` are sent but left out of the
    cache key, so tokens never end up hashed into file names.
    """

    secret_params: tuple[str, ...] = ()

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        cache_ttl_hours: float = 1,
        min_interval: float = 0.0,
        timeout: float = PROVIDER_TIMEOUT_SECONDS,
    ) -> None:
        """
        Args:
            cache_dir: Where decoded responses are kept. Defaults to CACHE_DIR.
            cache_ttl_hours: How long a cached response stays fresh.
            min_interval: Seconds to wait between two live requests.
            timeout: Seconds before an HTTP request is abandoned.
        """
        self.cache_dir = Path(cache_dir or CACHE_DIR)
        self.cache_ttl_seconds = cache_ttl_hours * 3600
        self.min_interval = min_interval
        self.timeout = timeout
        self._next_request_at = 0.0
        # Calls arrive from several worker threads at once
        self._throttle_lock = threading.Lock()

        self.cache_dir.mkdir(parents=True, exist_ok=True)

        self._session = requests.Session()
        self._session.headers["User-Agent"] = "fantasy-draft/1.0"
        self._session.headers["Accept"] = "application/json"

    def _cache_key(self, url: str, params: Optional[dict[str, Any]] = None) -> str:
        """Hash the URL and its non-secret parameters."""
        public = {
            name: str(value)
            for name, value in (params or {}).items()
            if name not in self.secret_params
        }
        raw = f"{url}?{json.dumps(public, sort_keys=True)}"
        return hashlib.md5(raw.encode()).hexdigest()

    def _cache_path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def _read_cache(self, key: str) -> Optional[Any]:
        """Return a fresh cached payload, or None. Unreadable entries are removed."""
        path = self._cache_path(key)
        try:
            entry = json.loads(path.read_text())
            age = time.time() - float(entry["fetched_at"])
            payload = entry["payload"]
        except FileNotFoundError:
            return None
        except (KeyError, TypeError, ValueError):
            logger.debug("Dropping unreadable cache entry %s", path.name)
            path.unlink(missing_ok=True)
            return None
        return payload if age < self.cache_ttl_seconds else None

    def _write_cache(self, key: str, url: str, payload: Any) -> None:
        entry = {"url": url, "fetched_at": time.time(), "payload": payload}
        self._cache_path(key).write_text(json.dumps(entry))

    def _throttle(self) -> None:
        """Sleep until min_interval has passed since the previous live request."""
        with self._throttle_lock:
            wait = self._next_request_at - time.monotonic()
            if wait > 0:
                time.sleep(wait)
            self._next_request_at = time.monotonic() + self.min_interval

    def fetch_json(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        use_cache: bool = True,
    ) -> Any:
        """
        GET a URL and decode its JSON body.

        Args:
            url: Endpoint URL.
            params: Query string parameters, secrets included.
            use_cache: Serve a fresh cached payload when there is one, and
                cache the new payload otherwise.

        Returns:
            The decoded payload.

        Raises:
            FetchError: Network failure, timeout or HTTP error status.
            RateLimitError: The provider answered 429.
            ParseError: The body is not JSON.
        """
        key = self._cache_key(url, params)
        cached = self._read_cache(key) if use_cache else None
        if cached is not None:
            return cached

        self._throttle()
        logger.debug("GET %s", url)
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise FetchError(f"Timed out after {self.timeout}s: {url}") from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Request to {url} failed: {e}") from e

        if response.status_code == 429:
            raise RateLimitError(f"Rate limited by provider: {url}")
        if response.status_code >= 400:
            raise FetchError(f"HTTP error {response.status_code}: {url}")

        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError(f"Invalid JSON from {url}: {e}") from e

        if use_cache:
            self._write_cache(key, url, payload)
        return payload

    def clear_cache(self) -> int:
        """
        Remove every cache entry written by this client.

        Other JSON files in the cache directory are left alone.

        Returns:
            Number of entries removed.
        """
        removed = 0
        for path in self.cache_dir.glob("*.json"):
            try:
                entry = json.loads(path.read_text())
            except (OSError, ValueError):
                continue
            if isinstance(entry, dict) and set(CACHE_ENTRY_KEYS) <= entry.keys():
                path.unlink()
                removed += 1
        logger.debug("Cleared %d cache entries from %s", removed, self.cache_dir)
        return removed
