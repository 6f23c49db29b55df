from __future__ import annotations

import logging
import threading
import time
from typing import Callable

import httpx

from .models import ReputationResult, RiskLevel, ScanSubmission
from .storage import JsonStore

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://www.virustotal.com/vtapi/v2"
DEFAULT_CACHE_TTL_S = 3600.0
# Free tier allows 4 requests per minute.
DEFAULT_MIN_INTERVAL_S = 15.0


def _as_int(value) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def calculate_risk_level(positives: int | None, total: int | None) -> RiskLevel:
    if not positives:
        return "clean"
    if not total:
        return "high"

    ratio = positives / total
    if ratio >= 0.5:
        return "high"
    if ratio >= 0.2:
        return "medium"
    if ratio >= 0.05:
        return "low"
    return "suspicious"


class VirusTotalClient:
    """URL reputation lookups against the VirusTotal v2 API.

    Reports are cached per URL for ``cache_ttl_s`` and outgoing requests are
    spaced at least ``min_interval_s`` apart; a caller arriving early blocks
    until its slot. Failures never raise: they come back as a result with
    ``success=False`` and an ``error`` message.
    """

    def __init__(
        self,
        store: JsonStore | None = None,
        *,
        default_api_key: str | None = None,
        api_base: str = DEFAULT_API_BASE,
        cache_ttl_s: float = DEFAULT_CACHE_TTL_S,
        min_interval_s: float = DEFAULT_MIN_INTERVAL_S,
        timeout_s: float = 10.0,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.default_api_key = default_api_key or None
        self.api_base = api_base.rstrip("/")
        self.cache_ttl_s = cache_ttl_s
        self.min_interval_s = min_interval_s
        self.timeout_s = timeout_s
        self._transport = transport
        self._clock = clock
        self._sleep = sleep

        self._cache: dict[str, tuple[float, ReputationResult]] = {}
        self._cache_lock = threading.Lock()
        self._rate_lock = threading.Lock()
        self._last_request: float | None = None

    # api key

    def get_api_key(self) -> str | None:
        if self.store is not None:
            key = self.store.get_api_key()
            if key:
                return key
        return self.default_api_key

    def set_api_key(self, api_key: str) -> None:
        if self.store is None:
            self.default_api_key = api_key.strip() or None
        else:
            self.store.set_api_key(api_key)

    def has_api_key(self) -> bool:
        return bool(self.get_api_key())

    # cache

    def get_cached(self, url: str) -> ReputationResult | None:
        with self._cache_lock:
            entry = self._cache.get(url)
            if entry is None:
                return None
            stored_at, result = entry
            if self._clock() - stored_at < self.cache_ttl_s:
                return result
            del self._cache[url]
            return None

    def set_cache(self, url: str, result: ReputationResult) -> None:
        with self._cache_lock:
            now = self._clock()
            expired = [k for k, (stored_at, _) in self._cache.items() if now - stored_at >= self.cache_ttl_s]
            for k in expired:
                del self._cache[k]
            self._cache[url] = (now, result)

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    def wait_for_rate_limit(self) -> None:
        with self._rate_lock:
            now = self._clock()
            if self._last_request is not None:
                elapsed = now - self._last_request
                if elapsed < self.min_interval_s:
                    self._sleep(self.min_interval_s - elapsed)
            self._last_request = self._clock()

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout_s, transport=self._transport)

    # lookups

    def check_url(self, url: str) -> ReputationResult:
        cached = self.get_cached(url)
        if cached is not None:
            return cached.model_copy(update={"from_cache": True})

        api_key = self.get_api_key()
        if not api_key:
            return ReputationResult(success=False, error="API key not configured", requires_api_key=True)

        try:
            self.wait_for_rate_limit()
            with self._client() as client:
                res = client.get(
                    f"{self.api_base}/url/report",
                    params={"apikey": api_key, "resource": url},
                    headers={"accept": "application/json"},
                )

            if res.status_code == 204:
                return ReputationResult(success=True, found=False, message="URL not found in VirusTotal database")
            if res.status_code == 403:
                return ReputationResult(success=False, error="Invalid API key")
            if res.status_code == 429:
                return ReputationResult(
                    success=False,
                    error="Rate limit exceeded. Please wait before scanning more URLs.",
                )
            if res.status_code < 200 or res.status_code >= 300:
                return ReputationResult(success=False, error=f"API error: {res.status_code}")

            data = res.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"VirusTotal lookup failed for {url}: {e}")
            return ReputationResult(success=False, error=str(e) or "Network error")

        if not isinstance(data, dict):
            return ReputationResult(success=False, error="API error: unexpected response body")

        positives = _as_int(data.get("positives"))
        total = _as_int(data.get("total"))
        result = ReputationResult(
            success=True,
            found=data.get("response_code") == 1,
            positives=positives,
            total=total,
            scan_date=data.get("scan_date"),
            permalink=data.get("permalink"),
            is_malicious=positives > 0,
            risk_level=calculate_risk_level(positives, total),
        )
        self.set_cache(url, result)
        return result

    def submit_url(self, url: str) -> ScanSubmission:
        """Queue a URL VirusTotal has no report for yet."""
        api_key = self.get_api_key()
        if not api_key:
            return ScanSubmission(success=False, error="API key not configured")

        try:
            self.wait_for_rate_limit()
            with self._client() as client:
                res = client.post(f"{self.api_base}/url/scan", data={"apikey": api_key, "url": url})

            if res.status_code < 200 or res.status_code >= 300:
                return ScanSubmission(success=False, error=f"Scan submission failed: {res.status_code}")

            data = res.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"VirusTotal scan submission failed for {url}: {e}")
            return ScanSubmission(success=False, error=str(e) or "Network error")

        if not isinstance(data, dict):
            data = {}
        return ScanSubmission(
            success=True,
            scan_id=data.get("scan_id"),
            permalink=data.get("permalink"),
            message="URL submitted for scanning",
        )
