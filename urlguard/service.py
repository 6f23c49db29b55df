from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from .models import CombinedResult, HighlightLevel
from .reputation import VirusTotalClient
from .storage import JsonStore
from .typosquat import TyposquatDetector

logger = logging.getLogger(__name__)

HIGH_RISK_THRESHOLD = 70
MALWARE_RISK_SCORE = 90


def highlight_level(risk_score: int) -> HighlightLevel:
    return "suspicious" if risk_score >= HIGH_RISK_THRESHOLD else "warning"


class UrlGuardService:
    """Runs the enabled checks on URLs and keeps the scan counters.

    The typosquat verdict and the reputation verdict are merged by taking
    the higher risk score and appending reasons in check order.
    """

    def __init__(
        self,
        store: JsonStore,
        reputation: VirusTotalClient | None = None,
        detector: TyposquatDetector | None = None,
        *,
        max_workers: int = 4,
    ):
        self.store = store
        self.reputation = reputation or VirusTotalClient(store)
        self.detector = detector or TyposquatDetector()
        self.max_workers = max(1, max_workers)

    def _check(self, url: str) -> CombinedResult:
        settings = self.store.get_settings()
        risk_score = 0
        reasons: list[str] = []
        typosquat = malware = None

        if settings.typosquat_check_enabled:
            typosquat = self.detector.analyze(url)
            if typosquat.is_suspicious:
                risk_score = max(risk_score, typosquat.risk_score)
                reasons.extend(typosquat.reasons)

        if settings.malware_scan_enabled:
            malware = self.reputation.check_url(url)
            if malware.success and malware.is_malicious:
                risk_score = max(risk_score, MALWARE_RISK_SCORE)
                reasons.append(f"VirusTotal: {malware.positives}/{malware.total} detections")

        return CombinedResult(
            url=url,
            typosquat=typosquat,
            malware=malware,
            is_suspicious=bool(reasons),
            risk_score=risk_score,
            reasons=reasons,
        )

    def analyze_url(self, url: str) -> CombinedResult:
        result = self._check(url)
        self.store.record_scan(result.is_suspicious)
        return result

    def _analyze_safely(self, url: str) -> CombinedResult:
        try:
            return self.analyze_url(url)
        except Exception as e:
            logger.exception(f"Analysis failed for {url}")
            return CombinedResult(url=url, error=str(e) or e.__class__.__name__)

    def analyze_urls(self, urls: Iterable[str]) -> list[CombinedResult]:
        """Analyze a batch; results keep input order and one bad URL never sinks the rest."""
        items = list(urls)
        if not items:
            return []
        if len(items) == 1 or self.max_workers == 1:
            return [self._analyze_safely(u) for u in items]

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(items))) as pool:
            return list(pool.map(self._analyze_safely, items))
