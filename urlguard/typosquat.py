from __future__ import annotations

import logging

from .checks import (
    Signal,
    check_brand_embedding,
    check_subdomain_trick,
    check_suspicious_tld,
)
from .domain import extract_domain, get_base_domain, get_tld
from .models import AnalysisResult
from .normalizer import normalize_label
from .reference import DEFAULT_REFERENCE, ReferenceData
from .similarity import levenshtein_distance

logger = logging.getLogger(__name__)

TYPO_SCORE = 70
HOMOGRAPH_SCORE = 90
MAX_TYPO_DISTANCE = 2


def _clamp_score(score: int) -> int:
    return max(0, min(100, int(score)))


class TyposquatDetector:
    """Flags URLs whose hostname impersonates one of the reference brands.

    Signals are evaluated in a fixed order and their scores added up:

    1. subdomain trick (brand left of the registered domain): +80
    2. the first brand, in declaration order, that the base label
       - is within edit distance 1-2 of after homoglyph folding: +70
       - contains as a substring: +60
       - equals exactly only after homoglyph folding: +90
       (a base label identical to a brand is the brand itself and skipped)
    3. suspicious TLD, only when a brand was matched above: +20

    The total is clamped to 0..100. The detector keeps no state between
    calls; ``analyze`` is safe to call from many threads at once.
    """

    def __init__(self, reference: ReferenceData | None = None):
        self.reference = reference or DEFAULT_REFERENCE

    def analyze(self, url: str) -> AnalysisResult:
        hostname = extract_domain(url)
        if not hostname:
            return AnalysisResult(url=url or "")

        ref = self.reference
        base = get_base_domain(hostname)
        normalized = normalize_label(base, ref.normalization_rules)
        tld = get_tld(hostname)

        signals: list[Signal] = []
        matched: str | None = None

        trick = check_subdomain_trick(hostname, ref.brands)
        if trick:
            signals.append(trick)
            matched = trick.matched_domain

        brand_signal = self._match_brand(base, normalized)
        if brand_signal:
            signals.append(brand_signal)
            matched = brand_signal.matched_domain

        bonus = check_suspicious_tld(tld, matched, ref.suspicious_tlds)
        if bonus:
            signals.append(bonus)

        if signals and logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "%s: base=%r normalized=%r confusables=%s signals=%s",
                hostname, base, normalized, ref.confusables_in(base), [s.reason for s in signals],
            )

        return AnalysisResult(
            url=url,
            is_suspicious=bool(signals),
            risk_score=_clamp_score(sum(s.score for s in signals)),
            reasons=[s.reason for s in signals],
            matched_domain=matched,
        )

    def _match_brand(self, base: str, normalized: str) -> Signal | None:
        # First qualifying brand wins; later brands are never consulted.
        for brand in self.reference.brands:
            if not brand or base == brand:
                continue

            distance = levenshtein_distance(normalized, brand)
            if 0 < distance <= MAX_TYPO_DISTANCE:
                return Signal(
                    score=TYPO_SCORE,
                    reason=f'Similar to "{brand}" ({distance} character difference)',
                    matched_domain=brand,
                )

            embedded = check_brand_embedding(base, brand)
            if embedded:
                return embedded

            if normalized != base and distance == 0:
                return Signal(
                    score=HOMOGRAPH_SCORE,
                    reason=f'Homograph attack: looks like "{brand}"',
                    matched_domain=brand,
                )
        return None


default_detector = TyposquatDetector()


def analyze_url(url: str) -> AnalysisResult:
    """Run the default detector (built-in brand, homoglyph and TLD tables) on one URL."""
    return default_detector.analyze(url)
