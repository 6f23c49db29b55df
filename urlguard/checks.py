from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, Sequence


SUBDOMAIN_TRICK_SCORE = 80
BRAND_EMBEDDING_SCORE = 60
SUSPICIOUS_TLD_SCORE = 20


@dataclass(frozen=True)
class Signal:
    score: int
    reason: str
    matched_domain: str | None = None


def check_subdomain_trick(hostname: str, brands: Sequence[str]) -> Signal | None:
    """Catch brand names placed left of the real domain, e.g. ``paypal.com.evil.com``.

    Only hostnames with more than three labels qualify; the last two labels
    (the actual registered name and TLD) are never inspected. Brands are
    tried in order and the first hit is returned.
    """
    parts = hostname.split(".")
    if len(parts) <= 3:
        return None

    leading = parts[:-2]
    for brand in brands:
        if not brand:
            continue
        for label in leading:
            if brand in label:
                return Signal(
                    score=SUBDOMAIN_TRICK_SCORE,
                    reason=f'Subdomain trick detected: "{brand}" used as subdomain',
                    matched_domain=brand,
                )
    return None


def check_brand_embedding(base_label: str, brand: str) -> Signal | None:
    # paypal-secure, mypaypal, ... are far apart by edit distance but still impersonate
    if not brand or base_label == brand or brand not in base_label:
        return None
    return Signal(
        score=BRAND_EMBEDDING_SCORE,
        reason=f'Contains brand name "{brand}"',
        matched_domain=brand,
    )


def check_suspicious_tld(tld: str, matched_domain: str | None, suspicious_tlds: Collection[str]) -> Signal | None:
    """Bonus for a cheap/abused TLD, only once some brand has already been matched."""
    if not matched_domain or tld not in suspicious_tlds:
        return None
    return Signal(score=SUSPICIOUS_TLD_SCORE, reason=f"Suspicious TLD: .{tld}")
