from __future__ import annotations

from typing import Iterable

from .reference import DEFAULT_NORMALIZATION_RULES


def normalize_label(label: str, rules: Iterable[tuple[str, str]] = DEFAULT_NORMALIZATION_RULES) -> str:
    """Fold look-alike digits, symbols and letter pairs to plain latin letters.

    The label is lowercased, then every (pattern, replacement) rule is
    replaced across the whole string, one rule after the other, so a later
    rule sees the output of earlier ones. Ordinary words get folded as
    well ("corner" -> "comer").
    """
    normalized = (label or "").lower()
    for pattern, replacement in rules:
        if pattern:
            normalized = normalized.replace(pattern, replacement)
    return normalized
