from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping


# Declaration order matters: the first qualifying brand is the one reported.
DEFAULT_BRANDS: tuple[str, ...] = (
    "google", "facebook", "amazon", "apple", "microsoft", "netflix", "paypal",
    "instagram", "twitter", "linkedin", "youtube", "whatsapp", "telegram",
    "reddit", "github", "stackoverflow", "dropbox", "spotify", "adobe",
    "salesforce", "oracle", "ibm", "intel", "nvidia", "samsung", "sony",
    "walmart", "ebay", "alibaba", "zoom", "slack", "discord", "twitch",
    "pinterest", "snapchat", "tiktok", "uber", "airbnb", "booking",
    "expedia", "chase", "bankofamerica", "wellsfargo", "citibank", "hsbc",
    "barclays", "capitalone", "americanexpress", "visa", "mastercard",
    "coinbase", "binance", "kraken", "blockchain", "metamask", "opensea",
    "steam", "epicgames", "roblox", "minecraft", "playstation", "xbox",
    "nintendo", "att", "verizon", "tmobile", "comcast", "spectrum",
)

DEFAULT_HOMOGLYPHS: dict[str, tuple[str, ...]] = {
    "a": ("@", "4", "а", "ą", "α"),
    "b": ("8", "ь", "β"),
    "c": ("(", "с", "ç", "¢"),
    "d": ("đ", "ð"),
    "e": ("3", "е", "ё", "є", "ę"),
    "g": ("9", "ğ"),
    "h": ("һ",),
    "i": ("1", "l", "!", "|", "і", "ı"),
    "k": ("κ",),
    "l": ("1", "i", "|", "ł"),
    "m": ("rn", "м"),
    "n": ("п", "ń"),
    "o": ("0", "о", "ø", "ο"),
    "p": ("р", "ρ"),
    "s": ("5", "$", "ś", "ş"),
    "t": ("7", "+", "ť"),
    "u": ("υ", "ц", "ù"),
    "v": ("ν", "υ"),
    "w": ("vv", "ω"),
    "x": ("х", "×"),
    "y": ("у", "ý"),
    "z": ("2", "ź", "ż"),
}

# Applied in this order, each one once over the whole label.
DEFAULT_NORMALIZATION_RULES: tuple[tuple[str, str], ...] = (
    ("0", "o"),
    ("1", "l"),
    ("3", "e"),
    ("4", "a"),
    ("5", "s"),
    ("7", "t"),
    ("8", "b"),
    ("9", "g"),
    ("@", "a"),
    ("$", "s"),
    ("rn", "m"),
    ("vv", "w"),
)

DEFAULT_SUSPICIOUS_TLDS: frozenset[str] = frozenset({
    "xyz", "tk", "ml", "ga", "cf", "gq", "top", "club", "online", "site",
    "website", "space", "fun", "icu", "buzz", "monster", "cam", "uno",
})

# Second-level labels that sit between the registrable name and the TLD (example.co.uk).
GENERIC_SECOND_LEVEL: frozenset[str] = frozenset({"co", "com", "org", "net", "gov", "edu"})


@dataclass(frozen=True)
class ReferenceData:
    """Static lookup tables the typosquat detector compares against.

    Every field is immutable, so one instance can be shared by any number of
    concurrent analyses.
    """

    brands: tuple[str, ...] = DEFAULT_BRANDS
    homoglyphs: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_HOMOGLYPHS))
    )
    normalization_rules: tuple[tuple[str, str], ...] = DEFAULT_NORMALIZATION_RULES
    suspicious_tlds: frozenset[str] = DEFAULT_SUSPICIOUS_TLDS

    @classmethod
    def build(
        cls,
        brands: Iterable[str] = (),
        *,
        homoglyphs: Mapping[str, Iterable[str]] | None = None,
        normalization_rules: Iterable[tuple[str, str]] | None = None,
        suspicious_tlds: Iterable[str] = (),
    ) -> "ReferenceData":
        """Freeze caller-supplied tables (lists, sets, dicts) into a ReferenceData."""
        glyphs = homoglyphs if homoglyphs is not None else DEFAULT_HOMOGLYPHS
        rules = normalization_rules if normalization_rules is not None else DEFAULT_NORMALIZATION_RULES
        return cls(
            brands=tuple(b.strip().lower() for b in brands if b and b.strip()),
            homoglyphs=MappingProxyType({k: tuple(v) for k, v in glyphs.items()}),
            normalization_rules=tuple((p, r) for p, r in rules),
            suspicious_tlds=frozenset(t.strip().lower().lstrip(".") for t in suspicious_tlds if t),
        )

    def confusables_in(self, label: str) -> list[tuple[str, str]]:
        """List (sequence, latin letter) pairs from the homoglyph table that occur in label."""
        found: list[tuple[str, str]] = []
        lowered = (label or "").lower()
        for letter, variants in self.homoglyphs.items():
            for v in variants:
                # a plain latin letter standing in for another (l for i) is too noisy to report
                if v.isascii() and v.isalpha() and len(v) == 1:
                    continue
                if v in lowered:
                    found.append((v, letter))
        return found


DEFAULT_REFERENCE = ReferenceData()
