from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv


# Pick up a .env next to the package (local dev) without overriding the real environment.
_HERE = Path(__file__).resolve()
PROJECT_ROOT = _HERE.parents[1]
load_dotenv(PROJECT_ROOT / ".env", override=False)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


DATA_DIR = Path(os.getenv("URLGUARD_DATA_DIR", "") or "data")
LOG_LEVEL = os.getenv("URLGUARD_LOG_LEVEL", "INFO").upper()
SCAN_WORKERS = max(1, int(_float_env("URLGUARD_SCAN_WORKERS", 4)))

VIRUSTOTAL_API_KEY = os.getenv("VIRUSTOTAL_API_KEY") or None
VIRUSTOTAL_API_BASE = os.getenv("VIRUSTOTAL_API_BASE", "https://www.virustotal.com/vtapi/v2")
VIRUSTOTAL_CACHE_TTL_S = _float_env("VIRUSTOTAL_CACHE_TTL_S", 3600.0)
VIRUSTOTAL_MIN_INTERVAL_S = _float_env("VIRUSTOTAL_MIN_INTERVAL_S", 15.0)
VIRUSTOTAL_TIMEOUT_S = _float_env("VIRUSTOTAL_TIMEOUT_S", 10.0)


_DEFAULT_CORS_ORIGINS = ("http://localhost:3000",)


def cors_allow_origins() -> list[str]:
    """Origins allowed to call the API; a browser extension needs its chrome-extension:// origin listed."""
    origins = [o.strip() for o in os.getenv("URLGUARD_CORS_ORIGINS", "").split(",")]
    return [o for o in origins if o] or list(_DEFAULT_CORS_ORIGINS)
