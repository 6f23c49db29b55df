from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

HighlightLevel = Literal["suspicious", "warning"]
RiskLevel = Literal["clean", "suspicious", "low", "medium", "high"]


class _WireModel(BaseModel):
    # The browser side speaks camelCase (riskScore, isSuspicious); accept either form.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalysisResult(_WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    url: str
    is_suspicious: bool = False
    risk_score: int = Field(0, ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)
    matched_domain: str | None = None


class ReputationResult(_WireModel):
    success: bool
    found: bool | None = None
    positives: int | None = None
    total: int | None = None
    scan_date: str | None = None
    permalink: str | None = None
    is_malicious: bool = False
    risk_level: RiskLevel | None = None
    message: str | None = None
    error: str | None = None
    requires_api_key: bool = False
    from_cache: bool = False


class ScanSubmission(_WireModel):
    success: bool
    scan_id: str | None = None
    permalink: str | None = None
    message: str | None = None
    error: str | None = None


class CombinedResult(_WireModel):
    url: str
    typosquat: AnalysisResult | None = None
    malware: ReputationResult | None = None
    is_suspicious: bool = False
    risk_score: int = Field(0, ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)
    error: str | None = None


class Settings(_WireModel):
    malware_scan_enabled: bool = False
    typosquat_check_enabled: bool = False


class SettingsUpdate(_WireModel):
    malware_scan_enabled: bool | None = None
    typosquat_check_enabled: bool | None = None


class Stats(_WireModel):
    urls_scanned: int = Field(0, ge=0)
    threats_found: int = Field(0, ge=0)


class SettingsResponse(_WireModel):
    settings: Settings
    stats: Stats


class User(_WireModel):
    email: str
    # epoch milliseconds
    login_time: int


class AuthResult(_WireModel):
    success: bool
    user: User | None = None
    error: str | None = None


class Highlight(_WireModel):
    url: str
    level: HighlightLevel
    risk_score: int
    tooltip: str
    anchors: list[str] = Field(default_factory=list)


class PageScan(_WireModel):
    page_url: str
    links_found: int
    highlights: list[Highlight] = Field(default_factory=list)


# Request bodies

class AnalyzeRequest(_WireModel):
    url: str = Field(..., min_length=1, max_length=8192)


class AnalyzeBatchRequest(_WireModel):
    urls: list[str] = Field(..., max_length=500)


class ScanRequest(_WireModel):
    page_url: str = Field(..., min_length=1)
    html: str = Field("", max_length=4 * 1024 * 1024)


class ApiKeyRequest(_WireModel):
    api_key: str = Field(..., min_length=1)


class ApiKeyStatus(_WireModel):
    has_api_key: bool


class LoginRequest(_WireModel):
    email: str = ""
    password: str = ""
