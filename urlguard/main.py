from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .auth import MockAuth
from .models import (
    AnalysisResult,
    AnalyzeBatchRequest,
    AnalyzeRequest,
    ApiKeyRequest,
    ApiKeyStatus,
    AuthResult,
    CombinedResult,
    LoginRequest,
    PageScan,
    ScanRequest,
    ScanSubmission,
    Settings,
    SettingsResponse,
    SettingsUpdate,
    Stats,
    User,
)
from .reputation import VirusTotalClient
from .scanner import scan_page
from .service import UrlGuardService
from .storage import JsonStore
from .typosquat import TyposquatDetector

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    store: JsonStore | None = None,
    reputation: VirusTotalClient | None = None,
    detector: TyposquatDetector | None = None,
) -> FastAPI:
    store = store or JsonStore.in_dir(config.DATA_DIR)
    reputation = reputation or VirusTotalClient(
        store,
        default_api_key=config.VIRUSTOTAL_API_KEY,
        api_base=config.VIRUSTOTAL_API_BASE,
        cache_ttl_s=config.VIRUSTOTAL_CACHE_TTL_S,
        min_interval_s=config.VIRUSTOTAL_MIN_INTERVAL_S,
        timeout_s=config.VIRUSTOTAL_TIMEOUT_S,
    )
    service = UrlGuardService(store, reputation, detector, max_workers=config.SCAN_WORKERS)
    auth = MockAuth(store)

    app = FastAPI(title="URL Guard", version="0.1.0")
    app.state.service = service
    app.state.auth = auth

    # extension pages and the dashboard call in from other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    @app.post("/typosquat", response_model=AnalysisResult)
    def typosquat_endpoint(req: AnalyzeRequest):
        return service.detector.analyze(req.url)

    @app.post("/analyze", response_model=CombinedResult)
    def analyze_endpoint(req: AnalyzeRequest):
        return service.analyze_url(req.url)

    @app.post("/analyze/batch", response_model=list[CombinedResult])
    def analyze_batch_endpoint(req: AnalyzeBatchRequest):
        return service.analyze_urls(req.urls)

    @app.post("/scan", response_model=PageScan)
    def scan_endpoint(req: ScanRequest):
        return scan_page(req.html, req.page_url, service)

    @app.post("/reputation/submit", response_model=ScanSubmission)
    def submit_endpoint(req: AnalyzeRequest):
        return reputation.submit_url(req.url)

    @app.get("/settings", response_model=SettingsResponse)
    def get_settings():
        return SettingsResponse(settings=store.get_settings(), stats=store.get_stats())

    @app.put("/settings", response_model=Settings)
    def update_settings(update: SettingsUpdate):
        settings = store.update_settings(update)
        logger.info(
            f"Settings updated: typosquat={settings.typosquat_check_enabled} "
            f"malware={settings.malware_scan_enabled}"
        )
        return settings

    @app.get("/stats", response_model=Stats)
    def get_stats():
        return store.get_stats()

    @app.post("/stats/reset", response_model=Stats)
    def reset_stats():
        return store.reset_stats()

    @app.put("/api-key", response_model=ApiKeyStatus)
    def set_api_key(req: ApiKeyRequest):
        key = req.api_key.strip()
        if not key:
            raise HTTPException(status_code=400, detail="API key must not be blank.")
        reputation.set_api_key(key)
        reputation.clear_cache()
        return ApiKeyStatus(has_api_key=True)

    @app.get("/api-key", response_model=ApiKeyStatus)
    def has_api_key():
        return ApiKeyStatus(has_api_key=reputation.has_api_key())

    @app.post("/auth/login", response_model=AuthResult)
    def login(req: LoginRequest):
        result = auth.login(req.email, req.password)
        if not result.success:
            raise HTTPException(status_code=400, detail=result.error)
        return result

    @app.post("/auth/logout", response_model=AuthResult)
    def logout():
        return auth.logout()

    @app.get("/auth/me", response_model=User)
    def me():
        user = auth.get_user()
        if not auth.is_logged_in() or user is None:
            raise HTTPException(status_code=401, detail="Not logged in.")
        return user

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("urlguard.main:app", host="0.0.0.0", port=8000, reload=False)
