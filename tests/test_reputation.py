import httpx
import pytest

from urlguard.models import ReputationResult
from urlguard.reputation import VirusTotalClient, calculate_risk_level

REPORT = {
    "response_code": 1,
    "positives": 6,
    "total": 70,
    "scan_date": "2024-05-01 10:00:00",
    "permalink": "https://www.virustotal.com/url/abc/analysis/",
}


def make_client(handler, clock, store=None, **kwargs):
    kwargs.setdefault("default_api_key", "test-key")
    return VirusTotalClient(
        store,
        transport=httpx.MockTransport(handler),
        clock=clock,
        sleep=clock.sleep,
        **kwargs,
    )


@pytest.mark.parametrize(
    "positives, total, level",
    [
        (0, 70, "clean"),
        (None, None, "clean"),
        (40, 70, "high"),
        (35, 70, "high"),
        (14, 70, "medium"),
        (4, 70, "low"),
        (1, 70, "suspicious"),
    ],
)
def test_calculate_risk_level(positives, total, level):
    assert calculate_risk_level(positives, total) == level


def test_check_url_parses_report(clock):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=REPORT)

    client = make_client(handler, clock)
    result = client.check_url("http://evil.example/")

    assert result.success and result.found
    assert result.positives == 6 and result.total == 70
    assert result.is_malicious
    assert result.risk_level == "low"
    assert result.permalink == REPORT["permalink"]
    assert not result.from_cache

    req = seen[0]
    assert req.url.path.endswith("/url/report")
    assert req.url.params["apikey"] == "test-key"
    assert req.url.params["resource"] == "http://evil.example/"


def test_clean_report_is_not_malicious(clock):
    client = make_client(lambda r: httpx.Response(200, json={"response_code": 1, "positives": 0, "total": 70}), clock)
    result = client.check_url("https://example.org")
    assert result.success
    assert not result.is_malicious
    assert result.risk_level == "clean"


def test_results_are_cached_until_ttl(clock):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=REPORT)

    client = make_client(handler, clock, cache_ttl_s=60, min_interval_s=0)
    client.check_url("http://evil.example/")
    cached = client.check_url("http://evil.example/")
    assert cached.from_cache
    assert len(calls) == 1

    clock.now += 61
    fresh = client.check_url("http://evil.example/")
    assert not fresh.from_cache
    assert len(calls) == 2

    client.clear_cache()
    client.check_url("http://evil.example/")
    assert len(calls) == 3


def test_expired_entries_are_dropped_on_write(clock):
    client = make_client(lambda r: httpx.Response(200, json=REPORT), clock, cache_ttl_s=1)
    result = ReputationResult(success=True, found=True, positives=0, total=70, risk_level="clean")
    for i in range(1000):
        client.set_cache(f"https://site{i}.example/", result)
    assert len(client._cache) == 1000

    clock.now += 10
    client.set_cache("https://fresh.example/", result)
    assert list(client._cache) == ["https://fresh.example/"]
    assert client.get_cached("https://fresh.example/") == result
    assert client.get_cached("https://site0.example/") is None


def test_requests_are_spaced_by_min_interval(clock):
    client = make_client(lambda r: httpx.Response(200, json=REPORT), clock, min_interval_s=15)
    client.check_url("http://a.example/")
    assert clock.sleeps == []

    clock.now += 5
    client.check_url("http://b.example/")
    assert clock.sleeps == [pytest.approx(10)]

    clock.now += 20
    client.check_url("http://c.example/")
    assert len(clock.sleeps) == 1


def test_missing_api_key(clock):
    client = make_client(lambda r: httpx.Response(200, json=REPORT), clock, default_api_key=None)
    result = client.check_url("http://evil.example/")
    assert not result.success
    assert result.requires_api_key
    assert result.error == "API key not configured"


@pytest.mark.parametrize(
    "status, success, message",
    [
        (204, True, "URL not found in VirusTotal database"),
        (403, False, "Invalid API key"),
        (429, False, "Rate limit exceeded. Please wait before scanning more URLs."),
        (500, False, "API error: 500"),
    ],
)
def test_http_status_handling(clock, status, success, message):
    client = make_client(lambda r: httpx.Response(status), clock)
    result = client.check_url("http://evil.example/")
    assert result.success is success
    assert (result.message if success else result.error) == message
    assert not result.is_malicious
    # failures and misses are not cached
    assert client.get_cached("http://evil.example/") is None


def test_network_error_is_reported_not_raised(clock):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler, clock)
    result = client.check_url("http://evil.example/")
    assert not result.success
    assert "connection refused" in result.error


def test_invalid_json_is_reported(clock):
    client = make_client(lambda r: httpx.Response(200, content=b"<html>"), clock)
    result = client.check_url("http://evil.example/")
    assert not result.success


def test_submit_url(clock):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"scan_id": "abc-123", "permalink": "https://vt/abc"})

    client = make_client(handler, clock)
    result = client.submit_url("http://new.example/")
    assert result.success
    assert result.scan_id == "abc-123"
    assert result.message == "URL submitted for scanning"

    req = seen[0]
    assert req.method == "POST"
    assert req.url.path.endswith("/url/scan")
    body = req.content.decode()
    assert "apikey=test-key" in body
    assert "url=http%3A%2F%2Fnew.example%2F" in body


def test_submit_url_failure(clock):
    client = make_client(lambda r: httpx.Response(400), clock)
    result = client.submit_url("http://new.example/")
    assert not result.success
    assert result.error == "Scan submission failed: 400"


def test_api_key_lives_in_store(store, clock):
    client = make_client(lambda r: httpx.Response(200, json=REPORT), clock, store=store, default_api_key=None)
    assert not client.has_api_key()
    client.set_api_key("  stored-key ")
    assert client.has_api_key()
    assert store.get_api_key() == "stored-key"
    assert VirusTotalClient(store).get_api_key() == "stored-key"
