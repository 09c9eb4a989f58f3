import pytest

from app.core.errors import ConfigError, UpstreamAPIError
from app.services import elora


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return self._body


@pytest.fixture()
def upstream(monkeypatch):
    """Records requests.get calls and answers with ``upstream.response``."""

    class Upstream:
        response = FakeResponse(200, {"data": []})
        calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        Upstream.calls.append({"url": url, "params": dict(params or {}), "headers": dict(headers or {})})
        return Upstream.response

    Upstream.calls = []
    monkeypatch.setenv("ELORA_API_KEY", "test-key")
    monkeypatch.setattr(elora.requests, "get", fake_get)
    return Upstream


def test_missing_key_fails_before_any_call(monkeypatch, upstream):
    monkeypatch.delenv("ELORA_API_KEY")
    with pytest.raises(ConfigError):
        elora.list_vehicles()
    assert upstream.calls == []


def test_vehicles_filters_and_header(upstream):
    upstream.response = FakeResponse(200, {"data": [{"vehicleRef": "V1"}]})

    assert elora.list_vehicles(customer_id="C1", site_id="all") == [{"vehicleRef": "V1"}]
    call = upstream.calls[0]
    assert call["url"] == "https://www.elora.com.au/api/vehicles"
    assert call["params"] == {"status": "1", "customer": "C1"}
    assert call["headers"] == {"x-api-key": "test-key"}


def test_sites_filtered_locally(upstream):
    upstream.response = FakeResponse(
        200, {"data": [{"siteRef": "S1", "customerRef": "C1"}, {"siteRef": "S2", "customerRef": "C2"}]}
    )
    assert elora.list_sites("C2") == [{"siteRef": "S2", "customerRef": "C2"}]
    assert len(elora.list_sites("all")) == 2
    assert upstream.calls[0]["params"] == {}


def test_devices_default_status_and_local_filters(upstream):
    upstream.response = FakeResponse(
        200,
        [
            {"deviceRef": "D1", "customerRef": "C1", "siteRef": "S1"},
            {"deviceRef": "D2", "customer_ref": "C1", "site_ref": "S2"},
            {"deviceRef": "D3", "customerRef": "C2", "siteRef": "S3"},
        ],
    )
    out = elora.list_devices(customer_id="C1", site_id="S2")
    assert [d["deviceRef"] for d in out] == ["D2"]
    assert upstream.calls[0]["params"] == {"status": "1,2"}


def test_scans_export_params(upstream):
    upstream.response = FakeResponse(200, {"data": [{"id": 1}]})
    assert elora.list_scans(customer_id="C1", start_date="2026-03-01", end_date="2026-03-07") == [{"id": 1}]
    assert upstream.calls[0]["params"] == {
        "export": "all",
        "status": "success",
        "customer": "C1",
        "fromDate": "2026-03-01",
        "toDate": "2026-03-07",
    }


def test_refills_key_in_query(upstream):
    upstream.response = FakeResponse(200, {"data": [], "total": 0})
    assert elora.list_refills(from_date="2026-03-01", customer_ref="C1", status="confirmed,delivered") == {
        "data": [],
        "total": 0,
    }
    call = upstream.calls[0]
    assert call["params"]["api_key"] == "test-key"
    assert call["params"]["export"] == "true"
    assert call["params"]["customerRef"] == "C1"
    assert "x-api-key" not in call["headers"]


def test_customers_default_status(upstream):
    upstream.response = FakeResponse(200, {"data": [{"customerRef": "C1"}]})
    assert elora.list_customers() == [{"customerRef": "C1"}]
    assert upstream.calls[0]["params"] == {"status": "all"}


def test_upstream_error_keeps_status(upstream):
    upstream.response = FakeResponse(404, None, text="not found")
    with pytest.raises(UpstreamAPIError) as exc:
        elora.get_dashboard(customer_id="C1")
    assert exc.value.status_code == 404
    assert exc.value.message == "Elora API error: 404"
    assert exc.value.details == "not found"


# -----------------------------
# HTTP
# -----------------------------
def test_endpoint_missing_key_is_500(client, monkeypatch):
    monkeypatch.delenv("ELORA_API_KEY", raising=False)
    resp = client.get("/api/v1/elora/vehicles")
    assert resp.status_code == 500
    assert resp.json()["error"] == "API key not configured"


def test_endpoint_propagates_upstream_status(client, upstream):
    upstream.response = FakeResponse(403, None, text="forbidden")
    resp = client.get("/api/v1/elora/sites", params={"customer_id": "C1"})
    assert resp.status_code == 403
    assert resp.json()["error"] == "Elora API error: 403"
    assert resp.json()["details"] == "forbidden"


def test_endpoint_dashboard_passthrough(client, upstream):
    upstream.response = FakeResponse(200, {"totalScans": 12})
    resp = client.get(
        "/api/v1/elora/dashboard",
        params={"customer_id": "C1", "start_date": "2026-03-01", "end_date": "2026-03-07"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"totalScans": 12}
    assert upstream.calls[0]["params"] == {"customer": "C1", "fromDate": "2026-03-01", "toDate": "2026-03-07"}
