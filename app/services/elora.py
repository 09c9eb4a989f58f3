# app/services/elora.py
"""
Thin client for the Elora wash-telemetry API.

Every call checks the API key first (ConfigError before any request) and turns
a non-2xx answer into UpstreamAPIError carrying the upstream status and body.
Some upstream endpoints ignore customer/site filters; those are applied here.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from app.core import config
from app.core.errors import UpstreamAPIError

log = logging.getLogger("app.elora")

ALL = "all"
DEFAULT_DEVICE_STATUS = "1,2"


def _is_filter(v: Optional[str]) -> bool:
    return bool(v) and v != ALL


def _params(**kwargs: Optional[str]) -> Dict[str, str]:
    """Drop empty values and the 'all' wildcard."""
    return {k: v for k, v in kwargs.items() if _is_filter(v)}


def _get(path: str, params: Dict[str, str], *, key_in_query: bool = False) -> Any:
    api_key = config.elora_api_key()
    url = f"{config.elora_base_url()}{path}"

    headers = {}
    if key_in_query:
        params = {**params, "api_key": api_key}
    else:
        headers["x-api-key"] = api_key

    resp = requests.get(url, params=params, headers=headers, timeout=config.elora_timeout())
    if not resp.ok:
        log.error("Elora API error (%s) %s: %s", resp.status_code, path, resp.text[:500])
        raise UpstreamAPIError(
            f"Elora API error: {resp.status_code}",
            status_code=resp.status_code,
            details=resp.text,
        )
    return resp.json()


def _rows(body: Any) -> List[Dict[str, Any]]:
    if isinstance(body, dict) and isinstance(body.get("data"), list):
        return body["data"]
    if isinstance(body, list):
        return body
    return []


def _data_or_body(body: Any) -> Any:
    if isinstance(body, dict) and body.get("data") is not None:
        return body["data"]
    return body


# -----------------------------
# Endpoints
# -----------------------------
def list_vehicles(customer_id: Optional[str] = None, site_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Active vehicles only (status=1)."""
    body = _get("/api/vehicles", {"status": "1", **_params(customer=customer_id, site=site_id)})
    if not isinstance(body, dict):
        return []
    return body.get("data") or []


def list_sites(customer_id: Optional[str] = None) -> List[Dict[str, Any]]:
    # /api/sites takes no filters
    sites = _rows(_get("/api/sites", {}))
    if _is_filter(customer_id):
        sites = [s for s in sites if s.get("customerRef") == customer_id]
    return sites


def list_customers(status: Optional[str] = None) -> Any:
    return _data_or_body(_get("/api/customers", {"status": status or ALL}))


def get_dashboard(
    customer_id: Optional[str] = None,
    site_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Any:
    return _get(
        "/api/dashboard",
        _params(customer=customer_id, site=site_id, fromDate=start_date, toDate=end_date),
    )


def list_scans(
    customer_id: Optional[str] = None,
    site_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Any:
    params = {"export": ALL, "status": "success"}
    params.update(_params(customer=customer_id, site=site_id, fromDate=start_date, toDate=end_date))
    return _data_or_body(_get("/api/scans", params))


def list_refills(
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    customer_ref: Optional[str] = None,
    site_ref: Optional[str] = None,
    status: Optional[str] = None,
) -> Any:
    """
    Tank refills. ``status`` is a CSV of scheduled/confirmed/delivered/cancelled.
    export=true disables upstream pagination.
    """
    params = _params(
        fromDate=from_date,
        toDate=to_date,
        customerRef=customer_ref,
        siteRef=site_ref,
        status=status,
    )
    params["export"] = "true"
    return _get("/api/refills", params, key_in_query=True)


def list_devices(
    status: Optional[str] = None,
    customer_id: Optional[str] = None,
    site_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    # /api/devices only filters by status
    devices = _rows(_get("/api/devices", {"status": status or DEFAULT_DEVICE_STATUS}))
    if _is_filter(customer_id):
        devices = [
            d for d in devices if (d.get("customerRef") or d.get("customer_ref")) == customer_id
        ]
    if _is_filter(site_id):
        devices = [d for d in devices if (d.get("siteRef") or d.get("site_ref")) == site_id]
    return devices
