# app/api/v1/elora.py
from typing import Any, Optional

from fastapi import APIRouter, Query

from app.services import elora

router = APIRouter(prefix="/elora", tags=["elora"])


@router.get("/vehicles")
def vehicles(
    customer_id: Optional[str] = Query(None),
    site_id: Optional[str] = Query(None),
) -> Any:
    return elora.list_vehicles(customer_id=customer_id, site_id=site_id)


@router.get("/sites")
def sites(customer_id: Optional[str] = Query(None)) -> Any:
    return elora.list_sites(customer_id=customer_id)


@router.get("/customers")
def customers(status: Optional[str] = Query(None)) -> Any:
    return elora.list_customers(status=status)


@router.get("/dashboard")
def dashboard(
    customer_id: Optional[str] = Query(None),
    site_id: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
) -> Any:
    return elora.get_dashboard(
        customer_id=customer_id, site_id=site_id, start_date=start_date, end_date=end_date
    )


@router.get("/scans")
def scans(
    customer_id: Optional[str] = Query(None),
    site_id: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
) -> Any:
    return elora.list_scans(
        customer_id=customer_id, site_id=site_id, start_date=start_date, end_date=end_date
    )


@router.get("/refills")
def refills(
    fromDate: Optional[str] = Query(None),
    toDate: Optional[str] = Query(None),
    customerRef: Optional[str] = Query(None),
    siteRef: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="CSV: scheduled,confirmed,delivered,cancelled"),
) -> Any:
    return elora.list_refills(
        from_date=fromDate,
        to_date=toDate,
        customer_ref=customerRef,
        site_ref=siteRef,
        status=status,
    )


@router.get("/devices")
def devices(
    status: Optional[str] = Query(None),
    customer_id: Optional[str] = Query(None),
    site_id: Optional[str] = Query(None),
) -> Any:
    return elora.list_devices(status=status, customer_id=customer_id, site_id=site_id)
