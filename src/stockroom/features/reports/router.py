import logging
from fastapi import APIRouter, Depends, Query
from typing import Annotated

# Schemas for requests (TimePeriodQuery, InventoryReportSearch) and responses
from .schemas import (
    TimePeriodQuery, InventoryReportSearch, InventoryReportResponse, TopCustomersResponse,
    TopSuppliersResponse, SalesReportResponse, OutstandingInvoicesReportResponse
)
# The engine that contains the report logic
from .service import ReportQueryEngine, get_report_engine

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    responses={404: {"description": "Not found"}}, # General 404 for this router
)

Engine = Annotated[ReportQueryEngine, Depends(get_report_engine)]
Page = Annotated[int, Query(ge=1, description="Page number (1-based)")]


@router.get("/inventory", response_model=InventoryReportResponse)
async def get_inventory_report(
    engine: Engine,
    page: Page = 1,
    search: InventoryReportSearch = Depends() # Injects query params from InventoryReportSearch
):
    return await engine.get_products(page=page, search=search)

@router.get("/customers/top", response_model=TopCustomersResponse)
async def get_top_customers_report(engine: Engine):
    return await engine.get_top_ten_customers()

@router.get("/suppliers/top", response_model=TopSuppliersResponse)
async def get_top_suppliers_report(engine: Engine):
    return await engine.get_top_ten_suppliers()

@router.get("/sales", response_model=SalesReportResponse)
async def get_sales_report(
    engine: Engine,
    page: Page = 1,
    period: TimePeriodQuery = Depends()
):
    return await engine.get_sale_orders(
        page=page, start_date=period.start_date, end_date=period.end_date
    )

@router.get("/customers/{customer_id}/sales", response_model=SalesReportResponse)
async def get_customer_sales_report(
    customer_id: int,
    engine: Engine,
    page: Page = 1,
    period: TimePeriodQuery = Depends()
):
    return await engine.get_customer_sale_orders(
        page=page, start_date=period.start_date, end_date=period.end_date, customer_id=customer_id
    )

@router.get("/invoices/outstanding", response_model=OutstandingInvoicesReportResponse)
async def get_outstanding_invoices_report(
    engine: Engine,
    page: Page = 1,
    period: TimePeriodQuery = Depends()
):
    return await engine.get_outstanding_invoices(
        page=page, start_date=period.start_date, end_date=period.end_date
    )
