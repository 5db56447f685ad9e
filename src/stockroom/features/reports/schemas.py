"""Inventory, Sales and Invoice Reports API Schemas

This module defines the Pydantic models used by the reporting endpoints.
It includes schemas for:

1. The inventory report and its search round-trip
2. Top ten customers and suppliers
3. Sales reports (all customers or a single customer)
4. Outstanding purchase invoices

Report responses carry their rows, the pagination info for the page that
was returned, and the aggregate totals for that report."""
from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional
import datetime

from ...common.pagination import PaginationInfo
from ..inventory.schemas import BrandOption, CategoryOption, ProductResponse
from ..purchases.schemas import PurchaseOrderInvoiceResponse, SupplierRankingResponse
from ..sales.schemas import CustomerRankingResponse, SaleOrderResponse


class SearchCategory(str, Enum):
    NAME = "name"
    CATEGORY = "category"
    BRAND = "brand"


# Helper schema for common time period queries
class TimePeriodQuery(BaseModel):
    start_date: datetime.date = Field(..., description="Start date for the report period (YYYY-MM-DD), not in the future")
    end_date: datetime.date = Field(..., description="End date for the report period (YYYY-MM-DD), inclusive")


# 1. Inventory
class InventoryReportSearch(BaseModel):
    search_term: Optional[str] = Field(None, description="Case-insensitive text to look for")
    previous_search_term: Optional[str] = Field(
        None, description="The search_term of the previous request; a change resets the page to 1"
    )
    barcode: Optional[str] = Field(None, description="Exact barcode, used when no search_term is given")
    category_id: int = Field(0, ge=0, description="Only products in this category (0 for any)")
    brand_id: int = Field(0, ge=0, description="Only products of this brand (0 for any)")
    search_category: SearchCategory = Field(
        SearchCategory.NAME, description="Which name the search_term is matched against"
    )


class InventoryReportResponse(BaseModel):
    products: List[ProductResponse]
    pagination: PaginationInfo
    search: InventoryReportSearch
    categories: List[CategoryOption]
    brands: List[BrandOption]


# 2. Top ten customers / suppliers
class TopCustomersResponse(BaseModel):
    customers: List[CustomerRankingResponse]


class TopSuppliersResponse(BaseModel):
    suppliers: List[SupplierRankingResponse]


# 3. Sales
class SalesReportResponse(BaseModel):
    start_date: datetime.date
    end_date: datetime.date
    customer_id: Optional[int] = None
    sale_orders: List[SaleOrderResponse]
    pagination: PaginationInfo
    total: float = Field(..., description="Sum of invoice amounts less returns for the returned orders")
    profit: float = Field(..., description="Sum of line item profit for the returned orders")
    profit_after_expenses: float
    expense_per_item: float = Field(..., description="Period expenses divided by the units sold in the period")


# 4. Outstanding invoices
class OutstandingInvoicesReportResponse(BaseModel):
    start_date: datetime.date
    end_date: datetime.date
    invoices: List[PurchaseOrderInvoiceResponse]
    pagination: PaginationInfo
    total: float = Field(..., description="Sum of the remaining amounts of the returned invoices")
