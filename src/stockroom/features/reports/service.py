"""
Reports Service Module

This module provides the ReportQueryEngine, which generates the business reports
for the Stockroom application: the inventory listing, top customers and suppliers,
sales reports with profit figures, and outstanding purchase invoices.

The engine keeps no state between calls apart from its page size. Each call
re-queries the store, converts the rows into response schemas and computes
the report totals.
"""

import datetime
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from fastapi import HTTPException, status

from ...common.currency import round_money, total_paid
from ...common.pagination import PaginationInfo, page_offset
from ...core.config import BASE_CURRENCY, RECORDS_PER_PAGE

# Models from other features
from ..expenses.models import Expense
from ..inventory.models import Product
from ..purchases.models import (
    PurchaseOrder, PurchaseOrderInvoice, PurchaseOrderInvoicePayment, PurchaseOrderLineItem,
    PurchaseOrderStatus, Supplier
)
from ..sales.models import (
    Customer, SaleOrder, SaleOrderInvoice, SaleOrderLineItem, SaleOrderStatus
)

# Row conversion for each feature
from ..inventory import service as inventory_service
from ..purchases import service as purchases_service
from ..sales import service as sales_service

from .schemas import (
    InventoryReportResponse, InventoryReportSearch, OutstandingInvoicesReportResponse,
    SalesReportResponse, TopCustomersResponse, TopSuppliersResponse
)
from .search import DEFAULT_SORT_KEY, search_mode_for

logger = logging.getLogger(__name__)

TOP_RANKING_LIMIT = 10


def line_item_profit(price: float, unit_cost_price: float, quantity: int) -> float:
    return (price - unit_cost_price) * quantity


def expense_per_item(total_expenses: float, units_sold: int) -> float:
    """Spreads the period's expenses evenly over every unit sold; 0 when nothing was sold."""
    if not units_sold:
        return 0.0
    return total_expenses / units_sold


def have_search_terms_changed(search: InventoryReportSearch) -> bool:
    return (search.search_term or "") != (search.previous_search_term or "")


def validate_start_date(start_date: Optional[datetime.date]) -> None:
    """
    Rejects a missing start date, or one that lies in the future.

    Raises:
        HTTPException: 400 if the start date is unusable.
    """
    if start_date is None:
        logger.warning("Report requested without a start date")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="The start date cannot be null!"
        )
    if isinstance(start_date, datetime.datetime):
        start_date = start_date.date()
    if start_date > datetime.datetime.now(datetime.timezone.utc).date():
        logger.warning("Report requested with a future start date: %s", start_date)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="The start date cannot be set in the future!"
        )


def rank_by_revenue(
    orders: Iterable[dict], owner_key: str, line_items: Iterable[dict], order_key: str,
    limit: int = TOP_RANKING_LIMIT
) -> List[Tuple[int, int, float]]:
    """
    Ranks order owners (customers or suppliers) by the revenue of their orders.

    Args:
        orders: Rows with "id" and the owner column named by owner_key.
        owner_key: Column holding the owner id, e.g. "customer_id".
        line_items: Rows with "quantity", "price" and the order column named by order_key.
        order_key: Column holding the order id, e.g. "sale_order_id".
        limit: Maximum number of owners to return.

    Returns:
        (owner_id, order_count, revenue) tuples, highest revenue first, ties by owner id.
    """
    owner_of_order: Dict[int, int] = {}
    order_counts: Dict[int, int] = defaultdict(int)
    for order in orders:
        owner_of_order[order["id"]] = order[owner_key]
        order_counts[order[owner_key]] += 1

    revenue: Dict[int, float] = defaultdict(float)
    for item in line_items:
        owner_id = owner_of_order.get(item[order_key])
        if owner_id is None or item["quantity"] is None or item["price"] is None:
            continue
        revenue[owner_id] += item["quantity"] * item["price"]

    ranked = sorted(order_counts, key=lambda owner_id: (-revenue[owner_id], owner_id))
    return [(owner_id, order_counts[owner_id], revenue[owner_id]) for owner_id in ranked[:limit]]


class ReportQueryEngine:
    """
    Generates paginated report view models from the store.

    Args:
        records_per_page: Page size used by every paginated report.
        base_currency: Currency that payments are normalised into.
    """

    def __init__(self, records_per_page: int = RECORDS_PER_PAGE, base_currency: str = BASE_CURRENCY):
        if records_per_page < 1:
            raise ValueError(f"records_per_page must be a positive integer, got {records_per_page}")
        self.records_per_page = records_per_page
        self.base_currency = base_currency

    def _pagination(self, page: int, total_records: int) -> PaginationInfo:
        return PaginationInfo(
            current_page=page, records_per_page=self.records_per_page, total_records=total_records
        )

    @staticmethod
    def _validate_page(page: int) -> None:
        if page < 1:
            logger.warning("Report requested for invalid page %s", page)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="The page number must be 1 or greater."
            )

    async def get_products(self, page: int, search: InventoryReportSearch) -> InventoryReportResponse:
        """
        Generates the inventory report.

        A barcode on its own selects the product with that exact barcode. A search
        term is matched case-insensitively against the product, category or brand
        name (per search.search_category) and orders the rows by that name. Without
        either, products are ordered by quantity, lowest stock first. The category
        and brand filters narrow every variant.

        The page is reset to 1 when the search term differs from the previous
        one, and the returned search echoes the current term as the previous
        term for the next request.

        Args:
            page: Requested page number.
            search: The search and filter inputs.

        Returns:
            InventoryReportResponse: the page of products, pagination info, the
            echoed search and the active categories and brands.
        """
        search = search.model_copy()
        if have_search_terms_changed(search):
            page = 1
        self._validate_page(page)

        term = (search.search_term or "").strip()
        barcode = (search.barcode or "").strip()
        sort_key = DEFAULT_SORT_KEY

        query = Product.filter(is_deleted=False)
        if barcode and not term:
            query = query.filter(barcode=barcode)
        elif term:
            mode = search_mode_for(search.search_category)
            query = query.filter(mode.matching(term))
            sort_key = mode.sort_key
        if search.category_id:
            query = query.filter(category_id=search.category_id)
        if search.brand_id:
            query = query.filter(brand_id=search.brand_id)

        total_records = await query.count()
        products = (
            await query.order_by(sort_key, "id")
            .offset(page_offset(page, self.records_per_page))
            .limit(self.records_per_page)
            .prefetch_related("category", "brand", "quality")
        )
        logger.debug(
            "Inventory report page %s: %s of %s products (sorted by %s)",
            page, len(products), total_records, sort_key
        )

        search.previous_search_term = search.search_term
        return InventoryReportResponse(
            products=[inventory_service.to_product_response(p) for p in products],
            pagination=self._pagination(page, total_records),
            search=search,
            categories=await inventory_service.list_active_categories(),
            brands=await inventory_service.list_active_brands(),
        )

    async def get_top_ten_customers(self) -> TopCustomersResponse:
        """
        Ranks customers by the revenue of their non-cancelled orders.

        Soft-deleted customers and orders are left out, as are customers
        without any remaining order.
        """
        orders = await (
            SaleOrder.filter(is_deleted=False, customer__is_deleted=False)
            .exclude(status=SaleOrderStatus.CANCELLED)
            .values("id", "customer_id")
        )
        if not orders:
            return TopCustomersResponse(customers=[])

        line_items = await SaleOrderLineItem.filter(
            sale_order_id__in=[o["id"] for o in orders]
        ).values("sale_order_id", "quantity", "price")
        ranking = rank_by_revenue(orders, "customer_id", line_items, "sale_order_id")

        customers = {c.id: c for c in await Customer.filter(id__in=[r[0] for r in ranking])}
        return TopCustomersResponse(customers=[
            sales_service.to_customer_ranking(customers[customer_id], order_count, revenue)
            for customer_id, order_count, revenue in ranking
        ])

    async def get_top_ten_suppliers(self) -> TopSuppliersResponse:
        """
        Ranks suppliers by the value of their non-cancelled purchase orders.

        Soft-deleted suppliers and purchase orders are left out, as are
        suppliers without any remaining purchase order.
        """
        orders = await (
            PurchaseOrder.filter(is_deleted=False, supplier__is_deleted=False)
            .exclude(status=PurchaseOrderStatus.CANCELLED)
            .values("id", "supplier_id")
        )
        if not orders:
            return TopSuppliersResponse(suppliers=[])

        line_items = await PurchaseOrderLineItem.filter(
            purchase_order_id__in=[o["id"] for o in orders]
        ).values("purchase_order_id", "quantity", "price")
        ranking = rank_by_revenue(orders, "supplier_id", line_items, "purchase_order_id")

        suppliers = {s.id: s for s in await Supplier.filter(id__in=[r[0] for r in ranking])}
        return TopSuppliersResponse(suppliers=[
            purchases_service.to_supplier_ranking(suppliers[supplier_id], order_count, revenue)
            for supplier_id, order_count, revenue in ranking
        ])

    async def _expense_per_item(self, start_date: datetime.date, end_date: datetime.date) -> float:
        # Expenses strictly inside the period, units from the orders sold in it
        expenses = await Expense.filter(date__gt=start_date, date__lt=end_date).values_list("amount", flat=True)
        units = await SaleOrderLineItem.filter(
            sale_order__is_deleted=False,
            sale_order__customer__is_deleted=False,
            sale_order__date__gte=start_date,
            sale_order__date__lte=end_date,
        ).exclude(sale_order__status=SaleOrderStatus.CANCELLED).values_list("quantity", flat=True)
        return expense_per_item(sum(expenses), sum(units))

    async def get_sale_orders(
        self,
        page: int,
        start_date: datetime.date,
        end_date: datetime.date,
        customer_id: Optional[int] = None,
    ) -> SalesReportResponse:
        """
        Generates the sales report for orders dated within a period.

        Orders are listed newest first. Each line item's profit is its sale price
        less the product's unit cost, times the quantity. The period's expenses
        are shared evenly across every unit sold in the period, giving each
        order a profit after expenses.

        Args:
            page: Requested page number.
            start_date: First day of the period; may not be in the future.
            end_date: Last day of the period (inclusive).
            customer_id: Optionally restrict the report to one customer.

        Returns:
            SalesReportResponse: the page of orders with their figures, and the
            totals (net sales, profit, profit after expenses) over that page.

        Raises:
            HTTPException: 400 for a missing or future start date or a bad page.
            tortoise.exceptions.DoesNotExist: for an unknown customer.
        """
        validate_start_date(start_date)
        self._validate_page(page)
        logger.info(
            "Generating sales report for %s..%s (customer=%s, page=%s)", start_date, end_date, customer_id, page
        )

        filters = {
            "date__gte": start_date,
            "date__lte": end_date,
            "is_deleted": False,
            "customer__is_deleted": False,
        }
        if customer_id is not None:
            await sales_service.get_active_customer(customer_id)
            filters["customer_id"] = customer_id

        query = SaleOrder.filter(**filters)
        total_records = await query.count()
        orders = (
            await query.order_by("-date", "-id")
            .offset(page_offset(page, self.records_per_page))
            .limit(self.records_per_page)
            .prefetch_related("customer")
        )
        order_ids = [order.id for order in orders]

        line_items_by_order = defaultdict(list)
        invoices_by_order = {}
        if order_ids:
            for line_item in await SaleOrderLineItem.filter(sale_order_id__in=order_ids).order_by("id").prefetch_related("product"):
                line_items_by_order[line_item.sale_order_id].append(line_item)
            for invoice in await SaleOrderInvoice.filter(sale_order_id__in=order_ids, is_deleted=False).prefetch_related("returns"):
                invoices_by_order[invoice.sale_order_id] = invoice

        allocation = await self._expense_per_item(start_date, end_date)

        sale_order_rows = []
        for order in orders:
            line_item_rows = [
                sales_service.to_line_item_response(
                    li, line_item_profit(li.price, li.product.unit_cost_price, li.quantity)
                )
                for li in line_items_by_order[order.id]
            ]
            invoice = invoices_by_order.get(order.id)
            returns_total = sum(r.value for r in invoice.returns) if invoice else 0.0
            row = sales_service.to_sale_order_response(order, line_item_rows, invoice, returns_total)
            row.profit = sum(li.profit for li in line_item_rows)
            row.profit_after_expenses = row.profit - allocation * row.units
            sale_order_rows.append(row)

        return SalesReportResponse(
            start_date=start_date,
            end_date=end_date,
            customer_id=customer_id,
            sale_orders=sale_order_rows,
            pagination=self._pagination(page, total_records),
            total=sum(row.net_amount for row in sale_order_rows) if sale_order_rows else 0.0,
            profit=sum(row.profit for row in sale_order_rows),
            profit_after_expenses=sum(row.profit_after_expenses for row in sale_order_rows),
            expense_per_item=allocation,
        )

    async def get_customer_sale_orders(
        self, page: int, start_date: datetime.date, end_date: datetime.date, customer_id: int
    ) -> SalesReportResponse:
        """Generates the sales report for a single customer's orders. See get_sale_orders."""
        return await self.get_sale_orders(page, start_date, end_date, customer_id=customer_id)

    async def get_outstanding_invoices(
        self, page: int, start_date: datetime.date, end_date: datetime.date
    ) -> OutstandingInvoicesReportResponse:
        """
        Generates the report of purchase invoices that are not yet paid in full.

        An invoice is outstanding when its payments, converted to the base
        currency and rounded to money precision, add up to less than the
        invoice amount. Invoices are listed by
        due date, latest first, with the name of the supplier they are owed to.

        Args:
            page: Requested page number.
            start_date: First due date to include; may not be in the future.
            end_date: Last due date to include (inclusive).

        Returns:
            OutstandingInvoicesReportResponse: the page of invoices and the sum
            of their remaining amounts. The total covers the returned page only.

        Raises:
            HTTPException: 400 for a missing or future start date or a bad page.
            tortoise.exceptions.DoesNotExist: if an invoice's purchase order is missing.
            InvalidConversionRateError: for a foreign payment without a usable rate.
        """
        validate_start_date(start_date)
        self._validate_page(page)
        logger.info("Generating outstanding invoices report for %s..%s (page=%s)", start_date, end_date, page)

        in_range = {
            "is_deleted": False,
            "purchase_order__is_deleted": False,
            "due_date__gte": start_date,
            "due_date__lte": end_date,
        }
        # Value rows for the whole range, full records for the page only
        candidates = await (
            PurchaseOrderInvoice.filter(**in_range).order_by("-due_date", "-id").values("id", "amount")
        )
        payments_by_invoice = defaultdict(list)
        for payment in await PurchaseOrderInvoicePayment.filter(
            **{f"invoice__{lookup}": value for lookup, value in in_range.items()}
        ).values("invoice_id", "amount", "currency", "conversion_rate"):
            payments_by_invoice[payment["invoice_id"]].append(payment)

        outstanding = []
        for candidate in candidates:
            paid = total_paid(payments_by_invoice[candidate["id"]], self.base_currency)
            if paid < round_money(candidate["amount"]):
                outstanding.append((candidate["id"], paid))

        offset = page_offset(page, self.records_per_page)
        page_of_outstanding = outstanding[offset:offset + self.records_per_page]
        invoices = {}
        if page_of_outstanding:
            invoices = {
                invoice.id: invoice
                for invoice in await PurchaseOrderInvoice.filter(id__in=[i for i, _ in page_of_outstanding])
            }
        logger.debug(
            "Outstanding invoices page %s: %s of %s outstanding (%s in range)",
            page, len(page_of_outstanding), len(outstanding), len(candidates)
        )

        invoice_rows = []
        for invoice_id, paid in page_of_outstanding:
            invoice = invoices[invoice_id]
            supplier_name = await purchases_service.get_supplier_name_for_purchase_order(invoice.purchase_order_id)
            invoice_rows.append(purchases_service.to_purchase_invoice_response(invoice, supplier_name, paid))

        return OutstandingInvoicesReportResponse(
            start_date=start_date,
            end_date=end_date,
            invoices=invoice_rows,
            pagination=self._pagination(page, len(outstanding)),
            total=round_money(sum(row.remaining_amount for row in invoice_rows)),
        )


def get_report_engine() -> ReportQueryEngine:
    """FastAPI dependency providing an engine with the configured page size."""
    return ReportQueryEngine(records_per_page=RECORDS_PER_PAGE)
