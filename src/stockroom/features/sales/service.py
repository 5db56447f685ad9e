import logging
from typing import List, Optional

from .models import Customer, SaleOrder, SaleOrderInvoice, SaleOrderLineItem
from .schemas import (
    CustomerRankingResponse,
    SaleOrderLineItemResponse,
    SaleOrderResponse,
)

logger = logging.getLogger(__name__)


async def get_active_customer(customer_id: int) -> Customer:
    """
    Fetches a customer that has not been soft-deleted.

    Raises:
        tortoise.exceptions.DoesNotExist: if no such customer exists.
    """
    return await Customer.get(id=customer_id, is_deleted=False)


def to_customer_ranking(customer: Customer, order_count: int, total_revenue: float) -> CustomerRankingResponse:
    return CustomerRankingResponse(
        id=customer.id,
        public_id=customer.public_id,
        name=customer.name,
        order_count=order_count,
        total_revenue=total_revenue,
    )


def to_line_item_response(line_item: SaleOrderLineItem, profit: float) -> SaleOrderLineItemResponse:
    """Converts a SaleOrderLineItem (with its product fetched) to a SaleOrderLineItemResponse."""
    return SaleOrderLineItemResponse(
        product_id=line_item.product_id,
        product_name=line_item.product.name,
        quantity=line_item.quantity,
        price=line_item.price,
        unit_cost_price=line_item.product.unit_cost_price,
        profit=profit,
    )


def to_sale_order_response(
    order: SaleOrder,
    line_items: List[SaleOrderLineItemResponse],
    invoice: Optional[SaleOrderInvoice],
    returns_total: float,
) -> SaleOrderResponse:
    """
    Converts a SaleOrder (with its customer fetched) to a SaleOrderResponse.

    The invoice figures default to zero when the order has no active invoice.
    Profit fields are left for the caller to fill in.
    """
    invoice_amount = invoice.amount if invoice else 0.0
    returns_total = returns_total if invoice else 0.0
    return SaleOrderResponse(
        id=order.id,
        public_id=order.public_id,
        date=order.date,
        status=order.status,
        customer_id=order.customer_id,
        customer_name=order.customer.name,
        line_items=line_items,
        units=sum(li.quantity for li in line_items),
        invoice_amount=invoice_amount,
        returns_total=returns_total,
        net_amount=invoice_amount - returns_total,
        invoice_due_date=invoice.due_date if invoice else None,
    )
