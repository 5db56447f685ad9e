import logging

from ...common.currency import round_money
from .models import PurchaseOrder, PurchaseOrderInvoice, Supplier
from .schemas import PurchaseOrderInvoiceResponse, SupplierRankingResponse

logger = logging.getLogger(__name__)


async def get_supplier_name_for_purchase_order(purchase_order_id: int) -> str:
    """
    Looks up the name of the supplier a purchase order was placed with.

    Args:
        purchase_order_id: The id of the purchase order.

    Returns:
        The supplier's name.

    Raises:
        tortoise.exceptions.DoesNotExist: if the purchase order does not exist.
    """
    purchase_order = await PurchaseOrder.get(id=purchase_order_id).prefetch_related("supplier")
    return purchase_order.supplier.name


def to_supplier_ranking(supplier: Supplier, order_count: int, total_revenue: float) -> SupplierRankingResponse:
    return SupplierRankingResponse(
        id=supplier.id,
        public_id=supplier.public_id,
        name=supplier.name,
        order_count=order_count,
        total_revenue=total_revenue,
    )


def to_purchase_invoice_response(
    invoice: PurchaseOrderInvoice, supplier_name: str, amount_paid: float
) -> PurchaseOrderInvoiceResponse:
    return PurchaseOrderInvoiceResponse(
        id=invoice.id,
        public_id=invoice.public_id,
        purchase_order_id=invoice.purchase_order_id,
        supplier_name=supplier_name,
        amount=invoice.amount,
        due_date=invoice.due_date,
        amount_paid=amount_paid,
        remaining_amount=round_money(invoice.amount - amount_paid),
    )
