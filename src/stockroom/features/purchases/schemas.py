from pydantic import BaseModel, ConfigDict, Field
import datetime


class SupplierRankingResponse(BaseModel):
    id: int
    public_id: str = Field(..., description="Public unique identifier for the supplier (KSUID)")
    name: str
    order_count: int = Field(..., description="Number of non-cancelled purchase orders")
    total_revenue: float = Field(..., description="Sum of quantity * price over non-cancelled purchase orders")

    model_config = ConfigDict(from_attributes=True)


class PurchaseOrderInvoiceResponse(BaseModel):
    id: int
    public_id: str
    purchase_order_id: int
    supplier_name: str
    amount: float
    due_date: datetime.date
    amount_paid: float = Field(..., description="Payments converted to the base currency")
    remaining_amount: float = Field(..., description="amount - amount_paid")

    model_config = ConfigDict(from_attributes=True)
