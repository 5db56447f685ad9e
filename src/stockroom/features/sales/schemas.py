from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
import datetime

from .models import SaleOrderStatus


class CustomerRankingResponse(BaseModel):
    id: int
    public_id: str = Field(..., description="Public unique identifier for the customer (KSUID)")
    name: str
    order_count: int = Field(..., description="Number of non-cancelled orders")
    total_revenue: float = Field(..., description="Sum of quantity * price over non-cancelled orders")

    model_config = ConfigDict(from_attributes=True)


class SaleOrderLineItemResponse(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    price: float = Field(..., description="Unit sale price")
    unit_cost_price: float
    profit: float = Field(..., description="(price - unit_cost_price) * quantity")

    model_config = ConfigDict(from_attributes=True)


class SaleOrderResponse(BaseModel):
    id: int
    public_id: str
    date: datetime.date
    status: SaleOrderStatus
    customer_id: int
    customer_name: str
    line_items: List[SaleOrderLineItemResponse]
    units: int = Field(..., description="Total quantity across the line items")
    invoice_amount: float = Field(0.0, description="Invoiced amount, 0 when the order has no active invoice")
    returns_total: float = Field(0.0, description="Value of goods returned against the invoice")
    net_amount: float = Field(0.0, description="invoice_amount - returns_total")
    profit: float = 0.0
    profit_after_expenses: float = 0.0
    invoice_due_date: Optional[datetime.date] = None

    model_config = ConfigDict(from_attributes=True)
