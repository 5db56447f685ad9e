from enum import Enum

from tortoise import fields, models
from ...common.models import Currency, SoftDeleteMixin, TimestampMixin, generate_ksuid


class SaleOrderStatus(str, Enum):
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Customer(TimestampMixin, SoftDeleteMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    name = fields.CharField(max_length=255)
    email = fields.CharField(max_length=255, null=True)

    sale_orders: fields.ReverseRelation["SaleOrder"]

    def __str__(self):
        return self.name

    class Meta:
        table = "customers"


class SaleOrder(TimestampMixin, SoftDeleteMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    date = fields.DateField(db_index=True)
    status = fields.CharEnumField(SaleOrderStatus, default=SaleOrderStatus.DRAFT)

    customer: fields.ForeignKeyRelation[Customer] = fields.ForeignKeyField(
        "models.Customer", related_name="sale_orders", on_delete=fields.RESTRICT
    )

    line_items: fields.ReverseRelation["SaleOrderLineItem"]
    invoice: fields.BackwardOneToOneRelation["SaleOrderInvoice"]

    def __str__(self):
        return f"Sale order {self.public_id} ({self.date}) - Status: {self.status}"

    class Meta:
        table = "sale_orders"


class SaleOrderLineItem(models.Model):
    id = fields.IntField(primary_key=True)

    sale_order: fields.ForeignKeyRelation[SaleOrder] = fields.ForeignKeyField(
        "models.SaleOrder", related_name="line_items", on_delete=fields.CASCADE
    )
    product: fields.ForeignKeyRelation["Product"] = fields.ForeignKeyField(
        "models.Product", related_name="sale_line_items", on_delete=fields.RESTRICT
    )

    quantity = fields.IntField()
    price = fields.FloatField(description="Unit sale price")

    def __str__(self):
        return f"{self.quantity} x product {self.product_id} @ {self.price:.2f}"

    class Meta:
        table = "sale_order_line_items"


class SaleOrderInvoice(TimestampMixin, SoftDeleteMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )

    sale_order: fields.OneToOneRelation[SaleOrder] = fields.OneToOneField(
        "models.SaleOrder", related_name="invoice", on_delete=fields.CASCADE
    )

    amount = fields.FloatField()
    due_date = fields.DateField()

    payments: fields.ReverseRelation["SaleOrderInvoicePayment"]
    returns: fields.ReverseRelation["SaleOrderReturn"]

    class Meta:
        table = "sale_order_invoices"


class SaleOrderInvoicePayment(models.Model):
    id = fields.IntField(primary_key=True)

    invoice: fields.ForeignKeyRelation[SaleOrderInvoice] = fields.ForeignKeyField(
        "models.SaleOrderInvoice", related_name="payments", on_delete=fields.CASCADE
    )

    date = fields.DateField()
    amount = fields.FloatField()
    currency = fields.CharEnumField(Currency, default=Currency.GBP)
    conversion_rate = fields.FloatField(
        null=True, description="Units of this currency per unit of the base currency"
    )

    class Meta:
        table = "sale_order_invoice_payments"


class SaleOrderReturn(models.Model):
    id = fields.IntField(primary_key=True)

    invoice: fields.ForeignKeyRelation[SaleOrderInvoice] = fields.ForeignKeyField(
        "models.SaleOrderInvoice", related_name="returns", on_delete=fields.CASCADE
    )
    product: fields.ForeignKeyRelation["Product"] = fields.ForeignKeyField(
        "models.Product", related_name="sale_returns", on_delete=fields.RESTRICT
    )

    quantity = fields.IntField(default=1)
    value = fields.FloatField(description="Amount refunded for the returned goods")

    class Meta:
        table = "sale_order_returns"
