from enum import Enum

from tortoise import fields, models
from ...common.models import Currency, SoftDeleteMixin, TimestampMixin, generate_ksuid


class PurchaseOrderStatus(str, Enum):
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class Supplier(TimestampMixin, SoftDeleteMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    name = fields.CharField(max_length=255)
    email = fields.CharField(max_length=255, null=True)

    purchase_orders: fields.ReverseRelation["PurchaseOrder"]

    def __str__(self):
        return self.name

    class Meta:
        table = "suppliers"


class PurchaseOrder(TimestampMixin, SoftDeleteMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    date = fields.DateField(db_index=True)
    status = fields.CharEnumField(PurchaseOrderStatus, default=PurchaseOrderStatus.DRAFT)

    supplier: fields.ForeignKeyRelation[Supplier] = fields.ForeignKeyField(
        "models.Supplier", related_name="purchase_orders", on_delete=fields.RESTRICT
    )

    line_items: fields.ReverseRelation["PurchaseOrderLineItem"]
    invoice: fields.BackwardOneToOneRelation["PurchaseOrderInvoice"]

    def __str__(self):
        return f"Purchase order {self.public_id} ({self.date}) - Status: {self.status}"

    class Meta:
        table = "purchase_orders"


class PurchaseOrderLineItem(models.Model):
    id = fields.IntField(primary_key=True)

    purchase_order: fields.ForeignKeyRelation[PurchaseOrder] = fields.ForeignKeyField(
        "models.PurchaseOrder", related_name="line_items", on_delete=fields.CASCADE
    )
    product: fields.ForeignKeyRelation["Product"] = fields.ForeignKeyField(
        "models.Product", related_name="purchase_line_items", on_delete=fields.RESTRICT
    )

    quantity = fields.IntField()
    price = fields.FloatField(description="Unit purchase price")

    class Meta:
        table = "purchase_order_line_items"


class PurchaseOrderInvoice(TimestampMixin, SoftDeleteMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )

    purchase_order: fields.OneToOneRelation[PurchaseOrder] = fields.OneToOneField(
        "models.PurchaseOrder", related_name="invoice", on_delete=fields.CASCADE
    )

    amount = fields.FloatField()
    due_date = fields.DateField(db_index=True)

    payments: fields.ReverseRelation["PurchaseOrderInvoicePayment"]

    def __str__(self):
        return f"Invoice {self.public_id} for purchase order {self.purchase_order_id} due {self.due_date}"

    class Meta:
        table = "purchase_order_invoices"


class PurchaseOrderInvoicePayment(models.Model):
    id = fields.IntField(primary_key=True)

    invoice: fields.ForeignKeyRelation[PurchaseOrderInvoice] = fields.ForeignKeyField(
        "models.PurchaseOrderInvoice", related_name="payments", on_delete=fields.CASCADE
    )

    date = fields.DateField()
    amount = fields.FloatField()
    currency = fields.CharEnumField(Currency, default=Currency.GBP)
    conversion_rate = fields.FloatField(
        null=True, description="Units of this currency per unit of the base currency"
    )

    class Meta:
        table = "purchase_order_invoice_payments"
