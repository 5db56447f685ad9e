"""Data models for the product catalogue: Category, Brand, Quality and Product."""

from tortoise import fields
from ...common.models import SoftDeleteMixin, TimestampMixin, generate_ksuid


class Category(TimestampMixin, SoftDeleteMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    name = fields.CharField(max_length=100, unique=True)
    description = fields.TextField(null=True)

    products: fields.ReverseRelation["Product"]

    def __str__(self):
        return self.name

    class Meta:
        table = "categories"


class Brand(TimestampMixin, SoftDeleteMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    name = fields.CharField(max_length=100, unique=True)

    products: fields.ReverseRelation["Product"]

    def __str__(self):
        return self.name

    class Meta:
        table = "brands"


class Quality(TimestampMixin, SoftDeleteMixin):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=100, unique=True)

    products: fields.ReverseRelation["Product"]

    def __str__(self):
        return self.name

    class Meta:
        table = "qualities"


class Product(TimestampMixin, SoftDeleteMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    name = fields.CharField(max_length=255)
    barcode = fields.CharField(max_length=64, null=True, db_index=True)
    quantity = fields.IntField(default=0)
    unit_cost_price = fields.FloatField(
        default=0.0, description="Cost of one unit, used for profit calculations"
    )

    category: fields.ForeignKeyRelation[Category] = fields.ForeignKeyField(
        "models.Category", related_name="products", on_delete=fields.RESTRICT
    )
    brand: fields.ForeignKeyRelation[Brand] = fields.ForeignKeyField(
        "models.Brand", related_name="products", on_delete=fields.RESTRICT
    )
    quality: fields.ForeignKeyNullableRelation[Quality] = fields.ForeignKeyField(
        "models.Quality",
        related_name="products",
        on_delete=fields.SET_NULL,
        null=True,
    )

    def __str__(self):
        return f"{self.name} (Stock: {self.quantity}, Cost: {self.unit_cost_price:.2f})"

    class Meta:
        table = "products"
