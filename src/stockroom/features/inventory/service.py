import logging
from typing import List

from .models import Brand, Category, Product
from .schemas import BrandOption, CategoryOption, ProductResponse

logger = logging.getLogger(__name__)


def to_product_response(product: Product) -> ProductResponse:
    """Converts a Product (with category, brand and quality fetched) to a ProductResponse."""
    return ProductResponse(
        id=product.id,
        public_id=product.public_id,
        name=product.name,
        barcode=product.barcode,
        quantity=product.quantity,
        unit_cost_price=product.unit_cost_price,
        category=product.category.name if product.category else None,
        brand=product.brand.name if product.brand else None,
        quality=product.quality.name if product.quality else None,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


async def list_active_categories() -> List[CategoryOption]:
    """
    Lists the categories that are not soft-deleted, ordered by name.

    Returns:
        The category options for populating a filter dropdown.
    """
    categories = await Category.filter(is_deleted=False).order_by("name")
    return [CategoryOption.model_validate(c) for c in categories]


async def list_active_brands() -> List[BrandOption]:
    """
    Lists the brands that are not soft-deleted, ordered by name.

    Returns:
        The brand options for populating a filter dropdown.
    """
    brands = await Brand.filter(is_deleted=False).order_by("name")
    return [BrandOption.model_validate(b) for b in brands]
