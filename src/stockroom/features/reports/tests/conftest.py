import datetime

import pytest_asyncio

from stockroom.features.inventory.models import Brand, Category, Product, Quality
from stockroom.features.purchases.models import (
    PurchaseOrder, PurchaseOrderInvoice, PurchaseOrderInvoicePayment,
    PurchaseOrderLineItem, PurchaseOrderStatus, Supplier,
)
from stockroom.features.sales.models import (
    Customer, SaleOrder, SaleOrderInvoice, SaleOrderLineItem, SaleOrderReturn, SaleOrderStatus,
)


def utc_today() -> datetime.date:
    return datetime.datetime.now(datetime.timezone.utc).date()


@pytest_asyncio.fixture(autouse=True)
async def report_db(initialize_test_db):
    """Every report test runs against a fresh in-memory database."""
    yield


@pytest_asyncio.fixture
async def phones_category() -> Category:
    return await Category.create(name="Phones")


@pytest_asyncio.fixture
async def cases_category() -> Category:
    return await Category.create(name="Cases")


@pytest_asyncio.fixture
async def acme_brand() -> Brand:
    return await Brand.create(name="Acme")


@pytest_asyncio.fixture
async def zenith_brand() -> Brand:
    return await Brand.create(name="Zenith")


@pytest_asyncio.fixture
async def grade_a() -> Quality:
    return await Quality.create(name="Grade A")


@pytest_asyncio.fixture
async def product_factory(phones_category: Category, acme_brand: Brand):
    """A factory to create products."""

    async def _factory(
        name: str,
        quantity: int = 10,
        unit_cost_price: float = 50.0,
        category: Category = phones_category,
        brand: Brand = acme_brand,
        quality: Quality = None,
        barcode: str = None,
        is_deleted: bool = False,
    ) -> Product:
        return await Product.create(
            name=name,
            quantity=quantity,
            unit_cost_price=unit_cost_price,
            category=category,
            brand=brand,
            quality=quality,
            barcode=barcode,
            is_deleted=is_deleted,
        )

    return _factory


@pytest_asyncio.fixture
async def customer_factory():
    async def _factory(name: str, is_deleted: bool = False) -> Customer:
        return await Customer.create(name=name, email=f"{name.lower().replace(' ', '.')}@example.com", is_deleted=is_deleted)

    return _factory


@pytest_asyncio.fixture
async def sale_order_factory():
    """
    A factory to create a sale order with line items and, optionally, an invoice.

    `items` is a list of (product, quantity, price) tuples and `returns`
    a list of returned values recorded against the invoice.
    """

    async def _factory(
        customer: Customer,
        items,
        date: datetime.date = None,
        status: SaleOrderStatus = SaleOrderStatus.COMPLETED,
        invoice_amount: float = None,
        returns=(),
        is_deleted: bool = False,
        invoice_deleted: bool = False,
    ) -> SaleOrder:
        date = date or utc_today()
        order = await SaleOrder.create(customer=customer, date=date, status=status, is_deleted=is_deleted)
        for product, quantity, price in items:
            await SaleOrderLineItem.create(sale_order=order, product=product, quantity=quantity, price=price)
        if invoice_amount is not None:
            invoice = await SaleOrderInvoice.create(
                sale_order=order, amount=invoice_amount,
                due_date=date + datetime.timedelta(days=30), is_deleted=invoice_deleted,
            )
            for value in returns:
                await SaleOrderReturn.create(invoice=invoice, product=items[0][0], quantity=1, value=value)
        return order

    return _factory


@pytest_asyncio.fixture
async def supplier_factory():
    async def _factory(name: str, is_deleted: bool = False) -> Supplier:
        return await Supplier.create(name=name, is_deleted=is_deleted)

    return _factory


@pytest_asyncio.fixture
async def purchase_order_factory():
    """A factory to create a purchase order from (product, quantity, price) tuples."""

    async def _factory(
        supplier: Supplier,
        items=(),
        date: datetime.date = None,
        status: PurchaseOrderStatus = PurchaseOrderStatus.RECEIVED,
        is_deleted: bool = False,
    ) -> PurchaseOrder:
        order = await PurchaseOrder.create(
            supplier=supplier, date=date or utc_today(), status=status, is_deleted=is_deleted
        )
        for product, quantity, price in items:
            await PurchaseOrderLineItem.create(purchase_order=order, product=product, quantity=quantity, price=price)
        return order

    return _factory


@pytest_asyncio.fixture
async def purchase_invoice_factory(purchase_order_factory):
    """
    A factory to create a purchase order invoice with payments.

    `payments` is a list of (amount, currency, conversion_rate) tuples.
    """

    async def _factory(
        supplier: Supplier,
        amount: float,
        due_date: datetime.date = None,
        payments=(),
        is_deleted: bool = False,
    ) -> PurchaseOrderInvoice:
        order = await purchase_order_factory(supplier)
        due_date = due_date or utc_today()
        invoice = await PurchaseOrderInvoice.create(
            purchase_order=order, amount=amount, due_date=due_date, is_deleted=is_deleted
        )
        for payment_amount, currency, rate in payments:
            await PurchaseOrderInvoicePayment.create(
                invoice=invoice, date=due_date, amount=payment_amount,
                currency=currency, conversion_rate=rate,
            )
        return invoice

    return _factory

