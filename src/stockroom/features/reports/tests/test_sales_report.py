import datetime
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from tortoise.exceptions import DoesNotExist

from stockroom.features.expenses.models import Expense
from stockroom.features.sales.models import SaleOrder, SaleOrderStatus
from stockroom.features.reports.service import ReportQueryEngine


def utc_today() -> datetime.date:
    return datetime.datetime.now(datetime.timezone.utc).date()


def days_ago(days: int) -> datetime.date:
    return utc_today() - datetime.timedelta(days=days)


@pytest.mark.asyncio
async def test_future_start_date_is_rejected_before_querying():
    tomorrow = utc_today() + datetime.timedelta(days=1)
    with patch.object(SaleOrder, "filter") as sale_order_filter:
        with pytest.raises(HTTPException) as exc_info:
            await ReportQueryEngine().get_sale_orders(1, tomorrow, tomorrow + datetime.timedelta(days=7))
    assert exc_info.value.status_code == 400
    assert "future" in exc_info.value.detail
    sale_order_filter.assert_not_called()


@pytest.mark.asyncio
async def test_missing_start_date_is_rejected():
    with pytest.raises(HTTPException) as exc_info:
        await ReportQueryEngine().get_sale_orders(1, None, utc_today())
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_total_is_invoice_amounts_less_returns(product_factory, customer_factory, sale_order_factory):
    phone = await product_factory(name="Pixel 8")
    customer = await customer_factory("Ada Shop")
    await sale_order_factory(customer, [(phone, 1, 100.0)], invoice_amount=100.0, returns=[15.0, 5.0])
    await sale_order_factory(customer, [(phone, 1, 50.0)], invoice_amount=50.0)

    report = await ReportQueryEngine().get_sale_orders(1, days_ago(7), utc_today())

    assert report.total == pytest.approx(130.0)
    returned = next(o for o in report.sale_orders if o.invoice_amount == 100.0)
    assert returned.returns_total == pytest.approx(20.0)
    assert returned.net_amount == pytest.approx(80.0)


@pytest.mark.asyncio
async def test_no_matching_orders_gives_zero_totals():
    report = await ReportQueryEngine().get_sale_orders(1, days_ago(7), utc_today())

    assert report.sale_orders == []
    assert report.total == 0
    assert report.profit == 0
    assert report.profit_after_expenses == 0
    assert report.pagination.total_records == 0


@pytest.mark.asyncio
async def test_profit_is_sale_price_less_unit_cost(product_factory, customer_factory, sale_order_factory):
    phone = await product_factory(name="Pixel 8", unit_cost_price=50.0)
    case = await product_factory(name="Pixel Case", unit_cost_price=4.0)
    customer = await customer_factory("Ada Shop")
    await sale_order_factory(customer, [(phone, 2, 80.0), (case, 3, 10.0)], invoice_amount=190.0)

    report = await ReportQueryEngine().get_sale_orders(1, days_ago(1), utc_today())

    order = report.sale_orders[0]
    assert [li.profit for li in order.line_items] == pytest.approx([60.0, 18.0])
    assert order.profit == pytest.approx(78.0)
    assert order.units == 5
    assert report.profit == pytest.approx(78.0)


@pytest.mark.asyncio
async def test_expenses_strictly_inside_period_are_spread_per_unit(
    product_factory, customer_factory, sale_order_factory
):
    phone = await product_factory(name="Pixel 8", unit_cost_price=50.0)
    customer = await customer_factory("Ada Shop")
    await sale_order_factory(customer, [(phone, 2, 80.0)], date=days_ago(3), invoice_amount=160.0)
    await sale_order_factory(customer, [(phone, 1, 80.0)], date=days_ago(2), invoice_amount=80.0)
    await Expense.create(date=days_ago(5), amount=30.0, description="Rent share")
    # On the period boundaries, so not allocated
    await Expense.create(date=days_ago(10), amount=1000.0)
    await Expense.create(date=utc_today(), amount=500.0)

    report = await ReportQueryEngine().get_sale_orders(1, days_ago(10), utc_today())

    assert report.expense_per_item == pytest.approx(10.0)
    two_units = next(o for o in report.sale_orders if o.units == 2)
    assert two_units.profit == pytest.approx(60.0)
    assert two_units.profit_after_expenses == pytest.approx(40.0)
    assert report.profit == pytest.approx(90.0)
    assert report.profit_after_expenses == pytest.approx(60.0)


@pytest.mark.asyncio
async def test_expense_per_item_is_zero_when_nothing_was_sold():
    await Expense.create(date=days_ago(3), amount=250.0)

    report = await ReportQueryEngine().get_sale_orders(1, days_ago(10), utc_today())

    assert report.expense_per_item == 0
    assert report.profit_after_expenses == 0


@pytest.mark.asyncio
async def test_orders_are_filtered_sorted_and_paginated(product_factory, customer_factory, sale_order_factory):
    phone = await product_factory(name="Pixel 8")
    customer = await customer_factory("Ada Shop")
    for days in (1, 4, 2, 3):
        await sale_order_factory(customer, [(phone, 1, 80.0)], date=days_ago(days), invoice_amount=80.0)
    await sale_order_factory(customer, [(phone, 1, 80.0)], date=days_ago(30), invoice_amount=80.0)
    await sale_order_factory(customer, [(phone, 1, 80.0)], date=days_ago(2), is_deleted=True)
    engine = ReportQueryEngine(records_per_page=3)

    first = await engine.get_sale_orders(1, days_ago(4), days_ago(1))
    second = await engine.get_sale_orders(2, days_ago(4), days_ago(1))

    assert [o.date for o in first.sale_orders] == [days_ago(1), days_ago(2), days_ago(3)]
    assert [o.date for o in second.sale_orders] == [days_ago(4)]
    assert first.pagination.total_records == 4
    assert second.pagination.current_page == 2
    assert first.total == pytest.approx(240.0)


@pytest.mark.asyncio
async def test_order_without_active_invoice_contributes_nothing_to_total(
    product_factory, customer_factory, sale_order_factory
):
    phone = await product_factory(name="Pixel 8")
    customer = await customer_factory("Ada Shop")
    await sale_order_factory(customer, [(phone, 1, 80.0)], invoice_amount=80.0, invoice_deleted=True)
    await sale_order_factory(customer, [(phone, 1, 80.0)])

    report = await ReportQueryEngine().get_sale_orders(1, days_ago(1), utc_today())

    assert len(report.sale_orders) == 2
    assert report.total == 0
    assert all(o.invoice_due_date is None for o in report.sale_orders)


@pytest.mark.asyncio
async def test_customer_sales_only_include_that_customer(product_factory, customer_factory, sale_order_factory):
    phone = await product_factory(name="Pixel 8")
    ada = await customer_factory("Ada Shop")
    bob = await customer_factory("Bob Mobiles")
    await sale_order_factory(ada, [(phone, 1, 80.0)], invoice_amount=80.0)
    await sale_order_factory(bob, [(phone, 2, 75.0)], invoice_amount=150.0, status=SaleOrderStatus.SHIPPED)

    report = await ReportQueryEngine().get_customer_sale_orders(1, days_ago(1), utc_today(), bob.id)

    assert report.customer_id == bob.id
    assert [o.customer_name for o in report.sale_orders] == ["Bob Mobiles"]
    assert report.sale_orders[0].status == SaleOrderStatus.SHIPPED
    assert report.total == pytest.approx(150.0)
    assert report.pagination.total_records == 1


@pytest.mark.asyncio
async def test_customer_sales_for_unknown_customer_is_not_found(customer_factory):
    deleted = await customer_factory("Gone Ltd", is_deleted=True)
    engine = ReportQueryEngine()

    with pytest.raises(DoesNotExist):
        await engine.get_customer_sale_orders(1, days_ago(1), utc_today(), 9999)
    with pytest.raises(DoesNotExist):
        await engine.get_customer_sale_orders(1, days_ago(1), utc_today(), deleted.id)


@pytest.mark.asyncio
async def test_cancelled_orders_and_deleted_customers_sell_no_units(
    product_factory, customer_factory, sale_order_factory
):
    phone = await product_factory(name="Pixel 8", unit_cost_price=50.0)
    customer = await customer_factory("Ada Shop")
    gone = await customer_factory("Gone Ltd", is_deleted=True)
    await sale_order_factory(customer, [(phone, 2, 80.0)], date=days_ago(3), invoice_amount=160.0)
    await sale_order_factory(customer, [(phone, 2, 80.0)], date=days_ago(3), status=SaleOrderStatus.CANCELLED)
    await sale_order_factory(gone, [(phone, 4, 80.0)], date=days_ago(3), invoice_amount=320.0)
    await Expense.create(date=days_ago(5), amount=40.0)

    report = await ReportQueryEngine().get_sale_orders(1, days_ago(10), utc_today())

    assert report.expense_per_item == pytest.approx(20.0)
    completed = next(o for o in report.sale_orders if o.status == SaleOrderStatus.COMPLETED)
    assert completed.profit_after_expenses == pytest.approx(20.0)
