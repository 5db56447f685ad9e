import asyncio
import datetime
import logging
from typing import Optional

import typer
from fastapi import HTTPException
from pydantic import BaseModel
from tortoise import Tortoise
from tortoise.exceptions import DoesNotExist

from stockroom.common.currency import InvalidConversionRateError
from stockroom.core.config import DATABASE_URL, RECORDS_PER_PAGE
from stockroom.core.logging_config import setup_logging
from stockroom.features.reports.schemas import InventoryReportSearch, SearchCategory
from stockroom.features.reports.service import ReportQueryEngine
from stockroom.main import build_tortoise_config

logger = logging.getLogger(__name__)

app = typer.Typer(name="stockroom", help="CLI for printing Stockroom reports.")

DbUrlOption = typer.Option(DATABASE_URL, "--db-url", envvar="DATABASE_URL", help="Tortoise database URL.")
PageOption = typer.Option(1, "--page", min=1, help="Page number (1-based).")
PageSizeOption = typer.Option(RECORDS_PER_PAGE, "--page-size", min=1, help="Rows per page.")
StartDateOption = typer.Option(..., "--start", formats=["%Y-%m-%d"], help="Start date (YYYY-MM-DD).")
EndDateOption = typer.Option(..., "--end", formats=["%Y-%m-%d"], help="End date (YYYY-MM-DD), inclusive.")


# Shared async context manager for database connection
class DBConnection:
    def __init__(self, db_url: str, generate_schemas: bool = False):
        self.db_url = db_url
        self.generate_schemas = generate_schemas

    async def __aenter__(self):
        await Tortoise.init(config=build_tortoise_config(self.db_url))
        if self.generate_schemas:
            await Tortoise.generate_schemas(safe=True) # Generate schema if it doesn't exist
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await Tortoise.close_connections()


def _echo_report(report: BaseModel) -> None:
    typer.echo(report.model_dump_json(indent=2))


async def _run_report(db_url: str, build_report) -> None:
    """Opens the database, builds one report and prints it; known failures exit with code 1."""
    # An in-memory database starts empty, so it needs its tables
    async with DBConnection(db_url, generate_schemas=":memory:" in db_url):
        try:
            report = await build_report()
        except HTTPException as e:
            typer.secho(f"Error: {e.detail}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        except DoesNotExist as e:
            typer.secho(f"Error: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        except InvalidConversionRateError as e:
            typer.secho(f"Error: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
    _echo_report(report)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level.")):
    """Prints Stockroom reports as JSON."""
    setup_logging("DEBUG" if verbose else "WARNING")


@app.command("init-db")
def init_db_command(db_url: str = DbUrlOption):
    """Creates any missing tables."""
    asyncio.run(_init_db(db_url))

async def _init_db(db_url: str):
    async with DBConnection(db_url, generate_schemas=True):
        typer.secho("Database schema is up to date.", fg=typer.colors.GREEN)


@app.command("inventory")
def inventory_command(
    search_term: Optional[str] = typer.Option(None, "--search", help="Text to look for."),
    search_category: SearchCategory = typer.Option(SearchCategory.NAME, "--by", help="Which name to search."),
    barcode: Optional[str] = typer.Option(None, "--barcode", help="Exact barcode."),
    category_id: int = typer.Option(0, "--category-id", min=0, help="Category filter (0 for any)."),
    brand_id: int = typer.Option(0, "--brand-id", min=0, help="Brand filter (0 for any)."),
    page: int = PageOption,
    page_size: int = PageSizeOption,
    db_url: str = DbUrlOption,
):
    """Prints the inventory report."""
    # The CLI has no previous request, so the search is treated as unchanged
    search = InventoryReportSearch(
        search_term=search_term, previous_search_term=search_term, barcode=barcode,
        category_id=category_id, brand_id=brand_id, search_category=search_category,
    )
    engine = ReportQueryEngine(records_per_page=page_size)
    asyncio.run(_run_report(db_url, lambda: engine.get_products(page, search)))


@app.command("top-customers")
def top_customers_command(db_url: str = DbUrlOption):
    """Prints the ten customers with the highest revenue."""
    asyncio.run(_run_report(db_url, ReportQueryEngine().get_top_ten_customers))


@app.command("top-suppliers")
def top_suppliers_command(db_url: str = DbUrlOption):
    """Prints the ten suppliers with the highest order value."""
    asyncio.run(_run_report(db_url, ReportQueryEngine().get_top_ten_suppliers))


@app.command("sales")
def sales_command(
    start: datetime.datetime = StartDateOption,
    end: datetime.datetime = EndDateOption,
    customer_id: Optional[int] = typer.Option(None, "--customer-id", help="Only this customer's orders."),
    page: int = PageOption,
    page_size: int = PageSizeOption,
    db_url: str = DbUrlOption,
):
    """Prints the sales report for a period."""
    engine = ReportQueryEngine(records_per_page=page_size)
    asyncio.run(_run_report(
        db_url, lambda: engine.get_sale_orders(page, start.date(), end.date(), customer_id=customer_id)
    ))


@app.command("outstanding-invoices")
def outstanding_invoices_command(
    start: datetime.datetime = StartDateOption,
    end: datetime.datetime = EndDateOption,
    page: int = PageOption,
    page_size: int = PageSizeOption,
    db_url: str = DbUrlOption,
):
    """Prints the purchase invoices due in a period that are not fully paid."""
    engine = ReportQueryEngine(records_per_page=page_size)
    asyncio.run(_run_report(
        db_url, lambda: engine.get_outstanding_invoices(page, start.date(), end.date())
    ))


if __name__ == "__main__":
    app()
