from pydantic import BaseModel, ConfigDict, Field


class PaginationInfo(BaseModel):
    current_page: int = Field(..., ge=1, description="Page number of the returned rows (1-based)")
    records_per_page: int = Field(..., ge=1, description="Maximum number of rows on a page")
    total_records: int = Field(..., ge=0, description="Number of rows matching the filters, before pagination")

    model_config = ConfigDict(from_attributes=True)


def page_offset(page: int, records_per_page: int) -> int:
    """Number of rows to skip to reach the start of `page`."""
    return records_per_page * (page - 1)
