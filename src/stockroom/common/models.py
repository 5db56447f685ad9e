"""Models module for the app.

This module contains the common database models for the application.
It includes a TimestampMixin class that provides created_at and updated_at
fields, a SoftDeleteMixin for records that are flagged rather than removed,
the Currency enum shared by sale and purchase payments, and a utility
function for generating KSUIDs (K-Sortable Unique IDentifiers)."""

from enum import Enum

from tortoise import fields, models
from ksuid import ksuid


def generate_ksuid():
    """Generate a K-Sortable Unique IDentifier (KSUID).

    KSUIDs are time-ordered identifiers that are URL-safe, timestamp
    prefixed, and sortable chronologically. They are used as the public
    identifiers exposed in report rows.

    Returns:
        str: A string representation of the generated KSUID.
    """
    return str(ksuid.Ksuid())


class Currency(str, Enum):
    GBP = "GBP"
    USD = "USD"
    EUR = "EUR"


class TimestampMixin(models.Model):
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        abstract = True


class SoftDeleteMixin:
    is_deleted = fields.BooleanField(default=False, db_index=True)
