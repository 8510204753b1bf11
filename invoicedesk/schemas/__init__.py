"""写路径 schema."""

from .invoices import InvoiceFormPayload, InvoiceListQuery
from .validation import collect_field_errors, validate_or_raise

__all__ = [
    "InvoiceFormPayload",
    "InvoiceListQuery",
    "collect_field_errors",
    "validate_or_raise",
]
