"""项目共享类型."""

from .invoices import InvoiceListFilters, InvoiceListRowProjection, InvoiceWriteValues
from .listing import PaginatedResult
from .results import Completed, Failure, InvoiceDeleteOutcome, InvoiceFormOutcome, Redirect
from .structures import (
    ContextMapping,
    FieldErrors,
    JsonDict,
    JsonValue,
    LoggerExtra,
    MutablePayloadDict,
    OptionDict,
    PayloadMapping,
    PayloadValue,
    StructlogEventDict,
)

__all__ = [
    "Completed",
    "ContextMapping",
    "Failure",
    "FieldErrors",
    "InvoiceDeleteOutcome",
    "InvoiceFormOutcome",
    "InvoiceListFilters",
    "InvoiceListRowProjection",
    "InvoiceWriteValues",
    "JsonDict",
    "JsonValue",
    "LoggerExtra",
    "MutablePayloadDict",
    "OptionDict",
    "PaginatedResult",
    "PayloadMapping",
    "PayloadValue",
    "Redirect",
    "StructlogEventDict",
]
