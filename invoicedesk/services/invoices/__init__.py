"""发票服务."""

from .invoice_read_service import InvoiceReadService
from .invoice_write_service import InvoiceWriteService

__all__ = ["InvoiceReadService", "InvoiceWriteService"]
