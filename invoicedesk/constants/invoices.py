"""发票相关常量.

发票状态、列表页路径以及表单提示文案集中在这里维护,
表单提示沿用前端页面的英文文案.
"""

from __future__ import annotations

from enum import Enum
from typing import Final

INVOICES_LIST_PATH: Final[str] = "/dashboard/invoices"
INVOICE_LIST_PAGE_SIZE: Final[int] = 6


class InvoiceStatus(str, Enum):
    """发票状态."""

    PENDING = "pending"
    PAID = "paid"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        """返回全部合法状态值."""
        return tuple(member.value for member in cls)


class InvoiceMessages:
    """发票表单提示文案."""

    SELECT_CUSTOMER = "Please select a customer."
    AMOUNT_GREATER_THAN_ZERO = "Please enter an amount greater than $0."
    AMOUNT_INVALID = "Please enter a valid amount."
    SELECT_STATUS = "Please select an invoice status."

    CREATE_MISSING_FIELDS = "Missing Fields. Failed to Create Invoice."
    UPDATE_MISSING_FIELDS = "Missing Fields. Failed to Update Invoice."

    CREATE_FAILED = "Failed to create invoice."
    UPDATE_FAILED = "Failed to update invoice."
    DELETE_FAILED = "Failed to delete invoice."

    CREATED = "Invoice created."
    UPDATED = "Invoice updated."
    DELETED = "Invoice deleted."
