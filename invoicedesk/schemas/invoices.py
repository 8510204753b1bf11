"""发票写路径 schema."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pydantic import Field, field_validator

from invoicedesk.constants import InvoiceMessages, InvoiceStatus
from invoicedesk.schemas.base import PayloadSchema, QuerySchema

_CENTS_PER_UNIT = Decimal(100)
# invoices.amount 为 32 位有符号整数(分)
_MAX_AMOUNT_CENTS = 2**31 - 1
_MAX_AMOUNT = Decimal(_MAX_AMOUNT_CENTS) / _CENTS_PER_UNIT


def _parse_amount(value: Any) -> Decimal:
    # 空值按 0 处理, 与"金额必须大于 0"共用同一条提示
    if value is None:
        return Decimal(0)
    if isinstance(value, bool):
        raise ValueError(InvoiceMessages.AMOUNT_INVALID)
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return Decimal(0)
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            raise ValueError(InvoiceMessages.AMOUNT_INVALID) from None
    raise ValueError(InvoiceMessages.AMOUNT_INVALID)


class InvoiceFormPayload(PayloadSchema):
    """创建/更新发票的表单 payload.

    表单字段名沿用页面上的 ``customerId``/``amount``/``status``.
    """

    customer_id: str = Field(default=None, validation_alias="customerId", validate_default=True)
    amount: Decimal = Field(default=None, validate_default=True)
    status: InvoiceStatus = Field(default=None, validate_default=True)

    @field_validator("customer_id", mode="before")
    @classmethod
    def _validate_customer_id(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(InvoiceMessages.SELECT_CUSTOMER)
        return value.strip()

    @field_validator("amount", mode="before")
    @classmethod
    def _validate_amount(cls, value: Any) -> Decimal:
        parsed = _parse_amount(value)
        if not parsed.is_finite():
            raise ValueError(InvoiceMessages.AMOUNT_INVALID)
        if parsed <= 0:
            raise ValueError(InvoiceMessages.AMOUNT_GREATER_THAN_ZERO)
        if parsed > _MAX_AMOUNT:
            raise ValueError(InvoiceMessages.AMOUNT_INVALID)
        return parsed

    @field_validator("status", mode="before")
    @classmethod
    def _validate_status(cls, value: Any) -> InvoiceStatus:
        if isinstance(value, InvoiceStatus):
            return value
        if isinstance(value, str) and value in InvoiceStatus.values():
            return InvoiceStatus(value)
        raise ValueError(InvoiceMessages.SELECT_STATUS)

    @property
    def amount_in_cents(self) -> int:
        """金额换算为分, 按四舍五入取整."""
        return int((self.amount * _CENTS_PER_UNIT).quantize(Decimal(1), rounding=ROUND_HALF_UP))


class InvoiceListQuery(QuerySchema):
    """发票列表查询参数."""

    query: str = ""
    page: int = 1

    @field_validator("query", mode="before")
    @classmethod
    def _normalize_query(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("page", mode="before")
    @classmethod
    def _parse_page(cls, value: Any) -> int:
        if value is None or (isinstance(value, str) and not value.strip()):
            return 1
        try:
            page = int(value)
        except (TypeError, ValueError):
            return 1
        return max(page, 1)
