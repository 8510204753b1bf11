"""发票读写相关类型."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(slots=True)
class InvoiceListFilters:
    """发票列表筛选条件."""

    query: str
    page: int
    limit: int


@dataclass(slots=True)
class InvoiceListRowProjection:
    """发票列表行投影(发票 + 客户展示信息)."""

    id: str
    customer_id: str
    amount: int
    status: str
    date: date
    customer_name: str
    customer_email: str
    customer_image_url: str | None


@dataclass(slots=True)
class InvoiceWriteValues:
    """写入 invoices 表的列值.

    amount 已换算为分,date 只在创建时提供.
    """

    customer_id: str
    amount: int
    status: str
    date: date | None = None
