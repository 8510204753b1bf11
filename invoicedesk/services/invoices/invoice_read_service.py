"""发票读操作 Service.

列表结果经由视图缓存服务缓存,写操作提交后整体失效.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlencode

from flask import current_app, has_app_context

from invoicedesk.constants import INVOICE_LIST_PAGE_SIZE, INVOICES_LIST_PATH
from invoicedesk.errors import NotFoundError
from invoicedesk.repositories.customers_repository import CustomersRepository
from invoicedesk.repositories.invoices_repository import InvoicesRepository
from invoicedesk.services.cache_service import get_view_cache_service
from invoicedesk.types import InvoiceListFilters
from invoicedesk.utils.time_utils import time_utils

if TYPE_CHECKING:
    from invoicedesk.models.invoice import Invoice
    from invoicedesk.schemas.invoices import InvoiceListQuery
    from invoicedesk.services.cache_service import ViewCacheService
    from invoicedesk.types import InvoiceListRowProjection, JsonDict, OptionDict


def _format_amount(amount: int) -> str:
    return f"{amount // 100}.{amount % 100:02d}"


class InvoiceReadService:
    """发票读操作服务."""

    def __init__(
        self,
        repository: InvoicesRepository | None = None,
        customers_repository: CustomersRepository | None = None,
        cache_service: ViewCacheService | None = None,
    ) -> None:
        self._repository = repository or InvoicesRepository()
        self._customers_repository = customers_repository or CustomersRepository()
        self._cache_service = cache_service or get_view_cache_service()

    @staticmethod
    def _page_size() -> int:
        if has_app_context():
            return int(current_app.config.get("INVOICE_LIST_PAGE_SIZE", INVOICE_LIST_PAGE_SIZE))
        return INVOICE_LIST_PAGE_SIZE

    def list_invoices(self, params: InvoiceListQuery) -> JsonDict:
        """返回发票列表页数据,优先读取缓存.

        Args:
            params: 已校验的查询参数(query/page).

        Returns:
            包含 items/total/page/pages/limit/query 的字典.

        """
        variant = urlencode({"query": params.query, "page": params.page})
        # 查询前固定代数,查询期间发生的失效不会被写回的旧数据覆盖
        generation = self._cache_service.current_generation(INVOICES_LIST_PATH)
        cached = self._cache_service.get(INVOICES_LIST_PATH, variant, generation=generation)
        if isinstance(cached, dict):
            return cached

        filters = InvoiceListFilters(query=params.query, page=params.page, limit=self._page_size())
        page_result = self._repository.list_invoices(filters)
        data: JsonDict = {
            "items": [self._serialize_row(row) for row in page_result.items],
            "total": page_result.total,
            "page": page_result.page,
            "pages": page_result.pages,
            "limit": page_result.limit,
            "query": params.query,
        }
        self._cache_service.set(INVOICES_LIST_PATH, variant, data, generation=generation)
        return data

    def get_invoice(self, invoice_id: str) -> Invoice:
        """读取单张发票.

        Raises:
            NotFoundError: 发票不存在时抛出.

        """
        invoice = self._repository.get_by_id(invoice_id)
        if invoice is None:
            raise NotFoundError("发票不存在", extra={"invoice_id": invoice_id})
        return invoice

    def customer_options(self) -> list[OptionDict]:
        return self._customers_repository.list_options()

    @staticmethod
    def _serialize_row(row: InvoiceListRowProjection) -> JsonDict:
        return {
            "id": row.id,
            "customer_id": row.customer_id,
            "name": row.customer_name,
            "email": row.customer_email,
            "image_url": row.customer_image_url,
            "amount": row.amount,
            "amount_display": _format_amount(row.amount),
            "status": row.status,
            "date": time_utils.format_date(row.date),
        }
