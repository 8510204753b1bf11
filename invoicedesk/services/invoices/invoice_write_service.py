"""发票写操作 Service.

职责:
- 处理发票的创建/更新/删除编排: 校验 -> 写入 -> 提交 -> 失效列表缓存 -> 返回结果
- 调用 repository 执行参数化语句
- 不返回 Response

约定:
- 数据库异常(SQLAlchemyError)回滚事务并以 ``Failure`` 返回,底层异常只进日志与 ``Failure.error``.
- 其余异常不在此处理,交由全局错误处理器.
- 缓存只在提交成功后失效.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from invoicedesk import db
from invoicedesk.constants import INVOICES_LIST_PATH, InvoiceMessages
from invoicedesk.errors import ValidationError
from invoicedesk.repositories.invoices_repository import InvoicesRepository
from invoicedesk.schemas.invoices import InvoiceFormPayload
from invoicedesk.schemas.validation import validate_or_raise
from invoicedesk.services.cache_service import get_view_cache_service
from invoicedesk.types import Completed, Failure, InvoiceWriteValues, Redirect
from invoicedesk.utils.structlog_config import log_error, log_info, log_warning
from invoicedesk.utils.time_utils import time_utils

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from invoicedesk.services.cache_service import ViewCacheService
    from invoicedesk.types import InvoiceDeleteOutcome, InvoiceFormOutcome, PayloadMapping


class InvoiceWriteService:
    """发票写操作服务.

    Args:
        repository: 发票 repository,缺省使用 ``InvoicesRepository``.
        cache_service: 视图缓存服务,缺省使用全局实例.
        session: 数据库会话,缺省使用 ``db.session``.

    """

    def __init__(
        self,
        repository: InvoicesRepository | None = None,
        cache_service: ViewCacheService | None = None,
        session: Session | None = None,
    ) -> None:
        self._repository = repository or InvoicesRepository()
        self._cache_service = cache_service or get_view_cache_service()
        self._session = session

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else db.session

    def create(self, payload: PayloadMapping) -> InvoiceFormOutcome:
        """创建发票.

        开票日期取服务端当前 UTC 日期,金额换算为分后写入.

        Args:
            payload: 表单数据,字段为 customerId/amount/status.

        Returns:
            成功时返回跳转到列表页的 ``Redirect``,否则返回 ``Failure``.

        """
        try:
            form = validate_or_raise(InvoiceFormPayload, payload, message=InvoiceMessages.CREATE_MISSING_FIELDS)
        except ValidationError as exc:
            return Failure(InvoiceMessages.CREATE_MISSING_FIELDS, errors=exc.field_errors)

        values = InvoiceWriteValues(
            customer_id=form.customer_id,
            amount=form.amount_in_cents,
            status=form.status.value,
            date=time_utils.today(),
        )
        try:
            invoice_id = self._repository.insert(values)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log_error("发票创建失败", module="invoices", exception=exc, customer_id=values.customer_id)
            return Failure(InvoiceMessages.CREATE_FAILED, error=exc)

        self._invalidate_listing()
        log_info(
            "发票创建成功",
            module="invoices",
            invoice_id=invoice_id,
            customer_id=values.customer_id,
            amount=values.amount,
            status=values.status,
        )
        return Redirect(INVOICES_LIST_PATH)

    def update(self, invoice_id: str, payload: PayloadMapping) -> InvoiceFormOutcome:
        """更新发票的客户、金额与状态.

        id 与开票日期保持不变;不存在的 id 不影响任何行,仍按成功处理.
        """
        try:
            form = validate_or_raise(InvoiceFormPayload, payload, message=InvoiceMessages.UPDATE_MISSING_FIELDS)
        except ValidationError as exc:
            return Failure(InvoiceMessages.UPDATE_MISSING_FIELDS, errors=exc.field_errors)

        values = InvoiceWriteValues(
            customer_id=form.customer_id,
            amount=form.amount_in_cents,
            status=form.status.value,
        )
        try:
            affected_rows = self._repository.update(invoice_id, values)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log_error("发票更新失败", module="invoices", exception=exc, invoice_id=invoice_id)
            return Failure(InvoiceMessages.UPDATE_FAILED, error=exc)

        if affected_rows == 0:
            log_warning("更新的发票不存在", module="invoices", invoice_id=invoice_id)

        self._invalidate_listing()
        log_info(
            "发票更新成功",
            module="invoices",
            invoice_id=invoice_id,
            affected_rows=affected_rows,
            amount=values.amount,
            status=values.status,
        )
        return Redirect(INVOICES_LIST_PATH)

    def delete(self, invoice_id: str) -> InvoiceDeleteOutcome:
        """删除发票.

        Returns:
            成功时返回 ``Completed``(不跳转),数据库异常时返回 ``Failure``.

        """
        try:
            affected_rows = self._repository.delete(invoice_id)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log_error("发票删除失败", module="invoices", exception=exc, invoice_id=invoice_id)
            return Failure(InvoiceMessages.DELETE_FAILED, error=exc)

        if affected_rows == 0:
            log_warning("删除的发票不存在", module="invoices", invoice_id=invoice_id)

        self._invalidate_listing()
        log_info("发票删除成功", module="invoices", invoice_id=invoice_id, affected_rows=affected_rows)
        return Completed(affected_rows=affected_rows)

    def _invalidate_listing(self) -> None:
        self._cache_service.invalidate_path(INVOICES_LIST_PATH)
