"""发票 Repository.

职责:
- 仅负责语句组装与数据库读写
- 所有写入均为参数化语句,不拼接用户输入
- 不做序列化、不返回 Response、不 commit
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast
from uuid import uuid4

from sqlalchemy import delete, insert, update
from sqlalchemy.sql.elements import ColumnElement

from invoicedesk import db
from invoicedesk.models.customer import Customer
from invoicedesk.models.invoice import Invoice
from invoicedesk.types import InvoiceListRowProjection, PaginatedResult

if TYPE_CHECKING:
    from invoicedesk.types import InvoiceListFilters, InvoiceWriteValues


class InvoicesRepository:
    """发票读写 Repository."""

    @staticmethod
    def get_by_id(invoice_id: str) -> Invoice | None:
        return db.session.get(Invoice, invoice_id)

    @staticmethod
    def insert(values: InvoiceWriteValues) -> str:
        """插入一行发票并返回新 id."""
        invoice_id = str(uuid4())
        statement = insert(Invoice).values(
            id=invoice_id,
            customer_id=values.customer_id,
            amount=values.amount,
            status=values.status,
            date=values.date,
        )
        db.session.execute(statement)
        return invoice_id

    @staticmethod
    def update(invoice_id: str, values: InvoiceWriteValues) -> int:
        """更新客户、金额与状态,返回受影响行数.

        id 与 date 不在更新范围内.
        """
        statement = (
            update(Invoice)
            .where(Invoice.id == invoice_id)
            .values(customer_id=values.customer_id, amount=values.amount, status=values.status)
            .execution_options(synchronize_session=False)
        )
        result = db.session.execute(statement)
        return int(cast(Any, result).rowcount or 0)

    @staticmethod
    def delete(invoice_id: str) -> int:
        """按 id 删除发票,返回受影响行数."""
        statement = delete(Invoice).where(Invoice.id == invoice_id).execution_options(synchronize_session=False)
        result = db.session.execute(statement)
        return int(cast(Any, result).rowcount or 0)

    def list_invoices(self, filters: InvoiceListFilters) -> PaginatedResult[InvoiceListRowProjection]:
        query = db.session.query(Invoice, Customer).join(Customer, Invoice.customer_id == Customer.id)

        normalized_search = (filters.query or "").strip()
        if normalized_search:
            query = query.filter(self._search_clause(normalized_search))

        query = query.order_by(Invoice.date.desc(), Invoice.id.asc())

        pagination = cast(Any, query).paginate(page=filters.page, per_page=filters.limit, error_out=False)
        rows = [self._to_projection(invoice, customer) for invoice, customer in pagination.items]
        return PaginatedResult(
            items=rows,
            total=pagination.total,
            page=pagination.page,
            pages=pagination.pages,
            limit=pagination.per_page,
        )

    @staticmethod
    def _search_clause(search: str) -> ColumnElement[bool]:
        like_pattern = f"%{search}%"
        name_column = cast(ColumnElement[str], Customer.name)
        email_column = cast(ColumnElement[str], Customer.email)
        status_column = cast(ColumnElement[str], Invoice.status)
        return db.or_(
            name_column.ilike(like_pattern),
            email_column.ilike(like_pattern),
            status_column.ilike(like_pattern),
            db.cast(Invoice.amount, db.String).ilike(like_pattern),
            db.cast(Invoice.date, db.String).ilike(like_pattern),
        )

    @staticmethod
    def _to_projection(invoice: Invoice, customer: Customer) -> InvoiceListRowProjection:
        return InvoiceListRowProjection(
            id=invoice.id,
            customer_id=invoice.customer_id,
            amount=invoice.amount,
            status=invoice.status,
            date=invoice.date,
            customer_name=customer.name,
            customer_email=customer.email,
            customer_image_url=customer.image_url,
        )
