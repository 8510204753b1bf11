"""客户选项 Repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from invoicedesk import db
from invoicedesk.models.customer import Customer

if TYPE_CHECKING:
    from invoicedesk.types import OptionDict


class CustomersRepository:
    """客户查询 Repository."""

    @staticmethod
    def list_options() -> list[OptionDict]:
        """按名称排序返回客户下拉选项."""
        customers = db.session.query(Customer).order_by(Customer.name.asc()).all()
        return [customer.to_option() for customer in customers]
