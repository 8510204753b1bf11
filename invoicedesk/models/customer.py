"""
发票台 - 客户模型
"""

from typing import TYPE_CHECKING
from uuid import uuid4

from invoicedesk import db

if TYPE_CHECKING:
    from invoicedesk.types import OptionDict


class Customer(db.Model):
    """客户模型。

    发票通过 customer_id 引用客户，表单中的客户下拉框也来源于此表。

    Attributes:
        id: 客户主键（UUID 字符串）。
        name: 客户名称。
        email: 联系邮箱，唯一。
        image_url: 头像地址，可选。
    """

    __tablename__ = "customers"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid4()))
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    image_url = db.Column(db.String(255), nullable=True)

    invoices = db.relationship("Invoice", back_populates="customer", lazy="dynamic")

    def to_option(self) -> "OptionDict":
        """转换为表单下拉选项。"""
        return {"value": self.id, "label": self.name}

    def __repr__(self) -> str:
        return f"<Customer {self.name}>"
