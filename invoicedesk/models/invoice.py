"""
发票台 - 发票模型
"""

from uuid import uuid4

from invoicedesk import db
from invoicedesk.constants import InvoiceStatus
from invoicedesk.utils.time_utils import time_utils

_STATUS_VALUES = ", ".join(f"'{value}'" for value in InvoiceStatus.values())


class Invoice(db.Model):
    """发票模型。

    金额以最小货币单位（分）保存为整数，避免浮点误差。
    id 与 date 在创建后不再被修改。

    Attributes:
        id: 发票主键（UUID 字符串）。
        customer_id: 所属客户。
        amount: 金额（分）。
        status: 状态，pending 或 paid。
        date: 开票日期。
    """

    __tablename__ = "invoices"
    __table_args__ = (
        db.CheckConstraint("amount >= 0", name="ck_invoices_amount_non_negative"),
        db.CheckConstraint(f"status IN ({_STATUS_VALUES})", name="ck_invoices_status"),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid4()))
    customer_id = db.Column(db.String(36), db.ForeignKey("customers.id"), nullable=False, index=True)
    amount = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)

    customer = db.relationship("Customer", back_populates="invoices")

    @property
    def amount_display(self) -> str:
        """金额的主单位展示，例如 1550 -> "15.50"。"""
        return f"{self.amount // 100}.{self.amount % 100:02d}"

    def to_dict(self) -> dict[str, object]:
        """转换为字典格式。"""
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "amount": self.amount,
            "status": self.status,
            "date": time_utils.format_date(self.date),
        }

    def __repr__(self) -> str:
        return f"<Invoice {self.id} {self.status}>"
