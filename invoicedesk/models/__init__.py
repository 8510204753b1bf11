"""数据模型."""

from .customer import Customer
from .invoice import Invoice

__all__ = ["Customer", "Invoice"]
