"""常量模块。

集中管理系统常量，包括错误分类、提示消息、发票状态与 HTTP 相关常量等。

主要常量：
- ErrorMessages: 错误消息常量
- HttpStatus: HTTP 状态码常量
- InvoiceStatus: 发票状态常量
- FlashCategory: Flash 消息类别常量
"""

# 导入HTTP状态码常量（使用Python标准库）
from http import HTTPStatus as HttpStatus

from .flash_categories import FlashCategory
from .http_headers import HttpHeaders
from .invoices import (
    INVOICE_LIST_PAGE_SIZE,
    INVOICES_LIST_PATH,
    InvoiceMessages,
    InvoiceStatus,
)
from .system_constants import (
    ErrorCategory,
    ErrorMessages,
    ErrorSeverity,
    SuccessMessages,
)

__all__ = [
    "INVOICES_LIST_PATH",
    "INVOICE_LIST_PAGE_SIZE",
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "FlashCategory",
    "HttpHeaders",
    "HttpStatus",
    "InvoiceMessages",
    "InvoiceStatus",
    "SuccessMessages",
]
