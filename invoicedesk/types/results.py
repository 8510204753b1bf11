"""发票写操作的结果类型.

写操作只有两类结局:成功(可能附带跳转)与失败(附带可渲染的表单状态).
跳转以 ``Redirect`` 结果返回,由调用方显式分支处理.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from invoicedesk.types.structures import FieldErrors, JsonDict


@dataclass(frozen=True, slots=True)
class Redirect:
    """写入成功后需要跳转到的路径."""

    path: str


@dataclass(frozen=True, slots=True)
class Completed:
    """写入成功且无需跳转."""

    affected_rows: int = 0


@dataclass(frozen=True, slots=True)
class Failure:
    """写操作失败.

    Attributes:
        message: 面向表单的整体提示.
        errors: 字段级错误报告,键为表单字段名.
        error: 底层异常,仅供进程内调用方与日志使用,不会渲染给终端用户.

    """

    message: str
    errors: FieldErrors = field(default_factory=dict)
    error: BaseException | None = None

    @property
    def is_validation_failure(self) -> bool:
        """是否为校验阶段失败(未发生任何写入)."""
        return self.error is None and bool(self.errors)

    def to_state(self) -> JsonDict:
        """转换为表单可渲染的状态字典."""
        state: JsonDict = {"message": self.message}
        if self.errors:
            state["errors"] = {name: list(messages) for name, messages in self.errors.items()}
        return state


InvoiceFormOutcome: TypeAlias = Redirect | Failure
InvoiceDeleteOutcome: TypeAlias = Completed | Failure
