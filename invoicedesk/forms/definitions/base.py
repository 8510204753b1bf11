"""基础的资源表单定义模型.

这些定义会被后端视图与前端页面共享,确保字段描述只有唯一来源.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from invoicedesk.types import JsonDict, MutablePayloadDict


class FieldComponent(str, Enum):
    """表单控件类型."""

    TEXT = "text"
    SELECT = "select"
    NUMBER = "number"
    RADIO = "radio"


@dataclass(slots=True)
class FieldOption:
    """下拉或单选项描述."""

    value: str
    label: str

    def to_dict(self) -> JsonDict:
        return {"value": self.value, "label": self.label}


@dataclass(slots=True)
class ResourceFormField:
    """单个字段的元数据.

    ``name`` 即表单提交时使用的字段名,也是字段错误报告的键.
    """

    name: str
    label: str
    component: FieldComponent = FieldComponent.TEXT
    required: bool = False
    placeholder: str | None = None
    help_text: str | None = None
    options: list[FieldOption] = field(default_factory=list)
    props: MutablePayloadDict = field(default_factory=dict)

    def to_dict(self, *, options: list[FieldOption] | None = None) -> JsonDict:
        """序列化字段描述.

        Args:
            options: 运行时选项(如客户列表),传入时覆盖静态选项.

        """
        resolved_options = self.options if options is None else options
        return {
            "name": self.name,
            "label": self.label,
            "component": self.component.value,
            "required": self.required,
            "placeholder": self.placeholder,
            "help_text": self.help_text,
            "options": [option.to_dict() for option in resolved_options],
            "props": dict(self.props),
        }


@dataclass(slots=True)
class ResourceFormDefinition:
    """描述某个资源表单的基础配置.

    Attributes:
        name: 资源英文名(如 invoice)
        fields: 字段定义列表
        success_messages: 按表单模式(create/edit)区分的成功提示
        dynamic_options: 需要在运行时填充选项的字段名

    """

    name: str
    fields: list[ResourceFormField] = field(default_factory=list)
    success_messages: dict[str, str] = field(default_factory=dict)
    dynamic_options: tuple[str, ...] = ()

    def get_success_message(self, form_mode: str) -> str:
        return self.success_messages.get(form_mode, "保存成功")
