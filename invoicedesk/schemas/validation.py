"""Schema 校验与错误映射."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from invoicedesk.errors import ValidationError

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

    from invoicedesk.types import FieldErrors

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_ERROR_MESSAGE = "参数校验失败"
NON_FIELD_KEY = "__all__"


def validate_or_raise(
    model: type[ModelT],
    payload: object,
    *,
    message: str | None = None,
    message_key: str | None = None,
) -> ModelT:
    """执行 schema 校验并抛出项目的 ValidationError.

    Args:
        model: pydantic model.
        payload: 待校验的 payload(通常来自表单).
        message: 整体提示,缺省时使用第一条字段错误.
        message_key: 可选的 message_key.

    Raises:
        ValidationError: 携带完整字段级错误报告.

    """
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        field_errors = collect_field_errors(exc, model=model)
        resolved_message = message or _first_message(field_errors)
        raise ValidationError(resolved_message, field_errors=field_errors, message_key=message_key) from None


def collect_field_errors(exc: PydanticValidationError, *, model: type[BaseModel] | None = None) -> FieldErrors:
    """将 pydantic 错误整理为 ``{字段名: [提示, ...]}``.

    字段名使用表单上的名称(即 alias),同一字段的重复提示只保留一次.
    """
    aliases = _field_aliases(model)
    report: FieldErrors = {}
    for item in exc.errors():
        field = _resolve_field(item)
        field = aliases.get(field, field)
        message = _resolve_message(item)
        messages = report.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    return report


def _resolve_field(item: ErrorDetails) -> str:
    loc = item.get("loc")
    if isinstance(loc, tuple) and loc and isinstance(loc[0], str):
        return loc[0]
    return NON_FIELD_KEY


def _resolve_message(item: ErrorDetails) -> str:
    ctx = item.get("ctx")
    if isinstance(ctx, dict):
        raw_error = ctx.get("error")
        if isinstance(raw_error, BaseException):
            return str(raw_error)

    msg = item.get("msg")
    if isinstance(msg, str) and msg.strip():
        return msg
    return DEFAULT_ERROR_MESSAGE


def _first_message(field_errors: FieldErrors) -> str:
    for messages in field_errors.values():
        if messages:
            return messages[0]
    return DEFAULT_ERROR_MESSAGE


def _field_aliases(model: type[BaseModel] | None) -> dict[str, str]:
    if model is None:
        return {}
    aliases: dict[str, str] = {}
    for name, info in model.model_fields.items():
        if isinstance(info.validation_alias, str):
            aliases[name] = info.validation_alias
    return aliases
