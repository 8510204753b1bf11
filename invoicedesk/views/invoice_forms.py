"""发票表单视图.

集成 GET/POST 逻辑: GET 返回表单描述与当前值, POST 交给写服务并按结果分支.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import Request, flash, redirect, request
from flask.views import MethodView

from invoicedesk.constants import FlashCategory, HttpStatus
from invoicedesk.forms.definitions import INVOICE_FORM_DEFINITION, FieldOption
from invoicedesk.services.invoices import InvoiceReadService, InvoiceWriteService
from invoicedesk.types import Failure, Redirect
from invoicedesk.utils.response_utils import jsonify_form_state, jsonify_unified_success
from invoicedesk.utils.route_safety import log_with_context, safe_route_call

if TYPE_CHECKING:
    from flask.typing import ResponseReturnValue

    from invoicedesk.forms.definitions import ResourceFormDefinition
    from invoicedesk.types import InvoiceFormOutcome, JsonDict, MutablePayloadDict


class InvoiceFormView(MethodView):
    """发票创建/编辑视图.

    没有 ``invoice_id`` 时为创建模式,否则为编辑模式.
    """

    form_definition: ResourceFormDefinition = INVOICE_FORM_DEFINITION

    def __init__(
        self,
        write_service: InvoiceWriteService | None = None,
        read_service: InvoiceReadService | None = None,
    ) -> None:
        self.write_service = write_service or InvoiceWriteService()
        self.read_service = read_service or InvoiceReadService()

    def get(self, invoice_id: str | None = None) -> ResponseReturnValue:
        """返回表单字段、当前值与客户选项."""

        def _execute() -> ResponseReturnValue:
            values: JsonDict = {}
            if invoice_id is not None:
                invoice = self.read_service.get_invoice(invoice_id)
                values = {
                    "customerId": invoice.customer_id,
                    "amount": invoice.amount_display,
                    "status": invoice.status,
                }
            return jsonify_unified_success(data=self._build_form_data(invoice_id, values))

        return safe_route_call(
            _execute,
            module="invoices",
            action=f"{self.form_definition.name}_form_get",
            public_error="加载发票表单失败",
            context={"invoice_id": invoice_id},
        )

    def post(self, invoice_id: str | None = None) -> ResponseReturnValue:
        """提交表单.

        Returns:
            成功时重定向到列表页, 失败时返回表单状态(400 校验失败, 500 写入失败).

        """
        payload = self._extract_payload(request)
        form_mode = self._form_mode(invoice_id)

        def _execute() -> InvoiceFormOutcome:
            if invoice_id is None:
                return self.write_service.create(payload)
            return self.write_service.update(invoice_id, payload)

        outcome = safe_route_call(
            _execute,
            module="invoices",
            action=f"{self.form_definition.name}_form_{form_mode}",
            public_error="保存发票失败",
            context={"invoice_id": invoice_id, "form_mode": form_mode},
        )

        if isinstance(outcome, Redirect):
            flash(self.form_definition.get_success_message(form_mode), FlashCategory.SUCCESS)
            return redirect(outcome.path)
        return self._render_failure(outcome, invoice_id=invoice_id, form_mode=form_mode)

    def _render_failure(self, failure: Failure, *, invoice_id: str | None, form_mode: str) -> ResponseReturnValue:
        status_code = HttpStatus.BAD_REQUEST if failure.is_validation_failure else HttpStatus.INTERNAL_SERVER_ERROR
        log_with_context(
            "warning",
            "发票表单提交失败",
            module="invoices",
            action=f"{self.form_definition.name}_form_{form_mode}",
            context={"invoice_id": invoice_id, "status_code": int(status_code)},
            extra={"field_errors": {name: list(messages) for name, messages in failure.errors.items()}},
        )
        return jsonify_form_state(failure.to_state(), status_code=status_code)

    def _build_form_data(self, invoice_id: str | None, values: JsonDict) -> JsonDict:
        customer_options = [
            FieldOption(value=option["value"], label=option["label"]) for option in self.read_service.customer_options()
        ]
        fields = [
            form_field.to_dict(
                options=customer_options if form_field.name in self.form_definition.dynamic_options else None,
            )
            for form_field in self.form_definition.fields
        ]
        return {
            "form_mode": self._form_mode(invoice_id),
            "invoice_id": invoice_id,
            "fields": fields,
            "values": values,
        }

    @staticmethod
    def _form_mode(invoice_id: str | None) -> str:
        return "create" if invoice_id is None else "edit"

    @staticmethod
    def _extract_payload(req: Request) -> MutablePayloadDict:
        if req.is_json:
            data = req.get_json(silent=True)
            return dict(data) if isinstance(data, dict) else {}
        return dict(req.form.to_dict())
