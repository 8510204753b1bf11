"""发票台 - 发票路由."""

from flask import Blueprint, request
from flask.typing import ResponseReturnValue

from invoicedesk.constants import HttpStatus, InvoiceMessages
from invoicedesk.schemas.invoices import InvoiceListQuery
from invoicedesk.services.invoices import InvoiceReadService, InvoiceWriteService
from invoicedesk.types import Completed
from invoicedesk.utils.response_utils import jsonify_form_state, jsonify_unified_success
from invoicedesk.utils.route_safety import safe_route_call
from invoicedesk.views.invoice_forms import InvoiceFormView

# 创建蓝图
invoices_bp = Blueprint("invoices", __name__)


@invoices_bp.route("", methods=["GET"])
def index() -> ResponseReturnValue:
    """发票列表.

    支持 ``query`` 模糊搜索(客户名称/邮箱、状态、金额、日期)与 ``page`` 分页.

    Returns:
        JSON 响应,包含当前页发票与分页信息.

    """

    def _execute() -> ResponseReturnValue:
        params = InvoiceListQuery.model_validate(request.args.to_dict())
        data = InvoiceReadService().list_invoices(params)
        return jsonify_unified_success(data=data)

    return safe_route_call(
        _execute,
        module="invoices",
        action="list_invoices",
        public_error="获取发票列表失败",
    )


@invoices_bp.route("/<invoice_id>/delete", methods=["POST"])
def delete(invoice_id: str) -> ResponseReturnValue:
    """删除发票.

    Returns:
        成功时返回 JSON 成功响应, 写入失败时返回表单状态与 500.

    """

    def _execute() -> ResponseReturnValue:
        outcome = InvoiceWriteService().delete(invoice_id)
        if isinstance(outcome, Completed):
            return jsonify_unified_success(
                data={"invoice_id": invoice_id, "affected_rows": outcome.affected_rows},
                message=InvoiceMessages.DELETED,
            )
        return jsonify_form_state(outcome.to_state(), status_code=HttpStatus.INTERNAL_SERVER_ERROR)

    return safe_route_call(
        _execute,
        module="invoices",
        action="delete_invoice",
        public_error=InvoiceMessages.DELETE_FAILED,
        context={"invoice_id": invoice_id},
    )


invoices_bp.add_url_rule(
    "/create",
    view_func=InvoiceFormView.as_view("create"),
    methods=["GET", "POST"],
)
invoices_bp.add_url_rule(
    "/<invoice_id>/edit",
    view_func=InvoiceFormView.as_view("edit"),
    methods=["GET", "POST"],
)
