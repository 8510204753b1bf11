"""发票表单定义."""

from invoicedesk.constants import InvoiceMessages, InvoiceStatus
from invoicedesk.forms.definitions.base import FieldComponent, FieldOption, ResourceFormDefinition, ResourceFormField

INVOICE_FORM_DEFINITION = ResourceFormDefinition(
    name="invoice",
    success_messages={
        "create": InvoiceMessages.CREATED,
        "edit": InvoiceMessages.UPDATED,
    },
    dynamic_options=("customerId",),
    fields=[
        ResourceFormField(
            name="customerId",
            label="Choose customer",
            component=FieldComponent.SELECT,
            required=True,
            placeholder="Select a customer",
        ),
        ResourceFormField(
            name="amount",
            label="Choose an amount",
            component=FieldComponent.NUMBER,
            required=True,
            placeholder="Enter USD amount",
            props={"step": "0.01"},
        ),
        ResourceFormField(
            name="status",
            label="Set the invoice status",
            component=FieldComponent.RADIO,
            required=True,
            options=[
                FieldOption(value=InvoiceStatus.PENDING.value, label="Pending"),
                FieldOption(value=InvoiceStatus.PAID.value, label="Paid"),
            ],
        ),
    ],
)
