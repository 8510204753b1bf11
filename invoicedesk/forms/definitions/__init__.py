"""表单定义."""

from .base import FieldComponent, FieldOption, ResourceFormDefinition, ResourceFormField
from .invoice import INVOICE_FORM_DEFINITION

__all__ = [
    "INVOICE_FORM_DEFINITION",
    "FieldComponent",
    "FieldOption",
    "ResourceFormDefinition",
    "ResourceFormField",
]
