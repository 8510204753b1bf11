"""发票路由契约测试.

覆盖列表、创建、编辑、删除四类入口的 HTTP 行为.
"""

import pytest
from sqlalchemy.exc import OperationalError

from invoicedesk import db
from invoicedesk.constants import InvoiceMessages
from invoicedesk.models import Invoice
from invoicedesk.repositories.invoices_repository import InvoicesRepository
from invoicedesk.utils.time_utils import time_utils


def _create_invoice(client, customer_id: str, amount: str = "15.50", status: str = "pending"):
    return client.post(
        "/dashboard/invoices/create",
        data={"customerId": customer_id, "amount": amount, "status": status},
    )


@pytest.mark.unit
def test_list_invoices_empty(client) -> None:
    response = client.get("/dashboard/invoices")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["data"]["items"] == []
    assert payload["data"]["total"] == 0
    assert payload["data"]["page"] == 1
    assert payload["data"]["limit"] == 6


@pytest.mark.unit
def test_create_invoice_redirects_and_persists(client, customers) -> None:
    evil_rabbit_id, _ = customers

    response = _create_invoice(client, evil_rabbit_id)

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/dashboard/invoices")

    invoice = db.session.query(Invoice).one()
    assert invoice.customer_id == evil_rabbit_id
    assert invoice.amount == 1550
    assert invoice.status == "pending"
    assert invoice.date == time_utils.today()

    with client.session_transaction() as session:
        assert ("success", InvoiceMessages.CREATED) in session["_flashes"]


@pytest.mark.unit
def test_create_invoice_validation_failure_returns_form_state(client, customers) -> None:
    response = client.post("/dashboard/invoices/create", data={"amount": "", "status": "overdue"})

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["message"] == InvoiceMessages.CREATE_MISSING_FIELDS
    assert payload["errors"] == {
        "customerId": [InvoiceMessages.SELECT_CUSTOMER],
        "amount": [InvoiceMessages.AMOUNT_GREATER_THAN_ZERO],
        "status": [InvoiceMessages.SELECT_STATUS],
    }
    assert db.session.query(Invoice).count() == 0


@pytest.mark.unit
def test_create_invoice_persistence_failure_hides_driver_error(client, customers, monkeypatch) -> None:
    evil_rabbit_id, _ = customers

    def _raise(self, values):  # noqa: ARG001
        raise OperationalError("INSERT INTO invoices", {}, Exception("disk I/O error at /var/lib/db"))

    monkeypatch.setattr(InvoicesRepository, "insert", _raise)

    response = _create_invoice(client, evil_rabbit_id)

    assert response.status_code == 500
    payload = response.get_json()
    assert payload["message"] == InvoiceMessages.CREATE_FAILED
    assert "errors" not in payload
    assert "disk I/O" not in response.get_data(as_text=True)


@pytest.mark.unit
@pytest.mark.parametrize("amount", ["1e30", "1e20"])
def test_create_invoice_rejects_amount_beyond_column_range(client, customers, amount) -> None:
    evil_rabbit_id, _ = customers

    response = _create_invoice(client, evil_rabbit_id, amount=amount)

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["message"] == InvoiceMessages.CREATE_MISSING_FIELDS
    assert payload["errors"] == {"amount": [InvoiceMessages.AMOUNT_INVALID]}
    assert db.session.query(Invoice).count() == 0


@pytest.mark.unit
def test_listing_reflects_writes_after_cache_invalidation(client, customers) -> None:
    evil_rabbit_id, _ = customers

    first = client.get("/dashboard/invoices").get_json()
    _create_invoice(client, evil_rabbit_id)
    second = client.get("/dashboard/invoices").get_json()

    assert first["data"]["total"] == 0
    assert second["data"]["total"] == 1
    row = second["data"]["items"][0]
    assert row["name"] == "Evil Rabbit"
    assert row["amount"] == 1550
    assert row["amount_display"] == "15.50"


@pytest.mark.unit
def test_listing_filters_and_paginates(client, customers) -> None:
    evil_rabbit_id, delba_id = customers
    for _ in range(7):
        _create_invoice(client, evil_rabbit_id, amount="10", status="paid")
    _create_invoice(client, delba_id, amount="20", status="pending")

    page_two = client.get("/dashboard/invoices?page=2").get_json()["data"]
    delba_only = client.get("/dashboard/invoices?query=delba").get_json()["data"]
    pending_only = client.get("/dashboard/invoices?query=pending").get_json()["data"]

    assert page_two["total"] == 8
    assert page_two["pages"] == 2
    assert len(page_two["items"]) == 2
    assert delba_only["total"] == 1
    assert delba_only["items"][0]["email"] == "delba@oliveira.com"
    assert pending_only["total"] == 1


@pytest.mark.unit
def test_create_form_definition_lists_customers(client, customers) -> None:
    response = client.get("/dashboard/invoices/create")

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["form_mode"] == "create"
    assert data["values"] == {}
    fields = {field["name"]: field for field in data["fields"]}
    assert list(fields) == ["customerId", "amount", "status"]
    assert [option["label"] for option in fields["customerId"]["options"]] == ["Delba de Oliveira", "Evil Rabbit"]
    assert [option["value"] for option in fields["status"]["options"]] == ["pending", "paid"]


@pytest.mark.unit
def test_edit_form_returns_current_values(client, customers) -> None:
    evil_rabbit_id, _ = customers
    _create_invoice(client, evil_rabbit_id, amount="99.05", status="paid")
    invoice = db.session.query(Invoice).one()

    response = client.get(f"/dashboard/invoices/{invoice.id}/edit")

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["form_mode"] == "edit"
    assert data["values"] == {"customerId": evil_rabbit_id, "amount": "99.05", "status": "paid"}


@pytest.mark.unit
def test_edit_form_unknown_invoice_returns_404(client) -> None:
    response = client.get("/dashboard/invoices/missing/edit")

    assert response.status_code == 404
    payload = response.get_json()
    assert payload["error"] is True
    assert payload["message_key"] == "RESOURCE_NOT_FOUND"


@pytest.mark.unit
def test_update_invoice_keeps_id_and_date(client, customers) -> None:
    evil_rabbit_id, delba_id = customers
    _create_invoice(client, evil_rabbit_id)
    invoice = db.session.query(Invoice).one()
    original_id, original_date = invoice.id, invoice.date

    response = client.post(
        f"/dashboard/invoices/{original_id}/edit",
        data={"customerId": delba_id, "amount": "20", "status": "paid"},
    )

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/dashboard/invoices")
    db.session.expire_all()
    updated = db.session.get(Invoice, original_id)
    assert updated.customer_id == delba_id
    assert updated.amount == 2000
    assert updated.status == "paid"
    assert updated.date == original_date


@pytest.mark.unit
def test_update_invoice_validation_failure(client, customers) -> None:
    evil_rabbit_id, _ = customers
    _create_invoice(client, evil_rabbit_id)
    invoice = db.session.query(Invoice).one()

    response = client.post(
        f"/dashboard/invoices/{invoice.id}/edit",
        data={"customerId": evil_rabbit_id, "amount": "-1", "status": "paid"},
    )

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["message"] == InvoiceMessages.UPDATE_MISSING_FIELDS
    assert payload["errors"] == {"amount": [InvoiceMessages.AMOUNT_GREATER_THAN_ZERO]}


@pytest.mark.unit
def test_update_invoice_rejects_amount_beyond_column_range(client, customers) -> None:
    evil_rabbit_id, _ = customers
    _create_invoice(client, evil_rabbit_id)
    invoice = db.session.query(Invoice).one()

    response = client.post(
        f"/dashboard/invoices/{invoice.id}/edit",
        data={"customerId": evil_rabbit_id, "amount": "1e30", "status": "paid"},
    )

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["message"] == InvoiceMessages.UPDATE_MISSING_FIELDS
    assert payload["errors"] == {"amount": [InvoiceMessages.AMOUNT_INVALID]}
    db.session.expire_all()
    assert db.session.get(Invoice, invoice.id).amount == 1550


@pytest.mark.unit
def test_update_unknown_invoice_still_redirects(client, customers) -> None:
    evil_rabbit_id, _ = customers

    response = client.post(
        "/dashboard/invoices/missing/edit",
        data={"customerId": evil_rabbit_id, "amount": "5", "status": "paid"},
    )

    assert response.status_code == 302
    assert db.session.query(Invoice).count() == 0


@pytest.mark.unit
def test_delete_invoice(client, customers) -> None:
    evil_rabbit_id, _ = customers
    _create_invoice(client, evil_rabbit_id)
    invoice = db.session.query(Invoice).one()

    response = client.post(f"/dashboard/invoices/{invoice.id}/delete")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["message"] == InvoiceMessages.DELETED
    assert payload["data"]["affected_rows"] == 1
    assert db.session.query(Invoice).count() == 0
    assert client.get("/dashboard/invoices").get_json()["data"]["total"] == 0


@pytest.mark.unit
def test_delete_unknown_invoice_is_success(client) -> None:
    response = client.post("/dashboard/invoices/missing/delete")

    assert response.status_code == 200
    assert response.get_json()["data"]["affected_rows"] == 0


@pytest.mark.unit
def test_delete_persistence_failure(client, monkeypatch) -> None:
    def _raise(invoice_id):  # noqa: ARG001
        raise OperationalError("DELETE FROM invoices", {}, Exception("database is locked"))

    monkeypatch.setattr(InvoicesRepository, "delete", staticmethod(_raise))

    response = client.post("/dashboard/invoices/inv-1/delete")

    assert response.status_code == 500
    payload = response.get_json()
    assert payload["message"] == InvoiceMessages.DELETE_FAILED
    assert "locked" not in response.get_data(as_text=True)
