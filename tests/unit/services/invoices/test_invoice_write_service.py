import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from invoicedesk.constants import INVOICES_LIST_PATH, InvoiceMessages
from invoicedesk.repositories.invoices_repository import InvoicesRepository
from invoicedesk.services.invoices.invoice_write_service import InvoiceWriteService
from invoicedesk.types import Completed, Failure, InvoiceWriteValues, Redirect
from invoicedesk.utils.time_utils import time_utils

VALID_FORM = {"customerId": "cust-1", "amount": "15.50", "status": "pending"}


class _StubInvoicesRepository(InvoicesRepository):
    def __init__(self, *, affected_rows: int = 1, error: Exception | None = None) -> None:
        self.inserted: list[InvoiceWriteValues] = []
        self.updated: list[tuple[str, InvoiceWriteValues]] = []
        self.deleted: list[str] = []
        self._affected_rows = affected_rows
        self._error = error

    def insert(self, values: InvoiceWriteValues) -> str:
        if self._error is not None:
            raise self._error
        self.inserted.append(values)
        return "inv-1"

    def update(self, invoice_id: str, values: InvoiceWriteValues) -> int:
        if self._error is not None:
            raise self._error
        self.updated.append((invoice_id, values))
        return self._affected_rows

    def delete(self, invoice_id: str) -> int:
        if self._error is not None:
            raise self._error
        self.deleted.append(invoice_id)
        return self._affected_rows


def _build_service(repository, stub_session, stub_cache_service) -> InvoiceWriteService:
    return InvoiceWriteService(repository=repository, cache_service=stub_cache_service, session=stub_session)


@pytest.mark.unit
def test_create_persists_minor_units_and_redirects(stub_session, stub_cache_service) -> None:
    repository = _StubInvoicesRepository()
    service = _build_service(repository, stub_session, stub_cache_service)

    outcome = service.create(VALID_FORM)

    assert outcome == Redirect(INVOICES_LIST_PATH)
    assert repository.inserted == [
        InvoiceWriteValues(customer_id="cust-1", amount=1550, status="pending", date=time_utils.today()),
    ]
    assert stub_session.commits == 1
    assert stub_cache_service.invalidated == [INVOICES_LIST_PATH]


@pytest.mark.unit
def test_create_with_empty_form_reports_every_field(stub_session, stub_cache_service) -> None:
    repository = _StubInvoicesRepository()
    service = _build_service(repository, stub_session, stub_cache_service)

    outcome = service.create({})

    assert isinstance(outcome, Failure)
    assert outcome.message == InvoiceMessages.CREATE_MISSING_FIELDS
    assert outcome.errors == {
        "customerId": [InvoiceMessages.SELECT_CUSTOMER],
        "amount": [InvoiceMessages.AMOUNT_GREATER_THAN_ZERO],
        "status": [InvoiceMessages.SELECT_STATUS],
    }
    assert outcome.is_validation_failure is True
    assert repository.inserted == []
    assert stub_session.commits == 0
    assert stub_cache_service.invalidated == []


@pytest.mark.unit
def test_create_returns_failure_for_amount_beyond_column_range(stub_session, stub_cache_service) -> None:
    repository = _StubInvoicesRepository()
    service = _build_service(repository, stub_session, stub_cache_service)

    outcome = service.create({**VALID_FORM, "amount": "1e30"})

    assert isinstance(outcome, Failure)
    assert outcome.errors == {"amount": [InvoiceMessages.AMOUNT_INVALID]}
    assert repository.inserted == []
    assert stub_session.commits == 0


@pytest.mark.unit
def test_create_reports_only_failing_fields(stub_session, stub_cache_service) -> None:
    service = _build_service(_StubInvoicesRepository(), stub_session, stub_cache_service)

    outcome = service.create({"customerId": "cust-1", "amount": "0", "status": "paid"})

    assert isinstance(outcome, Failure)
    assert outcome.errors == {"amount": [InvoiceMessages.AMOUNT_GREATER_THAN_ZERO]}


@pytest.mark.unit
def test_create_rolls_back_when_insert_fails(stub_session, stub_cache_service) -> None:
    error = IntegrityError("INSERT INTO invoices", {}, Exception("FOREIGN KEY constraint failed"))
    service = _build_service(_StubInvoicesRepository(error=error), stub_session, stub_cache_service)

    outcome = service.create(VALID_FORM)

    assert outcome == Failure(InvoiceMessages.CREATE_FAILED, error=error)
    assert outcome.errors == {}
    assert outcome.is_validation_failure is False
    assert stub_session.rollbacks == 1
    assert stub_cache_service.invalidated == []


@pytest.mark.unit
def test_create_rolls_back_when_commit_fails(stub_session, stub_cache_service) -> None:
    stub_session.commit_error = OperationalError("COMMIT", {}, Exception("database is locked"))
    service = _build_service(_StubInvoicesRepository(), stub_session, stub_cache_service)

    outcome = service.create(VALID_FORM)

    assert isinstance(outcome, Failure)
    assert outcome.message == InvoiceMessages.CREATE_FAILED
    assert outcome.error is stub_session.commit_error
    assert stub_session.rollbacks == 1
    assert stub_cache_service.invalidated == []


@pytest.mark.unit
def test_create_failure_state_hides_driver_error(stub_session, stub_cache_service) -> None:
    error = OperationalError("INSERT", {}, Exception("password authentication failed for user admin"))
    service = _build_service(_StubInvoicesRepository(error=error), stub_session, stub_cache_service)

    outcome = service.create(VALID_FORM)

    assert outcome.to_state() == {"message": InvoiceMessages.CREATE_FAILED}


@pytest.mark.unit
def test_create_lets_unexpected_errors_propagate(stub_session, stub_cache_service) -> None:
    service = _build_service(_StubInvoicesRepository(error=RuntimeError("boom")), stub_session, stub_cache_service)

    with pytest.raises(RuntimeError, match="boom"):
        service.create(VALID_FORM)

    assert stub_cache_service.invalidated == []


@pytest.mark.unit
def test_update_never_writes_date(stub_session, stub_cache_service) -> None:
    repository = _StubInvoicesRepository()
    service = _build_service(repository, stub_session, stub_cache_service)

    outcome = service.update("inv-1", {"customerId": "cust-2", "amount": "99.99", "status": "paid"})

    assert outcome == Redirect(INVOICES_LIST_PATH)
    assert repository.updated == [
        ("inv-1", InvoiceWriteValues(customer_id="cust-2", amount=9999, status="paid", date=None)),
    ]
    assert stub_session.commits == 1
    assert stub_cache_service.invalidated == [INVOICES_LIST_PATH]


@pytest.mark.unit
def test_update_uses_update_message_on_validation_failure(stub_session, stub_cache_service) -> None:
    repository = _StubInvoicesRepository()
    service = _build_service(repository, stub_session, stub_cache_service)

    outcome = service.update("inv-1", {"customerId": "cust-1", "amount": "abc", "status": "overdue"})

    assert isinstance(outcome, Failure)
    assert outcome.message == InvoiceMessages.UPDATE_MISSING_FIELDS
    assert outcome.errors == {
        "amount": [InvoiceMessages.AMOUNT_INVALID],
        "status": [InvoiceMessages.SELECT_STATUS],
    }
    assert repository.updated == []


@pytest.mark.unit
def test_update_of_unknown_invoice_still_redirects(stub_session, stub_cache_service) -> None:
    service = _build_service(_StubInvoicesRepository(affected_rows=0), stub_session, stub_cache_service)

    outcome = service.update("missing", VALID_FORM)

    assert outcome == Redirect(INVOICES_LIST_PATH)
    assert stub_cache_service.invalidated == [INVOICES_LIST_PATH]


@pytest.mark.unit
def test_update_reports_persistence_failure(stub_session, stub_cache_service) -> None:
    error = OperationalError("UPDATE invoices", {}, Exception("connection reset"))
    service = _build_service(_StubInvoicesRepository(error=error), stub_session, stub_cache_service)

    outcome = service.update("inv-1", VALID_FORM)

    assert outcome == Failure(InvoiceMessages.UPDATE_FAILED, error=error)
    assert stub_session.rollbacks == 1
    assert stub_cache_service.invalidated == []


@pytest.mark.unit
def test_delete_completes_without_redirect(stub_session, stub_cache_service) -> None:
    repository = _StubInvoicesRepository()
    service = _build_service(repository, stub_session, stub_cache_service)

    outcome = service.delete("inv-1")

    assert outcome == Completed(affected_rows=1)
    assert repository.deleted == ["inv-1"]
    assert stub_session.commits == 1
    assert stub_cache_service.invalidated == [INVOICES_LIST_PATH]


@pytest.mark.unit
def test_delete_of_unknown_invoice_is_success(stub_session, stub_cache_service) -> None:
    service = _build_service(_StubInvoicesRepository(affected_rows=0), stub_session, stub_cache_service)

    outcome = service.delete("missing")

    assert outcome == Completed(affected_rows=0)
    assert stub_cache_service.invalidated == [INVOICES_LIST_PATH]


@pytest.mark.unit
def test_delete_reports_persistence_failure(stub_session, stub_cache_service) -> None:
    error = OperationalError("DELETE FROM invoices", {}, Exception("disk I/O error"))
    service = _build_service(_StubInvoicesRepository(error=error), stub_session, stub_cache_service)

    outcome = service.delete("inv-1")

    assert isinstance(outcome, Failure)
    assert outcome.message == InvoiceMessages.DELETE_FAILED
    assert outcome.error is error
    assert stub_session.rollbacks == 1
    assert stub_cache_service.invalidated == []
