from datetime import date

import pytest

from app import db
from app.models import Invoice
from app.services.invoice_store import InvoiceStore, StoreError


def test_insert_returns_new_id_and_persists_row(app, customers):
    with app.app_context():
        store = InvoiceStore(db.session)
        invoice_id = store.insert(customers["evil"], 1000, "pending", date(2026, 10, 19))

    with app.app_context():
        invoice = db.session.get(Invoice, invoice_id)
        assert invoice is not None
        assert invoice.customer_id == customers["evil"]
        assert invoice.amount == 1000
        assert invoice.status == "pending"
        assert invoice.date == date(2026, 10, 19)


def test_insert_generates_distinct_ids(app, customers):
    with app.app_context():
        store = InvoiceStore(db.session)
        first = store.insert(customers["evil"], 100, "paid", date(2026, 1, 1))
        second = store.insert(customers["evil"], 100, "paid", date(2026, 1, 1))
    assert first != second


def test_update_keeps_id_and_date(app, customers):
    with app.app_context():
        store = InvoiceStore(db.session)
        invoice_id = store.insert(customers["evil"], 500, "pending", date(2024, 3, 1))
        assert store.update(invoice_id, customers["amy"], 9900, "paid") == 1

    with app.app_context():
        invoice = db.session.get(Invoice, invoice_id)
        assert invoice.customer_id == customers["amy"]
        assert invoice.amount == 9900
        assert invoice.status == "paid"
        assert invoice.date == date(2024, 3, 1)


def test_update_and_delete_report_row_counts(app, customers):
    with app.app_context():
        store = InvoiceStore(db.session)
        assert store.update("missing", customers["evil"], 1, "paid") == 0
        assert store.delete("missing") == 0

        invoice_id = store.insert(customers["evil"], 1, "paid", date(2026, 1, 1))
        assert store.delete(invoice_id) == 1

    with app.app_context():
        assert db.session.get(Invoice, invoice_id) is None


def test_database_errors_become_store_errors(app, customers):
    with app.app_context():
        store = InvoiceStore(db.session)
        with pytest.raises(StoreError):
            # Rejected by the status check constraint.
            store.insert(customers["evil"], 100, "overdue", date(2026, 1, 1))

        # The session was rolled back and stays usable.
        invoice_id = store.insert(customers["evil"], 100, "paid", date(2026, 1, 1))
        assert db.session.get(Invoice, invoice_id) is not None


def test_driver_errors_become_store_errors(app, customers):
    with app.app_context():
        store = InvoiceStore(db.session)
        with pytest.raises(StoreError) as excinfo:
            # sqlite3 raises OverflowError for integers past 64 bits.
            store.insert(customers["evil"], 10**20, "paid", date(2026, 1, 1))
        assert excinfo.value.__cause__ is not None

        invoice_id = store.insert(customers["evil"], 2**63 - 1, "paid", date(2026, 1, 1))
        assert db.session.get(Invoice, invoice_id).amount == 2**63 - 1


def test_values_are_bound_not_interpolated(app, customers):
    hostile = "x'; DROP TABLE invoices; --"
    with app.app_context():
        store = InvoiceStore(db.session)
        assert store.delete(hostile) == 0
        store.insert(customers["evil"], 100, "paid", date(2026, 1, 1))
        assert Invoice.query.count() == 1
