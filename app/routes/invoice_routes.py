from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from sqlalchemy import String, cast, func, or_, select

from app import INVOICE_LIST_PATH, db
from app.models import INVOICE_STATUSES, Customer, Invoice
from app.services.invoice_actions import InvoiceActions, Navigate, State
from app.services.revalidation import cached_for_path
from app.utils.pagination import (
    build_pagination_args,
    get_page,
    get_per_page,
    page_count,
)

invoice = Blueprint("invoice", __name__)


def _actions() -> InvoiceActions:
    return current_app.extensions["invoice_actions"]


def _customers():
    return Customer.query.order_by(Customer.name).all()


@cached_for_path(INVOICE_LIST_PATH)
def _invoice_listing(query: str, page: int, per_page: int) -> dict:
    """Return one page of invoices matching ``query`` as plain data."""
    stmt = select(
        Invoice.id,
        Invoice.amount,
        Invoice.date,
        Invoice.status,
        Customer.name,
        Customer.email,
        Customer.image_url,
    ).join(Customer, Invoice.customer_id == Customer.id)
    if query:
        pattern = f"%{query}%"
        stmt = stmt.where(
            or_(
                Customer.name.ilike(pattern),
                Customer.email.ilike(pattern),
                cast(Invoice.amount, String).ilike(pattern),
                cast(Invoice.date, String).ilike(pattern),
                Invoice.status.ilike(pattern),
            )
        )

    total = db.session.execute(
        select(func.count()).select_from(stmt.subquery())
    ).scalar_one()
    rows = db.session.execute(
        stmt.order_by(Invoice.date.desc(), Invoice.id)
        .limit(per_page)
        .offset((page - 1) * per_page)
    ).mappings()
    return {
        "items": [dict(row) for row in rows],
        "total": total,
        "pages": page_count(total, per_page),
    }


def _render_form(state, values, title, action_url, status=200):
    return (
        render_template(
            "invoices/invoice_form.html",
            state=state,
            values=values,
            customers=_customers(),
            statuses=INVOICE_STATUSES,
            title=title,
            action_url=action_url,
        ),
        status,
    )


def _failure_status(state: State) -> int:
    return 400 if state.errors else 500


@invoice.route("/")
def home():
    """Send visitors to the invoice list."""
    return redirect(url_for("invoice.view_invoices"))


@invoice.route(INVOICE_LIST_PATH)
def view_invoices():
    """List invoices with optional search."""
    query = request.args.get("query", "").strip()
    page = get_page()
    per_page = get_per_page()
    listing = _invoice_listing(query, page, per_page)
    return render_template(
        "invoices/view_invoices.html",
        listing=listing,
        query=query,
        page=page,
        per_page=per_page,
        pagination_args=build_pagination_args(per_page),
    )


@invoice.route(f"{INVOICE_LIST_PATH}/create", methods=["GET", "POST"])
def create_invoice():
    """Create an invoice."""
    action_url = url_for("invoice.create_invoice")
    if request.method == "GET":
        return _render_form(State(), {}, "Create Invoice", action_url)

    outcome = _actions().create_invoice(State(), request.form)
    if isinstance(outcome, Navigate):
        flash("Invoice created successfully!", "success")
        return redirect(outcome.destination, code=303)
    return _render_form(
        outcome.state,
        request.form.to_dict(),
        "Create Invoice",
        action_url,
        _failure_status(outcome.state),
    )


@invoice.route(
    f"{INVOICE_LIST_PATH}/<invoice_id>/edit", methods=["GET", "POST"]
)
def edit_invoice(invoice_id):
    """Edit an invoice's customer, amount and status."""
    action_url = url_for("invoice.edit_invoice", invoice_id=invoice_id)
    if request.method == "GET":
        existing = db.session.get(Invoice, invoice_id)
        if existing is None:
            abort(404)
        values = {
            "customerId": existing.customer_id,
            "amount": f"{existing.amount_major:.2f}",
            "status": existing.status,
        }
        return _render_form(State(), values, "Edit Invoice", action_url)

    outcome = _actions().update_invoice(invoice_id, State(), request.form)
    if isinstance(outcome, Navigate):
        flash("Invoice updated successfully!", "success")
        return redirect(outcome.destination, code=303)
    return _render_form(
        outcome.state,
        request.form.to_dict(),
        "Edit Invoice",
        action_url,
        _failure_status(outcome.state),
    )


@invoice.route(f"{INVOICE_LIST_PATH}/<invoice_id>/delete", methods=["POST"])
def delete_invoice(invoice_id):
    """Delete an invoice.

    JSON clients receive the resulting state; browsers are sent back to the
    list with the message flashed.
    """
    outcome = _actions().delete_invoice(invoice_id, State())
    state = outcome.state
    if request.is_json or request.accept_mimetypes.best == "application/json":
        return jsonify(state.to_dict()), 200 if outcome.ok else 500
    flash(state.message, "success" if outcome.ok else "danger")
    return redirect(url_for("invoice.view_invoices"), code=303)
