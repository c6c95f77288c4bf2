from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, List, Mapping, Union

from werkzeug.datastructures import MultiDict
from wtforms import DecimalField as WTFormsDecimalField
from wtforms import Form, RadioField, StringField
from wtforms.validators import AnyOf, DataRequired, ValidationError

from app.models import INVOICE_STATUSES

CUSTOMER_REQUIRED_MESSAGE = "Please select a customer."
AMOUNT_POSITIVE_MESSAGE = "Please enter an amount greater than $0."
STATUS_REQUIRED_MESSAGE = "Please select an invoice status."
AMOUNT_TOO_LARGE_MESSAGE = "Please enter a smaller amount."

# Amounts are stored as signed 64-bit integer cents.
MAX_MINOR_UNITS = 2**63 - 1
MAX_AMOUNT = Decimal(MAX_MINOR_UNITS).scaleb(-2)


class GreaterThan:
    """Validate that a numeric field is strictly greater than ``minimum``.

    WTForms' ``NumberRange`` is inclusive, so zero would slip through it.
    """

    def __init__(self, minimum, message=None):
        self.minimum = minimum
        self.message = message

    def __call__(self, form, field):
        data = field.data
        if data is None or not data > self.minimum:
            message = self.message or field.gettext(
                "Number must be greater than %(min)s."
            ) % {"min": self.minimum}
            raise ValidationError(message)


class AtMost:
    """Validate that a numeric field does not exceed ``maximum``.

    Missing data is left to the other validators.
    """

    def __init__(self, maximum, message=None):
        self.maximum = maximum
        self.message = message

    def __call__(self, form, field):
        if field.data is not None and field.data > self.maximum:
            message = self.message or field.gettext(
                "Number must be at most %(max)s."
            ) % {"max": self.maximum}
            raise ValidationError(message)


class AmountField(WTFormsDecimalField):
    """Decimal field that accepts formatted monetary input."""

    _CURRENCY_SYMBOLS = "$€£¥₽₩₹₺"

    def __init__(self, *args, render_kw=None, **kwargs):
        render_kw = dict(render_kw or {})
        render_kw.setdefault("inputmode", "decimal")
        super().__init__(*args, render_kw=render_kw, **kwargs)

    @classmethod
    def _normalise_plain_number(cls, text):
        """Strip money formatting from ``text`` so ``Decimal`` can parse it.

        Handles currency symbols, grouping spaces and commas, a decimal
        comma (``"1.234,50"``) and accounting negatives (``"(12.00)"``).
        Returns ``None`` when only formatting was entered.
        """
        cleaned = text.strip().replace("\u00a0", " ")
        sign = ""
        if cleaned[:1] == "(" and cleaned[-1:] == ")":
            sign = "-"
            cleaned = cleaned[1:-1]
        cleaned = cleaned.strip(cls._CURRENCY_SYMBOLS + " ")
        cleaned = cleaned.replace(" ", "").replace("_", "")
        if not cleaned:
            return None

        last_comma = cleaned.rfind(",")
        last_dot = cleaned.rfind(".")
        # "1.234,50" and "12,5" use a decimal comma; "1,234" groups thousands.
        digits_after_comma = len(cleaned) - last_comma - 1
        if last_comma > last_dot and (last_dot != -1 or digits_after_comma <= 2):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
        return sign + cleaned

    def process_formdata(self, valuelist):
        if not valuelist or valuelist[0] is None:
            return
        text = str(valuelist[0])
        normalised = self._normalise_plain_number(text)
        if normalised is None:
            # Blank input is reported by the range validator, not as a
            # parse error.
            self.data = None
            return

        super().process_formdata([normalised])
        # Keep what the user typed for re-rendering.
        self.raw_data = valuelist
        if self.data is not None and not self.data.is_finite():
            self.data = None
            raise ValueError(self.gettext("Not a valid decimal value."))


class InvoiceForm(Form):
    """Fields a user may submit for an invoice.

    ``id`` and ``date`` are assigned by the server and never read from the
    submitted data.
    """

    customer_id = StringField(
        "Customer",
        name="customerId",
        validators=[DataRequired(message=CUSTOMER_REQUIRED_MESSAGE)],
    )
    amount = AmountField(
        "Amount",
        places=2,
        validators=[
            GreaterThan(0, message=AMOUNT_POSITIVE_MESSAGE),
            AtMost(MAX_AMOUNT, message=AMOUNT_TOO_LARGE_MESSAGE),
        ],
    )
    status = RadioField(
        "Status",
        choices=[(status, status.title()) for status in INVOICE_STATUSES],
        validate_choice=False,
        validators=[AnyOf(INVOICE_STATUSES, message=STATUS_REQUIRED_MESSAGE)],
    )


@dataclass(frozen=True)
class InvoiceFields:
    """Validated invoice input; ``amount`` is in major currency units."""

    customer_id: str
    amount: Decimal
    status: str


@dataclass(frozen=True)
class ValidationSuccess:
    data: InvoiceFields


@dataclass(frozen=True)
class ValidationFailure:
    errors: Dict[str, List[str]]
    message: str


ValidationResult = Union[ValidationSuccess, ValidationFailure]


def validate_invoice(formdata: Mapping, action: str = "Create") -> ValidationResult:
    """Validate submitted invoice fields.

    ``formdata`` may be a :class:`~werkzeug.datastructures.MultiDict` (such
    as ``request.form``) or a plain mapping.  ``action`` names the
    operation in the failure message, e.g. ``"Update"``.
    """
    if not hasattr(formdata, "getlist"):
        formdata = MultiDict(formdata)
    form = InvoiceForm(formdata=formdata)
    if not form.validate():
        return ValidationFailure(
            errors={
                field.name: list(field.errors) for field in form if field.errors
            },
            message=f"Missing Fields. Failed to {action} Invoice.",
        )
    return ValidationSuccess(
        data=InvoiceFields(
            customer_id=form.customer_id.data,
            amount=form.amount.data,
            status=form.status.data,
        )
    )


def to_minor_units(amount) -> int:
    """Convert a major-unit amount to integer minor units (cents)."""
    try:
        cents = (Decimal(str(amount)) * 100).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    return int(cents)
