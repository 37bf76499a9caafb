"""
Invoice arithmetic: line totals, GST breakdown, rounding and amount in words.

Nothing here touches the database. Omitted GST rates and the currency
phrase fall back to the application settings. Inputs are coerced to
Decimal through ``str`` so that ``"2"``, ``2`` and ``2.0`` all behave the
same; anything that is not a finite number raises ValidationError.

Money is kept to paise (0.01, ROUND_HALF_UP). The grand total is rounded to
a whole rupee with ROUND_HALF_UP, which Decimal defines as ties away from
zero, so 0.50 -> 1 and -0.50 -> -1.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List, Mapping, Optional, Sequence

from num2words import num2words

from backoffice.core.config import settings
from backoffice.core.exceptions import ValidationError
from backoffice.models import InvoiceStatus

PAISE = Decimal("0.01")
RUPEE = Decimal("1")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


@dataclass
class LineTotals:
    quantity: Decimal
    rate: Decimal
    tax_rate: Decimal
    amount: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass
class InvoiceTotals:
    sub_total: Decimal
    cgst_rate: Decimal
    cgst_amount: Decimal
    sgst_rate: Decimal
    sgst_amount: Decimal
    igst_rate: Decimal
    igst_amount: Decimal
    tax_total: Decimal
    discount: Decimal
    unrounded_total: Decimal
    round_off: Decimal
    grand_total: Decimal
    paid_amount: Decimal
    balance: Decimal
    status: str
    amount_in_words: str
    lines: List[LineTotals] = field(default_factory=list)


def to_decimal(value: Any, field_name: str = "value") -> Decimal:
    """Coerce a number or numeric string to Decimal."""
    if value is None:
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field_name} must be a number, got {value!r}")
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be a finite number, got {value!r}")
    return number


def to_money(value: Decimal) -> Decimal:
    return value.quantize(PAISE, rounding=ROUND_HALF_UP)


def round_half_away(value: Decimal) -> Decimal:
    """Round to a whole unit, ties away from zero."""
    return value.quantize(RUPEE, rounding=ROUND_HALF_UP)


def derive_status(balance: Decimal, paid_amount: Decimal) -> str:
    if balance <= 0:
        return InvoiceStatus.PAID.value
    if paid_amount > 0:
        return InvoiceStatus.PARTIAL.value
    return InvoiceStatus.UNPAID.value


def calculate_line(quantity: Any, rate: Any, tax_rate: Any = None,
                   default_tax_rate: Optional[Decimal] = None) -> LineTotals:
    """amount = quantity * rate; tax uses the line's own rate when it has one."""
    if default_tax_rate is None:
        default_tax_rate = (
            settings.DEFAULT_CGST_RATE + settings.DEFAULT_SGST_RATE + settings.DEFAULT_IGST_RATE
        )
    qty = to_decimal(quantity, "quantity")
    unit_rate = to_decimal(rate, "rate")
    effective_rate = default_tax_rate if tax_rate is None else to_decimal(tax_rate, "tax_rate")

    amount = to_money(qty * unit_rate)
    tax_amount = to_money(amount * effective_rate / HUNDRED)
    return LineTotals(
        quantity=qty,
        rate=unit_rate,
        tax_rate=effective_rate,
        amount=amount,
        tax_amount=tax_amount,
        total=amount + tax_amount,
    )


def amount_in_words(amount: Any, currency_phrase: Optional[str] = None) -> str:
    """
    Spell out the whole-rupee part of ``amount`` in the Indian numbering
    system (thousand, lakh, crore).

        >>> amount_in_words(236)
        'Two Hundred Thirty Six Rupees Only'
        >>> amount_in_words(150000)
        'One Lakh Fifty Thousand Rupees Only'
    """
    rupees = int(to_decimal(amount, "amount"))
    words = num2words(abs(rupees), lang="en_IN")
    words = words.replace(",", "").replace("-", " ").replace(" and ", " ")
    words = " ".join(words.title().split())
    if rupees < 0:
        words = f"Minus {words}"
    if currency_phrase is None:
        currency_phrase = settings.CURRENCY_PHRASE
    return f"{words} {currency_phrase}".strip()


def calculate_invoice(
    lines: Sequence[Mapping[str, Any]],
    discount: Any = 0,
    paid_amount: Any = 0,
    cgst_rate: Optional[Any] = None,
    sgst_rate: Optional[Any] = None,
    igst_rate: Optional[Any] = None,
    currency_phrase: Optional[str] = None,
) -> InvoiceTotals:
    """
    Compute every derived figure of an invoice.

    ``lines`` is a sequence of mappings with ``quantity``, ``rate`` and an
    optional ``tax_rate``. The invoice-level GST amounts are taken on the
    subtotal at the cgst/sgst/igst rates; line tax amounts are per-line
    figures shown on the document and do not feed the grand total.
    """
    cgst = settings.DEFAULT_CGST_RATE if cgst_rate is None else to_decimal(cgst_rate, "cgst_rate")
    sgst = settings.DEFAULT_SGST_RATE if sgst_rate is None else to_decimal(sgst_rate, "sgst_rate")
    igst = settings.DEFAULT_IGST_RATE if igst_rate is None else to_decimal(igst_rate, "igst_rate")
    combined_rate = cgst + sgst + igst

    line_totals = [
        calculate_line(
            line.get("quantity"),
            line.get("rate"),
            line.get("tax_rate"),
            default_tax_rate=combined_rate,
        )
        for line in lines
    ]

    sub_total = sum((line.amount for line in line_totals), ZERO)
    cgst_amount = to_money(sub_total * cgst / HUNDRED)
    sgst_amount = to_money(sub_total * sgst / HUNDRED)
    igst_amount = to_money(sub_total * igst / HUNDRED)
    tax_total = cgst_amount + sgst_amount + igst_amount

    discount_value = to_money(to_decimal(discount, "discount"))
    paid = to_money(to_decimal(paid_amount, "paid_amount"))

    unrounded = sub_total + tax_total - discount_value
    grand_total = round_half_away(unrounded)
    round_off = grand_total - unrounded
    balance = grand_total - paid

    return InvoiceTotals(
        sub_total=sub_total,
        cgst_rate=cgst,
        cgst_amount=cgst_amount,
        sgst_rate=sgst,
        sgst_amount=sgst_amount,
        igst_rate=igst,
        igst_amount=igst_amount,
        tax_total=tax_total,
        discount=discount_value,
        unrounded_total=unrounded,
        round_off=round_off,
        grand_total=grand_total,
        paid_amount=paid,
        balance=balance,
        status=derive_status(balance, paid),
        amount_in_words=amount_in_words(grand_total, currency_phrase),
        lines=line_totals,
    )
