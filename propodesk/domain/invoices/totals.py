"""
Invoice arithmetic in Decimal.

Every step rounds half-up to cents: each line amount, the subtotal, the tax
and the total. Amounts are returned as floats for JSON columns.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, NamedTuple, Union

CENTS = Decimal("0.01")

Number = Union[int, float, Decimal, str]


def to_cents(value: Number) -> Decimal:
    """Round half-up to two decimal places"""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def line_amount(quantity: Number, unit_price: Number) -> Decimal:
    return to_cents(Decimal(str(quantity)) * Decimal(str(unit_price)))


class InvoiceTotals(NamedTuple):
    line_items: list[dict]
    subtotal: float
    tax_amount: float
    total: float


def compute_invoice_totals(line_items: Iterable[dict], tax_rate: Number = 0) -> InvoiceTotals:
    """
    Recompute every line amount and the invoice totals.

    Any ``amount`` already present on a line is ignored and replaced with
    ``quantity * unit_price``.
    """
    priced: list[dict] = []
    subtotal = Decimal("0")
    for item in line_items:
        amount = line_amount(item["quantity"], item["unit_price"])
        subtotal += amount
        priced.append({**item, "amount": float(amount)})

    subtotal = to_cents(subtotal)
    tax_amount = to_cents(subtotal * Decimal(str(tax_rate or 0)) / Decimal("100"))
    total = to_cents(subtotal + tax_amount)
    return InvoiceTotals(
        line_items=priced,
        subtotal=float(subtotal),
        tax_amount=float(tax_amount),
        total=float(total),
    )


def split_unit_price(unit_price: Number, parts: int) -> float:
    """Unit price of one of ``parts`` equal milestone payments"""
    if parts < 1:
        raise ValueError("parts must be >= 1")
    return float(to_cents(Decimal(str(unit_price)) / Decimal(parts)))
