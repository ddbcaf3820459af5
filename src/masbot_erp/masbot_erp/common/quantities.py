"""Fixed-point stock quantities and money.

Stock is kept with three fractional digits (grams, millilitres) and money with
two, so repeated partial consumption never accumulates float drift.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ..core.exceptions import ValidationError

QUANTITY_STEP = Decimal("0.001")
MONEY_STEP = Decimal("0.01")
ZERO = Decimal("0")


def to_quantity(value: object, field_name: str = "Quantity") -> Decimal:
    """Coerce int/float/str/Decimal to a three-place Decimal."""
    if value is None or value == "":
        return ZERO.quantize(QUANTITY_STEP)
    try:
        # str() first so 0.1 (float) becomes Decimal("0.1"), not its binary expansion
        d = Decimal(str(value)) if not isinstance(value, Decimal) else value
    except InvalidOperation:
        raise ValidationError(f"{field_name} is not a number: {value!r}")
    if not d.is_finite():
        raise ValidationError(f"{field_name} is not a number: {value!r}")
    return d.quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)


def to_money(value: object, field_name: str = "Amount") -> Decimal:
    if value is None or value == "":
        return ZERO.quantize(MONEY_STEP)
    try:
        d = Decimal(str(value)) if not isinstance(value, Decimal) else value
    except InvalidOperation:
        raise ValidationError(f"{field_name} is not a number: {value!r}")
    if not d.is_finite():
        raise ValidationError(f"{field_name} is not a number: {value!r}")
    return d.quantize(MONEY_STEP, rounding=ROUND_HALF_UP)


def split_evenly(total: Decimal, parts: int) -> list[Decimal]:
    """Split money into `parts` shares; the last share absorbs the rounding remainder."""
    if parts <= 0:
        return []
    share = (total / parts).quantize(MONEY_STEP, rounding=ROUND_HALF_UP)
    shares = [share] * (parts - 1)
    shares.append(total - share * (parts - 1))
    return shares
