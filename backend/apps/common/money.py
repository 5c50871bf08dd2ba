from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Tuple

CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Coerce ``value`` to a two-place Decimal.

    Floats are routed through ``str`` so ``0.1`` becomes ``Decimal("0.10")``
    rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise ValueError(f"Invalid money amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid money amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(unit_price: Any, quantity: int) -> Decimal:
    return to_money(to_money(unit_price) * int(quantity))


def sum_lines(lines: Iterable[Tuple[Any, int]]) -> Decimal:
    total = Decimal("0.00")
    for unit_price, quantity in lines:
        total += line_total(unit_price, quantity)
    return to_money(total)
