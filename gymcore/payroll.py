"""Pay computation for payroll records."""
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Union

from .errors import ValidationError

Number = Union[int, float, Decimal]

REGULAR_HOURS_LIMIT = Decimal("40")
OVERTIME_MULTIPLIER = Decimal("1.5")
CENT = Decimal("0.01")


def _money(value: Number) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_pay(
    pay_type: str,
    hourly_rate: Number,
    salary: Optional[Number],
    hours_worked: Number,
    deductions: Number = 0,
) -> Dict[str, Decimal]:
    """Split hours and compute gross and net pay for one pay period.

    Hourly staff get the first 40 hours at their rate and the rest at 1.5x.
    Salaried staff get their fixed salary regardless of hours.
    """
    hours = _money(hours_worked)
    if pay_type == "salary":
        regular, overtime = hours, Decimal("0.00")
        gross = _money(salary or 0)
    else:
        rate = Decimal(str(hourly_rate))
        regular = min(hours, REGULAR_HOURS_LIMIT)
        overtime = max(hours - REGULAR_HOURS_LIMIT, Decimal("0"))
        gross = _money(regular * rate + overtime * rate * OVERTIME_MULTIPLIER)

    deducted = _money(deductions)
    if deducted > gross:
        raise ValidationError("Deductions exceed gross pay")
    return {
        "hours_worked": hours,
        "regular_hours": _money(regular),
        "overtime_hours": _money(overtime),
        "gross_pay": gross,
        "deductions": deducted,
        "net_pay": gross - deducted,
    }
