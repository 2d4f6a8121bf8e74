"""Unit tests for pay computation."""
from decimal import Decimal

import pytest

from gymcore.errors import ValidationError
from gymcore.payroll import compute_pay


class TestComputePay:
    """Test hourly, overtime and salaried pay."""

    def test_hourly_without_overtime(self):
        """Test a short week."""
        pay = compute_pay("hourly", 12.5, None, 30)
        assert pay["regular_hours"] == Decimal("30.00")
        assert pay["overtime_hours"] == Decimal("0.00")
        assert pay["gross_pay"] == Decimal("375.00")
        assert pay["net_pay"] == Decimal("375.00")

    def test_overtime_at_time_and_a_half(self):
        """Hours past forty are paid at 1.5x."""
        pay = compute_pay("hourly", Decimal("20"), None, 45, deductions=50)
        assert pay["regular_hours"] == Decimal("40.00")
        assert pay["overtime_hours"] == Decimal("5.00")
        assert pay["gross_pay"] == Decimal("950.00")
        assert pay["net_pay"] == Decimal("900.00")

    def test_salary_ignores_hours(self):
        """Test salaried staff."""
        pay = compute_pay("salary", 0, 3200, 52)
        assert pay["gross_pay"] == Decimal("3200.00")
        assert pay["overtime_hours"] == Decimal("0.00")
        assert pay["hours_worked"] == Decimal("52.00")

    def test_rounding(self):
        """Test amounts are rounded to cents, half up."""
        pay = compute_pay("hourly", 10.005, None, 1)
        assert pay["gross_pay"] == Decimal("10.01")

    def test_deductions_cannot_exceed_gross(self):
        """Test negative net pay is refused."""
        with pytest.raises(ValidationError):
            compute_pay("hourly", 10, None, 5, deductions=60)
