"""Unit tests for request and response schemas."""
from datetime import date, datetime

import pytest
from pydantic import ValidationError

from gymcore.schemas import ClassCreate, GymCreate, MemberRead, PayrollCreate, ReservationCreate, TokenData


class TestWireFormat:
    """Fields are camelCase on the wire."""

    def test_accepts_camel_and_snake_case(self):
        """Test both spellings populate the same field."""
        camel = PayrollCreate(staffId=1, payPeriodStart="2024-01-01", payPeriodEnd="2024-01-07")
        snake = PayrollCreate(staff_id=1, pay_period_start=date(2024, 1, 1), pay_period_end=date(2024, 1, 7))
        assert camel == snake

    def test_dumps_by_alias(self):
        """Test serialisation uses camelCase."""
        member = MemberRead(
            id=1,
            gym_id=2,
            name="Jane",
            email="jane@example.com",
            status="active",
            join_date=date(2024, 1, 1),
            total_paid=0,
            created_at=datetime(2024, 1, 1, 9, 30),
        )
        dumped = member.model_dump(by_alias=True)
        assert dumped["gymId"] == 2
        assert dumped["joinDate"] == date(2024, 1, 1)

    def test_token_data_role(self):
        """Test unknown roles are rejected."""
        with pytest.raises(ValidationError):
            TokenData(account_id=1, email="a@example.com", role="janitor")


class TestValidation:
    """Test field level validation."""

    def test_payroll_period_order(self):
        """Test the period end may not precede its start."""
        with pytest.raises(ValidationError):
            PayrollCreate(staffId=1, payPeriodStart="2024-01-07", payPeriodEnd="2024-01-01")

    def test_gym_create_requires_admin(self):
        """Test gym creation needs admin credentials."""
        with pytest.raises(ValidationError):
            GymCreate(name="FitZone", email="contact@fitzone.com")
        with pytest.raises(ValidationError):
            GymCreate(name="FitZone", email="contact@fitzone.com", adminEmail="a@fitzone.com", adminPassword="12345")

        gym = GymCreate(name="FitZone", email="contact@fitzone.com", adminEmail="a@fitzone.com", adminPassword="123456")
        assert gym.admin_name is None
        assert gym.services == []

    def test_gym_email_is_validated(self):
        """Test malformed emails are rejected."""
        with pytest.raises(ValidationError):
            GymCreate(name="FitZone", email="not-an-email", adminEmail="a@fitzone.com", adminPassword="123456")

    def test_class_schedule(self):
        """Test day names and clock times."""
        assert ClassCreate(name="Yoga", day="Monday", time="07:30").capacity == 20
        with pytest.raises(ValidationError):
            ClassCreate(name="Yoga", day="Monday", time="7:30pm")

    def test_reservation_times(self):
        """Test malformed reservation times."""
        with pytest.raises(ValidationError):
            ReservationCreate(facility="Court", memberId=1, date="2024-01-01", startTime="9", endTime="10:00")
