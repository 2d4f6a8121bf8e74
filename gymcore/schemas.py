"""Pydantic schemas for request bodies and responses.

Fields are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import RoleEnum


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class StatusChange(CamelModel):
    status: str = Field(..., min_length=1, max_length=20)


# --- auth -----------------------------------------------------------------


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenData(CamelModel):
    """Identity carried by a verified session token."""

    account_id: int
    email: str
    role: RoleEnum
    gym_id: Optional[int] = None
    gym_name: Optional[str] = None


class AccountSummary(CamelModel):
    id: int
    email: str
    name: str
    role: RoleEnum
    gym_id: Optional[int] = None
    gym_name: Optional[str] = None


class LoginResponse(CamelModel):
    token: str
    user: AccountSummary


# --- platform -------------------------------------------------------------


class GymBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=40)
    location: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    services: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    working_hours: Optional[str] = Field(None, max_length=100)
    price_range: Optional[str] = Field(None, max_length=10)
    category: Optional[str] = Field(None, max_length=50)


class GymCreate(GymBase):
    admin_email: EmailStr
    admin_password: str = Field(..., min_length=6)
    admin_name: Optional[str] = Field(None, max_length=100)


class GymSettingsUpdate(CamelModel):
    """Profile fields a gym may edit about itself."""

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=40)
    location: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    services: Optional[List[str]] = None
    amenities: Optional[List[str]] = None
    working_hours: Optional[str] = Field(None, max_length=100)
    price_range: Optional[str] = Field(None, max_length=10)
    category: Optional[str] = Field(None, max_length=50)


class GymUpdate(GymSettingsUpdate):
    is_active: Optional[bool] = None


class GymRead(GymBase):
    id: int
    code: str
    is_active: bool
    created_at: dt.datetime
    email: str


class MarketplaceGym(CamelModel):
    code: str
    name: str
    location: Optional[str] = None
    city: Optional[str] = None
    description: Optional[str] = None
    services: List[str]
    amenities: List[str]
    working_hours: Optional[str] = None
    price_range: Optional[str] = None
    category: Optional[str] = None
    phone: Optional[str] = None


class BillingCreate(CamelModel):
    gym_id: int
    amount: float = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=255)
    due_date: dt.date


class BillingUpdate(CamelModel):
    amount: Optional[float] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=255)
    due_date: Optional[dt.date] = None
    status: Optional[Literal["pending", "paid", "overdue"]] = None


class BillingRead(CamelModel):
    id: int
    gym_id: int
    gym_name: Optional[str] = None
    amount: float
    description: Optional[str] = None
    due_date: dt.date
    status: str
    paid_at: Optional[dt.datetime] = None
    created_at: dt.datetime


class TicketCreate(CamelModel):
    subject: str = Field(..., min_length=3, max_length=200)
    message: str = Field(..., min_length=3)
    priority: Literal["low", "medium", "high"] = "medium"


class TicketRead(CamelModel):
    id: int
    gym_id: int
    gym_name: Optional[str] = None
    subject: str
    message: str
    priority: str
    status: str
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None


class ActivityLogRead(CamelModel):
    id: int
    action: str
    details: str
    actor_role: str
    actor_id: int
    gym_id: Optional[int] = None
    gym_name: Optional[str] = None
    created_at: dt.datetime


# --- members --------------------------------------------------------------


class MemberCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=40)
    membership_type: Optional[str] = Field(None, max_length=50)
    join_date: Optional[dt.date] = None
    expiry_date: Optional[dt.date] = None
    total_paid: float = Field(0, ge=0)


class MembershipRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=40)
    membership_type: Optional[str] = Field(None, max_length=50)


class MembershipRequestReceipt(CamelModel):
    gym_name: str
    status: str
    message: str


class MemberUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=40)
    membership_type: Optional[str] = Field(None, max_length=50)
    expiry_date: Optional[dt.date] = None
    total_paid: Optional[float] = Field(None, ge=0)


class MemberRead(CamelModel):
    id: int
    gym_id: int
    name: str
    email: str
    phone: Optional[str] = None
    membership_type: Optional[str] = None
    status: str
    join_date: dt.date
    expiry_date: Optional[dt.date] = None
    total_paid: float
    created_at: dt.datetime


# --- programs -------------------------------------------------------------


class PlanCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0)
    duration_months: int = Field(..., ge=1, le=60)
    features: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    is_popular: bool = False
    is_active: bool = True


class PlanUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    duration_months: Optional[int] = Field(None, ge=1, le=60)
    features: Optional[List[str]] = None
    description: Optional[str] = None
    is_popular: Optional[bool] = None
    is_active: Optional[bool] = None


class PlanRead(PlanCreate):
    id: int
    gym_id: int


class TrainerCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=40)
    specialty: Optional[str] = Field(None, max_length=100)
    experience: Optional[str] = Field(None, max_length=100)


class TrainerUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=40)
    specialty: Optional[str] = Field(None, max_length=100)
    experience: Optional[str] = Field(None, max_length=100)


class TrainerRead(TrainerCreate):
    id: int
    gym_id: int
    email: Optional[str] = None


Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
CLOCK_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ClassCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)
    trainer_id: Optional[int] = None
    day: Weekday
    time: str = Field(..., pattern=CLOCK_PATTERN)
    duration_minutes: int = Field(60, ge=5, le=600)
    capacity: int = Field(20, ge=1, le=1000)
    price: float = Field(0, ge=0)
    is_active: bool = True


class ClassUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)
    trainer_id: Optional[int] = None
    day: Optional[Weekday] = None
    time: Optional[str] = Field(None, pattern=CLOCK_PATTERN)
    duration_minutes: Optional[int] = Field(None, ge=5, le=600)
    capacity: Optional[int] = Field(None, ge=1, le=1000)
    price: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ClassRead(ClassCreate):
    id: int
    gym_id: int
    day: str
    time: str


class ClassBookingCreate(CamelModel):
    member_id: int


class ClassBookingRead(CamelModel):
    id: int
    gym_id: int
    class_id: int
    member_id: int
    status: str
    booked_at: dt.datetime


# --- facilities -----------------------------------------------------------


class LockerCreate(CamelModel):
    number: str = Field(..., min_length=1, max_length=20)
    size: Literal["small", "medium", "large"] = "medium"
    location: Optional[str] = Field(None, max_length=100)
    rent_price: float = Field(0, ge=0)
    deposit: float = Field(0, ge=0)


class LockerUpdate(CamelModel):
    number: Optional[str] = Field(None, min_length=1, max_length=20)
    size: Optional[Literal["small", "medium", "large"]] = None
    location: Optional[str] = Field(None, max_length=100)
    rent_price: Optional[float] = Field(None, ge=0)
    deposit: Optional[float] = Field(None, ge=0)


class LockerAssign(CamelModel):
    member_id: int
    rent_start: Optional[dt.date] = None
    rent_end: Optional[dt.date] = None


class LockerRead(LockerCreate):
    id: int
    gym_id: int
    size: str
    status: str
    member_id: Optional[int] = None
    rent_start: Optional[dt.date] = None
    rent_end: Optional[dt.date] = None


class ReservationCreate(CamelModel):
    facility: str = Field(..., min_length=1, max_length=100)
    member_id: int
    date: dt.date
    start_time: str = Field(..., pattern=CLOCK_PATTERN)
    end_time: str = Field(..., pattern=CLOCK_PATTERN)


class ReservationUpdate(CamelModel):
    facility: Optional[str] = Field(None, min_length=1, max_length=100)
    date: Optional[dt.date] = None
    start_time: Optional[str] = Field(None, pattern=CLOCK_PATTERN)
    end_time: Optional[str] = Field(None, pattern=CLOCK_PATTERN)


class ReservationRead(ReservationCreate):
    id: int
    gym_id: int
    status: str
    created_at: dt.datetime


class CheckIn(CamelModel):
    type: Literal["member", "staff"] = "member"
    member_id: Optional[int] = None
    staff_id: Optional[int] = None


class AttendanceRead(CamelModel):
    id: int
    gym_id: int
    type: str
    member_id: Optional[int] = None
    staff_id: Optional[int] = None
    check_in_at: dt.datetime
    check_out_at: Optional[dt.datetime] = None
    status: str
    duration_minutes: Optional[int] = None


# --- finance --------------------------------------------------------------


class ExpenseCreate(CamelModel):
    description: str = Field(..., min_length=1, max_length=255)
    amount: float = Field(..., gt=0)
    category: str = Field(..., min_length=1, max_length=50)
    date: Optional[dt.date] = None
    payment_method: Optional[str] = Field(None, max_length=50)
    vendor: Optional[str] = Field(None, max_length=100)
    is_recurring: bool = False
    notes: Optional[str] = None


class ExpenseUpdate(CamelModel):
    description: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[float] = Field(None, gt=0)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    date: Optional[dt.date] = None
    payment_method: Optional[str] = Field(None, max_length=50)
    vendor: Optional[str] = Field(None, max_length=100)
    is_recurring: Optional[bool] = None
    notes: Optional[str] = None


class ExpenseRead(ExpenseCreate):
    id: int
    gym_id: int
    date: dt.date


class StaffCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    position: str = Field(..., min_length=1, max_length=100)
    employee_id: Optional[str] = Field(None, max_length=50)
    pay_type: Literal["hourly", "salary"] = "hourly"
    hourly_rate: float = Field(0, ge=0)
    salary: Optional[float] = Field(None, ge=0)
    is_active: bool = True


class StaffUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    position: Optional[str] = Field(None, min_length=1, max_length=100)
    employee_id: Optional[str] = Field(None, max_length=50)
    pay_type: Optional[Literal["hourly", "salary"]] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    salary: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class StaffRead(StaffCreate):
    id: int
    gym_id: int
    email: Optional[str] = None


class PayrollCreate(CamelModel):
    staff_id: int
    pay_period_start: dt.date
    pay_period_end: dt.date
    hours_worked: float = Field(0, ge=0, le=1000)
    deductions: float = Field(0, ge=0)

    @field_validator("pay_period_end")
    @classmethod
    def _period_order(cls, value: dt.date, info):
        start = info.data.get("pay_period_start")
        if start and value < start:
            raise ValueError("pay period end must not precede its start")
        return value


class PayrollUpdate(CamelModel):
    hours_worked: Optional[float] = Field(None, ge=0, le=1000)
    deductions: Optional[float] = Field(None, ge=0)


class PayrollRead(CamelModel):
    id: int
    gym_id: int
    staff_id: int
    pay_period_start: dt.date
    pay_period_end: dt.date
    hours_worked: float
    regular_hours: float
    overtime_hours: float
    gross_pay: float
    deductions: float
    net_pay: float
    status: str
    pay_date: Optional[dt.date] = None


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=150)
    category: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    price: float = Field(..., gt=0)
    cost: float = Field(0, ge=0)
    stock: int = Field(0, ge=0)
    min_stock: int = Field(0, ge=0)
    is_active: bool = True


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    category: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    cost: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    min_stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ProductRead(ProductCreate):
    id: int
    gym_id: int
    sold: int
    low_stock: bool = False


class ProductSale(CamelModel):
    quantity: int = Field(..., ge=1)


class DepositCreate(CamelModel):
    member_id: int
    amount: float = Field(..., gt=0)
    type: Literal["security", "membership", "locker", "equipment"] = "security"
    deposit_date: Optional[dt.date] = None
    reason: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class DepositUpdate(CamelModel):
    amount: Optional[float] = Field(None, gt=0)
    type: Optional[Literal["security", "membership", "locker", "equipment"]] = None
    reason: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class DepositRead(DepositCreate):
    id: int
    gym_id: int
    type: str
    status: str
    deposit_date: dt.date
    refund_date: Optional[dt.date] = None


class RevenueCreate(CamelModel):
    amount: float = Field(..., gt=0)
    source: str = Field(..., min_length=1, max_length=50)


class RevenueRead(RevenueCreate):
    id: int
    gym_id: int
    date: dt.datetime


# --- dashboards -----------------------------------------------------------


class PlatformStats(CamelModel):
    total_gyms: int
    active_gyms: int
    total_members: int
    total_revenue: float


class PlatformDashboard(CamelModel):
    stats: PlatformStats
    recent_activities: List[ActivityLogRead]


class GymDashboard(CamelModel):
    total_members: int
    active_members: int
    pending_requests: int
    total_classes: int
    monthly_revenue: float
    monthly_expenses: float
    today_attendance: int
