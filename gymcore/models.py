"""SQLAlchemy models for accounts, tenants and tenant-scoped resources."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base

Money = Numeric(10, 2)


class RoleEnum(str, Enum):
    PLATFORM_OPERATOR = "platform_operator"
    GYM_ADMIN = "gym_admin"
    MEMBER = "member"


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    name: Mapped[str] = mapped_column(String(100))
    role: Mapped[RoleEnum] = mapped_column(SqlEnum(RoleEnum))
    gym_id: Mapped[Optional[int]] = mapped_column(ForeignKey("gyms.id"), index=True, default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    gym: Mapped[Optional["Gym"]] = relationship(back_populates="accounts")


class Gym(Base):
    __tablename__ = "gyms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    code: Mapped[str] = mapped_column(String(6), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(150))
    email: Mapped[str] = mapped_column(String(255), unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(40), default=None)
    location: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    city: Mapped[Optional[str]] = mapped_column(String(100), index=True, default=None)
    description: Mapped[Optional[str]] = mapped_column(Text, default=None)
    services: Mapped[list[str]] = mapped_column(JSON, default=list)
    amenities: Mapped[list[str]] = mapped_column(JSON, default=list)
    working_hours: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    price_range: Mapped[Optional[str]] = mapped_column(String(10), default=None)
    category: Mapped[Optional[str]] = mapped_column(String(50), index=True, default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    accounts: Mapped[List[Account]] = relationship(back_populates="gym")
    members: Mapped[List["Member"]] = relationship(back_populates="gym")


class Member(Base):
    __tablename__ = "members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(40), default=None)
    membership_type: Mapped[Optional[str]] = mapped_column(String(50), default=None)
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    join_date: Mapped[date] = mapped_column(Date, default=date.today)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, default=None)
    total_paid: Mapped[Decimal] = mapped_column(Money, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    gym: Mapped[Gym] = relationship(back_populates="members")

    __table_args__ = (UniqueConstraint("gym_id", "email", name="uq_member_gym_email"),)


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    name: Mapped[str] = mapped_column(String(100))
    price: Mapped[Decimal] = mapped_column(Money)
    duration_months: Mapped[int] = mapped_column(Integer)
    features: Mapped[list[str]] = mapped_column(JSON, default=list)
    description: Mapped[Optional[str]] = mapped_column(Text, default=None)
    is_popular: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Trainer(Base):
    __tablename__ = "trainers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    phone: Mapped[Optional[str]] = mapped_column(String(40), default=None)
    specialty: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    experience: Mapped[Optional[str]] = mapped_column(String(100), default=None)


class GymClass(Base):
    __tablename__ = "classes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    trainer_id: Mapped[Optional[int]] = mapped_column(ForeignKey("trainers.id", ondelete="SET NULL"), default=None)
    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text, default=None)
    category: Mapped[Optional[str]] = mapped_column(String(50), default=None)
    day: Mapped[str] = mapped_column(String(20))
    time: Mapped[str] = mapped_column(String(10))
    duration_minutes: Mapped[int] = mapped_column(Integer, default=60)
    capacity: Mapped[int] = mapped_column(Integer, default=20)
    price: Mapped[Decimal] = mapped_column(Money, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    trainer: Mapped[Optional[Trainer]] = relationship()
    bookings: Mapped[List["ClassBooking"]] = relationship(back_populates="gym_class", cascade="all, delete-orphan")


class ClassBooking(Base):
    __tablename__ = "class_bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    class_id: Mapped[int] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), index=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("members.id", ondelete="CASCADE"), index=True)
    status: Mapped[str] = mapped_column(String(20), default="pending")
    booked_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    gym_class: Mapped[GymClass] = relationship(back_populates="bookings")


class Locker(Base):
    __tablename__ = "lockers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    number: Mapped[str] = mapped_column(String(20))
    size: Mapped[str] = mapped_column(String(10), default="medium")
    location: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    status: Mapped[str] = mapped_column(String(20), default="available")
    rent_price: Mapped[Decimal] = mapped_column(Money, default=0)
    deposit: Mapped[Decimal] = mapped_column(Money, default=0)
    member_id: Mapped[Optional[int]] = mapped_column(ForeignKey("members.id", ondelete="SET NULL"), default=None)
    rent_start: Mapped[Optional[date]] = mapped_column(Date, default=None)
    rent_end: Mapped[Optional[date]] = mapped_column(Date, default=None)

    __table_args__ = (UniqueConstraint("gym_id", "number", name="uq_locker_gym_number"),)


class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    description: Mapped[str] = mapped_column(String(255))
    amount: Mapped[Decimal] = mapped_column(Money)
    category: Mapped[str] = mapped_column(String(50))
    date: Mapped[date] = mapped_column(Date, default=date.today, index=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), default=None)
    vendor: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, default=None)


class Staff(Base):
    __tablename__ = "staff"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    position: Mapped[str] = mapped_column(String(100))
    employee_id: Mapped[Optional[str]] = mapped_column(String(50), default=None)
    pay_type: Mapped[str] = mapped_column(String(10), default="hourly")
    hourly_rate: Mapped[Decimal] = mapped_column(Money, default=0)
    salary: Mapped[Optional[Decimal]] = mapped_column(Money, default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class PayrollRecord(Base):
    __tablename__ = "payroll_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    staff_id: Mapped[int] = mapped_column(ForeignKey("staff.id"), index=True)
    pay_period_start: Mapped[date] = mapped_column(Date)
    pay_period_end: Mapped[date] = mapped_column(Date)
    hours_worked: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=0)
    regular_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=0)
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=0)
    gross_pay: Mapped[Decimal] = mapped_column(Money, default=0)
    deductions: Mapped[Decimal] = mapped_column(Money, default=0)
    net_pay: Mapped[Decimal] = mapped_column(Money, default=0)
    status: Mapped[str] = mapped_column(String(20), default="draft")
    pay_date: Mapped[Optional[date]] = mapped_column(Date, default=None)


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    name: Mapped[str] = mapped_column(String(150))
    category: Mapped[Optional[str]] = mapped_column(String(50), default=None)
    description: Mapped[Optional[str]] = mapped_column(Text, default=None)
    price: Mapped[Decimal] = mapped_column(Money)
    cost: Mapped[Decimal] = mapped_column(Money, default=0)
    stock: Mapped[int] = mapped_column(Integer, default=0)
    min_stock: Mapped[int] = mapped_column(Integer, default=0)
    sold: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    @property
    def low_stock(self) -> bool:
        return self.stock <= self.min_stock


class Reservation(Base):
    __tablename__ = "reservations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    facility: Mapped[str] = mapped_column(String(100), index=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("members.id", ondelete="CASCADE"), index=True)
    date: Mapped[date] = mapped_column(Date, index=True)
    start_time: Mapped[str] = mapped_column(String(5))
    end_time: Mapped[str] = mapped_column(String(5))
    status: Mapped[str] = mapped_column(String(20), default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Deposit(Base):
    __tablename__ = "deposits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("members.id", ondelete="CASCADE"), index=True)
    amount: Mapped[Decimal] = mapped_column(Money)
    type: Mapped[str] = mapped_column(String(20), default="security")
    status: Mapped[str] = mapped_column(String(20), default="active")
    deposit_date: Mapped[date] = mapped_column(Date, default=date.today)
    refund_date: Mapped[Optional[date]] = mapped_column(Date, default=None)
    reason: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    notes: Mapped[Optional[str]] = mapped_column(Text, default=None)


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    type: Mapped[str] = mapped_column(String(10), default="member")
    member_id: Mapped[Optional[int]] = mapped_column(ForeignKey("members.id", ondelete="CASCADE"), default=None)
    staff_id: Mapped[Optional[int]] = mapped_column(ForeignKey("staff.id", ondelete="CASCADE"), default=None)
    check_in_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    check_out_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    status: Mapped[str] = mapped_column(String(20), default="checked_in")

    @property
    def duration_minutes(self) -> Optional[int]:
        if self.check_out_at is None:
            return None
        return int((self.check_out_at - self.check_in_at).total_seconds() // 60)


class Revenue(Base):
    __tablename__ = "revenues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    amount: Mapped[Decimal] = mapped_column(Money)
    source: Mapped[str] = mapped_column(String(50))
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)


class Billing(Base):
    __tablename__ = "billing_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    amount: Mapped[Decimal] = mapped_column(Money)
    description: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    due_date: Mapped[date] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default="pending")
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    gym: Mapped[Gym] = relationship()

    @property
    def gym_name(self) -> Optional[str]:
        return self.gym.name if self.gym else None


class SupportTicket(Base):
    __tablename__ = "support_tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    gym_id: Mapped[int] = mapped_column(ForeignKey("gyms.id"), index=True)
    subject: Mapped[str] = mapped_column(String(200))
    message: Mapped[str] = mapped_column(Text)
    priority: Mapped[str] = mapped_column(String(10), default="medium")
    status: Mapped[str] = mapped_column(String(20), default="open", index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)

    gym: Mapped[Gym] = relationship()

    @property
    def gym_name(self) -> Optional[str]:
        return self.gym.name if self.gym else None


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    action: Mapped[str] = mapped_column(String(50), index=True)
    details: Mapped[str] = mapped_column(Text)
    actor_role: Mapped[str] = mapped_column(String(30))
    actor_id: Mapped[int] = mapped_column(Integer)
    gym_id: Mapped[Optional[int]] = mapped_column(ForeignKey("gyms.id"), index=True, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    gym: Mapped[Optional[Gym]] = relationship()

    @property
    def gym_name(self) -> Optional[str]:
        return self.gym.name if self.gym else None
