"""Subscription plans, trainers, scheduled classes and class bookings."""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from gymcore import lifecycle
from gymcore.database import get_db
from gymcore.errors import Conflict, NotFound, ValidationError
from gymcore.models import ClassBooking, GymClass, SubscriptionPlan, Trainer
from gymcore.schemas import (
    ClassBookingCreate,
    ClassBookingRead,
    ClassCreate,
    ClassRead,
    ClassUpdate,
    PlanCreate,
    PlanRead,
    PlanUpdate,
    StatusChange,
    TrainerCreate,
    TrainerRead,
    TrainerUpdate,
)
from gymcore.tenancy import TenantScope, ensure_member, ensure_trainer, get_scoped_or_404, get_tenant_scope, scoped_query

from ..crud import tenant_crud_router

OPEN_BOOKING_STATES = ("pending", "confirmed")


def _check_trainer(db: Session, scope: TenantScope, data: Dict[str, Any], _: Optional[GymClass]) -> Dict[str, Any]:
    ensure_trainer(db, scope, data.get("trainer_id"))
    return data


def _lower_email(db: Session, scope: TenantScope, data: Dict[str, Any], _: Optional[Any]) -> Dict[str, Any]:
    if data.get("email"):
        data["email"] = data["email"].lower()
    return data


subscriptions_router = tenant_crud_router(
    path="subscriptions",
    model=SubscriptionPlan,
    label="Subscription plan",
    create_schema=PlanCreate,
    update_schema=PlanUpdate,
    read_schema=PlanRead,
    order_by=SubscriptionPlan.price,
)

trainers_router = tenant_crud_router(
    path="trainers",
    model=Trainer,
    label="Trainer",
    create_schema=TrainerCreate,
    update_schema=TrainerUpdate,
    read_schema=TrainerRead,
    order_by=Trainer.name,
    prepare=_lower_email,
)

classes_router = tenant_crud_router(
    path="classes",
    model=GymClass,
    label="Class",
    create_schema=ClassCreate,
    update_schema=ClassUpdate,
    read_schema=ClassRead,
    order_by=GymClass.id,
    prepare=_check_trainer,
)

bookings_router = APIRouter(prefix="/api/gym/{gym_id}/classes/{class_id}/bookings", tags=["classes"])


def _open_bookings(db: Session, scope: TenantScope, gym_class: GymClass):
    return scoped_query(db, ClassBooking, scope).filter(
        ClassBooking.class_id == gym_class.id,
        ClassBooking.status.in_(OPEN_BOOKING_STATES),
    )


@bookings_router.get("", response_model=List[ClassBookingRead])
def list_bookings(
    class_id: int,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> List[ClassBooking]:
    gym_class = get_scoped_or_404(db, GymClass, scope, class_id, "Class")
    return (
        scoped_query(db, ClassBooking, scope)
        .filter(ClassBooking.class_id == gym_class.id)
        .order_by(ClassBooking.booked_at)
        .all()
    )


@bookings_router.post("", response_model=ClassBookingRead, status_code=status.HTTP_201_CREATED)
def book_class(
    class_id: int,
    booking_in: ClassBookingCreate,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> ClassBooking:
    gym_class = get_scoped_or_404(db, GymClass, scope, class_id, "Class")
    member = ensure_member(db, scope, booking_in.member_id)
    lifecycle.refresh_member_expiry(member)
    if not gym_class.is_active:
        raise ValidationError("Class is not active")
    if member.status != "active":
        raise ValidationError("Only active members can book classes")

    open_bookings = _open_bookings(db, scope, gym_class)
    if open_bookings.filter(ClassBooking.member_id == member.id).first():
        raise Conflict("Member already booked this class")
    if open_bookings.count() >= gym_class.capacity:
        raise Conflict("Class is full")

    booking = ClassBooking(
        gym_id=scope.gym_id,
        class_id=gym_class.id,
        member_id=member.id,
        status=lifecycle.CLASS_BOOKING.initial,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


@bookings_router.put("/{booking_id}/status", response_model=ClassBookingRead)
def change_booking_status(
    class_id: int,
    booking_id: int,
    change: StatusChange,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> ClassBooking:
    gym_class = get_scoped_or_404(db, GymClass, scope, class_id, "Class")
    booking = (
        scoped_query(db, ClassBooking, scope)
        .filter(ClassBooking.id == booking_id, ClassBooking.class_id == gym_class.id)
        .first()
    )
    if booking is None:
        raise NotFound("Booking not found")
    lifecycle.CLASS_BOOKING.advance(booking, change.status)
    db.commit()
    db.refresh(booking)
    return booking


routers = [subscriptions_router, trainers_router, classes_router, bookings_router]
