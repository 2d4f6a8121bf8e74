"""Lockers, facility reservations and the attendance desk."""
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from gymcore import lifecycle
from gymcore.database import get_db
from gymcore.errors import Conflict, ValidationError
from gymcore.models import AttendanceRecord, Locker, Reservation
from gymcore.schemas import (
    AttendanceRead,
    CheckIn,
    LockerAssign,
    LockerCreate,
    LockerRead,
    LockerUpdate,
    ReservationCreate,
    ReservationRead,
    ReservationUpdate,
)
from gymcore.tenancy import TenantScope, ensure_member, ensure_staff, get_scoped_or_404, get_tenant_scope, scoped_query

from ..crud import tenant_crud_router

# --- lockers --------------------------------------------------------------


def _check_locker_number(db: Session, scope: TenantScope, data: Dict[str, Any], locker: Optional[Locker]) -> Dict[str, Any]:
    number = data.get("number")
    if number:
        query = scoped_query(db, Locker, scope).filter(Locker.number == number)
        if locker is not None:
            query = query.filter(Locker.id != locker.id)
        if query.first():
            raise Conflict(f"Locker {number} already exists")
    return data


def _clear_rental(locker: Locker) -> None:
    locker.member_id = None
    locker.rent_start = None
    locker.rent_end = None


def _locker_transition(locker: Locker, previous: str, target: str) -> None:
    if target == "occupied":
        raise ValidationError("Assign a member to occupy a locker")
    if previous == "occupied":
        _clear_rental(locker)


lockers_router = tenant_crud_router(
    path="lockers",
    model=Locker,
    label="Locker",
    create_schema=LockerCreate,
    update_schema=LockerUpdate,
    read_schema=LockerRead,
    order_by=Locker.number,
    prepare=_check_locker_number,
    lifecycle=lifecycle.LOCKER,
    on_transition=_locker_transition,
)

locker_rentals_router = APIRouter(prefix="/api/gym/{gym_id}/lockers", tags=["lockers"])


@locker_rentals_router.post("/{locker_id}/assign", response_model=LockerRead)
def assign_locker(
    locker_id: int,
    assignment: LockerAssign,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> Locker:
    locker = get_scoped_or_404(db, Locker, scope, locker_id, "Locker")
    member = ensure_member(db, scope, assignment.member_id)
    if assignment.rent_end and assignment.rent_end < (assignment.rent_start or date.today()):
        raise ValidationError("Rent end must not precede rent start")
    lifecycle.LOCKER.advance(locker, "occupied")
    locker.member_id = member.id
    locker.rent_start = assignment.rent_start or date.today()
    locker.rent_end = assignment.rent_end
    db.commit()
    db.refresh(locker)
    return locker


@locker_rentals_router.post("/{locker_id}/release", response_model=LockerRead)
def release_locker(
    locker_id: int,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> Locker:
    locker = get_scoped_or_404(db, Locker, scope, locker_id, "Locker")
    if locker.status != "occupied":
        raise ValidationError("Locker is not occupied")
    lifecycle.LOCKER.advance(locker, "available")
    _clear_rental(locker)
    db.commit()
    db.refresh(locker)
    return locker


# --- reservations ---------------------------------------------------------


def _ensure_slot_free(
    db: Session,
    scope: TenantScope,
    facility: str,
    day: date,
    start: str,
    end: str,
    exclude_id: Optional[int] = None,
) -> None:
    overlap_query = scoped_query(db, Reservation, scope).filter(
        Reservation.facility == facility,
        Reservation.date == day,
        Reservation.status != "cancelled",
        Reservation.start_time < end,
        Reservation.end_time > start,
    )
    if exclude_id:
        overlap_query = overlap_query.filter(Reservation.id != exclude_id)
    if overlap_query.first():
        raise Conflict("Facility already reserved for that slot")


def _check_reservation(
    db: Session, scope: TenantScope, data: Dict[str, Any], reservation: Optional[Reservation]
) -> Dict[str, Any]:
    if reservation is None:
        ensure_member(db, scope, data["member_id"])
    elif reservation.status == "cancelled":
        raise ValidationError("Cancelled reservations cannot be changed")

    def current(key: str) -> Any:
        if data.get(key) is not None:
            return data[key]
        return getattr(reservation, key) if reservation is not None else None

    start, end = current("start_time"), current("end_time")
    # HH:MM strings compare correctly as text.
    if end <= start:
        raise ValidationError("End time must be after start time")
    _ensure_slot_free(
        db,
        scope,
        current("facility"),
        current("date"),
        start,
        end,
        exclude_id=reservation.id if reservation is not None else None,
    )
    return {key: value for key, value in data.items() if value is not None}


reservations_router = tenant_crud_router(
    path="reservations",
    model=Reservation,
    label="Reservation",
    create_schema=ReservationCreate,
    update_schema=ReservationUpdate,
    read_schema=ReservationRead,
    order_by=Reservation.date,
    prepare=_check_reservation,
    lifecycle=lifecycle.RESERVATION,
)


# --- attendance -----------------------------------------------------------

attendance_router = APIRouter(prefix="/api/gym/{gym_id}/attendance", tags=["attendance"])


@attendance_router.get("", response_model=List[AttendanceRead])
def list_attendance(
    day: Optional[date] = Query(None, alias="date"),
    kind: Optional[str] = Query(None, alias="type"),
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> List[AttendanceRecord]:
    query = scoped_query(db, AttendanceRecord, scope)
    if day is not None:
        start = datetime.combine(day, datetime.min.time())
        query = query.filter(AttendanceRecord.check_in_at >= start, AttendanceRecord.check_in_at < start + timedelta(days=1))
    if kind:
        query = query.filter(AttendanceRecord.type == kind)
    return query.order_by(AttendanceRecord.check_in_at.desc()).all()


@attendance_router.post("", response_model=AttendanceRead, status_code=status.HTTP_201_CREATED)
def check_in(
    check: CheckIn,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> AttendanceRecord:
    open_records = scoped_query(db, AttendanceRecord, scope).filter(AttendanceRecord.status == "checked_in")
    if check.type == "member":
        if check.member_id is None:
            raise ValidationError("memberId is required for member check-in")
        member = ensure_member(db, scope, check.member_id)
        lifecycle.refresh_member_expiry(member)
        if member.status != "active":
            raise ValidationError("Only active members can check in")
        if open_records.filter(AttendanceRecord.member_id == member.id).first():
            raise Conflict("Member is already checked in")
        record = AttendanceRecord(gym_id=scope.gym_id, type="member", member_id=member.id)
    else:
        if check.staff_id is None:
            raise ValidationError("staffId is required for staff check-in")
        staff = ensure_staff(db, scope, check.staff_id)
        if open_records.filter(AttendanceRecord.staff_id == staff.id).first():
            raise Conflict("Staff member is already checked in")
        record = AttendanceRecord(gym_id=scope.gym_id, type="staff", staff_id=staff.id)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@attendance_router.get("/{attendance_id}", response_model=AttendanceRead)
def get_attendance(
    attendance_id: int,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> AttendanceRecord:
    return get_scoped_or_404(db, AttendanceRecord, scope, attendance_id, "Attendance record")


@attendance_router.post("/{attendance_id}/check-out", response_model=AttendanceRead)
def check_out(
    attendance_id: int,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> AttendanceRecord:
    record = get_scoped_or_404(db, AttendanceRecord, scope, attendance_id, "Attendance record")
    if record.status != "checked_in":
        raise ValidationError("Already checked out")
    record.check_out_at = datetime.utcnow()
    record.status = "checked_out"
    db.commit()
    db.refresh(record)
    return record


@attendance_router.delete("/{attendance_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_attendance(
    attendance_id: int,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> None:
    record = get_scoped_or_404(db, AttendanceRecord, scope, attendance_id, "Attendance record")
    db.delete(record)
    db.commit()


routers = [lockers_router, locker_rentals_router, reservations_router, attendance_router]
