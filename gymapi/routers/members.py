"""Gym members and their approval/expiry lifecycle."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from gymcore import lifecycle
from gymcore.activity import record_activity
from gymcore.database import get_db
from gymcore.errors import Conflict
from gymcore.models import Locker, Member
from gymcore.schemas import MemberCreate, MemberRead, MemberUpdate, StatusChange
from gymcore.tenancy import TenantScope, get_scoped_or_404, get_tenant_scope, scoped_query

from ..caches import invalidate_platform_stats

router = APIRouter(prefix="/api/gym/{gym_id}/members", tags=["members"])


def _load_member(db: Session, scope: TenantScope, member_id: int) -> Member:
    member = get_scoped_or_404(db, Member, scope, member_id, "Member")
    if lifecycle.refresh_member_expiry(member):
        db.commit()
        db.refresh(member)
    return member


def _ensure_unique_email(db: Session, scope: TenantScope, email: str, exclude_id: Optional[int] = None) -> None:
    query = scoped_query(db, Member, scope).filter(Member.email == email)
    if exclude_id is not None:
        query = query.filter(Member.id != exclude_id)
    if query.first():
        raise Conflict("A member with this email already exists")


@router.get("", response_model=List[MemberRead])
def list_members(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=100),
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> List[Member]:
    members = scoped_query(db, Member, scope).order_by(Member.created_at.desc(), Member.id.desc()).all()
    today = date.today()
    if any([lifecycle.refresh_member_expiry(member, today) for member in members]):
        db.commit()
    if status_filter:
        members = [member for member in members if member.status == status_filter]
    if search:
        needle = search.lower()
        members = [m for m in members if needle in m.name.lower() or needle in m.email.lower()]
    return members


@router.post("", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
def create_member(
    member_in: MemberCreate,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> Member:
    data = member_in.model_dump(exclude_none=True)
    data["email"] = data["email"].lower()
    _ensure_unique_email(db, scope, data["email"])
    member = Member(gym_id=scope.gym_id, status=lifecycle.MEMBER.initial, **data)
    db.add(member)
    db.commit()
    db.refresh(member)
    invalidate_platform_stats()
    return member


@router.get("/{member_id}", response_model=MemberRead)
def get_member(
    member_id: int,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> Member:
    return _load_member(db, scope, member_id)


@router.put("/{member_id}", response_model=MemberRead)
def update_member(
    member_id: int,
    member_update: MemberUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> Member:
    member = _load_member(db, scope, member_id)
    data = member_update.model_dump(exclude_unset=True)
    if data.get("email"):
        data["email"] = data["email"].lower()
        _ensure_unique_email(db, scope, data["email"], exclude_id=member.id)
    for key, value in data.items():
        if value is None and key in {"name", "email", "total_paid"}:
            continue
        setattr(member, key, value)
    # An extended expiry revives an expired member.
    if member.status == "expired" and member.expiry_date and member.expiry_date >= date.today():
        lifecycle.MEMBER.advance(member, "active")
    db.commit()
    db.refresh(member)
    return member


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_member(
    member_id: int,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> None:
    member = get_scoped_or_404(db, Member, scope, member_id, "Member")
    for locker in scoped_query(db, Locker, scope).filter(Locker.member_id == member.id):
        lifecycle.LOCKER.advance(locker, "available")
        locker.member_id = None
        locker.rent_start = None
        locker.rent_end = None
    db.flush()
    db.delete(member)
    record_activity(db, scope.identity, "member_deleted", f"Removed member {member.email}", gym_id=scope.gym_id)
    db.commit()
    invalidate_platform_stats()


def _transition(db: Session, scope: TenantScope, member_id: int, target: str) -> Member:
    member = _load_member(db, scope, member_id)
    previous = lifecycle.MEMBER.advance(member, target)
    record_activity(
        db,
        scope.identity,
        "member_status",
        f"Member {member.email}: {previous} -> {target}",
        gym_id=scope.gym_id,
    )
    db.commit()
    db.refresh(member)
    return member


@router.post("/{member_id}/approve", response_model=MemberRead)
def approve_member(
    member_id: int,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> Member:
    return _transition(db, scope, member_id, "active")


@router.post("/{member_id}/reject", response_model=MemberRead)
def reject_member(
    member_id: int,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> Member:
    return _transition(db, scope, member_id, "inactive")


@router.put("/{member_id}/status", response_model=MemberRead)
def change_member_status(
    member_id: int,
    change: StatusChange,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> Member:
    return _transition(db, scope, member_id, change.status)


routers = [router]
