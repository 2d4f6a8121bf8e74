"""Platform-operator back office: gyms, billing, support queue, activity logs."""
import json
import logging
import secrets
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import Response
from sqlalchemy import func
from sqlalchemy.orm import Session

from gymcore import auth, lifecycle
from gymcore.activity import record_activity
from gymcore.database import get_db
from gymcore.dependencies import require_platform_operator
from gymcore.errors import Conflict, NotFound
from gymcore.models import Account, ActivityLog, Billing, Gym, Member, RoleEnum, SupportTicket
from gymcore.schemas import (
    ActivityLogRead,
    BillingCreate,
    BillingRead,
    BillingUpdate,
    GymCreate,
    GymRead,
    GymUpdate,
    PlatformDashboard,
    PlatformStats,
    StatusChange,
    TicketRead,
    TokenData,
)

from ..caches import PLATFORM_STATS_KEY, invalidate_gym_listing, invalidate_platform_stats, stats_cache

logger = logging.getLogger(__name__)

LOG_PAGE_SIZE = 100
RECENT_ACTIVITY_COUNT = 10
REQUIRED_GYM_FIELDS = {"name", "email", "services", "amenities", "is_active"}

gyms_router = APIRouter(prefix="/api/gyms", tags=["gyms"])
billing_router = APIRouter(prefix="/api/billing", tags=["billing"])
support_router = APIRouter(prefix="/api/support/tickets", tags=["support"])
logs_router = APIRouter(prefix="/api/logs", tags=["logs"])
dashboard_router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _generate_gym_code(db: Session) -> str:
    while True:
        code = str(secrets.randbelow(900_000) + 100_000)
        if db.query(Gym.id).filter(Gym.code == code).first() is None:
            return code


def _get_gym_or_404(db: Session, gym_id: int) -> Gym:
    gym = db.get(Gym, gym_id)
    if gym is None:
        raise NotFound("Gym not found")
    return gym


def apply_gym_profile(db: Session, gym: Gym, data: dict) -> None:
    """Apply profile changes, keeping required fields and the unique contact email intact."""
    if data.get("email"):
        data["email"] = data["email"].lower()
        clash = db.query(Gym.id).filter(Gym.email == data["email"], Gym.id != gym.id).first()
        if clash:
            raise Conflict("A gym with this email already exists")
    for key, value in data.items():
        if value is None and key in REQUIRED_GYM_FIELDS:
            continue
        setattr(gym, key, value)


# --- gyms -----------------------------------------------------------------


@gyms_router.get("", response_model=List[GymRead])
def list_gyms(
    _: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> List[Gym]:
    return db.query(Gym).order_by(Gym.created_at.desc(), Gym.id.desc()).all()


@gyms_router.post("", response_model=GymRead, status_code=status.HTTP_201_CREATED)
def create_gym(
    gym_in: GymCreate,
    operator: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> Gym:
    """Create a gym together with its admin account in one transaction."""
    gym_email = gym_in.email.lower()
    admin_email = gym_in.admin_email.lower()
    if db.query(Gym.id).filter(Gym.email == gym_email).first():
        raise Conflict("A gym with this email already exists")
    if db.query(Account.id).filter(Account.email == admin_email).first():
        raise Conflict("An account with this email already exists")

    gym = Gym(
        code=_generate_gym_code(db),
        **gym_in.model_dump(exclude={"email", "admin_email", "admin_password", "admin_name"}),
        email=gym_email,
    )
    db.add(gym)
    db.flush()
    db.add(
        Account(
            email=admin_email,
            hashed_password=auth.get_password_hash(gym_in.admin_password),
            name=gym_in.admin_name or f"{gym.name} Admin",
            role=RoleEnum.GYM_ADMIN,
            gym_id=gym.id,
        )
    )
    record_activity(db, operator, "gym_created", f"Created gym {gym.name} ({gym.code})", gym_id=gym.id)
    db.commit()
    db.refresh(gym)
    invalidate_gym_listing()
    logger.info("Gym %s created by account %s", gym.id, operator.account_id)
    return gym


@gyms_router.get("/{gym_id}", response_model=GymRead)
def get_gym(
    gym_id: int,
    _: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> Gym:
    return _get_gym_or_404(db, gym_id)


@gyms_router.put("/{gym_id}", response_model=GymRead)
def update_gym(
    gym_id: int,
    gym_update: GymUpdate,
    operator: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> Gym:
    gym = _get_gym_or_404(db, gym_id)
    data = gym_update.model_dump(exclude_unset=True)
    apply_gym_profile(db, gym, data)
    if data.get("is_active") is not None:
        for account in gym.accounts:
            account.is_active = data["is_active"]
    record_activity(db, operator, "gym_updated", f"Updated gym {gym.name}", gym_id=gym.id)
    db.commit()
    db.refresh(gym)
    invalidate_gym_listing()
    return gym


@gyms_router.delete("/{gym_id}", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_gym(
    gym_id: int,
    operator: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> None:
    """Deactivate a gym and lock out its admins; billing history is kept."""
    gym = _get_gym_or_404(db, gym_id)
    gym.is_active = False
    for account in gym.accounts:
        account.is_active = False
    record_activity(db, operator, "gym_deactivated", f"Deactivated gym {gym.name}", gym_id=gym.id)
    db.commit()
    invalidate_gym_listing()


# --- billing --------------------------------------------------------------


def _get_billing_or_404(db: Session, billing_id: int) -> Billing:
    billing = db.get(Billing, billing_id)
    if billing is None:
        raise NotFound("Billing record not found")
    return billing


def _apply_billing_status(billing: Billing, target: str) -> None:
    lifecycle.BILLING.advance(billing, target)
    if target == "paid":
        billing.paid_at = datetime.utcnow()


@billing_router.get("", response_model=List[BillingRead])
def list_billing(
    gym_id: Optional[int] = Query(None, alias="gymId"),
    status_filter: Optional[str] = Query(None, alias="status"),
    _: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> List[Billing]:
    records = db.query(Billing).order_by(Billing.created_at.desc()).all()
    if any([lifecycle.refresh_billing_overdue(record) for record in records]):
        db.commit()
    if gym_id is not None:
        records = [record for record in records if record.gym_id == gym_id]
    if status_filter:
        records = [record for record in records if record.status == status_filter]
    return records


@billing_router.post("", response_model=BillingRead, status_code=status.HTTP_201_CREATED)
def create_billing(
    billing_in: BillingCreate,
    operator: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> Billing:
    gym = _get_gym_or_404(db, billing_in.gym_id)
    billing = Billing(**billing_in.model_dump(), status=lifecycle.BILLING.initial)
    db.add(billing)
    record_activity(db, operator, "billing_created", f"Billed {gym.name} {billing_in.amount:.2f}", gym_id=gym.id)
    db.commit()
    db.refresh(billing)
    return billing


@billing_router.get("/{billing_id}", response_model=BillingRead)
def get_billing(
    billing_id: int,
    _: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> Billing:
    billing = _get_billing_or_404(db, billing_id)
    if lifecycle.refresh_billing_overdue(billing):
        db.commit()
        db.refresh(billing)
    return billing


@billing_router.put("/{billing_id}", response_model=BillingRead)
def update_billing(
    billing_id: int,
    billing_update: BillingUpdate,
    operator: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> Billing:
    billing = _get_billing_or_404(db, billing_id)
    lifecycle.refresh_billing_overdue(billing)
    data = billing_update.model_dump(exclude_unset=True, exclude={"status"})
    for key, value in data.items():
        if value is not None:
            setattr(billing, key, value)
    if billing_update.status and billing_update.status != billing.status:
        _apply_billing_status(billing, billing_update.status)
        record_activity(
            db, operator, "billing_status", f"Billing #{billing.id} marked {billing.status}", gym_id=billing.gym_id
        )
    db.commit()
    db.refresh(billing)
    invalidate_platform_stats()
    return billing


@billing_router.put("/{billing_id}/status", response_model=BillingRead)
def change_billing_status(
    billing_id: int,
    change: StatusChange,
    operator: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> Billing:
    billing = _get_billing_or_404(db, billing_id)
    lifecycle.refresh_billing_overdue(billing)
    _apply_billing_status(billing, change.status)
    record_activity(db, operator, "billing_status", f"Billing #{billing.id} marked {billing.status}", gym_id=billing.gym_id)
    db.commit()
    db.refresh(billing)
    invalidate_platform_stats()
    return billing


# --- support queue --------------------------------------------------------


@support_router.get("", response_model=List[TicketRead])
def list_tickets(
    status_filter: Optional[str] = Query(None, alias="status"),
    _: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> List[SupportTicket]:
    query = db.query(SupportTicket)
    if status_filter:
        query = query.filter(SupportTicket.status == status_filter)
    return query.order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc()).all()


@support_router.get("/{ticket_id}", response_model=TicketRead)
def get_ticket(
    ticket_id: int,
    _: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> SupportTicket:
    ticket = db.get(SupportTicket, ticket_id)
    if ticket is None:
        raise NotFound("Ticket not found")
    return ticket


@support_router.put("/{ticket_id}", response_model=TicketRead)
@support_router.put("/{ticket_id}/status", response_model=TicketRead)
def update_ticket_status(
    ticket_id: int,
    change: StatusChange,
    operator: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> SupportTicket:
    ticket = db.get(SupportTicket, ticket_id)
    if ticket is None:
        raise NotFound("Ticket not found")
    previous = lifecycle.SUPPORT_TICKET.advance(ticket, change.status)
    ticket.updated_at = datetime.utcnow()
    record_activity(
        db, operator, "ticket_status", f"Ticket #{ticket.id}: {previous} -> {ticket.status}", gym_id=ticket.gym_id
    )
    db.commit()
    db.refresh(ticket)
    return ticket


# --- activity logs --------------------------------------------------------


def _recent_activity(db: Session, limit: int) -> List[ActivityLog]:
    return db.query(ActivityLog).order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit).all()


@logs_router.get("", response_model=List[ActivityLogRead])
def list_logs(
    limit: int = Query(LOG_PAGE_SIZE, ge=1, le=1000),
    _: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> List[ActivityLog]:
    return _recent_activity(db, limit)


@logs_router.get("/export")
def export_logs(
    _: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> Response:
    entries = db.query(ActivityLog).order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).all()
    payload = [ActivityLogRead.model_validate(entry).model_dump(by_alias=True) for entry in entries]
    return Response(
        content=json.dumps(jsonable_encoder(payload), indent=2),
        media_type="application/json",
        headers={"Content-Disposition": "attachment; filename=activity-logs.json"},
    )


# --- dashboard ------------------------------------------------------------


def _platform_dashboard(db: Session) -> dict:
    stats = PlatformStats(
        total_gyms=db.query(func.count(Gym.id)).scalar() or 0,
        active_gyms=db.query(func.count(Gym.id)).filter(Gym.is_active.is_(True)).scalar() or 0,
        total_members=db.query(func.count(Member.id)).scalar() or 0,
        total_revenue=float(db.query(func.sum(Billing.amount)).filter(Billing.status == "paid").scalar() or 0),
    )
    recent = [ActivityLogRead.model_validate(entry) for entry in _recent_activity(db, RECENT_ACTIVITY_COUNT)]
    return PlatformDashboard(stats=stats, recent_activities=recent).model_dump()


@dashboard_router.get("/stats", response_model=PlatformDashboard)
def platform_stats(
    _: TokenData = Depends(require_platform_operator),
    db: Session = Depends(get_db),
) -> dict:
    return stats_cache.get_or_compute(PLATFORM_STATS_KEY, lambda: _platform_dashboard(db))


routers = [gyms_router, billing_router, support_router, logs_router, dashboard_router]
