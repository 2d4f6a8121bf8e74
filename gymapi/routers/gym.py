"""A gym's own console: dashboard figures, profile settings and support requests."""
from datetime import date, datetime
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from gymcore import lifecycle
from gymcore.activity import record_activity
from gymcore.database import get_db
from gymcore.models import AttendanceRecord, Expense, Gym, GymClass, Member, Revenue, SupportTicket
from gymcore.schemas import GymDashboard, GymRead, GymSettingsUpdate, TicketCreate, TicketRead
from gymcore.tenancy import TenantScope, get_scoped_or_404, get_tenant_scope, scoped_query

from ..caches import invalidate_gym_listing
from .platform import apply_gym_profile

router = APIRouter(prefix="/api/gym/{gym_id}", tags=["gym"])


def _total(query, column) -> float:
    return float(query.with_entities(func.coalesce(func.sum(column), 0)).scalar() or 0)


@router.get("/dashboard/stats", response_model=GymDashboard)
def dashboard_stats(scope: TenantScope = Depends(get_tenant_scope), db: Session = Depends(get_db)) -> GymDashboard:
    today = date.today()
    # Revenue and attendance timestamps are stored in UTC.
    midnight = datetime.combine(datetime.utcnow().date(), datetime.min.time())
    month_start = midnight.replace(day=1)
    members = scoped_query(db, Member, scope)
    # Members past their expiry date count as expired even before a read flips them.
    active = members.filter(
        Member.status == "active",
        or_(Member.expiry_date.is_(None), Member.expiry_date >= today),
    )
    return GymDashboard(
        total_members=members.count(),
        active_members=active.count(),
        pending_requests=members.filter(Member.status == lifecycle.MEMBER.initial).count(),
        total_classes=scoped_query(db, GymClass, scope).filter(GymClass.is_active.is_(True)).count(),
        monthly_revenue=_total(
            scoped_query(db, Revenue, scope).filter(Revenue.date >= month_start),
            Revenue.amount,
        ),
        monthly_expenses=_total(scoped_query(db, Expense, scope).filter(Expense.date >= month_start.date()), Expense.amount),
        today_attendance=scoped_query(db, AttendanceRecord, scope).filter(AttendanceRecord.check_in_at >= midnight).count(),
    )


@router.get("/settings", response_model=GymRead)
def get_settings_profile(scope: TenantScope = Depends(get_tenant_scope), db: Session = Depends(get_db)) -> Gym:
    return db.get(Gym, scope.gym_id)


@router.put("/settings", response_model=GymRead)
def update_settings_profile(
    profile: GymSettingsUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> Gym:
    gym = db.get(Gym, scope.gym_id)
    apply_gym_profile(db, gym, profile.model_dump(exclude_unset=True))
    record_activity(db, scope.identity, "gym_settings", f"{gym.name} updated its profile", gym_id=gym.id)
    db.commit()
    db.refresh(gym)
    invalidate_gym_listing()
    return gym


@router.get("/support/tickets", response_model=List[TicketRead])
def list_own_tickets(scope: TenantScope = Depends(get_tenant_scope), db: Session = Depends(get_db)) -> List[SupportTicket]:
    return scoped_query(db, SupportTicket, scope).order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc()).all()


@router.post("/support/tickets", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
def open_ticket(
    ticket_in: TicketCreate,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> SupportTicket:
    ticket = SupportTicket(gym_id=scope.gym_id, status=lifecycle.SUPPORT_TICKET.initial, **ticket_in.model_dump())
    db.add(ticket)
    db.flush()
    record_activity(db, scope.identity, "ticket_opened", f"Ticket #{ticket.id}: {ticket.subject}", gym_id=scope.gym_id)
    db.commit()
    db.refresh(ticket)
    return ticket


@router.get("/support/tickets/{ticket_id}", response_model=TicketRead)
def get_own_ticket(
    ticket_id: int,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> SupportTicket:
    return get_scoped_or_404(db, SupportTicket, scope, ticket_id, "Ticket")


routers = [router]
