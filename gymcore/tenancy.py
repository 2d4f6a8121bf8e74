"""Tenant scoping for ``/api/gym/{gym_id}/...`` routes.

The scope is derived from the verified token: a gym admin may only ever act on
the gym embedded in its own token, whatever the path says. Platform operators
may act on any existing gym. Every tenant query goes through
:func:`scoped_query` so the gym filter cannot be forgotten.
"""
from dataclasses import dataclass
from typing import Optional, Type, TypeVar

from fastapi import Depends, Path
from sqlalchemy.orm import Query, Session

from .database import get_db
from .dependencies import require_staff
from .errors import Forbidden, NotFound
from .models import Gym, Member, RoleEnum, Staff, Trainer
from .schemas import TokenData

ModelT = TypeVar("ModelT")


@dataclass(frozen=True)
class TenantScope:
    gym_id: int
    identity: TokenData

    @property
    def actor_role(self) -> str:
        return self.identity.role.value

    @property
    def actor_id(self) -> int:
        return self.identity.account_id


def get_tenant_scope(
    gym_id: int = Path(..., ge=1),
    identity: TokenData = Depends(require_staff),
    db: Session = Depends(get_db),
) -> TenantScope:
    gym = db.get(Gym, gym_id)
    if identity.role == RoleEnum.GYM_ADMIN:
        # Deactivation also locks out tokens issued before it.
        if identity.gym_id != gym_id or gym is None or not gym.is_active:
            raise Forbidden("Access denied to this gym")
        return TenantScope(gym_id=gym_id, identity=identity)

    if gym is None:
        raise NotFound("Gym not found")
    return TenantScope(gym_id=gym_id, identity=identity)


def scoped_query(db: Session, model: Type[ModelT], scope: TenantScope) -> "Query[ModelT]":
    return db.query(model).filter(model.gym_id == scope.gym_id)


def get_scoped_or_404(db: Session, model: Type[ModelT], scope: TenantScope, obj_id: int, label: str) -> ModelT:
    obj: Optional[ModelT] = scoped_query(db, model, scope).filter(model.id == obj_id).first()
    if obj is None:
        raise NotFound(f"{label} not found")
    return obj


def ensure_member(db: Session, scope: TenantScope, member_id: Optional[int]) -> Optional[Member]:
    if member_id is None:
        return None
    return get_scoped_or_404(db, Member, scope, member_id, "Member")


def ensure_staff(db: Session, scope: TenantScope, staff_id: Optional[int]) -> Optional[Staff]:
    if staff_id is None:
        return None
    return get_scoped_or_404(db, Staff, scope, staff_id, "Staff member")


def ensure_trainer(db: Session, scope: TenantScope, trainer_id: Optional[int]) -> Optional[Trainer]:
    if trainer_id is None:
        return None
    return get_scoped_or_404(db, Trainer, scope, trainer_id, "Trainer")
