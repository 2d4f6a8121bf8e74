"""Status lifecycles for stateful resources.

Transitions are always triggered explicitly by an admin action. The only
time-driven moves (member expiry, overdue billing) are evaluated lazily when a
record is read.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, FrozenSet, Iterable, Optional

from .errors import ValidationError


@dataclass(frozen=True)
class Lifecycle:
    name: str
    initial: str
    transitions: Dict[str, FrozenSet[str]] = field(default_factory=dict)

    @property
    def states(self) -> FrozenSet[str]:
        found = set(self.transitions)
        for targets in self.transitions.values():
            found.update(targets)
        return frozenset(found)

    def can_transition(self, current: str, target: str) -> bool:
        return target in self.transitions.get(current, frozenset())

    def advance(self, obj: Any, target: str, attr: str = "status") -> str:
        """Move ``obj`` to ``target`` or raise a ValidationError."""
        current = getattr(obj, attr)
        if target not in self.states:
            raise ValidationError(f"Unknown {self.name} status '{target}'")
        if not self.can_transition(current, target):
            raise ValidationError(f"Cannot change {self.name} status from '{current}' to '{target}'")
        setattr(obj, attr, target)
        return current


def _lifecycle(name: str, initial: str, **edges: Iterable[str]) -> Lifecycle:
    return Lifecycle(name=name, initial=initial, transitions={k: frozenset(v) for k, v in edges.items()})


MEMBER = _lifecycle(
    "member",
    "pending",
    pending=("active", "inactive"),
    active=("inactive", "expired"),
    inactive=("active",),
    expired=("active",),
)
CLASS_BOOKING = _lifecycle("booking", "pending", pending=("confirmed", "cancelled"), confirmed=("cancelled",))
RESERVATION = _lifecycle("reservation", "pending", pending=("confirmed", "cancelled"), confirmed=("cancelled",))
PAYROLL = _lifecycle("payroll", "draft", draft=("processed",), processed=("paid", "draft"))
DEPOSIT = _lifecycle("deposit", "active", active=("refunded", "forfeited"))
LOCKER = _lifecycle(
    "locker",
    "available",
    available=("occupied", "maintenance"),
    occupied=("available",),
    maintenance=("available",),
)
SUPPORT_TICKET = _lifecycle(
    "ticket",
    "open",
    open=("in_progress", "resolved", "closed"),
    in_progress=("resolved", "closed", "open"),
    resolved=("closed", "open"),
)
BILLING = _lifecycle("billing", "pending", pending=("paid", "overdue"), overdue=("paid",))


def expire_if_due(obj: Any, *, due_attr: str, from_state: str, to_state: str, today: Optional[date] = None) -> bool:
    """Apply a lazily evaluated time-based transition; return True if it moved."""
    due: Optional[date] = getattr(obj, due_attr)
    today = today or date.today()
    if obj.status == from_state and due is not None and due < today:
        obj.status = to_state
        return True
    return False


def refresh_member_expiry(member: Any, today: Optional[date] = None) -> bool:
    return expire_if_due(member, due_attr="expiry_date", from_state="active", to_state="expired", today=today)


def refresh_billing_overdue(billing: Any, today: Optional[date] = None) -> bool:
    return expire_if_due(billing, due_attr="due_date", from_state="pending", to_state="overdue", today=today)
