"""Persisted login session and the console it selects.

The session file is read once when a client starts. Anything unreadable or
malformed is removed and treated as logged out.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

PLATFORM_OPERATOR = "platform_operator"
GYM_ADMIN = "gym_admin"
KNOWN_ROLES = {PLATFORM_OPERATOR, GYM_ADMIN, "member"}


@dataclass(frozen=True)
class SessionContext:
    role: str
    token: str
    tenant_id: Optional[int] = None
    user: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_payload(cls, payload: Any) -> "SessionContext":
        """Build a context from a ``{token, user}`` login body; raise ValueError if malformed."""
        if not isinstance(payload, dict):
            raise ValueError("session payload must be an object")
        token = payload.get("token")
        user = payload.get("user")
        if not isinstance(token, str) or not token:
            raise ValueError("session token missing")
        if not isinstance(user, dict):
            raise ValueError("session user missing")
        role = user.get("role")
        if role not in KNOWN_ROLES:
            raise ValueError(f"unknown role {role!r}")
        tenant_id = user.get("gymId")
        if role == GYM_ADMIN and not isinstance(tenant_id, int):
            raise ValueError("gym admin session without a gym")
        return cls(role=role, token=token, tenant_id=tenant_id, user=user)

    def to_payload(self) -> Dict[str, Any]:
        return {"token": self.token, "user": self.user}


class Shell(str, Enum):
    MARKETPLACE = "marketplace"
    PLATFORM_ADMIN = "platform_admin"
    GYM_ADMIN = "gym_admin"


def resolve_shell(context: Optional[SessionContext]) -> Shell:
    if context is None:
        return Shell.MARKETPLACE
    if context.role == PLATFORM_OPERATOR:
        return Shell.PLATFORM_ADMIN
    if context.role == GYM_ADMIN:
        return Shell.GYM_ADMIN
    return Shell.MARKETPLACE


class SessionStore:
    """JSON file holding the last successful login."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> Optional[SessionContext]:
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return SessionContext.from_payload(payload)
        except (OSError, ValueError) as exc:
            logger.warning("Discarding unreadable session at %s: %s", self.path, exc)
            self.clear()
            return None

    def save(self, context: SessionContext) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(context.to_payload()), encoding="utf-8")

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
