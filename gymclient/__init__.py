"""Client-side session holder and HTTP client for the GymHub API."""
from .client import ApiError, ConnectionFailed, GymHubClient
from .session import SessionContext, SessionStore, Shell, resolve_shell

__all__ = [
    "ApiError",
    "ConnectionFailed",
    "GymHubClient",
    "SessionContext",
    "SessionStore",
    "Shell",
    "resolve_shell",
]
