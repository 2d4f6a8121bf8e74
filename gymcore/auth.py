"""Password hashing, session token issue/verify, and credential checks."""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session

from .config import get_settings
from .errors import InvalidCredentials, InvalidToken
from .models import Account, RoleEnum
from .schemas import AccountSummary, LoginResponse, TokenData

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
settings = get_settings()

# Verified on a miss so unknown emails cost the same as wrong passwords.
_DUMMY_HASH = pwd_context.hash("gymhub-timing-equaliser")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"iat": now, "exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise InvalidToken() from exc


def token_identity(token: str) -> TokenData:
    """Verify a bearer token and return the identity it carries."""
    payload = decode_token(token)
    try:
        return TokenData(
            account_id=int(payload["sub"]),
            email=payload["email"],
            role=payload["role"],
            gym_id=payload.get("gymId"),
            gym_name=payload.get("gymName"),
        )
    except (KeyError, TypeError, ValueError, SchemaError) as exc:
        raise InvalidToken() from exc


def authenticate_account(db: Session, email: str, password: str, role: RoleEnum) -> Account:
    """Return the active account of ``role`` matching the credentials.

    Unknown email, wrong role, inactive account and wrong password all raise
    the same :class:`InvalidCredentials`.
    """
    account: Optional[Account] = (
        db.query(Account).filter(Account.email == email.lower(), Account.role == role).first()
    )
    if account is None or not account.is_active:
        verify_password(password, _DUMMY_HASH)
        raise InvalidCredentials()
    if not verify_password(password, account.hashed_password):
        raise InvalidCredentials()
    return account


def summarize_account(account: Account) -> AccountSummary:
    return AccountSummary(
        id=account.id,
        email=account.email,
        name=account.name,
        role=account.role,
        gym_id=account.gym_id,
        gym_name=account.gym.name if account.gym is not None else None,
    )


def issue_session(account: Account) -> LoginResponse:
    """Mint a session token for an authenticated account."""
    summary = summarize_account(account)
    claims: Dict[str, Any] = {
        "sub": str(account.id),
        "email": account.email,
        "role": account.role.value,
    }
    if account.role == RoleEnum.GYM_ADMIN:
        claims["gymId"] = summary.gym_id
        claims["gymName"] = summary.gym_name
    return LoginResponse(token=create_access_token(claims), user=summary)
