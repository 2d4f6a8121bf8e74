from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from gymcore import auth
from gymcore.config import get_settings
from gymcore.database import get_db
from gymcore.dependencies import get_current_identity
from gymcore.errors import InvalidCredentials
from gymcore.models import RoleEnum
from gymcore.rate_limit import limiter
from gymcore.schemas import LoginRequest, LoginResponse, TokenData

settings = get_settings()

router = APIRouter(prefix="/api/auth", tags=["auth"])
gym_router = APIRouter(prefix="/api/gym-auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.login_rate_limit)
def platform_login(request: Request, credentials: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    account = auth.authenticate_account(db, credentials.email, credentials.password, RoleEnum.PLATFORM_OPERATOR)
    return auth.issue_session(account)


@gym_router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.login_rate_limit)
def gym_admin_login(request: Request, credentials: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    account = auth.authenticate_account(db, credentials.email, credentials.password, RoleEnum.GYM_ADMIN)
    if account.gym is None or not account.gym.is_active:
        raise InvalidCredentials()
    return auth.issue_session(account)


@router.get("/me", response_model=TokenData)
def whoami(identity: TokenData = Depends(get_current_identity)) -> TokenData:
    return identity


routers = [router, gym_router]
