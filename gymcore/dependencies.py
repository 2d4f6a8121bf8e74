"""Reusable FastAPI dependencies: the request gate and role checks."""
from typing import Callable, Optional

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .auth import token_identity
from .errors import Forbidden, Unauthorized
from .models import RoleEnum
from .schemas import TokenData

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> TokenData:
    if credentials is None or not credentials.credentials:
        raise Unauthorized()
    return token_identity(credentials.credentials)


def require_roles(*roles: RoleEnum) -> Callable[[TokenData], TokenData]:
    def dependency(identity: TokenData = Depends(get_current_identity)) -> TokenData:
        if identity.role not in roles:
            raise Forbidden()
        return identity

    return dependency


require_platform_operator = require_roles(RoleEnum.PLATFORM_OPERATOR)
require_staff = require_roles(RoleEnum.PLATFORM_OPERATOR, RoleEnum.GYM_ADMIN)
