from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.auth import jwt_handler
from backend.auth.roles import Role
from backend.core.errors import InvalidToken

security = HTTPBearer(auto_error=False)


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> jwt_handler.TokenClaims:
    if credentials is None or not credentials.credentials:
        raise _unauthenticated("missing_token")

    try:
        return jwt_handler.decode_access_token(credentials.credentials)
    except InvalidToken as exc:
        raise _unauthenticated(exc.reason) from exc


def permits(role: Role, required: Optional[Role]) -> bool:
    if required is None:
        return True
    return role == required


def require_role(required: Optional[Role]) -> Callable[..., jwt_handler.TokenClaims]:
    def dependency(
        current_user: jwt_handler.TokenClaims = Depends(get_current_user),
    ) -> jwt_handler.TokenClaims:
        if not permits(current_user.role, required):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"{required.value}_required")
        return current_user

    return dependency


require_admin = require_role(Role.ADMIN)
