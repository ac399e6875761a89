"""
Admin bearer-token authentication (JWT, HS256).

Tokens carry the staff member's email as ``sub`` and an ``admin`` claim.
Only tokens with ``admin: true`` may use the dashboard API.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

security = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    email: str
    admin: bool = False


def create_access_token(email: str, auth_config, admin: bool = True,
                        expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed access token for a staff member"""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=auth_config.token_expire_minutes)
    )
    to_encode = {"sub": email, "admin": admin, "exp": expire}
    return jwt.encode(to_encode, auth_config.secret_key, algorithm=auth_config.algorithm)


def verify_token(token: str, auth_config) -> TokenData:
    """Verify and decode a token"""
    try:
        payload = jwt.decode(token, auth_config.secret_key, algorithms=[auth_config.algorithm])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )
    email = payload.get("sub")
    if email is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )
    return TokenData(email=email, admin=payload.get("admin") is True)


async def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenData:
    """Require an admin token; the auth settings come from app.state.config"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token_data = verify_token(credentials.credentials, request.app.state.config.auth)
    if not token_data.admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return token_data
