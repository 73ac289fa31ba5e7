"""FastAPI dependencies for authentication and admin authorization."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import jwt
from fastapi import Depends, Header
from jwt import PyJWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.admin import AdminRole, AdminUser
from .config import settings
from .database import get_db
from .exceptions import AuthenticationError, AuthorizationError


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> dict:
    """
    Authentication dependency that validates Bearer tokens.

    Tokens are issued by the identity provider; only the signature, the
    expiry and the `sub` claim are checked here.

    Raises:
        AuthenticationError: If token is invalid or missing
    """
    if not authorization:
        raise AuthenticationError(detail="Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError(detail="Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")

    try:
        payload = jwt.decode(
            token,
            settings.bearer_token_secret,
            algorithms=["HS256"],
            options={"verify_aud": False},
        )
    except PyJWTError as e:
        raise AuthenticationError(detail=f"Token validation failed: {str(e)}")

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError(detail="Invalid token payload")

    exp = payload.get("exp")
    if exp and datetime.now(timezone.utc).timestamp() > exp:
        raise AuthenticationError(detail="Token has expired")

    return {
        "user_id": user_id,
        "email": payload.get("email"),
    }


async def get_current_admin(
    user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AdminUser:
    """
    Resolve the authenticated user to a row in `admin_users`.

    Raises:
        AuthorizationError: If the user is not a registered admin or operator
    """
    try:
        admin_id = UUID(str(user["user_id"]))
    except ValueError:
        raise AuthorizationError(detail="Token subject is not a staff account")

    result = await db.execute(select(AdminUser).where(AdminUser.id == admin_id))
    admin = result.scalar_one_or_none()
    if admin is None:
        raise AuthorizationError(detail="Token subject is not a staff account")
    return admin


async def require_admin_role(admin: AdminUser = Depends(get_current_admin)) -> AdminUser:
    """Allow only the `admin` role (operators are rejected)."""
    if admin.role != AdminRole.ADMIN:
        raise AuthorizationError(
            detail="This action requires the admin role",
            required_permissions=[AdminRole.ADMIN.value],
        )
    return admin


RequiredAuth = Depends(get_current_user)
StaffUser = Depends(get_current_admin)
AdminOnly = Depends(require_admin_role)
DatabaseSession = Depends(get_db)
