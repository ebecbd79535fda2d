"""FastAPI dependencies: get_current_user and require_operator.

Usage in a user router:
    @router.get("/balance")
    async def balance(user: UserModel = Depends(get_current_user)):
        ...

Operator-only routers declare `dependencies=[Depends(require_operator)]`.
"""

import hmac
import uuid

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mx_common.database import get_db_session
from src.mx_common.errors import AccountDisabledError, InvalidCredentialsError, OperatorAuthError
from src.mx_gateway.auth.jwt_handler import decode_access_token
from src.mx_gateway.user.db_models import UserModel

# Tokens come from the identity provider; tokenUrl only drives the Swagger "Authorize" button
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Validate the Bearer token and return the UserModel.

    Raises HTTP 401 if the token is missing, invalid, expired, or names an
    unknown user. Raises AccountDisabledError (403) for disabled users.
    """
    try:
        payload = decode_access_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


async def require_operator(
    x_operator_key: str | None = Header(default=None),
) -> None:
    """Gate for scheduler/admin triggers: X-Operator-Key must equal OPERATOR_API_KEY.

    Raises OperatorAuthError (403) before the handler runs, so a rejected call
    has no side effects.
    """
    if not x_operator_key or not hmac.compare_digest(
        x_operator_key.encode(), settings.OPERATOR_API_KEY.encode()
    ):
        raise OperatorAuthError()
