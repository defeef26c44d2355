import logging
from typing import Optional
from uuid import UUID
from fastapi import Depends, HTTPException, status, Query
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from wayfarer_app.core.config import SECRET_KEY, ALGORITHM
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.utils.user_role import UserRole

logger = logging.getLogger(__name__)

# Tokens are issued by the identity service; only the bearer scheme is declared here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def get_current_user(token: str = Depends(oauth2_scheme)) -> UserModel:
    return await verify_token(token)


async def get_optional_current_user(token: Optional[str] = Depends(optional_oauth2_scheme)) -> Optional[UserModel]:
    if not token:
        return None
    return await verify_token(token)


async def verify_token(token: str) -> UserModel:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id: str = payload.get("sub")
        if user_id is None:
            raise credentials_exception
        user_uuid = UUID(user_id)
    except (JWTError, ValueError) as e:
        logger.warning(f"Token rejected: {e}")
        raise credentials_exception

    user = await UserModel.get(user_uuid)

    if user is None:
        raise credentials_exception

    ensure_active(user)
    return user


def ensure_active(user: UserModel) -> UserModel:
    if user.is_deleted:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account has been deleted")
    if user.is_blocked:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account has been blocked")
    if user.is_banned:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is banned")
    return user


async def get_admin_user(current_user: UserModel = Depends(get_current_user)) -> UserModel:
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


async def get_ws_current_user(token: str = Query(None)) -> UserModel:
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token missing")
    return await verify_token(token)
