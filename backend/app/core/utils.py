# app/core/utils.py
from datetime import datetime
from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import db_helper
from app.core.exceptions import AuthenticationError
from app.core.security import get_user_id_from_token
from app.repositories.user_repository import UserRepository
from app.models.user import User
import logging

logger = logging.getLogger(__name__)
# Токены выдает внешний сервис авторизации, tokenUrl нужен только для Swagger
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login", auto_error=False)


def local_now() -> datetime:
    """Текущее время в локальной зоне сервера (календарь считается по ней)"""
    return datetime.now().astimezone()


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    session: AsyncSession = Depends(db_helper.session_getter)
) -> User:
    """Зависимость для получения текущего пользователя из токена"""
    if not token:
        raise AuthenticationError("Not authenticated")

    try:
        user_id = get_user_id_from_token(token)
    except ValueError as e:
        logger.warning(f"Authentication failed: {str(e)}")
        raise AuthenticationError("Could not validate credentials")

    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        logger.warning(f"Authentication failed: user {user_id} not found")
        raise AuthenticationError("Could not validate credentials")
    return user
