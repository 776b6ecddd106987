# app/core/security.py
import bcrypt
from jose import jwt, JWTError, ExpiredSignatureError
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from app.core.config import settings


def get_password_hash(password: str) -> str:
    """Хеширование пароля с помощью bcrypt (только для входа в админку)"""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Проверка пароля"""
    if not hashed_password:
        return False
    return bcrypt.checkpw(
        plain_password.encode('utf-8'),
        hashed_password.encode('utf-8')
    )

def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Создание JWT access token.

    Токены выпускает внешний сервис авторизации, здесь функция нужна
    для админки и тестов.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.security.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode.update({"exp": expire, "type": "access"})

    secret_key = settings.security.JWT_SECRET_KEY.get_secret_value()

    return jwt.encode(
        to_encode,
        secret_key,
        algorithm=settings.security.JWT_ALGORITHM
    )

def decode_token(token: str) -> Dict[str, Any]:
    """Декодирование и валидация JWT токена"""
    if token.startswith("Bearer "):
        token = token.split(" ", 1)[1]
    try:
        secret_key = settings.security.JWT_SECRET_KEY.get_secret_value()

        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[settings.security.JWT_ALGORITHM]
        )
        return payload
    except ExpiredSignatureError:
        raise ValueError("Token expired")
    except JWTError:
        raise ValueError("Invalid token")

def get_user_id_from_token(token: str) -> int:
    """Достает user_id из access token, ValueError если токен не подходит"""
    payload = decode_token(token)

    if payload.get("type") != "access":
        raise ValueError("Invalid token type for this operation")

    user_id = payload.get("sub")
    if not user_id:
        raise ValueError("Invalid token payload")

    try:
        return int(user_id)
    except (TypeError, ValueError):
        raise ValueError("Invalid token subject")
