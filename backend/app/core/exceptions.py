# app/core/exceptions.py
from typing import Dict, Optional
from fastapi import status

class AppException(Exception):
    """Базовое исключение для приложения"""
    def __init__(self, status_code: int, detail: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.headers = headers

class AuthenticationError(AppException):
    """Ошибка аутентификации"""
    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail, headers={"WWW-Authenticate": "Bearer"})

class AuthorizationError(AppException):
    """Ошибка авторизации (чужой роадмап)"""
    def __init__(self, detail: str = "Not authorized"):
        super().__init__(status.HTTP_403_FORBIDDEN, detail)

class ValidationError(AppException):
    """Ошибка валидации данных"""
    def __init__(self, detail: str = "Validation error"):
        super().__init__(status.HTTP_422_UNPROCESSABLE_ENTITY, detail)

class NotFoundError(AppException):
    """Ресурс не найден"""
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status.HTTP_404_NOT_FOUND, detail)

class ConflictingUpdateError(AppException):
    """Параллельное изменение тех же данных"""
    def __init__(self, detail: str = "Conflicting concurrent update"):
        super().__init__(status.HTTP_409_CONFLICT, detail)

class DatabaseError(AppException):
    """Ошибка базы данных"""
    def __init__(self, detail: str = "Database error"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)

class RateLimitError(AppException):
    """Ошибка превышения лимита запросов"""
    def __init__(self, detail: str = "Too many requests"):
        super().__init__(status.HTTP_429_TOO_MANY_REQUESTS, detail)
