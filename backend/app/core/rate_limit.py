# app/core/rate_limit.py
from slowapi import Limiter
from slowapi.util import get_remote_address
from app.core.config import settings

# Лимит на отметки задач, ключ по IP клиента
limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.progress.RATE_LIMIT_ENABLED,
)
