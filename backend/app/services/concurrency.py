# app/services/concurrency.py
import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, TypeVar
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import ConflictingUpdateError, DatabaseError

logger = logging.getLogger(__name__)

T = TypeVar("T")

class UserLockRegistry:
    """Один asyncio.Lock на пользователя: изменения одного юзера идут строго по очереди"""

    def __init__(self):
        # Замок живет, пока его кто-то держит или ждет
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def get_lock(self, user_id: int) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, user_id: int):
        lock = self.get_lock(user_id)
        async with lock:
            yield


async def run_in_transaction(
    session: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    retries: int = 1,
) -> T:
    """
    Выполнить operation и закоммитить как одну единицу работы.

    Конфликт (устаревшая версия строки или гонка на уникальном ключе)
    повторяется retries раз с перечитыванием данных, потом поднимается
    ConflictingUpdateError. Прочие ошибки БД откатываются и превращаются
    в DatabaseError.
    """
    attempt = 0
    while True:
        try:
            result = await operation()
            await session.commit()
            return result
        except (StaleDataError, IntegrityError) as e:
            await session.rollback()
            if attempt >= retries:
                logger.warning(f"Conflicting update persisted after {attempt + 1} attempts: {e}")
                raise ConflictingUpdateError() from e
            attempt += 1
            logger.info(f"Conflicting update detected, retrying (attempt {attempt})")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Storage failure, transaction rolled back: {e}")
            raise DatabaseError("Storage failure") from e
        except Exception:
            await session.rollback()
            raise
