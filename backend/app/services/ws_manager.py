# app/services/ws_manager.py
from fastapi import WebSocket
from typing import Dict, Optional, Set
from datetime import datetime, timezone
import json
import logging
from app.core.security import get_user_id_from_token

logger = logging.getLogger(__name__)


class NotificationManager:
    """
    Живые уведомления о прогрессе по WebSocket.

    Доставка без гарантий: отправка никогда не роняет вызывающий код,
    мертвые сокеты просто выкидываются.
    """

    def __init__(self):
        # У пользователя может быть несколько открытых вкладок
        self.active_connections: Dict[int, Set[WebSocket]] = {}

    # === АВТОРИЗАЦИЯ ===
    async def authenticate_user(self, token: Optional[str]) -> Optional[int]:
        if not token:
            logger.warning("WS auth: token missing")
            return None
        try:
            return get_user_id_from_token(token)
        except ValueError as e:
            logger.warning(f"WS auth error: {e}")
            return None

    # === ПОДКЛЮЧЕНИЕ/ОТКЛЮЧЕНИЕ ===
    async def connect(self, websocket: WebSocket, user_id: int):
        await websocket.accept()
        self.active_connections.setdefault(user_id, set()).add(websocket)
        logger.info(f"User {user_id} connected to progress notifications")
        await websocket.send_text(json.dumps({
            "type": "connected",
            "userId": user_id,
        }))

    def disconnect(self, user_id: int, websocket: Optional[WebSocket] = None):
        sockets = self.active_connections.get(user_id)
        if not sockets:
            return
        if websocket is None:
            sockets.clear()
        else:
            sockets.discard(websocket)
        if not sockets:
            del self.active_connections[user_id]

    def is_connected(self, user_id: int) -> bool:
        return bool(self.active_connections.get(user_id))

    # === ОТПРАВКА СООБЩЕНИЙ ===
    async def send_personal_message(self, message: dict, user_id: int):
        sockets = list(self.active_connections.get(user_id, ()))
        for ws in sockets:
            try:
                await ws.send_text(json.dumps(message, default=str))
            except Exception as e:
                logger.warning(f"Dropping dead socket of user {user_id}: {e}")
                self.disconnect(user_id, ws)

    async def handle_client_message(self, websocket: WebSocket, user_id: int, data: str):
        try:
            message = json.loads(data)
        except json.JSONDecodeError:
            await websocket.send_text(json.dumps({"type": "error", "message": "Invalid JSON"}))
            return

        if message.get("type") == "ping":
            await websocket.send_text(json.dumps({"type": "pong"}))
        else:
            await websocket.send_text(json.dumps({
                "type": "error",
                "message": f"Unknown message type: {message.get('type')}",
            }))

    # === СОБЫТИЯ ПРОГРЕССА ===
    async def progress_updated(
        self, user_id: int, roadmap_id: int, module_id: int, task_id: int, completed: bool
    ):
        await self.send_personal_message({
            "type": "progress_updated",
            "roadmapId": roadmap_id,
            "moduleId": module_id,
            "taskId": task_id,
            "completed": completed,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }, user_id)

    async def achievement_earned(self, user_id: int, achievement):
        await self.send_personal_message({
            "type": "achievement_earned",
            "achievementId": achievement.id,
            "slug": achievement.slug,
            "title": achievement.title,
            "icon": achievement.icon,
            "rewardXp": achievement.reward_xp,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }, user_id)

    async def streak_updated(self, user_id: int, current_streak: int):
        await self.send_personal_message({
            "type": "streak_updated",
            "currentStreak": current_streak,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }, user_id)
