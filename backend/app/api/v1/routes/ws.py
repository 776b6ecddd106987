# app/api/v1/routes/ws.py
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])

@router.websocket("/ws/progress")
async def websocket_endpoint(websocket: WebSocket):
    manager = websocket.app.state.notifier
    token = websocket.query_params.get("token")

    if not token:
        logger.warning("WS: connection attempt without token")
        await websocket.close(code=1008, reason="Token required")
        return

    user_id = await manager.authenticate_user(token)

    if not user_id:
        logger.warning("WS: authentication failed")
        await websocket.close(code=1008, reason="Invalid token")
        return

    await manager.connect(websocket, user_id)

    try:
        while True:
            data = await websocket.receive_text()
            await manager.handle_client_message(websocket, user_id, data)

    except WebSocketDisconnect:
        logger.info(f"WS: user {user_id} disconnected")
        manager.disconnect(user_id, websocket)
    except Exception as e:
        logger.error(f"WS: socket error for user {user_id}: {e}")
        manager.disconnect(user_id, websocket)
