# mentor_portal/routers/notification_router.py
import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool

from ..database import SessionLocal
from ..services import NotificationService
from ..dependencies.auth_dependencies import get_current_participant
from ..dependencies.service_dependencies import get_notification_service
from ..schemas import NotificationFeedResponse
from ..models import User
from ..security import get_user_from_token
from ..exceptions import BusinessLogicError, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])

@router.get("/api/notifications", response_model=NotificationFeedResponse)
async def get_notifications(
    current_user: User = Depends(get_current_participant),
    notification_service: NotificationService = Depends(get_notification_service)
):
    """Request notifications for the bell menu, with per-status counts"""
    try:
        return notification_service.get_feed(current_user)
    except BusinessLogicError as e:
        raise to_http_exception(e)

@router.websocket("/ws/notifications")
async def notifications_socket(websocket: WebSocket, token: Optional[str] = Query(None)):
    """
    Live push channel. Change events arrive on whatever thread committed the
    write; they are handed to this connection's loop and described here.
    """
    change_feed = websocket.app.state.change_feed
    loop = asyncio.get_running_loop()
    events: asyncio.Queue = asyncio.Queue()

    def enqueue(event):
        loop.call_soon_threadsafe(events.put_nowait, event)

    with SessionLocal() as db:
        user = get_user_from_token(db, token or websocket.cookies.get("access_token"))
        if user is None:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return
        user_id = user.id
        # Subscribe before accepting so nothing committed after the handshake is missed
        subscriptions = NotificationService.subscribe(change_feed, user, enqueue)

    def describe(event):
        with SessionLocal() as db:
            return NotificationService(db).describe_change(event)

    async def forward():
        while True:
            event = await events.get()
            message = await run_in_threadpool(describe, event)
            if message is not None:
                await websocket.send_json(message)

    forwarder = None
    try:
        await websocket.accept()
        logger.info(f"Notification socket opened for user {user_id} ({len(subscriptions)} subscriptions)")
        forwarder = asyncio.create_task(forward())
        while True:
            # Clients only ever send keep-alives; reading detects the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        if forwarder is not None:
            forwarder.cancel()
            try:
                await forwarder
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(f"Notification forwarder for user {user_id} stopped with an error: {e}")
        for subscription in subscriptions:
            change_feed.unsubscribe(subscription)
        logger.info(f"Notification socket closed for user {user_id}")
