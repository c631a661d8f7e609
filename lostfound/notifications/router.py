"""
Notification inbox for the signed-in user plus the realtime push channel.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from lostfound.authentication.security import get_current_user, user_from_token
from lostfound.i18n import get_locale, translate
from lostfound.notifications import utils, schemas
from lostfound.notifications.realtime import hub

router = APIRouter(prefix="/notifications", tags=["Notifications"])
ws_router = APIRouter(tags=["Notifications"])


@router.get("", response_model=schemas.NotificationPage)
def list_notifications(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    unread_only: bool = Query(False),
    current_user=Depends(get_current_user),
):
    rows, count = utils.list_for_user(current_user.user_id, limit=limit, offset=offset, unread_only=unread_only)
    return {
        "success": True,
        "notifications": rows,
        "count": count,
        "pagination": {"limit": limit, "offset": offset, "hasMore": offset + len(rows) < count},
    }


@router.get("/unread-count", response_model=schemas.UnreadCount)
def get_unread_count(current_user=Depends(get_current_user)):
    return {"count": utils.unread_count(current_user.user_id)}


@router.patch("/read-all", response_model=schemas.NotificationResult)
def read_all(current_user=Depends(get_current_user)):
    return {"success": True, "updated": utils.mark_all_as_read(current_user.user_id)}


@router.patch("/{notification_id}", response_model=schemas.NotificationResult)
def mark_read(notification_id: str, current_user=Depends(get_current_user), locale: str = Depends(get_locale)):
    """Mark one of the caller's notifications as read."""
    notification = utils.mark_as_read(notification_id, current_user.user_id)
    if not notification:
        raise HTTPException(status_code=404, detail=translate("errors.notification_not_found", locale))
    return {"success": True, "notification": notification}


@router.delete("/{notification_id}", response_model=schemas.NotificationResult)
def delete_notification(notification_id: str, current_user=Depends(get_current_user), locale: str = Depends(get_locale)):
    notification = utils.delete_notification(notification_id, current_user.user_id)
    if not notification:
        raise HTTPException(status_code=404, detail=translate("errors.notification_not_found", locale))
    return {"success": True, "notification": notification}


@ws_router.websocket("/ws/notifications")
async def notifications_socket(websocket: WebSocket, token: str = Query("")):
    """Push channel keyed by user id: sends the unread count on connect, then each new row."""
    user = user_from_token(token) if token else None
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    await hub.connect(user.user_id, websocket)
    try:
        await websocket.send_json({"type": "unread_count", "payload": {"count": utils.unread_count(user.user_id)}})
        while True:
            try:
                _ = await websocket.receive_text()
            except WebSocketDisconnect:
                break
    finally:
        await hub.disconnect(user.user_id, websocket)
