"""WebSocket endpoint for content change notifications."""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def content_events(websocket: WebSocket) -> None:
    """Register the socket for ``*_updated`` events until it disconnects.

    Frames sent by the client are read and discarded.
    """
    broadcaster = websocket.app.state.ctx.broadcaster
    await websocket.accept()
    await broadcaster.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await broadcaster.disconnect(websocket)
