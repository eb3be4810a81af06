import asyncio

import structlog
from fastapi import APIRouter, WebSocket

from trichter.infra.realtime.errors import DeliveryError, TransportUpgradeError
from trichter.infra.realtime.events import SystemEvent
from trichter.infra.realtime.subscriber import WebSocketSubscriber

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.websocket("/ws")
async def realtime_ws(websocket: WebSocket) -> None:
    hub = getattr(websocket.app.state, "realtime_hub", None)
    if hub is None:
        await websocket.close(code=1011, reason="Realtime hub not initialized")
        return

    try:
        subscriber = await WebSocketSubscriber.open(hub, websocket)
    except TransportUpgradeError as exc:
        logger.warning("realtime_upgrade_failed", reason=exc.reason)
        return

    async with subscriber:
        try:
            await subscriber.send_system(
                SystemEvent.CONNECTED, {"subscriber_id": subscriber.id}
            )
        except DeliveryError as exc:
            logger.info("realtime_greeting_failed", reason=exc.reason)
            return

        try:
            await subscriber.serve()
        except asyncio.CancelledError:
            logger.info("realtime_connection_cancelled", subscriber_id=subscriber.id)
            raise
