"""
Realtime Routes

WS /ws/{collection}?token=<jwt> - Stream full collection snapshots (super admins only)

The first message is the current collection; every later message is the
whole collection again after a change. Streamable collections: faculty,
students, internships, applications, tests, test-assignments.

The token is checked again before every snapshot, so signing out (or the
session expiring) closes the stream with 1008.
"""

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder
from starlette.concurrency import run_in_threadpool

from superadmin.core.auth import require_superadmin
from superadmin.core.errors import DashboardError
from superadmin.models.session import AdminSession
from superadmin.services.listings import SUBSCRIBERS, open_subscription
from superadmin.services.session_service import resolve_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


def authorize_stream(token: str) -> AdminSession:
    """Live super admin session for the token, or a DashboardError."""
    return require_superadmin(resolve_session(token))


@router.websocket("/ws/{collection}")
async def stream_collection(websocket: WebSocket, collection: str, token: str = Query(...)):
    try:
        session = await run_in_threadpool(authorize_stream, token)
    except DashboardError as e:
        logger.info("Rejected snapshot stream for %s: %s", collection, e)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    if collection not in SUBSCRIBERS:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    snapshots: asyncio.Queue = asyncio.Queue()

    def on_change(docs):
        # Called from the watcher thread
        loop.call_soon_threadsafe(snapshots.put_nowait, docs)

    subscription = open_subscription(collection, on_change)
    receiver = None
    try:
        # opening the stream and the first full read happen off the event loop
        await run_in_threadpool(subscription.start)
        logger.info("%s subscribed to %s", session.email, collection)

        receiver = asyncio.ensure_future(websocket.receive())
        while True:
            getter = asyncio.ensure_future(snapshots.get())
            done, _ = await asyncio.wait({getter, receiver}, return_when=asyncio.FIRST_COMPLETED)
            if receiver in done:
                getter.cancel()
                if receiver.result()["type"] == "websocket.disconnect":
                    break
                # client messages carry no meaning; keep listening
                receiver = asyncio.ensure_future(websocket.receive())
                continue
            try:
                await run_in_threadpool(authorize_stream, token)
            except DashboardError as e:
                logger.info("Closing %s stream for %s: %s", collection, session.email, e)
                await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
                break
            await websocket.send_json(jsonable_encoder(getter.result()))
    except WebSocketDisconnect:
        pass
    finally:
        if receiver is not None:
            receiver.cancel()
        # synchronous and non-blocking, so a cancelled handler still releases the stream
        subscription.unsubscribe(wait=False)
        logger.info("%s unsubscribed from %s", session.email, collection)
