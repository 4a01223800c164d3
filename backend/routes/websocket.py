# backend/routes/websocket.py
import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket
from starlette.concurrency import run_in_threadpool

from config import settings
from repositories.errors import DataAccessError
from repositories.products import ProductRepository, get_product_repository
from schemas.product import TopProductsSnapshot
from utils.notifications import ProductNotifier, Subscription, get_notifier

logger = logging.getLogger(__name__)

router = APIRouter(tags=["WebSocket"])


async def _send_top_products(websocket: WebSocket, repo: ProductRepository) -> None:
    try:
        products = await run_in_threadpool(repo.top_n, settings.TOP_PRODUCTS_LIMIT)
    except DataAccessError:
        logger.warning("Skipping top products push, store unavailable")
        return
    snapshot = TopProductsSnapshot(products=products)
    await websocket.send_json(snapshot.model_dump(mode="json", by_alias=True))


async def _push_updates(websocket: WebSocket, subscription: Subscription, repo: ProductRepository) -> None:
    await _send_top_products(websocket, repo)
    while True:
        try:
            event = await asyncio.wait_for(subscription.get(), timeout=settings.WS_REFRESH_SECONDS)
        except asyncio.TimeoutError:
            await _send_top_products(websocket, repo)
            continue
        await websocket.send_json(event.model_dump(mode="json", by_alias=True))


async def _drain_client(websocket: WebSocket) -> None:
    # Client frames, text or binary, are read only to notice the disconnect
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return
        payload = message.get("text") or message.get("bytes") or ""
        logger.debug("Received websocket frame: %r", payload[:200])


@router.websocket("/websocket")
async def product_socket(
    websocket: WebSocket,
    repo: ProductRepository = Depends(get_product_repository),
    notifier: ProductNotifier = Depends(get_notifier),
):
    """
    Push channel for product changes.

    Sends a top-products snapshot on connect and again whenever the channel
    has been idle for WS_REFRESH_SECONDS; every create/update/delete is
    forwarded as a ProductEvent in between.
    """
    await websocket.accept()
    subscription = notifier.subscribe()

    reader = asyncio.create_task(_drain_client(websocket))
    writer = asyncio.create_task(_push_updates(websocket, subscription, repo))
    try:
        done, pending = await asyncio.wait({reader, writer}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.warning("Websocket connection ended with error: %s", task.exception())
    finally:
        reader.cancel()
        writer.cancel()
        notifier.unsubscribe(subscription)
        logger.info("Closing the websocket")
