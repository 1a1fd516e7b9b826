from __future__ import annotations

import json
import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, Request, Response
from fastapi.responses import PlainTextResponse

from backoffice.application.dto.telegram_update import TelegramUpdateDTO
from backoffice.application.dto.whatsapp_event import WhatsAppWebhookDTO
from backoffice.core.config import settings
from backoffice.infrastructure.telegram.webhook_verify import verify_secret_token
from backoffice.infrastructure.whatsapp.webhook_verify import verify_signature, verify_subscription
from backoffice.wiring.dependencies import get_telegram_engine, get_whatsapp_engine


router = APIRouter()
logger = logging.getLogger(__name__)


def _parse_json(body: bytes) -> dict | None:
    try:
        return json.loads(body.decode("utf-8")) if body else {}
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.exception("Failed to parse webhook body")
        return None


@router.post("/webhooks/telegram")
async def telegram_webhook(request: Request, background_tasks: BackgroundTasks) -> Response:
    secret = request.headers.get("X-Telegram-Bot-Api-Secret-Token")
    if not verify_secret_token(secret, settings.TELEGRAM_WEBHOOK_SECRET, settings.ENV):
        return Response(status_code=403)

    try:
        engine = get_telegram_engine()
    except Exception as e:
        logger.exception("Failed to initialize flow engine", extra={"error": str(e)})
        return Response(status_code=500)

    payload = _parse_json(await request.body())
    if payload is None:
        return Response(status_code=400)

    try:
        event = TelegramUpdateDTO.model_validate(payload).extract_event()
    except Exception as e:
        logger.exception("Error reading Telegram update", extra={"error": str(e)})
        return Response(status_code=400)

    if event is None:
        logger.info("Telegram update ignored")
        return Response(status_code=200)

    logger.info("Telegram update received", extra={"chat_id": event.chat_id, "message_id": event.message_id})
    background_tasks.add_task(engine.handle_event, event)
    return Response(status_code=200)


@router.get("/webhooks/whatsapp")
def verify_whatsapp_webhook(
    hub_mode: str | None = Query(None, alias="hub.mode"),
    hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(None, alias="hub.challenge"),
):
    challenge = verify_subscription(hub_mode, hub_verify_token, hub_challenge, settings.WHATSAPP_VERIFY_TOKEN)
    if challenge is None:
        raise HTTPException(status_code=403, detail="Verification failed")
    return PlainTextResponse(challenge)


@router.post("/webhooks/whatsapp")
async def whatsapp_webhook(request: Request, background_tasks: BackgroundTasks) -> Response:
    body = await request.body()
    signature = request.headers.get("X-Hub-Signature-256")
    if not verify_signature(body, signature, settings.WHATSAPP_APP_SECRET, settings.ENV):
        return Response(status_code=403)

    engine = get_whatsapp_engine()
    if engine is None:
        logger.warning("WhatsApp event received but the channel is not configured")
        return Response(status_code=200)

    payload = _parse_json(body)
    if payload is None:
        return Response(status_code=400)

    try:
        events = WhatsAppWebhookDTO.model_validate(payload).extract_events()
    except Exception as e:
        logger.exception("Error reading WhatsApp event", extra={"error": str(e)})
        return Response(status_code=400)

    logger.info("WhatsApp webhook received", extra={"event_count": len(events)})
    for event in events:
        background_tasks.add_task(engine.handle_event, event)
    return Response(status_code=200)
