"""
Webhook endpoint for WhatsApp Business API (Meta).

Handles:
1. GET: Webhook verification from Meta
2. POST: Incoming WhatsApp messages (one conversation turn per text message)
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from vitrine import settings
from vitrine.catalog_store import SqlCatalogStore
from vitrine.dependencies import get_catalog_store, get_flow_controller, get_message_sender
from vitrine.flow_controller import FlowController
from vitrine.whatsapp_client import DeliveryError, WhatsAppClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["whatsapp"])


# -----------------------------------------------------------------------------
# WEBHOOK VERIFICATION (GET)
# -----------------------------------------------------------------------------
@router.get("/whatsapp")
async def verify_webhook(request: Request):
    """
    Meta WhatsApp webhook verification endpoint.

    - mode="subscribe" AND token == WHATSAPP_VERIFY_TOKEN -> hub.challenge (text/plain)
    - missing params -> 400
    - otherwise -> 403
    """
    mode = request.query_params.get("hub.mode")
    token = request.query_params.get("hub.verify_token")
    challenge = request.query_params.get("hub.challenge")

    if not all([mode, token, challenge]):
        logger.warning("Missing required parameters for webhook verification")
        raise HTTPException(status_code=400, detail="Missing parameters")

    if mode == "subscribe" and token == settings.WHATSAPP_VERIFY_TOKEN:
        logger.info("Webhook verified successfully")
        # CRITICAL: Return challenge as plain text, not JSON
        return Response(content=challenge, media_type="text/plain")

    logger.warning("Webhook verification failed: mode=%s", mode)
    raise HTTPException(status_code=403, detail="Forbidden")


# -----------------------------------------------------------------------------
# MESSAGE RECEIVER (POST)
# -----------------------------------------------------------------------------
def _process_value(
    value: dict,
    catalog: SqlCatalogStore,
    controller: FlowController,
    sender: WhatsAppClient,
) -> None:
    metadata = value.get("metadata") or {}
    phone_number_id = str(metadata.get("phone_number_id") or "")

    messages = value.get("messages") or []
    if not messages:
        return

    company = catalog.find_company_by_phone_number_id(phone_number_id)
    if company is None:
        logger.warning("Webhook ignored: unknown phone_number_id=%s", phone_number_id)
        return

    for message in messages:
        msg_from = str(message.get("from") or "")
        msg_type = message.get("type")

        # anti-loop: mensagem enviada pelo proprio numero da loja
        if not msg_from or msg_from in (phone_number_id, str(metadata.get("display_phone_number") or "")):
            logger.info("Webhook ignored own message phone_number_id=%s", phone_number_id)
            continue

        if msg_type != "text":
            logger.info("📎 Tipo de mensagem não-texto ignorado: %s", msg_type)
            continue

        text_body = (message.get("text") or {}).get("body", "")
        turn = controller.handle_message(
            user_id=f"{company.id}:{msg_from}",
            tenant_id=company.id,
            text=text_body,
            company_name=company.name,
        )
        if not turn.reply:
            continue

        if turn.needs_human:
            logger.warning("⚠️ Mensagem requer intervenção humana (tenant=%s)", company.id)

        try:
            sender.send_message(msg_from, turn.reply, phone_number_id=phone_number_id)
        except DeliveryError as e:
            logger.error("❌ Falha ao enviar resposta: %s", e)


@router.post("/whatsapp")
async def receive_whatsapp_message(
    request: Request,
    catalog: SqlCatalogStore = Depends(get_catalog_store),
    controller: FlowController = Depends(get_flow_controller),
    sender: WhatsAppClient = Depends(get_message_sender),
):
    """
    Receives incoming WhatsApp messages from Meta.

    Always answers 200 (Meta retries on anything else).
    """
    # CRITICAL: Accept raw JSON to prevent Pydantic validation failures
    try:
        payload = await request.json()
    except Exception as e:
        logger.error("Failed to parse webhook JSON: %s", e)
        return {"status": "error", "message": "invalid_json"}

    try:
        webhook_object = payload.get("object")
        if webhook_object != "whatsapp_business_account":
            logger.warning("Unknown webhook object type: %s", webhook_object)
            return {"status": "ignored"}

        for entry in payload.get("entry", []):
            for change in entry.get("changes", []):
                _process_value(change.get("value") or {}, catalog, controller, sender)

        return {"status": "ok"}

    except Exception as e:
        logger.error("Error processing WhatsApp webhook: %s", e, exc_info=True)
        # Still return 200 to prevent retries for malformed data
        return {"status": "error", "message": "processing_error"}
