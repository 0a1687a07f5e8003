from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from zulu_assistant.dependencies import get_conversation_service
from zulu_assistant.logging_config import get_logger, mask_phone
from zulu_assistant.schemas.webhook import WebhookRequest, WebhookResponse
from zulu_assistant.services.conversation_service import (
    ConversationService,
    InboundMessage,
    MediaAttachment,
)
from zulu_assistant.services.messaging_service import send_whatsapp_message

logger = get_logger("webhook")

router = APIRouter()


def _to_inbound(payload: WebhookRequest) -> InboundMessage | None:
    whatsapp = payload.whatsapp
    if whatsapp is None or not whatsapp.sender:
        return None

    text = (whatsapp.text.body if whatsapp.text else None) or ""
    media = None
    if whatsapp.image is not None and whatsapp.image.link:
        media = MediaAttachment(kind="image", url=whatsapp.image.link, caption=whatsapp.image.caption or "")

    if not text.strip() and media is None:
        return None

    sender_name = (payload.contact.name if payload.contact else None) or "Customer"
    return InboundMessage(text=text.strip(), sender_id=whatsapp.sender, sender_name=sender_name, media=media)


@router.post("/webhook", response_model=WebhookResponse)
def handle_webhook(
    payload: WebhookRequest,
    service: ConversationService = Depends(get_conversation_service),
):
    """Handle one inbound WhatsApp message from Gallabox."""
    inbound = _to_inbound(payload)
    if inbound is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid webhook payload")

    try:
        reply = service.handle_message(inbound)
    except Exception as e:
        logger.exception(f"Webhook failed for {mask_phone(inbound.sender_id)}: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=WebhookResponse(success=False, message="Internal error").model_dump(),
        )

    delivered = send_whatsapp_message(inbound.sender_id, inbound.sender_name, reply)
    if not delivered:
        logger.warning(f"Reply not delivered to {mask_phone(inbound.sender_id)}")

    return WebhookResponse(
        success=True,
        message="Message sent" if delivered else "Failed to send",
        bot_response=reply,
        delivered=delivered,
    )
