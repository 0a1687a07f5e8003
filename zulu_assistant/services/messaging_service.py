import httpx

from zulu_assistant.config import settings
from zulu_assistant.logging_config import get_logger, mask_phone

logger = get_logger("messaging_service")


def build_text_payload(phone: str, name: str, message: str) -> dict:
    return {
        "channelId": settings.gallabox_channel_id,
        "channelType": "whatsapp",
        "recipient": {"name": name, "phone": phone},
        "whatsapp": {"type": "text", "text": {"body": message}},
    }


def send_whatsapp_message(phone: str, name: str, message: str) -> bool:
    """Send a text message through the Gallabox API."""
    if not settings.gallabox_api_key or not settings.gallabox_api_secret:
        logger.error("Gallabox credentials are missing (GALLABOX_API_KEY / GALLABOX_API_SECRET)")
        return False

    if not phone or not message:
        logger.warning(f"send_whatsapp_message: missing phone={mask_phone(phone)} or message")
        return False

    try:
        with httpx.Client(timeout=settings.send_timeout_seconds) as client:
            response = client.post(
                f"{settings.gallabox_base_url.rstrip('/')}/messages/whatsapp",
                json=build_text_payload(phone, name, message),
                headers={
                    "apiKey": settings.gallabox_api_key,
                    "apiSecret": settings.gallabox_api_secret,
                    "Content-Type": "application/json",
                },
            )
        logger.info(
            f"Gallabox response: status={response.status_code}, phone={mask_phone(phone)}, body={response.text[:200]}"
        )
        return 200 <= response.status_code < 300
    except httpx.HTTPError as e:
        logger.error(f"Error sending WhatsApp message: {e}")
        return False
