from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class WhatsAppText(BaseModel):
    body: Optional[str] = None


class WhatsAppImage(BaseModel):
    link: Optional[str] = Field(default=None, validation_alias=AliasChoices("link", "url"))
    caption: Optional[str] = None


class WhatsAppMessage(BaseModel):
    sender: Optional[str] = Field(default=None, validation_alias=AliasChoices("from", "sender"))
    type: Optional[str] = "text"
    text: Optional[WhatsAppText] = None
    image: Optional[WhatsAppImage] = None


class WebhookContact(BaseModel):
    name: Optional[str] = None


class WebhookRequest(BaseModel):
    """Inbound Gallabox webhook; unknown fields are ignored."""

    whatsapp: Optional[WhatsAppMessage] = None
    contact: Optional[WebhookContact] = None


class WebhookResponse(BaseModel):
    success: bool
    message: str
    bot_response: Optional[str] = None
    delivered: Optional[bool] = None
