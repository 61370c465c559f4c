"""WhatsApp Message Contract - Evolution API webhook payload and inbound turn."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from citas.utils.logger import get_logger

logger = get_logger(__name__)

# Groups, status broadcasts and linked-device ids carry no E.164 sender
IGNORED_JID_SUFFIXES = ("@g.us", "@broadcast", "@lid")


def normalize_phone(phone: str) -> str:
    """Normalize a phone number or JID user part to E.164 (``+<digits>``)."""
    cleaned = "".join(c for c in phone if c.isdigit())
    return f"+{cleaned}"


class EvolutionKey(BaseModel):
    """Message key (sender JID, direction, id)."""

    remoteJid: str
    fromMe: bool = False
    id: str


class EvolutionMessageContent(BaseModel):
    """Text content: plain ``conversation`` or ``extendedTextMessage``."""

    conversation: str | None = None
    extendedTextMessage: dict[str, Any] | None = None

    def get_text(self) -> str:
        if self.conversation:
            return self.conversation
        if self.extendedTextMessage and "text" in self.extendedTextMessage:
            return str(self.extendedTextMessage["text"])
        return ""


class EvolutionData(BaseModel):
    key: EvolutionKey
    pushName: str | None = None
    message: EvolutionMessageContent | None = None
    messageTimestamp: int | datetime | None = None


class EvolutionWebhook(BaseModel):
    """Evolution API webhook payload (``messages.upsert`` and others)."""

    event: str
    instance: str | None = None
    data: EvolutionData
    sender: str | None = None


class InboundMessage(BaseModel):
    """One requester turn: who sent it and the plain text."""

    message_id: str = Field(..., min_length=4)
    requester_id: str = Field(..., pattern=r"^\+[1-9]\d{1,14}$")
    text: str = Field(..., min_length=1)
    received_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    push_name: str | None = None

    @field_validator("requester_id", mode="before")
    @classmethod
    def normalize_requester(cls, v: Any) -> Any:
        if isinstance(v, str):
            return normalize_phone(v)
        return v

    @field_validator("text")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @classmethod
    def from_evolution(cls, payload: EvolutionWebhook) -> "InboundMessage | None":
        """Convert an Evolution payload into an inbound turn.

        Returns None for anything that is not a text message received from
        a requester: other events, our own outgoing messages, group chats,
        status broadcasts, senders without a phone number (``@lid``) and
        media without text.
        """
        if payload.event != "messages.upsert":
            return None

        data = payload.data
        if data.key.fromMe:
            return None

        jid = data.key.remoteJid
        if jid.endswith(IGNORED_JID_SUFFIXES):
            return None

        text = data.message.get_text().strip() if data.message else ""
        if not text:
            return None

        timestamp = data.messageTimestamp
        if isinstance(timestamp, int):
            timestamp = datetime.fromtimestamp(timestamp, tz=timezone.utc)

        try:
            return cls(
                message_id=data.key.id,
                requester_id=jid.split("@")[0],
                text=text,
                received_at=timestamp or datetime.now(timezone.utc),
                push_name=data.pushName,
            )
        except ValidationError as e:
            logger.warning(
                "inbound_message_rejected",
                remote_jid=jid,
                message_id=data.key.id,
                error=str(e),
            )
            return None
