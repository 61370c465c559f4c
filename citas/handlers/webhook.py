"""Webhook Handler - WhatsApp webhook endpoint and debug routes."""

from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from citas.config.settings import get_settings
from citas.contracts.whatsapp_message import EvolutionWebhook, InboundMessage, normalize_phone
from citas.core.dependencies import AppDependencies, get_app_dependencies
from citas.core.errors import StoreUnavailableError
from citas.services.evolution import send_whatsapp_replies
from citas.services.observability import get_tracer
from citas.utils.dlq import send_to_dlq
from citas.utils.logger import bind_requester, get_logger

router = APIRouter(prefix="/webhook", tags=["webhook"])
logger = get_logger(__name__)
tracer = get_tracer(__name__)


@router.post("/whatsapp")
async def whatsapp_webhook(
    payload: EvolutionWebhook,
    background_tasks: BackgroundTasks,
    deps: AppDependencies = Depends(get_app_dependencies),
) -> dict:
    """Webhook handler para Evolution API (WhatsApp).

    Converts the payload into one inbound turn, runs it through the
    booking conversation and sends the replies in the background.
    """
    message = InboundMessage.from_evolution(payload)

    if not message:
        # Own messages, status updates, groups, media without text
        return {"status": "ignored", "reason": "filtered_event"}

    bind_requester(message.requester_id, message.message_id)

    with tracer.start_as_current_span("whatsapp_webhook") as span:
        span.set_attribute("message_id", message.message_id)
        span.set_attribute("requester_id", message.requester_id)
        span.set_attribute("event", payload.event)

        if deps.idempotency and not await deps.idempotency.claim(message.message_id):
            span.set_attribute("duplicate", True)
            return {"status": "duplicate", "processed": False}

        try:
            reply = await deps.conversation.handle(message.requester_id, message.text)
        except Exception as e:
            span.record_exception(e)
            logger.error(
                "webhook_processing_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            if deps.idempotency:
                await deps.idempotency.release(message.message_id)
            await send_to_dlq(message, str(e), type(e).__name__)

            raise HTTPException(
                status_code=500,
                detail={"error": "Processing failed", "message_id": message.message_id},
            ) from e

        span.set_attribute("stage", reply.stage.value)

        if reply.messages:
            background_tasks.add_task(
                send_whatsapp_replies, message.requester_id, reply.messages
            )

        logger.info(
            "webhook_processed",
            stage=reply.stage.value,
            replies=len(reply.messages),
        )
        return {
            "status": "success",
            "stage": reply.stage.value,
            "replies": len(reply.messages),
        }


@router.get("/health")
async def webhook_health() -> dict:
    return {"status": "healthy", "endpoint": "webhook"}


def _require_debug() -> None:
    if get_settings().is_production:
        raise HTTPException(status_code=404, detail="Not Found")


@router.get("/debug/session/{phone}", dependencies=[Depends(_require_debug)])
async def get_session(
    phone: str,
    deps: AppDependencies = Depends(get_app_dependencies),
) -> dict:
    """Current booking session of a requester (debug only)."""
    session = await deps.sessions.get_or_create(normalize_phone(phone))
    return session.model_dump(mode="json")


@router.delete("/debug/session/{phone}", dependencies=[Depends(_require_debug)])
async def clear_session(
    phone: str,
    deps: AppDependencies = Depends(get_app_dependencies),
) -> dict:
    """Drop a requester's booking session (debug only)."""
    requester_id = normalize_phone(phone)
    await deps.sessions.clear(requester_id)
    logger.info("debug_session_cleared", requester_id=requester_id)
    return {"status": "success", "requester_id": requester_id}


@router.get("/debug/reservations", dependencies=[Depends(_require_debug)])
async def list_reservations(
    day: date | None = None,
    deps: AppDependencies = Depends(get_app_dependencies),
) -> dict:
    """Snapshot of committed reservations, optionally for one day (debug only)."""
    try:
        if day is None:
            reservations = await deps.store.load_all()
        else:
            reservations = await deps.store.load_for_date(day)
    except StoreUnavailableError as e:
        logger.error("debug_reservations_failed", error=str(e))
        raise HTTPException(status_code=503, detail="Reservation store unavailable") from e

    return {
        "count": len(reservations),
        "reservations": [a.to_record() for a in sorted(reservations.values(), key=lambda a: a.key)],
    }
