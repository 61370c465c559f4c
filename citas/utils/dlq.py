"""Dead Letter Queue - Inbound turns that failed to process."""

from citas.contracts.whatsapp_message import InboundMessage
from citas.services.observability import get_current_trace_id
from citas.utils.logger import get_logger

logger = get_logger(__name__)

DLQ_TABLE = "dead_letter_queue"


async def send_to_dlq(
    message: InboundMessage,
    error: str,
    error_type: str = "processing_error",
) -> None:
    """Registra um turno que falhou para reprocessamento manual.

    Args:
        message: Mensagem original que falhou.
        error: Descrição do erro.
        error_type: Tipo/categoria do erro.
    """
    trace_id = get_current_trace_id() or "unknown"

    logger.error(
        "message_sent_to_dlq",
        message_id=message.message_id,
        requester_id=message.requester_id,
        error_type=error_type,
        error=error,
        trace_id=trace_id,
    )

    try:
        from citas.services.supabase import get_supabase_client

        supabase = await get_supabase_client()
        await (
            supabase.table(DLQ_TABLE)
            .insert(
                {
                    "message_id": message.message_id,
                    "error_type": error_type,
                    "error_message": error,
                    "payload": message.model_dump_json(),
                    "trace_id": trace_id,
                    "retried": False,
                }
            )
            .execute()
        )
        logger.info("dlq_entry_persisted", message_id=message.message_id)

    except Exception as e:
        # The failure itself is already logged above
        logger.error(
            "dlq_persistence_failed",
            message_id=message.message_id,
            error=str(e),
        )
