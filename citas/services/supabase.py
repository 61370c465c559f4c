"""Serviço do Supabase - Cliente assíncrono compartilhado."""

from citas.config.settings import Settings, get_settings
from citas.utils.logger import get_logger
from supabase import AsyncClient, acreate_client

logger = get_logger(__name__)

_supabase_client: AsyncClient | None = None


async def create_supabase_client(settings: Settings | None = None) -> AsyncClient:
    """Cria um cliente Supabase a partir das configurações.

    Prioriza a service key para operações de backend (ignora RLS).

    Raises:
        ValueError: Se as credenciais não estiverem configuradas.
    """
    settings = settings or get_settings()
    key = settings.supabase_service_key or settings.supabase_key

    if not settings.supabase_url or not key:
        logger.error(
            "supabase_not_configured",
            message="Credenciais do Supabase não configuradas.",
        )
        raise ValueError("SUPABASE_URL e SUPABASE_SERVICE_KEY/SUPABASE_KEY são obrigatórias")

    client = await acreate_client(settings.supabase_url, key)

    logger.info(
        "supabase_client_created",
        using_service_key=key == settings.supabase_service_key,
        key_preview=key[:5] + "...",
    )
    return client


async def get_supabase_client() -> AsyncClient:
    """Retorna o cliente global, criando-o na primeira chamada."""
    global _supabase_client
    if _supabase_client is None:
        _supabase_client = await create_supabase_client()
    return _supabase_client


def set_supabase_client(client: AsyncClient | None) -> None:
    """Registra o cliente criado no lifespan (ou limpa no shutdown)."""
    global _supabase_client
    _supabase_client = client
