"""Evolution API Client - Sends WhatsApp text messages."""

from collections.abc import Sequence

import httpx

from citas.config.settings import get_settings
from citas.utils.logger import get_logger

logger = get_logger(__name__)


class EvolutionAPIClient:
    """Client for the Evolution API (WhatsApp) send endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        instance_name: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.evolution_api_url).rstrip("/")
        self.api_key = api_key or settings.evolution_api_key
        self.instance_name = instance_name or settings.evolution_instance_name
        self.timeout = timeout

        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "apikey": self.api_key,
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        return self._client

    async def send_text(self, to_number: str, text: str) -> dict:
        """Send one text message.

        Args:
            to_number: Recipient phone number in E.164 format.
            text: Message text.

        Returns:
            API response dict.

        Raises:
            httpx.HTTPError: If the request fails.
        """
        client = await self._get_client()
        url = f"/message/sendText/{self.instance_name}"
        # Evolution expects the number without "+"
        payload = {"number": to_number.lstrip("+"), "text": text}

        try:
            response = await client.post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("evolution_send_error", to_number=to_number, error=str(e))
            raise

        result = response.json()
        logger.info(
            "evolution_message_sent",
            to_number=to_number,
            message_id=result.get("key", {}).get("id"),
        )
        return result

    async def send_texts(self, to_number: str, texts: Sequence[str]) -> None:
        """Send a turn's messages one after another, preserving order.

        Stops at the first failure so later messages never arrive
        without the earlier ones.
        """
        for text in texts:
            await self.send_text(to_number, text)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


_evolution_client: EvolutionAPIClient | None = None


def get_evolution_client() -> EvolutionAPIClient:
    global _evolution_client
    if _evolution_client is None:
        _evolution_client = EvolutionAPIClient()
    return _evolution_client


async def send_whatsapp_replies(to_number: str, texts: Sequence[str]) -> None:
    """Background task: deliver a turn's replies in order.

    Errors are logged (the turn is already committed); they do not
    propagate out of the background task.
    """
    try:
        await get_evolution_client().send_texts(to_number, texts)
    except httpx.HTTPError as e:
        logger.error(
            "whatsapp_replies_not_delivered",
            to_number=to_number,
            pending=len(texts),
            error=str(e),
        )
