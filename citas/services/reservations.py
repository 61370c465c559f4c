"""Reservation Store - Durable, conflict-free booking records.

A single ``ReservationStore`` sits on top of a storage engine. The engine
owns the atomic insert-if-absent; the store never decides a commit by
reading first.

Engines:
- ``SupabaseReservationEngine``: Postgres table with ``key`` as primary key.
  Unique violation (SQLSTATE 23505) means the slot is taken.
- ``RedisReservationEngine``: ``SET key value NX``.
- ``MemoryReservationEngine``: in-process dict, for development and tests.
"""

import json
from datetime import date
from typing import Any, Protocol

import httpx
import redis.asyncio as redis
from postgrest.exceptions import APIError
from pydantic import ValidationError
from redis.exceptions import RedisError

from citas.contracts.appointment import (
    KEY_SEPARATOR,
    Appointment,
    ReservationResult,
    ReservationStatus,
)
from citas.core.errors import StoreUnavailableError
from citas.services.observability import get_tracer
from citas.utils.logger import get_logger
from supabase import AsyncClient

logger = get_logger(__name__)
tracer = get_tracer(__name__)

UNIQUE_VIOLATION = "23505"

# Supabase default for PostgREST max-rows
SELECT_PAGE_SIZE = 1000


class ReservationEngine(Protocol):
    """Storage primitives a ReservationStore needs."""

    name: str

    async def insert_if_absent(self, key: str, record: dict[str, Any]) -> bool:
        """Insert ``record`` under ``key`` unless the key exists.

        Returns:
            True if inserted, False if the key was already present.

        Raises:
            StoreUnavailableError: On connectivity or server faults.
        """
        ...

    async def fetch_all(self) -> list[dict[str, Any]]: ...

    async def fetch_for_date(self, date_key: str) -> list[dict[str, Any]]: ...


class SupabaseReservationEngine:
    """Reservations in a Supabase (PostgREST) table keyed by ``key``."""

    name = "supabase"

    def __init__(
        self,
        client: AsyncClient,
        table: str = "appointments",
        page_size: int = SELECT_PAGE_SIZE,
    ) -> None:
        self.client = client
        self.table = table
        self.page_size = page_size

    async def insert_if_absent(self, key: str, record: dict[str, Any]) -> bool:
        try:
            await self.client.table(self.table).insert(record).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                return False
            raise StoreUnavailableError(f"Supabase insert failed: {e.message}") from e
        except httpx.HTTPError as e:
            raise StoreUnavailableError(f"Supabase unreachable: {e}") from e
        return True

    async def fetch_all(self) -> list[dict[str, Any]]:
        return await self._select()

    async def fetch_for_date(self, date_key: str) -> list[dict[str, Any]]:
        return await self._select(date_key)

    async def _select(self, date_key: str | None = None) -> list[dict[str, Any]]:
        # PostgREST caps each response at its max-rows setting; page until short
        records: list[dict[str, Any]] = []
        start = 0
        while True:
            try:
                query = self.client.table(self.table).select("*")
                if date_key is not None:
                    query = query.eq("date_key", date_key)
                result = await (
                    query.order("key").range(start, start + self.page_size - 1).execute()
                )
            except (APIError, httpx.HTTPError) as e:
                raise StoreUnavailableError(f"Supabase select failed: {e}") from e

            page = result.data or []
            records.extend(page)
            if len(page) < self.page_size:
                return records
            start += self.page_size


class RedisReservationEngine:
    """Reservations as JSON strings under ``reservation:<key>``."""

    name = "redis"

    def __init__(self, client: redis.Redis, prefix: str = "reservation:") -> None:
        self.client = client
        self.prefix = prefix

    def _make_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def insert_if_absent(self, key: str, record: dict[str, Any]) -> bool:
        try:
            was_set = await self.client.set(self._make_key(key), json.dumps(record), nx=True)
        except RedisError as e:
            raise StoreUnavailableError(f"Redis SET NX failed: {e}") from e
        return bool(was_set)

    async def fetch_all(self) -> list[dict[str, Any]]:
        return await self._scan(f"{self.prefix}*")

    async def fetch_for_date(self, date_key: str) -> list[dict[str, Any]]:
        return await self._scan(f"{self.prefix}{date_key}{KEY_SEPARATOR}*")

    async def _scan(self, pattern: str) -> list[dict[str, Any]]:
        try:
            keys = [k async for k in self.client.scan_iter(match=pattern)]
            if not keys:
                return []
            values = await self.client.mget(keys)
        except RedisError as e:
            raise StoreUnavailableError(f"Redis scan failed: {e}") from e
        # A key may expire or vanish between SCAN and MGET
        return [json.loads(v) for v in values if v is not None]


class MemoryReservationEngine:
    """In-process reservations.

    The check and the insert run without an await in between, so a single
    event loop cannot interleave two inserts of the same key.
    """

    name = "memory"

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}

    async def insert_if_absent(self, key: str, record: dict[str, Any]) -> bool:
        if key in self._records:
            return False
        self._records[key] = dict(record)
        return True

    async def fetch_all(self) -> list[dict[str, Any]]:
        return [dict(r) for r in self._records.values()]

    async def fetch_for_date(self, date_key: str) -> list[dict[str, Any]]:
        return [dict(r) for r in self._records.values() if r.get("date_key") == date_key]


class ReservationStore:
    """Mapping ReservationKey -> Appointment with an atomic reserve."""

    def __init__(self, engine: ReservationEngine) -> None:
        self.engine = engine

    async def load_all(self) -> dict[str, Appointment]:
        """Snapshot of every reservation. For display and filtering only."""
        return self._to_mapping(await self.engine.fetch_all())

    async def load_for_date(self, date_key: date) -> dict[str, Appointment]:
        """Snapshot of the reservations of one day."""
        records = await self.engine.fetch_for_date(date_key.isoformat())
        mapping = self._to_mapping(records)
        # Engines filter server-side; keep the filter here as well
        return {k: a for k, a in mapping.items() if a.date_key == date_key}

    async def reserve(self, appointment: Appointment) -> ReservationResult:
        """Atomically claim ``appointment.key``.

        Returns:
            COMMITTED if this call created the record, CONFLICT if the key
            was already taken.

        Raises:
            StoreUnavailableError: The engine failed; the outcome is unknown.
        """
        with tracer.start_as_current_span("reservation_reserve") as span:
            span.set_attribute("reservation.key", appointment.key)
            span.set_attribute("reservation.engine", self.engine.name)

            try:
                inserted = await self.engine.insert_if_absent(
                    appointment.key, appointment.to_record()
                )
            except StoreUnavailableError as e:
                span.record_exception(e)
                logger.error(
                    "reservation_store_unavailable",
                    key=appointment.key,
                    engine=self.engine.name,
                    error=str(e),
                )
                raise

            if inserted:
                status = ReservationStatus.COMMITTED
                logger.info(
                    "reservation_committed",
                    key=appointment.key,
                    requester_id=appointment.requester_id,
                    engine=self.engine.name,
                )
            else:
                status = ReservationStatus.CONFLICT
                logger.info(
                    "reservation_conflict",
                    key=appointment.key,
                    requester_id=appointment.requester_id,
                    engine=self.engine.name,
                )

            span.set_attribute("reservation.status", status.value)
            return ReservationResult(status=status, appointment=appointment)

    def _to_mapping(self, records: list[dict[str, Any]]) -> dict[str, Appointment]:
        appointments: dict[str, Appointment] = {}
        for record in records:
            try:
                appointment = Appointment.from_record(record)
            except ValidationError as e:
                logger.warning(
                    "reservation_record_invalid",
                    key=record.get("key"),
                    engine=self.engine.name,
                    error=str(e),
                )
                continue
            appointments[appointment.key] = appointment
        return appointments
