"""Remote fact store reached over the Supabase/PostgREST REST API.

Only the three calls the app needs are issued: a filtered, ordered, limited
select; an insert returning the new row; and an update returning the changed
row. Every failure, whatever its origin, surfaces as ``StoreError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from .models import DEFAULT_LIST_LIMIT, Fact, StoreError
from .settings import Settings

logger = structlog.get_logger()

TABLE = "facts"


@dataclass
class RemoteStore:
    settings: Settings
    client: httpx.AsyncClient | None = None
    _owns_client: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if not self.settings.supabase_url or not self.settings.supabase_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set for INFOBURST_STORE=supabase")
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.settings.store_timeout_s)
            self._owns_client = True

    def ensure_schema(self) -> None:
        # Schema is owned by the remote service.
        return

    def _url(self) -> str:
        return f"{self.settings.supabase_url.rstrip('/')}/rest/v1/{TABLE}"

    def _headers(self, *, returning: bool = False) -> dict[str, str]:
        key = self.settings.supabase_key or ""
        h = {"apikey": key, "Authorization": f"Bearer {key}"}
        if returning:
            h["Prefer"] = "return=representation"
        return h

    async def _request(self, method: str, *, params: dict | None = None, json: Any = None, returning: bool = False) -> list[dict]:
        try:
            resp = await self.client.request(
                method,
                self._url(),
                params=params,
                json=json,
                headers=self._headers(returning=returning),
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("store.http_error", method=method, status=exc.response.status_code)
            raise StoreError(f"{method} {TABLE}: HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("store.transport_error", method=method, error=str(exc))
            raise StoreError(f"{method} {TABLE}: {exc}") from exc
        except ValueError as exc:
            raise StoreError(f"{method} {TABLE}: invalid JSON response") from exc

        if not isinstance(data, list):
            raise StoreError(f"{method} {TABLE}: expected a list of rows")
        return data

    async def list_facts(self, category: str | None = None, limit: int = DEFAULT_LIST_LIMIT) -> list[Fact]:
        params = {"select": "*", "order": "created_at.desc", "limit": str(limit)}
        if category is not None:
            params["category"] = f"eq.{category}"
        rows = await self._request("GET", params=params)
        return [Fact.from_row(r) for r in rows]

    async def insert_fact(self, text: str, source: str, category: str) -> Fact:
        rows = await self._request(
            "POST",
            json=[{"text": text, "source": source, "category": category}],
            returning=True,
        )
        if not rows:
            raise StoreError("insert returned no row")
        return Fact.from_row(rows[0])

    async def update_vote_counts(self, fact_id: Any, counters: dict[str, int]) -> Fact:
        rows = await self._request(
            "PATCH",
            params={"id": f"eq.{fact_id}"},
            json=dict(counters),
            returning=True,
        )
        if not rows:
            raise StoreError(f"no fact with id {fact_id!r}")
        return Fact.from_row(rows[0])

    async def close(self) -> None:
        if self._owns_client and self.client is not None:
            await self.client.aclose()
