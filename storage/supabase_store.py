from __future__ import annotations

import time
import uuid
from typing import Any, Callable, Dict, Optional

import httpx
from postgrest import APIError
from supabase import Client, create_client


class SupabaseStore:
    """Persists contact emails and generated agreements in Supabase tables."""

    def __init__(self, url: str, key: str) -> None:
        self.client: Client = create_client(url, key)
        self._max_retries = 3
        self._retry_backoff_seconds = 0.25

    def _table(self, name: str):
        return self.client.table(name)

    def _with_retry(self, fn: Callable[[], Any]) -> Any:
        delay = self._retry_backoff_seconds
        for attempt in range(self._max_retries):
            try:
                return fn()
            except (httpx.RemoteProtocolError, httpx.WriteError, APIError):
                if attempt >= self._max_retries - 1:
                    raise
                time.sleep(delay)
                delay *= 2

    # Contact emails ---------------------------------------------------------------

    def save_email(self, email: str) -> Dict[str, Any]:
        payload = {"id": str(uuid.uuid4()), "email": email}
        resp = self._with_retry(lambda: self._table("emails").insert(payload).execute())
        if not resp.data:
            raise RuntimeError("Failed to store email")
        return resp.data[0]

    # Agreements -------------------------------------------------------------------

    def save_agreement(self, payload: Dict[str, Any], generated_content: str) -> Dict[str, Any]:
        row = {
            **payload,
            "id": str(uuid.uuid4()),
            "special_clauses": payload.get("special_clauses") or None,
            "generated_content": generated_content,
        }
        resp = self._with_retry(lambda: self._table("agreements").insert(row).execute())
        if not resp.data:
            raise RuntimeError("Failed to store agreement")
        return resp.data[0]

    def get_agreement(self, agreement_id: str) -> Optional[Dict[str, Any]]:
        resp = self._with_retry(
            lambda: self._table("agreements").select("*").eq("id", agreement_id).maybe_single().execute()
        )
        return resp.data if resp else None

    # Health -----------------------------------------------------------------------

    def ping(self) -> bool:
        try:
            self._with_retry(lambda: self._table("agreements").select("id").limit(1).execute())
        except (httpx.HTTPError, APIError):
            return False
        return True
