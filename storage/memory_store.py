from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryStore:
    """Demo-mode store used when Supabase is unavailable."""

    def __init__(self) -> None:
        self.emails: Dict[str, Dict[str, Any]] = {}
        self.agreements: Dict[str, Dict[str, Any]] = {}

    # Contact emails -------------------------------------------------------
    def save_email(self, email: str) -> Dict[str, Any]:
        record = {"id": str(uuid.uuid4()), "email": email, "created_at": _now_iso()}
        self.emails[record["id"]] = record
        return record

    # Agreements -----------------------------------------------------------
    def save_agreement(self, payload: Dict[str, Any], generated_content: str) -> Dict[str, Any]:
        agreement_id = str(uuid.uuid4())
        record = {
            **payload,
            "id": agreement_id,
            "special_clauses": payload.get("special_clauses") or None,
            "generated_content": generated_content,
            "created_at": _now_iso(),
        }
        self.agreements[agreement_id] = record
        return record

    def get_agreement(self, agreement_id: str) -> Optional[Dict[str, Any]]:
        return self.agreements.get(agreement_id)

    # Health ---------------------------------------------------------------
    def ping(self) -> bool:
        return True
