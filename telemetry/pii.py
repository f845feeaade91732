from __future__ import annotations

import hashlib
import re
from typing import Any, Dict

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
# Indian PAN: five letters, four digits, one letter.
PAN_RE = re.compile(r"\b[A-Za-z]{5}\d{4}[A-Za-z]\b")
# Aadhaar: twelve digits, optionally grouped 4-4-4.
AADHAAR_RE = re.compile(r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}\b")
# Phone-like numbers: allow country code, separators, and require at least 9 digits overall.
PHONE_RE = re.compile(r"\+?\d[\d\s().-]{8,}\d")

# Keys whose values are whole documents or prompts and are never logged verbatim.
SENSITIVE_FIELDS = {
    "content",
    "generated_content",
    "agreement_text",
    "document",
    "prompt",
    "raw_prompt",
    "raw_completion",
    "special_clauses",
    "pdf_base64",
}

# Identity fields are hashed rather than dropped so events can still be correlated.
IDENTITY_FIELDS = {
    "email",
    "landlord_name",
    "landlord_pan",
    "landlord_address",
    "tenant_name",
    "tenant_aadhaar",
    "tenant_address",
    "property_address",
}


def _hash_token(text: str) -> str:
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"[HASH:{digest}]"


def scrub_text(text: str) -> str:
    """Redact or hash obvious PII tokens (emails, PAN, Aadhaar, phones) from free text."""
    if not text:
        return text

    def _replace(match: re.Match, label: str) -> str:
        return f"[{label}_{_hash_token(match.group(0))}]"

    scrubbed = EMAIL_RE.sub(lambda m: _replace(m, "EMAIL"), text)
    scrubbed = PAN_RE.sub(lambda m: _replace(m, "PAN"), scrubbed)
    scrubbed = AADHAAR_RE.sub(lambda m: _replace(m, "AADHAAR"), scrubbed)
    scrubbed = PHONE_RE.sub(lambda m: _replace(m, "PHONE"), scrubbed)
    return scrubbed


def _summarize(value: Any) -> Dict[str, Any]:
    length = len(value) if hasattr(value, "__len__") else None
    return {"redacted": True, "length": length}


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    if lowered in SENSITIVE_FIELDS:
        return True
    return "agreement" in lowered and ("text" in lowered or "content" in lowered or "body" in lowered)


def scrub_value(value: Any) -> Any:
    """Scrub a generic value for PII before logging."""
    if isinstance(value, str):
        cleaned = scrub_text(value)
        if len(cleaned) > 500:
            return _hash_token(cleaned)
        return cleaned
    if isinstance(value, dict):
        return sanitize_log_payload(value)
    if isinstance(value, (list, tuple)):
        return [scrub_value(item) for item in value]
    return value


def sanitize_log_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Strip or hash PII-heavy fields from a log payload."""
    if not isinstance(payload, dict):
        return {}

    cleaned: Dict[str, Any] = {}
    for key, value in payload.items():
        name = str(key)
        if value is None:
            cleaned[name] = value
        elif _is_sensitive_key(name):
            cleaned[name] = _summarize(value)
        elif name.lower() in IDENTITY_FIELDS:
            cleaned[name] = _hash_token(str(value))
        else:
            cleaned[name] = scrub_value(value)
    return cleaned
