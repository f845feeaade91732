from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv
from fastapi import Body, FastAPI, HTTPException, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field, ValidationError

from agreements import AgreementData, AgreementGenerationError, FormatMode, generate_rental_agreement
from agreements.pdf import DEFAULT_FILENAME, render_pdf_bytes, safe_pdf_filename
from storage.memory_store import InMemoryStore
from storage.supabase_store import SupabaseStore
from telemetry.logging_utils import get_logger
from telemetry.metrics import fetch_metrics, summarize_metrics

load_dotenv()

logger = get_logger(__name__)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def build_store() -> Union[SupabaseStore, InMemoryStore]:
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    if url and key:
        return SupabaseStore(url, key)
    logger.warning("supabase_not_configured", extra={"store": "memory"})
    return InMemoryStore()


store = build_store()


class AgreementRequest(AgreementData):
    """Form payload accepted by ``/api/generateAgreement``."""

    agreement_date: str = Field(min_length=1)
    agreement_location: str = Field(min_length=2)
    landlord_name: str = Field(min_length=2)
    landlord_pan: str = Field(min_length=10)
    landlord_address: str = Field(min_length=10)
    tenant_name: str = Field(min_length=2)
    tenant_aadhaar: str = Field(min_length=12)
    tenant_address: str = Field(min_length=10)
    property_address: str = Field(min_length=10)
    lease_start: str = Field(min_length=1)
    lease_end: str = Field(min_length=1)
    monthly_rent: int = Field(ge=1)
    email: str = Field(pattern=EMAIL_PATTERN)
    format_mode: FormatMode = FormatMode.RICH


app = FastAPI(title="Riplico Rental Agreements")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message, **extra})


def _agreement_fields(form: AgreementRequest) -> Dict[str, Any]:
    return form.model_dump(mode="json", exclude={"format_mode"})


@app.post("/api/generateAgreement")
def generate_agreement(payload: Dict[str, Any] = Body(...)):
    try:
        form = AgreementRequest.model_validate(payload)
    except ValidationError as exc:
        logger.info("agreement_form_invalid", extra={"error_count": exc.error_count()})
        errors = json.loads(exc.json(include_url=False, include_input=False))
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid form data", errors=errors)

    try:
        store.save_email(form.email)
        content = generate_rental_agreement(form, form.format_mode)
        agreement = store.save_agreement(_agreement_fields(form), content)
    except AgreementGenerationError as exc:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    except Exception:
        logger.exception("generate_agreement_route_failed")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to generate agreement")

    return {"success": True, "agreement": {"id": agreement["id"], "content": content}}


@app.post("/api/saveEmail")
def save_email(payload: Dict[str, Any] = Body(...)):
    email = payload.get("email")
    if not email or not isinstance(email, str):
        return _error(status.HTTP_400_BAD_REQUEST, "Valid email is required")
    try:
        saved = store.save_email(email.strip())
    except Exception:
        logger.exception("save_email_route_failed")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to save email")
    return {"success": True, "email": saved}


@app.post("/api/generatePDF")
def generate_pdf(payload: Dict[str, Any] = Body(...)):
    content: Optional[str] = payload.get("content")
    if not content:
        return _error(status.HTTP_400_BAD_REQUEST, "Content is required")
    filename = safe_pdf_filename(str(payload.get("filename") or DEFAULT_FILENAME))
    try:
        pdf_bytes = render_pdf_bytes(content, title=filename[:-4].replace("-", " ").title())
    except Exception:
        logger.exception("generate_pdf_route_failed")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to generate PDF")
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/api/agreements/{agreement_id}")
def get_agreement(agreement_id: str):
    agreement = store.get_agreement(agreement_id)
    if not agreement:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agreement not found.")
    return {"success": True, "agreement": agreement}


@app.get("/api/metrics/summary")
def metrics_summary(limit: int = 500):
    return summarize_metrics(fetch_metrics(limit=limit))


@app.get("/api/health")
def health():
    return {"ok": store.ping(), "store": type(store).__name__}
