"""
Rent agreement generation through OpenAI, with an offline fallback.

Environment variables:
* OPENAI_API or OPENAI_API_KEY (required for live generation)
"""

from __future__ import annotations

import os
from datetime import date
from typing import Any, Optional

from dotenv import load_dotenv
from openai import OpenAI

from telemetry.logging_utils import get_logger
from telemetry.metrics import extract_usage_tokens, start_timer

from .models import AgreementData, FormatMode
from .prompt_builder import build_agreement_prompt
from .renderer import render_fallback_agreement

load_dotenv()

AGREEMENT_MODEL = "gpt-4o"
MAX_OUTPUT_TOKENS = 2000
EMPTY_RESPONSE_TEXT = "Error generating agreement"
GENERATION_FAILED_MESSAGE = "Failed to generate agreement. Please try again."
QUOTA_ERROR_CODE = "insufficient_quota"
RATE_LIMIT_STATUS = 429

logger = get_logger(__name__)


class AgreementGenerationError(RuntimeError):
    """Raised when the generation service fails for any reason other than quota exhaustion."""


def get_openai_client() -> OpenAI:
    """Create an OpenAI client with SDK retries disabled, raising a helpful error when the key is missing."""
    api_key = os.getenv("OPENAI_API") or os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY (or OPENAI_API) is required to generate agreements.")
    return OpenAI(api_key=api_key, max_retries=0)


def is_quota_error(exc: BaseException) -> bool:
    """True for the quota / rate-limit signature that triggers the offline renderer."""
    return getattr(exc, "code", None) == QUOTA_ERROR_CODE or getattr(exc, "status_code", None) == RATE_LIMIT_STATUS


def _response_text(response: Any) -> str:
    content = response.choices[0].message.content
    return content or EMPTY_RESPONSE_TEXT


def generate_rental_agreement(
    data: AgreementData,
    mode: FormatMode = FormatMode.RICH,
    *,
    client: Optional[OpenAI] = None,
    today: Optional[date] = None,
) -> str:
    """
    Generate a rent agreement for ``data`` in the requested format.

    Makes a single call to the generation service. When the service reports
    exhausted quota or rate limiting, the offline renderer's document is
    returned instead; callers cannot tell the two apart. Every other failure
    raises ``AgreementGenerationError``.
    """
    mode = FormatMode(mode)
    prompt = build_agreement_prompt(data, mode)

    timer = start_timer("agreement_generation", AGREEMENT_MODEL, mode.value)
    try:
        client = client or get_openai_client()
        response = client.chat.completions.create(
            model=AGREEMENT_MODEL,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=MAX_OUTPUT_TOKENS,
        )
        text = _response_text(response)
    except Exception as exc:
        if is_quota_error(exc):
            logger.warning(
                "agreement_fallback",
                extra={
                    "reason": getattr(exc, "code", None) or getattr(exc, "status_code", None),
                    "format_mode": mode.value,
                    "model": AGREEMENT_MODEL,
                },
            )
            document = render_fallback_agreement(data, mode, today=today)
            timer.done(component="agreement_fallback", model_or_tool="fallback_renderer")
            return document
        logger.exception(
            "agreement_generation_failed",
            extra={"error_type": type(exc).__name__, "format_mode": mode.value, "model": AGREEMENT_MODEL},
        )
        raise AgreementGenerationError(GENERATION_FAILED_MESSAGE) from exc

    tokens_in, tokens_out = extract_usage_tokens(response)
    timer.done(tokens_in=tokens_in, tokens_out=tokens_out)
    if text == EMPTY_RESPONSE_TEXT:
        logger.warning("agreement_empty_response", extra={"format_mode": mode.value, "model": AGREEMENT_MODEL})
    else:
        logger.info(
            "agreement_generated",
            extra={"format_mode": mode.value, "tokens_in": tokens_in, "tokens_out": tokens_out},
        )
    return text
