"""
Rent agreement synthesis.

Turns validated tenancy details into a finished agreement, either through
the OpenAI generation service or, when its quota is exhausted, through the
offline renderer.
"""

from .generator import AgreementGenerationError, generate_rental_agreement
from .models import AgreementData, FormatMode
from .prompt_builder import build_agreement_prompt
from .renderer import render_fallback_agreement

__all__ = [
    "AgreementData",
    "AgreementGenerationError",
    "FormatMode",
    "build_agreement_prompt",
    "generate_rental_agreement",
    "render_fallback_agreement",
]
