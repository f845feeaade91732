"""
Offline rent agreement renderer.

Used when the generation service cannot be reached for quota reasons. The
document content is assembled once and handed to a ``DocumentFormat`` that
decides the surface syntax, so the styled (HTML) and plain-text variants
always carry the same clauses in the same order.
"""

from __future__ import annotations

import textwrap
from datetime import date
from html import escape
from typing import List, Optional, Sequence

from .models import AgreementData, FormatMode
from .numerals import format_indian, number_to_words, ordinal_suffix

PLATFORM_NAME = "Riplico Legal AI Platform"
PLAIN_WIDTH = 72
PLAIN_INDENT = "   "

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

MAINTENANCE_INCLUDED_TEXT = "Society Maintenance charges if any, are included in the monthly rent paid by the Tenant."
MAINTENANCE_EXCLUDED_TEXT = "Society maintenance charges shall be borne by the tenant separately."

_HEADING_STYLE = (
    "text-align: center; color: #1a365d; margin-bottom: 30px; text-transform: uppercase; "
    "font-weight: bold; border-bottom: 2px solid #1a365d; padding-bottom: 10px;"
)
_SIGN_BOX_STYLE = "border: 2px solid #000; padding: 20px; margin-bottom: 30px; min-height: 120px; position: relative;"
_SIGN_TAG_STYLE = (
    "position: absolute; top: 10px; left: 10px; background: #fff9c4; padding: 8px 15px; "
    "font-weight: bold; border: 1px solid #ddd;"
)
_SIGN_CAPTION_STYLE = "position: absolute; bottom: 10px; left: 10px; font-weight: bold;"


class DocumentFormat:
    """Surface syntax for one output mode."""

    mode: FormatMode

    def text(self, value: object) -> str:
        raise NotImplementedError

    def strong(self, text: str) -> str:
        raise NotImplementedError

    def title(self, text: str) -> str:
        raise NotImplementedError

    def paragraph(self, text: str) -> str:
        raise NotImplementedError

    def label(self, text: str) -> str:
        raise NotImplementedError

    def clause(self, number: int, heading: str, points: Sequence[str]) -> str:
        raise NotImplementedError

    def closing(self, text: str) -> str:
        raise NotImplementedError

    def signature_block(self, heading: str, placeholder: str, caption: str) -> str:
        raise NotImplementedError

    def signatures(self, blocks: Sequence[str]) -> str:
        raise NotImplementedError

    def footer(self, text: str) -> str:
        raise NotImplementedError

    def join(self, blocks: Sequence[str]) -> str:
        return "\n\n".join(block for block in blocks if block)


class RichFormat(DocumentFormat):
    """Inline-styled HTML fragments, ready for a rich text preview."""

    mode = FormatMode.RICH

    def text(self, value: object) -> str:
        return escape(str(value), quote=False)

    def strong(self, text: str) -> str:
        return f"<strong>{text}</strong>"

    def title(self, text: str) -> str:
        return f'<h2 style="{_HEADING_STYLE}">{text}</h2>'

    def paragraph(self, text: str) -> str:
        return f'<p style="margin-bottom: 15px; text-align: justify;">{text}</p>'

    def label(self, text: str) -> str:
        return f'<p style="margin-bottom: 10px; font-weight: bold;">{text}</p>'

    def clause(self, number: int, heading: str, points: Sequence[str]) -> str:
        lines = [
            '<div style="margin-bottom: 20px;">',
            f'  <p style="font-weight: bold; margin-bottom: 10px;">{number}. {heading}:</p>',
        ]
        if len(points) == 1:
            lines.append(f'  <p style="margin-left: 20px; text-align: justify;">{points[0]}</p>')
        else:
            lines.append('  <div style="margin-left: 20px;">')
            for letter, point in zip("abcdefghijklmnopqrstuvwxyz", points):
                lines.append(
                    f'    <p style="margin-bottom: 8px; text-align: justify;"><strong>{letter}.</strong> {point}</p>'
                )
            lines.append("  </div>")
        lines.append("</div>")
        return "\n".join(lines)

    def closing(self, text: str) -> str:
        return f'<p style="margin: 30px 0 40px 0; text-align: justify;">{text}</p>'

    def signature_block(self, heading: str, placeholder: str, caption: str) -> str:
        return "\n".join(
            [
                f'  <p style="font-weight: bold; margin-bottom: 15px;">{heading}</p>',
                f'  <div style="{_SIGN_BOX_STYLE}">',
                f'    <div style="{_SIGN_TAG_STYLE}">{placeholder}</div>',
                f'    <div style="{_SIGN_CAPTION_STYLE}">{caption}</div>',
                "  </div>",
            ]
        )

    def signatures(self, blocks: Sequence[str]) -> str:
        return '<div style="margin-top: 50px;">\n' + "\n\n".join(blocks) + "\n</div>"

    def footer(self, text: str) -> str:
        return f'<p style="margin-top: 30px; font-size: 12px; color: #666; text-align: center;">\n<em>{text}</em>\n</p>'


class PlainFormat(DocumentFormat):
    """Monospace-friendly text: capitals for headings, spaces for indentation."""

    mode = FormatMode.PLAIN

    def text(self, value: object) -> str:
        return str(value)

    def strong(self, text: str) -> str:
        return text

    def title(self, text: str) -> str:
        heading = text.upper()
        return "\n".join([heading.center(PLAIN_WIDTH).rstrip(), ("=" * len(heading)).center(PLAIN_WIDTH).rstrip()])

    def paragraph(self, text: str) -> str:
        return text

    def label(self, text: str) -> str:
        return text.upper()

    def clause(self, number: int, heading: str, points: Sequence[str]) -> str:
        lines = [f"{number}. {heading.upper()}"]
        if len(points) == 1:
            lines.append(textwrap.indent(points[0], PLAIN_INDENT))
        else:
            for letter, point in zip("abcdefghijklmnopqrstuvwxyz", points):
                lines.append(f"{PLAIN_INDENT}{letter}. {point}")
        return "\n".join(lines)

    def closing(self, text: str) -> str:
        return text

    def signature_block(self, heading: str, placeholder: str, caption: str) -> str:
        return "\n".join([heading.upper(), "", f"{PLAIN_INDENT}{'_' * 40}", f"{PLAIN_INDENT}{caption}"])

    def signatures(self, blocks: Sequence[str]) -> str:
        return "\n\n".join(blocks)

    def footer(self, text: str) -> str:
        return text.center(PLAIN_WIDTH).rstrip()


FORMATS = {
    FormatMode.RICH: RichFormat(),
    FormatMode.PLAIN: PlainFormat(),
}


def get_format(mode: FormatMode) -> DocumentFormat:
    return FORMATS[FormatMode(mode)]


def display_date(value: str) -> str:
    """Show ISO dates as "5 January 2025"; anything else is kept as typed."""
    try:
        parsed = date.fromisoformat(value.strip())
    except ValueError:
        return value
    return f"{parsed.day} {MONTH_NAMES[parsed.month - 1]} {parsed.year}"


def _short_date(value: date) -> str:
    return f"{value.day}/{value.month}/{value.year}"


def _rupees(fmt: DocumentFormat, amount: int) -> str:
    return fmt.strong(f"₹{format_indian(amount)} ({number_to_words(amount)} Rupees only)")


def _first_segment(address: str) -> str:
    return address.split(",")[0].strip()


def maintenance_sentence(data: AgreementData) -> str:
    return MAINTENANCE_INCLUDED_TEXT if data.maintenance_included else MAINTENANCE_EXCLUDED_TEXT


def _party_paragraph(fmt: DocumentFormat, name: str, id_label: str, id_value: str, address: str, role: str) -> str:
    v = fmt.text
    return fmt.paragraph(
        f"{v(name)} having {id_label}: {v(id_value)}, resident of {v(address)} "
        f'(hereinafter referred to as the "{role}") which expression shall, unless repugnant to the context, '
        "mean and include their heirs, executors, and permitted assigns."
    )


def _clauses(fmt: DocumentFormat, data: AgreementData) -> List[str]:
    v = fmt.text
    day = data.rent_payment_date
    clauses = [
        (
            "Term of Tenancy",
            [
                f"The term of this agreement shall be for {data.tenancy_months} months, commencing from "
                f"{v(data.lease_start)} and ending on {v(data.lease_end)}."
            ],
        ),
        (
            "Rent and Security Deposit",
            [
                f"The monthly rent for the property is {_rupees(fmt, data.monthly_rent)} per month.",
                f"The tenant agrees to pay the monthly rent on or before {fmt.strong(f'{day}{ordinal_suffix(day)} day')} "
                "of each month.",
                f"A security deposit of {_rupees(fmt, data.security_deposit)} has been paid by the tenant to the landlord "
                "and this amount will carry no interest. The security deposit shall be refunded at the end of the tenancy "
                "period, subject to deductions for any damages or outstanding dues.",
            ],
        ),
        (
            "Utilities and Maintenance",
            [
                "The tenant will be responsible for paying utility bills including electricity, water, gas, and any other "
                "applicable charges.",
                maintenance_sentence(data),
                "The tenant shall maintain the property in good condition and shall be responsible for any damages caused "
                "beyond normal wear and tear.",
                "The landlord shall be responsible for regular maintenance and repairs, including plumbing, electrical, and "
                "structural maintenance.",
            ],
        ),
        (
            "Use of Property",
            [
                "The property shall be used solely for residential purposes by the tenant.",
                "Subletting, assigning, or transferring the property to any third party, in whole or in part, without the "
                "prior written consent of the landlord is strictly prohibited. Any subletting or assignment requires the "
                "landlord's explicit written approval.",
            ],
        ),
        (
            "Termination and Notice",
            [
                "Either party may terminate this agreement by providing 30 days written notice to the other party through "
                "any suitable channel.",
                "Upon termination, the tenant shall return the property in the same condition as at the beginning of the "
                "tenancy, minus normal wear and tear.",
            ],
        ),
        (
            "Additional Terms",
            [
                "The tenant shall promptly inform the landlord of any necessary repairs or maintenance issues.",
                "The landlord has the right to enter the property with prior notice to inspect its condition or make repairs.",
                "Failure to make regular rent payments or violation of terms can result in eviction.",
                "All notices and communications shall be in writing and shall be deemed properly delivered if sent via "
                "registered post.",
            ],
        ),
    ]
    if data.has_special_clauses:
        clauses.append(("Special Clauses", [v(data.special_clauses.strip())]))
    return [fmt.clause(number, heading, points) for number, (heading, points) in enumerate(clauses, start=1)]


def render_fallback_agreement(
    data: AgreementData,
    mode: FormatMode = FormatMode.RICH,
    *,
    today: Optional[date] = None,
) -> str:
    """
    Build a complete rent agreement without calling the generation service.

    ``today`` only feeds the "Generated by" footer; pass it to get
    reproducible output.
    """
    fmt = get_format(mode)
    v = fmt.text
    generated_on = today or date.today()

    landlord_caption = (
        f"{v(data.landlord_name)} resident of {v(_first_segment(data.landlord_address))}, "
        f"having PAN Number: {v(data.landlord_pan)}"
    )
    tenant_caption = (
        f"{v(data.tenant_name)} resident of {v(_first_segment(data.tenant_address))}, "
        f"having Aadhaar Number: {v(data.tenant_aadhaar)}"
    )

    blocks = [
        fmt.title("RENT AGREEMENT"),
        fmt.paragraph(
            f'This rent agreement ("Agreement") is made on {v(display_date(data.agreement_date))} '
            f"at {v(data.agreement_location)}."
        ),
        fmt.label("BETWEEN:"),
        fmt.label("LANDLORD(s)"),
        _party_paragraph(fmt, data.landlord_name, "PAN Number", data.landlord_pan, data.landlord_address, "LANDLORD"),
        fmt.label("AND:"),
        fmt.label("TENANT(s)"),
        _party_paragraph(fmt, data.tenant_name, "Aadhaar Number", data.tenant_aadhaar, data.tenant_address, "TENANT"),
        fmt.label("WHEREAS"),
        fmt.paragraph(
            f"The said LANDLORD(s) is the sole and absolute owner of the Property: {v(data.property_address)} "
            '(hereinafter referred as "PROPERTY"), and the above said TENANT(s) has contacted the LANDLORD(s) to take '
            "the property on rent and the LANDLORD(s) has agreed to let out the Property to the above TENANT(s) on the "
            "below-given terms and conditions."
        ),
        fmt.label("NOW, THIS DEED FURTHER WITNESSETH AND AGREED BY AND BETWEEN THE SAID PARTIES AS FOLLOWS:"),
        *_clauses(fmt, data),
        fmt.closing(
            "In Witness Whereof, the Parties hereto have set their hands and signatures on the date and year first "
            "above mentioned."
        ),
        fmt.signatures(
            [
                fmt.signature_block("Landlord(s) Signatures", "LandlordSign", landlord_caption),
                fmt.signature_block("Tenant(s) Signatures", "TenantSign", tenant_caption),
            ]
        ),
        fmt.footer(f"Generated by {PLATFORM_NAME} on {_short_date(generated_on)}"),
    ]
    return fmt.join(blocks)
