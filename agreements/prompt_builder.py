from __future__ import annotations

from telemetry.logging_utils import get_logger
from telemetry.prompt_filters import INJECTION_REMINDER, detect_prompt_injection

from .models import AgreementData, FormatMode

logger = get_logger(__name__)

STANDARD_CLAUSES = [
    "term of tenancy",
    "rent and security deposit",
    "utilities and maintenance",
    "use of property",
    "termination and notice",
    "repairs and alterations",
    "entry and inspection",
    "default and eviction",
    "use of premises",
    "furnishings and appliances",
    "renewal",
    "maintenance charges",
    "notice of absence",
    "dispute resolution",
    "force majeure",
    "indemnity",
    "notices",
]

RICH_FORMAT_INSTRUCTIONS = (
    "Format with proper legal language and structure. Lay the agreement out as simple HTML: a centred <h2> title, "
    "<p> paragraphs, numbered clause headings, and <strong> for amounts, dates, and party names."
)

PLAIN_FORMAT_INSTRUCTIONS = """FORMATTING REQUIREMENTS (MANDATORY):
- Output plain text only. Do NOT use markdown syntax of any kind: no asterisks (* or **), underscores for emphasis, \
pound signs (#) for headings, or backticks.
- Do NOT use HTML tags such as <b>, <strong>, <em>, <h1>-<h6>, <p>, or <div>.
- Use CAPITAL LETTERS for the title, section headings, and any text that needs emphasis.
- Number sections manually as 1., 2., 3. and sub-points as a., b., c., indented with spaces.
- Leave signature lines as a row of underscores (____________) followed by the party's name."""


def _clause_list(data: AgreementData) -> str:
    clauses = list(STANDARD_CLAUSES)
    if data.has_special_clauses:
        clauses.append("the special clauses listed above")
    return ", ".join(clauses[:-1]) + f", and {clauses[-1]}"


def build_agreement_prompt(data: AgreementData, mode: FormatMode = FormatMode.RICH) -> str:
    """Assemble the instruction sent to the generation service for one agreement."""
    maintenance = "Included in rent" if data.maintenance_included else "Tenant responsible"
    special = data.special_clauses.strip() if data.has_special_clauses else "None"

    sections = [
        "Generate a comprehensive rental agreement under Indian law with the following details:",
        "\n".join(
            [
                f"Agreement Date: {data.agreement_date}",
                f"Agreement Location: {data.agreement_location}",
            ]
        ),
        "\n".join(
            [
                f"LANDLORD: {data.landlord_name}, PAN: {data.landlord_pan}, Address: {data.landlord_address}",
                f"TENANT: {data.tenant_name}, Aadhaar: {data.tenant_aadhaar}, Address: {data.tenant_address}",
            ]
        ),
        "\n".join(
            [
                f"Property: {data.property_address}",
                f"Term: {data.tenancy_months} months ({data.lease_start} to {data.lease_end})",
                f"Monthly Rent: ₹{data.monthly_rent}",
                f"Security Deposit: ₹{data.security_deposit}",
                f"Payment Date: {data.rent_payment_date} of each month",
                f"Maintenance: {maintenance}",
                f"Special Clauses: {special}",
            ]
        ),
        "Create a professional rental agreement following Indian legal standards with all standard clauses "
        f"including {_clause_list(data)}.",
    ]
    if FormatMode(mode) is FormatMode.PLAIN:
        sections.append("Use proper legal language and structure.")
        sections.append(PLAIN_FORMAT_INSTRUCTIONS)
    else:
        sections.append(RICH_FORMAT_INSTRUCTIONS)
    injection = detect_prompt_injection(data.special_clauses)
    if injection:
        logger.warning(
            "special_clauses_injection_suspected", extra={"pattern": injection, "format_mode": FormatMode(mode).value}
        )
        sections.append(INJECTION_REMINDER)
    return "\n\n".join(sections)
