from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class FormatMode(str, Enum):
    """Output surface shared by the prompt and the offline renderer."""

    RICH = "rich"
    PLAIN = "plain"


class AgreementData(BaseModel):
    """Tenancy details consumed by the agreement generators."""

    agreement_date: str
    agreement_location: str

    landlord_name: str
    landlord_pan: str
    landlord_address: str

    tenant_name: str
    tenant_aadhaar: str
    tenant_address: str

    property_address: str

    tenancy_months: int = Field(ge=1)
    lease_start: str
    lease_end: str

    monthly_rent: int = Field(ge=0)
    security_deposit: int = Field(ge=0)
    rent_payment_date: int = Field(ge=1, le=31)

    maintenance_included: bool = False
    special_clauses: Optional[str] = None

    model_config = {"extra": "ignore"}

    @property
    def has_special_clauses(self) -> bool:
        return bool(self.special_clauses and self.special_clauses.strip())
