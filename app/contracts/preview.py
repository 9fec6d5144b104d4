from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from guardian.types import GuardianSeverity


class TransactionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    from_address: str
    to_address: str
    amount: Decimal
    chain_id: int
    token_symbol: str | None = None


class PreviewDetails(BaseModel):
    model_config = ConfigDict(extra="forbid")

    from_address: str
    to_address: str
    amount: Decimal
    amount_formatted: str
    token_symbol: str
    chain_id: int
    chain_name: str
    gas_estimate: str
    total_estimate: str


class PreviewValidations(BaseModel):
    model_config = ConfigDict(extra="forbid")

    has_balance: bool
    valid: bool
    issues: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    requires_double_confirm: bool = False
    severity: GuardianSeverity = GuardianSeverity.NONE


class TransactionPreview(BaseModel):
    model_config = ConfigDict(extra="forbid")

    success: bool
    preview: PreviewDetails
    validations: PreviewValidations
    summary: str

    def to_public_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
