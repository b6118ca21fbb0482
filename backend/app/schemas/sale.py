from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.constants import UINT256_MAX, SaleKind


class SignedCall(BaseModel):
    """Fields shared by every state-changing call."""
    caller: str = Field(..., description="Caller's EVM address")
    nonce: int = Field(..., ge=0, le=UINT256_MAX, description="Single-use nonce chosen by the caller")
    expires_at: int = Field(..., ge=0, description="Unix time in seconds after which the signed call is rejected")
    signature: str = Field(..., description="EIP-191 signature over the call message")


class PublicMintRequest(SignedCall):
    quantity: int = Field(..., gt=0, description="Number of tokens to mint")
    value: int = Field(..., ge=0, description="Attached payment in wei")

    def params(self) -> Dict:
        return {"quantity": self.quantity, "value": str(self.value)}


class WhitelistMintRequest(PublicMintRequest):
    proof: List[str] = Field(default_factory=list, description="0x-hex sibling hashes, leaf to root")

    def params(self) -> Dict:
        return {**super().params(), "proof": [p.lower() for p in self.proof]}


class MintResponse(BaseModel):
    kind: SaleKind
    wallet_address: str
    quantity: int
    token_ids: List[int]
    amount_paid: int = Field(..., description="Wei routed to the treasury")
    treasury_address: str


class EligibilityResponse(BaseModel):
    wallet_address: str
    eligible: bool
    allowlist_root: str


class SaleConfigResponse(BaseModel):
    """Current sale configuration and published totals."""
    presale_active: bool
    public_sale_active: bool
    whitelist_unit_price: int
    public_unit_price: int
    max_supply: int
    max_public_mint_per_address: int
    max_whitelist_mint_per_address: int
    allowlist_root: str
    treasury_address: str
    paused: bool
    owner: str
    admins: List[str]
    total_issued: int
    total_supply: int


class ClaimsResponse(BaseModel):
    wallet_address: str
    whitelist_claimed: int
    public_claimed: int


class TokenResponse(BaseModel):
    token_id: int
    owner: str
    token_uri: str


class MintReceiptResponse(BaseModel):
    id: str
    kind: SaleKind
    wallet_address: str
    quantity: int
    first_token_id: int
    last_token_id: int
    amount_paid_wei: str
    treasury_address: str
    created_at: datetime


class MintReceiptListResponse(BaseModel):
    total_count: int
    items: List[MintReceiptResponse]


# --- Admin calls ---

class SetAllowlistRootRequest(SignedCall):
    root: str = Field(..., description="0x-hex 32-byte Merkle root")

    def params(self) -> Dict:
        return {"root": self.root.lower()}


class SetTreasuryRequest(SignedCall):
    address: str

    def params(self) -> Dict:
        return {"address": self.address.lower()}


class SetUnitPriceRequest(SignedCall):
    kind: SaleKind
    amount: int = Field(..., ge=0, description="Unit price in wei")

    def params(self) -> Dict:
        return {"kind": self.kind.value, "amount": str(self.amount)}


class SetMaxSupplyRequest(SignedCall):
    max_supply: int = Field(..., ge=0)

    def params(self) -> Dict:
        return {"max_supply": str(self.max_supply)}


class SetPerAddressCapRequest(SignedCall):
    kind: SaleKind
    cap: int = Field(..., ge=0)

    def params(self) -> Dict:
        return {"kind": self.kind.value, "cap": str(self.cap)}


class SetPhaseRequest(SignedCall):
    presale: bool
    public: bool

    def params(self) -> Dict:
        return {"presale": self.presale, "public": self.public}


class SetPresaleRequest(SignedCall):
    active: bool

    def params(self) -> Dict:
        return {"active": self.active}


class AdminsRequest(SignedCall):
    addresses: List[str] = Field(..., min_length=1)

    def params(self) -> Dict:
        return {"addresses": [a.lower() for a in self.addresses]}


class SetBaseUriRequest(SignedCall):
    base_uri: str

    def params(self) -> Dict:
        return {"base_uri": self.base_uri}


class BurnRequest(SignedCall):
    token_id: int = Field(..., ge=0)

    def params(self) -> Dict:
        return {"token_id": self.token_id}


class BareAdminRequest(SignedCall):
    """Admin calls without parameters (pause, unpause, switch phase)."""

    def params(self) -> Dict:
        return {}


class AdminActionResponse(BaseModel):
    action: str
    caller: str
    config: SaleConfigResponse


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
