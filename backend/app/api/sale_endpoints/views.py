from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.encoding import normalize_address, parse_hashes
from app.models.sale import MintReceipt
from app.sale.contract import SaleContract
from app.schemas.sale import (
    ClaimsResponse,
    EligibilityResponse,
    MintReceiptListResponse,
    MintReceiptResponse,
    SaleConfigResponse,
    TokenResponse,
)
from app.services.sale import get_sale_contract

from .common import config_response

router = APIRouter()


@router.get(
    "/config",
    response_model=SaleConfigResponse,
    summary="Get sale configuration",
)
async def get_sale_config(
    contract: SaleContract = Depends(get_sale_contract),
) -> SaleConfigResponse:
    """Current phase flags, prices, caps, allowlist root, treasury and totals."""
    return config_response(contract)


@router.get(
    "/eligibility",
    response_model=EligibilityResponse,
    summary="Check allowlist eligibility",
)
async def check_eligibility(
    wallet_address: str,
    proof: List[str] = Query(default=[]),
    contract: SaleContract = Depends(get_sale_contract),
) -> EligibilityResponse:
    """Verify a proof against the current root. Works in any phase, paused or not."""
    address = normalize_address(wallet_address)
    return EligibilityResponse(
        wallet_address=address,
        eligible=contract.is_eligible(parse_hashes(proof), address),
        allowlist_root="0x" + contract.allowlist_root.hex(),
    )


@router.get(
    "/claims/{wallet_address}",
    response_model=ClaimsResponse,
    summary="Get per-address claim counters",
)
async def get_claims(
    wallet_address: str,
    contract: SaleContract = Depends(get_sale_contract),
) -> ClaimsResponse:
    address = normalize_address(wallet_address)
    entry = contract.claims(address)
    return ClaimsResponse(
        wallet_address=address,
        whitelist_claimed=entry.whitelist_claimed,
        public_claimed=entry.public_claimed,
    )


@router.get(
    "/tokens/{token_id}",
    response_model=TokenResponse,
    summary="Get token owner and metadata URI",
)
async def get_token(
    token_id: int,
    contract: SaleContract = Depends(get_sale_contract),
) -> TokenResponse:
    return TokenResponse(
        token_id=token_id,
        owner=contract.owner_of(token_id),
        token_uri=contract.token_uri(token_id),
    )


@router.get(
    "/receipts",
    response_model=MintReceiptListResponse,
    summary="List mint receipts",
)
async def list_receipts(
    wallet_address: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> MintReceiptListResponse:
    """Recorded mints, newest first."""
    query = MintReceipt.all()
    if wallet_address:
        query = query.filter(wallet_address=normalize_address(wallet_address))

    receipts = await query.order_by("-created_at").offset(offset).limit(limit)
    items = [
        MintReceiptResponse(
            id=str(r.id),
            kind=r.kind,
            wallet_address=r.wallet_address,
            quantity=r.quantity,
            first_token_id=r.first_token_id,
            last_token_id=r.last_token_id,
            amount_paid_wei=r.amount_paid_wei,
            treasury_address=r.treasury_address,
            created_at=r.created_at,
        )
        for r in receipts
    ]
    return MintReceiptListResponse(total_count=len(items), items=items)
