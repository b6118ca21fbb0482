from fastapi import APIRouter, Depends

from app.core.encoding import parse_hashes
from app.sale.contract import SaleContract
from app.schemas.sale import (
    ErrorResponse,
    MintResponse,
    PublicMintRequest,
    WhitelistMintRequest,
)
from app.services.sale import get_nonce_registry, get_sale_contract
from app.services.signatures import NonceRegistry

from .common import authenticate, mint_response, record_mint

router = APIRouter()

MINT_ERRORS = {
    401: {"model": ErrorResponse, "description": "InvalidSignature, CallExpired"},
    402: {"model": ErrorResponse, "description": "InsufficientPayment"},
    403: {"model": ErrorResponse, "description": "NotEligible"},
    409: {"model": ErrorResponse, "description": "PhaseInactive, PerAddressCapExceeded, SupplyExceeded"},
    423: {"model": ErrorResponse, "description": "Paused"},
}


@router.post(
    "/whitelist-mint",
    response_model=MintResponse,
    responses=MINT_ERRORS,
    summary="Mint during the presale",
    description="Requires a Merkle proof that the caller is on the allowlist. The full attached value goes to the treasury.",
)
async def whitelist_mint(
    body: WhitelistMintRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> MintResponse:
    caller = await authenticate(body, "whitelist_mint", nonces)
    proof = parse_hashes(body.proof)
    result = contract.whitelist_mint(caller, body.quantity, proof, body.value)
    await record_mint(result)
    return mint_response(result)


@router.post(
    "/public-mint",
    response_model=MintResponse,
    responses=MINT_ERRORS,
    summary="Mint during the public sale",
)
async def public_mint(
    body: PublicMintRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> MintResponse:
    caller = await authenticate(body, "public_mint", nonces)
    result = contract.public_mint(caller, body.quantity, body.value)
    await record_mint(result)
    return mint_response(result)
