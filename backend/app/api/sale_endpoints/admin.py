"""
Admin endpoints.

Each call is signed by the caller and must come from the owner or an admin.
The response carries the configuration as it stands after the call.
"""

from fastapi import APIRouter, Depends

from app.sale.contract import SaleContract
from app.schemas.sale import (
    AdminActionResponse,
    AdminsRequest,
    BareAdminRequest,
    BurnRequest,
    ErrorResponse,
    SetAllowlistRootRequest,
    SetBaseUriRequest,
    SetMaxSupplyRequest,
    SetPerAddressCapRequest,
    SetPhaseRequest,
    SetPresaleRequest,
    SetTreasuryRequest,
    SetUnitPriceRequest,
)
from app.services.sale import get_nonce_registry, get_sale_contract
from app.services.signatures import NonceRegistry

from .common import run_admin_call

router = APIRouter(
    prefix="/admin",
    responses={
        401: {"model": ErrorResponse, "description": "InvalidSignature, CallExpired"},
        403: {"model": ErrorResponse, "description": "Unauthorized"},
    },
)


@router.post("/allowlist-root", response_model=AdminActionResponse, summary="Replace the allowlist root")
async def set_allowlist_root(
    body: SetAllowlistRootRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call(
        "set_allowlist_root", body, contract, nonces,
        lambda caller: contract.set_allowlist_root(caller, body.root),
    )


@router.post("/treasury", response_model=AdminActionResponse, summary="Replace the treasury address")
async def set_treasury(
    body: SetTreasuryRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call(
        "set_treasury", body, contract, nonces,
        lambda caller: contract.set_treasury(caller, body.address),
    )


@router.post("/unit-price", response_model=AdminActionResponse, summary="Set a unit price")
async def set_unit_price(
    body: SetUnitPriceRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call(
        "set_unit_price", body, contract, nonces,
        lambda caller: contract.set_unit_price(caller, body.kind, body.amount),
    )


@router.post("/max-supply", response_model=AdminActionResponse, summary="Set the supply ceiling")
async def set_max_supply(
    body: SetMaxSupplyRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call(
        "set_max_supply", body, contract, nonces,
        lambda caller: contract.set_max_supply(caller, body.max_supply),
    )


@router.post("/per-address-cap", response_model=AdminActionResponse, summary="Set a per-address cap")
async def set_per_address_cap(
    body: SetPerAddressCapRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call(
        "set_per_address_cap", body, contract, nonces,
        lambda caller: contract.set_per_address_cap(caller, body.kind, body.cap),
    )


@router.post("/phase", response_model=AdminActionResponse, summary="Set both phase flags")
async def set_phase(
    body: SetPhaseRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call(
        "set_phase", body, contract, nonces,
        lambda caller: contract.set_phase(caller, body.presale, body.public),
    )


@router.post("/presale", response_model=AdminActionResponse, summary="Set the presale flag only")
async def set_presale(
    body: SetPresaleRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call(
        "set_presale", body, contract, nonces,
        lambda caller: contract.set_presale(caller, body.active),
    )


@router.post("/switch-to-public", response_model=AdminActionResponse, summary="Close presale, open public sale")
async def switch_to_public_phase(
    body: BareAdminRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call(
        "switch_to_public_phase", body, contract, nonces,
        contract.switch_to_public_phase,
    )


@router.post("/admins/add", response_model=AdminActionResponse, summary="Grant admin capability")
async def add_admins(
    body: AdminsRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call(
        "add_admins", body, contract, nonces,
        lambda caller: contract.add_admins(caller, body.addresses),
    )


@router.post("/admins/remove", response_model=AdminActionResponse, summary="Revoke admin capability")
async def remove_admins(
    body: AdminsRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call(
        "remove_admins", body, contract, nonces,
        lambda caller: contract.remove_admins(caller, body.addresses),
    )


@router.post("/pause", response_model=AdminActionResponse, summary="Pause mints")
async def pause(
    body: BareAdminRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call("pause", body, contract, nonces, contract.pause)


@router.post("/unpause", response_model=AdminActionResponse, summary="Resume mints")
async def unpause(
    body: BareAdminRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call("unpause", body, contract, nonces, contract.unpause)


@router.post("/base-uri", response_model=AdminActionResponse, summary="Set the metadata base URI")
async def set_base_uri(
    body: SetBaseUriRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call(
        "set_base_uri", body, contract, nonces,
        lambda caller: contract.set_base_uri(caller, body.base_uri),
    )


@router.post("/burn", response_model=AdminActionResponse, summary="Burn a token the caller owns")
async def burn(
    body: BurnRequest,
    contract: SaleContract = Depends(get_sale_contract),
    nonces: NonceRegistry = Depends(get_nonce_registry),
) -> AdminActionResponse:
    return await run_admin_call(
        "burn", body, contract, nonces,
        lambda caller: contract.burn(caller, body.token_id),
    )
