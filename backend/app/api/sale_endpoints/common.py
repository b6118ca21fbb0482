import logging
from typing import Any, Callable, Dict

from app.models.sale import AdminAction, MintReceipt
from app.sale.contract import SaleContract
from app.sale.engine import MintResult
from app.schemas.sale import (
    AdminActionResponse,
    MintResponse,
    SaleConfigResponse,
    SignedCall,
)
from app.services.signatures import NonceRegistry, authenticate_call

logger = logging.getLogger(__name__)


def config_response(contract: SaleContract) -> SaleConfigResponse:
    return SaleConfigResponse(**contract.snapshot())


def mint_response(result: MintResult) -> MintResponse:
    return MintResponse(
        kind=result.kind,
        wallet_address=result.caller,
        quantity=result.quantity,
        token_ids=result.token_ids,
        amount_paid=result.amount_paid,
        treasury_address=result.treasury_address,
    )


async def authenticate(body: SignedCall, method: str, nonces: NonceRegistry) -> str:
    return await authenticate_call(
        nonces,
        method=method,
        caller=body.caller,
        nonce=body.nonce,
        expires_at=body.expires_at,
        params=body.params(),
        signature=body.signature,
    )


async def record_mint(result: MintResult) -> None:
    """Write the audit row for a committed mint. Failures are logged, not raised."""
    try:
        await MintReceipt.create(
            kind=result.kind,
            wallet_address=result.caller,
            quantity=result.quantity,
            first_token_id=result.token_ids[0],
            last_token_id=result.token_ids[-1],
            amount_paid_wei=str(result.amount_paid),
            treasury_address=result.treasury_address,
        )
    except Exception as e:
        logger.error(f"Failed to record mint receipt for {result.caller}: {e}")


async def record_admin_action(caller: str, action: str, params: Dict[str, Any]) -> None:
    try:
        await AdminAction.create(caller=caller, action=action, params=params)
    except Exception as e:
        logger.error(f"Failed to record admin action {action} by {caller}: {e}")


async def run_admin_call(
    action: str,
    body: SignedCall,
    contract: SaleContract,
    nonces: NonceRegistry,
    apply: Callable[[str], Any],
) -> AdminActionResponse:
    """Authenticate, apply, audit, and return the resulting config."""
    caller = await authenticate(body, action, nonces)
    apply(caller)
    await record_admin_action(caller, action, body.params())
    return AdminActionResponse(action=action, caller=caller, config=config_response(contract))
