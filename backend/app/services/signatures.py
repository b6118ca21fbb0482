"""
Caller authentication for state-changing API calls.

A call is an EIP-191 personal-sign message over a canonical text that names
the method, the caller, a nonce, an expiry and the call parameters. The
server recovers the signer with eth_account and requires it to match the
claimed caller.

Nonces are single use per caller. A used nonce is stored with the expiry of
the call it signed and is pruned once that expiry passes; by then the call
itself is rejected as expired, so pruning never reopens a replay.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from tortoise.exceptions import IntegrityError

from app.core.config import settings
from app.core.encoding import normalize_address
from app.core.errors import CallExpired, InvalidInput, InvalidSignature, NonceAlreadyUsed
from app.models.sale import UsedNonce

logger = logging.getLogger(__name__)


def build_call_message(
    method: str, caller: str, nonce: int, expires_at: int, params: Dict[str, Any]
) -> str:
    """Text the caller signs. Clients must build it byte-for-byte the same way."""
    payload = json.dumps(params, sort_keys=True, separators=(",", ":"))
    return (
        f"{settings.app_name}\n"
        f"Method: {method}\n"
        f"Caller: {caller.lower()}\n"
        f"Nonce: {nonce}\n"
        f"Expires: {expires_at}\n"
        f"Params: {payload}"
    )


def recover_caller(message: str, signature: str) -> str:
    try:
        recovered = Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception as e:
        logger.warning(f"Signature recovery failed: {e}")
        raise InvalidSignature(f"Invalid signature format: {e}") from e
    return normalize_address(recovered)


class NonceRegistry:
    """Single-use nonces per caller, kept in the database until their call expires."""

    def __init__(self, max_ttl_seconds: Optional[int] = None):
        if max_ttl_seconds is None:
            max_ttl_seconds = settings.call_max_ttl_seconds
        self.max_ttl_seconds = max_ttl_seconds

    def check_expiry(self, expires_at: int, now: Optional[datetime] = None) -> datetime:
        """
        Validate a call's unix-seconds expiry against the clock.

        Raises CallExpired once ``expires_at`` has passed, and InvalidInput when
        it lies further ahead than ``max_ttl_seconds``.
        """
        now = now or datetime.now(timezone.utc)
        now_ts = int(now.timestamp())
        if expires_at < now_ts:
            raise CallExpired(f"Call expired at {expires_at}, now {now_ts}")
        if expires_at > now_ts + self.max_ttl_seconds:
            raise InvalidInput(
                f"Call expiry {expires_at} is more than {self.max_ttl_seconds}s ahead"
            )
        return datetime.fromtimestamp(expires_at, tz=timezone.utc)

    async def consume(self, caller: str, nonce: int, expires: datetime) -> None:
        await self.prune()
        try:
            await UsedNonce.create(caller=caller, nonce=str(nonce), expires_at=expires)
        except IntegrityError as e:
            raise NonceAlreadyUsed(f"Nonce {nonce} already used by {caller}") from e

    async def prune(self, now: Optional[datetime] = None) -> int:
        """Delete nonces whose calls have expired. Returns how many were removed."""
        now = now or datetime.now(timezone.utc)
        # check_expiry accepts a call through the whole second it expires in
        removed = await UsedNonce.filter(expires_at__lt=now - timedelta(seconds=1)).delete()
        if removed:
            logger.debug(f"Pruned {removed} expired nonces")
        return removed


async def authenticate_call(
    registry: NonceRegistry,
    method: str,
    caller: str,
    nonce: int,
    expires_at: int,
    params: Dict[str, Any],
    signature: str,
) -> str:
    """Verify a signed call and consume its nonce. Returns the checksummed caller."""
    caller = normalize_address(caller)
    message = build_call_message(method, caller, nonce, expires_at, params)
    recovered = recover_caller(message, signature)
    if recovered != caller:
        logger.warning(f"{method}: signature recovered {recovered}, expected {caller}")
        raise InvalidSignature("Signature does not match caller")
    expires = registry.check_expiry(expires_at)
    await registry.consume(caller, nonce, expires)
    return caller
