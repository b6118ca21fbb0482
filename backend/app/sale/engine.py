"""
Issuance engine: whitelist and public mints.

Each mint runs its checks in a fixed order and only mutates state once all of
them pass. Effects then happen in this order:
1. the entire attached value is routed to the treasury
2. the caller's claim counter grows by ``quantity``
3. the token ledger issues ``quantity`` ids to the caller

The treasury transfer may run recipient code that calls back into the
engine; the re-entrancy guard rejects such calls.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from app.blockchain.base import TokenLedger, Treasury
from app.core.constants import SaleKind
from app.core.encoding import normalize_address, require_uint256
from app.core.errors import (
    InsufficientPayment,
    InvalidInput,
    NotEligible,
    PerAddressCapExceeded,
    PhaseInactive,
    ReentrantCall,
    SupplyExceeded,
)
from app.sale import merkle
from app.sale.state import SaleState

logger = logging.getLogger(__name__)


class ReentrancyGuard:
    """Scoped lock: entering while already entered raises ReentrantCall."""

    def __init__(self):
        self._entered = False

    def __enter__(self) -> "ReentrancyGuard":
        if self._entered:
            raise ReentrantCall("Reentrant call")
        self._entered = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._entered = False


@dataclass
class MintResult:
    kind: SaleKind
    caller: str
    quantity: int
    amount_paid: int
    treasury_address: str
    token_ids: List[int] = field(default_factory=list)


class IssuanceEngine:
    def __init__(self, state: SaleState, tokens: TokenLedger, treasury: Treasury):
        self._state = state
        self._tokens = tokens
        self._treasury = treasury
        self._guard = ReentrancyGuard()

    def whitelist_mint(
        self, caller: str, quantity: int, proof: Sequence[bytes], value: int
    ) -> MintResult:
        """Mint during the presale. ``proof`` must place ``caller`` in the allowlist."""
        with self._guard:
            caller = self._precheck(caller, quantity, value)
            self._require_phase(SaleKind.WHITELIST)
            if not merkle.verify(proof, self._state.commitment.root, caller):
                raise NotEligible(f"{caller} is not on the allowlist")
            return self._settle(SaleKind.WHITELIST, caller, quantity, value)

    def public_mint(self, caller: str, quantity: int, value: int) -> MintResult:
        """Mint during the public sale."""
        with self._guard:
            caller = self._precheck(caller, quantity, value)
            self._require_phase(SaleKind.PUBLIC)
            return self._settle(SaleKind.PUBLIC, caller, quantity, value)

    def _precheck(self, caller: str, quantity: int, value: int) -> str:
        self._state.pause.require_not_paused()
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidInput(f"quantity must be a positive integer, got {quantity!r}")
        require_uint256(quantity, "quantity")
        require_uint256(value, "value")
        return normalize_address(caller)

    def _require_phase(self, kind: SaleKind) -> None:
        if not self._state.config.phase_active(kind):
            raise PhaseInactive(f"{kind.value} sale is not active")

    def _settle(self, kind: SaleKind, caller: str, quantity: int, value: int) -> MintResult:
        config = self._state.config
        entry = self._state.claims.get(caller)

        cap = config.per_address_cap(kind)
        if entry.claimed(kind) + quantity > cap:
            raise PerAddressCapExceeded(
                f"{caller} has claimed {entry.claimed(kind)} of {cap} {kind.value} mints"
            )

        required = quantity * config.unit_price(kind)
        if value < required:
            raise InsufficientPayment(f"Sent {value} wei, {required} wei required")

        total_issued = self._tokens.total_issued()
        if total_issued + quantity > config.max_supply:
            raise SupplyExceeded(
                f"{quantity} more would exceed max supply {config.max_supply} ({total_issued} issued)"
            )

        # Overflow must surface before the transfer
        updated = entry.add(kind, quantity)
        treasury_address = self._state.treasury_address

        self._treasury.route(caller, treasury_address, value)
        self._state.claims.upsert(caller, updated)
        token_ids = self._tokens.issue(caller, quantity)

        logger.info(
            f"{kind.value} mint: {caller} minted {quantity} "
            f"(ids {token_ids[0]}-{token_ids[-1]}), paid {value} wei"
        )
        return MintResult(
            kind=kind,
            caller=caller,
            quantity=quantity,
            amount_paid=value,
            treasury_address=treasury_address,
            token_ids=token_ids,
        )
