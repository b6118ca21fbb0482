"""
Sale contract facade.

Wires the engine, the admin surface and the collaborators together, and plays
the role of the execution substrate: every public call holds one process-wide
lock, so calls are serialized and each runs to completion before the next
starts. The lock is re-entrant so that a call made from inside fund routing
reaches the engine's own guard, which rejects it.
"""

import threading
from functools import wraps
from typing import Any, Dict, Iterable, Optional, Sequence

from app.blockchain.base import TokenLedger, Treasury
from app.blockchain.chains.local import LocalTokenLedger, LocalTreasury
from app.core.config import Settings
from app.core.encoding import normalize_address
from app.sale import merkle
from app.sale.access import OwnerOrAdmin, PauseGate
from app.sale.admin import AdminController
from app.sale.engine import IssuanceEngine, MintResult
from app.sale.ledger import ClaimEntry, ClaimLedger
from app.sale.state import AllowlistCommitment, SaleConfig, SaleState


def _serialized(method):
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._substrate:
            return method(self, *args, **kwargs)

    return wrapper


def _admin_call(name: str):
    """Forward to AdminController.<name> with a normalized caller."""

    def call(self, caller: str, *args, **kwargs):
        with self._substrate:
            return getattr(self._admin, name)(normalize_address(caller), *args, **kwargs)

    call.__name__ = name
    call.__doc__ = getattr(AdminController, name).__doc__
    return call


class SaleContract:
    def __init__(
        self,
        config: SaleConfig,
        commitment: AllowlistCommitment,
        owner: str,
        treasury_address: str,
        admins: Iterable[str] = (),
        tokens: Optional[TokenLedger] = None,
        treasury: Optional[Treasury] = None,
        paused: bool = False,
    ):
        self._substrate = threading.RLock()
        self.tokens = tokens if tokens is not None else LocalTokenLedger()
        self.treasury = treasury if treasury is not None else LocalTreasury()
        self.access = OwnerOrAdmin(
            normalize_address(owner), [normalize_address(a) for a in admins]
        )
        self.state = SaleState(
            config=config,
            commitment=commitment,
            claims=ClaimLedger(),
            treasury_address=normalize_address(treasury_address),
            pause=PauseGate(paused),
        )
        self._engine = IssuanceEngine(self.state, self.tokens, self.treasury)
        self._admin = AdminController(self.state, self.access, self.tokens)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SaleContract":
        return cls(
            config=SaleConfig.from_settings(settings),
            commitment=AllowlistCommitment.from_settings(settings),
            owner=settings.owner_address,
            treasury_address=settings.treasury_address,
            admins=settings.admin_addresses_list,
            tokens=LocalTokenLedger(base_uri=settings.base_uri),
        )

    # --- Mints ---

    @_serialized
    def whitelist_mint(
        self, caller: str, quantity: int, proof: Sequence[bytes], value: int
    ) -> MintResult:
        return self._engine.whitelist_mint(caller, quantity, proof, value)

    @_serialized
    def public_mint(self, caller: str, quantity: int, value: int) -> MintResult:
        return self._engine.public_mint(caller, quantity, value)

    # --- Admin surface ---

    set_allowlist_root = _admin_call("set_allowlist_root")
    set_treasury = _admin_call("set_treasury")
    set_unit_price = _admin_call("set_unit_price")
    set_max_supply = _admin_call("set_max_supply")
    set_per_address_cap = _admin_call("set_per_address_cap")
    set_phase = _admin_call("set_phase")
    set_presale = _admin_call("set_presale")
    activate_presale = _admin_call("activate_presale")
    switch_to_public_phase = _admin_call("switch_to_public_phase")
    add_admins = _admin_call("add_admins")
    remove_admins = _admin_call("remove_admins")
    pause = _admin_call("pause")
    unpause = _admin_call("unpause")
    set_base_uri = _admin_call("set_base_uri")
    burn = _admin_call("burn")

    # --- Published state ---

    def is_eligible(self, proof: Sequence[bytes], address: str) -> bool:
        """Check allowlist membership against the current root. Phase and pause do not matter."""
        return merkle.verify(proof, self.state.commitment.root, address)

    @property
    def sale_config(self) -> SaleConfig:
        with self._substrate:
            return SaleConfig(**self.state.config.to_dict())

    @property
    def allowlist_root(self) -> bytes:
        return self.state.commitment.root

    @property
    def treasury_address(self) -> str:
        return self.state.treasury_address

    @property
    def is_paused(self) -> bool:
        return self.state.pause.paused

    @property
    def owner(self) -> str:
        return self.access.owner

    def is_privileged(self, address: str) -> bool:
        return self.access.is_privileged(normalize_address(address))

    def claims(self, address: str) -> ClaimEntry:
        return self.state.claims.get(normalize_address(address))

    def total_issued(self) -> int:
        return self.tokens.total_issued()

    def total_supply(self) -> int:
        return self.tokens.total_supply()

    def owner_of(self, token_id: int) -> str:
        return self.tokens.owner_of(token_id)

    def token_uri(self, token_id: int) -> str:
        return self.tokens.token_uri(token_id)

    @_serialized
    def snapshot(self) -> Dict[str, Any]:
        """Consistent view of everything published, for the config endpoint."""
        return {
            **self.state.config.to_dict(),
            "allowlist_root": "0x" + self.state.commitment.root.hex(),
            "treasury_address": self.state.treasury_address,
            "paused": self.state.pause.paused,
            "owner": self.access.owner,
            "admins": self.access.admins,
            "total_issued": self.tokens.total_issued(),
            "total_supply": self.tokens.total_supply(),
        }
