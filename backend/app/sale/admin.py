"""
Capability-gated mutation surface.

Every method takes the caller first and fails with Unauthorized unless the
caller is the owner or an admin. Arguments are validated before anything
changes.
"""

import logging
from typing import Iterable, List

from app.blockchain.base import TokenLedger
from app.core.constants import SaleKind
from app.core.encoding import normalize_address, parse_hash, require_uint256
from app.core.errors import InvalidInput, NotAssetOwner
from app.sale.access import OwnerOrAdmin
from app.sale.state import SaleState

logger = logging.getLogger(__name__)


def _kind(kind) -> SaleKind:
    try:
        return SaleKind(kind)
    except ValueError:
        raise InvalidInput(f"Unknown sale kind: {kind!r}") from None


class AdminController:
    def __init__(self, state: SaleState, access: OwnerOrAdmin, tokens: TokenLedger):
        self._state = state
        self._access = access
        self._tokens = tokens

    def set_allowlist_root(self, caller: str, root) -> None:
        self._access.require_privileged(caller)
        self._state.commitment.root = parse_hash(root)
        logger.info(f"Allowlist root set to 0x{self._state.commitment.root.hex()} by {caller}")

    def set_treasury(self, caller: str, address: str) -> None:
        self._access.require_privileged(caller)
        self._state.treasury_address = normalize_address(address)
        logger.info(f"Treasury set to {self._state.treasury_address} by {caller}")

    def set_unit_price(self, caller: str, kind, amount: int) -> None:
        self._access.require_privileged(caller)
        kind = _kind(kind)
        amount = require_uint256(amount, "amount")
        if kind is SaleKind.WHITELIST:
            self._state.config.whitelist_unit_price = amount
        else:
            self._state.config.public_unit_price = amount
        logger.info(f"{kind.value} unit price set to {amount} wei by {caller}")

    def set_max_supply(self, caller: str, max_supply: int) -> None:
        self._access.require_privileged(caller)
        self._state.config.max_supply = require_uint256(max_supply, "max_supply")
        logger.info(f"Max supply set to {max_supply} by {caller}")

    def set_per_address_cap(self, caller: str, kind, cap: int) -> None:
        self._access.require_privileged(caller)
        kind = _kind(kind)
        cap = require_uint256(cap, "cap")
        if kind is SaleKind.WHITELIST:
            self._state.config.max_whitelist_mint_per_address = cap
        else:
            self._state.config.max_public_mint_per_address = cap
        logger.info(f"{kind.value} per-address cap set to {cap} by {caller}")

    def set_phase(self, caller: str, presale: bool, public: bool) -> None:
        self._access.require_privileged(caller)
        self._state.config.presale_active = bool(presale)
        self._state.config.public_sale_active = bool(public)
        logger.info(f"Phase set to presale={presale} public={public} by {caller}")

    def set_presale(self, caller: str, active: bool) -> None:
        """Toggle the presale flag only; the public flag is left as is."""
        self._access.require_privileged(caller)
        self._state.config.presale_active = bool(active)
        logger.info(f"Presale set to {active} by {caller}")

    def activate_presale(self, caller: str) -> None:
        self.set_presale(caller, True)

    def switch_to_public_phase(self, caller: str) -> None:
        """Close the presale and open the public sale in one step."""
        self._access.require_privileged(caller)
        config = self._state.config
        config.presale_active, config.public_sale_active = False, True
        logger.info(f"Switched to public phase by {caller}")

    def add_admins(self, caller: str, addresses: Iterable[str]) -> List[str]:
        self._access.require_privileged(caller)
        normalized = [normalize_address(a) for a in addresses]
        self._access.add(normalized)
        logger.info(f"Admins added by {caller}: {normalized}")
        return normalized

    def remove_admins(self, caller: str, addresses: Iterable[str]) -> List[str]:
        self._access.require_privileged(caller)
        normalized = [normalize_address(a) for a in addresses]
        self._access.remove(normalized)
        logger.info(f"Admins removed by {caller}: {normalized}")
        return normalized

    def pause(self, caller: str) -> None:
        self._access.require_privileged(caller)
        self._state.pause.paused = True
        logger.info(f"Sale paused by {caller}")

    def unpause(self, caller: str) -> None:
        self._access.require_privileged(caller)
        self._state.pause.paused = False
        logger.info(f"Sale unpaused by {caller}")

    def set_base_uri(self, caller: str, base_uri: str) -> None:
        self._access.require_privileged(caller)
        if not isinstance(base_uri, str):
            raise InvalidInput("base_uri must be a string")
        self._tokens.set_base_uri(base_uri)
        logger.info(f"Base URI set to {base_uri!r} by {caller}")

    def burn(self, caller: str, token_id: int) -> None:
        # Capability and ownership are both required
        self._access.require_privileged(caller)
        owner = self._tokens.owner_of(token_id)
        if owner != caller:
            raise NotAssetOwner(f"{caller} does not own token {token_id}")
        self._tokens.burn(token_id)
        logger.info(f"Token {token_id} burned by {caller}")
