"""
In-process substrate implementation.

Keeps token ownership and native balances in memory. This is what the API
runs against by default and what the tests exercise. Contract-like
recipients are modelled with receive hooks: a callable registered for an
address runs whenever value is routed to it and may call back into the sale.
"""

import logging
from typing import Callable, Dict, List, Optional

from app.blockchain.base import TokenLedger, Treasury
from app.core.constants import FIRST_TOKEN_ID
from app.core.errors import AssetNotFound, InvalidInput, TransferFailed

logger = logging.getLogger(__name__)

ReceiveHook = Callable[[str, int], None]


class LocalTokenLedger(TokenLedger):
    """Sequential-id token ledger held in memory."""

    def __init__(self, base_uri: str = ""):
        self._owners: Dict[int, str] = {}
        self._next_id = FIRST_TOKEN_ID
        self._burned = 0
        self._base_uri = base_uri

    def total_issued(self) -> int:
        return self._next_id - FIRST_TOKEN_ID

    def total_supply(self) -> int:
        return self.total_issued() - self._burned

    def issue(self, to: str, quantity: int) -> List[int]:
        if quantity <= 0:
            raise InvalidInput("quantity must be positive")
        ids = list(range(self._next_id, self._next_id + quantity))
        for token_id in ids:
            self._owners[token_id] = to
        self._next_id += quantity
        return ids

    def owner_of(self, token_id: int) -> str:
        owner = self._owners.get(token_id)
        if owner is None:
            raise AssetNotFound(f"Token {token_id} does not exist")
        return owner

    def burn(self, token_id: int) -> None:
        if token_id not in self._owners:
            raise AssetNotFound(f"Token {token_id} does not exist")
        del self._owners[token_id]
        self._burned += 1

    def token_uri(self, token_id: int) -> str:
        if token_id not in self._owners:
            raise AssetNotFound(f"URI query for nonexistent token {token_id}")
        if not self._base_uri:
            return ""
        return f"{self._base_uri}{token_id}"

    def set_base_uri(self, base_uri: str) -> None:
        self._base_uri = base_uri


class LocalTreasury(Treasury):
    """Native balances held in memory, with optional receive hooks."""

    def __init__(self):
        self._balances: Dict[str, int] = {}
        self._hooks: Dict[str, ReceiveHook] = {}

    def register_receiver(self, address: str, hook: Optional[ReceiveHook]) -> None:
        """Attach (or with None, detach) code that runs when ``address`` receives value."""
        if hook is None:
            self._hooks.pop(address, None)
        else:
            self._hooks[address] = hook

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def route(self, payer: str, destination: str, amount: int) -> None:
        if amount < 0:
            raise InvalidInput("amount must be non-negative")

        previous = self._balances.get(destination, 0)
        self._balances[destination] = previous + amount

        hook = self._hooks.get(destination)
        if hook is None:
            return

        try:
            hook(payer, amount)
        except Exception as e:
            # The recipient rejected the value: undo the credit
            self._balances[destination] = previous
            logger.warning(f"Transfer of {amount} wei to {destination} reverted: {e}")
            raise TransferFailed(f"Transfer to {destination} failed") from e
