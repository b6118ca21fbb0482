"""
Abstract base classes for the collaborators the sale depends on.

The sale core never talks to a ledger directly. It consumes:
- TokenLedger: issues, owns and burns unique asset ids and keeps the running
  issued total
- Treasury: moves native value to a destination address
- AccessControl: answers "is this caller privileged?"

To run the sale against a different substrate:
1. Create a new module in app/blockchain/chains/
2. Implement the abstract classes defined here
3. Pass the implementations to app.sale.contract.SaleContract
"""

from abc import ABC, abstractmethod
from typing import List


class TokenLedger(ABC):
    """
    Ledger of unique asset ids.

    Ids are issued sequentially. ``total_issued`` is the running total of ids
    ever issued and never decreases, burns included.
    """

    @abstractmethod
    def total_issued(self) -> int:
        """Return the number of ids ever issued."""
        pass

    @abstractmethod
    def total_supply(self) -> int:
        """Return the number of ids currently in existence."""
        pass

    @abstractmethod
    def issue(self, to: str, quantity: int) -> List[int]:
        """Issue ``quantity`` new ids to ``to`` and return them."""
        pass

    @abstractmethod
    def owner_of(self, token_id: int) -> str:
        """Return the owner of ``token_id``. Raises AssetNotFound."""
        pass

    @abstractmethod
    def burn(self, token_id: int) -> None:
        """Destroy ``token_id``. Raises AssetNotFound."""
        pass

    @abstractmethod
    def token_uri(self, token_id: int) -> str:
        """Return the metadata URI of ``token_id``. Raises AssetNotFound."""
        pass

    @abstractmethod
    def set_base_uri(self, base_uri: str) -> None:
        pass


class Treasury(ABC):
    """
    Native value transfer.

    A transfer either completes or raises TransferFailed with no balance
    change. Receiving a transfer may run code at the destination, which is
    allowed to call back into the sale.
    """

    @abstractmethod
    def route(self, payer: str, destination: str, amount: int) -> None:
        """Move ``amount`` attached by ``payer`` to ``destination``."""
        pass

    @abstractmethod
    def balance_of(self, address: str) -> int:
        pass


class AccessControl(ABC):
    """Boolean capability check consumed by the admin surface."""

    @abstractmethod
    def is_privileged(self, caller: str) -> bool:
        pass
