"""
Per-address claim counters.

Entries are created on the first successful claim and never removed. Counters
only grow; arithmetic is checked against the uint256 range.
"""

from dataclasses import dataclass, replace
from typing import Dict

from app.core.constants import UINT256_MAX, SaleKind
from app.core.errors import InvariantViolation


def checked_add(a: int, b: int) -> int:
    total = a + b
    if total > UINT256_MAX:
        raise InvariantViolation(f"uint256 overflow: {a} + {b}")
    return total


@dataclass(frozen=True, slots=True)
class ClaimEntry:
    whitelist_claimed: int = 0
    public_claimed: int = 0

    def claimed(self, kind: SaleKind) -> int:
        if kind is SaleKind.WHITELIST:
            return self.whitelist_claimed
        return self.public_claimed

    def add(self, kind: SaleKind, quantity: int) -> "ClaimEntry":
        """Return a new entry with ``quantity`` more claims of ``kind``."""
        if kind is SaleKind.WHITELIST:
            return replace(self, whitelist_claimed=checked_add(self.whitelist_claimed, quantity))
        return replace(self, public_claimed=checked_add(self.public_claimed, quantity))


class ClaimLedger:
    """Keyed store of ClaimEntry by checksummed address."""

    def __init__(self):
        self._entries: Dict[str, ClaimEntry] = {}

    def get(self, address: str) -> ClaimEntry:
        return self._entries.get(address, ClaimEntry())

    def upsert(self, address: str, entry: ClaimEntry) -> None:
        current = self.get(address)
        if (
            entry.whitelist_claimed < current.whitelist_claimed
            or entry.public_claimed < current.public_claimed
        ):
            raise InvariantViolation(f"claim counters for {address} would decrease")
        self._entries[address] = entry

    def __contains__(self, address: object) -> bool:
        return address in self._entries

    def __len__(self) -> int:
        return len(self._entries)
