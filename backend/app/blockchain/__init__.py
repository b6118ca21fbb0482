from app.blockchain.base import (
    TokenLedger,
    Treasury,
    AccessControl,
)
from app.blockchain.chains.local import LocalTokenLedger, LocalTreasury

__all__ = [
    "TokenLedger",
    "Treasury",
    "AccessControl",
    "LocalTokenLedger",
    "LocalTreasury",
]
