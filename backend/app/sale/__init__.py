from app.sale.contract import SaleContract
from app.sale.engine import IssuanceEngine, MintResult
from app.sale.merkle import AllowlistTree, verify
from app.sale.state import AllowlistCommitment, SaleConfig

__all__ = [
    "SaleContract",
    "IssuanceEngine",
    "MintResult",
    "AllowlistTree",
    "verify",
    "AllowlistCommitment",
    "SaleConfig",
]
