"""Sale configuration and allowlist commitment singletons."""

from dataclasses import asdict, dataclass

from app.core.config import Settings
from app.core.constants import ZERO_HASH, SaleKind
from app.core.encoding import parse_hash, require_uint256
from app.sale.access import PauseGate
from app.sale.ledger import ClaimLedger


@dataclass
class SaleConfig:
    presale_active: bool = False
    public_sale_active: bool = False
    whitelist_unit_price: int = 0
    public_unit_price: int = 0
    max_supply: int = 0
    max_public_mint_per_address: int = 0
    max_whitelist_mint_per_address: int = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> "SaleConfig":
        return cls(
            presale_active=settings.presale_active,
            public_sale_active=settings.public_sale_active,
            whitelist_unit_price=require_uint256(settings.whitelist_unit_price, "whitelist_unit_price"),
            public_unit_price=require_uint256(settings.public_unit_price, "public_unit_price"),
            max_supply=require_uint256(settings.max_supply, "max_supply"),
            max_public_mint_per_address=require_uint256(
                settings.max_public_mint_per_address, "max_public_mint_per_address"
            ),
            max_whitelist_mint_per_address=require_uint256(
                settings.max_whitelist_mint_per_address, "max_whitelist_mint_per_address"
            ),
        )

    def phase_active(self, kind: SaleKind) -> bool:
        if kind is SaleKind.WHITELIST:
            return self.presale_active
        return self.public_sale_active

    def unit_price(self, kind: SaleKind) -> int:
        if kind is SaleKind.WHITELIST:
            return self.whitelist_unit_price
        return self.public_unit_price

    def per_address_cap(self, kind: SaleKind) -> int:
        if kind is SaleKind.WHITELIST:
            return self.max_whitelist_mint_per_address
        return self.max_public_mint_per_address

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AllowlistCommitment:
    root: bytes = ZERO_HASH

    @classmethod
    def from_settings(cls, settings: Settings) -> "AllowlistCommitment":
        return cls(root=parse_hash(settings.allowlist_root))


@dataclass
class SaleState:
    """Mutable singletons shared by the engine and the admin surface."""
    config: SaleConfig
    commitment: AllowlistCommitment
    claims: ClaimLedger
    treasury_address: str
    pause: PauseGate
