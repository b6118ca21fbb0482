import os

# Must be set before app.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
os.environ.setdefault("GENERATE_SCHEMAS", "true")

import pytest
from eth_account import Account

from app.sale.contract import SaleContract
from app.sale.merkle import AllowlistTree
from app.sale.state import AllowlistCommitment, SaleConfig

WHITELIST_PRICE = 10
PUBLIC_PRICE = 20


def _account(n: int):
    return Account.from_key("0x" + f"{n:064x}")


@pytest.fixture
def owner():
    return _account(1)


@pytest.fixture
def admin():
    return _account(2)


@pytest.fixture
def treasury_address():
    return _account(3).address


@pytest.fixture
def members():
    """Allowlisted buyers."""
    return [_account(n) for n in range(10, 15)]


@pytest.fixture
def outsider():
    return _account(99)


@pytest.fixture
def allowlist(members):
    return AllowlistTree.from_addresses(m.address for m in members)


@pytest.fixture
def make_sale(owner, admin, treasury_address, allowlist):
    """Factory for a fresh sale; keyword arguments override SaleConfig fields."""

    def make(**overrides) -> SaleContract:
        fields = dict(
            presale_active=True,
            public_sale_active=False,
            whitelist_unit_price=WHITELIST_PRICE,
            public_unit_price=PUBLIC_PRICE,
            max_supply=100,
            max_public_mint_per_address=10,
            max_whitelist_mint_per_address=5,
        )
        fields.update(overrides)
        return SaleContract(
            config=SaleConfig(**fields),
            commitment=AllowlistCommitment(root=allowlist.root),
            owner=owner.address,
            treasury_address=treasury_address,
            admins=[admin.address],
        )

    return make


@pytest.fixture
def sale(make_sale):
    return make_sale()
