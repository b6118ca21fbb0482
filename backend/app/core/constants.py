from enum import Enum

# uint256 bounds (must match the on-chain arithmetic the sale mirrors)
UINT256_MAX = 2**256 - 1

HASH_SIZE = 32
ZERO_HASH = b"\x00" * HASH_SIZE

# Token ids are assigned sequentially starting here
FIRST_TOKEN_ID = 1


class SaleKind(str, Enum):
    """Buyer classes, each with its own phase flag, price and cap."""
    WHITELIST = "whitelist"
    PUBLIC = "public"
