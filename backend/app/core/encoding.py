"""Address and hash normalization shared by the core and the API."""

from typing import Iterable, List, Union

from eth_utils import decode_hex, is_address, is_hex, to_checksum_address

from app.core.constants import HASH_SIZE, UINT256_MAX
from app.core.errors import InvalidInput


def normalize_address(value: str) -> str:
    """Return the checksum form of an EVM address. Raises InvalidInput."""
    if not isinstance(value, str) or not is_address(value.strip()):
        raise InvalidInput(f"Invalid EVM address: {value!r}")
    return to_checksum_address(value.strip())


def parse_hash(value: Union[str, bytes]) -> bytes:
    """Parse a 32-byte hash given as raw bytes or 0x-hex."""
    if isinstance(value, bytes):
        raw = value
    elif isinstance(value, str) and is_hex(value.strip()):
        raw = decode_hex(value.strip())
    else:
        raise InvalidInput(f"Invalid hash: {value!r}")
    if len(raw) != HASH_SIZE:
        raise InvalidInput(f"Hash must be {HASH_SIZE} bytes, got {len(raw)}")
    return raw


def parse_hashes(values: Iterable[Union[str, bytes]]) -> List[bytes]:
    return [parse_hash(v) for v in values]


def require_uint256(value: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= UINT256_MAX:
        raise InvalidInput(f"{name} must be a uint256, got {value!r}")
    return value
