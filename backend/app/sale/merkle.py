"""
Merkle allowlist: membership proofs for the presale.

Rules (must match the tree the commitment was built from):
- Leaves are keccak256 of the raw 20 address bytes, never the hex string
- Internal nodes are keccak256(min(a, b) + max(a, b)), so a proof carries no
  left/right flags
- An odd node at the end of a level is promoted unchanged to the next level
  and contributes no sibling to proofs
"""

from typing import Dict, Iterable, List, Sequence, Union

from eth_utils import is_address, keccak, to_canonical_address, to_checksum_address

from app.core.constants import HASH_SIZE


def leaf_hash(address: str) -> bytes:
    """keccak256 of the canonical 20-byte form of ``address``."""
    return keccak(to_canonical_address(address))


def hash_pair(a: bytes, b: bytes) -> bytes:
    """Combine two nodes, smaller value first."""
    if b < a:
        a, b = b, a
    return keccak(a + b)


def process_proof(leaf: bytes, proof: Sequence[bytes]) -> bytes:
    """Fold the authentication path into a root candidate."""
    node = leaf
    for sibling in proof:
        node = hash_pair(node, sibling)
    return node


def verify(proof: Sequence[bytes], root: bytes, claimant: str) -> bool:
    """
    Check that ``claimant`` belongs to the set committed to by ``root``.

    Args:
        proof: Sibling hashes from the leaf up to (not including) the root
        root: 32-byte commitment
        claimant: EVM address of the claimed member

    Returns:
        True only if the recomputed root equals ``root`` exactly. Malformed
        input (bad address, non-32-byte hashes, a proof that is not a list
        or tuple) yields False.
    """
    if not isinstance(claimant, str) or not is_address(claimant):
        return False
    if not isinstance(root, bytes) or len(root) != HASH_SIZE:
        return False
    if not isinstance(proof, (list, tuple)):
        return False
    for sibling in proof:
        if not isinstance(sibling, bytes) or len(sibling) != HASH_SIZE:
            return False
    return process_proof(leaf_hash(claimant), proof) == root


class AllowlistTree:
    """
    Merkle tree over a set of addresses.

    Used by operators to publish the commitment and hand out proofs. Leaves
    are sorted so the root depends only on the set, not on input order.

    Example:
        tree = AllowlistTree.from_addresses(["0xabc...", "0xdef..."])
        tree.root          # 32 bytes to publish
        tree.proof(addr)   # list of sibling hashes for ``addr``
    """

    def __init__(self, addresses: List[str], levels: List[List[bytes]]):
        self._addresses = addresses
        self._levels = levels
        self._index: Dict[bytes, int] = {leaf: i for i, leaf in enumerate(levels[0])}

    @classmethod
    def from_addresses(cls, addresses: Iterable[str]) -> "AllowlistTree":
        members = sorted({to_checksum_address(a.strip()) for a in addresses})
        if not members:
            raise ValueError("Cannot build an allowlist tree from an empty address set")

        leaves = sorted(leaf_hash(a) for a in members)
        levels = [leaves]
        current = leaves
        while len(current) > 1:
            nxt = []
            for i in range(0, len(current), 2):
                if i + 1 < len(current):
                    nxt.append(hash_pair(current[i], current[i + 1]))
                else:
                    nxt.append(current[i])
            levels.append(nxt)
            current = nxt
        return cls(members, levels)

    @property
    def root(self) -> bytes:
        return self._levels[-1][0]

    def __len__(self) -> int:
        return len(self._addresses)

    def __contains__(self, address: object) -> bool:
        return (
            isinstance(address, str)
            and is_address(address)
            and leaf_hash(address) in self._index
        )

    def proof(self, address: str) -> List[bytes]:
        """Return the authentication path for ``address``. Raises KeyError for non-members."""
        leaf = leaf_hash(address) if is_address(address) else None
        if leaf not in self._index:
            raise KeyError(f"{address} is not in the allowlist")

        proof = []
        pos = self._index[leaf]
        for level in self._levels[:-1]:
            sibling = pos ^ 1
            if sibling < len(level):
                proof.append(level[sibling])
            pos //= 2
        return proof

    def to_dict(self) -> Dict[str, Union[str, Dict[str, List[str]]]]:
        """JSON-ready form: root plus per-address hex proofs."""
        return {
            "root": "0x" + self.root.hex(),
            "proofs": {
                a: ["0x" + p.hex() for p in self.proof(a)] for a in self._addresses
            },
        }
