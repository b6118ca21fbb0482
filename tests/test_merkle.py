import pytest
from eth_utils import keccak

from app.sale.merkle import AllowlistTree, hash_pair, leaf_hash, verify


def _flip_bit(value: bytes, bit: int) -> bytes:
    raw = bytearray(value)
    raw[bit // 8] ^= 1 << (bit % 8)
    return bytes(raw)


def test_every_member_verifies(allowlist, members):
    for member in members:
        assert verify(allowlist.proof(member.address), allowlist.root, member.address)


def test_non_member_fails_with_any_member_proof(allowlist, members, outsider):
    for member in members:
        assert not verify(allowlist.proof(member.address), allowlist.root, outsider.address)
    assert not verify([], allowlist.root, outsider.address)


def test_member_fails_with_another_members_proof(allowlist, members):
    first, second = members[0], members[1]
    if allowlist.proof(first.address) != allowlist.proof(second.address):
        assert not verify(allowlist.proof(second.address), allowlist.root, first.address)


@pytest.mark.parametrize("bit", [0, 7, 100, 255])
def test_single_bit_tamper_in_path_fails(allowlist, members, bit):
    member = members[0]
    proof = allowlist.proof(member.address)
    assert proof
    for i in range(len(proof)):
        tampered = list(proof)
        tampered[i] = _flip_bit(proof[i], bit)
        assert not verify(tampered, allowlist.root, member.address)


@pytest.mark.parametrize("bit", [0, 31, 128, 255])
def test_single_bit_tamper_in_root_fails(allowlist, members, bit):
    member = members[0]
    tampered_root = _flip_bit(allowlist.root, bit)
    assert not verify(allowlist.proof(member.address), tampered_root, member.address)


def test_leaf_uses_raw_address_bytes(members):
    address = members[0].address
    assert leaf_hash(address) == keccak(bytes.fromhex(address[2:]))
    assert leaf_hash(address) != keccak(text=address)


def test_pairs_are_order_independent():
    a, b = keccak(b"a"), keccak(b"b")
    assert hash_pair(a, b) == hash_pair(b, a)
    assert hash_pair(a, b) == keccak(min(a, b) + max(a, b))


def test_root_ignores_input_order_and_duplicates(members):
    addresses = [m.address for m in members]
    forward = AllowlistTree.from_addresses(addresses)
    backward = AllowlistTree.from_addresses(list(reversed(addresses)) + [addresses[0].lower()])
    assert forward.root == backward.root
    assert len(backward) == len(addresses)


def test_single_member_tree_root_is_the_leaf(members):
    tree = AllowlistTree.from_addresses([members[0].address])
    assert tree.root == leaf_hash(members[0].address)
    assert tree.proof(members[0].address) == []
    assert verify([], tree.root, members[0].address)


@pytest.mark.parametrize("size", [2, 3, 5, 7, 8])
def test_odd_and_even_sizes_verify(size):
    addresses = ["0x" + f"{n:040x}" for n in range(1, size + 1)]
    tree = AllowlistTree.from_addresses(addresses)
    for address in addresses:
        assert verify(tree.proof(address), tree.root, address)


def test_claimant_case_does_not_matter(allowlist, members):
    address = members[2].address
    proof = allowlist.proof(address)
    assert verify(proof, allowlist.root, address.lower())


def test_malformed_input_is_rejected_not_matched(allowlist, members):
    member = members[0]
    proof = allowlist.proof(member.address)
    assert not verify(proof + [b"\x00" * 31], allowlist.root, member.address)
    assert not verify(proof, allowlist.root[:31], member.address)
    assert not verify(proof, allowlist.root, "not-an-address")
    assert not verify(proof, allowlist.root, member.address[:-2])
    assert not verify(None, allowlist.root, member.address)
    assert not verify(proof[0], allowlist.root, member.address)


def test_proof_for_non_member_raises(allowlist, outsider):
    with pytest.raises(KeyError):
        allowlist.proof(outsider.address)
    assert outsider.address not in allowlist


def test_empty_allowlist_rejected():
    with pytest.raises(ValueError):
        AllowlistTree.from_addresses([])


def test_to_dict_round_trips_through_hex(allowlist, members):
    data = allowlist.to_dict()
    assert data["root"] == "0x" + allowlist.root.hex()
    proof = [bytes.fromhex(p[2:]) for p in data["proofs"][members[1].address]]
    assert verify(proof, allowlist.root, members[1].address)
