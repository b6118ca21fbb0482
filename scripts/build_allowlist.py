#!/usr/bin/env python3
"""
build_allowlist.py — Build the presale allowlist commitment and proofs.

Reads a CSV with an ``address`` column, builds the Merkle tree the sale
verifies against, and writes the root plus every member's proof as JSON.

Usage:
    python scripts/build_allowlist.py build <addresses.csv> [--out allowlist.json]
    python scripts/build_allowlist.py proof <allowlist.json> <address>
    python scripts/build_allowlist.py verify <allowlist.json> <address>

The root goes into ALLOWLIST_ROOT (or the /admin/allowlist-root call); each
buyer submits their proof with /whitelist-mint.
"""

import argparse
import csv
import json
import sys
from pathlib import Path
from typing import List

from eth_utils import is_address, to_checksum_address

from app.core.encoding import parse_hash, parse_hashes
from app.sale.merkle import AllowlistTree, verify

# ── Colors ─────────────────────────────────────────────────────
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
RED = "\033[0;31m"
CYAN = "\033[0;36m"
NC = "\033[0m"


def log(msg: str) -> None:
    print(f"{CYAN}[allowlist]{NC} {msg}")


def ok(msg: str) -> None:
    print(f"{GREEN}[  ok  ]{NC} {msg}")


def warn(msg: str) -> None:
    print(f"{YELLOW}[ warn ]{NC} {msg}")


def err(msg: str) -> None:
    print(f"{RED}[error ]{NC} {msg}", file=sys.stderr)


def load_addresses(path: Path) -> List[str]:
    """Read the ``address`` column; blank rows are skipped, invalid ones rejected."""
    addresses = []
    with open(path, newline="") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames or "address" not in reader.fieldnames:
            raise ValueError("CSV needs an 'address' header")
        for line_no, row in enumerate(reader, start=2):
            value = (row.get("address") or "").strip()
            if not value:
                continue
            if not is_address(value):
                raise ValueError(f"Line {line_no}: invalid EVM address {value!r}")
            addresses.append(value)
    if not addresses:
        raise ValueError("No addresses in CSV")
    return addresses


def build(csv_path: Path, out_path: Path) -> AllowlistTree:
    addresses = load_addresses(csv_path)
    tree = AllowlistTree.from_addresses(addresses)
    if len(tree) != len(addresses):
        warn(f"{len(addresses) - len(tree)} duplicate address(es) dropped")
    out_path.write_text(json.dumps(tree.to_dict(), indent=2))
    return tree


def load_proof(json_path: Path, address: str) -> List[str]:
    data = json.loads(json_path.read_text())
    proof = data["proofs"].get(to_checksum_address(address))
    if proof is None:
        raise KeyError(f"{address} is not in the allowlist")
    return proof


def cmd_build(args: argparse.Namespace) -> int:
    tree = build(Path(args.csv), Path(args.out))
    ok(f"{len(tree)} addresses")
    log(f"Merkle root: 0x{tree.root.hex()}")
    ok(f"Wrote {args.out}")
    return 0


def cmd_proof(args: argparse.Namespace) -> int:
    try:
        proof = load_proof(Path(args.json), args.address)
    except KeyError as e:
        err(str(e))
        return 1
    print(json.dumps(proof, indent=2))
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    data = json.loads(Path(args.json).read_text())
    try:
        proof = load_proof(Path(args.json), args.address)
    except KeyError as e:
        err(str(e))
        return 1
    if verify(parse_hashes(proof), parse_hash(data["root"]), to_checksum_address(args.address)):
        ok(f"{args.address} verifies against {data['root']}")
        return 0
    err(f"{args.address} does NOT verify against {data['root']}")
    return 1


def main(argv: List[str] = None) -> int:
    parser = argparse.ArgumentParser(description="Build and check the presale allowlist")
    sub = parser.add_subparsers(dest="command", required=True)

    p_build = sub.add_parser("build", help="Build root and proofs from a CSV")
    p_build.add_argument("csv")
    p_build.add_argument("--out", default="allowlist.json")
    p_build.set_defaults(func=cmd_build)

    p_proof = sub.add_parser("proof", help="Print the proof for an address")
    p_proof.add_argument("json")
    p_proof.add_argument("address")
    p_proof.set_defaults(func=cmd_proof)

    p_verify = sub.add_parser("verify", help="Check an address against the stored root")
    p_verify.add_argument("json")
    p_verify.add_argument("address")
    p_verify.set_defaults(func=cmd_verify)

    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except ValueError as e:
        err(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
