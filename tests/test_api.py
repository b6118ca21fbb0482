import time
from datetime import datetime, timedelta, timezone

import pytest
from eth_account.messages import encode_defunct
from fastapi.testclient import TestClient

from app.main import app
from app.models.sale import UsedNonce
from app.schemas.sale import (
    AdminsRequest,
    BareAdminRequest,
    PublicMintRequest,
    SetPhaseRequest,
    WhitelistMintRequest,
)
from app.services import sale as sale_service
from app.services.sale import get_nonce_registry, get_sale_contract
from app.services.signatures import NonceRegistry, build_call_message

from conftest import PUBLIC_PRICE, WHITELIST_PRICE

PREFIX = "/api/v1/sale"
CALL_TTL = 300


def signed_body(model_cls, account, method, nonce=0, signer=None, expires_at=None, **fields):
    """Build a request body signed by ``signer`` (defaults to the caller)."""
    if expires_at is None:
        expires_at = int(time.time()) + 60
    draft = model_cls(
        caller=account.address, nonce=nonce, expires_at=expires_at, signature="0x", **fields
    )
    message = build_call_message(method, account.address, nonce, expires_at, draft.params())
    signed = (signer or account).sign_message(encode_defunct(text=message))
    return {**draft.model_dump(mode="json"), "signature": signed.signature.hex()}


@pytest.fixture
def nonce_registry():
    return NonceRegistry(max_ttl_seconds=CALL_TTL)


@pytest.fixture
def client(sale, nonce_registry):
    app.dependency_overrides[get_sale_contract] = lambda: sale
    app.dependency_overrides[get_nonce_registry] = lambda: nonce_registry
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _proof_hex(allowlist, account):
    return ["0x" + p.hex() for p in allowlist.proof(account.address)]


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.json()["total_issued"] == 0


def test_config(client, allowlist, treasury_address, owner):
    resp = client.get(f"{PREFIX}/config")
    assert resp.status_code == 200
    data = resp.json()
    assert data["presale_active"] is True
    assert data["public_sale_active"] is False
    assert data["whitelist_unit_price"] == WHITELIST_PRICE
    assert data["allowlist_root"] == "0x" + allowlist.root.hex()
    assert data["treasury_address"] == treasury_address
    assert data["owner"] == owner.address
    assert data["total_issued"] == 0


def test_whitelist_mint_flow(client, sale, allowlist, members, treasury_address):
    buyer = members[0]
    body = signed_body(
        WhitelistMintRequest, buyer, "whitelist_mint",
        quantity=2, value=2 * WHITELIST_PRICE, proof=_proof_hex(allowlist, buyer),
    )
    resp = client.post(f"{PREFIX}/whitelist-mint", json=body)
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["token_ids"] == [1, 2]
    assert data["amount_paid"] == 2 * WHITELIST_PRICE
    assert sale.treasury.balance_of(treasury_address) == 2 * WHITELIST_PRICE

    claims = client.get(f"{PREFIX}/claims/{buyer.address.lower()}").json()
    assert claims == {
        "wallet_address": buyer.address,
        "whitelist_claimed": 2,
        "public_claimed": 0,
    }

    receipts = client.get(f"{PREFIX}/receipts", params={"wallet_address": buyer.address}).json()
    assert receipts["total_count"] == 1
    assert receipts["items"][0]["kind"] == "whitelist"
    assert receipts["items"][0]["first_token_id"] == 1
    assert receipts["items"][0]["last_token_id"] == 2
    assert receipts["items"][0]["amount_paid_wei"] == str(2 * WHITELIST_PRICE)

    token = client.get(f"{PREFIX}/tokens/2").json()
    assert token["owner"] == buyer.address


def test_replayed_call_is_rejected(client, allowlist, members):
    buyer = members[0]
    body = signed_body(
        WhitelistMintRequest, buyer, "whitelist_mint",
        nonce=7, quantity=1, value=WHITELIST_PRICE, proof=_proof_hex(allowlist, buyer),
    )
    assert client.post(f"{PREFIX}/whitelist-mint", json=body).status_code == 200
    resp = client.post(f"{PREFIX}/whitelist-mint", json=body)
    assert resp.status_code == 409
    assert resp.json()["error"] == "NonceAlreadyUsed"


def test_signature_from_someone_else(client, allowlist, members, outsider):
    buyer = members[0]
    body = signed_body(
        WhitelistMintRequest, buyer, "whitelist_mint", signer=outsider,
        quantity=1, value=WHITELIST_PRICE, proof=_proof_hex(allowlist, buyer),
    )
    resp = client.post(f"{PREFIX}/whitelist-mint", json=body)
    assert resp.status_code == 401
    assert resp.json()["error"] == "InvalidSignature"


def test_tampered_params_fail_signature(client, allowlist, members):
    buyer = members[0]
    body = signed_body(
        WhitelistMintRequest, buyer, "whitelist_mint",
        quantity=1, value=WHITELIST_PRICE, proof=_proof_hex(allowlist, buyer),
    )
    body["quantity"] = 5
    resp = client.post(f"{PREFIX}/whitelist-mint", json=body)
    assert resp.status_code == 401


def test_not_eligible(client, allowlist, members, outsider):
    body = signed_body(
        WhitelistMintRequest, outsider, "whitelist_mint",
        quantity=1, value=WHITELIST_PRICE, proof=_proof_hex(allowlist, members[0]),
    )
    resp = client.post(f"{PREFIX}/whitelist-mint", json=body)
    assert resp.status_code == 403
    assert resp.json()["error"] == "NotEligible"


def test_public_mint_while_presale(client, outsider):
    body = signed_body(PublicMintRequest, outsider, "public_mint", quantity=1, value=PUBLIC_PRICE)
    resp = client.post(f"{PREFIX}/public-mint", json=body)
    assert resp.status_code == 409
    assert resp.json() == {"error": "PhaseInactive", "detail": "public sale is not active"}


def test_insufficient_payment(client, sale, owner, outsider):
    sale.switch_to_public_phase(owner.address)
    body = signed_body(PublicMintRequest, outsider, "public_mint", quantity=2, value=PUBLIC_PRICE)
    resp = client.post(f"{PREFIX}/public-mint", json=body)
    assert resp.status_code == 402
    assert resp.json()["error"] == "InsufficientPayment"


def test_switch_to_public_by_owner(client, owner, outsider):
    body = signed_body(BareAdminRequest, owner, "switch_to_public_phase")
    resp = client.post(f"{PREFIX}/admin/switch-to-public", json=body)
    assert resp.status_code == 200, resp.text
    config = resp.json()["config"]
    assert (config["presale_active"], config["public_sale_active"]) == (False, True)

    mint = signed_body(PublicMintRequest, outsider, "public_mint", quantity=1, value=PUBLIC_PRICE)
    assert client.post(f"{PREFIX}/public-mint", json=mint).status_code == 200


def test_admin_call_by_outsider(client, outsider):
    body = signed_body(SetPhaseRequest, outsider, "set_phase", presale=False, public=True)
    resp = client.post(f"{PREFIX}/admin/phase", json=body)
    assert resp.status_code == 403
    assert resp.json()["error"] == "Unauthorized"


def test_signed_for_another_method_is_rejected(client, owner):
    body = signed_body(BareAdminRequest, owner, "unpause")
    resp = client.post(f"{PREFIX}/admin/pause", json=body)
    assert resp.status_code == 401


def test_admins_endpoint(client, sale, owner, outsider):
    body = signed_body(AdminsRequest, owner, "add_admins", addresses=[outsider.address])
    resp = client.post(f"{PREFIX}/admin/admins/add", json=body)
    assert resp.status_code == 200
    assert outsider.address in resp.json()["config"]["admins"]
    assert sale.is_privileged(outsider.address)


def test_pause_blocks_mint(client, allowlist, members, owner):
    assert client.post(
        f"{PREFIX}/admin/pause", json=signed_body(BareAdminRequest, owner, "pause")
    ).status_code == 200

    buyer = members[0]
    body = signed_body(
        WhitelistMintRequest, buyer, "whitelist_mint",
        quantity=1, value=WHITELIST_PRICE, proof=_proof_hex(allowlist, buyer),
    )
    resp = client.post(f"{PREFIX}/whitelist-mint", json=body)
    assert resp.status_code == 423
    assert resp.json()["error"] == "Paused"


def test_eligibility(client, allowlist, members, outsider):
    proof = _proof_hex(allowlist, members[0])
    resp = client.get(
        f"{PREFIX}/eligibility",
        params={"wallet_address": members[0].address, "proof": proof},
    )
    assert resp.status_code == 200
    assert resp.json()["eligible"] is True

    resp = client.get(
        f"{PREFIX}/eligibility",
        params={"wallet_address": outsider.address, "proof": proof},
    )
    assert resp.json()["eligible"] is False


def test_malformed_proof_is_bad_request(client, members):
    resp = client.get(
        f"{PREFIX}/eligibility",
        params={"wallet_address": members[0].address, "proof": ["0x1234"]},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidInput"


def test_unknown_token(client):
    resp = client.get(f"{PREFIX}/tokens/1")
    assert resp.status_code == 404
    assert resp.json()["error"] == "AssetNotFound"


def test_startup_uses_the_overridden_sale(client, sale):
    assert client.get("/health").json()["paused"] is sale.is_paused
    assert sale_service._sale_contract is None


# --- Call expiry and nonce retention ---

async def _stored_nonces():
    return await UsedNonce.all().count()


def test_expired_call_is_rejected(client, allowlist, members):
    buyer = members[0]
    stale = signed_body(
        WhitelistMintRequest, buyer, "whitelist_mint", expires_at=int(time.time()) - 10,
        quantity=1, value=WHITELIST_PRICE, proof=_proof_hex(allowlist, buyer),
    )
    resp = client.post(f"{PREFIX}/whitelist-mint", json=stale)
    assert resp.status_code == 401
    assert resp.json()["error"] == "CallExpired"
    assert client.portal.call(_stored_nonces) == 0

    # The nonce was not spent by the rejected call
    fresh = signed_body(
        WhitelistMintRequest, buyer, "whitelist_mint",
        quantity=1, value=WHITELIST_PRICE, proof=_proof_hex(allowlist, buyer),
    )
    assert client.post(f"{PREFIX}/whitelist-mint", json=fresh).status_code == 200


def test_expiry_beyond_ttl_is_rejected(client, sale, owner, outsider):
    sale.switch_to_public_phase(owner.address)
    body = signed_body(
        PublicMintRequest, outsider, "public_mint", expires_at=int(time.time()) + CALL_TTL + 60,
        quantity=1, value=PUBLIC_PRICE,
    )
    resp = client.post(f"{PREFIX}/public-mint", json=body)
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidInput"
    assert sale.total_issued() == 0


def test_expiry_is_part_of_the_signed_message(client, sale, owner, outsider):
    sale.switch_to_public_phase(owner.address)
    body = signed_body(PublicMintRequest, outsider, "public_mint", quantity=1, value=PUBLIC_PRICE)
    body["expires_at"] += 30
    resp = client.post(f"{PREFIX}/public-mint", json=body)
    assert resp.status_code == 401
    assert resp.json()["error"] == "InvalidSignature"


def test_used_nonces_are_pruned_once_expired(client, nonce_registry, sale, owner, members):
    sale.switch_to_public_phase(owner.address)
    for nonce, buyer in enumerate(members[:3]):
        body = signed_body(
            PublicMintRequest, buyer, "public_mint", nonce=nonce, quantity=1, value=PUBLIC_PRICE,
        )
        assert client.post(f"{PREFIX}/public-mint", json=body).status_code == 200
    assert client.portal.call(_stored_nonces) == 3

    now = datetime.now(timezone.utc)
    assert client.portal.call(nonce_registry.prune, now) == 0

    later = now + timedelta(seconds=CALL_TTL + 5)
    assert client.portal.call(nonce_registry.prune, later) == 3
    assert client.portal.call(_stored_nonces) == 0
