"""
Tortoise ORM models for the sale audit trail.

These models record:
- Successful mints (one row per mint call)
- Admin calls that changed the sale
- Nonces of signed calls, until the calls expire

The in-process sale state is the source of truth; these rows are history.
"""

from tortoise import fields, models

from app.core.constants import SaleKind


class MintReceipt(models.Model):
    """One successful whitelist or public mint."""
    id = fields.UUIDField(pk=True)

    kind = fields.CharEnumField(SaleKind, max_length=20, index=True)
    wallet_address = fields.CharField(max_length=42, index=True)

    quantity = fields.IntField()
    first_token_id = fields.BigIntField()
    last_token_id = fields.BigIntField()

    # Wei amounts can exceed BigInt range; stored as decimal strings
    amount_paid_wei = fields.CharField(max_length=78)
    treasury_address = fields.CharField(max_length=42)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "mint_receipts"
        indexes = [
            ("kind", "wallet_address"),
        ]


class AdminAction(models.Model):
    id = fields.UUIDField(pk=True)
    caller = fields.CharField(max_length=42, index=True)
    action = fields.CharField(max_length=64)
    params = fields.JSONField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "admin_actions"


class UsedNonce(models.Model):
    """A consumed signed-call nonce. Rows past ``expires_at`` are pruned."""
    id = fields.IntField(pk=True)
    caller = fields.CharField(max_length=42)
    # uint256 nonces exceed BigInt range
    nonce = fields.CharField(max_length=78)
    expires_at = fields.DatetimeField(index=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "used_nonces"
        unique_together = (("caller", "nonce"),)
