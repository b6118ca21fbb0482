"""
Failure conditions of the sale.

Every condition aborts the whole call with no state change. The ``reason`` is
the human-readable condition name reported to callers; ``status_code`` is the
HTTP status the API maps it to.
"""


class MintGateError(Exception):
    """Base class for caller-facing failures."""

    reason = "MintGateError"
    status_code = 400

    def __init__(self, detail: str = ""):
        self.detail = detail or self.reason
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {"error": self.reason, "detail": self.detail}


class PhaseInactive(MintGateError):
    reason = "PhaseInactive"
    status_code = 409


class NotEligible(MintGateError):
    reason = "NotEligible"
    status_code = 403


class PerAddressCapExceeded(MintGateError):
    reason = "PerAddressCapExceeded"
    status_code = 409


class InsufficientPayment(MintGateError):
    reason = "InsufficientPayment"
    status_code = 402


class SupplyExceeded(MintGateError):
    reason = "SupplyExceeded"
    status_code = 409


class Unauthorized(MintGateError):
    reason = "Unauthorized"
    status_code = 403


class AssetNotFound(MintGateError):
    reason = "AssetNotFound"
    status_code = 404


class NotAssetOwner(MintGateError):
    reason = "NotAssetOwner"
    status_code = 403


class Paused(MintGateError):
    reason = "Paused"
    status_code = 423


class ReentrantCall(MintGateError):
    reason = "ReentrantCall"
    status_code = 409


class TransferFailed(MintGateError):
    reason = "TransferFailed"
    status_code = 502


class InvalidInput(MintGateError):
    reason = "InvalidInput"
    status_code = 400


class InvalidSignature(MintGateError):
    reason = "InvalidSignature"
    status_code = 401


class NonceAlreadyUsed(MintGateError):
    reason = "NonceAlreadyUsed"
    status_code = 409


class CallExpired(MintGateError):
    reason = "CallExpired"
    status_code = 401


class InvariantViolation(RuntimeError):
    """Internal state would break an invariant. Never expected in practice."""
