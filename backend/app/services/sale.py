"""
Process-wide sale instance used by the API.

The contract is built lazily from settings on first use. Routers receive it
through FastAPI dependencies so tests can swap in their own instance.
"""

import logging
from typing import Optional

from app.core.config import settings
from app.sale.contract import SaleContract
from app.services.signatures import NonceRegistry

logger = logging.getLogger(__name__)

_sale_contract: Optional[SaleContract] = None
_nonce_registry = NonceRegistry()


def get_sale_contract() -> SaleContract:
    global _sale_contract
    if _sale_contract is None:
        _sale_contract = SaleContract.from_settings(settings)
        logger.info(
            f"Sale initialized: owner={_sale_contract.owner} "
            f"treasury={_sale_contract.treasury_address} "
            f"max_supply={_sale_contract.sale_config.max_supply}"
        )
    return _sale_contract


def get_nonce_registry() -> NonceRegistry:
    return _nonce_registry
