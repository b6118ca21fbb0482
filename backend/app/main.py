import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tortoise.contrib.fastapi import RegisterTortoise

from app.core.config import settings
from app.core.errors import MintGateError
from app.api import health, sale_router
from app.services.sale import get_sale_contract

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    provider = app.dependency_overrides.get(get_sale_contract, get_sale_contract)
    contract = provider()
    logger.info(f"Sale ready: {contract.snapshot()}")
    async with RegisterTortoise(
        app,
        config=settings.tortoise_config,
        generate_schemas=settings.generate_schemas,
        add_exception_handlers=True,
    ):
        yield


app = FastAPI(
    title=settings.app_name,
    description="""
    MintGate Sale API — allowlisted presale and public sale

    This API provides endpoints for:
    - Minting during the presale with a Merkle allowlist proof
    - Minting during the public sale
    - Checking allowlist eligibility and per-address claims
    - Reading the sale configuration and issued tokens
    - Admin calls (phases, prices, caps, root, treasury, admins, pause)

    ## Call Flow

    1. Client builds the call message for the method, caller, nonce and params
    2. The caller's wallet signs it (EIP-191 personal_sign)
    3. Client posts the params, nonce and signature
    4. Backend recovers the signer, runs the call and records a receipt
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MintGateError)
async def mint_gate_error_handler(request: Request, exc: MintGateError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} rejected: {exc.reason}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include routers
app.include_router(health.router)
app.include_router(sale_router.router, prefix=settings.api_v1_prefix)


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "api": f"{settings.api_v1_prefix}/sale",
    }
