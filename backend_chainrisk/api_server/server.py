"""
FastAPI server: on-demand address risk analysis.

GET /api/analyze runs the full pipeline for one address (chain detected or
given), GET /api/chains lists supported chains, GET /health is a liveness
check. Input errors map to 400; any upstream failure maps to a generic 500
whose cause is logged, never returned.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from backend_chainrisk import __version__
from backend_chainrisk.analytics.analysis_pipeline import AnalysisPipeline, build_pipeline
from backend_chainrisk.chains.models import CHAIN_INFO
from backend_chainrisk.chainrisk_logging import get_logger, short_address
from backend_chainrisk.config.settings import get_settings
from backend_chainrisk.core.exceptions import AnalysisFailedError, InputError

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Dependency
# -----------------------------------------------------------------------------

@lru_cache(maxsize=1)
def get_pipeline() -> AnalysisPipeline:
    """Dependency: one pipeline per process (adapters hold no per-request state)."""
    return build_pipeline(get_settings())


# -----------------------------------------------------------------------------
# Response models
# -----------------------------------------------------------------------------

class RiskAssessmentResponse(BaseModel):
    score: int = Field(..., ge=0, le=100, description="Clamped score (0-100)")
    level: str = Field(..., description="Categorical level derived from score")
    factors: list[str] = Field(default_factory=list, description="Triggered rules, in evaluation order")


class PatternStatisticsResponse(BaseModel):
    velocity: float = Field(..., description="Mean hours between consecutive transactions")
    uniqueRecipients: int
    uniqueSenders: int
    roundNumberRatio: float = Field(..., ge=0, le=1)
    avgTransactionValue: str
    totalVolume: str


class TransactionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hash: str
    from_: str = Field(..., alias="from")
    to: str
    value: str = Field(..., description="Native-unit decimal string")
    timestamp: int = Field(..., description="Unix seconds")
    chain: str
    fee: str | None = None
    status: str


class KnownInteractionsResponse(BaseModel):
    exchanges: list[str] = Field(default_factory=list)
    mixers: list[str] = Field(default_factory=list)
    defi: list[str] = Field(default_factory=list)


class AnalysisResponse(BaseModel):
    """GET /api/analyze response: both assessments plus the data they were computed from."""

    address: str
    chain: str
    chainName: str
    currency: str
    balance: str = Field(..., description="Native-unit decimal string")
    transactionCount: int = Field(..., description="Size of the analyzed transaction sample")
    investigatorRisk: RiskAssessmentResponse
    userSafety: RiskAssessmentResponse
    patterns: PatternStatisticsResponse
    knownInteractions: KnownInteractionsResponse
    transactions: list[TransactionResponse] = Field(default_factory=list)


class ChainResponse(BaseModel):
    chain: str
    name: str
    currency: str
    explorerUrlTemplate: str


# -----------------------------------------------------------------------------
# App
# -----------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("api_started", version=__version__)
    yield
    logger.info("api_stopped")


app = FastAPI(
    title="ChainRisk API",
    description="Multi-chain address risk analysis: investigator risk and user safety scores.",
    version=__version__,
    lifespan=lifespan,
)


@app.get(
    "/api/analyze",
    response_model=AnalysisResponse,
    response_model_exclude_none=True,
)
def analyze(
    address: str = Query("", description="Address to analyze"),
    chain: str | None = Query(None, description="Chain override (ethereum, bitcoin, solana, worldcoin, okx, bnb)"),
    pipeline: AnalysisPipeline = Depends(get_pipeline),
) -> AnalysisResponse:
    """
    Analyze one address. The chain is detected from the address shape unless
    `chain` is given. Returns 400 for bad input, 500 when chain data could not
    be fetched.
    """
    logger.info("analyze_called", address=short_address(address.strip()), chain=chain)
    try:
        result = pipeline.analyze(address, chain)
    except InputError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except AnalysisFailedError as e:
        raise HTTPException(status_code=500, detail=e.message)
    return AnalysisResponse.model_validate(result.to_dict())


@app.get("/api/chains", response_model=list[ChainResponse])
def list_chains() -> list[ChainResponse]:
    """Supported chains with display name, currency and explorer URL template."""
    return [
        ChainResponse(
            chain=kind.value,
            name=info.name,
            currency=info.currency,
            explorerUrlTemplate=info.explorer_url_template,
        )
        for kind, info in CHAIN_INFO.items()
    ]


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness check: API is up."""
    return {"status": "ok"}


@app.exception_handler(HTTPException)
def http_exception_handler(request: Any, exc: HTTPException) -> JSONResponse:
    """Consistent JSON error response for HTTPException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )
