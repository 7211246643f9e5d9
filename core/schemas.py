"""
Data Schemas

Pydantic models shared by the fetcher, the store, the query service and the
HTTP layer.

Models:
    - PriceSample: one successful upstream reading, already converted to Rial
    - CachedPrice: the persisted cache row (keyed by symbol)
    - LatestPrice: the read-path answer, including the computed stale flag
    - HealthResponse / ErrorResponse: fixed HTTP bodies

Prices are always integers in the minor currency unit (Rial).
"""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field, field_validator, ConfigDict


# ============================================
# Upstream Sample
# ============================================

class PriceSample(BaseModel):
    """
    A single validated reading returned by the upstream fetcher.

    Attributes:
        name: Display label (may be Persian script)
        price_minor_units: Price in Rial (upstream Toman * 10)
        fetched_at: UTC time the value was retrieved
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Display label")
    price_minor_units: int = Field(..., gt=0, description="Price in Rial")
    fetched_at: datetime = Field(..., description="Retrieval time (UTC)")

    @field_validator('fetched_at')
    @classmethod
    def validate_fetched_at(cls, v: datetime) -> datetime:
        """Reject naive datetimes"""
        if v.tzinfo is None or v.utcoffset() is None:
            raise ValueError("fetched_at must be timezone-aware")
        return v


# ============================================
# Persisted Row
# ============================================

class CachedPrice(PriceSample):
    """
    The single cached row, keyed by a fixed symbol.

    Example:
        {
            "symbol": "gold_18k",
            "name": "طلای 18 عیار",
            "price_minor_units": 42500000,
            "fetched_at": "2026-01-01T12:00:00Z"
        }
    """

    symbol: str = Field(..., min_length=1, description="Cache key")

    @classmethod
    def from_sample(cls, symbol: str, sample: PriceSample) -> "CachedPrice":
        return cls(symbol=symbol, **sample.model_dump())


# ============================================
# HTTP Bodies
# ============================================

class LatestPrice(BaseModel):
    """
    Response body of GET /api/gold/18k.

    Field names on the wire are fixed: name, price, fetchedAt, stale.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    price: int = Field(..., description="Price in Rial")
    fetched_at: str = Field(..., alias="fetchedAt", description="RFC3339 UTC timestamp")
    stale: bool = Field(..., description="True when older than the staleness threshold")


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"


class ErrorResponse(BaseModel):
    error: str
