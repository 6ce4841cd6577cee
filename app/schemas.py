from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict
from datetime import datetime
from decimal import Decimal
from enum import Enum


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case accepted on input."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def _normalize_sku(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip().upper()
    if not value:
        raise ValueError("sku cannot be blank")
    return value


def _strip_required(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("value cannot be blank")
    return value


# Product Schemas
class ProductBase(CamelModel):
    sku: str = Field(..., min_length=1, max_length=64, description="Product SKU (unique, stored uppercase)")
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    category: str = Field(..., min_length=1, max_length=120, description="Product category")
    description: Optional[str] = Field(None, description="Product description")
    supplier: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    unit_cost: Decimal = Field(..., ge=0, description="Cost per unit")
    reorder_level: int = Field(10, ge=0, description="Low-stock threshold")
    is_active: bool = Field(True, description="Whether the product is active")


class ProductCreate(ProductBase):
    quantity_on_hand: int = Field(0, ge=0, description="Initial quantity on hand")

    @field_validator('sku')
    @classmethod
    def normalize_sku(cls, v):
        return _normalize_sku(v)

    @field_validator('name', 'category')
    @classmethod
    def strip_required(cls, v):
        return _strip_required(v)


class ProductUpdate(CamelModel):
    sku: Optional[str] = Field(None, min_length=1, max_length=64)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = None
    supplier: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    unit_cost: Optional[Decimal] = Field(None, ge=0)
    quantity_on_hand: Optional[int] = Field(None, ge=0)
    reorder_level: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator('sku')
    @classmethod
    def normalize_sku(cls, v):
        return _normalize_sku(v)

    @field_validator('name', 'category')
    @classmethod
    def strip_required(cls, v):
        return _strip_required(v)


class ProductResponse(CamelModel):
    id: int
    sku: str
    name: str
    category: str
    description: Optional[str] = None
    supplier: Optional[str] = None
    location: Optional[str] = None
    quantity_on_hand: int
    unit_cost: float
    reorder_level: int
    is_active: bool
    last_restocked: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_low_stock: bool
    total_value: float


class ProductListResponse(CamelModel):
    items: List[ProductResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class DeactivateResponse(CamelModel):
    message: str
    product: ProductResponse


# Stock mutation requests
class RestockRequest(CamelModel):
    quantity: int = Field(..., ge=1, description="Units received")


class AdjustRequest(CamelModel):
    quantity: int = Field(..., description="Signed change to quantity on hand")
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator('reason')
    @classmethod
    def strip_reason(cls, v):
        return v.strip() if v else v


# Stock policy
class StockStatus(str, Enum):
    CRITICAL = "critical"
    LOW = "low"
    OPTIMAL = "optimal"
    HIGH = "high"
    OVERSTOCK = "overstock"


class StockClassification(CamelModel):
    status: StockStatus
    recommendation: str


class StockAnalysis(CamelModel):
    product_id: int
    sku: str
    name: str
    current_stock: int
    reorder_level: int
    stock_ratio: float
    status: StockStatus
    recommendation: str
    value: float
    category: str


class StockOptimizationSummary(CamelModel):
    total_products: int
    critical: int = 0
    low: int = 0
    optimal: int = 0
    high: int = 0
    overstock: int = 0
    total_inventory_value: float


class StockOptimizationReport(CamelModel):
    analysis: List[StockAnalysis]
    classifications: Dict[int, StockClassification]
    summary: StockOptimizationSummary
    status_groups: Dict[str, List[StockAnalysis]]
    generated_at: datetime


class InventoryMetrics(CamelModel):
    total_items: int
    low_stock_items: int
    total_value: float
    categories_count: int
    total_products: int
    categories: List[str]


# Demand forecast
class ForecastRequest(CamelModel):
    product_ids: List[int] = Field(..., description="Products to forecast")
    forecast_days: int = Field(30, ge=1, le=90, description="Forecast horizon in days")


class ForecastResult(CamelModel):
    product_id: int
    sku: str
    product_name: str
    current_stock: int
    predicted_demand: int
    forecasted_stock: int = Field(..., ge=0)
    recommended_order: int = Field(..., ge=0)
    reorder_level: int
    confidence: float
    forecast_period: str
    category: str


class ForecastSummary(CamelModel):
    total_products: int
    products_needing_reorder: int
    total_recommended_order: int
    average_confidence: float


class ForecastReport(CamelModel):
    forecasts: List[ForecastResult]
    summary: ForecastSummary
    generated_at: datetime
