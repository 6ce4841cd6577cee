"""
Heuristic demand forecast.

No sales history is stored, so demand is projected from the reorder level
alone: the reorder level is assumed to cover a fixed 30-day cycle. This is a
known simplification and the arithmetic is kept exactly as published to stay
compatible with existing clients.
"""
from datetime import datetime, timezone
from typing import Iterable, List

from app.exceptions import InvalidInputError, NoEligibleProductsError
from app.schemas import ForecastReport, ForecastResult, ForecastSummary
from app.services.stock_policy import stock_ratio
from app.utils.numbers import round_half_up

DEFAULT_HORIZON_DAYS = 30
MIN_HORIZON_DAYS = 1
MAX_HORIZON_DAYS = 90
REFERENCE_CYCLE_DAYS = 30
SAFETY_STOCK_FACTOR = 0.5

DEFAULT_CONFIDENCE = 0.85
LOW_STOCK_CONFIDENCE = 0.70
OVERSTOCK_CONFIDENCE = 0.75
OPTIMAL_CONFIDENCE = 0.92


def validate_horizon(horizon_days) -> int:
    if (
        isinstance(horizon_days, bool)
        or not isinstance(horizon_days, int)
        or not MIN_HORIZON_DAYS <= horizon_days <= MAX_HORIZON_DAYS
    ):
        raise InvalidInputError(
            f"forecastDays must be an integer between {MIN_HORIZON_DAYS} and {MAX_HORIZON_DAYS}",
            field="forecastDays",
        )
    return horizon_days


def confidence_for(ratio: float) -> float:
    confidence = DEFAULT_CONFIDENCE
    if ratio < 0.5:
        confidence = LOW_STOCK_CONFIDENCE
    elif ratio > 3:
        confidence = OVERSTOCK_CONFIDENCE
    elif 1 <= ratio <= 2:
        confidence = OPTIMAL_CONFIDENCE
    return round_half_up(confidence, 2)


def forecast(product, horizon_days: int = DEFAULT_HORIZON_DAYS) -> ForecastResult:
    validate_horizon(horizon_days)

    current_stock = product.quantity_on_hand
    reorder_level = product.reorder_level

    daily_usage = reorder_level / REFERENCE_CYCLE_DAYS
    predicted_demand = round_half_up(daily_usage * horizon_days)
    # Unclamped: a projected shortfall increases the recommended order
    forecasted_stock = current_stock - predicted_demand
    safety_stock = round_half_up(reorder_level * SAFETY_STOCK_FACTOR)

    if forecasted_stock < reorder_level:
        recommended_order = max(0, reorder_level + safety_stock - forecasted_stock)
    else:
        recommended_order = 0

    return ForecastResult(
        product_id=product.id,
        sku=product.sku,
        product_name=product.name,
        current_stock=current_stock,
        predicted_demand=predicted_demand,
        forecasted_stock=max(0, forecasted_stock),
        recommended_order=recommended_order,
        reorder_level=reorder_level,
        confidence=confidence_for(stock_ratio(current_stock, reorder_level)),
        forecast_period=f"{horizon_days} days",
        category=product.category,
    )


def urgency(result: ForecastResult) -> float:
    """Forecasted stock relative to the reorder level; lower is more urgent."""
    return result.forecasted_stock / max(result.reorder_level, 1)


def summarize(forecasts: List[ForecastResult]) -> ForecastSummary:
    return ForecastSummary(
        total_products=len(forecasts),
        products_needing_reorder=sum(1 for f in forecasts if f.recommended_order > 0),
        total_recommended_order=sum(f.recommended_order for f in forecasts),
        average_confidence=round_half_up(
            sum(f.confidence for f in forecasts) / len(forecasts), 2
        ),
    )


def forecast_all(products: Iterable, horizon_days: int = DEFAULT_HORIZON_DAYS) -> ForecastReport:
    """
    Forecast every active product, most urgent first.

    Raises:
        InvalidInputError: if the horizon is outside 1..90 days.
        NoEligibleProductsError: if no active product was supplied.
    """
    validate_horizon(horizon_days)

    eligible = [p for p in products if p.is_active]
    if not eligible:
        raise NoEligibleProductsError()

    # sorted() is stable, so equal urgencies keep input order
    forecasts = sorted((forecast(p, horizon_days) for p in eligible), key=urgency)

    return ForecastReport(
        forecasts=forecasts,
        summary=summarize(forecasts),
        generated_at=datetime.now(timezone.utc),
    )
