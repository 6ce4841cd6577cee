"""
Stock health classification and catalog-wide metrics.

Everything here is a pure function of the products passed in: no I/O, no
shared state. Products are read through their attributes, so ORM instances
and any object exposing the same fields both work.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List

from app.exceptions import NoEligibleProductsError
from app.schemas import (
    InventoryMetrics,
    StockAnalysis,
    StockClassification,
    StockOptimizationReport,
    StockOptimizationSummary,
    StockStatus,
)
from app.utils.numbers import round_half_up, round_money

CRITICAL_RATIO = 0.5
LOW_RATIO = 1
HIGH_RATIO = 3
OVERSTOCK_RATIO = 5

RECOMMENDATIONS = {
    StockStatus.CRITICAL: "Immediate reorder required",
    StockStatus.LOW: "Plan reorder soon",
    StockStatus.OPTIMAL: "Stock levels are healthy",
    StockStatus.HIGH: "Stock levels above normal",
    StockStatus.OVERSTOCK: "Consider reducing future orders",
}


def stock_ratio(quantity_on_hand: int, reorder_level: int) -> float:
    """Quantity on hand relative to the reorder level (a level of 0 counts as 1)."""
    return quantity_on_hand / max(reorder_level, 1)


def classify_ratio(ratio: float) -> StockStatus:
    # First match wins; the gap between low and high is optimal.
    if ratio < CRITICAL_RATIO:
        return StockStatus.CRITICAL
    if ratio < LOW_RATIO:
        return StockStatus.LOW
    if ratio > OVERSTOCK_RATIO:
        return StockStatus.OVERSTOCK
    if ratio > HIGH_RATIO:
        return StockStatus.HIGH
    return StockStatus.OPTIMAL


def classify(product) -> StockClassification:
    status = classify_ratio(stock_ratio(product.quantity_on_hand, product.reorder_level))
    return StockClassification(status=status, recommendation=RECOMMENDATIONS[status])


def analyze(product) -> StockAnalysis:
    ratio = stock_ratio(product.quantity_on_hand, product.reorder_level)
    status = classify_ratio(ratio)
    return StockAnalysis(
        product_id=product.id,
        sku=product.sku,
        name=product.name,
        current_stock=product.quantity_on_hand,
        reorder_level=product.reorder_level,
        stock_ratio=round_half_up(ratio, 2),
        status=status,
        recommendation=RECOMMENDATIONS[status],
        value=float(product.total_value),
        category=product.category,
    )


def _active(products: Iterable) -> List:
    return [p for p in products if p.is_active]


def aggregate_metrics(products: Iterable) -> InventoryMetrics:
    """Totals over the active products; categories keep first-seen order."""
    active = _active(products)
    categories = list(dict.fromkeys(p.category for p in active))
    total_value = sum((p.total_value for p in active), Decimal("0"))

    return InventoryMetrics(
        total_items=sum(p.quantity_on_hand for p in active),
        low_stock_items=sum(1 for p in active if p.is_low_stock),
        total_value=float(round_money(total_value)),
        categories_count=len(categories),
        total_products=len(active),
        categories=categories,
    )


def optimize(products: Iterable) -> StockOptimizationReport:
    """
    Classify every active product and group the results by status.

    Raises:
        NoEligibleProductsError: if no active product was supplied.
    """
    active = _active(products)
    if not active:
        raise NoEligibleProductsError()

    analysis = [analyze(p) for p in active]
    status_groups: Dict[str, List[StockAnalysis]] = {status.value: [] for status in StockStatus}
    for row in analysis:
        status_groups[row.status.value].append(row)

    total_value = sum((p.total_value for p in active), Decimal("0"))
    summary = StockOptimizationSummary(
        total_products=len(active),
        total_inventory_value=float(round_money(total_value)),
        **{status: len(rows) for status, rows in status_groups.items()},
    )

    return StockOptimizationReport(
        analysis=analysis,
        classifications={
            row.product_id: StockClassification(status=row.status, recommendation=row.recommendation)
            for row in analysis
        },
        summary=summary,
        status_groups=status_groups,
        generated_at=datetime.now(timezone.utc),
    )
