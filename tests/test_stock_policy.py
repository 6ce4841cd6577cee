from decimal import Decimal

import pytest

from app.exceptions import NoEligibleProductsError
from app.schemas import StockStatus
from app.services import stock_policy
from tests.conftest import make_product


@pytest.mark.parametrize(
    "quantity, expected",
    [
        (0, StockStatus.CRITICAL),
        (49, StockStatus.CRITICAL),
        (50, StockStatus.LOW),
        (99, StockStatus.LOW),
        (100, StockStatus.OPTIMAL),
        (300, StockStatus.OPTIMAL),
        (301, StockStatus.HIGH),
        (500, StockStatus.HIGH),
        (501, StockStatus.OVERSTOCK),
    ],
)
def test_classify_boundaries(quantity, expected):
    product = make_product(quantity_on_hand=quantity, reorder_level=100)

    assert stock_policy.classify(product).status == expected


def test_classify_recommendation_text():
    result = stock_policy.classify(make_product(quantity_on_hand=1, reorder_level=100))

    assert result.recommendation == "Immediate reorder required"


def test_zero_reorder_level_is_treated_as_one():
    assert stock_policy.stock_ratio(0, 0) == 0
    assert stock_policy.classify(make_product(quantity_on_hand=0, reorder_level=0)).status == StockStatus.CRITICAL
    assert stock_policy.classify(make_product(quantity_on_hand=2, reorder_level=0)).status == StockStatus.OPTIMAL
    assert stock_policy.classify(make_product(quantity_on_hand=6, reorder_level=0)).status == StockStatus.OVERSTOCK


def test_derived_fields_follow_current_values():
    product = make_product(quantity_on_hand=3, unit_cost=Decimal("19.99"), reorder_level=3)

    assert product.is_low_stock is True
    assert product.total_value == Decimal("59.97")

    product.quantity_on_hand = 4
    assert product.is_low_stock is False
    assert product.total_value == Decimal("79.96")


def test_aggregate_metrics_ignores_inactive_products():
    products = [
        make_product(id=1, category="Tools", quantity_on_hand=5, reorder_level=10, unit_cost=Decimal("1.10")),
        make_product(id=2, category="Paint", quantity_on_hand=40, reorder_level=10, unit_cost=Decimal("0.333")),
        make_product(id=3, category="Tools", quantity_on_hand=10, reorder_level=10, unit_cost=Decimal("2")),
        make_product(id=4, category="Garden", quantity_on_hand=999, is_active=False),
    ]

    metrics = stock_policy.aggregate_metrics(products)

    assert metrics.total_items == 55
    assert metrics.low_stock_items == 2
    # 5.50 + 13.32 + 20.00
    assert metrics.total_value == 38.82
    assert metrics.categories == ["Tools", "Paint"]
    assert metrics.categories_count == 2
    assert metrics.total_products == 3


def test_aggregate_metrics_of_empty_catalog():
    metrics = stock_policy.aggregate_metrics([])

    assert metrics.total_items == 0
    assert metrics.total_value == 0
    assert metrics.categories == []


def test_optimize_groups_by_status():
    products = [
        make_product(id=1, sku="A", quantity_on_hand=1, reorder_level=10),
        make_product(id=2, sku="B", quantity_on_hand=15, reorder_level=10),
        make_product(id=3, sku="C", quantity_on_hand=60, reorder_level=10),
        make_product(id=4, sku="D", quantity_on_hand=0, reorder_level=10, is_active=False),
    ]

    report = stock_policy.optimize(products)

    assert [row.sku for row in report.analysis] == ["A", "B", "C"]
    assert report.summary.total_products == 3
    assert report.summary.critical == 1
    assert report.summary.optimal == 1
    assert report.summary.overstock == 1
    assert report.summary.low == 0
    assert [row.sku for row in report.status_groups["critical"]] == ["A"]
    assert report.classifications[2].status == StockStatus.OPTIMAL
    assert report.analysis[1].stock_ratio == 1.5


def test_optimize_without_active_products():
    with pytest.raises(NoEligibleProductsError):
        stock_policy.optimize([make_product(is_active=False)])
